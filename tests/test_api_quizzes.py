import pytest

QUESTIONS = [
    {"text": "What is 2 + 2?", "options": ["3", "4", "5"], "correctAnswer": 1},
    {"text": "Capital of France?", "options": ["Paris", "Rome"], "correctAnswer": 0},
]


@pytest.fixture
def quiz(admin_client):
    response = admin_client.post("/api/quizzes", json={
        "title": "General knowledge",
        "description": "Warm-up round",
        "timeLimit": 10,
        "password": "letmein",
    })
    assert response.status_code == 201
    quiz = response.get_json()
    response = admin_client.post(f"/api/quizzes/{quiz['id']}/questions/bulk", json=QUESTIONS)
    assert response.status_code == 201
    quiz["questions"] = response.get_json()
    return quiz


def test_create_quiz_defaults(admin_client):
    response = admin_client.post("/api/quizzes", json={"title": "Algebra", "timeLimit": 15})
    assert response.status_code == 201
    body = response.get_json()
    assert body["passingScore"] == 60
    assert body["isActive"] is True
    assert body["questions"] == []
    assert body["creatorId"] is not None


def test_create_quiz_requires_admin(client):
    response = client.post("/api/quizzes", json={"title": "Algebra", "timeLimit": 15})
    assert response.status_code == 403


@pytest.mark.parametrize("body", [
    {"title": "Al", "timeLimit": 15},
    {"title": "Algebra", "timeLimit": 0},
    {"title": "Algebra", "timeLimit": 15, "passingScore": 101},
    {"title": "Algebra"},
])
def test_create_quiz_validation(admin_client, body):
    assert admin_client.post("/api/quizzes", json=body).status_code == 400


def test_anonymous_read_is_redacted(client, quiz):
    body = client.get(f"/api/quizzes/{quiz['id']}").get_json()
    assert [q["correctAnswer"] for q in body["questions"]] == [-1, -1]
    assert [q["options"] for q in body["questions"]] == [q["options"] for q in QUESTIONS]
    assert body["password"] is None

    listed = client.get("/api/quizzes").get_json()
    assert [q["correctAnswer"] for q in listed[0]["questions"]] == [-1, -1]

    questions = client.get(f"/api/quizzes/{quiz['id']}/questions").get_json()
    assert {q["correctAnswer"] for q in questions} == {-1}


def test_admin_read_has_answer_key(admin_client, quiz):
    body = admin_client.get(f"/api/quizzes/{quiz['id']}").get_json()
    assert [q["correctAnswer"] for q in body["questions"]] == [1, 0]
    assert body["password"] == "letmein"


def test_missing_quiz(client):
    assert client.get("/api/quizzes/999").status_code == 404


def test_soft_delete_hides_quiz(client, admin_client, quiz):
    assert admin_client.delete(f"/api/quizzes/{quiz['id']}").status_code == 204

    assert client.get(f"/api/quizzes/{quiz['id']}").status_code == 404
    assert client.get("/api/quizzes").get_json() == []
    # Only admins can opt in to inactive quizzes
    assert client.get(f"/api/quizzes/{quiz['id']}?includeInactive=true").status_code == 404

    body = admin_client.get(f"/api/quizzes/{quiz['id']}?includeInactive=true").get_json()
    assert body["isActive"] is False
    assert len(admin_client.get("/api/quizzes?includeInactive=true").get_json()) == 1


def test_delete_missing_quiz(admin_client):
    assert admin_client.delete("/api/quizzes/999").status_code == 404


def test_update_quiz_partial(admin_client, quiz):
    response = admin_client.put(f"/api/quizzes/{quiz['id']}", json={"timeLimit": 20})
    assert response.status_code == 200
    body = response.get_json()
    assert body["timeLimit"] == 20
    assert body["title"] == "General knowledge"


def test_bulk_questions_report_every_bad_item(admin_client, quiz):
    response = admin_client.post(f"/api/quizzes/{quiz['id']}/questions/bulk", json=[
        {"text": "Fine question", "options": ["a", "b"], "correctAnswer": 0},
        {"text": "Too few", "options": ["a"], "correctAnswer": 0},
        {"text": "Out of range", "options": ["a", "b"], "correctAnswer": 2},
    ])
    assert response.status_code == 400
    paths = [error["path"] for error in response.get_json()["errors"]]
    assert any(path.startswith("1.") for path in paths)
    assert any(path.startswith("2") for path in paths)
    assert not any(path.startswith("0") for path in paths)

    assert len(admin_client.get(f"/api/quizzes/{quiz['id']}/questions").get_json()) == 2


def test_replace_questions(admin_client, quiz):
    replacement = [{"text": "Only question", "options": ["x", "y", "z"], "correctAnswer": 2}]
    response = admin_client.put(f"/api/quizzes/{quiz['id']}/questions", json=replacement)
    assert response.status_code == 200

    questions = admin_client.get(f"/api/quizzes/{quiz['id']}/questions").get_json()
    assert [q["text"] for q in questions] == ["Only question"]
    assert questions[0]["correctAnswer"] == 2


def test_create_single_question(admin_client, quiz):
    response = admin_client.post("/api/questions", json={
        "quizId": quiz["id"], "text": "Largest planet?", "options": ["Mars", "Jupiter"], "correctAnswer": 1,
    })
    assert response.status_code == 201
    assert response.get_json()["quizId"] == quiz["id"]


def test_create_question_for_missing_quiz(admin_client):
    response = admin_client.post("/api/questions", json={
        "quizId": 999, "text": "Largest planet?", "options": ["Mars", "Jupiter"], "correctAnswer": 1,
    })
    assert response.status_code == 404


def test_update_question_checks_answer_against_stored_options(admin_client, quiz):
    question = quiz["questions"][1]  # two options

    response = admin_client.put(f"/api/questions/{question['id']}", json={"correctAnswer": 2})
    assert response.status_code == 400

    response = admin_client.put(f"/api/questions/{question['id']}", json={
        "options": ["Paris", "Rome", "Madrid"], "correctAnswer": 2,
    })
    assert response.status_code == 200
    assert response.get_json()["correctAnswer"] == 2


def test_update_question_rejects_empty_option(admin_client, quiz):
    question = quiz["questions"][0]
    response = admin_client.put(f"/api/questions/{question['id']}", json={"options": ["a", ""]})
    assert response.status_code == 400


def test_delete_question(admin_client, quiz):
    question = quiz["questions"][0]
    assert admin_client.delete(f"/api/questions/{question['id']}").status_code == 204
    assert admin_client.delete(f"/api/questions/{question['id']}").status_code == 404


def test_question_routes_require_admin(client, quiz):
    question = quiz["questions"][0]
    assert client.put(f"/api/questions/{question['id']}", json={"correctAnswer": 0}).status_code == 403
    assert client.delete(f"/api/questions/{question['id']}").status_code == 403
    assert client.put(f"/api/quizzes/{quiz['id']}/questions", json=[]).status_code == 403


def test_unknown_route_returns_json(client):
    response = client.get("/api/nowhere")
    assert response.status_code == 404
    assert "message" in response.get_json()
