ADMIN_SECRET = "testing-admin-secret"


def register(client, username="instructor", password="s3cret-pass", secret=ADMIN_SECRET):
    return client.post("/api/register", json={"username": username, "password": password, "adminSecret": secret})


def test_register_logs_the_admin_in(client):
    response = register(client)
    assert response.status_code == 201
    body = response.get_json()
    assert body["username"] == "instructor"
    assert body["isAdmin"] is True
    assert "password" not in body

    assert client.get("/api/user").get_json()["username"] == "instructor"


def test_register_with_wrong_secret(client):
    assert register(client, secret="guess").status_code == 403
    assert register(client, secret=None).status_code == 403


def test_register_duplicate_username(client, app):
    register(client)
    other = app.test_client()
    response = register(other)
    assert response.status_code == 400
    assert "already exists" in response.get_json()["message"]


def test_register_validates_lengths(client):
    assert register(client, username="ab").status_code == 400
    assert register(client, password="short").status_code == 400


def test_login_and_logout(client, app):
    register(client)
    other = app.test_client()

    assert other.post("/api/login", json={"username": "instructor", "password": "wrong-pass"}).status_code == 401
    assert other.post("/api/login", json={"username": "nobody", "password": "s3cret-pass"}).status_code == 401

    response = other.post("/api/login", json={"username": "instructor", "password": "s3cret-pass"})
    assert response.status_code == 200
    assert other.get("/api/user").status_code == 200

    assert other.post("/api/logout").status_code == 200
    assert other.get("/api/user").status_code == 401


def test_anonymous_user_endpoint(client):
    response = client.get("/api/user")
    assert response.status_code == 401
    assert response.get_json()["message"] == "Not logged in"


def test_password_is_stored_hashed(client, db):
    from quizbuilder.models import User

    register(client)
    user = db.query(User).filter(User.username == "instructor").one()
    assert user.password != "s3cret-pass"
