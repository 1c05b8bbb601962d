import pytest

from quizbuilder import create_app
from quizbuilder.database import SessionLocal
from quizbuilder.models import Participant, Question, Quiz, User
from quizbuilder.session_engine import SessionListener
from quizbuilder.utils import hash_password

ADMIN_SECRET = "testing-admin-secret"


class ManualHandle:
    def __init__(self, when, callback):
        self.when = when
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Deterministic stand-in for ThreadingScheduler: time only moves on advance()"""

    def __init__(self):
        self.now = 0.0
        self.pending = []

    def call_later(self, delay, callback):
        handle = ManualHandle(self.now + delay, callback)
        self.pending.append(handle)
        return handle

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [h for h in self.pending if not h.cancelled and h.when <= target]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self.pending.remove(handle)
            self.now = handle.when
            handle.callback()
        self.now = target

    @property
    def active(self):
        return [h for h in self.pending if not h.cancelled]


class RecordingListener(SessionListener):

    def __init__(self, fullscreen=True):
        self.fullscreen = fullscreen
        self.events = []

    def request_fullscreen(self):
        self.events.append(("request_fullscreen",))
        return self.fullscreen

    def on_phase_change(self, old, new):
        self.events.append(("phase", old, new))

    def on_low_time(self, time_left):
        self.events.append(("low_time", time_left))

    def on_time_up(self):
        self.events.append(("time_up",))

    def on_submit_confirm(self, summary):
        self.events.append(("confirm", summary))

    def on_fullscreen_exit(self, exit_count):
        self.events.append(("fullscreen_exit", exit_count))

    def on_submitted(self, result_id):
        self.events.append(("submitted", result_id))

    def on_submit_failed(self, error, retryable):
        self.events.append(("failed", type(error).__name__, retryable))

    def named(self, name):
        return [event for event in self.events if event[0] == name]


@pytest.fixture
def app():
    app = create_app("testing")
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def admin_client(app):
    client = app.test_client()
    response = client.post("/api/register", json={
        "username": "instructor",
        "password": "s3cret-pass",
        "adminSecret": ADMIN_SECRET,
    })
    assert response.status_code == 201
    return client


@pytest.fixture
def db(app):
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def admin_user(db):
    user = User(username="owner", password=hash_password("owner-password"), is_admin=True)
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def make_participant(db):
    def _make(roll_number="R-001", full_name="Asha Verma"):
        participant = Participant(full_name=full_name, roll_number=roll_number,
                                  class_name="2nd-year", department="CSE")
        db.add(participant)
        db.commit()
        return participant
    return _make


@pytest.fixture
def make_quiz(db, admin_user):
    """Quiz whose questions have the given correct answers, three options each"""
    def _make(correct_answers=(0, 1), time_limit=1, is_active=True, passing_score=60):
        quiz = Quiz(title="Sample quiz", time_limit=time_limit, passing_score=passing_score,
                    creator_id=admin_user.id, is_active=is_active)
        quiz.questions = [
            Question(text=f"Question {number}", options=["a", "b", "c"], correct_answer=correct)
            for number, correct in enumerate(correct_answers, start=1)
        ]
        db.add(quiz)
        db.commit()
        return quiz
    return _make


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def listener():
    return RecordingListener()


@pytest.fixture
def windowed_listener():
    """Listener whose host refuses full-window mode"""
    return RecordingListener(fullscreen=False)
