"""Query helpers over the SQLAlchemy models.

These functions never commit on behalf of the caller unless they create or
change a row as their whole job; they take the request's session as ``db``.
"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, joinedload, selectinload

from quizbuilder.models import User, Participant, Quiz, Question, Result


# User helpers
def get_user_by_username(db: Session, username):
    return db.query(User).filter(User.username == username).first()


def create_user(db: Session, username, password_hash, is_admin=True):
    user = User(username=username, password=password_hash, is_admin=is_admin)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


# Participant helpers
def get_participant(db: Session, participant_id):
    return db.query(Participant).filter(Participant.id == participant_id).first()


def get_participant_by_roll_number(db: Session, roll_number):
    return db.query(Participant).filter(Participant.roll_number == roll_number).first()


def get_or_create_participant(db: Session, data):
    """Return ``(participant, created)`` for the roll number in ``data``"""
    participant = get_participant_by_roll_number(db, data.roll_number)
    if participant:
        return participant, False

    participant = Participant(
        full_name=data.full_name,
        roll_number=data.roll_number,
        class_name=data.class_name,
        department=data.department,
    )
    db.add(participant)
    try:
        db.commit()
    except IntegrityError:
        # Another request registered the same roll number first
        db.rollback()
        existing = db.query(Participant).filter(Participant.roll_number == data.roll_number).one()
        return existing, False
    db.refresh(participant)
    return participant, True


# Quiz helpers
def get_quiz(db: Session, quiz_id, include_inactive=False):
    query = db.query(Quiz).options(selectinload(Quiz.questions)).filter(Quiz.id == quiz_id)
    if not include_inactive:
        query = query.filter(Quiz.is_active.is_(True))
    return query.first()


def get_all_quizzes(db: Session, include_inactive=False):
    query = db.query(Quiz).options(selectinload(Quiz.questions))
    if not include_inactive:
        query = query.filter(Quiz.is_active.is_(True))
    return query.order_by(Quiz.created_at.desc(), Quiz.id.desc()).all()


def create_quiz(db: Session, data, creator_id):
    quiz = Quiz(creator_id=creator_id, **data.model_dump())
    db.add(quiz)
    db.commit()
    db.refresh(quiz)
    return quiz


def update_quiz(db: Session, quiz, data):
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(quiz, field, value)
    db.commit()
    db.refresh(quiz)
    return quiz


def deactivate_quiz(db: Session, quiz_id):
    """Soft delete: the quiz stays for existing results but takes no new submissions"""
    quiz = db.query(Quiz).filter(Quiz.id == quiz_id).first()
    if not quiz:
        return False
    quiz.is_active = False
    db.commit()
    return True


# Question helpers
def get_question(db: Session, question_id):
    return db.query(Question).filter(Question.id == question_id).first()


def get_questions_by_quiz_id(db: Session, quiz_id):
    return db.query(Question).filter(Question.quiz_id == quiz_id).order_by(Question.id).all()


def create_question(db: Session, data):
    question = Question(**data.model_dump())
    db.add(question)
    db.commit()
    db.refresh(question)
    return question


def create_questions_bulk(db: Session, quiz_id, items, commit=True):
    questions = [Question(quiz_id=quiz_id, **item.model_dump()) for item in items]
    db.add_all(questions)
    if commit:
        db.commit()
        for question in questions:
            db.refresh(question)
    return questions


def replace_questions(db: Session, quiz_id, items):
    """Delete every question of the quiz and create ``items`` in one transaction"""
    db.query(Question).filter(Question.quiz_id == quiz_id).delete(synchronize_session=False)
    questions = create_questions_bulk(db, quiz_id, items, commit=False)
    db.commit()
    for question in questions:
        db.refresh(question)
    return questions


def update_question(db: Session, question, data):
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(question, field, value)
    db.commit()
    db.refresh(question)
    return question


def delete_question(db: Session, question_id):
    deleted = db.query(Question).filter(Question.id == question_id).delete(synchronize_session=False)
    db.commit()
    return deleted > 0


# Result helpers
def get_result(db: Session, result_id):
    return db.query(Result).filter(Result.id == result_id).first()


def get_result_with_details(db: Session, result_id):
    return (
        db.query(Result)
        .options(joinedload(Result.participant), joinedload(Result.quiz).selectinload(Quiz.questions))
        .filter(Result.id == result_id)
        .first()
    )


def get_results_by_participant_id(db: Session, participant_id):
    return (
        db.query(Result)
        .filter(Result.participant_id == participant_id)
        .order_by(Result.submitted_at.desc(), Result.id.desc())
        .all()
    )


def get_results_for_pair(db: Session, participant_id, quiz_id):
    return (
        db.query(Result)
        .filter(Result.participant_id == participant_id, Result.quiz_id == quiz_id)
        .order_by(Result.attempt)
        .all()
    )


def get_all_results(db: Session, sort_by="date", quiz_id=None):
    query = db.query(Result).options(joinedload(Result.participant), joinedload(Result.quiz))
    if quiz_id is not None:
        query = query.filter(Result.quiz_id == quiz_id)
    if sort_by == "score":
        query = query.order_by(Result.score.desc(), Result.submitted_at.desc())
    else:
        query = query.order_by(Result.submitted_at.desc(), Result.id.desc())
    return query.all()
