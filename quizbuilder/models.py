from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Boolean, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime

from quizbuilder.constants import DEFAULT_PASSING_SCORE
from quizbuilder.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)  # werkzeug password hash
    is_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationship to authored quizzes
    quizzes = relationship("Quiz", back_populates="creator")


class Participant(Base):
    __tablename__ = "participants"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String, nullable=False)
    roll_number = Column(String, unique=True, index=True, nullable=False)
    class_name = Column("class", String, nullable=False)  # Year of study
    department = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationship to results
    results = relationship("Result", back_populates="participant")


class Quiz(Base):
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    time_limit = Column(Integer, nullable=False)  # in minutes
    passing_score = Column(Integer, default=DEFAULT_PASSING_SCORE, nullable=False)  # percentage
    creator_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)  # soft delete flag
    password = Column(String, nullable=True)  # stored only, never enforced
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    # Relationships
    creator = relationship("User", back_populates="quizzes")
    questions = relationship("Question", back_populates="quiz", order_by="Question.id",
                             cascade="all, delete-orphan")
    results = relationship("Result", back_populates="quiz")


class Question(Base):
    __tablename__ = "questions"

    id = Column(Integer, primary_key=True, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    options = Column(JSON, nullable=False)  # ordered list of option strings
    correct_answer = Column(Integer, nullable=False)  # zero-based index into options
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    quiz = relationship("Quiz", back_populates="questions")


class Result(Base):
    __tablename__ = "results"
    # One row per accepted attempt; a racing duplicate gets the same attempt number and fails
    __table_args__ = (
        UniqueConstraint("participant_id", "quiz_id", "attempt", name="uq_result_attempt"),
    )

    id = Column(Integer, primary_key=True, index=True)
    participant_id = Column(Integer, ForeignKey("participants.id"), nullable=False, index=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id"), nullable=False, index=True)
    attempt = Column(Integer, default=1, nullable=False)
    score = Column(Integer, nullable=False)  # count of correct answers
    total_questions = Column(Integer, nullable=False)
    time_taken = Column(Integer, nullable=False)  # in seconds
    answers = Column(JSON, nullable=False)  # [{"questionId": .., "selectedAnswer": ..}]
    can_retake = Column(Boolean, default=False, nullable=False)
    ip_address = Column(String, nullable=True)
    submitted_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    participant = relationship("Participant", back_populates="results")
    quiz = relationship("Quiz", back_populates="results")
