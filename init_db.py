#!/usr/bin/env python
"""
Database Initialization Script
Run this script to create all database tables, optionally with sample data.

Usage:
    python init_db.py [--seed]
"""
import argparse
import os

from quizbuilder import create_app
from quizbuilder.database import SessionLocal
from quizbuilder.models import User, Quiz, Question
from quizbuilder.utils import hash_password

SAMPLE_QUIZ = {
    "title": "Introduction to Python",
    "time_limit": 30,
    "passing_score": 70,
    "questions": [
        ("Which keyword defines a function in Python?", ["func", "def", "lambda", "function"], 1),
        ("What does len([1, 2, 3]) return?", ["2", "3", "4", "An error"], 1),
        ("Which of these is an immutable type?", ["list", "dict", "tuple", "set"], 2),
        ("What is the output of print(2 ** 3)?", ["6", "8", "9", "5"], 1),
        ("How do you start a comment in Python?", ["//", "#", "/*", "--"], 1),
    ],
}


def seed(db):
    """Create the default admin and a sample quiz if they don't exist"""
    admin = db.query(User).filter(User.username == "admin").first()
    if not admin:
        password = os.getenv("SEED_ADMIN_PASSWORD", "admin123")
        admin = User(username="admin", password=hash_password(password), is_admin=True)
        db.add(admin)
        db.commit()
        db.refresh(admin)
        print(f"Admin user created: {admin.username}")
    else:
        print("Admin user already exists, skipping creation")

    if db.query(Quiz).first():
        print("Quizzes already exist, skipping sample quiz")
        return

    quiz = Quiz(
        title=SAMPLE_QUIZ["title"],
        time_limit=SAMPLE_QUIZ["time_limit"],
        passing_score=SAMPLE_QUIZ["passing_score"],
        creator_id=admin.id,
    )
    quiz.questions = [
        Question(text=text, options=options, correct_answer=correct)
        for text, options, correct in SAMPLE_QUIZ["questions"]
    ]
    db.add(quiz)
    db.commit()
    print(f"Created quiz: {quiz.title} ({len(quiz.questions)} questions)")


def init_database(with_seed=False):
    """Initialize the database by creating all tables"""
    print("Initializing database...")

    # create_app creates every table
    app = create_app(os.getenv("FLASK_CONFIG", "default"))

    print("✅ Database tables created successfully!")
    print("\nCreated tables:")
    print("  - users")
    print("  - participants")
    print("  - quizzes")
    print("  - questions")
    print("  - results")
    print(f"\nDatabase: {app.config['SQLALCHEMY_DATABASE_URI']}")

    if with_seed:
        db = SessionLocal()
        try:
            seed(db)
        finally:
            db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the quiz builder database")
    parser.add_argument("--seed", action="store_true", help="add a default admin and a sample quiz")
    args = parser.parse_args()
    init_database(with_seed=args.seed)
