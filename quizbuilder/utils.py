import enum
from dataclasses import dataclass
from functools import wraps
from typing import Optional

from flask import request, session
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from quizbuilder.constants import UNKNOWN_IP
from quizbuilder.database import SessionLocal
from quizbuilder.errors import Forbidden
from quizbuilder.models import User


class Role(enum.Enum):
    """Every authenticated account is an admin; everyone else is anonymous"""
    ANONYMOUS = "anonymous"
    ADMIN = "admin"


@dataclass(frozen=True)
class Viewer:
    role: Role = Role.ANONYMOUS
    participant_id: Optional[int] = None

    @property
    def is_admin(self):
        return self.role is Role.ADMIN


# Database session decorator
def with_db(f):
    """Decorator to provide database session to route handlers"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        db = SessionLocal()
        try:
            return f(db, *args, **kwargs)
        finally:
            db.close()
    return decorated_function


# User helpers
def get_current_user(db: Session):
    """Get current user from session"""
    user_id = session.get("user_id")
    if user_id:
        return db.query(User).filter(User.id == user_id).first()
    return None


def current_role(db: Session):
    user = get_current_user(db)
    if user and user.is_admin:
        return Role.ADMIN
    return Role.ANONYMOUS


def admin_required(f):
    """Reject the request unless an admin is logged in; passes the admin after ``db``"""
    @wraps(f)
    def decorated_function(db, *args, **kwargs):
        user = get_current_user(db)
        if not user or not user.is_admin:
            raise Forbidden()
        return f(db, user, *args, **kwargs)
    return decorated_function


def login_user(user):
    session.clear()
    session.permanent = True
    session["user_id"] = user.id


# Password helpers
def hash_password(password):
    return generate_password_hash(password)


def verify_password(password, password_hash):
    return check_password_hash(password_hash, password)


# Request helpers
def client_ip():
    """Best-effort address of the submitting client; advisory only"""
    forwarded = request.headers.get("X-Forwarded-For", "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    return request.remote_addr or UNKNOWN_IP


def query_flag(name):
    return request.args.get(name, "").lower() == "true"
