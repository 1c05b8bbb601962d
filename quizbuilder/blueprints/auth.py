import logging

from flask import Blueprint, current_app, jsonify, request, session

from quizbuilder import storage
from quizbuilder.errors import Forbidden, Unauthorized, ValidationError
from quizbuilder.schemas import LoginRequest, RegisterRequest, UserOut, dump, parse
from quizbuilder.utils import get_current_user, hash_password, login_user, verify_password, with_db

logger = logging.getLogger(__name__)

auth = Blueprint('auth', __name__, url_prefix='/api')


@auth.route("/register", methods=["POST"])
@with_db
def register(db):
    """Create an admin account; requires the registration secret"""
    data = parse(RegisterRequest, request.get_json(silent=True))

    if storage.get_user_by_username(db, data.username):
        raise ValidationError("Username already exists. Please choose another username.")

    if not data.admin_secret or data.admin_secret != current_app.config["ADMIN_SECRET"]:
        logger.warning("Admin registration with invalid secret for %r", data.username)
        raise Forbidden("Invalid admin secret. Please contact an administrator to get the registration code.")

    user = storage.create_user(db, data.username, hash_password(data.password), is_admin=True)
    login_user(user)
    logger.info("Registered admin %r", user.username)
    return jsonify(dump(UserOut.model_validate(user))), 201


@auth.route("/login", methods=["POST"])
@with_db
def login(db):
    """Admin login"""
    data = parse(LoginRequest, request.get_json(silent=True))

    user = storage.get_user_by_username(db, data.username)
    if not user or not verify_password(data.password, user.password):
        logger.info("Failed login for %r", data.username)
        raise Unauthorized()

    login_user(user)
    return jsonify(dump(UserOut.model_validate(user)))


@auth.route("/logout", methods=["POST"])
def logout():
    """Logout user"""
    session.clear()
    return "", 200


@auth.route("/user")
@with_db
def current_user(db):
    user = get_current_user(db)
    if not user:
        raise Unauthorized("Not logged in")
    return jsonify(dump(UserOut.model_validate(user)))
