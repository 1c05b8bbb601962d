import logging

from flask import Blueprint, jsonify, request

from quizbuilder import storage
from quizbuilder.errors import NotFound, ValidationError
from quizbuilder.schemas import (
    QuestionBody, QuestionCreate, QuestionOut, QuestionUpdate, QuizCreate, QuizOut, QuizUpdate, dump, parse,
    parse_list,
)
from quizbuilder.submissions import redact_questions
from quizbuilder.utils import Role, admin_required, current_role, query_flag, with_db

logger = logging.getLogger(__name__)

quizzes = Blueprint('quizzes', __name__, url_prefix='/api')


def quiz_payload(quiz, role):
    """Serialize a quiz; participants never see the answer key or the password"""
    out = QuizOut.model_validate(quiz)
    if role is not Role.ADMIN:
        out = out.model_copy(update={"questions": redact_questions(out.questions), "password": None})
    return dump(out)


def questions_payload(questions, role):
    out = [QuestionOut.model_validate(question) for question in questions]
    if role is not Role.ADMIN:
        out = redact_questions(out)
    return [dump(question) for question in out]


@quizzes.route("/quizzes")
@with_db
def list_quizzes(db):
    """Active quizzes, newest first; admins may ask for inactive ones too"""
    role = current_role(db)
    include_inactive = query_flag("includeInactive") and role is Role.ADMIN
    return jsonify([quiz_payload(quiz, role) for quiz in storage.get_all_quizzes(db, include_inactive)])


@quizzes.route("/quizzes/<int:quiz_id>")
@with_db
def get_quiz(db, quiz_id):
    role = current_role(db)
    include_inactive = query_flag("includeInactive") and role is Role.ADMIN
    quiz = storage.get_quiz(db, quiz_id, include_inactive)
    if not quiz:
        raise NotFound("Quiz not found")
    return jsonify(quiz_payload(quiz, role))


@quizzes.route("/quizzes", methods=["POST"])
@with_db
@admin_required
def create_quiz(db, admin):
    data = parse(QuizCreate, request.get_json(silent=True))
    quiz = storage.create_quiz(db, data, creator_id=admin.id)
    logger.info("Admin %s created quiz %s", admin.id, quiz.id)
    return jsonify(quiz_payload(quiz, Role.ADMIN)), 201


@quizzes.route("/quizzes/<int:quiz_id>", methods=["PUT"])
@with_db
@admin_required
def update_quiz(db, admin, quiz_id):
    quiz = storage.get_quiz(db, quiz_id, include_inactive=True)
    if not quiz:
        raise NotFound("Quiz not found")
    data = parse(QuizUpdate, request.get_json(silent=True))
    quiz = storage.update_quiz(db, quiz, data)
    return jsonify(quiz_payload(quiz, Role.ADMIN))


@quizzes.route("/quizzes/<int:quiz_id>", methods=["DELETE"])
@with_db
@admin_required
def delete_quiz(db, admin, quiz_id):
    """Soft delete a quiz"""
    if not storage.deactivate_quiz(db, quiz_id):
        raise NotFound("Quiz not found")
    logger.info("Admin %s deactivated quiz %s", admin.id, quiz_id)
    return "", 204


# Question routes
@quizzes.route("/quizzes/<int:quiz_id>/questions")
@with_db
def list_questions(db, quiz_id):
    return jsonify(questions_payload(storage.get_questions_by_quiz_id(db, quiz_id), current_role(db)))


@quizzes.route("/questions", methods=["POST"])
@with_db
@admin_required
def create_question(db, admin):
    data = parse(QuestionCreate, request.get_json(silent=True))
    if not storage.get_quiz(db, data.quiz_id, include_inactive=True):
        raise NotFound("Quiz not found")
    question = storage.create_question(db, data)
    return jsonify(dump(QuestionOut.model_validate(question))), 201


@quizzes.route("/questions/<int:question_id>", methods=["PUT"])
@with_db
@admin_required
def update_question(db, admin, question_id):
    data = parse(QuestionUpdate, request.get_json(silent=True))
    question = storage.get_question(db, question_id)
    if not question:
        raise NotFound("Question not found")

    options = data.options if data.options is not None else question.options
    correct_answer = data.correct_answer if data.correct_answer is not None else question.correct_answer
    if correct_answer >= len(options):
        raise ValidationError("Correct answer must point at one of the options")

    question = storage.update_question(db, question, data)
    return jsonify(dump(QuestionOut.model_validate(question)))


@quizzes.route("/questions/<int:question_id>", methods=["DELETE"])
@with_db
@admin_required
def delete_question(db, admin, question_id):
    if not storage.delete_question(db, question_id):
        raise NotFound("Question not found")
    return "", 204


@quizzes.route("/quizzes/<int:quiz_id>/questions/bulk", methods=["POST"])
@with_db
@admin_required
def create_questions_bulk(db, admin, quiz_id):
    if not storage.get_quiz(db, quiz_id, include_inactive=True):
        raise NotFound("Quiz not found")
    items = parse_list(QuestionBody, request.get_json(silent=True))
    questions = storage.create_questions_bulk(db, quiz_id, items)
    return jsonify(questions_payload(questions, Role.ADMIN)), 201


@quizzes.route("/quizzes/<int:quiz_id>/questions", methods=["PUT"])
@with_db
@admin_required
def replace_questions(db, admin, quiz_id):
    """Replace every question of a quiz with the submitted list"""
    if not storage.get_quiz(db, quiz_id, include_inactive=True):
        raise NotFound("Quiz not found")
    items = parse_list(QuestionBody, request.get_json(silent=True))
    questions = storage.replace_questions(db, quiz_id, items)
    logger.info("Admin %s replaced questions of quiz %s (%d questions)", admin.id, quiz_id, len(questions))
    return jsonify(questions_payload(questions, Role.ADMIN))
