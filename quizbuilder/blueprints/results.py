from flask import Blueprint, jsonify, request

from quizbuilder import submissions
from quizbuilder.errors import ValidationError
from quizbuilder.schemas import ResultOut, ResultSubmission, ResultWithDetailsOut, RetakeUpdate, dump, parse
from quizbuilder.utils import Viewer, admin_required, client_ip, current_role, with_db

results = Blueprint('results', __name__, url_prefix='/api/results')


def _int_arg(name, required=False):
    value = request.args.get(name)
    if value is None or value == "":
        if required:
            raise ValidationError(f"{name} is required")
        return None
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"Invalid {name}") from None


@results.route("", methods=["POST"])
@with_db
def submit_result(db):
    """Submit a completed attempt"""
    submission = parse(ResultSubmission, request.get_json(silent=True))
    result = submissions.submit_result(db, submission, ip_address=client_ip())
    return jsonify(dump(ResultOut.model_validate(result))), 201


@results.route("")
@with_db
@admin_required
def list_results(db, admin):
    """All results with participant and quiz, sorted by date or score"""
    sort_by = request.args.get("sortBy", "date")
    quiz_id = _int_arg("quizId")
    rows = submissions.list_results(db, sort_by=sort_by, quiz_id=quiz_id)
    return jsonify([dump(ResultWithDetailsOut.model_validate(row)) for row in rows])


@results.route("/summary")
@with_db
@admin_required
def results_summary(db, admin):
    rows = submissions.list_results(db, quiz_id=_int_arg("quizId"))
    return jsonify(submissions.summarize_results(rows))


@results.route("/check")
@with_db
def check_attempt(db):
    """Has this participant taken the quiz, and may they take it (again)?"""
    participant_id = _int_arg("participantId", required=True)
    quiz_id = _int_arg("quizId", required=True)
    return jsonify(dump(submissions.check_eligibility(db, participant_id, quiz_id)))


@results.route("/<int:result_id>")
@with_db
def get_result(db, result_id):
    viewer = Viewer(role=current_role(db), participant_id=_int_arg("participantId"))
    details = submissions.get_result_for_viewer(db, result_id, viewer)
    return jsonify(dump(details))


@results.route("/<int:result_id>/retake", methods=["PUT"])
@with_db
@admin_required
def set_retake(db, admin, result_id):
    data = parse(RetakeUpdate, request.get_json(silent=True))
    result = submissions.set_retake_eligibility(db, result_id, data.can_retake)
    return jsonify(dump(ResultOut.model_validate(result)))
