from flask import Blueprint, jsonify, request

from quizbuilder import storage
from quizbuilder.errors import NotFound
from quizbuilder.schemas import ParticipantCreate, ParticipantOut, ResultOut, dump, parse
from quizbuilder.utils import with_db

participants = Blueprint('participants', __name__, url_prefix='/api/participants')


@participants.route("", methods=["POST"])
@with_db
def register_participant(db):
    """Register a participant, or return the existing one for this roll number"""
    data = parse(ParticipantCreate, request.get_json(silent=True))
    participant, created = storage.get_or_create_participant(db, data)
    return jsonify(dump(ParticipantOut.model_validate(participant))), 201 if created else 200


# Must be registered before the numeric id route
@participants.route("/roll/<path:roll_number>")
@with_db
def get_participant_by_roll(db, roll_number):
    participant = storage.get_participant_by_roll_number(db, roll_number)
    if not participant:
        raise NotFound("Participant not found")
    return jsonify(dump(ParticipantOut.model_validate(participant)))


@participants.route("/<int:participant_id>")
@with_db
def get_participant(db, participant_id):
    participant = storage.get_participant(db, participant_id)
    if not participant:
        raise NotFound("Participant not found")
    return jsonify(dump(ParticipantOut.model_validate(participant)))


@participants.route("/<int:participant_id>/results")
@with_db
def participant_results(db, participant_id):
    """A participant's own attempt history, newest first"""
    results = storage.get_results_by_participant_id(db, participant_id)
    return jsonify([dump(ResultOut.model_validate(result)) for result in results])
