"""Submission authorization and scoring.

This module is the only authority on whether an attempt is accepted and
the only source of the persisted score. The client may send a score of its
own; it is never read.

A participant gets one attempt per quiz. An admin can grant a retake on an
existing result; the grant is consumed by the next accepted attempt, so
every grant buys exactly one more submission. The check-then-write
sequence is backed by storage: the grant is consumed with a conditional
UPDATE and results carry a unique (participant, quiz, attempt) key, so two
racing submissions cannot both be accepted.
"""
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from quizbuilder import storage
from quizbuilder.constants import REDACTED_ANSWER, SCORE_BANDS, UNKNOWN_IP
from quizbuilder.errors import Conflict, Forbidden, NotFound
from quizbuilder.models import Result
from quizbuilder.schemas import EligibilityOut, QuestionOut, ResultWithDetailsOut
from quizbuilder.scoring import answers_to_map, is_passed, percentage, score_answers, score_band

logger = logging.getLogger(__name__)


def submit_result(db: Session, submission, ip_address=UNKNOWN_IP):
    """Validate, score and persist one attempt; return the new Result."""
    participant = storage.get_participant(db, submission.participant_id)
    if not participant:
        raise NotFound("Participant not found")

    # Inactive quizzes take no new submissions
    quiz = storage.get_quiz(db, submission.quiz_id)
    if not quiz:
        raise NotFound("Quiz not found")

    previous = storage.get_results_for_pair(db, participant.id, quiz.id)
    if previous:
        grant = next((result for result in previous if result.can_retake), None)
        if grant is None:
            logger.info("Rejected repeat submission: participant=%s quiz=%s", participant.id, quiz.id)
            raise Conflict()
        _consume_retake_grant(db, grant.id)

    answer_map = answers_to_map(submission.answers)
    score = score_answers(quiz.questions, answer_map)

    max_time = quiz.time_limit * 60
    time_taken = min(max(submission.time_taken, 0), max_time)

    result = Result(
        participant_id=participant.id,
        quiz_id=quiz.id,
        attempt=max((r.attempt for r in previous), default=0) + 1,
        score=score,
        total_questions=len(quiz.questions),
        time_taken=time_taken,
        answers=[
            {"questionId": answer.question_id, "selectedAnswer": answer.selected_answer}
            for answer in submission.answers
        ],
        can_retake=False,
        ip_address=ip_address or UNKNOWN_IP,
    )
    db.add(result)
    try:
        db.commit()
    except IntegrityError as e:
        # A concurrent submission for the same pair won the race
        db.rollback()
        logger.warning("Concurrent submission rejected: participant=%s quiz=%s", participant.id, quiz.id)
        raise Conflict() from e

    db.refresh(result)
    logger.info("Accepted attempt %s: participant=%s quiz=%s score=%s/%s",
                result.attempt, participant.id, quiz.id, result.score, result.total_questions)
    return result


def _consume_retake_grant(db: Session, result_id):
    consumed = (
        db.query(Result)
        .filter(Result.id == result_id, Result.can_retake.is_(True))
        .update({Result.can_retake: False}, synchronize_session=False)
    )
    if consumed != 1:
        db.rollback()
        raise Conflict()


def redact_questions(questions):
    return [question.model_copy(update={"correct_answer": REDACTED_ANSWER}) for question in questions]


def get_result_for_viewer(db: Session, result_id, viewer):
    """Load a result with its participant, quiz and questions for ``viewer``.

    Admins see everything. Anyone else must name the owning participant and
    gets every correct answer replaced by the redaction sentinel.
    """
    result = storage.get_result_with_details(db, result_id)
    if not result:
        raise NotFound("Result not found")

    if not viewer.is_admin and viewer.participant_id != result.participant_id:
        logger.warning("Participant %s tried to view result %s", viewer.participant_id, result_id)
        raise Forbidden("You can only view your own results")

    questions = [QuestionOut.model_validate(question) for question in result.quiz.questions]
    if not viewer.is_admin:
        questions = redact_questions(questions)

    details = ResultWithDetailsOut.model_validate(result)
    quiz = details.quiz if viewer.is_admin else details.quiz.model_copy(update={"password": None})
    return details.model_copy(update={"questions": questions, "quiz": quiz})


def set_retake_eligibility(db: Session, result_id, can_retake):
    result = storage.get_result(db, result_id)
    if not result:
        raise NotFound("Result not found")
    result.can_retake = can_retake
    db.commit()
    db.refresh(result)
    logger.info("Retake %s for result %s", "granted" if can_retake else "revoked", result_id)
    return result


def check_eligibility(db: Session, participant_id, quiz_id):
    results = storage.get_results_for_pair(db, participant_id, quiz_id)
    if not results:
        return EligibilityOut(has_taken_quiz=False, can_retake=True)
    return EligibilityOut(has_taken_quiz=True, can_retake=any(r.can_retake for r in results))


def list_results(db: Session, sort_by="date", quiz_id=None):
    return storage.get_all_results(db, sort_by=sort_by, quiz_id=quiz_id)


def summarize_results(results):
    """Aggregate statistics over results loaded with their quizzes"""
    total = len(results)
    bands = {label: 0 for label, _, _ in SCORE_BANDS}
    if not total:
        return {"totalResults": 0, "averagePercentage": 0, "passCount": 0, "passRate": 0, "scoreBands": bands}

    percentages = [percentage(r.score, r.total_questions) for r in results]
    for value in percentages:
        bands[score_band(value)] += 1
    pass_count = sum(
        1 for r in results if is_passed(r.score, r.total_questions, r.quiz.passing_score if r.quiz else None)
    )
    return {
        "totalResults": total,
        "averagePercentage": percentage(sum(percentages), total * 100),
        "passCount": pass_count,
        "passRate": percentage(pass_count, total),
        "scoreBands": bands,
    }
