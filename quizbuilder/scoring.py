import math

from quizbuilder.constants import (
    DEFAULT_PASSING_SCORE, SCORE_BANDS, TIMER_CRITICAL_THRESHOLD, TIMER_WARNING_THRESHOLD,
)


def answers_to_map(answers):
    """Turn a list of ``{questionId, selectedAnswer}`` entries into a mapping.

    Accepts dicts or objects with ``question_id``/``selected_answer``
    attributes. When a question appears more than once the last entry wins.
    """
    answer_map = {}
    for answer in answers:
        if isinstance(answer, dict):
            question_id = answer.get("questionId")
            selected = answer.get("selectedAnswer")
        else:
            question_id = answer.question_id
            selected = answer.selected_answer
        if question_id is None:
            continue
        answer_map[question_id] = selected
    return answer_map


def score_answers(questions, answer_map):
    """Count the questions whose recorded answer equals the correct one.

    Unanswered questions (absent from ``answer_map`` or mapped to ``None``)
    never count as correct.
    """
    score = 0
    for question in questions:
        selected = answer_map.get(question.id)
        if selected is not None and selected == question.correct_answer:
            score += 1
    return score


def percentage(score, total_questions):
    """Whole-number percentage, rounding halves up"""
    if not total_questions:
        return 0
    return int(math.floor(score * 100 / total_questions + 0.5))


def is_passed(score, total_questions, passing_score=None):
    return percentage(score, total_questions) >= (passing_score or DEFAULT_PASSING_SCORE)


def score_band(percent):
    for label, low, high in SCORE_BANDS:
        if low <= percent <= high:
            return label
    return SCORE_BANDS[-1][0] if percent > 100 else SCORE_BANDS[0][0]


def format_clock(seconds):
    """Format seconds as ``MM:SS`` for the countdown display"""
    seconds = max(0, int(seconds))
    minutes, remaining = divmod(seconds, 60)
    return f"{minutes:02d}:{remaining:02d}"


def timer_progress(time_left, time_limit_minutes):
    """Percent of the allotted time still remaining"""
    total = time_limit_minutes * 60
    if total <= 0:
        return 0.0
    return time_left / total * 100


def timer_level(progress):
    if progress <= TIMER_CRITICAL_THRESHOLD:
        return "critical"
    if progress <= TIMER_WARNING_THRESHOLD:
        return "warning"
    return "normal"
