"""State machine for one participant's attempt at a quiz.

The engine owns the countdown, the recorded answers and the submission
flow. It renders nothing itself: a host (browser bridge, terminal UI,
test) feeds it events and is told what happened through a
``SessionListener``. Selection state lives only in ``answers``; hosts derive
what is checked from ``selected_option()``.

Phases::

    ACTIVE ──request_submit──> SUBMIT_CONFIRM_PENDING ──confirm_submit──┐
      │  ^                         │ cancel_submit                       │
      │  └─────────────────────────┘                                     v
      └──time runs out──> TIME_EXPIRED ──grace delay──────────────> SUBMITTING
                                                                   │      │
                                                          SUBMITTED <┘      └> ERROR ──retry_submit──> SUBMITTING

Every transition happens under one re-entrant lock, so the timer thread
and the host thread cannot both move the session into SUBMITTING.
"""
import enum
import logging
import threading

from quizbuilder.constants import AUTO_SUBMIT_DELAY_SECONDS, LOW_TIME_WARNING_SECONDS, TICK_INTERVAL_SECONDS
from quizbuilder.errors import InvalidTransition, QuizBuilderError, TransientFailure, ValidationError
from quizbuilder.schemas import QuizOut
from quizbuilder.scoring import format_clock, score_answers, timer_level, timer_progress

logger = logging.getLogger(__name__)


class Phase(enum.Enum):
    ACTIVE = "active"
    SUBMIT_CONFIRM_PENDING = "submit_confirm_pending"
    TIME_EXPIRED = "time_expired"
    SUBMITTING = "submitting"
    SUBMITTED = "submitted"
    ERROR = "error"
    NO_QUESTIONS = "no_questions"


# The clock keeps running while the confirmation dialog is open
TICKING_PHASES = (Phase.ACTIVE, Phase.SUBMIT_CONFIRM_PENDING)
FULLSCREEN_GUARDED_PHASES = (Phase.ACTIVE, Phase.SUBMIT_CONFIRM_PENDING)
LEAVE_GUARDED_PHASES = (Phase.ACTIVE, Phase.SUBMIT_CONFIRM_PENDING, Phase.TIME_EXPIRED, Phase.ERROR)


class SessionListener:
    """Host hooks. Every method is optional; the defaults do nothing."""

    def request_fullscreen(self):
        """Try to enter full-window mode; return True when it was granted."""
        return False

    def on_phase_change(self, old, new):
        pass

    def on_tick(self, time_left):
        pass

    def on_low_time(self, time_left):
        pass

    def on_time_up(self):
        pass

    def on_submit_confirm(self, summary):
        pass

    def on_fullscreen_exit(self, exit_count):
        pass

    def on_submitted(self, result_id):
        pass

    def on_submit_failed(self, error, retryable):
        pass


class ThreadingScheduler:
    """Runs callbacks on ``threading.Timer`` threads"""

    def call_later(self, delay, callback):
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


class QuizSession:
    """One attempt at ``quiz`` by ``participant_id``.

    ``submitter`` is called with the submission payload and must return the
    stored result (a mapping with an ``id``) or raise a ``QuizBuilderError``;
    ``TransientFailure`` marks the failure as retryable.
    """

    def __init__(self, quiz, participant_id, submitter, listener=None, scheduler=None,
                 max_fullscreen_exits=None):
        self.quiz = quiz if isinstance(quiz, QuizOut) else QuizOut.model_validate(quiz)
        self.participant_id = participant_id
        self.questions = list(self.quiz.questions)
        self.listener = listener or SessionListener()
        self.max_fullscreen_exits = max_fullscreen_exits

        self._submitter = submitter
        self._scheduler = scheduler or ThreadingScheduler()
        self._lock = threading.RLock()
        self._tick_handle = None
        self._auto_submit_handle = None

        self.phase = Phase.ACTIVE if self.questions else Phase.NO_QUESTIONS
        self.current_question_index = 0
        self.answers = {}
        self.time_limit_seconds = self.quiz.time_limit * 60
        self.time_left = self.time_limit_seconds
        self.low_time_warned = False
        self.started = False

        self.fullscreen = False
        self.fullscreen_exit_count = 0
        self._exit_warned = False

        self.payload = None
        self.result_id = None
        self.last_error = None
        self.error_retryable = False

    # Lifecycle

    def start(self):
        """Enter full-window mode if the host allows it and start the clock"""
        with self._lock:
            if self.started or self.phase is not Phase.ACTIVE:
                return
            self.started = True
            self.fullscreen = bool(self.listener.request_fullscreen())
            if not self.fullscreen:
                logger.info("Fullscreen unavailable for quiz %s; continuing windowed", self.quiz.id)
            self._schedule_tick()

    def _schedule_tick(self):
        self._tick_handle = self._scheduler.call_later(TICK_INTERVAL_SECONDS, self._on_tick_timer)

    def _on_tick_timer(self):
        with self._lock:
            self._tick_handle = None
            self.tick()
            if self.phase in TICKING_PHASES:
                self._schedule_tick()

    def _stop_clock(self):
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _set_phase(self, phase):
        old, self.phase = self.phase, phase
        if old is not phase:
            self.listener.on_phase_change(old, phase)

    def _require(self, *phases):
        if self.phase not in phases:
            raise InvalidTransition(f"Not allowed while quiz is {self.phase.value}")

    # Answering

    def question_by_id(self, question_id):
        return next((question for question in self.questions if question.id == question_id), None)

    def select_answer(self, question_id, option_index):
        with self._lock:
            self._require(Phase.ACTIVE)
            question = self.question_by_id(question_id)
            if question is None:
                raise ValidationError(f"Question {question_id} is not part of this quiz")
            if not 0 <= option_index < len(question.options):
                raise ValidationError(f"Option {option_index} does not exist")
            self.answers[question_id] = option_index

    def selected_option(self, question_id):
        return self.answers.get(question_id)

    def navigate(self, delta):
        with self._lock:
            self._require(Phase.ACTIVE)
            return self._move_to(self.current_question_index + delta)

    def go_to(self, index):
        with self._lock:
            self._require(Phase.ACTIVE)
            return self._move_to(index)

    def next(self):
        return self.navigate(1)

    def previous(self):
        return self.navigate(-1)

    def _move_to(self, index):
        self.current_question_index = min(max(index, 0), len(self.questions) - 1)
        return self.current_question_index

    @property
    def current_question(self):
        if not self.questions:
            return None
        return self.questions[self.current_question_index]

    @property
    def is_first_question(self):
        return self.current_question_index == 0

    @property
    def is_last_question(self):
        return self.current_question_index >= len(self.questions) - 1

    @property
    def total_questions(self):
        return len(self.questions)

    @property
    def answered_count(self):
        return sum(1 for question in self.questions if question.id in self.answers)

    @property
    def unanswered_count(self):
        return self.total_questions - self.answered_count

    def summary(self):
        return {
            "answered": self.answered_count,
            "unanswered": self.unanswered_count,
            "total": self.total_questions,
        }

    # Clock

    def tick(self):
        """Advance the countdown by one second"""
        with self._lock:
            if self.phase not in TICKING_PHASES:
                return
            self.time_left = max(0, self.time_left - 1)
            self.listener.on_tick(self.time_left)

            if not self.low_time_warned and self.time_left <= LOW_TIME_WARNING_SECONDS:
                self.low_time_warned = True
                self.listener.on_low_time(self.time_left)

            if self.time_left == 0:
                self._expire()

    def _expire(self):
        self._stop_clock()
        self._set_phase(Phase.TIME_EXPIRED)
        self.listener.on_time_up()
        # The notice must be on screen before the real submission fires
        self._auto_submit_handle = self._scheduler.call_later(AUTO_SUBMIT_DELAY_SECONDS, self._auto_submit)

    def _auto_submit(self):
        self._auto_submit_handle = None
        self._begin_submit((Phase.TIME_EXPIRED,))

    @property
    def formatted_time_left(self):
        return format_clock(self.time_left)

    @property
    def timer_progress(self):
        return timer_progress(self.time_left, self.quiz.time_limit)

    @property
    def timer_level(self):
        return timer_level(self.timer_progress)

    @property
    def time_taken(self):
        return max(0, self.time_limit_seconds - self.time_left)

    # Fullscreen and navigation guards

    def fullscreen_exited(self):
        """The host saw the participant leave full-window mode"""
        with self._lock:
            self.fullscreen = False
            if self.phase not in FULLSCREEN_GUARDED_PHASES or self._exit_warned:
                return
            self._exit_warned = True
            self.fullscreen_exit_count += 1
            self.listener.on_fullscreen_exit(self.fullscreen_exit_count)
            limit_reached = bool(self.max_fullscreen_exits) and \
                self.fullscreen_exit_count >= self.max_fullscreen_exits

        if limit_reached:
            logger.info("Quiz %s: fullscreen left %d times, submitting", self.quiz.id, self.fullscreen_exit_count)
            self._begin_submit(FULLSCREEN_GUARDED_PHASES)

    def fullscreen_entered(self):
        with self._lock:
            self.fullscreen = True
            self._exit_warned = False

    def reenter_fullscreen(self):
        """One-click re-entry offered with the exit warning"""
        with self._lock:
            if self.listener.request_fullscreen():
                self.fullscreen_entered()
            return self.fullscreen

    def should_confirm_leave(self):
        """True while leaving or reloading the page would lose the attempt"""
        return self.phase in LEAVE_GUARDED_PHASES

    # Submission

    def request_submit(self):
        """Open the confirmation step; returns the answered/unanswered summary"""
        with self._lock:
            self._require(Phase.ACTIVE)
            self._set_phase(Phase.SUBMIT_CONFIRM_PENDING)
            summary = self.summary()
            self.listener.on_submit_confirm(summary)
            return summary

    def cancel_submit(self):
        with self._lock:
            self._require(Phase.SUBMIT_CONFIRM_PENDING)
            self._set_phase(Phase.ACTIVE)

    def confirm_submit(self):
        """Returns False when another path already started the submission"""
        return self._begin_submit((Phase.SUBMIT_CONFIRM_PENDING,))

    def retry_submit(self):
        with self._lock:
            self._require(Phase.ERROR)
            if not self.error_retryable:
                raise InvalidTransition("This submission cannot be retried")
        return self._begin_submit((Phase.ERROR,))

    @property
    def local_score(self):
        """Score against the key the client holds, or None when the key is redacted"""
        if any(question.correct_answer < 0 for question in self.questions):
            return None
        return score_answers(self.questions, self.answers)

    def build_payload(self):
        return {
            "participantId": self.participant_id,
            "quizId": self.quiz.id,
            "score": self.local_score,
            "totalQuestions": self.total_questions,
            "timeTaken": self.time_taken,
            "answers": [
                {"questionId": question.id, "selectedAnswer": self.answers[question.id]}
                for question in self.questions
                if question.id in self.answers
            ],
        }

    def _begin_submit(self, allowed):
        with self._lock:
            if self.phase not in allowed:
                return False
            self._stop_clock()
            if self._auto_submit_handle is not None:
                self._auto_submit_handle.cancel()
                self._auto_submit_handle = None
            self._set_phase(Phase.SUBMITTING)
            # A retry resends exactly what the first attempt sent
            if self.payload is None:
                self.payload = self.build_payload()
            payload = self.payload

        # The network call runs outside the lock; SUBMITTING already blocks every other path
        try:
            result = self._submitter(payload)
            result_id = result["id"]
        except TransientFailure as e:
            self._fail(e, retryable=True)
            return True
        except QuizBuilderError as e:
            self._fail(e, retryable=False)
            return True
        except Exception as e:
            self._fail(e, retryable=True)
            raise

        with self._lock:
            self.result_id = result_id
            self.last_error = None
            self._set_phase(Phase.SUBMITTED)
            self.listener.on_submitted(self.result_id)
        return True

    def _fail(self, error, retryable):
        with self._lock:
            self.last_error = error
            self.error_retryable = retryable
            self._set_phase(Phase.ERROR)
            logger.warning("Quiz %s submission failed (retryable=%s): %s", self.quiz.id, retryable, error)
            self.listener.on_submit_failed(error, retryable)
