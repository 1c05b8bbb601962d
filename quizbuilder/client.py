"""HTTP client for the participant-facing API.

Failures come back as the same errors the server raised: 4xx statuses map
to ``ValidationError``/``Forbidden``/``NotFound``/``Conflict``, while network
errors and 5xx answers become ``TransientFailure`` so a quiz session can
offer a retry.
"""
import logging

import requests

from quizbuilder.errors import ERRORS_BY_STATUS, Conflict, QuizBuilderError, TransientFailure
from quizbuilder.session_engine import QuizSession

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10  # seconds


class QuizApiClient:

    def __init__(self, base_url, http=None, timeout=DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.http = http or requests.Session()
        self.timeout = timeout

    def _request(self, method, path, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            response = self.http.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.warning("%s %s failed: %s", method, url, e)
            raise TransientFailure() from e

        if response.status_code >= 500:
            raise TransientFailure()
        if response.status_code >= 400:
            try:
                message = response.json().get("message")
            except ValueError:
                message = None
            error_class = ERRORS_BY_STATUS.get(response.status_code, QuizBuilderError)
            raise error_class(message)

        if not response.content:
            return None
        return response.json()

    def register_participant(self, full_name, roll_number, class_name, department):
        return self._request("POST", "/api/participants", json={
            "fullName": full_name,
            "rollNumber": roll_number,
            "class": class_name,
            "department": department,
        })

    def list_quizzes(self):
        return self._request("GET", "/api/quizzes")

    def get_quiz(self, quiz_id):
        return self._request("GET", f"/api/quizzes/{quiz_id}")

    def check_eligibility(self, participant_id, quiz_id):
        return self._request("GET", "/api/results/check",
                             params={"participantId": participant_id, "quizId": quiz_id})

    def submit_result(self, payload):
        return self._request("POST", "/api/results", json=payload)

    def get_result(self, result_id, participant_id):
        return self._request("GET", f"/api/results/{result_id}", params={"participantId": participant_id})

    def start_session(self, quiz_id, participant_id, listener=None, scheduler=None, **session_options):
        """Run the eligibility precheck, load the quiz and start a session for it.

        Raises ``Conflict`` when the participant already took the quiz and
        has no retake grant; the host should explain and go back home.
        """
        eligibility = self.check_eligibility(participant_id, quiz_id)
        if eligibility["hasTakenQuiz"] and not eligibility["canRetake"]:
            raise Conflict("You have already taken this quiz")

        quiz = self.get_quiz(quiz_id)
        session = QuizSession(quiz, participant_id, submitter=self.submit_result,
                              listener=listener, scheduler=scheduler, **session_options)
        session.start()
        return session
