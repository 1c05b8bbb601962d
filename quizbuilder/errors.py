class QuizBuilderError(Exception):
    """Base error; ``status_code`` is what the HTTP layer answers with."""
    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        self.message = message or self.message

    def to_dict(self):
        return {"message": self.message}


class ValidationError(QuizBuilderError):
    """Malformed request shape"""
    status_code = 400
    message = "Invalid request"

    def __init__(self, message=None, errors=None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self):
        body = super().to_dict()
        if self.errors:
            body["errors"] = self.errors
        return body


class Unauthorized(QuizBuilderError):
    status_code = 401
    message = "Invalid credentials"


class Forbidden(QuizBuilderError):
    status_code = 403
    message = "Forbidden"


class NotFound(QuizBuilderError):
    status_code = 404
    message = "Not found"


class Conflict(QuizBuilderError):
    """Duplicate submission without a retake grant"""
    status_code = 409
    message = "You have already completed this quiz and a retake is not allowed"


class TransientFailure(QuizBuilderError):
    """Network or storage unavailable; the caller may retry"""
    status_code = 503
    message = "Service temporarily unavailable. Please try again."


class InvalidTransition(QuizBuilderError):
    """A quiz session operation was called in a phase that does not allow it"""
    message = "Operation not allowed in the current quiz phase"


ERRORS_BY_STATUS = {
    ValidationError.status_code: ValidationError,
    Unauthorized.status_code: Unauthorized,
    Forbidden.status_code: Forbidden,
    NotFound.status_code: NotFound,
    Conflict.status_code: Conflict,
}
