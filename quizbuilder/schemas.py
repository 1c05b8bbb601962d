"""Request and response structures for the JSON API.

Every request body is parsed into one of the input models below before it
reaches a service function; the first structural violation rejects the
request. Responses are built from ORM rows through the output models and
dumped with camelCase keys.
"""
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import (
    BaseModel, ConfigDict, Field, StrictBool, StrictInt, ValidationError as PydanticValidationError,
    model_validator,
)
from pydantic.alias_generators import to_camel

from quizbuilder.constants import (
    DEFAULT_PASSING_SCORE, MIN_NAME_LENGTH, MIN_OPTIONS, MIN_PASSWORD_LENGTH, MIN_QUESTION_LENGTH,
    MIN_QUIZ_TITLE_LENGTH, MIN_USERNAME_LENGTH,
)
from quizbuilder.errors import ValidationError


class ApiModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class InputModel(ApiModel):
    model_config = ConfigDict(str_strip_whitespace=True)


# Auth

class RegisterRequest(InputModel):
    username: str = Field(min_length=MIN_USERNAME_LENGTH)
    password: str = Field(min_length=MIN_PASSWORD_LENGTH)
    admin_secret: Optional[str] = None


class LoginRequest(InputModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


# Participants

class ParticipantCreate(InputModel):
    full_name: str = Field(min_length=MIN_NAME_LENGTH)
    roll_number: str = Field(min_length=1)
    class_name: str = Field(min_length=1, alias="class")
    department: str = Field(min_length=1)


# Quizzes and questions

class QuizCreate(InputModel):
    title: str = Field(min_length=MIN_QUIZ_TITLE_LENGTH)
    description: Optional[str] = None
    time_limit: int = Field(gt=0)
    passing_score: int = Field(default=DEFAULT_PASSING_SCORE, ge=1, le=100)
    is_active: bool = True
    password: Optional[str] = None


class QuizUpdate(InputModel):
    title: Optional[str] = Field(default=None, min_length=MIN_QUIZ_TITLE_LENGTH)
    description: Optional[str] = None
    time_limit: Optional[int] = Field(default=None, gt=0)
    passing_score: Optional[int] = Field(default=None, ge=1, le=100)
    is_active: Optional[bool] = None
    password: Optional[str] = None


def _check_correct_answer(options, correct_answer):
    if options is not None and correct_answer is not None and correct_answer >= len(options):
        raise ValueError("Correct answer must point at one of the options")


class QuestionBody(InputModel):
    text: str = Field(min_length=MIN_QUESTION_LENGTH)
    options: List[str] = Field(min_length=MIN_OPTIONS)
    correct_answer: StrictInt = Field(ge=0)

    @model_validator(mode="after")
    def check_options(self):
        if any(not option for option in self.options):
            raise ValueError("Option cannot be empty")
        _check_correct_answer(self.options, self.correct_answer)
        return self


class QuestionCreate(QuestionBody):
    quiz_id: StrictInt


class QuestionUpdate(InputModel):
    text: Optional[str] = Field(default=None, min_length=MIN_QUESTION_LENGTH)
    options: Optional[List[str]] = Field(default=None, min_length=MIN_OPTIONS)
    correct_answer: Optional[StrictInt] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def check_options(self):
        if self.options is not None and any(not option for option in self.options):
            raise ValueError("Option cannot be empty")
        _check_correct_answer(self.options, self.correct_answer)
        return self


# Results

class AnswerIn(InputModel):
    question_id: StrictInt
    selected_answer: Optional[StrictInt] = None


class ResultSubmission(InputModel):
    participant_id: StrictInt
    quiz_id: StrictInt
    # Accepted for compatibility with older clients and ignored; the server scores
    score: Optional[StrictInt] = Field(default=None, ge=0)
    total_questions: Optional[StrictInt] = Field(default=None, ge=0)
    time_taken: StrictInt = Field(ge=0)
    answers: List[AnswerIn]


class RetakeUpdate(InputModel):
    can_retake: StrictBool


# Responses

class UserOut(ApiModel):
    id: int
    username: str
    is_admin: bool
    created_at: Optional[datetime] = None


class ParticipantOut(ApiModel):
    id: int
    full_name: str
    roll_number: str
    class_name: str = Field(alias="class")
    department: str
    created_at: Optional[datetime] = None


class QuestionOut(ApiModel):
    id: int
    quiz_id: int
    text: str
    options: List[str]
    correct_answer: int
    created_at: Optional[datetime] = None


class QuizSummaryOut(ApiModel):
    id: int
    title: str
    description: Optional[str] = None
    time_limit: int
    passing_score: int = DEFAULT_PASSING_SCORE
    creator_id: Optional[int] = None
    is_active: bool = True
    password: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class QuizOut(QuizSummaryOut):
    questions: List[QuestionOut] = []


class ResultOut(ApiModel):
    id: int
    participant_id: int
    quiz_id: int
    attempt: int = 1
    score: int
    total_questions: int
    time_taken: int
    answers: List[Dict[str, Optional[int]]]
    can_retake: bool = False
    ip_address: Optional[str] = None
    submitted_at: Optional[datetime] = None


class ResultWithDetailsOut(ResultOut):
    participant: ParticipantOut
    quiz: QuizSummaryOut
    questions: Optional[List[QuestionOut]] = None


class EligibilityOut(ApiModel):
    has_taken_quiz: bool
    can_retake: bool


def parse(schema, data):
    """Validate ``data`` against ``schema`` or raise our ValidationError."""
    if data is None:
        raise ValidationError("Request body must be JSON")
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        errors = [
            {"path": ".".join(str(part) for part in error["loc"]), "message": error["msg"]}
            for error in e.errors()
        ]
        raise ValidationError("Invalid request", errors=errors) from e


def parse_list(schema, data):
    if not isinstance(data, list):
        raise ValidationError("Request body must be a JSON array")
    items, errors = [], []
    for index, item in enumerate(data):
        try:
            items.append(parse(schema, item))
        except ValidationError as e:
            errors.extend({"path": f"{index}.{error['path']}", "message": error["message"]}
                          for error in e.errors)
    if errors:
        raise ValidationError("Invalid request", errors=errors)
    return items


def dump(model, **kwargs):
    """Serialize an output model to JSON-ready camelCase data"""
    return model.model_dump(mode="json", by_alias=True, **kwargs)
