"""
Record and request models for Gabarito.

Records are stored as snake_case documents and sent over HTTP with camelCase
keys. Both spellings are accepted on input.
"""
import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from .errors import InvalidInput

LETTERS = ("A", "B", "C", "D", "E")

# Fixed-width ISO text so stored timestamps sort lexically
Timestamp = Annotated[datetime, PlainSerializer(lambda d: d.isoformat(timespec="microseconds"), when_used="json")]


def utcnow():
    return datetime.now(timezone.utc)


def new_id():
    return str(uuid.uuid4())


def normalize_letter(value):
    """'b', ' B ', 'B) 10 m/s' -> 'B'. Anything outside A-E becomes ""."""
    if value is None:
        return ""
    letter = str(value).strip().upper()
    if len(letter) > 1 and letter[1] == ')':
        letter = letter[0]
    return letter if letter in LETTERS else ""


def collapse_whitespace(value):
    return " ".join(str(value or "").split())


class Role(str, Enum):
    UNSET = "unset"
    STUDENT = "student"
    TEACHER = "teacher"

    @classmethod
    def from_request(cls, value):
        """Only the exact strings 'student' and 'teacher' pick a role."""
        if value == cls.STUDENT.value:
            return cls.STUDENT
        if value == cls.TEACHER.value:
            return cls.TEACHER
        return cls.UNSET


class Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self):
        return self.model_dump(mode="json")

    def to_json(self):
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_document(cls, doc):
        return cls.model_validate(doc)


def parse(model, data):
    """Validate ``data`` into ``model``, raising InvalidInput on failure."""
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data if data is not None else {})
    except ValidationError as e:
        details = [
            {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise InvalidInput("Invalid request payload", details=details) from e


# ============ Stored records ============

class Identity(Record):
    id: str = Field(default_factory=new_id)
    name: str
    email: str
    password_hash: str
    role: Role = Role.UNSET
    created_at: Timestamp = Field(default_factory=utcnow)

    @field_validator("role", mode="before")
    @classmethod
    def _null_role(cls, value):
        return Role.UNSET if value is None else value

    def to_public(self):
        return {"id": self.id, "name": self.name, "email": self.email, "role": self.role.value}


class AssessmentQuestion(Record):
    number: int
    subject: str = ""


class Assessment(Record):
    id: str = Field(default_factory=new_id)
    name: str
    question_count: int
    questions: List[AssessmentQuestion]
    created_by: Optional[str] = None
    created_at: Timestamp = Field(default_factory=utcnow)


class KeyEntry(Record):
    question_number: int
    correct_answer: str

    @field_validator("correct_answer", mode="before")
    @classmethod
    def _check_letter(cls, value):
        letter = normalize_letter(value)
        if not letter:
            raise ValueError("correct answer must be one of A, B, C, D, E")
        return letter


class AnswerKey(Record):
    id: str = Field(default_factory=new_id)
    assessment_id: str
    answers: List[KeyEntry]
    created_at: Timestamp = Field(default_factory=utcnow)


class GradedAnswer(Record):
    question_number: int
    answer: str = ""
    is_correct: bool = False
    subject: str = ""


class StudentSubmission(Record):
    id: str = Field(default_factory=new_id)
    assessment_id: str
    student_name: str
    identity_id: Optional[str] = None
    answers: List[GradedAnswer]
    score: int = 0
    total: int = 0
    created_at: Timestamp = Field(default_factory=utcnow)


class DistributionLink(Record):
    id: str = Field(default_factory=new_id)
    token: str
    assessment_id: str
    title: str
    description: str = ""
    require_name: bool = True
    created_at: Timestamp = Field(default_factory=utcnow)


class Question(Record):
    id: str = Field(default_factory=new_id)
    statement: str
    options: Dict[str, str] = Field(default_factory=dict)
    correct_answer: str
    subject: str = ""
    difficulty: str = ""
    exam: str = ""
    year: Optional[int] = None
    tags: List[str] = Field(default_factory=list)
    license: str = ""
    source_url: str = ""
    attribution: str = ""
    created_at: Timestamp = Field(default_factory=utcnow)


# ============ Request payloads ============

class SignupRequest(Record):
    name: str
    email: str
    password: str
    # anything other than "student" or "teacher" leaves the role unset
    role: Any = None


class LoginRequest(Record):
    email: str
    password: str


class RoleRequest(Record):
    role: str


class CreateAssessmentRequest(Record):
    name: str
    question_count: int
    questions: List[AssessmentQuestion]


class FromBankRequest(Record):
    name: str
    question_ids: List[str]


class AnswerKeyRequest(Record):
    assessment_id: str
    answers: List[KeyEntry]


class SubmittedAnswer(Record):
    question_number: int
    answer: Optional[str] = ""

    @field_validator("answer", mode="before")
    @classmethod
    def _normalize(cls, value):
        return normalize_letter(value)


class StudentAnswersRequest(Record):
    assessment_id: Optional[str] = None
    student_name: Optional[str] = None
    answers: List[SubmittedAnswer]


class CreateLinkRequest(Record):
    assessment_id: str
    title: Optional[str] = None
    description: Optional[str] = None
    require_name: bool = True


class ImportRequest(Record):
    items: List[dict]
