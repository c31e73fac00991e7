"""
Pydantic models for request payloads
"""
from datetime import datetime
from typing import List, Optional
import re

from pydantic import BaseModel, Field, field_validator, model_validator

from mentorhub.rbac.roles import Role, SubmissionStatus, TestType, QuestionType

EMAIL_PATTERN = r'^[^@\s]+@[^@\s]+\.[^@\s]+$'
PASSWORD_PATTERN = re.compile(r'^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[^A-Za-z0-9]).{8,}$')


class RegisterRequest(BaseModel):
    """Self-registration of a participant"""
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    password: str
    password_confirmation: str

    @field_validator('password')
    @classmethod
    def password_strength(cls, value: str) -> str:
        if not PASSWORD_PATTERN.match(value):
            raise ValueError('Password needs 8+ characters with upper, lower, digit and symbol')
        return value

    @model_validator(mode='after')
    def passwords_match(self):
        if self.password != self.password_confirmation:
            raise ValueError('Password confirmation does not match')
        return self


class LoginRequest(BaseModel):
    email: str
    password: str


class VerifyEmailRequest(BaseModel):
    email: str
    code: str


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, max_length=255)
    last_name: Optional[str] = Field(None, max_length=255)
    email: Optional[str] = Field(None, pattern=EMAIL_PATTERN, max_length=255)
    role: Optional[Role] = None


class ProjectCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None


class ReportCreate(ProjectCreate):
    submission_deadline: Optional[datetime] = None


class ProjectUpdate(BaseModel):
    """Edits to a project; which fields are allowed depends on the caller"""
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    feedback: Optional[str] = None
    status: Optional[SubmissionStatus] = None


class ReportUpdate(ProjectUpdate):
    submission_deadline: Optional[datetime] = None


class StatusUpdate(BaseModel):
    """Review decision on a project or report"""
    status: SubmissionStatus
    feedback: Optional[str] = None


class TestCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    type: TestType
    file_type: str = Field(..., max_length=50)


class TestUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    type: Optional[TestType] = None
    file_type: Optional[str] = Field(None, max_length=50)


def _check_options(value):
    if value is not None and any(len(option) > 255 for option in value):
        raise ValueError('Options are limited to 255 characters')
    return value


class QuestionCreate(BaseModel):
    text: str = Field(..., min_length=1)
    type: QuestionType
    options: Optional[List[str]] = None
    correct_answer: Optional[str] = Field(None, max_length=255)
    test_id: int

    @field_validator('options')
    @classmethod
    def option_length(cls, value):
        return _check_options(value)


class QuestionUpdate(BaseModel):
    text: Optional[str] = Field(None, min_length=1)
    type: Optional[QuestionType] = None
    options: Optional[List[str]] = None
    correct_answer: Optional[str] = Field(None, max_length=255)
    test_id: Optional[int] = None

    @field_validator('options')
    @classmethod
    def option_length(cls, value):
        return _check_options(value)


class ResourceCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    file_type: str = Field(..., max_length=50)
    is_published: bool = False


class ResourceUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = None
    file_type: Optional[str] = Field(None, max_length=50)
    is_published: Optional[bool] = None


class ResultCreate(BaseModel):
    score: float
    user_id: int
    test_id: int


class ResultUpdate(BaseModel):
    score: Optional[float] = None
