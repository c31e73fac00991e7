"""
Role and status vocabulary for the RBAC system
"""
from enum import Enum
from typing import Optional


class Role(str, Enum):
    """User roles in the system"""
    PARTICIPANT = "Participant"
    MENTOR = "Mentor"
    ADMIN = "Admin"

    def __str__(self):
        return self.value

    @classmethod
    def parse(cls, value) -> Optional['Role']:
        """
        Convert a raw role value to a Role enum.

        Values must match exactly. Unknown, empty or non-string values
        return None so that every authorization check made with them is
        denied.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        try:
            return cls(value)
        except ValueError:
            return None

    @classmethod
    def get_all(cls) -> list[str]:
        """Get all role values as strings"""
        return [role.value for role in cls]


class SubmissionStatus(str, Enum):
    """Review lifecycle of projects and reports"""
    SUBMITTED = "Soumis"
    IN_REVIEW = "En Revue"
    APPROVED = "Approuvé"
    REJECTED = "Rejeté"

    def __str__(self):
        return self.value

    @classmethod
    def parse(cls, value) -> Optional['SubmissionStatus']:
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None

    @classmethod
    def get_all(cls) -> list[str]:
        return [status.value for status in cls]


class TestType(str, Enum):
    """Kinds of tests"""
    __test__ = False  # keep pytest from collecting this enum

    QCM = "QCM"
    OPEN = "Ouvert"
    PRACTICAL = "Pratique"

    def __str__(self):
        return self.value

    @classmethod
    def get_all(cls) -> list[str]:
        return [test_type.value for test_type in cls]


class QuestionType(str, Enum):
    """Kinds of questions"""
    QCM = "QCM"
    OPEN = "Ouvert"
    PRACTICAL = "Pratique"

    def __str__(self):
        return self.value

    @classmethod
    def get_all(cls) -> list[str]:
        return [question_type.value for question_type in cls]
