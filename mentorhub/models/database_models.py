"""SQLAlchemy database models for the application"""
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, Float, ForeignKey, JSON,
    CheckConstraint, Index, func
)
from sqlalchemy.orm import declarative_base, relationship
from datetime import datetime, timedelta

from mentorhub.rbac.roles import Role, SubmissionStatus, TestType, QuestionType

Base = declarative_base()


def _in_clause(column: str, values: list[str]) -> str:
    quoted = ", ".join("'" + value.replace("'", "''") + "'" for value in values)
    return f"{column} IN ({quoted})"


class User(Base):
    """User model"""
    __tablename__ = 'users'

    id = Column(Integer, primary_key=True, autoincrement=True)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    password = Column(String(255), nullable=False)
    role = Column(String(50), nullable=False, default=Role.PARTICIPANT.value,
                  server_default=Role.PARTICIPANT.value)
    is_verified = Column(Boolean, nullable=False, default=False, server_default='0')
    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow,
                        server_default=func.now())

    # Relationships
    projects = relationship("Project", back_populates="owner", cascade="all, delete-orphan",
                            passive_deletes=True)
    reports = relationship("Report", back_populates="owner", cascade="all, delete-orphan",
                           passive_deletes=True)
    test_results = relationship("UserTestResult", back_populates="user",
                                cascade="all, delete-orphan", passive_deletes=True)

    __table_args__ = (
        CheckConstraint(_in_clause('role', Role.get_all()), name='check_user_role'),
    )


class Otp(Base):
    """One-time email verification code"""
    __tablename__ = 'otps'

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=False)
    code = Column(String(10), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())
    expires_at = Column(DateTime, nullable=False)

    __table_args__ = (
        Index('idx_otps_email', 'email'),
    )

    @classmethod
    def issue(cls, email: str, code: str, ttl_minutes: int, now: datetime = None) -> 'Otp':
        now = now or datetime.utcnow()
        return cls(email=email, code=code, created_at=now,
                   expires_at=now + timedelta(minutes=ttl_minutes))

    def is_expired(self, now: datetime = None) -> bool:
        return (now or datetime.utcnow()) > self.expires_at


class Project(Base):
    """Project submission"""
    __tablename__ = 'projects'

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    file_url = Column(String(255), nullable=False)
    file_type = Column(String(50), nullable=False)
    submitted_by = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    status = Column(String(50), nullable=False, default=SubmissionStatus.SUBMITTED.value,
                    server_default=SubmissionStatus.SUBMITTED.value)
    feedback = Column(Text, nullable=True)
    submitted_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())
    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow,
                        server_default=func.now())

    owner = relationship("User", back_populates="projects")

    __table_args__ = (
        CheckConstraint(_in_clause('status', SubmissionStatus.get_all()), name='check_project_status'),
        Index('idx_projects_submitted_by', 'submitted_by'),
        Index('idx_projects_status', 'status'),
    )


class Report(Base):
    """Report submission"""
    __tablename__ = 'reports'

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    file_url = Column(String(255), nullable=False)
    file_type = Column(String(50), nullable=False)
    feedback = Column(Text, nullable=True)
    submission_deadline = Column(DateTime, nullable=True)
    submitted_by = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    submitted_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())
    status = Column(String(50), nullable=False, default=SubmissionStatus.SUBMITTED.value,
                    server_default=SubmissionStatus.SUBMITTED.value)
    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow,
                        server_default=func.now())

    owner = relationship("User", back_populates="reports")

    __table_args__ = (
        CheckConstraint(_in_clause('status', SubmissionStatus.get_all()), name='check_report_status'),
        Index('idx_reports_submitted_by', 'submitted_by'),
        Index('idx_reports_status', 'status'),
    )


class Test(Base):
    """Test model"""
    __tablename__ = 'tests'
    __test__ = False

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    type = Column(String(50), nullable=False)
    file_url = Column(String(255), nullable=True)
    file_type = Column(String(50), nullable=True)
    created_by = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow,
                        server_default=func.now())

    # Questions go with their test
    questions = relationship("Question", back_populates="test", cascade="all, delete-orphan",
                             passive_deletes=True)
    results = relationship("UserTestResult", back_populates="test", cascade="all, delete-orphan",
                           passive_deletes=True)

    __table_args__ = (
        CheckConstraint(_in_clause('type', TestType.get_all()), name='check_test_type'),
    )


class Question(Base):
    """Question belonging to a test"""
    __tablename__ = 'questions'

    id = Column(Integer, primary_key=True, autoincrement=True)
    text = Column(Text, nullable=False)
    type = Column(String(50), nullable=False)
    options = Column(JSON, nullable=True)
    file_url = Column(String(255), nullable=True)
    file_type = Column(String(50), nullable=True)
    correct_answer = Column(String(255), nullable=True)
    test_id = Column(Integer, ForeignKey('tests.id', ondelete='CASCADE'), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow,
                        server_default=func.now())

    test = relationship("Test", back_populates="questions")

    __table_args__ = (
        CheckConstraint(_in_clause('type', QuestionType.get_all()), name='check_question_type'),
        Index('idx_questions_test_id', 'test_id'),
    )


class Resource(Base):
    """Downloadable learning resource"""
    __tablename__ = 'resources'

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    file_url = Column(String(255), nullable=False)
    file_type = Column(String(50), nullable=False)
    uploaded_by = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    is_published = Column(Boolean, nullable=False, default=False, server_default='0')
    download_count = Column(Integer, nullable=False, default=0, server_default='0')
    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow,
                        server_default=func.now())

    __table_args__ = (
        CheckConstraint('download_count >= 0', name='check_download_count'),
        Index('idx_resources_uploaded_by', 'uploaded_by'),
    )


class UserTestResult(Base):
    """Score of a user on a test"""
    __tablename__ = 'user_test_results'

    id = Column(Integer, primary_key=True, autoincrement=True)
    score = Column(Float, nullable=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    test_id = Column(Integer, ForeignKey('tests.id', ondelete='CASCADE'), nullable=False)
    file_path = Column(String(255), nullable=True)
    file_type = Column(String(50), nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, server_default=func.now())
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow,
                        server_default=func.now())

    user = relationship("User", back_populates="test_results")
    test = relationship("Test", back_populates="results")

    __table_args__ = (
        Index('idx_user_test_results_user_id', 'user_id'),
    )
