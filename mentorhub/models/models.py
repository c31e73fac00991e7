from typing import Optional, List, Dict, Any
from datetime import datetime
import logging

from sqlalchemy import update, select
from sqlalchemy.exc import IntegrityError
from werkzeug.security import generate_password_hash, check_password_hash

from mentorhub.utils.db import get_db
from mentorhub.rbac.roles import Role, SubmissionStatus
from mentorhub.models.database_models import (
    User as DBUser, Otp as DBOtp, Project as DBProject, Report as DBReport,
    Test as DBTest, Question as DBQuestion, Resource as DBResource,
    UserTestResult as DBUserTestResult
)

logger = logging.getLogger(__name__)


def model_to_dict(model_instance, exclude=()) -> Optional[Dict[str, Any]]:
    """Convert SQLAlchemy model instance to dictionary"""
    if model_instance is None:
        return None
    result = {}
    for key in model_instance.__table__.columns.keys():
        if key in exclude:
            continue
        value = getattr(model_instance, key)
        # Convert datetime objects to ISO format strings
        if isinstance(value, datetime):
            value = value.isoformat()
        result[key] = value
    return result


class CrudModel:
    """Shared database operations for a single table"""

    db_model = None
    hidden_fields = ()

    @classmethod
    def to_dict(cls, row) -> Optional[Dict[str, Any]]:
        return model_to_dict(row, exclude=cls.hidden_fields)

    @classmethod
    def get(cls, item_id: int):
        """Load a row by primary key, or None"""
        try:
            db = get_db()
            return db.get(cls.db_model, item_id)
        except Exception as e:
            logger.error(f"Error loading {cls.db_model.__tablename__} {item_id}: {str(e)}")
            raise

    @classmethod
    def list_all(cls, **filters) -> List[Any]:
        """Load all rows, newest first, optionally filtered by column values"""
        try:
            db = get_db()
            query = db.query(cls.db_model)
            if filters:
                query = query.filter_by(**filters)
            return query.order_by(cls.db_model.id.desc()).all()
        except Exception as e:
            logger.error(f"Error listing {cls.db_model.__tablename__}: {str(e)}")
            raise

    @classmethod
    def create(cls, **fields):
        """Insert a row and return it"""
        db = get_db()
        try:
            row = cls.db_model(**fields)
            db.add(row)
            db.commit()
            db.refresh(row)
            return row
        except Exception as e:
            logger.error(f"Error creating {cls.db_model.__tablename__}: {str(e)}")
            db.rollback()
            raise

    @classmethod
    def update(cls, row, fields: Dict[str, Any]):
        """Apply column values to a row and commit"""
        db = get_db()
        try:
            for key, value in fields.items():
                setattr(row, key, value)
            db.commit()
            db.refresh(row)
            return row
        except Exception as e:
            logger.error(f"Error updating {cls.db_model.__tablename__} {row.id}: {str(e)}")
            db.rollback()
            raise

    @classmethod
    def reload(cls, row):
        """Re-read a row after a statement that bypassed the session"""
        db = get_db()
        db.refresh(row)
        return row

    @classmethod
    def delete(cls, row) -> None:
        db = get_db()
        try:
            db.delete(row)
            db.commit()
        except Exception as e:
            logger.error(f"Error deleting {cls.db_model.__tablename__} {row.id}: {str(e)}")
            db.rollback()
            raise


class UserModel(CrudModel):
    """User model for handling user-related database operations"""

    db_model = DBUser
    hidden_fields = ('password',)

    @staticmethod
    def create_user(first_name: str, last_name: str, email: str, password: str,
                    role: str = Role.PARTICIPANT.value, commit: bool = True):
        """Create a new user with a hashed password"""
        db = get_db()
        try:
            user = DBUser(
                first_name=first_name,
                last_name=last_name,
                email=email,
                password=generate_password_hash(password),
                role=role,
                is_verified=False
            )
            db.add(user)
            if commit:
                db.commit()
                db.refresh(user)
            else:
                db.flush()
            return user
        except IntegrityError as e:
            logger.error(f"User creation failed - integrity error: {str(e)}")
            db.rollback()
            raise ValueError("Email already exists")
        except Exception as e:
            logger.error(f"User creation failed: {str(e)}")
            db.rollback()
            raise

    @staticmethod
    def get_user_by_email(email: str):
        """Retrieve user row by email"""
        try:
            db = get_db()
            return db.query(DBUser).filter(DBUser.email == email).first()
        except Exception as e:
            logger.error(f"Error retrieving user by email: {str(e)}")
            raise

    @staticmethod
    def check_password(user, password: str) -> bool:
        if user is None or not password:
            return False
        return check_password_hash(user.password, password)

    @classmethod
    def update(cls, row, fields: Dict[str, Any]):
        if 'email' in fields and fields['email'] != row.email:
            existing = cls.get_user_by_email(fields['email'])
            if existing is not None and existing.id != row.id:
                raise ValueError("Email already exists")
        return super().update(row, fields)

    @staticmethod
    def mark_verified(email: str) -> bool:
        db = get_db()
        try:
            result = db.execute(
                update(DBUser).where(DBUser.email == email).values(is_verified=True)
            )
            db.commit()
            return result.rowcount > 0
        except Exception as e:
            logger.error(f"Error verifying {email}: {str(e)}")
            db.rollback()
            raise


class OtpModel(CrudModel):
    """One-time codes for email verification"""

    db_model = DBOtp

    @staticmethod
    def issue(email: str, code: str, ttl_minutes: int, commit: bool = True):
        db = get_db()
        # One live code per address
        db.query(DBOtp).filter(DBOtp.email == email).delete()
        otp = DBOtp.issue(email, code, ttl_minutes)
        db.add(otp)
        if commit:
            db.commit()
        return otp

    @staticmethod
    def find(email: str, code: str):
        db = get_db()
        return db.query(DBOtp).filter(DBOtp.email == email, DBOtp.code == code).first()


class SubmissionModel(CrudModel):
    """Projects and reports share the review workflow"""

    @classmethod
    def set_status(cls, item_id: int, status: SubmissionStatus,
                   feedback: Optional[str] = None) -> bool:
        """Change the review status with a single UPDATE statement"""
        db = get_db()
        values = {'status': SubmissionStatus(status).value, 'updated_at': datetime.utcnow()}
        if feedback is not None:
            values['feedback'] = feedback
        try:
            result = db.execute(
                update(cls.db_model).where(cls.db_model.id == item_id).values(**values)
            )
            db.commit()
            return result.rowcount > 0
        except Exception as e:
            logger.error(f"Error changing status of {cls.db_model.__tablename__} {item_id}: {str(e)}")
            db.rollback()
            raise


class ProjectModel(SubmissionModel):
    db_model = DBProject


class ReportModel(SubmissionModel):
    db_model = DBReport


class TestModel(CrudModel):
    __test__ = False
    db_model = DBTest


class QuestionModel(CrudModel):
    db_model = DBQuestion


class ResourceModel(CrudModel):
    db_model = DBResource

    @staticmethod
    def increment_download(resource_id: int) -> Optional[int]:
        """
        Add one to the download counter of a resource.

        The increment happens in the database (download_count + 1), so
        concurrent downloads never lose an update.

        Returns:
            The new counter value, or None if the resource no longer exists
        """
        db = get_db()
        try:
            result = db.execute(
                update(DBResource)
                .where(DBResource.id == resource_id)
                .values(download_count=DBResource.download_count + 1)
            )
            db.commit()
            if result.rowcount == 0:
                return None
            return db.execute(
                select(DBResource.download_count).where(DBResource.id == resource_id)
            ).scalar_one()
        except Exception as e:
            logger.error(f"Error counting download of resource {resource_id}: {str(e)}")
            db.rollback()
            raise


class UserTestResultModel(CrudModel):
    db_model = DBUserTestResult
