"""
Shared fixtures: an app backed by a temporary SQLite file, seeded users
and a session-based login helper.
"""
import itertools

import pytest

from mentorhub import create_app
from mentorhub.models import UserModel
from mentorhub.rbac import Role

from tests.helpers import PASSWORD


@pytest.fixture
def app(tmp_path):
    """Create an application for testing"""
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'mentorhub.db'}",
        'UPLOAD_FOLDER': str(tmp_path / 'storage'),
        'MAIL_SUPPRESS_SEND': True,
        'MAIL_DEFAULT_SENDER': 'noreply@mentorhub.test',
    })
    yield app
    app.extensions['mentorhub_engine'].dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def create_user(app):
    """Insert a verified user and return its id"""
    counter = itertools.count(1)

    def _create(role=Role.PARTICIPANT, email=None, verified=True):
        email = email or f"user{next(counter)}@example.com"
        with app.app_context():
            user = UserModel.create_user('Test', 'User', email, PASSWORD, role=str(role))
            if verified:
                UserModel.mark_verified(email)
            return user.id
    return _create


@pytest.fixture
def admin_id(create_user):
    return create_user(Role.ADMIN)


@pytest.fixture
def mentor_id(create_user):
    return create_user(Role.MENTOR)


@pytest.fixture
def participant_id(create_user):
    return create_user(Role.PARTICIPANT)


@pytest.fixture
def login(client):
    """Put a user id in the session, as /api/login does"""
    def _login(user_id):
        with client.session_transaction() as sess:
            sess['user_id'] = user_id
    return _login


@pytest.fixture
def add_row(app):
    """Insert a row through a model class and return its id"""
    def _add(model, **fields):
        with app.app_context():
            return model.create(**fields).id
    return _add

