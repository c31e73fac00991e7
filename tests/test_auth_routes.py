"""
Tests for registration, email verification and session login.
"""
from datetime import datetime, timedelta
import re

from mentorhub import mail
from mentorhub.models.database_models import Otp
from mentorhub.utils.db import get_db

from tests.helpers import PASSWORD

REGISTRATION = {
    'first_name': 'Awa',
    'last_name': 'Diallo',
    'email': 'awa@example.com',
    'password': 'Strong#Pass1',
    'password_confirmation': 'Strong#Pass1',
}


def register(client, **overrides):
    with mail.record_messages() as outbox:
        response = client.post('/api/register', json={**REGISTRATION, **overrides})
    return response, outbox


def code_from(message):
    return re.search(r'\b(\d{6})\b', message.body).group(1)


class TestRegister:

    def test_creates_unverified_participant_and_mails_code(self, client):
        response, outbox = register(client)
        assert response.status_code == 201
        body = response.get_json()
        assert body['data']['role'] == 'Participant'
        assert body['data']['is_verified'] is False
        assert 'password' not in body['data']
        assert len(outbox) == 1
        assert outbox[0].recipients == ['awa@example.com']
        assert len(code_from(outbox[0])) == 6

    def test_weak_password(self, client):
        response, outbox = register(client, password='weakpass', password_confirmation='weakpass')
        assert response.status_code == 422
        assert response.get_json()['errors']
        assert outbox == []

    def test_confirmation_mismatch(self, client):
        response, _ = register(client, password_confirmation='Other#Pass1')
        assert response.status_code == 422

    def test_duplicate_email(self, client):
        register(client)
        response, _ = register(client)
        assert response.status_code == 422
        assert response.get_json()['errors'][0]['field'] == 'email'


class TestVerifyAndLogin:

    def test_full_flow(self, client):
        _, outbox = register(client)
        credentials = {'email': 'awa@example.com', 'password': 'Strong#Pass1'}

        response = client.post('/api/login', json=credentials)
        assert response.status_code == 403

        response = client.post('/api/verify-email', json={'email': 'awa@example.com', 'code': '000000'})
        assert response.status_code == 400

        response = client.post('/api/verify-email',
                               json={'email': 'awa@example.com', 'code': code_from(outbox[0])})
        assert response.status_code == 200

        response = client.post('/api/login', json=credentials)
        assert response.status_code == 200
        assert response.get_json()['data']['user']['email'] == 'awa@example.com'

        response = client.get('/api/me')
        assert response.status_code == 200
        data = response.get_json()['data']
        assert data['capabilities']['report']['create'] is True
        assert data['capabilities']['project']['viewAny'] is False

        assert client.post('/api/logout').status_code == 200
        assert client.get('/api/me').status_code == 401

    def test_expired_code(self, app, client):
        _, outbox = register(client)
        with app.app_context():
            db = get_db()
            otp = db.query(Otp).filter_by(email='awa@example.com').one()
            otp.expires_at = datetime.utcnow() - timedelta(minutes=1)
            db.commit()

        response = client.post('/api/verify-email',
                               json={'email': 'awa@example.com', 'code': code_from(outbox[0])})
        assert response.status_code == 400

    def test_wrong_password(self, client, create_user):
        create_user(email='known@example.com')
        response = client.post('/api/login', json={'email': 'known@example.com', 'password': 'Nope#1234'})
        assert response.status_code == 401

    def test_seeded_user_logs_in(self, client, create_user):
        create_user(email='known@example.com')
        response = client.post('/api/login', json={'email': 'known@example.com', 'password': PASSWORD})
        assert response.status_code == 200


def test_me_requires_login(client):
    response = client.get('/api/me')
    assert response.status_code == 401
    assert response.get_json()['message'] == 'Login required'


def test_session_of_deleted_user_is_anonymous(client, login):
    login(9999)
    assert client.get('/api/me').status_code == 401
