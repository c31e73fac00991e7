from flask import Blueprint, current_app, g, session
from flask_mail import Message
import logging
import secrets

from mentorhub import mail
from mentorhub.models import OtpModel, UserModel
from mentorhub.rbac import get_capabilities
from mentorhub.rbac.decorators import login_required
from mentorhub.schemas import LoginRequest, RegisterRequest, VerifyEmailRequest
from mentorhub.utils.db import get_db
from mentorhub.utils.requests import parse_payload
from mentorhub.utils.responses import (
    created_response, forbidden_response, not_found_response, server_error_response,
    success_response, unauthorized_response, validation_error_response,
)

logger = logging.getLogger(__name__)
bp = Blueprint('auth', __name__)


def generate_otp() -> str:
    """Six digit verification code"""
    return str(100000 + secrets.randbelow(900000))


def send_otp_mail(email: str, first_name: str, code: str, ttl_minutes: int) -> None:
    msg = Message('Verify your email', recipients=[email])
    msg.body = f'''Hello {first_name},

Your MentorHub verification code is: {code}

This code will expire in {ttl_minutes} minutes.

If you did not create an account, you can ignore this email.'''
    mail.send(msg)


@bp.route('/register', methods=['POST'])
def register():
    payload = parse_payload(RegisterRequest)

    if UserModel.get_user_by_email(payload.email):
        return validation_error_response([{'field': 'email', 'message': 'Email already registered'}])

    db = get_db()
    ttl_minutes = current_app.config['OTP_TTL_MINUTES']
    try:
        user = UserModel.create_user(
            first_name=payload.first_name,
            last_name=payload.last_name,
            email=payload.email,
            password=payload.password,
            commit=False
        )
        code = generate_otp()
        OtpModel.issue(user.email, code, ttl_minutes, commit=False)

        try:
            send_otp_mail(user.email, user.first_name, code, ttl_minutes)
        except Exception as e:
            db.rollback()
            logger.error(f"Failed to send verification email to {payload.email}: {str(e)}")
            return server_error_response('Failed to send the verification email', error=str(e))

        db.commit()
        db.refresh(user)
    except ValueError as e:
        return validation_error_response([{'field': 'email', 'message': str(e)}])
    except Exception as e:
        db.rollback()
        logger.error(f"Registration error: {str(e)}")
        return server_error_response('Registration failed', error=str(e))

    logger.info(f"Registered user {user.id}; verification code sent to {user.email}")
    return created_response(UserModel.to_dict(user), 'User registered. Please verify your email address.')


@bp.route('/verify-email', methods=['POST'])
def verify_email():
    payload = parse_payload(VerifyEmailRequest)

    otp = OtpModel.find(payload.email, payload.code)
    if otp is None or otp.is_expired():
        return validation_error_response(None, 'Invalid or expired code.', status=400)

    user = UserModel.get_user_by_email(payload.email)
    if user is None:
        return not_found_response('User not found')

    try:
        UserModel.mark_verified(payload.email)
        OtpModel.delete(otp)
    except Exception as e:
        logger.error(f"Email verification error for {payload.email}: {str(e)}")
        return server_error_response('Email verification failed', error=str(e))

    logger.info(f"User {user.id} verified their email")
    return success_response(None, 'Email verified successfully.')


@bp.route('/login', methods=['POST'])
def login():
    payload = parse_payload(LoginRequest)

    user = UserModel.get_user_by_email(payload.email)
    if not UserModel.check_password(user, payload.password):
        logger.info(f"Failed login for {payload.email}")
        return unauthorized_response('Invalid email or password')

    if not user.is_verified:
        return forbidden_response('Please verify your email address.')

    session.clear()
    session.permanent = True
    session['user_id'] = user.id
    session['role'] = user.role
    logger.info(f"User {user.id} logged in")

    return success_response({'user': UserModel.to_dict(user)}, 'Logged in successfully')


@bp.route('/logout', methods=['POST'])
@login_required
def logout():
    logger.info(f"User {g.actor.id} logged out")
    session.clear()
    return success_response(None, 'Logged out successfully.')


@bp.route('/me', methods=['GET'])
@login_required
def me():
    """The logged-in user and what they may list or create"""
    user = UserModel.get(g.actor.id)
    return success_response({
        'user': UserModel.to_dict(user),
        'capabilities': get_capabilities(g.actor),
    })
