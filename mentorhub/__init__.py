# mentorhub/__init__.py
from flask import Flask
from flask_cors import CORS
from flask_mail import Mail
from pydantic import ValidationError
from werkzeug.exceptions import HTTPException
import os

from mentorhub.config import Config
from mentorhub.rbac.errors import AccessDenied
from mentorhub.utils.db import init_db, close_db
from mentorhub.utils.logger import logger
from mentorhub.utils.responses import (
    forbidden_response, not_found_response, server_error_response, validation_error_response
)

mail = Mail()


def register_error_handlers(app):
    """Turn exceptions escaping a route into the JSON envelope"""

    @app.errorhandler(AccessDenied)
    def handle_access_denied(e):
        return forbidden_response(e.message)

    @app.errorhandler(ValidationError)
    def handle_validation_error(e):
        errors = [
            {'field': '.'.join(str(part) for part in error['loc']), 'message': error['msg']}
            for error in e.errors()
        ]
        return validation_error_response(errors)

    @app.errorhandler(404)
    def handle_not_found(e):
        return not_found_response()

    @app.errorhandler(HTTPException)
    def handle_http_error(e):
        return server_error_response(e.description, status=e.code)

    @app.errorhandler(Exception)
    def handle_unexpected_error(e):
        logger.error(f"Unhandled error: {str(e)}", exc_info=True)
        return server_error_response('Server error', error=str(e))


def create_app(test_config=None):
    app = Flask(__name__, instance_relative_config=True)

    # Load configuration
    app.config.from_object(Config)
    if test_config is not None:
        app.config.update(test_config)

    # SQLAlchemy may be configured through DATABASE_URL alone
    if test_config and 'DATABASE_URL' in test_config and 'SQLALCHEMY_DATABASE_URI' not in test_config:
        app.config['SQLALCHEMY_DATABASE_URI'] = test_config['DATABASE_URL']

    # Configure CORS for the API
    CORS(app,
         resources={
             r"/api/*": {
                 "origins": app.config['CORS_ORIGINS'],
                 "methods": ["GET", "POST", "PUT", "DELETE", "OPTIONS"],
                 "allow_headers": ["Content-Type", "Authorization", "X-Requested-With"],
                 "supports_credentials": True,
                 "expose_headers": ["Content-Type", "Content-Disposition"]
             }
         },
         supports_credentials=True)

    # Initialize Flask-Mail
    mail.init_app(app)

    os.makedirs(app.instance_path, exist_ok=True)
    os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)

    # Register database cleanup function
    app.teardown_appcontext(close_db)

    # Initialize database
    with app.app_context():
        init_db(app)

    # Register blueprints (import here to avoid circular imports)
    from mentorhub.routes.auth import bp as auth_bp
    from mentorhub.routes.users import bp as users_bp
    from mentorhub.routes.projects import bp as projects_bp
    from mentorhub.routes.reports import bp as reports_bp
    from mentorhub.routes.tests import bp as tests_bp
    from mentorhub.routes.questions import bp as questions_bp
    from mentorhub.routes.resources import bp as resources_bp
    from mentorhub.routes.results import bp as results_bp

    app.register_blueprint(auth_bp, url_prefix='/api')
    app.register_blueprint(users_bp, url_prefix='/api/participants')
    app.register_blueprint(projects_bp, url_prefix='/api/projects')
    app.register_blueprint(reports_bp, url_prefix='/api/reports')
    app.register_blueprint(tests_bp, url_prefix='/api/tests')
    app.register_blueprint(questions_bp, url_prefix='/api/questions')
    app.register_blueprint(resources_bp, url_prefix='/api/resources')
    app.register_blueprint(results_bp, url_prefix='/api/user-test-results')

    register_error_handlers(app)

    logger.info("MentorHub app created")
    return app
