import logging
from flask import current_app, g
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

logger = logging.getLogger(__name__)


def _enable_sqlite_pragmas(dbapi_connection, connection_record):
    """Enable foreign key support so question cascades hold on SQLite."""
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys = ON')
    cursor.execute('PRAGMA busy_timeout = 30000')
    cursor.close()


def create_db_engine(database_uri: str, engine_options: dict = None) -> Engine:
    """Create the SQLAlchemy engine for a database URI."""
    options = dict(engine_options or {})
    if database_uri.startswith('sqlite'):
        options.setdefault('connect_args', {'check_same_thread': False})
        # pool_pre_ping/pool_recycle are meant for server databases
        options.pop('pool_recycle', None)
    engine = create_engine(database_uri, **options)
    if database_uri.startswith('sqlite'):
        event.listen(engine, 'connect', _enable_sqlite_pragmas)
    return engine


def get_db() -> Session:
    """Get the database session for the current request."""
    if 'db' not in g:
        try:
            factory = current_app.extensions['mentorhub_session_factory']
            g.db = factory()
        except Exception as e:
            logger.error(f"Database connection error: {str(e)}")
            raise
    return g.db


def close_db(e=None):
    """Close the database session."""
    db = g.pop('db', None)
    if db is not None:
        try:
            if e is not None:
                db.rollback()
        finally:
            db.close()


def init_db(app):
    """Create the engine, the session factory and the schema."""
    from mentorhub.models.database_models import Base

    try:
        engine = create_db_engine(
            app.config['SQLALCHEMY_DATABASE_URI'],
            app.config.get('SQLALCHEMY_ENGINE_OPTIONS'),
        )
        Base.metadata.create_all(engine)
        app.extensions['mentorhub_engine'] = engine
        app.extensions['mentorhub_session_factory'] = sessionmaker(
            bind=engine, expire_on_commit=False
        )
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization error: {str(e)}")
        raise
