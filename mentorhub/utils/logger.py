import logging
from logging.handlers import RotatingFileHandler
import os


def setup_logger(name, log_dir='logs'):
    """Configure and return a logger instance"""
    logger = logging.getLogger(name)
    logger.setLevel(logging.INFO)

    if logger.handlers:
        return logger

    # Create logs directory if it doesn't exist
    os.makedirs(log_dir, exist_ok=True)

    # File handler
    file_handler = RotatingFileHandler(os.path.join(log_dir, 'app.log'), maxBytes=10240, backupCount=10)
    file_handler.setFormatter(logging.Formatter(
        '%(asctime)s %(levelname)s: %(message)s [in %(pathname)s:%(lineno)d]'
    ))

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(
        '%(levelname)s: %(message)s'
    ))

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger


# Create a default logger instance; module loggers under mentorhub.* propagate to it
logger = setup_logger('mentorhub', os.getenv('LOG_DIR', 'logs'))
