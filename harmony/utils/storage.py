"""
Storage error translation.

Wraps service methods so any SQLAlchemy failure rolls back the session and
surfaces as TransientStorageError. Nothing half-written is left in the
session after a failure.
"""
import logging
from functools import wraps

from sqlalchemy.exc import SQLAlchemyError

from ..extensions import db
from .exceptions import TransientStorageError

logger = logging.getLogger(__name__)


def translate_storage_errors(operation: str):
    """Decorator: convert SQLAlchemyError raised by the wrapped call."""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            try:
                return f(*args, **kwargs)
            except SQLAlchemyError as e:
                db.session.rollback()
                logger.error('Storage failure during %s: %s', operation, e)
                raise TransientStorageError(operation, e) from e
        return wrapper
    return decorator
