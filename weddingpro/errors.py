"""
Domain error taxonomy and the app-level handlers that render it

Services raise the DomainError subclasses below for every expected failure;
the handlers turn them into JSON with a stable ``code``. Anything else is an
infrastructure failure: it is logged with its traceback and rendered as a
generic 500 so raw database text never reaches the client.
"""
import logging

from flask import jsonify
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = 'An unexpected error occurred'


class DomainError(Exception):
    """Base class for recoverable, user-facing errors"""
    code = 'domain_error'
    status_code = 400
    default_message = 'The request could not be completed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {'error': self.message, 'code': self.code}


class NotFoundError(DomainError):
    code = 'not_found'
    status_code = 404
    default_message = 'Not found'


class PermissionDeniedError(DomainError):
    code = 'permission_denied'
    status_code = 403
    default_message = 'You do not have permission to perform this action'


class ConflictError(DomainError):
    code = 'conflict'
    status_code = 409
    default_message = 'This would conflict with an existing record'


class TimeConflictError(DomainError):
    code = 'time_conflict'
    status_code = 409
    default_message = 'There is a time conflict with an existing assignment'


class InvalidStateTransitionError(DomainError):
    code = 'invalid_state_transition'
    status_code = 409
    default_message = 'This action is not allowed in the current state'


class ValidationError(DomainError):
    code = 'validation_error'
    status_code = 400
    default_message = 'Invalid input'


def register_error_handlers(app):
    """Install JSON error handlers on the Flask app"""

    @app.errorhandler(DomainError)
    def handle_domain_error(error):
        return jsonify(error.to_dict()), error.status_code

    @app.errorhandler(SQLAlchemyError)
    def handle_database_error(error):
        from weddingpro import db
        logger.exception('Database failure: %s', error)
        db.session.rollback()
        return jsonify({'error': GENERIC_FAILURE_MESSAGE, 'code': 'internal_error'}), 500

    @app.errorhandler(429)
    def ratelimit_handler(error):
        return jsonify({
            'error': 'Too many requests. Please try again later.',
            'code': 'rate_limited',
        }), 429

    @app.errorhandler(Exception)
    def handle_unexpected_error(error):
        if isinstance(error, HTTPException):
            return jsonify({'error': error.description, 'code': error.name.lower().replace(' ', '_')}), error.code
        logger.exception('Unhandled error: %s', error)
        return jsonify({'error': GENERIC_FAILURE_MESSAGE, 'code': 'internal_error'}), 500
