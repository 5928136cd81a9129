"""
Bearer-token authentication

Tokens are issued by the hosted auth provider and signed with JWT_SECRET.
The ``sub`` claim is the user's profile id. We only verify; there is no
login endpoint here.
"""
import logging

import jwt
from flask import current_app, jsonify, request

from weddingpro import db, login_manager
from weddingpro.utils.helpers import utcnow

logger = logging.getLogger(__name__)


def encode_token(user_id, expires_in=None):
    """Sign a token for ``user_id`` (used by tooling and tests)"""
    now = utcnow()
    payload = {'sub': user_id, 'iat': now}
    if expires_in is not None:
        payload['exp'] = now + expires_in
    return jwt.encode(
        payload,
        current_app.config['JWT_SECRET'],
        algorithm=current_app.config['JWT_ALGORITHM'],
    )


def decode_token(token):
    """Decode and verify a token; returns None when it is invalid or expired"""
    try:
        return jwt.decode(
            token,
            current_app.config['JWT_SECRET'],
            algorithms=[current_app.config['JWT_ALGORITHM']],
        )
    except jwt.ExpiredSignatureError:
        logger.info("Rejected expired token")
    except jwt.InvalidTokenError:
        logger.info("Rejected invalid token")
    return None


@login_manager.request_loader
def load_user_from_request(req):
    from weddingpro.models.user import User

    auth_header = req.headers.get('Authorization', '')
    if not auth_header.startswith('Bearer '):
        return None

    payload = decode_token(auth_header[len('Bearer '):].strip())
    if not payload or not payload.get('sub'):
        return None

    user = db.session.get(User, payload['sub'])
    if user is None or not user.is_active:
        return None
    return user


@login_manager.unauthorized_handler
def unauthorized():
    logger.debug("Unauthenticated request to %s", request.path)
    return jsonify({'error': 'Authentication required', 'code': 'unauthenticated'}), 401
