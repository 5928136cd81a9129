"""
HTTP blueprints

Thin JSON views: they read the request, call a service with ``db.session``
and ``current_user``, and serialize the result. Domain errors raised by the
services are rendered by weddingpro.errors.
"""
from flask import current_app


def get_notifier():
    """Notification port configured for this app"""
    return current_app.extensions.get('notifier')
