"""
Multi-tenancy helpers for WeddingPro
Every tenant-owned query is scoped by the caller's organization
"""
from flask import g, jsonify
from flask_login import current_user
from functools import wraps


def org_required(f):
    """
    Decorator to ensure the authenticated user belongs to an active organization
    Use on routes that require tenant context (after login_required)
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        org_id = getattr(current_user, 'org_id', None)

        if not org_id:
            return jsonify({
                'error': 'You must be part of an organization',
                'code': 'permission_denied'
            }), 403

        # Load organization from database
        from weddingpro.models.organization import Organization
        org = Organization.query.filter_by(id=org_id).first()

        if not org:
            return jsonify({
                'error': 'Organization not found',
                'code': 'not_found'
            }), 404

        # Check organization status
        if not org.is_active():
            return jsonify({
                'error': f'Organization is {org.status}',
                'code': 'permission_denied'
            }), 403

        # Store organization in g for use in views
        g.org = org
        g.org_id = org.id

        return f(*args, **kwargs)

    return decorated_function


def get_current_org_id():
    """
    Helper function to get current organization ID

    Returns:
        str: Current organization ID or None
    """
    return g.get('org_id')
