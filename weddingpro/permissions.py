"""
Role permissions for WeddingPro

One declarative table answers "may this role do this action, and in which
drop-request states". Views and services ask ``can``/``require`` instead of
comparing role strings inline.
"""
from weddingpro.errors import PermissionDeniedError

# Value for actions that do not depend on the resource's status
ANY_STATUS = None

PENDING = frozenset({'pending'})
OPEN = frozenset({'pending', 'escalated'})

# (role, action) -> statuses the role may act in. Missing keys are denied.
PERMISSIONS = {
    # --- Admin ---
    ('admin', 'view'): ANY_STATUS,
    ('admin', 'approve'): OPEN,
    ('admin', 'reject'): OPEN,
    ('admin', 'escalate'): PENDING,
    ('admin', 'view_candidates'): ANY_STATUS,
    ('admin', 'assign'): ANY_STATUS,
    ('admin', 'manage_jobs'): ANY_STATUS,
    ('admin', 'manage_venues'): ANY_STATUS,

    # --- Manager: escalated requests are read-only ---
    ('manager', 'view'): ANY_STATUS,
    ('manager', 'approve'): PENDING,
    ('manager', 'reject'): PENDING,
    ('manager', 'escalate'): PENDING,
    ('manager', 'view_candidates'): ANY_STATUS,
    ('manager', 'assign'): ANY_STATUS,
    ('manager', 'manage_jobs'): ANY_STATUS,
    ('manager', 'manage_venues'): ANY_STATUS,

    # --- Employee ---
    ('employee', 'create'): ANY_STATUS,
    ('employee', 'view'): ANY_STATUS,
    ('employee', 'express_interest'): ANY_STATUS,

    # --- SLA timer ---
    ('system', 'escalate'): PENDING,
}


class SystemActor:
    """Actor used by the scheduler; not bound to any organization"""
    id = None
    role = 'system'
    org_id = None

    def __repr__(self):
        return '<SystemActor>'


SYSTEM_ACTOR = SystemActor()


def can(actor, action, resource=None):
    """
    Check whether an actor may perform an action

    Args:
        actor: object with ``role`` and ``org_id`` (a User or SYSTEM_ACTOR)
        action (str): e.g. 'approve', 'view_candidates'
        resource: optional object with ``org_id`` and, for drop requests, ``status``

    Returns:
        bool: True if allowed
    """
    if actor is None:
        return False

    key = (getattr(actor, 'role', None), action)
    if key not in PERMISSIONS:
        return False

    if resource is None:
        return True

    if actor.role != 'system' and getattr(resource, 'org_id', None) != actor.org_id:
        return False

    allowed_statuses = PERMISSIONS[key]
    if allowed_statuses is not ANY_STATUS and getattr(resource, 'status', None) not in allowed_statuses:
        return False

    return True


def require(actor, action, resource=None, message=None):
    """Like ``can`` but raises PermissionDeniedError when denied"""
    if not can(actor, action, resource):
        raise PermissionDeniedError(message)
