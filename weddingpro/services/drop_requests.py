"""
Drop-request workflow.

    pending --approve--> approved
    pending --reject---> rejected
    pending --escalate-> escalated --approve/reject--> approved / rejected

approved and rejected are terminal. Once escalated, only an admin may
resolve the request. Every transition is a single conditional UPDATE
(``... WHERE status IN (<allowed>)``) so two people deciding the same request
at once produce exactly one winner; the loser sees
InvalidStateTransitionError. Notifications go out only after the commit.
"""

import logging
from datetime import timedelta

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from weddingpro import notifications as events
from weddingpro.errors import (
    ConflictError,
    InvalidStateTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from weddingpro.models.audit_log import AuditLog
from weddingpro.models.drop_request import ACTIVE_STATUSES, DropRequest
from weddingpro.models.job import Job
from weddingpro.models.job_assignment import JobAssignment
from weddingpro.notifications import safe_notify
from weddingpro.permissions import ANY_STATUS, PERMISSIONS, SYSTEM_ACTOR, can, require
from weddingpro.utils.helpers import as_utc, isoformat, utcnow

logger = logging.getLogger(__name__)

DEFAULT_SLA_WINDOW = timedelta(hours=24)

# action -> (statuses it may leave from, status it lands in)
TRANSITIONS = {
    'approve': (frozenset({'pending', 'escalated'}), 'approved'),
    'reject': (frozenset({'pending', 'escalated'}), 'rejected'),
    'escalate': (frozenset({'pending'}), 'escalated'),
}


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def is_escalation_due(drop_request, now=None, sla_window=DEFAULT_SLA_WINDOW):
    """True when a pending request has waited at least ``sla_window``"""
    if drop_request.status != 'pending' or drop_request.requested_at is None:
        return False
    now = as_utc(now) if now is not None else utcnow()
    return now - as_utc(drop_request.requested_at) >= sla_window


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------

def create_drop_request(session, actor, job_assignment_id, reason, notifier=None, now=None):
    """
    File a request to be released from one of the actor's own assignments

    Raises:
        PermissionDeniedError: actor is not an employee
        ValidationError: reason is blank
        NotFoundError: assignment missing, not the actor's, or no longer live
        ConflictError: an active request already exists for the assignment
    """
    require(actor, 'create', message='Only employees can request to drop a job')

    reason = reason.strip() if isinstance(reason, str) else ''
    if not reason:
        raise ValidationError('A reason is required to request a drop')

    assignment = (
        JobAssignment.for_org(actor.org_id, session)
        .filter(JobAssignment.id == job_assignment_id, JobAssignment.user_id == actor.id)
        .first()
    )
    if assignment is None or assignment.status != 'assigned':
        raise NotFoundError('Job assignment not found or does not belong to you')

    existing = (
        DropRequest.for_org(actor.org_id, session)
        .filter(
            DropRequest.job_assignment_id == assignment.id,
            DropRequest.status.in_(ACTIVE_STATUSES),
        )
        .first()
    )
    if existing is not None:
        raise ConflictError('You already have an active drop request for this job')

    now = as_utc(now) if now is not None else utcnow()
    drop_request = DropRequest(
        org_id=actor.org_id,
        job_assignment_id=assignment.id,
        user_id=actor.id,
        reason=reason,
        status='pending',
        requested_at=now,
    )
    session.add(drop_request)
    try:
        session.flush()
        AuditLog.log_action(
            session, actor.org_id, 'drop_requests', drop_request.id, 'created',
            user_id=actor.id, new_values={'status': 'pending', 'reason': reason},
        )
        session.commit()
    except IntegrityError:
        # Lost a race with a concurrent create; the partial unique index held
        session.rollback()
        raise ConflictError('You already have an active drop request for this job')

    logger.info("Drop request %s created for assignment %s", drop_request.id, assignment.id)

    job = assignment.job
    safe_notify(
        notifier, 'send_to_role', actor.org_id, 'manager',
        'New Drop Request',
        f'{actor.full_name} has requested to drop their {_role_name(assignment)} assignment '
        f'for {job.title} on {_job_date(job)}.',
        {'drop_request_id': drop_request.id, 'job_assignment_id': assignment.id,
         'employee_id': actor.id, 'job_id': job.id},
        events.DROP_REQUEST_CREATED,
    )
    return drop_request


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def _load_for_transition(session, actor, action, drop_request_id):
    if not can(actor, action):
        raise PermissionDeniedError(f'You do not have permission to {action} drop requests')

    query = session.query(DropRequest).filter(DropRequest.id == drop_request_id)
    if actor.role != 'system':
        query = query.filter(DropRequest.org_id == actor.org_id)
    drop_request = query.first()
    if drop_request is None:
        raise NotFoundError('Drop request not found')
    return drop_request


def _check_transition(actor, action, drop_request):
    """State check first, then whether this role may act in the current state"""
    allowed_from, _ = TRANSITIONS[action]

    if drop_request.is_terminal:
        raise InvalidStateTransitionError('This drop request has already been resolved')
    if drop_request.status not in allowed_from:
        raise InvalidStateTransitionError(f'This drop request is already {drop_request.status}')

    if not can(actor, action, drop_request):
        if drop_request.status == 'escalated':
            raise PermissionDeniedError(f'Only an admin can {action} an escalated drop request')
        raise PermissionDeniedError()


def _expected_statuses(actor, action):
    """Statuses the UPDATE may match: the action's sources narrowed to the actor's role"""
    allowed_from, _ = TRANSITIONS[action]
    role_statuses = PERMISSIONS.get((actor.role, action), ANY_STATUS)
    if role_statuses is ANY_STATUS:
        return allowed_from
    return allowed_from & role_statuses


def _update_where(session, drop_request, expected_statuses, values):
    """Compare-and-set on status; returns the number of rows changed"""
    result = session.execute(
        update(DropRequest)
        .where(
            DropRequest.id == drop_request.id,
            DropRequest.org_id == drop_request.org_id,
            DropRequest.status.in_(expected_statuses),
        )
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    return result.rowcount


def _transition(session, actor, drop_request, action, values, side_effects=None):
    _, new_status = TRANSITIONS[action]
    old_status = drop_request.status
    values = dict(values, status=new_status, updated_at=values.get('updated_at') or utcnow())

    if _update_where(session, drop_request, _expected_statuses(actor, action), values) != 1:
        session.rollback()
        logger.info("Drop request %s %s lost a concurrent update", drop_request.id, action)
        raise InvalidStateTransitionError('This drop request was already updated by someone else')

    if side_effects is not None:
        try:
            side_effects()
        except InvalidStateTransitionError:
            session.rollback()
            raise

    AuditLog.log_action(
        session, drop_request.org_id, 'drop_requests', drop_request.id, new_status,
        user_id=actor.id,
        old_values={'status': old_status},
        new_values={k: (isoformat(v) if hasattr(v, 'isoformat') else v) for k, v in values.items()},
    )
    session.commit()
    session.refresh(drop_request)
    logger.info("Drop request %s: %s -> %s by %s", drop_request.id, old_status, new_status,
                actor.id or actor.role)
    return drop_request


def _release_assignment(session, drop_request):
    """Free the worker's slot and reopen a fully staffed job"""
    result = session.execute(
        update(JobAssignment)
        .where(
            JobAssignment.id == drop_request.job_assignment_id,
            JobAssignment.status == 'assigned',
        )
        .values(status='dropped', updated_at=utcnow())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise InvalidStateTransitionError('The assignment is no longer active and cannot be dropped')

    job_id = (
        session.query(JobAssignment.job_id)
        .filter(JobAssignment.id == drop_request.job_assignment_id)
        .scalar()
    )
    session.query(Job).filter(
        Job.id == job_id,
        Job.org_id == drop_request.org_id,
        Job.status == 'upcoming',
    ).update({'status': 'available'}, synchronize_session=False)


def approve_drop_request(session, actor, drop_request_id, notifier=None, now=None):
    """
    Approve a pending (or, for admins, escalated) request

    The assignment is marked dropped in the same transaction. A request whose
    assignment is no longer live (the job was completed meanwhile) can only
    be rejected.
    """
    drop_request = _load_for_transition(session, actor, 'approve', drop_request_id)
    _check_transition(actor, 'approve', drop_request)
    assignment = drop_request.job_assignment
    if assignment is None or assignment.status != 'assigned':
        raise InvalidStateTransitionError('The assignment is no longer active and cannot be dropped')

    now = as_utc(now) if now is not None else utcnow()
    _transition(
        session, actor, drop_request, 'approve',
        {'resolved_at': now, 'resolved_by_user_id': actor.id, 'updated_at': now},
        side_effects=lambda: _release_assignment(session, drop_request),
    )

    job = drop_request.job_assignment.job
    safe_notify(
        notifier, 'send_notification', drop_request.user_id,
        'Drop Request Approved',
        f'Your request to drop the assignment for {job.title} on {_job_date(job)} has been approved.',
        {'drop_request_id': drop_request.id, 'job_id': job.id},
        events.DROP_REQUEST_APPROVED,
    )
    return drop_request


def reject_drop_request(session, actor, drop_request_id, rejection_reason=None, notifier=None, now=None):
    """Reject a pending (or, for admins, escalated) request"""
    drop_request = _load_for_transition(session, actor, 'reject', drop_request_id)
    _check_transition(actor, 'reject', drop_request)

    now = as_utc(now) if now is not None else utcnow()
    _transition(
        session, actor, drop_request, 'reject',
        {'resolved_at': now, 'resolved_by_user_id': actor.id,
         'rejection_reason': (rejection_reason or '').strip() or None, 'updated_at': now},
    )

    job = drop_request.job_assignment.job
    body = f'Your request to drop the assignment for {job.title} on {_job_date(job)} has been rejected.'
    if drop_request.rejection_reason:
        body += f' Reason: {drop_request.rejection_reason}'
    safe_notify(
        notifier, 'send_notification', drop_request.user_id,
        'Drop Request Rejected', body,
        {'drop_request_id': drop_request.id, 'job_id': job.id,
         'rejection_reason': drop_request.rejection_reason},
        events.DROP_REQUEST_REJECTED,
    )
    return drop_request


def escalate_drop_request(session, actor, drop_request_id, notifier=None, reason=None, now=None):
    """
    Hand a pending request to the organization's admins

    ``actor`` is a manager/admin, or SYSTEM_ACTOR when the SLA timer fires.
    """
    drop_request = _load_for_transition(session, actor, 'escalate', drop_request_id)
    _check_transition(actor, 'escalate', drop_request)

    now = as_utc(now) if now is not None else utcnow()
    _transition(
        session, actor, drop_request, 'escalate',
        {'escalated_at': now, 'escalated_by_user_id': actor.id,
         'escalation_reason': (reason or '').strip() or None, 'updated_at': now},
    )

    job = drop_request.job_assignment.job
    employee = drop_request.user.full_name if drop_request.user else 'An employee'
    safe_notify(
        notifier, 'send_to_role', drop_request.org_id, 'admin',
        'Drop Request Escalated',
        f'A drop request from {employee} for {job.title} on {_job_date(job)} has been escalated. '
        f'Reason: {drop_request.escalation_reason or "No reason provided"}',
        {'drop_request_id': drop_request.id, 'job_id': job.id,
         'escalation_reason': drop_request.escalation_reason},
        events.DROP_REQUEST_ESCALATED,
    )
    return drop_request


# ---------------------------------------------------------------------------
# SLA sweep
# ---------------------------------------------------------------------------

def escalate_overdue_requests(session, notifier=None, now=None, sla_window=DEFAULT_SLA_WINDOW, org_id=None):
    """
    Escalate every pending request older than ``sla_window``

    Returns:
        int: number of requests escalated by this call
    """
    now = as_utc(now) if now is not None else utcnow()
    cutoff = now - sla_window

    query = session.query(DropRequest.id).filter(
        DropRequest.status == 'pending',
        DropRequest.requested_at <= cutoff,
    )
    if org_id is not None:
        query = query.filter(DropRequest.org_id == org_id)
    due_ids = [row[0] for row in query.all()]

    escalated = 0
    for drop_request_id in due_ids:
        try:
            escalate_drop_request(
                session, SYSTEM_ACTOR, drop_request_id, notifier,
                reason=f'Not resolved within {_format_window(sla_window)}', now=now,
            )
            escalated += 1
        except (InvalidStateTransitionError, NotFoundError):
            logger.info("Drop request %s resolved before it could be escalated", drop_request_id)

    if escalated:
        logger.info("Escalated %d overdue drop request(s)", escalated)
    return escalated


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------

DEFAULT_VIEW_STATUSES = {
    'employee': None,
    'manager': ('pending',),
    'admin': ('escalated',),
}


def list_drop_requests(session, actor, statuses=None, notifier=None, now=None,
                       sla_window=DEFAULT_SLA_WINDOW):
    """
    Drop requests visible to the actor

    Employees see their own; managers and admins see their organization's.
    Managers and admins first escalate anything past the SLA so the list they
    act on is current.
    """
    require(actor, 'view')

    if actor.role in ('manager', 'admin'):
        escalate_overdue_requests(session, notifier, now=now, sla_window=sla_window, org_id=actor.org_id)

    query = DropRequest.for_org(actor.org_id, session)
    if actor.role == 'employee':
        query = query.filter(DropRequest.user_id == actor.id)

    if statuses is None:
        statuses = DEFAULT_VIEW_STATUSES.get(actor.role)
    if statuses:
        query = query.filter(DropRequest.status.in_(statuses))

    return query.order_by(DropRequest.requested_at.desc()).all()


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------

def _job_date(job):
    return as_utc(job.start_time).strftime('%B %d, %Y') if job and job.start_time else 'unknown date'


def _role_name(assignment):
    role = assignment.required_role
    return role.role_name if role else 'staff'


def _format_window(window):
    hours = int(window.total_seconds() // 3600)
    return f'{hours} hours' if hours else f'{int(window.total_seconds())} seconds'
