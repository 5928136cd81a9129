"""
Job lifecycle: creation with required roles and travel pay, reads, status
changes, and completion analytics.
"""

import logging

from sqlalchemy import or_

from weddingpro import notifications as events
from weddingpro.errors import InvalidStateTransitionError, NotFoundError, ValidationError
from weddingpro.geo import distance_between, organization_location, venue_location
from weddingpro.models.audit_log import AuditLog
from weddingpro.models.job import JOB_STATUSES, Job, JobRequiredRole
from weddingpro.models.job_assignment import JobAssignment
from weddingpro.models.organization import Organization
from weddingpro.models.venue import Venue
from weddingpro.notifications import safe_notify
from weddingpro.permissions import require
from weddingpro.utils.helpers import as_utc, safe_int, utcnow
from weddingpro.utils.validators import require_fields, validate_time_window

logger = logging.getLogger(__name__)

FINISHED_STATUSES = ('completed', 'cancelled')


def calculate_travel_pay(org, venue):
    """
    Travel pay for a job at ``venue``

    Returns:
        float: org-to-venue miles times the per-mile rate, or 0.0 when the
        distance is unknown or under the organization's minimum
    """
    if org is None or venue is None:
        return 0.0
    distance = distance_between(organization_location(org), venue_location(venue))
    if distance is None:
        return 0.0
    if distance < (org.travel_pay_min_distance or 0.0):
        return 0.0
    return round(distance * (org.travel_pay_rate_per_mile or 0.0), 2)


def _parse_required_roles(raw_roles):
    if not raw_roles:
        raise ValidationError('At least one required role is needed')
    roles = []
    for raw in raw_roles:
        name = (raw or {}).get('role_name')
        if not isinstance(name, str) or not name.strip():
            raise ValidationError('Each required role needs a role_name')
        quantity = safe_int(raw.get('quantity_needed', 1), default=0)
        if quantity < 1:
            raise ValidationError('quantity_needed must be at least 1')
        roles.append((name.strip(), quantity))
    return roles


def create_job(session, actor, data):
    """
    Create a job with its required roles

    Args:
        data (dict): title, start_time, end_time, required_roles
            [{role_name, quantity_needed}], optional description, venue_id,
            status ('draft' or 'available') and travel_pay_offered

    Raises:
        PermissionDeniedError, ValidationError, NotFoundError
    """
    require(actor, 'manage_jobs', message='Only managers and admins can create jobs')
    data = require_fields(data, ['title', 'start_time', 'end_time'])
    start, end = validate_time_window(data['start_time'], data['end_time'])
    roles = _parse_required_roles(data.get('required_roles'))

    status = data.get('status', 'draft')
    if status not in ('draft', 'available'):
        raise ValidationError("A new job must be 'draft' or 'available'")

    venue = None
    if data.get('venue_id'):
        venue = Venue.for_org(actor.org_id, session).filter(Venue.id == data['venue_id']).first()
        if venue is None:
            raise NotFoundError('Venue not found')

    travel_pay_offered = bool(data.get('travel_pay_offered', False))
    travel_pay_amount = None
    if travel_pay_offered:
        org = session.get(Organization, actor.org_id)
        travel_pay_amount = calculate_travel_pay(org, venue)

    job = Job(
        org_id=actor.org_id,
        venue_id=venue.id if venue else None,
        created_by=actor.id,
        title=data['title'].strip(),
        description=data.get('description'),
        start_time=start,
        end_time=end,
        status=status,
        travel_pay_offered=travel_pay_offered,
        travel_pay_amount=travel_pay_amount,
    )
    for role_name, quantity in roles:
        job.required_roles.append(JobRequiredRole(role_name=role_name, quantity_needed=quantity))

    session.add(job)
    session.commit()
    logger.info("Job %s created by %s with %d role(s)", job.id, actor.id, len(roles))
    return job


def _own_job_ids(session, actor):
    return (
        session.query(JobAssignment.job_id)
        .filter(
            JobAssignment.org_id == actor.org_id,
            JobAssignment.user_id == actor.id,
            JobAssignment.status != 'dropped',
        )
    )


def get_job(session, actor, job_id):
    """Fetch a job in the actor's organization; employees only see available or their own jobs"""
    query = Job.for_org(actor.org_id, session).filter(Job.id == job_id)
    if actor.role == 'employee':
        query = query.filter(or_(Job.status == 'available', Job.id.in_(_own_job_ids(session, actor))))
    job = query.first()
    if job is None:
        raise NotFoundError('Job not found')
    return job


def list_jobs(session, actor, status=None, now=None):
    """
    Jobs visible to the actor

    Managers and admins see every job in the organization. Employees see
    available jobs that have not started yet, plus jobs they are assigned to.
    """
    query = Job.for_org(actor.org_id, session)

    if actor.role == 'employee':
        now = as_utc(now) if now is not None else utcnow()
        query = query.filter(or_(
            (Job.status == 'available') & (Job.start_time > now),
            Job.id.in_(_own_job_ids(session, actor)),
        ))

    if status:
        query = query.filter(Job.status == status)

    return query.order_by(Job.start_time.asc()).all()


def update_job_status(session, actor, job_id, new_status):
    """
    Move a job to ``new_status``

    Raises:
        ValidationError: unknown status
        InvalidStateTransitionError: job is finished, or 'completed' requested
    """
    require(actor, 'manage_jobs', message='Only managers and admins can update jobs')
    if new_status not in JOB_STATUSES:
        raise ValidationError(f'Invalid status. Must be one of: {", ".join(JOB_STATUSES)}')
    if new_status == 'completed':
        raise InvalidStateTransitionError('Use the complete action to finish a job')

    job = get_job(session, actor, job_id)
    if job.status in FINISHED_STATUSES:
        raise InvalidStateTransitionError(f'Job is already {job.status}')

    old_status = job.status
    job.status = new_status
    AuditLog.log_action(
        session, actor.org_id, 'jobs', job.id, 'status_changed', user_id=actor.id,
        old_values={'status': old_status}, new_values={'status': new_status},
    )
    session.commit()
    logger.info("Job %s: %s -> %s by %s", job.id, old_status, new_status, actor.id)
    return job


def complete_job(session, actor, job_id, notifier=None, now=None):
    """
    Mark a job completed and record its fill/completion durations

    Live assignments are completed with it so they count toward each
    worker's last-assignment date.
    """
    require(actor, 'manage_jobs', message='Only managers and admins can complete jobs')
    job = get_job(session, actor, job_id)
    if job.status in FINISHED_STATUSES:
        raise InvalidStateTransitionError(f'Job is already {job.status}')
    if job.status == 'draft':
        raise InvalidStateTransitionError('A draft job cannot be completed')

    now = as_utc(now) if now is not None else utcnow()
    old_status = job.status
    job.status = 'completed'
    job.completed_at = now
    if job.first_assigned_at is not None:
        job.time_to_fill_duration = as_utc(job.first_assigned_at) - as_utc(job.created_at)
        job.assignment_to_completion_duration = now - as_utc(job.first_assigned_at)

    live = job.assignments.filter(JobAssignment.status == 'assigned').all()
    for assignment in live:
        assignment.complete(now)
    worker_ids = [a.user_id for a in live]

    AuditLog.log_action(
        session, actor.org_id, 'jobs', job.id, 'completed', user_id=actor.id,
        old_values={'status': old_status},
        new_values={'status': 'completed', 'completed_assignments': len(live)},
    )
    session.commit()
    logger.info("Job %s completed by %s (%d assignment(s))", job.id, actor.id, len(live))

    for user_id in worker_ids:
        safe_notify(
            notifier, 'send_notification', user_id,
            'Job Completed',
            f'{job.title} has been marked as completed. Thank you!',
            {'job_id': job.id},
            events.JOB_COMPLETED,
        )
    return job

