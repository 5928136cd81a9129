"""Assigning interested employees to a job's required roles."""

import logging

from sqlalchemy import func

from weddingpro import notifications as events
from weddingpro.errors import ConflictError, InvalidStateTransitionError, NotFoundError, ValidationError
from weddingpro.models.audit_log import AuditLog
from weddingpro.models.job import Job, JobRequiredRole
from weddingpro.models.job_assignment import JobAssignment
from weddingpro.models.job_interest import JobInterest
from weddingpro.models.user import User
from weddingpro.notifications import safe_notify
from weddingpro.permissions import require
from weddingpro.services.scheduling import ensure_no_time_conflict
from weddingpro.utils.helpers import as_utc, utcnow

logger = logging.getLogger(__name__)

ASSIGNABLE_JOB_STATUSES = ('available', 'upcoming')


def _filled(session, job_required_role_id):
    return (
        session.query(func.count(JobAssignment.id))
        .filter(
            JobAssignment.job_required_role_id == job_required_role_id,
            JobAssignment.status != 'dropped',
        )
        .scalar()
    )


def _all_roles_filled(session, job):
    return all(_filled(session, role.id) >= role.quantity_needed for role in job.required_roles)


def assign_job(session, actor, job_id, user_id, job_required_role_id, notifier=None, now=None):
    """
    Assign an employee to one of a job's required roles

    Raises:
        PermissionDeniedError: actor is not a manager/admin
        NotFoundError: job, role or employee not in the organization
        InvalidStateTransitionError: job is not open for staffing
        ConflictError: role full, or employee already on this job
        TimeConflictError: employee is booked elsewhere at the same time
    """
    require(actor, 'assign', message='Only managers and admins can assign jobs')

    job = Job.for_org(actor.org_id, session).filter(Job.id == job_id).first()
    if job is None:
        raise NotFoundError('Job not found')
    if job.status not in ASSIGNABLE_JOB_STATUSES:
        raise InvalidStateTransitionError(f'Cannot assign employees to a {job.status} job')

    role = (
        session.query(JobRequiredRole)
        .filter(JobRequiredRole.id == job_required_role_id, JobRequiredRole.job_id == job.id)
        .first()
    )
    if role is None:
        raise NotFoundError('Required role not found for this job')

    employee = User.for_org(actor.org_id, session).filter(User.id == user_id).first()
    if employee is None:
        raise NotFoundError('Employee not found')
    if not employee.is_employee():
        raise ValidationError('Only employees can be assigned to jobs')

    already = (
        JobAssignment.for_org(actor.org_id, session)
        .filter(
            JobAssignment.job_id == job.id,
            JobAssignment.user_id == employee.id,
            JobAssignment.status == 'assigned',
        )
        .first()
    )
    if already is not None:
        raise ConflictError('This employee is already assigned to this job')

    if _filled(session, role.id) >= role.quantity_needed:
        raise ConflictError(f'All {role.role_name} positions are already filled')

    ensure_no_time_conflict(
        session, actor.org_id, employee.id, job,
        'This employee already has a job assignment that overlaps with this time',
    )

    now = as_utc(now) if now is not None else utcnow()
    assignment = JobAssignment(
        org_id=actor.org_id,
        job_id=job.id,
        user_id=employee.id,
        job_required_role_id=role.id,
        assigned_by=actor.id,
        status='assigned',
        assigned_at=now,
    )
    session.add(assignment)

    if job.first_assigned_at is None:
        job.first_assigned_at = now

    # The worker no longer needs to be in the candidate list
    session.query(JobInterest).filter(
        JobInterest.org_id == actor.org_id,
        JobInterest.job_id == job.id,
        JobInterest.user_id == employee.id,
    ).delete(synchronize_session=False)

    session.flush()
    if job.status == 'available' and _all_roles_filled(session, job):
        job.status = 'upcoming'

    AuditLog.log_action(
        session, actor.org_id, 'jobs', job.id, 'assigned', user_id=actor.id,
        new_values={'assignment_id': assignment.id, 'user_id': employee.id,
                    'role_name': role.role_name, 'job_status': job.status},
    )
    session.commit()
    logger.info("User %s assigned to job %s as %s by %s", employee.id, job.id, role.role_name, actor.id)

    safe_notify(
        notifier, 'send_notification', employee.id,
        'New Job Assignment',
        f'You have been assigned as {role.role_name} for {job.title} on '
        f'{as_utc(job.start_time).strftime("%B %d, %Y")}.',
        {'job_id': job.id, 'job_assignment_id': assignment.id},
        events.JOB_ASSIGNMENT,
    )
    return assignment
