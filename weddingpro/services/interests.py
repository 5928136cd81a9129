"""Employees expressing and withdrawing interest in available jobs."""

import logging

from sqlalchemy.exc import IntegrityError

from weddingpro import notifications as events
from weddingpro.errors import ConflictError, InvalidStateTransitionError, NotFoundError
from weddingpro.models.job import Job
from weddingpro.models.job_interest import JobInterest
from weddingpro.notifications import safe_notify
from weddingpro.permissions import require
from weddingpro.services.scheduling import ensure_no_time_conflict
from weddingpro.utils.helpers import as_utc, utcnow

logger = logging.getLogger(__name__)


def express_interest(session, actor, job_id, notifier=None, now=None):
    """
    Register the actor's interest in an available job

    Raises:
        PermissionDeniedError: actor is not an employee
        NotFoundError: job not in the actor's organization
        InvalidStateTransitionError: job is not accepting interest
        TimeConflictError: actor is already booked during the job
        ConflictError: interest already expressed
    """
    require(actor, 'express_interest', message='Only employees can express interest in jobs')

    job = Job.for_org(actor.org_id, session).filter(Job.id == job_id).first()
    if job is None:
        raise NotFoundError('Job not found')
    if job.status != 'available':
        raise InvalidStateTransitionError('This job is not accepting interest')

    ensure_no_time_conflict(
        session, actor.org_id, actor.id, job,
        'You already have a job assignment that overlaps with this time',
    )

    exists = (
        JobInterest.for_org(actor.org_id, session)
        .filter(JobInterest.job_id == job.id, JobInterest.user_id == actor.id)
        .first()
    )
    if exists is not None:
        raise ConflictError('You have already expressed interest in this job')

    interest = JobInterest(
        org_id=actor.org_id,
        job_id=job.id,
        user_id=actor.id,
        expressed_at=as_utc(now) if now is not None else utcnow(),
    )
    session.add(interest)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError('You have already expressed interest in this job')

    logger.info("User %s expressed interest in job %s", actor.id, job.id)
    safe_notify(
        notifier, 'send_to_role', actor.org_id, 'manager',
        'New Job Interest',
        f'{actor.full_name} is interested in {job.title}.',
        {'job_id': job.id, 'employee_id': actor.id},
        events.JOB_INTEREST_EXPRESSED,
    )
    return interest


def withdraw_interest(session, actor, job_id):
    """Remove the actor's interest in a job; NotFoundError if there is none"""
    interest = (
        JobInterest.for_org(actor.org_id, session)
        .filter(JobInterest.job_id == job_id, JobInterest.user_id == actor.id)
        .first()
    )
    if interest is None:
        raise NotFoundError('You have not expressed interest in this job')

    session.delete(interest)
    session.commit()
    logger.info("User %s withdrew interest in job %s", actor.id, job_id)


def list_interested_job_ids(session, actor):
    """IDs of every job the actor has expressed interest in"""
    rows = (
        session.query(JobInterest.job_id)
        .filter(JobInterest.org_id == actor.org_id, JobInterest.user_id == actor.id)
        .all()
    )
    return [row[0] for row in rows]
