"""
Ranking of interested employees for a job opening.

Managers pick one of six orderings; the default favours whoever has gone
longest without work. Ranking is a pure read.
"""

import logging

from sqlalchemy import func

from weddingpro.errors import NotFoundError
from weddingpro.geo import distance_between, venue_location, worker_location
from weddingpro.models.job import Job
from weddingpro.models.job_assignment import JobAssignment
from weddingpro.models.job_interest import JobInterest
from weddingpro.permissions import require
from weddingpro.utils.helpers import as_utc, isoformat

logger = logging.getLogger(__name__)

SORT_OPTIONS = (
    'lastAssignmentDate_asc',
    'lastAssignmentDate_desc',
    'distance_asc',
    'distance_desc',
    'interestDate_asc',
    'interestDate_desc',
)
DEFAULT_SORT_OPTION = 'lastAssignmentDate_asc'


def normalize_sort_option(sort_option):
    """Map unknown or missing sort options to the default"""
    if sort_option in SORT_OPTIONS:
        return sort_option
    if sort_option:
        logger.info("Unknown sort option %r, using %s", sort_option, DEFAULT_SORT_OPTION)
    return DEFAULT_SORT_OPTION


def _timestamp(dt):
    return as_utc(dt).timestamp()


def _tiebreak(candidate):
    return (_timestamp(candidate['expressed_at']), candidate['id'])


def _sort_key(sort_option):
    """Build a key function; the leading flag places missing values."""
    field, direction = sort_option.split('_')
    descending = direction == 'desc'

    if field == 'distance':
        # Unknown distance sorts last whichever way we go
        def key(c):
            d = c['distance']
            if d is None:
                return (1, 0.0) + _tiebreak(c)
            return (0, -d if descending else d) + _tiebreak(c)

    elif field == 'lastAssignmentDate':
        # Never worked = idle forever: first when ascending, last when descending
        def key(c):
            last = c['last_assignment_date']
            if last is None:
                return (1 if descending else 0, 0.0) + _tiebreak(c)
            ts = _timestamp(last)
            return (0 if descending else 1, -ts if descending else ts) + _tiebreak(c)

    else:
        def key(c):
            ts = _timestamp(c['expressed_at'])
            return (-ts if descending else ts, c['id'])

    return key


def sort_candidates(candidates, sort_option):
    """Return a new list of candidate dicts ordered by ``sort_option``.

    Each candidate needs ``id``, ``expressed_at``, ``distance`` and
    ``last_assignment_date``. Ties fall back to earliest interest.
    """
    return sorted(candidates, key=_sort_key(normalize_sort_option(sort_option)))


def _last_completed_dates(session, org_id, user_ids, before):
    """Most recent completion per worker strictly before ``before``"""
    if not user_ids:
        return {}
    rows = (
        session.query(JobAssignment.user_id, func.max(JobAssignment.completed_at))
        .filter(
            JobAssignment.org_id == org_id,
            JobAssignment.user_id.in_(user_ids),
            JobAssignment.status == 'completed',
            JobAssignment.completed_at.isnot(None),
            JobAssignment.completed_at < before,
        )
        .group_by(JobAssignment.user_id)
        .all()
    )
    return {user_id: as_utc(completed_at) for user_id, completed_at in rows}


def interested_employees(session, job):
    """Build InterestedEmployee dicts for every interest in ``job`` (unsorted)"""
    interests = (
        session.query(JobInterest)
        .filter(JobInterest.org_id == job.org_id, JobInterest.job_id == job.id)
        .all()
    )
    if not interests:
        return []

    last_dates = _last_completed_dates(
        session, job.org_id, [i.user_id for i in interests], job.start_time
    )
    venue_point = venue_location(job.venue)

    candidates = []
    for interest in interests:
        candidates.append({
            'id': interest.id,
            'user_id': interest.user_id,
            'job_id': interest.job_id,
            'expressed_at': as_utc(interest.expressed_at),
            'profile': interest.user.profile_summary() if interest.user else None,
            'distance': distance_between(worker_location(interest.user), venue_point),
            'last_assignment_date': last_dates.get(interest.user_id),
        })
    return candidates


def rank_candidates(session, job_id, sort_option, actor):
    """
    Order the employees interested in a job

    Args:
        session: SQLAlchemy session
        job_id: ID of the job
        sort_option: one of SORT_OPTIONS; anything else means the default
        actor: the manager/admin asking

    Returns:
        list: InterestedEmployee dicts in ranked order

    Raises:
        NotFoundError: job does not exist
        PermissionDeniedError: actor cannot see this job's candidates
    """
    job = session.get(Job, job_id)
    if job is None:
        raise NotFoundError('Job not found')

    require(actor, 'view_candidates', job,
            'You can only view interested employees for jobs in your organization')

    return sort_candidates(interested_employees(session, job), sort_option)


def role_capacity(session, job):
    """Required vs. filled count for each of the job's roles"""
    filled = dict(
        session.query(JobAssignment.job_required_role_id, func.count(JobAssignment.id))
        .filter(
            JobAssignment.org_id == job.org_id,
            JobAssignment.job_id == job.id,
            JobAssignment.status != 'dropped',
        )
        .group_by(JobAssignment.job_required_role_id)
        .all()
    )
    return [
        {
            'id': role.id,
            'role_name': role.role_name,
            'quantity_needed': role.quantity_needed,
            'assigned': filled.get(role.id, 0),
        }
        for role in job.required_roles
    ]


def candidate_to_dict(candidate):
    """JSON-ready copy of an InterestedEmployee"""
    data = dict(candidate)
    data['expressed_at'] = isoformat(candidate['expressed_at'])
    data['last_assignment_date'] = isoformat(candidate['last_assignment_date'])
    return data
