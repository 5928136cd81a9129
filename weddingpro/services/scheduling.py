"""Time-conflict detection for job assignments and interest."""

import logging

from weddingpro.errors import TimeConflictError
from weddingpro.models.job import Job
from weddingpro.models.job_assignment import JobAssignment
from weddingpro.utils.helpers import parse_datetime

logger = logging.getLogger(__name__)


def has_time_conflict(candidate_start, candidate_end, existing_start, existing_end):
    """Return True if two half-open windows ``[start, end)`` overlap.

    Bounds may be datetimes or ISO-8601 strings; they are compared as UTC
    instants. A missing or unparsable bound, or an empty window
    (``start >= end``), never conflicts.
    """
    cs = parse_datetime(candidate_start)
    ce = parse_datetime(candidate_end)
    es = parse_datetime(existing_start)
    ee = parse_datetime(existing_end)

    if None in (cs, ce, es, ee):
        return False
    if cs >= ce or es >= ee:
        return False

    return cs < ee and es < ce


def find_conflicting_assignment(session, org_id, user_id, start, end, exclude_job_id=None):
    """Return the first live assignment of ``user_id`` overlapping ``[start, end)``.

    Only ``assigned`` assignments count; completed and dropped ones no longer
    hold the worker's time.
    """
    query = (
        session.query(JobAssignment, Job)
        .join(Job, Job.id == JobAssignment.job_id)
        .filter(
            JobAssignment.org_id == org_id,
            Job.org_id == org_id,
            JobAssignment.user_id == user_id,
            JobAssignment.status == 'assigned',
        )
    )
    if exclude_job_id is not None:
        query = query.filter(JobAssignment.job_id != exclude_job_id)

    for assignment, job in query.all():
        if has_time_conflict(start, end, job.start_time, job.end_time):
            logger.debug("Assignment %s (job %s) overlaps [%s, %s)", assignment.id, job.id, start, end)
            return assignment
    return None


def ensure_no_time_conflict(session, org_id, user_id, job, message=None):
    """Raise TimeConflictError if the worker is already booked during ``job``."""
    conflict = find_conflicting_assignment(
        session, org_id, user_id, job.start_time, job.end_time, exclude_job_id=job.id
    )
    if conflict is not None:
        raise TimeConflictError(message)
