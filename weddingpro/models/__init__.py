"""SQLAlchemy models package"""
from .organization import Organization
from .user import User
from .venue import Venue
from .job import Job, JobRequiredRole
from .job_assignment import JobAssignment
from .job_interest import JobInterest
from .drop_request import DropRequest
from .notification import Notification
from .audit_log import AuditLog

__all__ = [
    'Organization',
    'User',
    'Venue',
    'Job',
    'JobRequiredRole',
    'JobAssignment',
    'JobInterest',
    'DropRequest',
    'Notification',
    'AuditLog',
]
