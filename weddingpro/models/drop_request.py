"""Drop Request model"""
from weddingpro import db
from weddingpro.utils.helpers import isoformat
from .base import BaseModel, OrgMixin

DROP_REQUEST_STATUSES = ('pending', 'approved', 'rejected', 'escalated')
ACTIVE_STATUSES = ('pending', 'escalated')
TERMINAL_STATUSES = ('approved', 'rejected')

# At most one active request per assignment; enforced by the store as well
_active_predicate = db.text("status IN ('pending', 'escalated')")


class DropRequest(BaseModel, OrgMixin):
    """
    Drop Request model - an employee asking to be released from an assignment

    resolved_at is set if and only if status is approved or rejected.
    """
    __tablename__ = 'drop_requests'

    job_assignment_id = db.Column(db.String(36), db.ForeignKey('job_assignments.id', ondelete='CASCADE'),
                                  nullable=False)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)

    reason = db.Column(db.Text, nullable=False)
    status = db.Column(db.String(50), nullable=False, default='pending')

    requested_at = db.Column(db.DateTime(timezone=True), nullable=False)
    resolved_at = db.Column(db.DateTime(timezone=True))
    resolved_by_user_id = db.Column(db.String(36), db.ForeignKey('users.id'))
    rejection_reason = db.Column(db.Text)

    escalated_at = db.Column(db.DateTime(timezone=True))
    # NULL when escalated by the SLA timer
    escalated_by_user_id = db.Column(db.String(36), db.ForeignKey('users.id'))
    escalation_reason = db.Column(db.Text)

    __table_args__ = (
        db.Index('idx_drop_requests_status', 'org_id', 'status'),
        db.Index('uq_drop_requests_active_assignment', 'job_assignment_id', unique=True,
                 sqlite_where=_active_predicate, postgresql_where=_active_predicate),
        db.CheckConstraint(
            "(status IN ('approved', 'rejected')) = (resolved_at IS NOT NULL)",
            name='ck_drop_requests_resolved_at',
        ),
    )

    job_assignment = db.relationship('JobAssignment', lazy='joined')
    user = db.relationship('User', foreign_keys=[user_id], lazy='joined')

    def __repr__(self):
        return f'<DropRequest {self.id} - {self.status}>'

    @property
    def is_terminal(self):
        return self.status in TERMINAL_STATUSES

    def to_dict(self, include_relationships=False):
        data = super().to_dict()
        if include_relationships:
            assignment = self.job_assignment
            job = assignment.job if assignment else None
            data['employee'] = self.user.profile_summary() if self.user else None
            data['job'] = {
                'id': job.id,
                'title': job.title,
                'start_time': isoformat(job.start_time),
                'end_time': isoformat(job.end_time),
                'venue': job.venue.name if job.venue else None,
            } if job else None
            data['role_name'] = assignment.required_role.role_name if assignment and assignment.required_role else None
        return data
