"""Job model"""
from weddingpro import db
from weddingpro.utils.helpers import isoformat
from .base import BaseModel, OrgMixin

JOB_STATUSES = ('draft', 'available', 'upcoming', 'in_progress', 'completed', 'cancelled')


class Job(BaseModel, OrgMixin):
    """
    Job model - a gig at a wedding, staffed by one or more required roles
    """
    __tablename__ = 'jobs'

    venue_id = db.Column(db.String(36), db.ForeignKey('venues.id', ondelete='SET NULL'))
    created_by = db.Column(db.String(36), db.ForeignKey('users.id'))

    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)

    # Scheduling: half-open window [start_time, end_time)
    start_time = db.Column(db.DateTime(timezone=True), nullable=False)
    end_time = db.Column(db.DateTime(timezone=True), nullable=False)

    status = db.Column(db.String(50), nullable=False, default='draft')

    # Travel pay
    travel_pay_offered = db.Column(db.Boolean, nullable=False, default=False)
    travel_pay_amount = db.Column(db.Float)

    # Analytics
    first_assigned_at = db.Column(db.DateTime(timezone=True))
    completed_at = db.Column(db.DateTime(timezone=True))
    time_to_fill_duration = db.Column(db.Interval)
    assignment_to_completion_duration = db.Column(db.Interval)

    __table_args__ = (
        db.Index('idx_jobs_status', 'org_id', 'status'),
        db.Index('idx_jobs_start_time', 'org_id', 'start_time'),
    )

    # Relationships
    venue = db.relationship('Venue', lazy='joined')
    required_roles = db.relationship('JobRequiredRole', backref='job', lazy='select',
                                     cascade='all, delete-orphan', order_by='JobRequiredRole.role_name')
    assignments = db.relationship('JobAssignment', backref='job', lazy='dynamic', cascade='all, delete-orphan')
    interests = db.relationship('JobInterest', backref='job', lazy='dynamic', cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Job {self.title} - {self.status}>'

    def to_dict(self, include_relationships=False):
        """Convert to dictionary with optional relationships"""
        data = super().to_dict(exclude=['time_to_fill_duration', 'assignment_to_completion_duration'])
        data['time_to_fill_seconds'] = _seconds(self.time_to_fill_duration)
        data['assignment_to_completion_seconds'] = _seconds(self.assignment_to_completion_duration)

        if include_relationships:
            data['venue'] = self.venue.to_dict() if self.venue else None
            data['required_roles'] = [r.to_dict() for r in self.required_roles]
            data['assigned_employees'] = [
                {'assignment_id': a.id, 'user_id': a.user_id, 'role_id': a.job_required_role_id,
                 'assigned_at': isoformat(a.assigned_at)}
                for a in self.assignments.filter_by(status='assigned')
            ]

        return data


class JobRequiredRole(BaseModel):
    """
    A role a job needs filled, e.g. 2 x "Photographer"
    """
    __tablename__ = 'job_required_roles'

    job_id = db.Column(db.String(36), db.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False, index=True)
    role_name = db.Column(db.String(100), nullable=False)
    quantity_needed = db.Column(db.Integer, nullable=False, default=1)

    __table_args__ = (
        db.CheckConstraint('quantity_needed >= 1', name='ck_required_role_quantity_positive'),
    )

    def __repr__(self):
        return f'<JobRequiredRole {self.role_name} x{self.quantity_needed}>'


def _seconds(interval):
    return interval.total_seconds() if interval is not None else None
