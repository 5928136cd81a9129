"""Job Assignment model"""
from weddingpro import db
from .base import BaseModel, OrgMixin


class JobAssignment(BaseModel, OrgMixin):
    """
    Job Assignment model - links one employee to one job for one required role
    """
    __tablename__ = 'job_assignments'

    job_id = db.Column(db.String(36), db.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    job_required_role_id = db.Column(db.String(36), db.ForeignKey('job_required_roles.id', ondelete='CASCADE'),
                                     nullable=False)
    assigned_by = db.Column(db.String(36), db.ForeignKey('users.id'))

    status = db.Column(db.String(50), nullable=False, default='assigned')  # assigned, completed, dropped

    assigned_at = db.Column(db.DateTime(timezone=True))
    completed_at = db.Column(db.DateTime(timezone=True))

    # Indexes
    __table_args__ = (
        db.Index('idx_job_assignments_job_id', 'job_id'),
        db.Index('idx_job_assignments_user_id', 'org_id', 'user_id'),
        db.Index('idx_job_assignments_status', 'org_id', 'status'),
    )

    required_role = db.relationship('JobRequiredRole')

    def __repr__(self):
        return f'<JobAssignment job={self.job_id} user={self.user_id} status={self.status}>'

    def complete(self, completed_at):
        """Mark assignment as completed"""
        self.status = 'completed'
        self.completed_at = completed_at
