"""Job Interest model"""
from weddingpro import db
from weddingpro.utils.helpers import utcnow
from .base import BaseModel, OrgMixin


class JobInterest(BaseModel, OrgMixin):
    """
    Job Interest model - an employee raising their hand for an available job
    """
    __tablename__ = 'job_interests'

    job_id = db.Column(db.String(36), db.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)
    expressed_at = db.Column(db.DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        db.UniqueConstraint('job_id', 'user_id', name='unique_interest_per_job_user'),
        db.Index('idx_job_interests_job_id', 'org_id', 'job_id'),
    )

    user = db.relationship('User', lazy='joined')

    def __repr__(self):
        return f'<JobInterest job={self.job_id} user={self.user_id}>'
