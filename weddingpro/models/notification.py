"""Notification model"""
from weddingpro import db
from .base import BaseModel, OrgMixin


class Notification(BaseModel, OrgMixin):
    """
    Notification model - in-app notifications for users
    """
    __tablename__ = 'notifications'

    user_id = db.Column(db.String(36), db.ForeignKey('users.id', ondelete='CASCADE'), nullable=False)

    event_type = db.Column(db.String(100), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    body = db.Column(db.Text, nullable=False)
    metadata_json = db.Column('metadata', db.JSON)

    read_at = db.Column(db.DateTime(timezone=True))

    # Indexes
    __table_args__ = (
        db.Index('idx_notifications_user_id', 'user_id', 'created_at'),
        db.Index('idx_notifications_unread', 'user_id', 'read_at'),
    )

    def __repr__(self):
        return f'<Notification {self.event_type} - user={self.user_id}>'

