"""Audit Log model"""
from weddingpro import db
from .base import BaseModel, OrgMixin


class AuditLog(BaseModel, OrgMixin):
    """
    Audit Log model - trail of state changes on jobs and drop requests
    """
    __tablename__ = 'audit_logs'

    # NULL for system-initiated actions (e.g. SLA escalation)
    user_id = db.Column(db.String(36), db.ForeignKey('users.id'))

    entity_type = db.Column(db.String(100), nullable=False)
    entity_id = db.Column(db.String(36), nullable=False)

    action = db.Column(db.String(100), nullable=False)

    # Change tracking
    old_values = db.Column(db.JSON)
    new_values = db.Column(db.JSON)

    # Indexes
    __table_args__ = (
        db.Index('idx_audit_logs_entity', 'org_id', 'entity_type', 'entity_id'),
        db.Index('idx_audit_logs_created_at', 'org_id', 'created_at'),
    )

    def __repr__(self):
        return f'<AuditLog {self.entity_type}.{self.action}>'

    @classmethod
    def log_action(cls, session, org_id, entity_type, entity_id, action, user_id=None,
                   old_values=None, new_values=None):
        """
        Add an audit entry to the session (committed with the caller's transaction)

        Args:
            session: SQLAlchemy session
            org_id: ID of organization
            entity_type: Type of entity (e.g., 'jobs', 'drop_requests')
            entity_id: ID of entity
            action: Action performed (e.g., 'completed', 'approved')
            user_id: ID of user who performed action
            old_values: Previous state (dict)
            new_values: New state (dict)

        Returns:
            AuditLog: Created log entry
        """
        log_entry = cls(
            org_id=org_id,
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            action=action,
            old_values=old_values,
            new_values=new_values,
        )
        session.add(log_entry)
        return log_entry
