"""
Base model with common fields and methods
"""
from weddingpro import db
from weddingpro.utils.helpers import generate_uuid, utcnow, isoformat
from datetime import datetime


class BaseModel(db.Model):
    """Abstract base model with common fields"""
    __abstract__ = True

    id = db.Column(db.String(36), primary_key=True, default=generate_uuid)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    def to_dict(self, exclude=None):
        """
        Convert model to dictionary

        Args:
            exclude (list): List of fields to exclude

        Returns:
            dict: Model as dictionary
        """
        exclude = exclude or []
        data = {}

        for column in self.__table__.columns:
            if column.name not in exclude:
                value = getattr(self, column.name)

                if isinstance(value, datetime):
                    value = isoformat(value)

                data[column.name] = value

        return data


class OrgMixin:
    """Mixin for tenant-owned models"""
    org_id = db.Column(db.String(36), db.ForeignKey('organizations.id', ondelete='CASCADE'), nullable=False, index=True)

    @classmethod
    def for_org(cls, org_id, session=None):
        """
        Query records for specific organization

        Args:
            org_id: ID of organization
            session: Session to query through (defaults to db.session)

        Returns:
            Query: Filtered query for organization
        """
        session = session or db.session
        return session.query(cls).filter(cls.org_id == org_id)
