"""Venue model"""
from weddingpro import db
from .base import BaseModel, OrgMixin


class Venue(BaseModel, OrgMixin):
    """
    Venue model - where a wedding job takes place
    """
    __tablename__ = 'venues'

    name = db.Column(db.String(255), nullable=False)
    address = db.Column(db.String(255))
    city = db.Column(db.String(100))
    state = db.Column(db.String(50))
    zip = db.Column(db.String(20))
    latitude = db.Column(db.Float)
    longitude = db.Column(db.Float)

    def __repr__(self):
        return f'<Venue {self.name}>'

    @property
    def full_address(self):
        """Get formatted address"""
        parts = [p for p in (self.address, self.city) if p]
        tail = ' '.join(p for p in (self.state, self.zip) if p)
        if tail:
            parts.append(tail)
        return ', '.join(parts)

    def to_dict(self):
        data = super().to_dict()
        data['full_address'] = self.full_address
        return data
