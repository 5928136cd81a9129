"""Organization model"""
from weddingpro import db
from .base import BaseModel


class Organization(BaseModel):
    """
    Organization model - a wedding business using the platform
    Each organization has isolated data for multi-tenancy
    """
    __tablename__ = 'organizations'

    name = db.Column(db.String(255), nullable=False)
    slug = db.Column(db.String(100), unique=True, nullable=False, index=True)
    status = db.Column(db.String(50), nullable=False, default='active')  # active, trial, suspended

    # Home base, used for travel pay and as the fallback worker location
    address = db.Column(db.String(255))
    city = db.Column(db.String(100))
    state = db.Column(db.String(50))
    zip = db.Column(db.String(20))
    latitude = db.Column(db.Float)
    longitude = db.Column(db.Float)

    # Travel pay policy
    travel_pay_rate_per_mile = db.Column(db.Float, default=0.0)
    travel_pay_min_distance = db.Column(db.Float, default=0.0)

    # Relationships
    users = db.relationship('User', backref='organization', lazy='dynamic', cascade='all, delete-orphan')
    venues = db.relationship('Venue', backref='organization', lazy='dynamic', cascade='all, delete-orphan')
    jobs = db.relationship('Job', backref='organization', lazy='dynamic', cascade='all, delete-orphan')

    def __repr__(self):
        return f'<Organization {self.name} ({self.slug})>'

    def is_active(self):
        """Check if organization is active"""
        return self.status in ['active', 'trial']
