"""User model"""
from weddingpro import db
from .base import BaseModel, OrgMixin
from flask_login import UserMixin

ROLES = ('admin', 'manager', 'employee')


class User(BaseModel, OrgMixin, UserMixin):
    """
    User model - admins, managers, and employees (profiles)
    Credentials live with the hosted auth provider; this is the profile row
    """
    __tablename__ = 'users'

    email = db.Column(db.String(255), nullable=False, index=True)
    full_name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50))

    role = db.Column(db.String(50), nullable=False, default='employee')  # admin, manager, employee
    status = db.Column(db.String(50), nullable=False, default='active')  # active, pending, inactive

    # Home location for distance ranking
    address = db.Column(db.String(255))
    city = db.Column(db.String(100))
    state = db.Column(db.String(50))
    zip = db.Column(db.String(20))
    latitude = db.Column(db.Float)
    longitude = db.Column(db.Float)

    __table_args__ = (
        db.UniqueConstraint('org_id', 'email', name='unique_email_per_org'),
        db.Index('idx_users_role', 'org_id', 'role'),
    )

    # Relationships
    job_assignments = db.relationship('JobAssignment', backref='user', lazy='dynamic',
                                      foreign_keys='JobAssignment.user_id')

    def __repr__(self):
        return f'<User {self.email} ({self.role})>'

    def is_admin(self):
        """Check if user is admin"""
        return self.role == 'admin'

    def is_manager(self):
        """Check if user is manager"""
        return self.role == 'manager'

    def is_employee(self):
        """Check if user is employee"""
        return self.role == 'employee'

    @property
    def is_active(self):
        """Check if user is active (required by Flask-Login)"""
        return self.status == 'active'

    def profile_summary(self):
        """Subset of the profile shown to managers next to a candidate"""
        return {
            'id': self.id,
            'full_name': self.full_name,
            'email': self.email,
            'city': self.city,
            'state': self.state,
            'role': self.role,
        }
