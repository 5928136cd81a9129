"""
Pytest configuration and fixtures for WeddingPro backend tests
"""
import pytest
import os
from flask import g
from flask.testing import FlaskClient
from datetime import datetime, timedelta, timezone
from weddingpro import create_app, db
from weddingpro.auth import encode_token
from weddingpro.models.organization import Organization
from weddingpro.models.user import User
from weddingpro.models.venue import Venue
from weddingpro.models.job import Job, JobRequiredRole
from weddingpro.models.job_assignment import JobAssignment
from weddingpro.models.job_interest import JobInterest
from weddingpro.notifications import NotificationService
from weddingpro.utils.helpers import generate_uuid

# A fixed clock keeps SLA and ranking tests deterministic
T0 = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope='function')
def app():
    """Create application instance with a fresh schema for each test"""
    os.environ['FLASK_ENV'] = 'testing'
    app = create_app('testing')

    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


class AuthenticatingClient(FlaskClient):
    """Test client that authenticates every request from its own headers

    Requests share the fixture's app context, so the user Flask-Login cached
    on ``g`` for one request would otherwise be served to the next.
    """

    def open(self, *args, **kwargs):
        g.pop('_login_user', None)
        return super().open(*args, **kwargs)


@pytest.fixture(scope='function')
def client(app):
    """Create test client"""
    app.test_client_class = AuthenticatingClient
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """The app's scoped session, inside the app context"""
    return db.session


@pytest.fixture
def notifier(db_session):
    return NotificationService(db_session)


class RecordingNotifier:
    """Notifier double that remembers every call"""

    def __init__(self):
        self.calls = []

    def send_notification(self, user_id, title, body, metadata=None, event_type='general'):
        self.calls.append(('user', user_id, event_type, metadata))
        return 'recorded'

    def send_to_role(self, org_id, role, title, body, metadata=None, event_type='general'):
        self.calls.append(('role', role, event_type, metadata))
        return 1

    def events(self):
        return [call[2] for call in self.calls]


class ExplodingNotifier:
    """Notifier double whose every call fails"""

    def send_notification(self, *args, **kwargs):
        raise RuntimeError('messaging platform unavailable')

    def send_to_role(self, *args, **kwargs):
        raise RuntimeError('messaging platform unavailable')


@pytest.fixture
def recorder():
    return RecordingNotifier()


@pytest.fixture
def exploding_notifier():
    return ExplodingNotifier()


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

def make_org(session, name='Bliss Events', slug='bliss', **kwargs):
    kwargs.setdefault('latitude', 30.2672)
    kwargs.setdefault('longitude', -97.7431)
    org = Organization(name=name, slug=slug, status='active', **kwargs)
    session.add(org)
    session.commit()
    return org


def make_user(session, org, role='employee', email=None, full_name=None, **kwargs):
    user = User(
        org_id=org.id,
        email=email or f'{role}-{generate_uuid()[:8]}@example.com',
        full_name=full_name or role.title(),
        role=role,
        status='active',
        **kwargs
    )
    session.add(user)
    session.commit()
    return user


def make_venue(session, org, name='Rosewood Manor', latitude=30.5083, longitude=-97.6789):
    venue = Venue(org_id=org.id, name=name, city='Round Rock', state='TX',
                  latitude=latitude, longitude=longitude)
    session.add(venue)
    session.commit()
    return venue


def make_job(session, org, start=None, hours=6, status='available', venue=None, roles=(('Photographer', 1),),
             title='Smith Wedding', created_at=None):
    start = start or (T0 + timedelta(days=14))
    job = Job(
        org_id=org.id,
        venue_id=venue.id if venue else None,
        title=title,
        start_time=start,
        end_time=start + timedelta(hours=hours),
        status=status,
    )
    if created_at is not None:
        job.created_at = created_at
    for role_name, quantity in roles:
        job.required_roles.append(JobRequiredRole(role_name=role_name, quantity_needed=quantity))
    session.add(job)
    session.commit()
    return job


def make_assignment(session, job, user, status='assigned', completed_at=None, role=None):
    role = role or job.required_roles[0]
    assignment = JobAssignment(
        org_id=job.org_id,
        job_id=job.id,
        user_id=user.id,
        job_required_role_id=role.id,
        status=status,
        assigned_at=T0,
        completed_at=completed_at,
    )
    session.add(assignment)
    session.commit()
    return assignment


def make_interest(session, job, user, expressed_at):
    interest = JobInterest(org_id=job.org_id, job_id=job.id, user_id=user.id, expressed_at=expressed_at)
    session.add(interest)
    session.commit()
    return interest


# ---------------------------------------------------------------------------
# Common fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def org(db_session):
    return make_org(db_session)


@pytest.fixture
def other_org(db_session):
    return make_org(db_session, name='Other Weddings', slug='other')


@pytest.fixture
def admin(db_session, org):
    return make_user(db_session, org, role='admin', email='admin@bliss.com', full_name='Ada Admin')


@pytest.fixture
def manager(db_session, org):
    return make_user(db_session, org, role='manager', email='manager@bliss.com', full_name='Max Manager')


@pytest.fixture
def employee(db_session, org):
    return make_user(db_session, org, role='employee', email='wes@bliss.com', full_name='Wes Worker',
                     latitude=30.2849, longitude=-97.7341)


@pytest.fixture
def venue(db_session, org):
    return make_venue(db_session, org)


@pytest.fixture
def job(db_session, org, venue):
    return make_job(db_session, org, venue=venue)


@pytest.fixture
def assignment(db_session, job, employee):
    return make_assignment(db_session, job, employee)


def auth_headers_for(user):
    return {
        'Authorization': f'Bearer {encode_token(user.id)}',
        'Content-Type': 'application/json',
    }


@pytest.fixture
def admin_headers(admin):
    return auth_headers_for(admin)


@pytest.fixture
def manager_headers(manager):
    return auth_headers_for(manager)


@pytest.fixture
def employee_headers(employee):
    return auth_headers_for(employee)
