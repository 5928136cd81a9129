"""
Job lifecycle tests for WeddingPro
Tests job creation, visibility, status changes, completion analytics and travel pay
"""
import pytest
from datetime import timedelta
from types import SimpleNamespace

from conftest import T0, make_assignment, make_job, make_user
from weddingpro.errors import InvalidStateTransitionError, NotFoundError, PermissionDeniedError, ValidationError
from weddingpro.models.audit_log import AuditLog
from weddingpro.models.job_assignment import JobAssignment
from weddingpro.services.jobs import (
    calculate_travel_pay,
    complete_job,
    create_job,
    get_job,
    list_jobs,
    update_job_status,
)
from weddingpro.utils.helpers import as_utc


def job_payload(**overrides):
    payload = {
        'title': 'Garcia Wedding',
        'start_time': '2025-07-12T15:00:00Z',
        'end_time': '2025-07-12T23:00:00Z',
        'status': 'available',
        'required_roles': [
            {'role_name': 'Photographer', 'quantity_needed': 2},
            {'role_name': 'DJ'},
        ],
    }
    payload.update(overrides)
    return payload


class TestJobCreation:

    def test_create_job_with_roles(self, db_session, manager, venue):
        job = create_job(db_session, manager, job_payload(venue_id=venue.id))

        assert job.org_id == manager.org_id
        assert job.status == 'available'
        assert job.created_by == manager.id
        assert sorted((r.role_name, r.quantity_needed) for r in job.required_roles) == [
            ('DJ', 1), ('Photographer', 2)
        ]
        assert job.travel_pay_offered is False
        assert job.travel_pay_amount is None

    def test_employee_cannot_create(self, db_session, employee):
        with pytest.raises(PermissionDeniedError):
            create_job(db_session, employee, job_payload())

    @pytest.mark.parametrize('overrides', [
        {'title': ''},
        {'end_time': '2025-07-12T15:00:00Z'},
        {'start_time': 'next saturday'},
        {'required_roles': []},
        {'required_roles': [{'role_name': 'DJ', 'quantity_needed': 0}]},
        {'status': 'completed'},
    ])
    def test_invalid_payloads(self, db_session, manager, overrides):
        with pytest.raises(ValidationError):
            create_job(db_session, manager, job_payload(**overrides))

    def test_venue_from_other_org_is_not_found(self, db_session, manager):
        with pytest.raises(NotFoundError):
            create_job(db_session, manager, job_payload(venue_id='someone-elses-venue'))

    def test_travel_pay_uses_org_rate(self, db_session, org, manager, venue):
        org.travel_pay_rate_per_mile = 0.5
        org.travel_pay_min_distance = 10
        db_session.commit()

        job = create_job(db_session, manager, job_payload(venue_id=venue.id, travel_pay_offered=True))

        assert job.travel_pay_offered is True
        assert job.travel_pay_amount > 5


class TestTravelPay:

    def test_below_minimum_distance_pays_nothing(self):
        org = SimpleNamespace(latitude=30.0, longitude=-97.0, travel_pay_rate_per_mile=1.0,
                              travel_pay_min_distance=50)
        venue = SimpleNamespace(latitude=30.1, longitude=-97.0)
        assert calculate_travel_pay(org, venue) == 0.0

    def test_unknown_location_pays_nothing(self):
        org = SimpleNamespace(latitude=None, longitude=None, travel_pay_rate_per_mile=1.0,
                              travel_pay_min_distance=0)
        venue = SimpleNamespace(latitude=30.1, longitude=-97.0)
        assert calculate_travel_pay(org, venue) == 0.0
        assert calculate_travel_pay(org, None) == 0.0

    def test_distance_times_rate(self):
        org = SimpleNamespace(latitude=30.0, longitude=-97.0, travel_pay_rate_per_mile=2.0,
                              travel_pay_min_distance=0)
        venue = SimpleNamespace(latitude=31.0, longitude=-97.0)
        # One degree of latitude is about 69.1 miles
        assert calculate_travel_pay(org, venue) == pytest.approx(138.2, abs=0.5)


class TestJobVisibility:

    def test_employee_sees_open_future_jobs_and_own(self, db_session, org, manager, employee):
        now = T0
        make_job(db_session, org, start=T0 + timedelta(days=3), title='Open')
        make_job(db_session, org, start=T0 + timedelta(days=3), status='draft', title='Draft')
        make_job(db_session, org, start=T0 - timedelta(days=3), title='Past open')
        mine = make_job(db_session, org, start=T0 + timedelta(days=5), status='upcoming', title='Mine')
        make_assignment(db_session, mine, employee)

        titles = [j.title for j in list_jobs(db_session, employee, now=now)]
        assert titles == ['Open', 'Mine']

        assert len(list_jobs(db_session, manager, now=now)) == 4
        assert [j.title for j in list_jobs(db_session, manager, status='draft')] == ['Draft']

    def test_employee_cannot_open_draft(self, db_session, org, employee):
        draft = make_job(db_session, org, status='draft')
        with pytest.raises(NotFoundError):
            get_job(db_session, employee, draft.id)

    @pytest.mark.parametrize('status', ['upcoming', 'in_progress', 'cancelled'])
    def test_employee_cannot_open_other_peoples_jobs(self, db_session, org, manager, employee, status):
        staffed = make_job(db_session, org, status=status)
        make_assignment(db_session, staffed, make_user(db_session, org))

        with pytest.raises(NotFoundError):
            get_job(db_session, employee, staffed.id)
        assert get_job(db_session, manager, staffed.id).id == staffed.id

    def test_employee_opens_own_and_available_jobs(self, db_session, org, employee):
        mine = make_job(db_session, org, status='upcoming')
        make_assignment(db_session, mine, employee)
        open_job = make_job(db_session, org)

        assert get_job(db_session, employee, mine.id).id == mine.id
        assert get_job(db_session, employee, open_job.id).id == open_job.id

    def test_dropped_assignment_hides_job(self, db_session, org, employee):
        former = make_job(db_session, org, status='upcoming')
        make_assignment(db_session, former, employee, status='dropped')

        with pytest.raises(NotFoundError):
            get_job(db_session, employee, former.id)


class TestJobStatus:

    def test_manager_updates_status(self, db_session, manager, job):
        updated = update_job_status(db_session, manager, job.id, 'in_progress')

        assert updated.status == 'in_progress'
        entry = AuditLog.query.filter_by(entity_id=job.id, action='status_changed').one()
        assert entry.old_values == {'status': 'available'}

    def test_completed_only_through_complete(self, db_session, manager, job):
        with pytest.raises(InvalidStateTransitionError):
            update_job_status(db_session, manager, job.id, 'completed')

    def test_unknown_status(self, db_session, manager, job):
        with pytest.raises(ValidationError):
            update_job_status(db_session, manager, job.id, 'partying')

    def test_finished_job_is_frozen(self, db_session, manager, job):
        update_job_status(db_session, manager, job.id, 'cancelled')
        with pytest.raises(InvalidStateTransitionError):
            update_job_status(db_session, manager, job.id, 'available')


class TestJobCompletion:

    def test_complete_records_durations_and_completes_assignments(self, db_session, org, manager, employee,
                                                                   recorder):
        job = make_job(db_session, org, status='upcoming', created_at=T0)
        job.first_assigned_at = T0 + timedelta(hours=2)
        db_session.commit()
        assignment = make_assignment(db_session, job, employee)
        dropped = make_assignment(db_session, job, make_user(db_session, org), status='dropped')

        done = complete_job(db_session, manager, job.id, recorder, now=T0 + timedelta(days=15))

        assert done.status == 'completed'
        assert as_utc(done.completed_at) == T0 + timedelta(days=15)
        assert done.time_to_fill_duration == timedelta(hours=2)
        assert done.assignment_to_completion_duration == timedelta(days=15, hours=-2)
        assert db_session.get(JobAssignment, assignment.id).status == 'completed'
        assert db_session.get(JobAssignment, dropped.id).status == 'dropped'
        assert recorder.calls == [('user', employee.id, 'job_completed', {'job_id': job.id})]

    def test_complete_without_assignments_leaves_durations_empty(self, db_session, manager, job):
        done = complete_job(db_session, manager, job.id)

        assert done.time_to_fill_duration is None
        assert done.to_dict()['time_to_fill_seconds'] is None

    def test_cannot_complete_twice(self, db_session, manager, job):
        complete_job(db_session, manager, job.id)
        with pytest.raises(InvalidStateTransitionError):
            complete_job(db_session, manager, job.id)

    def test_employee_cannot_complete(self, db_session, employee, job):
        with pytest.raises(PermissionDeniedError):
            complete_job(db_session, employee, job.id)
