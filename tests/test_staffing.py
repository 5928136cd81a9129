"""
Interest and assignment tests for WeddingPro
Tests employees raising their hand and managers filling required roles
"""
import pytest
from datetime import timedelta

from conftest import T0, make_assignment, make_interest, make_job, make_org, make_user
from weddingpro.errors import (
    ConflictError,
    InvalidStateTransitionError,
    NotFoundError,
    PermissionDeniedError,
    TimeConflictError,
    ValidationError,
)
from weddingpro.models.job_interest import JobInterest
from weddingpro.services.assignments import assign_job
from weddingpro.services.interests import express_interest, list_interested_job_ids, withdraw_interest
from weddingpro.utils.helpers import as_utc


class TestInterest:

    def test_express_and_list(self, db_session, employee, job, recorder):
        interest = express_interest(db_session, employee, job.id, recorder, now=T0)

        assert as_utc(interest.expressed_at) == T0
        assert list_interested_job_ids(db_session, employee) == [job.id]
        assert recorder.calls == [('role', 'manager', 'job_interest_expressed',
                                   {'job_id': job.id, 'employee_id': employee.id})]

    def test_duplicate_interest_conflicts(self, db_session, employee, job):
        express_interest(db_session, employee, job.id, now=T0)
        with pytest.raises(ConflictError):
            express_interest(db_session, employee, job.id, now=T0)

    def test_job_must_be_available(self, db_session, org, employee):
        draft = make_job(db_session, org, status='draft')
        with pytest.raises(InvalidStateTransitionError):
            express_interest(db_session, employee, draft.id)

    def test_job_in_other_org_is_not_found(self, db_session, employee):
        rival = make_org(db_session, name='Rival', slug='rival')
        theirs = make_job(db_session, rival)
        with pytest.raises(NotFoundError):
            express_interest(db_session, employee, theirs.id)

    def test_manager_cannot_express_interest(self, db_session, manager, job):
        with pytest.raises(PermissionDeniedError):
            express_interest(db_session, manager, job.id)

    def test_withdraw(self, db_session, employee, job):
        express_interest(db_session, employee, job.id, now=T0)
        withdraw_interest(db_session, employee, job.id)

        assert list_interested_job_ids(db_session, employee) == []
        with pytest.raises(NotFoundError):
            withdraw_interest(db_session, employee, job.id)


class TestAssignJob:

    def test_assign_fills_role_and_moves_job_to_upcoming(self, db_session, manager, employee, job, recorder):
        make_interest(db_session, job, employee, T0)
        role = job.required_roles[0]

        assignment = assign_job(db_session, manager, job.id, employee.id, role.id, recorder,
                                now=T0 + timedelta(hours=3))

        assert assignment.status == 'assigned'
        assert assignment.assigned_by == manager.id
        db_session.refresh(job)
        assert job.status == 'upcoming'
        assert as_utc(job.first_assigned_at) == T0 + timedelta(hours=3)
        assert JobInterest.query.filter_by(job_id=job.id, user_id=employee.id).count() == 0
        assert recorder.events() == ['job_assignment']

    def test_partially_staffed_job_stays_available(self, db_session, org, manager, employee):
        job = make_job(db_session, org, roles=(('Server', 2),))

        assign_job(db_session, manager, job.id, employee.id, job.required_roles[0].id, now=T0)

        db_session.refresh(job)
        assert job.status == 'available'

    def test_first_assigned_at_is_not_overwritten(self, db_session, org, manager, employee):
        job = make_job(db_session, org, roles=(('Server', 2),))
        colleague = make_user(db_session, org)
        role_id = job.required_roles[0].id

        assign_job(db_session, manager, job.id, employee.id, role_id, now=T0)
        assign_job(db_session, manager, job.id, colleague.id, role_id, now=T0 + timedelta(days=1))

        db_session.refresh(job)
        assert as_utc(job.first_assigned_at) == T0
        assert job.status == 'upcoming'

    def test_full_role_conflicts(self, db_session, org, manager, employee, job):
        make_assignment(db_session, job, make_user(db_session, org))

        with pytest.raises(ConflictError):
            assign_job(db_session, manager, job.id, employee.id, job.required_roles[0].id)

    def test_dropped_assignment_frees_the_slot(self, db_session, org, manager, employee, job):
        make_assignment(db_session, job, make_user(db_session, org), status='dropped')

        assignment = assign_job(db_session, manager, job.id, employee.id, job.required_roles[0].id, now=T0)
        assert assignment.id is not None

    def test_overlapping_assignment_is_a_time_conflict(self, db_session, org, manager, employee, job):
        other = make_job(db_session, org, start=job.start_time + timedelta(hours=2), title='Overlap')
        make_assignment(db_session, other, employee)

        with pytest.raises(TimeConflictError):
            assign_job(db_session, manager, job.id, employee.id, job.required_roles[0].id)

    def test_role_must_belong_to_job(self, db_session, org, manager, employee, job):
        other = make_job(db_session, org, start=job.start_time + timedelta(days=2), title='Other')
        with pytest.raises(NotFoundError):
            assign_job(db_session, manager, job.id, employee.id, other.required_roles[0].id)

    def test_only_employees_are_assignable(self, db_session, manager, admin, job):
        with pytest.raises(ValidationError):
            assign_job(db_session, manager, job.id, admin.id, job.required_roles[0].id)

    def test_employee_cannot_assign(self, db_session, org, employee, job):
        colleague = make_user(db_session, org)
        with pytest.raises(PermissionDeniedError):
            assign_job(db_session, employee, job.id, colleague.id, job.required_roles[0].id)

    def test_cannot_assign_to_completed_job(self, db_session, org, manager, employee):
        done = make_job(db_session, org, status='completed')
        with pytest.raises(InvalidStateTransitionError):
            assign_job(db_session, manager, done.id, employee.id, done.required_roles[0].id)
