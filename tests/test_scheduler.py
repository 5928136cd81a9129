"""
Background escalation tests for WeddingPro
"""
from conftest import T0
from weddingpro.models.drop_request import DropRequest
from weddingpro.scheduler import init_scheduler
from weddingpro.services.drop_requests import create_drop_request


def test_scheduler_disabled_in_tests(app):
    assert init_scheduler(app) is None


def test_cli_command_escalates_overdue_requests(app, db_session, employee, assignment):
    drop_request = create_drop_request(db_session, employee, assignment.id, 'Wedding of my own', now=T0)

    result = app.test_cli_runner().invoke(args=['escalate-drop-requests'])

    assert result.exit_code == 0
    assert 'Escalated 1 drop request(s)' in result.output
    db_session.expire_all()
    assert db_session.get(DropRequest, drop_request.id).status == 'escalated'


def test_cli_command_with_nothing_due(app, db_session):
    result = app.test_cli_runner().invoke(args=['escalate-drop-requests'])

    assert result.exit_code == 0
    assert 'Escalated 0 drop request(s)' in result.output
