"""
Drop requests blueprint
Employees asking to be released from an assignment; managers and admins deciding
"""
from datetime import timedelta

from flask import Blueprint, current_app, request, jsonify
from flask_login import login_required, current_user
from weddingpro import db
from weddingpro.blueprints import get_notifier
from weddingpro.errors import ValidationError
from weddingpro.middleware.tenant import org_required
from weddingpro.models.drop_request import DROP_REQUEST_STATUSES
from weddingpro.services import drop_requests as drop_service
from weddingpro.utils.validators import require_fields

drop_requests_bp = Blueprint('drop_requests', __name__)


def _sla_window():
    return timedelta(hours=current_app.config.get('DROP_REQUEST_SLA_HOURS', 24))


def _body():
    return request.get_json(silent=True) or {}


@drop_requests_bp.route('', methods=['GET'])
@login_required
@org_required
def list_drop_requests():
    """
    List drop requests visible to the current user

    GET /api/drop-requests?status=pending,escalated
    """
    statuses = None
    raw = request.args.get('status')
    if raw:
        statuses = [s.strip() for s in raw.split(',') if s.strip()]
        unknown = [s for s in statuses if s not in DROP_REQUEST_STATUSES]
        if unknown:
            raise ValidationError(f'Invalid status filter: {", ".join(unknown)}')

    drop_requests = drop_service.list_drop_requests(
        db.session, current_user, statuses=statuses, notifier=get_notifier(), sla_window=_sla_window()
    )

    return jsonify({
        'drop_requests': [dr.to_dict(include_relationships=True) for dr in drop_requests],
        'total': len(drop_requests)
    }), 200


@drop_requests_bp.route('', methods=['POST'])
@login_required
@org_required
def create_drop_request():
    """
    Request to drop an assignment

    POST /api/drop-requests
    Body: {
        "job_assignment_id": "<assignment_id>",
        "reason": "Family emergency"
    }
    """
    data = require_fields(request.get_json(silent=True), ['job_assignment_id'])
    drop_request = drop_service.create_drop_request(
        db.session, current_user, data['job_assignment_id'], data.get('reason'), get_notifier()
    )

    return jsonify({
        'message': 'Drop request submitted successfully',
        'drop_request': drop_request.to_dict()
    }), 201


@drop_requests_bp.route('/<drop_request_id>/approve', methods=['POST'])
@login_required
@org_required
def approve_drop_request(drop_request_id):
    """
    Approve a drop request

    POST /api/drop-requests/<drop_request_id>/approve
    """
    drop_request = drop_service.approve_drop_request(
        db.session, current_user, drop_request_id, get_notifier()
    )

    return jsonify({
        'message': 'Drop request approved',
        'drop_request': drop_request.to_dict()
    }), 200


@drop_requests_bp.route('/<drop_request_id>/reject', methods=['POST'])
@login_required
@org_required
def reject_drop_request(drop_request_id):
    """
    Reject a drop request

    POST /api/drop-requests/<drop_request_id>/reject
    Body: {"rejection_reason": "We cannot cover this shift"}
    """
    drop_request = drop_service.reject_drop_request(
        db.session, current_user, drop_request_id,
        rejection_reason=_body().get('rejection_reason'), notifier=get_notifier()
    )

    return jsonify({
        'message': 'Drop request rejected',
        'drop_request': drop_request.to_dict()
    }), 200


@drop_requests_bp.route('/<drop_request_id>/escalate', methods=['POST'])
@login_required
@org_required
def escalate_drop_request(drop_request_id):
    """
    Escalate a drop request to admins

    POST /api/drop-requests/<drop_request_id>/escalate
    Body: {"reason": "Needs owner sign-off"}
    """
    drop_request = drop_service.escalate_drop_request(
        db.session, current_user, drop_request_id, get_notifier(), reason=_body().get('reason')
    )

    return jsonify({
        'message': 'Drop request escalated',
        'drop_request': drop_request.to_dict()
    }), 200
