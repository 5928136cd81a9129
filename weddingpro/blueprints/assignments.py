"""
Assignments blueprint
Managers staffing a job's required roles
"""
from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user
from weddingpro import db
from weddingpro.blueprints import get_notifier
from weddingpro.middleware.tenant import org_required
from weddingpro.services.assignments import assign_job
from weddingpro.utils.validators import require_fields

assignments_bp = Blueprint('assignments', __name__)


@assignments_bp.route('/<job_id>/assignments', methods=['POST'])
@login_required
@org_required
def create_assignment(job_id):
    """
    Assign an employee to a job role

    POST /api/jobs/<job_id>/assignments
    Body: {
        "user_id": "<employee_id>",
        "job_required_role_id": "<role_id>"
    }
    """
    data = require_fields(request.get_json(silent=True), ['user_id', 'job_required_role_id'])
    assignment = assign_job(
        db.session, current_user, job_id, data['user_id'], data['job_required_role_id'], get_notifier()
    )

    return jsonify({
        'message': 'Employee assigned successfully',
        'assignment': assignment.to_dict(),
        'job_status': assignment.job.status
    }), 201
