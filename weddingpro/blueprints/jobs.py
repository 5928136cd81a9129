"""
Jobs blueprint
Handles job creation, listing, status updates, completion and candidate ranking
"""
from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user
from weddingpro import db
from weddingpro.blueprints import get_notifier
from weddingpro.errors import NotFoundError
from weddingpro.middleware.tenant import org_required, get_current_org_id
from weddingpro.models.job import Job
from weddingpro.permissions import require
from weddingpro.services import jobs as job_service
from weddingpro.services.ranking import candidate_to_dict, normalize_sort_option, rank_candidates, role_capacity
from weddingpro.utils.validators import require_fields

jobs_bp = Blueprint('jobs', __name__)


@jobs_bp.route('', methods=['GET'])
@login_required
@org_required
def list_jobs():
    """
    List jobs visible to the current user

    GET /api/jobs?status=available
    """
    jobs = job_service.list_jobs(db.session, current_user, status=request.args.get('status'))

    return jsonify({
        'jobs': [job.to_dict(include_relationships=True) for job in jobs],
        'total': len(jobs)
    }), 200


@jobs_bp.route('', methods=['POST'])
@login_required
@org_required
def create_job():
    """
    Create a job

    POST /api/jobs
    Body: {
        "title": "Smith Wedding",
        "start_time": "2026-06-20T14:00:00Z",
        "end_time": "2026-06-20T22:00:00Z",
        "venue_id": "<venue_id>",
        "status": "available",
        "travel_pay_offered": true,
        "required_roles": [{"role_name": "Photographer", "quantity_needed": 2}]
    }
    """
    job = job_service.create_job(db.session, current_user, request.get_json(silent=True))

    return jsonify({
        'message': 'Job created successfully',
        'job': job.to_dict(include_relationships=True)
    }), 201


@jobs_bp.route('/<job_id>', methods=['GET'])
@login_required
@org_required
def get_job(job_id):
    """
    Get job details

    GET /api/jobs/<job_id>
    """
    job = job_service.get_job(db.session, current_user, job_id)

    return jsonify({
        'job': job.to_dict(include_relationships=True)
    }), 200


@jobs_bp.route('/<job_id>/status', methods=['PUT', 'PATCH'])
@login_required
@org_required
def update_job_status(job_id):
    """
    Update job status

    PUT /api/jobs/<job_id>/status
    Body: {"status": "available"}
    """
    data = require_fields(request.get_json(silent=True), ['status'])
    job = job_service.update_job_status(db.session, current_user, job_id, data['status'])

    return jsonify({
        'message': 'Job status updated successfully',
        'job': job.to_dict()
    }), 200


@jobs_bp.route('/<job_id>/complete', methods=['POST'])
@login_required
@org_required
def complete_job(job_id):
    """
    Mark a job as completed

    POST /api/jobs/<job_id>/complete
    """
    job = job_service.complete_job(db.session, current_user, job_id, get_notifier())

    return jsonify({
        'message': 'Job completed successfully',
        'job': job.to_dict()
    }), 200


@jobs_bp.route('/<job_id>/candidates', methods=['GET'])
@login_required
@org_required
def list_candidates(job_id):
    """
    Interested employees for a job, ranked

    GET /api/jobs/<job_id>/candidates?sort=distance_asc
    """
    sort_option = normalize_sort_option(request.args.get('sort'))
    candidates = rank_candidates(db.session, job_id, sort_option, current_user)

    return jsonify({
        'candidates': [candidate_to_dict(c) for c in candidates],
        'sort': sort_option,
        'total': len(candidates)
    }), 200


@jobs_bp.route('/<job_id>/capacity', methods=['GET'])
@login_required
@org_required
def get_capacity(job_id):
    """
    Required vs. filled positions per role

    GET /api/jobs/<job_id>/capacity
    """
    job = Job.for_org(get_current_org_id(), db.session).filter(Job.id == job_id).first()
    if job is None:
        raise NotFoundError('Job not found')
    require(current_user, 'view_candidates', job)

    return jsonify({
        'job_id': job.id,
        'roles': role_capacity(db.session, job)
    }), 200
