"""
Interests blueprint
Employees raising or withdrawing their hand for available jobs
"""
from flask import Blueprint, jsonify
from flask_login import login_required, current_user
from weddingpro import db
from weddingpro.blueprints import get_notifier
from weddingpro.middleware.tenant import org_required
from weddingpro.services import interests as interest_service
from weddingpro.utils.helpers import isoformat

interests_bp = Blueprint('interests', __name__)


@interests_bp.route('/jobs/<job_id>/interest', methods=['POST'])
@login_required
@org_required
def express_interest(job_id):
    """
    Express interest in a job

    POST /api/jobs/<job_id>/interest
    """
    interest = interest_service.express_interest(db.session, current_user, job_id, get_notifier())

    return jsonify({
        'message': 'Interest expressed successfully',
        'interest': {
            'id': interest.id,
            'job_id': interest.job_id,
            'user_id': interest.user_id,
            'expressed_at': isoformat(interest.expressed_at),
        }
    }), 201


@interests_bp.route('/jobs/<job_id>/interest', methods=['DELETE'])
@login_required
@org_required
def withdraw_interest(job_id):
    """
    Withdraw interest in a job

    DELETE /api/jobs/<job_id>/interest
    """
    interest_service.withdraw_interest(db.session, current_user, job_id)

    return jsonify({
        'message': 'Interest withdrawn successfully'
    }), 200


@interests_bp.route('/interests', methods=['GET'])
@login_required
@org_required
def list_my_interests():
    """
    Job IDs the current user is interested in

    GET /api/interests
    """
    job_ids = interest_service.list_interested_job_ids(db.session, current_user)

    return jsonify({
        'job_ids': job_ids,
        'total': len(job_ids)
    }), 200
