"""
Venues blueprint
"""
from flask import Blueprint, request, jsonify
from flask_login import login_required, current_user
from weddingpro import db
from weddingpro.middleware.tenant import org_required
from weddingpro.services.venues import create_venue, list_venues

venues_bp = Blueprint('venues', __name__)


@venues_bp.route('', methods=['GET'])
@login_required
@org_required
def get_venues():
    """
    List the organization's venues

    GET /api/venues
    """
    venues = list_venues(db.session, current_user)

    return jsonify({
        'venues': [venue.to_dict() for venue in venues],
        'total': len(venues)
    }), 200


@venues_bp.route('', methods=['POST'])
@login_required
@org_required
def add_venue():
    """
    Add a venue

    POST /api/venues
    Body: {
        "name": "Rosewood Manor",
        "address": "12 Garden Way",
        "city": "Austin",
        "state": "TX",
        "latitude": 30.27,
        "longitude": -97.74
    }
    """
    venue = create_venue(db.session, current_user, request.get_json(silent=True))

    return jsonify({
        'message': 'Venue created successfully',
        'venue': venue.to_dict()
    }), 201
