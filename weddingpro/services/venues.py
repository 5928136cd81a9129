"""Venue management."""

import logging

from weddingpro.models.venue import Venue
from weddingpro.permissions import require
from weddingpro.utils.validators import require_fields, validate_coordinates

logger = logging.getLogger(__name__)


def create_venue(session, actor, data):
    require(actor, 'manage_venues', message='Only managers and admins can add venues')
    data = require_fields(data, ['name'])
    latitude, longitude = validate_coordinates(data.get('latitude'), data.get('longitude'))

    venue = Venue(
        org_id=actor.org_id,
        name=data['name'].strip(),
        address=data.get('address'),
        city=data.get('city'),
        state=data.get('state'),
        zip=data.get('zip'),
        latitude=latitude,
        longitude=longitude,
    )
    session.add(venue)
    session.commit()
    logger.info("Venue %s created in org %s", venue.id, actor.org_id)
    return venue


def list_venues(session, actor):
    return Venue.for_org(actor.org_id, session).order_by(Venue.name.asc()).all()
