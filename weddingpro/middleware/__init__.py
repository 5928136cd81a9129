"""Middleware package"""
from .tenant import org_required, get_current_org_id
from .request_id import RequestIdMiddleware, RequestIdLogFilter

__all__ = [
    'RequestIdMiddleware',
    'RequestIdLogFilter',
    'org_required',
    'get_current_org_id'
]
