"""
Notification service for WeddingPro.

Writes the in-app notification row; push/email/SMS delivery is owned by the
hosted messaging platform and is only logged here.

IMPORTANT: No method in this module should ever raise an exception.
All errors are caught and logged so that a notification failure never
rolls back a job assignment or a drop-request decision. Callers invoke it
only after their own transaction has committed.
"""

import logging

logger = logging.getLogger(__name__)

# Event types understood by the messaging platform
JOB_ASSIGNMENT = 'job_assignment'
JOB_COMPLETED = 'job_completed'
JOB_INTEREST_EXPRESSED = 'job_interest_expressed'
DROP_REQUEST_CREATED = 'drop_request_created'
DROP_REQUEST_APPROVED = 'drop_request_approved'
DROP_REQUEST_REJECTED = 'drop_request_rejected'
DROP_REQUEST_ESCALATED = 'drop_request_escalated'


class NotificationService:
    """Fire-and-forget notification dispatch bound to a session handle"""

    def __init__(self, session):
        self.session = session

    def send_notification(self, user_id, title, body, metadata=None, event_type='general'):
        """Record an in-app notification for one user.

        Returns the notification id, or None on failure. Never raises.
        """
        from weddingpro.models.notification import Notification
        from weddingpro.models.user import User

        try:
            user = self.session.get(User, user_id)
            if user is None:
                logger.warning("Notification skipped, user %s not found", user_id)
                return None

            notification = Notification(
                org_id=user.org_id,
                user_id=user.id,
                event_type=event_type,
                title=title,
                body=body,
                metadata_json=metadata or {},
            )
            self.session.add(notification)
            self.session.commit()
            logger.info("[DEV] %s notification to %s: %s", event_type, user.email, title)
            return notification.id
        except Exception:
            logger.exception("Failed to send %s notification to %s", event_type, user_id)
            try:
                self.session.rollback()
            except Exception:
                logger.exception("Rollback after notification failure also failed")
            return None

    def send_to_role(self, org_id, role, title, body, metadata=None, event_type='general'):
        """Notify every active user with ``role`` in an organization.

        Returns the number of notifications recorded. Never raises.
        """
        from weddingpro.models.user import User

        try:
            recipients = [
                u.id for u in User.for_org(org_id, self.session).filter(
                    User.role == role,
                    User.status == 'active',
                ).all()
            ]
        except Exception:
            logger.exception("Failed to look up %s recipients in org %s", role, org_id)
            return 0

        if not recipients:
            logger.info("No %s users in org %s to notify about %s", role, org_id, event_type)
            return 0

        sent = 0
        for user_id in recipients:
            if self.send_notification(user_id, title, body, metadata, event_type):
                sent += 1
        return sent


def safe_notify(notifier, method, *args, **kwargs):
    """Call a notifier method, containing any failure of a custom notifier."""
    if notifier is None:
        return None
    try:
        return getattr(notifier, method)(*args, **kwargs)
    except Exception:
        logger.exception("Notifier %s.%s failed", type(notifier).__name__, method)
        return None
