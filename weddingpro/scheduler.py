"""
WeddingPro Background Scheduler

Runs periodic tasks:
- Escalate drop requests left pending past the SLA window (every
  ESCALATION_SCAN_MINUTES)

Only starts when ENABLE_SCHEDULER=true to prevent running on multiple instances.
The same sweep is available on demand as ``flask escalate-drop-requests``.
"""

import logging
from datetime import timedelta

import click
from apscheduler.schedulers.background import BackgroundScheduler

logger = logging.getLogger(__name__)


def _sla_window(app):
    return timedelta(hours=app.config.get('DROP_REQUEST_SLA_HOURS', 24))


def _escalate_overdue_drop_requests(app):
    """Escalate overdue drop requests across every organization."""
    with app.app_context():
        from weddingpro import db
        from weddingpro.services.drop_requests import escalate_overdue_requests

        try:
            count = escalate_overdue_requests(
                db.session, app.extensions.get('notifier'), sla_window=_sla_window(app)
            )
        except Exception:
            logger.exception("Scheduler: drop-request escalation sweep failed")
            db.session.rollback()
            return 0
        finally:
            db.session.remove()

        if count > 0:
            logger.info("Scheduler: escalated %d overdue drop requests", count)
        return count


def init_scheduler(app):
    """Initialize and start the background scheduler.

    Only runs if ENABLE_SCHEDULER is set in the app config.
    """
    if not app.config.get('ENABLE_SCHEDULER'):
        logger.info("Scheduler disabled (set ENABLE_SCHEDULER=true to enable)")
        return None

    try:
        scheduler = BackgroundScheduler(daemon=True)

        scheduler.add_job(
            _escalate_overdue_drop_requests,
            "interval",
            minutes=app.config.get('ESCALATION_SCAN_MINUTES', 15),
            args=[app],
            id="escalate_overdue_drop_requests",
            name="Escalate overdue drop requests",
        )

        scheduler.start()
        logger.info("Background scheduler started")
        return scheduler
    except Exception:
        logger.exception("Failed to start scheduler")
        return None


def register_commands(app):
    """Attach maintenance CLI commands to the app."""

    @app.cli.command('escalate-drop-requests')
    def escalate_drop_requests_command():
        """Escalate drop requests pending longer than the SLA window."""
        count = _escalate_overdue_drop_requests(app)
        click.echo(f'Escalated {count} drop request(s)')
