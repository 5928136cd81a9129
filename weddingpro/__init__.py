from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_cors import CORS
from flask_login import LoginManager
import logging
import os

db = SQLAlchemy()
login_manager = LoginManager()


def _configure_logging(app):
    """Attach a request-id aware handler to the root logger"""
    from weddingpro.middleware.request_id import RequestIdLogFilter

    level = getattr(logging, str(app.config.get('LOG_LEVEL', 'INFO')).upper(), logging.INFO)
    root = logging.getLogger()
    if not any(getattr(h, '_weddingpro', False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler._weddingpro = True
        handler.addFilter(RequestIdLogFilter())
        handler.setFormatter(logging.Formatter(
            '%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s'
        ))
        root.addHandler(handler)
    root.setLevel(level)


def _init_sentry(app):
    """Sentry error monitoring (optional -- only active when SENTRY_DSN is set)"""
    dsn = app.config.get('SENTRY_DSN')
    if not dsn:
        return
    import sentry_sdk
    from sentry_sdk.integrations.flask import FlaskIntegration
    sentry_sdk.init(
        dsn=dsn,
        integrations=[FlaskIntegration()],
        traces_sample_rate=0.1,
    )


def create_app(config_name=None):
    """Flask application factory"""
    app = Flask(__name__)

    # Load configuration
    if config_name is None:
        config_name = os.getenv('FLASK_ENV', 'development')

    from config import config
    app.config.from_object(config.get(config_name, config['default']))

    _configure_logging(app)
    _init_sentry(app)

    # Initialize extensions
    from weddingpro.extensions import limiter
    from weddingpro.middleware.request_id import RequestIdMiddleware
    from weddingpro.notifications import NotificationService

    db.init_app(app)
    login_manager.init_app(app)
    limiter.init_app(app)
    CORS(app, origins=app.config['CORS_ORIGINS'], supports_credentials=True)
    app.wsgi_app = RequestIdMiddleware(app.wsgi_app)
    app.extensions['notifier'] = NotificationService(db.session)

    # Registers the request loader on login_manager
    from weddingpro import auth  # noqa: F401
    from weddingpro.errors import register_error_handlers
    register_error_handlers(app)

    # Register blueprints
    from weddingpro.blueprints.jobs import jobs_bp
    from weddingpro.blueprints.interests import interests_bp
    from weddingpro.blueprints.assignments import assignments_bp
    from weddingpro.blueprints.drop_requests import drop_requests_bp
    from weddingpro.blueprints.venues import venues_bp

    api_prefix = app.config['API_PREFIX']
    app.register_blueprint(jobs_bp, url_prefix=f'{api_prefix}/jobs')
    app.register_blueprint(interests_bp, url_prefix=api_prefix)
    app.register_blueprint(assignments_bp, url_prefix=f'{api_prefix}/jobs')
    app.register_blueprint(drop_requests_bp, url_prefix=f'{api_prefix}/drop-requests')
    app.register_blueprint(venues_bp, url_prefix=f'{api_prefix}/venues')

    from weddingpro.scheduler import init_scheduler, register_commands
    register_commands(app)
    if not app.config.get('TESTING'):
        init_scheduler(app)

    # Health check endpoint
    @app.route('/health')
    def health():
        return {'status': 'healthy', 'service': 'weddingpro-backend'}, 200

    return app
