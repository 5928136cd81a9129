"""
Testing configuration for WeddingPro backend
"""
import os
from config.settings import Config


class TestingConfig(Config):
    """Testing configuration with isolated database and safe defaults"""

    TESTING = True
    DEBUG = False

    # Use in-memory SQLite for fast tests
    SQLALCHEMY_DATABASE_URI = os.getenv(
        'TEST_DATABASE_URL',
        'sqlite:///:memory:'
    )
    SQLALCHEMY_ENGINE_OPTIONS = {}

    JWT_SECRET = 'test-jwt-secret'

    # Disable rate limiting in tests
    RATELIMIT_ENABLED = False

    # Never start the background scheduler from tests
    ENABLE_SCHEDULER = False

    # Logging
    LOG_LEVEL = 'WARNING'
    SENTRY_DSN = None

    CORS_ORIGINS = ['http://localhost:3000']
