"""
Domain services

Plain functions taking an explicit SQLAlchemy session and the acting user.
They raise weddingpro.errors.DomainError subclasses for expected failures.
"""
