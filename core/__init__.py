"""Core package initialization.

Load the Celery app when Django starts so that notification and
maintenance tasks bind to the Redis-backed app configured in settings.
"""

from .celery import app as celery_app  # noqa: F401

__all__ = ("celery_app",)
