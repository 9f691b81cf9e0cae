from core.celery import app as celery_app

__all__ = ('celery_app',)

# Register tasks explicitly
from .notifications import send_notification_email
from .maintenance import cleanup_unpaid_rooms

# Register periodic tasks
from celery.schedules import crontab

celery_app.conf.beat_schedule = {
    'cleanup-unpaid-rooms': {
        'task': 'tasks.maintenance.cleanup_unpaid_rooms',
        'schedule': crontab(minute=15),  # Hourly
    },
}
