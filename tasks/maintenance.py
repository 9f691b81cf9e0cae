from celery import shared_task
from datetime import timedelta
from django.conf import settings
from tenacity import retry, stop_after_attempt, wait_exponential
import logging

logger = logging.getLogger(__name__)


@shared_task
@retry(stop=stop_after_attempt(3), wait=wait_exponential(multiplier=1, min=4, max=10))
def cleanup_unpaid_rooms(max_age_minutes=None):
    """Garbage-collect rooms whose checkout was abandoned"""
    from apps.rooms.store import RoomStore

    if max_age_minutes is None:
        max_age_minutes = settings.UNPAID_ROOM_MAX_AGE_MINUTES

    removed = RoomStore().cleanup_unpaid_rooms(timedelta(minutes=max_age_minutes))
    logger.info(f"Removed {removed} unpaid rooms older than {max_age_minutes} minutes")
    return {'deleted_rooms': removed, 'max_age_minutes': max_age_minutes}
