from celery import shared_task
import logging

from apps.notifications.emails import render_email, send_email

logger = logging.getLogger(__name__)


@shared_task(ignore_result=True)
def send_notification_email(to, template_key, context):
    """Render and deliver one notification. Best effort: no retries."""
    try:
        subject, html = render_email(template_key, context)
    except Exception as e:
        logger.error(f"Could not render {template_key} email: {e}")
        return False

    delivered = send_email(to, subject, html)
    if not delivered:
        logger.warning(f"{template_key} email was not delivered")
    return delivered
