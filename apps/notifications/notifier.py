# apps/notifications/notifier.py
from django.conf import settings
from django.db import transaction
import logging

from .emails import format_amount

logger = logging.getLogger(__name__)


def owner_link(room):
    return f"{settings.FRONTEND_BASE_URL}/room/owner/{room.owner_token}"


def room_link(room):
    return f"{settings.FRONTEND_BASE_URL}/room/{room.pk}"


class EmailNotifier:
    """Queue transactional emails for room state transitions.

    Messages are handed to Celery only once the surrounding transaction has
    committed. Enqueue failures are logged and dropped: the transition that
    triggered them has already succeeded and is never rolled back for email.
    """

    def __init__(self, task=None):
        if task is None:
            from tasks.notifications import send_notification_email
            task = send_notification_email
        self.task = task

    def room_activated(self, room):
        self._enqueue(room.seller_email, 'room_ready', {
            'title': room.title,
            'owner_link': owner_link(room),
            'room_link': room_link(room),
        })

    def bid_placed(self, room, bid):
        amount_display = format_amount(bid.amount)
        self._enqueue(room.seller_email, 'new_bid', {
            'title': room.title,
            'amount_display': amount_display,
            'owner_link': owner_link(room),
        })
        self._enqueue(bid.bidder_email, 'bid_confirmation', {
            'title': room.title,
            'amount_display': amount_display,
            'room_link': room_link(room),
        })

    def auction_closed(self, room, bid):
        # Seller and winner learn each other's address only here
        amount_display = format_amount(bid.amount)
        self._enqueue(room.seller_email, 'auction_closed_seller', {
            'title': room.title,
            'amount_display': amount_display,
            'counterpart_email': bid.bidder_email,
        })
        self._enqueue(bid.bidder_email, 'auction_closed_winner', {
            'title': room.title,
            'amount_display': amount_display,
            'counterpart_email': room.seller_email,
        })

    def _enqueue(self, to, template_key, context):
        def dispatch():
            try:
                self.task.delay(to, template_key, context)
                logger.info(f"Queued {template_key} email")
            except Exception as e:
                logger.error(f"Failed to queue {template_key} email: {e}")

        transaction.on_commit(dispatch)
