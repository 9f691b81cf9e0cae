# apps/billing/services.py
import logging
import secrets

from django.conf import settings

from apps.rooms.exceptions import (
    PaymentSessionMismatch,
    RoomAlreadyPaid,
    RoomNotFound,
    UpstreamError,
    ValidationFailed,
)

from .gateway import PAID_STATUSES

logger = logging.getLogger(__name__)

ACTIVATING_EVENTS = (
    'checkout.session.completed',
    'checkout.session.async_payment_succeeded',
)


def _same_session(recorded, presented):
    if not recorded or not presented:
        return False
    return secrets.compare_digest(str(recorded), str(presented))


class CheckoutService:
    def __init__(self, store, gateway):
        self.store = store
        self.gateway = gateway

    def start_checkout(self, room_id):
        room = self.store.get_room(room_id)
        if room.is_paid:
            raise RoomAlreadyPaid()

        base_url = settings.FRONTEND_BASE_URL
        session = self.gateway.create_checkout_session(
            room,
            success_url=f"{base_url}/room/ready/{room.pk}?session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{base_url}/create",
        )
        # Recorded before redirecting; activation only trusts this session id
        self.store.update_room(
            room.pk,
            payment_session_id=session.session_id,
            payment_price_id=session.price_id,
        )
        logger.info(f"Checkout started for room {room.pk}")
        return session


class PaymentActivator:
    """Turns confirmed payments into exactly one activation per room.

    Both the webhook and the client poll go through ``activate``: it only
    flips a room whose recorded session matches the confirmed one, and the
    store's conditional write lets a single caller win when they race.
    """

    def __init__(self, store, notifier):
        self.store = store
        self.notifier = notifier

    def activate(self, room_id, session_id, source):
        try:
            room = self.store.get_room(room_id)
        except RoomNotFound:
            logger.warning(f"Payment confirmation ({source}) for unknown room {room_id}")
            return False

        if not _same_session(room.payment_session_id, session_id):
            logger.warning(f"Payment confirmation ({source}) does not match session of room {room.pk}")
            return False
        if room.is_paid:
            logger.info(f"Room {room.pk} already active, ignoring {source} confirmation")
            return False

        activated = self.store.mark_room_paid(room.pk, session_id=room.payment_session_id)
        if activated:
            room.is_paid = True
            logger.info(f"Room {room.pk} activated via {source}")
            self.notifier.room_activated(room)
        return activated

    def handle_event(self, event):
        """Process an already-verified provider event. Returns True if a room was activated."""
        event_type = event.get('type')
        if event_type not in ACTIVATING_EVENTS:
            logger.debug(f"Ignoring payment event {event_type}")
            return False

        session = (event.get('data') or {}).get('object') or {}
        session_id = session.get('id')
        if event_type == 'checkout.session.completed' and session.get('payment_status') not in PAID_STATUSES:
            logger.info(f"Checkout completed without payment yet ({session.get('payment_status')})")
            return False

        room_id = (session.get('metadata') or {}).get('roomId')
        if not room_id:
            try:
                room_id = self.store.get_room_by_payment_session(session_id).pk
            except RoomNotFound:
                logger.warning("Payment event without room metadata or known session")
                return False

        return self.activate(room_id, session_id, source='webhook')

    def verify_payment(self, room_id, session_id, gateway):
        """Poll fallback for a seller waiting on the webhook. Returns (room, paid)."""
        room = self.store.get_room(room_id)
        if not session_id:
            raise ValidationFailed("Session ID required")
        if not _same_session(room.payment_session_id, session_id):
            raise PaymentSessionMismatch()
        if room.is_paid:
            return room, True

        try:
            paid = gateway.is_session_paid(session_id)
        except UpstreamError as e:
            logger.error(f"Payment status fallback failed for room {room.pk}: {e}")
            return room, False

        if paid:
            self.activate(room.pk, session_id, source='poll')
            room = self.store.get_room(room.pk)
        return room, room.is_paid


def build_checkout_service(gateway):
    from apps.rooms.store import RoomStore

    return CheckoutService(RoomStore(), gateway)


def build_payment_activator():
    from apps.notifications.notifier import EmailNotifier
    from apps.rooms.store import RoomStore

    return PaymentActivator(RoomStore(), EmailNotifier())
