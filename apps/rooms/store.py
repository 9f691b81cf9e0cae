# apps/rooms/store.py
from django.core.exceptions import ValidationError
from django.db import transaction
from django.utils import timezone
import logging

from .exceptions import AuctionAlreadyClosed, BidConflict, BidNotFound, RoomNotFound
from .models import Bid, Room

logger = logging.getLogger(__name__)


class RoomStore:
    """Persistence for rooms and bids.

    Every write that guards an auction invariant is a single conditional
    UPDATE, so the database decides races between concurrent requests:
    activation (is_paid false -> true), bid admission (highest_amount
    strictly increases) and closing (winning_bid set once).
    """

    # Fields callers may merge through update_room; lifecycle fields have dedicated writes
    UPDATABLE_FIELDS = frozenset({
        'title',
        'description',
        'images',
        'seller_email',
        'payment_session_id',
        'payment_price_id',
    })

    def create_room(self, **fields):
        room = Room.objects.create(**fields)
        logger.info(f"Room {room.pk} created (plan={room.plan_type})")
        return room

    def get_room(self, room_id):
        try:
            return Room.objects.get(pk=room_id)
        except (Room.DoesNotExist, ValidationError, ValueError):
            raise RoomNotFound()

    def get_room_by_owner_token(self, token):
        if not token:
            raise RoomNotFound()
        try:
            return Room.objects.get(owner_token=token)
        except Room.DoesNotExist:
            raise RoomNotFound()

    def get_room_by_payment_session(self, session_id):
        if not session_id:
            raise RoomNotFound()
        room = Room.objects.filter(payment_session_id=session_id).first()
        if room is None:
            raise RoomNotFound()
        return room

    def update_room(self, room_id, **fields):
        protected = set(fields) - self.UPDATABLE_FIELDS
        if protected:
            raise ValueError(f"Fields cannot be updated directly: {', '.join(sorted(protected))}")
        room = self.get_room(room_id)
        if fields:
            Room.objects.filter(pk=room.pk).update(**fields)
            room.refresh_from_db()
        return room

    def mark_room_paid(self, room_id, session_id=None):
        """Flip is_paid once. Returns True only for the call that performed the flip."""
        rooms = Room.objects.filter(pk=room_id, is_paid=False)
        if session_id is not None:
            rooms = rooms.filter(payment_session_id=session_id)
        activated = rooms.update(is_paid=True) == 1
        if activated:
            logger.info(f"Room {room_id} marked as paid")
        return activated

    def close_auction(self, room_id, winning_bid_id):
        updated = Room.objects.filter(
            pk=room_id,
            winning_bid__isnull=True,
        ).update(winning_bid_id=winning_bid_id)
        if not updated:
            # Distinguish a missing room from a lost close race
            room = self.get_room(room_id)
            raise AuctionAlreadyClosed(room_id=str(room.pk))
        logger.info(f"Auction closed for room {room_id} with bid {winning_bid_id}")
        return self.get_room(room_id)

    def get_bid(self, bid_id):
        try:
            return Bid.objects.get(pk=bid_id)
        except (Bid.DoesNotExist, ValidationError, ValueError):
            raise BidNotFound()

    def create_bid(self, room_id, amount, bidder_email, now=None):
        """Admit a bid only if it beats the room's current top amount.

        The admission guard and the new maximum are one conditional UPDATE on
        the room row; a concurrent lower bid that read the same maximum finds
        the row already raised and matches nothing. Raises BidConflict then.
        """
        now = now or timezone.now()
        with transaction.atomic():
            admitted = Room.objects.filter(
                pk=room_id,
                is_paid=True,
                winning_bid__isnull=True,
                deadline__gt=now,
                highest_amount__lt=amount,
            ).update(highest_amount=amount)
            if not admitted:
                raise BidConflict(room_id, amount)
            return Bid.objects.create(
                room_id=room_id,
                amount=amount,
                bidder_email=bidder_email,
                created_at=now,
            )

    def get_bids_for_room(self, room_id):
        return list(Bid.objects.filter(room_id=room_id).order_by('-amount', 'created_at'))

    def get_highest_bid(self, room_id):
        return Bid.objects.filter(room_id=room_id).order_by('-amount', 'created_at').first()

    def cleanup_unpaid_rooms(self, max_age):
        """Delete rooms still unpaid after ``max_age`` (a timedelta); stray bids cascade."""
        cutoff = timezone.now() - max_age
        _, deleted = Room.objects.filter(is_paid=False, created_at__lt=cutoff).delete()
        removed = deleted.get(Room._meta.label, 0)
        logger.info(f"Cleaned up {removed} unpaid rooms older than {max_age}")
        return removed
