# apps/rooms/auction.py
import logging
import secrets

from django.utils import timezone

from .exceptions import (
    AuctionAlreadyClosed,
    AuctionClosed,
    BidConflict,
    BidNotFound,
    BidNotInRoom,
    BidTooLow,
    DeadlinePassed,
    InvalidBid,
    InvalidOwnerToken,
    RoomNotActivated,
)
from .models import Bid

logger = logging.getLogger(__name__)


class AuctionService:
    """Room lifecycle rules: Draft -> Active -> (Expired) -> Closed.

    Activation lives in apps.billing; this service creates rooms, admits
    bids and closes auctions. Collaborators are passed in so tests can swap
    the notifier and pin the clock.
    """

    def __init__(self, store, notifier, clock=timezone.now):
        self.store = store
        self.notifier = notifier
        self.clock = clock

    def create_room(self, **fields):
        return self.store.create_room(**fields)

    def place_bid(self, room_id, amount, bidder_email):
        if isinstance(amount, bool) or not isinstance(amount, int) or not 0 < amount <= Bid.MAX_AMOUNT:
            raise InvalidBid()

        now = self.clock()
        room = self.store.get_room(room_id)
        self._check_bid_admissible(room, amount, now)

        try:
            bid = self.store.create_bid(room.pk, amount, bidder_email, now=now)
        except BidConflict:
            # Lost a race after the pre-check: explain against the committed state
            room = self.store.get_room(room_id)
            self._check_bid_admissible(room, amount, now)
            raise BidTooLow(current_highest=room.highest_amount)

        logger.info(f"Bid {bid.pk} of {amount} accepted for room {room.pk}")
        self.notifier.bid_placed(room, bid)
        return bid

    def _check_bid_admissible(self, room, amount, now):
        if not room.is_paid:
            raise RoomNotActivated()
        if room.is_closed:
            raise AuctionClosed()
        if now >= room.deadline:
            raise DeadlinePassed()
        if amount <= room.highest_amount:
            logger.info(f"Bid of {amount} rejected for room {room.pk}: highest is {room.highest_amount}")
            raise BidTooLow(current_highest=room.highest_amount)

    def close_auction(self, room_id, owner_token, bid_id):
        room = self.store.get_room(room_id)
        if not owner_token or not secrets.compare_digest(str(owner_token), room.owner_token):
            logger.warning(f"Close attempt with invalid owner token for room {room.pk}")
            raise InvalidOwnerToken()
        if not room.is_paid:
            raise RoomNotActivated()
        if room.is_closed:
            raise AuctionAlreadyClosed()

        try:
            bid = self.store.get_bid(bid_id)
        except BidNotFound:
            raise BidNotInRoom()
        if bid.room_id != room.pk:
            raise BidNotInRoom()

        room = self.store.close_auction(room.pk, bid.pk)
        self.notifier.auction_closed(room, bid)
        return room, bid

    def get_public_room(self, room_id):
        room = self.store.get_room(room_id)
        if not room.is_paid:
            raise RoomNotActivated()
        return room, self.store.get_bids_for_room(room.pk)

    def get_owner_room(self, owner_token):
        room = self.store.get_room_by_owner_token(owner_token)
        if not room.is_paid:
            raise RoomNotActivated(
                "Room not activated yet",
                pending=True,
                detail="Payment is still processing. Please complete payment or wait for confirmation.",
            )
        return room, self.store.get_bids_for_room(room.pk)

    def state_of(self, room):
        return room.state_at(self.clock())


def build_auction_service():
    from apps.notifications.notifier import EmailNotifier
    from .store import RoomStore

    return AuctionService(RoomStore(), EmailNotifier())
