"""Error taxonomy for the auction domain.

Every error carries a machine-readable ``kind`` (not_found, forbidden,
invalid_state, validation, upstream) and a finer ``code`` so clients can tell
a closed auction apart from a malformed bid. ``core.exceptions`` renders
them as JSON.
"""


class AuctionError(Exception):
    kind = 'error'
    code = 'error'
    status_code = 400
    default_message = 'Request could not be processed'

    def __init__(self, message=None, **extra):
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)

    def as_dict(self):
        payload = {'error': self.message, 'kind': self.kind, 'code': self.code}
        payload.update(self.extra)
        return payload


# Not found

class NotFound(AuctionError):
    kind = 'not_found'
    code = 'not_found'
    status_code = 404
    default_message = 'Not found'


class RoomNotFound(NotFound):
    code = 'room_not_found'
    default_message = 'Room not found'


class BidNotFound(NotFound):
    code = 'bid_not_found'
    default_message = 'Bid not found'


# Forbidden

class Unauthorized(AuctionError):
    kind = 'forbidden'
    code = 'forbidden'
    status_code = 403
    default_message = 'Unauthorized'


class InvalidOwnerToken(Unauthorized):
    code = 'invalid_owner_token'
    default_message = 'Unauthorized'


class PaymentSessionMismatch(Unauthorized):
    code = 'session_mismatch'
    default_message = 'Invalid session for this room'


# Invalid state

class InvalidState(AuctionError):
    kind = 'invalid_state'
    code = 'invalid_state'
    status_code = 409
    default_message = 'Room is not in a valid state for this action'


class RoomNotActivated(InvalidState):
    code = 'not_activated'
    default_message = 'Room not activated'


class AuctionClosed(InvalidState):
    code = 'closed'
    default_message = 'Auction has been closed'


class DeadlinePassed(InvalidState):
    code = 'deadline_passed'
    default_message = 'Bidding has ended'


class AuctionAlreadyClosed(InvalidState):
    code = 'already_closed'
    default_message = 'Auction already closed'


class RoomAlreadyPaid(InvalidState):
    code = 'already_paid'
    default_message = 'Room already paid'


class BidNotInRoom(InvalidState):
    code = 'bid_not_in_room'
    default_message = 'Invalid bid for this room'


# Validation

class ValidationFailed(AuctionError):
    kind = 'validation'
    code = 'invalid'
    status_code = 400
    default_message = 'Invalid input'


class InvalidBid(ValidationFailed):
    code = 'invalid_bid'
    default_message = 'Bid amount must be a positive whole number'


class BidTooLow(ValidationFailed):
    code = 'bid_too_low'
    default_message = 'Bid must be higher than current highest bid'

    def __init__(self, current_highest, message=None):
        self.current_highest = current_highest
        super().__init__(message, current_highest=current_highest)


# Upstream

class UpstreamError(AuctionError):
    kind = 'upstream'
    code = 'upstream_error'
    status_code = 502
    default_message = 'Payment provider unavailable'


class BidConflict(Exception):
    """The atomic bid write admitted nothing; the caller re-reads the room to explain why."""

    def __init__(self, room_id, amount):
        self.room_id = room_id
        self.amount = amount
        super().__init__(f"Bid of {amount} not admitted for room {room_id}")
