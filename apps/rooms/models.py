import secrets
import uuid

from django.db import models
from django.utils import timezone


def generate_owner_token():
    return secrets.token_urlsafe(32)


class Room(models.Model):
    class Meta:
        app_label = 'rooms'
        indexes = [
            models.Index(fields=['is_paid', 'created_at'], name='rooms_room_paid_created_idx'),
        ]

    PLAN_BASIC = 'basic'
    PLAN_STANDARD = 'standard'
    PLAN_PRO = 'pro'
    PLAN_CHOICES = [
        (PLAN_BASIC, 'Basic'),
        (PLAN_STANDARD, 'Standard'),
        (PLAN_PRO, 'Pro'),
    ]

    # Lifecycle states, derived at read time (see state_at)
    STATE_DRAFT = 'draft'
    STATE_ACTIVE = 'active'
    STATE_EXPIRED = 'expired'
    STATE_CLOSED = 'closed'

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    owner_token = models.CharField(max_length=64, unique=True, default=generate_owner_token, editable=False)

    title = models.CharField(max_length=200)
    description = models.TextField()
    images = models.JSONField(default=list, blank=True)
    deadline = models.DateTimeField()

    plan_type = models.CharField(max_length=20, choices=PLAN_CHOICES, default=PLAN_BASIC)
    seller_email = models.EmailField()

    payment_session_id = models.CharField(max_length=255, null=True, blank=True, db_index=True)
    payment_price_id = models.CharField(max_length=255, null=True, blank=True)
    is_paid = models.BooleanField(default=False)

    # Mirror of the top bid amount; the conditional write in RoomStore.create_bid guards on it
    highest_amount = models.PositiveIntegerField(default=0)
    winning_bid = models.ForeignKey(
        'rooms.Bid',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='+',
    )

    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Room({self.title})"

    @property
    def is_closed(self):
        return self.winning_bid_id is not None

    def state_at(self, now=None):
        """Classify the room; expiry is computed from the clock, never stored."""
        now = now or timezone.now()
        if not self.is_paid:
            return self.STATE_DRAFT
        if self.is_closed:
            return self.STATE_CLOSED
        if now >= self.deadline:
            return self.STATE_EXPIRED
        return self.STATE_ACTIVE


class Bid(models.Model):
    class Meta:
        app_label = 'rooms'
        ordering = ['-amount', 'created_at']
        indexes = [
            models.Index(fields=['room', '-amount'], name='rooms_bid_room_amount_idx'),
        ]

    # PositiveIntegerField ceiling on every supported backend
    MAX_AMOUNT = 2147483647

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    room = models.ForeignKey(Room, on_delete=models.CASCADE, related_name='bids')
    amount = models.PositiveIntegerField()
    bidder_email = models.EmailField()
    created_at = models.DateTimeField(default=timezone.now, editable=False)

    def __str__(self):
        return f"Bid({self.amount} on {self.room_id})"
