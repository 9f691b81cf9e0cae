from django.conf import settings
from django.utils import timezone
from rest_framework import serializers
from .models import Room, Bid


class RoomCreateSerializer(serializers.ModelSerializer):
    title = serializers.CharField(min_length=5, max_length=200)
    description = serializers.CharField(min_length=20)
    images = serializers.ListField(
        child=serializers.CharField(max_length=1024),
        required=False,
        default=list,
    )
    plan_type = serializers.ChoiceField(choices=Room.PLAN_CHOICES, default=Room.PLAN_BASIC)

    class Meta:
        model = Room
        fields = ('title', 'description', 'images', 'deadline', 'seller_email', 'plan_type')

    def validate_deadline(self, value):
        if value <= timezone.now():
            raise serializers.ValidationError("Deadline must be in the future.")
        return value

    def validate_images(self, value):
        if len(value) > settings.MAX_ROOM_IMAGES:
            raise serializers.ValidationError(
                f"A room can have at most {settings.MAX_ROOM_IMAGES} images."
            )
        for path in value:
            if not path.startswith(settings.ROOM_IMAGE_PREFIXES):
                raise serializers.ValidationError(f"Unsupported image location: {path}")
        return value


class BidCreateSerializer(serializers.Serializer):
    amount = serializers.IntegerField(min_value=1, max_value=Bid.MAX_AMOUNT)
    bidder_email = serializers.EmailField()


class CloseAuctionSerializer(serializers.Serializer):
    token = serializers.CharField()
    bid_id = serializers.CharField()


class DraftRoomSerializer(serializers.ModelSerializer):
    """Returned to the seller right after creation, before payment."""

    class Meta:
        model = Room
        fields = (
            'id', 'title', 'description', 'images', 'deadline',
            'plan_type', 'seller_email', 'is_paid', 'created_at',
        )


class PublicRoomSerializer(serializers.ModelSerializer):
    status = serializers.SerializerMethodField()

    class Meta:
        model = Room
        fields = ('id', 'title', 'description', 'images', 'deadline', 'plan_type', 'status')

    def get_status(self, obj):
        return obj.state_at(self.context.get('now'))


class OwnerRoomSerializer(serializers.ModelSerializer):
    status = serializers.SerializerMethodField()

    class Meta:
        model = Room
        fields = (
            'id', 'title', 'description', 'images', 'deadline', 'seller_email',
            'plan_type', 'winning_bid', 'status', 'created_at',
        )

    def get_status(self, obj):
        return obj.state_at(self.context.get('now'))


class PublicBidSerializer(serializers.ModelSerializer):
    class Meta:
        model = Bid
        fields = ('id', 'amount', 'created_at')


class OwnerBidSerializer(serializers.ModelSerializer):
    class Meta:
        model = Bid
        fields = ('id', 'amount', 'bidder_email', 'created_at')


def public_bid_listing(room, bids):
    """Bids as shown to invited buyers.

    Basic rooms show amounts only. Other plans add a "Buyer N" label, the
    highest bid carrying N = total and the lowest N = 1. Emails never appear.
    """
    listing = PublicBidSerializer(bids, many=True).data
    if room.plan_type == Room.PLAN_BASIC:
        return listing
    total = len(listing)
    for index, entry in enumerate(listing):
        entry['bidder_label'] = f"Buyer {total - index}"
    return listing
