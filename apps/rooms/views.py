# apps/rooms/views.py
from django.conf import settings
from google.api_core.exceptions import GoogleAPIError
from rest_framework import status
from rest_framework.decorators import api_view, parser_classes, throttle_classes
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
import logging

from .auction import build_auction_service
from .exceptions import UpstreamError, ValidationFailed
from .serializers import (
    BidCreateSerializer,
    CloseAuctionSerializer,
    DraftRoomSerializer,
    OwnerBidSerializer,
    OwnerRoomSerializer,
    PublicBidSerializer,
    PublicRoomSerializer,
    RoomCreateSerializer,
    public_bid_listing,
)

logger = logging.getLogger(__name__)


class BidRateThrottle(AnonRateThrottle):
    scope = 'bids'


@api_view(['POST'])
def create_room(request):
    """Create an unpaid room; checkout activates it"""
    serializer = RoomCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    room = build_auction_service().create_room(**serializer.validated_data)
    return Response({'room': DraftRoomSerializer(room).data}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
def room_detail(request, room_id):
    """Public view of an active room for invited buyers"""
    service = build_auction_service()
    room, bids = service.get_public_room(room_id)

    return Response({
        'room': PublicRoomSerializer(room, context={'now': service.clock()}).data,
        'bids': public_bid_listing(room, bids),
        'highest_bid': bids[0].amount if bids else 0,
        'total_bids': len(bids),
    })


@api_view(['POST'])
@throttle_classes([BidRateThrottle])
def place_bid(request, room_id):
    serializer = BidCreateSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    bid = build_auction_service().place_bid(
        room_id,
        serializer.validated_data['amount'],
        serializer.validated_data['bidder_email'],
    )
    return Response({'bid': PublicBidSerializer(bid).data}, status=status.HTTP_201_CREATED)


@api_view(['GET'])
def owner_room_detail(request, token):
    """Admin view: full bidder emails regardless of plan"""
    service = build_auction_service()
    room, bids = service.get_owner_room(token)

    return Response({
        'room': OwnerRoomSerializer(room, context={'now': service.clock()}).data,
        'bids': OwnerBidSerializer(bids, many=True).data,
        'highest_bid': bids[0].amount if bids else 0,
        'total_bids': len(bids),
    })


@api_view(['POST'])
def close_auction(request, room_id):
    serializer = CloseAuctionSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    service = build_auction_service()
    room, bid = service.close_auction(
        room_id,
        serializer.validated_data['token'],
        serializer.validated_data['bid_id'],
    )
    return Response({
        'room': OwnerRoomSerializer(room, context={'now': service.clock()}).data,
        'winning_bid': OwnerBidSerializer(bid).data,
    })


@api_view(['POST'])
@parser_classes([MultiPartParser, FormParser])
def upload_image(request):
    """Store a room photo and return the URL to put in Room.images"""
    from .storage import RoomImageStorage

    upload = request.FILES.get('image')
    if upload is None:
        raise ValidationFailed("Missing image file")
    if not (upload.content_type or '').startswith('image/'):
        raise ValidationFailed("Only image uploads are accepted")
    if upload.size > settings.MAX_IMAGE_UPLOAD_BYTES:
        raise ValidationFailed("Image is too large")

    try:
        url = RoomImageStorage().upload_image(upload.read(), content_type=upload.content_type)
    except GoogleAPIError as e:
        logger.error(f"Image upload failed: {e}")
        raise UpstreamError("Image storage unavailable")

    return Response({'path': url}, status=status.HTTP_201_CREATED)
