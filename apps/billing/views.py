# apps/billing/views.py
from rest_framework.decorators import api_view
from rest_framework.response import Response
import logging

from .gateway import build_payment_gateway
from .services import build_checkout_service, build_payment_activator

logger = logging.getLogger(__name__)


@api_view(['POST'])
def start_checkout(request, room_id):
    """Create a hosted checkout session for an unpaid room"""
    session = build_checkout_service(build_payment_gateway()).start_checkout(room_id)
    return Response({'url': session.url})


@api_view(['GET'])
def verify_payment(request, room_id):
    """Seller-side poll while waiting for the payment webhook"""
    activator = build_payment_activator()
    room, paid = activator.verify_payment(
        room_id,
        request.query_params.get('session_id'),
        build_payment_gateway(),
    )

    if paid:
        return Response({
            'paid': True,
            'room': {
                'id': str(room.pk),
                'title': room.title,
                'plan_type': room.plan_type,
                'owner_token': room.owner_token,
            },
        })
    return Response({
        'paid': False,
        'pending': True,
        'message': 'Payment is being processed. Please wait...',
    })


@api_view(['POST'])
def payment_webhook(request):
    """Stripe webhook; the signature is checked before any room logic runs"""
    event = build_payment_gateway().parse_webhook(
        request.body,
        request.META.get('HTTP_STRIPE_SIGNATURE'),
    )
    activated = build_payment_activator().handle_event(event)
    return Response({'received': True, 'activated': activated})


@api_view(['GET'])
def list_prices(request):
    return Response({'prices': build_payment_gateway().list_prices()})


@api_view(['GET'])
def publishable_key(request):
    return Response({'publishable_key': build_payment_gateway().publishable_key})
