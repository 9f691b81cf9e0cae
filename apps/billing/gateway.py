# apps/billing/gateway.py
from dataclasses import dataclass
import json
import logging

import stripe
from django.conf import settings
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from apps.rooms.exceptions import AuctionError, UpstreamError

logger = logging.getLogger(__name__)

PAID_STATUSES = ('paid', 'no_payment_required')


class WebhookVerificationError(AuctionError):
    kind = 'forbidden'
    code = 'invalid_signature'
    status_code = 400
    default_message = 'Webhook signature verification failed'


@dataclass
class CheckoutSession:
    session_id: str
    url: str
    price_id: str


def _metadata_value(obj, key):
    metadata = getattr(obj, 'metadata', None) or {}
    try:
        return metadata[key]
    except (KeyError, TypeError):
        return None


class StripeGateway:
    """Narrow adapter over Stripe hosted checkout.

    The client is passed in rather than configured through the module-level
    ``stripe.api_key``; tests substitute a fake gateway with the same methods.
    """

    def __init__(self, client, webhook_secret, publishable_key='', currency='usd'):
        self.client = client
        self.webhook_secret = webhook_secret
        self.publishable_key = publishable_key
        self.currency = currency

    def price_for_plan(self, plan_type):
        try:
            products = self.client.products.list(params={'active': True})
            product = next(
                (p for p in products.data if _metadata_value(p, 'planType') == plan_type),
                None,
            )
            if product is None:
                raise UpstreamError(f"Product not found for plan: {plan_type}")
            prices = self.client.prices.list(params={'product': product.id, 'active': True, 'limit': 1})
        except stripe.StripeError as e:
            logger.error(f"Stripe price lookup failed for plan {plan_type}: {e}")
            raise UpstreamError()
        if not prices.data:
            raise UpstreamError("Price not found for plan")
        return prices.data[0].id

    def create_checkout_session(self, room, success_url, cancel_url):
        price_id = self.price_for_plan(room.plan_type)
        try:
            session = self.client.checkout.sessions.create(params={
                'payment_method_types': ['card'],
                'line_items': [{'price': price_id, 'quantity': 1}],
                'mode': 'payment',
                'success_url': success_url,
                'cancel_url': cancel_url,
                'customer_email': room.seller_email,
                'metadata': {'roomId': str(room.pk)},
            })
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout session creation failed for room {room.pk}: {e}")
            raise UpstreamError()
        return CheckoutSession(session_id=session.id, url=session.url, price_id=price_id)

    @retry(
        retry=retry_if_exception_type(stripe.APIConnectionError),
        stop=stop_after_attempt(2),
        wait=wait_exponential(multiplier=0.5, max=2),
        reraise=True,
    )
    def _retrieve_session(self, session_id):
        return self.client.checkout.sessions.retrieve(session_id)

    def is_session_paid(self, session_id):
        try:
            session = self._retrieve_session(session_id)
        except stripe.StripeError as e:
            logger.error(f"Stripe session lookup failed: {e}")
            raise UpstreamError()
        return getattr(session, 'payment_status', None) in PAID_STATUSES

    def parse_webhook(self, payload, signature):
        """Verify the Stripe-Signature header and return the event as a plain dict."""
        if not signature or not self.webhook_secret:
            raise WebhookVerificationError()
        if isinstance(payload, str):
            payload = payload.encode('utf-8')
        try:
            stripe.WebhookSignature.verify_header(
                payload.decode('utf-8'), signature, self.webhook_secret, stripe.Webhook.DEFAULT_TOLERANCE,
            )
            return json.loads(payload)
        except (stripe.SignatureVerificationError, ValueError) as e:
            logger.warning(f"Rejected webhook: {e}")
            raise WebhookVerificationError()

    @retry(stop=stop_after_attempt(2), wait=wait_exponential(multiplier=0.5, max=2), reraise=True)
    def list_prices(self):
        try:
            products = self.client.products.list(params={'active': True})
            prices = self.client.prices.list(params={'active': True})
        except stripe.StripeError as e:
            logger.error(f"Stripe price listing failed: {e}")
            raise UpstreamError()

        results = []
        for product in products.data:
            price = next((p for p in prices.data if p.product == product.id), None)
            results.append({
                'product_id': product.id,
                'product_name': product.name,
                'product_description': product.description,
                'plan_type': _metadata_value(product, 'planType'),
                'max_rooms': _metadata_value(product, 'maxRooms'),
                'price_id': price.id if price else None,
                'unit_amount': price.unit_amount if price else None,
                'currency': price.currency if price else None,
            })
        return results

    def ensure_plan(self, plan):
        """Create the product and price for a plan unless a product with its name exists."""
        try:
            existing = self.client.products.search(params={'query': f"name:'{plan['name']}'"})
            if existing.data:
                return False, existing.data[0].id
            product = self.client.products.create(params={
                'name': plan['name'],
                'description': plan['description'],
                'metadata': {'planType': plan['plan_type'], 'maxRooms': str(plan['max_rooms'])},
            })
            self.client.prices.create(params={
                'product': product.id,
                'unit_amount': plan['price'],
                'currency': self.currency,
            })
        except stripe.StripeError as e:
            logger.error(f"Stripe plan setup failed for {plan['name']}: {e}")
            raise UpstreamError()
        return True, product.id


def build_payment_gateway():
    return StripeGateway(
        stripe.StripeClient(settings.STRIPE_SECRET_KEY),
        webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
        publishable_key=settings.STRIPE_PUBLISHABLE_KEY,
        currency=settings.PAYMENT_CURRENCY,
    )
