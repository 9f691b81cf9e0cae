from apps.billing.gateway import CheckoutSession
from apps.rooms.exceptions import UpstreamError


class FakeGateway:
    """In-memory stand-in for StripeGateway."""

    publishable_key = 'pk_test_fake'

    def __init__(self, paid_sessions=(), fail=False):
        self.paid_sessions = set(paid_sessions)
        self.fail = fail
        self.created = []
        self.lookups = []

    def create_checkout_session(self, room, success_url, cancel_url):
        if self.fail:
            raise UpstreamError()
        session_id = f"cs_fake_{len(self.created) + 1}"
        self.created.append((room.pk, success_url, cancel_url))
        return CheckoutSession(
            session_id=session_id,
            url=f"https://checkout.stripe.test/pay/{session_id}",
            price_id=f"price_{room.plan_type}",
        )

    def is_session_paid(self, session_id):
        self.lookups.append(session_id)
        if self.fail:
            raise UpstreamError()
        return session_id in self.paid_sessions

    def list_prices(self):
        if self.fail:
            raise UpstreamError()
        return [{'plan_type': 'basic', 'price_id': 'price_basic', 'unit_amount': 900, 'currency': 'usd'}]
