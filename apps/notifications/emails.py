# apps/notifications/emails.py
from django.conf import settings
from django.core.mail import send_mail
from django.template.loader import render_to_string
from django.utils.html import strip_tags
import logging

logger = logging.getLogger(__name__)

# template key -> (template path, subject format)
EMAIL_TEMPLATES = {
    'room_ready': ('notifications/room_ready.html', 'Your OfferRoom for {title} is ready!'),
    'new_bid': ('notifications/new_bid.html', 'New bid on {title}: {amount_display}'),
    'bid_confirmation': ('notifications/bid_confirmation.html', 'Bid confirmed: {title}'),
    'auction_closed_seller': ('notifications/auction_closed_seller.html', 'Auction closed: {title}'),
    'auction_closed_winner': ('notifications/auction_closed_winner.html', 'You won the auction: {title}'),
}


def format_amount(amount):
    return f"${amount:,}"


def render_email(template_key, context):
    """Return (subject, html) for a template key."""
    template_name, subject = EMAIL_TEMPLATES[template_key]
    html = render_to_string(template_name, context)
    return subject.format(**context), html


def send_email(to, subject, html):
    """Deliver one message. Returns False instead of raising on failure."""
    try:
        send_mail(
            subject=subject,
            message=strip_tags(html),
            from_email=settings.DEFAULT_FROM_EMAIL,
            recipient_list=[to],
            html_message=html,
            fail_silently=False,
        )
        return True
    except Exception as e:
        logger.error(f"Email sending failed ({subject!r}): {e}")
        return False
