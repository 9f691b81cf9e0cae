from unittest.mock import MagicMock, patch

from django.conf import settings
from django.core import mail
from django.test import TestCase, override_settings

from apps.notifications.emails import format_amount, render_email, send_email
from apps.notifications.notifier import EmailNotifier, owner_link, room_link
from apps.rooms.tests.factories import make_bid, make_room
from tasks.notifications import send_notification_email


class EmailNotifierTest(TestCase):
    def setUp(self):
        self.notifier = EmailNotifier()
        self.room = make_room(title='Vintage Rolex Submariner')

    def test_nothing_is_sent_before_commit(self):
        with self.captureOnCommitCallbacks(execute=False) as callbacks:
            self.notifier.room_activated(self.room)

        self.assertEqual(len(callbacks), 1)
        self.assertEqual(mail.outbox, [])

    def test_room_activated_sends_links_to_seller(self):
        with self.captureOnCommitCallbacks(execute=True):
            self.notifier.room_activated(self.room)

        message = mail.outbox[0]
        html = message.alternatives[0][0]
        self.assertEqual(message.to, ['seller@example.com'])
        self.assertEqual(message.subject, 'Your OfferRoom for Vintage Rolex Submariner is ready!')
        self.assertIn(owner_link(self.room), html)
        self.assertIn(room_link(self.room), html)

    def test_bid_placed_notifies_seller_and_bidder(self):
        bid = make_bid(self.room, 125000, bidder_email='alice@example.com')

        with self.captureOnCommitCallbacks(execute=True):
            self.notifier.bid_placed(self.room, bid)

        by_recipient = {message.to[0]: message for message in mail.outbox}
        self.assertEqual(by_recipient['seller@example.com'].subject,
                         'New bid on Vintage Rolex Submariner: $125,000')
        self.assertNotIn('alice@example.com', by_recipient['seller@example.com'].body)
        self.assertIn(room_link(self.room), by_recipient['alice@example.com'].alternatives[0][0])
        self.assertNotIn(self.room.owner_token, by_recipient['alice@example.com'].alternatives[0][0])

    def test_auction_closed_exchanges_contacts(self):
        bid = make_bid(self.room, 5000, bidder_email='alice@example.com')

        with self.captureOnCommitCallbacks(execute=True):
            self.notifier.auction_closed(self.room, bid)

        by_recipient = {message.to[0]: message for message in mail.outbox}
        self.assertIn('alice@example.com', by_recipient['seller@example.com'].body)
        self.assertIn('seller@example.com', by_recipient['alice@example.com'].body)
        self.assertEqual(by_recipient['alice@example.com'].subject,
                         'You won the auction: Vintage Rolex Submariner')

    def test_enqueue_failure_is_swallowed(self):
        task = MagicMock()
        task.delay.side_effect = ConnectionError('broker down')
        notifier = EmailNotifier(task=task)

        with self.captureOnCommitCallbacks(execute=True):
            notifier.room_activated(self.room)

        task.delay.assert_called_once()
        self.assertEqual(mail.outbox, [])


class EmailDeliveryTest(TestCase):
    def test_format_amount(self):
        self.assertEqual(format_amount(1500), '$1,500')
        self.assertEqual(format_amount(7), '$7')

    def test_render_unknown_template(self):
        with self.assertRaises(KeyError):
            render_email('weekly_digest', {})

    def test_task_reports_unknown_template(self):
        self.assertFalse(send_notification_email('x@example.com', 'weekly_digest', {}))
        self.assertEqual(mail.outbox, [])

    def test_task_delivers(self):
        delivered = send_notification_email('x@example.com', 'bid_confirmation', {
            'title': 'Signed guitar',
            'amount_display': '$10',
            'room_link': 'https://rooms.test/room/abc',
        })

        self.assertTrue(delivered)
        self.assertEqual(mail.outbox[0].from_email, settings.DEFAULT_FROM_EMAIL)

    @patch('apps.notifications.emails.send_mail', side_effect=OSError('smtp down'))
    def test_send_failure_returns_false(self, _send_mail):
        self.assertFalse(send_email('x@example.com', 'Subject', '<p>Hi</p>'))

    @override_settings(EMAIL_BACKEND='django.core.mail.backends.dummy.EmailBackend')
    def test_dummy_backend_still_counts_as_sent(self):
        self.assertTrue(send_email('x@example.com', 'Subject', '<p>Hi</p>'))
