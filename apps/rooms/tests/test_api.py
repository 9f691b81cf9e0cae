from datetime import timedelta
from unittest.mock import MagicMock, patch

from django.core import mail
from django.core.files.uploadedfile import SimpleUploadedFile
from django.urls import reverse
from django.utils import timezone
from google.api_core.exceptions import ServiceUnavailable
from rest_framework import status
from rest_framework.test import APITestCase

from apps.rooms.models import Bid, Room
from apps.rooms.storage import RoomImageStorage

from .factories import make_bid, make_room


class CreateRoomAPITest(APITestCase):
    def setUp(self):
        self.url = reverse('create_room')
        self.payload = {
            'title': 'Vintage Rolex Submariner',
            'description': 'Well kept 1968 Submariner with original box and papers.',
            'images': ['/objects/uploads/rolex-front.jpg', 'https://cdn.example.com/rolex-back.jpg'],
            'deadline': (timezone.now() + timedelta(days=2)).isoformat(),
            'seller_email': 'seller@example.com',
            'plan_type': 'standard',
        }

    def test_create_room_returns_unpaid_draft(self):
        response = self.client.post(self.url, self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        room = response.data['room']
        self.assertFalse(room['is_paid'])
        self.assertEqual(room['plan_type'], 'standard')
        self.assertNotIn('owner_token', room)
        self.assertTrue(Room.objects.filter(pk=room['id'], is_paid=False).exists())

    def test_plan_defaults_to_basic(self):
        del self.payload['plan_type']

        response = self.client.post(self.url, self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['room']['plan_type'], 'basic')

    def test_invalid_fields_are_rejected(self):
        cases = {
            'title': 'Shoe',
            'description': 'Too short',
            'seller_email': 'not-an-email',
            'plan_type': 'platinum',
            'deadline': (timezone.now() - timedelta(hours=1)).isoformat(),
            'images': ['ftp://example.com/a.jpg'],
        }
        for field, value in cases.items():
            payload = {**self.payload, field: value}
            response = self.client.post(self.url, payload, format='json')

            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, field)
            self.assertEqual(response.data['kind'], 'validation')
            self.assertIn(field, response.data['details'])

        self.assertFalse(Room.objects.exists())

    def test_too_many_images(self):
        self.payload['images'] = [f'/objects/uploads/{i}.jpg' for i in range(9)]

        response = self.client.post(self.url, self.payload, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('images', response.data['details'])


class RoomDetailAPITest(APITestCase):
    def test_draft_room_is_not_public(self):
        room = make_room(paid=False)

        response = self.client.get(reverse('room_detail', args=[room.pk]))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['kind'], 'invalid_state')
        self.assertEqual(response.data['code'], 'not_activated')

    def test_unknown_room(self):
        response = self.client.get(reverse('room_detail', args=['does-not-exist']))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data['kind'], 'not_found')

    def test_public_view_never_exposes_bidder_emails(self):
        room = make_room(plan_type=Room.PLAN_PRO)
        make_bid(room, 1000, bidder_email='alice@example.com')
        make_bid(room, 1500, bidder_email='bob@example.com')

        response = self.client.get(reverse('room_detail', args=[room.pk]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.content.decode()
        self.assertNotIn('alice@example.com', body)
        self.assertNotIn('bob@example.com', body)
        self.assertNotIn(room.owner_token, body)
        self.assertNotIn('seller_email', response.data['room'])
        self.assertEqual(response.data['highest_bid'], 1500)
        self.assertEqual(response.data['total_bids'], 2)
        self.assertEqual(response.data['room']['status'], 'active')
        self.assertEqual(response.data['bids'][0]['bidder_label'], 'Buyer 2')


class PlaceBidAPITest(APITestCase):
    def setUp(self):
        self.room = make_room()
        self.url = reverse('place_bid', args=[self.room.pk])

    def test_bid_accepted_and_emails_queued(self):
        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(self.url, {'amount': 1000, 'bidder_email': 'alice@example.com'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['bid']['amount'], 1000)
        self.assertNotIn('bidder_email', response.data['bid'])
        recipients = sorted(message.to[0] for message in mail.outbox)
        self.assertEqual(recipients, ['alice@example.com', 'seller@example.com'])

    def test_bid_too_low_reports_current_highest(self):
        make_bid(self.room, 1500)

        response = self.client.post(self.url, {'amount': 1200, 'bidder_email': 'c@example.com'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['code'], 'bid_too_low')
        self.assertEqual(response.data['current_highest'], 1500)

    def test_malformed_amounts(self):
        for amount in (0, -1, 'abc', 12.5, 2**31, 2**63):
            response = self.client.post(self.url, {'amount': amount, 'bidder_email': 'c@example.com'}, format='json')

            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, amount)
            self.assertEqual(response.data['kind'], 'validation')

        self.assertFalse(Bid.objects.exists())

    def test_largest_storable_amount_is_accepted(self):
        response = self.client.post(self.url, {'amount': Bid.MAX_AMOUNT, 'bidder_email': 'c@example.com'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.room.refresh_from_db()
        self.assertEqual(self.room.highest_amount, Bid.MAX_AMOUNT)

    def test_bid_after_deadline(self):
        room = make_room(deadline=timezone.now() - timedelta(seconds=1))

        response = self.client.post(reverse('place_bid', args=[room.pk]),
                                    {'amount': 100, 'bidder_email': 'c@example.com'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'deadline_passed')

    def test_bid_on_draft_room(self):
        room = make_room(paid=False)

        response = self.client.post(reverse('place_bid', args=[room.pk]),
                                    {'amount': 100, 'bidder_email': 'c@example.com'}, format='json')

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(response.data['code'], 'not_activated')


class OwnerAPITest(APITestCase):
    def setUp(self):
        self.room = make_room(plan_type=Room.PLAN_BASIC)
        self.low = make_bid(self.room, 1000, bidder_email='alice@example.com')
        self.high = make_bid(self.room, 1500, bidder_email='bob@example.com')

    def test_owner_view_lists_emails(self):
        response = self.client.get(reverse('owner_room_detail', args=[self.room.owner_token]))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([b['bidder_email'] for b in response.data['bids']], ['bob@example.com', 'alice@example.com'])
        self.assertEqual(response.data['room']['seller_email'], 'seller@example.com')
        self.assertEqual(response.data['highest_bid'], 1500)

    def test_owner_view_unknown_token(self):
        response = self.client.get(reverse('owner_room_detail', args=['guess']))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_owner_view_of_unpaid_room_is_pending(self):
        draft = make_room(paid=False)

        response = self.client.get(reverse('owner_room_detail', args=[draft.owner_token]))

        self.assertEqual(response.status_code, status.HTTP_409_CONFLICT)
        self.assertTrue(response.data['pending'])

    def test_close_with_wrong_token(self):
        response = self.client.post(reverse('close_auction', args=[self.room.pk]),
                                    {'token': 'wrong', 'bid_id': str(self.high.pk)}, format='json')

        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.data['kind'], 'forbidden')
        self.room.refresh_from_db()
        self.assertIsNone(self.room.winning_bid_id)

    def test_close_reveals_contacts_by_email(self):
        url = reverse('close_auction', args=[self.room.pk])

        with self.captureOnCommitCallbacks(execute=True):
            response = self.client.post(url, {'token': self.room.owner_token, 'bid_id': str(self.low.pk)}, format='json')

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['room']['status'], 'closed')
        self.assertEqual(response.data['winning_bid']['bidder_email'], 'alice@example.com')
        by_recipient = {message.to[0]: message for message in mail.outbox}
        self.assertIn('alice@example.com', by_recipient['seller@example.com'].body)
        self.assertIn('seller@example.com', by_recipient['alice@example.com'].body)

        second = self.client.post(url, {'token': self.room.owner_token, 'bid_id': str(self.high.pk)}, format='json')
        self.assertEqual(second.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(second.data['code'], 'already_closed')

        public = self.client.post(reverse('place_bid', args=[self.room.pk]),
                                  {'amount': 9999, 'bidder_email': 'late@example.com'}, format='json')
        self.assertEqual(public.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(public.data['code'], 'closed')


class UploadImageAPITest(APITestCase):
    def setUp(self):
        self.url = reverse('upload_image')

    @patch('apps.rooms.storage.RoomImageStorage')
    def test_upload_returns_public_url(self, storage_cls):
        storage_cls.return_value.upload_image.return_value = 'https://storage.googleapis.com/bucket/rooms/uploads/abc'
        image = SimpleUploadedFile('front.jpg', b'\xff\xd8\xff\xe0fakejpeg', content_type='image/jpeg')

        response = self.client.post(self.url, {'image': image}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['path'], 'https://storage.googleapis.com/bucket/rooms/uploads/abc')
        storage_cls.return_value.upload_image.assert_called_once_with(b'\xff\xd8\xff\xe0fakejpeg', content_type='image/jpeg')

    @patch('apps.rooms.storage.RoomImageStorage')
    def test_upload_rejects_non_images(self, storage_cls):
        document = SimpleUploadedFile('notes.txt', b'hello', content_type='text/plain')

        response = self.client.post(self.url, {'image': document}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        storage_cls.return_value.upload_image.assert_not_called()

    def test_upload_requires_file(self):
        response = self.client.post(self.url, {}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    @patch('apps.rooms.storage.RoomImageStorage')
    def test_storage_outage_is_upstream_error(self, storage_cls):
        storage_cls.return_value.upload_image.side_effect = ServiceUnavailable('bucket down')
        image = SimpleUploadedFile('front.jpg', b'jpeg', content_type='image/jpeg')

        response = self.client.post(self.url, {'image': image}, format='multipart')

        self.assertEqual(response.status_code, status.HTTP_502_BAD_GATEWAY)
        self.assertEqual(response.data['kind'], 'upstream')


class RoomImageStorageTest(APITestCase):
    def test_upload_stores_public_blob(self):
        client = MagicMock()
        blob = client.bucket.return_value.blob.return_value
        blob.public_url = 'https://storage.googleapis.com/room-images/rooms/uploads/abc'

        url = RoomImageStorage(client=client, bucket_name='room-images').upload_image(b'jpeg', content_type='image/jpeg')

        self.assertEqual(url, 'https://storage.googleapis.com/room-images/rooms/uploads/abc')
        client.bucket.assert_called_once_with('room-images')
        blob_name = client.bucket.return_value.blob.call_args.args[0]
        self.assertTrue(blob_name.startswith('rooms/uploads/'))
        blob.upload_from_string.assert_called_once_with(b'jpeg', content_type='image/jpeg')
        blob.make_public.assert_called_once_with()
