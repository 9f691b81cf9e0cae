# apps/rooms/storage.py
import uuid

from django.conf import settings


class RoomImageStorage:
    """Room photos in a public Cloud Storage bucket.

    Returned URLs start with ``https://`` and are stored verbatim in
    ``Room.images``.
    """

    def __init__(self, client=None, bucket_name=None):
        if client is None:
            from google.cloud import storage
            client = storage.Client()
        self.client = client
        self.bucket_name = bucket_name or settings.GS_BUCKET_NAME

    def upload_image(self, file_data, content_type=None):
        bucket = self.client.bucket(self.bucket_name)
        blob_name = f"rooms/uploads/{uuid.uuid4().hex}"
        blob = bucket.blob(blob_name)

        blob.upload_from_string(file_data, content_type=content_type)
        blob.make_public()

        return blob.public_url
