from datetime import timedelta

from django.conf import settings
from django.core.management.base import BaseCommand

from apps.rooms.store import RoomStore


class Command(BaseCommand):
    help = 'Delete rooms whose checkout was never completed'

    def add_arguments(self, parser):
        parser.add_argument(
            '--max-age-minutes',
            type=int,
            default=settings.UNPAID_ROOM_MAX_AGE_MINUTES,
        )

    def handle(self, *args, **options):
        max_age = options['max_age_minutes']
        removed = RoomStore().cleanup_unpaid_rooms(timedelta(minutes=max_age))
        self.stdout.write(
            self.style.SUCCESS(f'Removed {removed} unpaid rooms older than {max_age} minutes')
        )
