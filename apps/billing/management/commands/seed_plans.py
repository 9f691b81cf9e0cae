from django.core.management.base import BaseCommand

from apps.billing.gateway import build_payment_gateway
from apps.billing.plans import PLANS


class Command(BaseCommand):
    help = 'Create the room plan products and prices in Stripe (skips existing ones)'

    def handle(self, *args, **options):
        gateway = build_payment_gateway()

        self.stdout.write('Creating room plan products...')
        for plan in PLANS:
            created, product_id = gateway.ensure_plan(plan)
            if created:
                self.stdout.write(
                    self.style.SUCCESS(f'Created: {plan["name"]} ({product_id}) - {plan["price"]} {gateway.currency}')
                )
            else:
                self.stdout.write(f'Product "{plan["name"]}" already exists, skipping...')
