import uuid

import apps.rooms.models
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Room',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('owner_token', models.CharField(default=apps.rooms.models.generate_owner_token, editable=False, max_length=64, unique=True)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField()),
                ('images', models.JSONField(blank=True, default=list)),
                ('deadline', models.DateTimeField()),
                ('plan_type', models.CharField(choices=[('basic', 'Basic'), ('standard', 'Standard'), ('pro', 'Pro')], default='basic', max_length=20)),
                ('seller_email', models.EmailField(max_length=254)),
                ('payment_session_id', models.CharField(blank=True, db_index=True, max_length=255, null=True)),
                ('payment_price_id', models.CharField(blank=True, max_length=255, null=True)),
                ('is_paid', models.BooleanField(default=False)),
                ('highest_amount', models.PositiveIntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
        ),
        migrations.CreateModel(
            name='Bid',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('amount', models.PositiveIntegerField()),
                ('bidder_email', models.EmailField(max_length=254)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('room', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bids', to='rooms.room')),
            ],
            options={
                'ordering': ['-amount', 'created_at'],
            },
        ),
        migrations.AddField(
            model_name='room',
            name='winning_bid',
            field=models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to='rooms.bid'),
        ),
        migrations.AddIndex(
            model_name='room',
            index=models.Index(fields=['is_paid', 'created_at'], name='rooms_room_paid_created_idx'),
        ),
        migrations.AddIndex(
            model_name='bid',
            index=models.Index(fields=['room', '-amount'], name='rooms_bid_room_amount_idx'),
        ),
    ]
