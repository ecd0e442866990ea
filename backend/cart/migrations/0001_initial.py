import uuid

import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('menu', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Cart',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('session_id', models.CharField(help_text='Guest identifier stored in the Django session', max_length=100, unique=True)),
                ('remote_cart_token', models.TextField(blank=True, default='')),
                ('is_syncing', models.BooleanField(default=False, help_text='Set while a full resync is in flight')),
                ('sync_started_at', models.DateTimeField(blank=True, null=True)),
                ('last_synced_at', models.DateTimeField(blank=True, null=True)),
                ('notice', models.CharField(blank=True, default='', max_length=255)),
                ('notice_expires_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('last_activity', models.DateTimeField(default=django.utils.timezone.now, help_text='Last time cart was modified (for abandonment tracking)')),
            ],
            options={
                'ordering': ['-updated_at'],
                'indexes': [models.Index(fields=['last_activity'], name='cart_last_activity_idx')],
            },
        ),
        migrations.CreateModel(
            name='CartItem',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('service_date', models.DateField()),
                ('customization', models.JSONField(blank=True, default=dict)),
                ('customization_key', models.TextField(blank=True, default='', help_text='Canonical form of the customization, used for merging')),
                ('quantity', models.PositiveIntegerField(default=1)),
                ('remote_item_key', models.CharField(blank=True, default='', help_text='WooCommerce Store API cart item key', max_length=100)),
                ('position', models.PositiveIntegerField(default=0)),
                ('added_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('cart', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='items', to='cart.cart')),
                ('menu_item', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='cart_items', to='menu.menuitem')),
            ],
            options={
                'ordering': ['position', 'added_at'],
            },
        ),
        migrations.CreateModel(
            name='CartSyncIntent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('ADD', 'Add item'), ('SET_QUANTITY', 'Set quantity'), ('REMOVE', 'Remove item'), ('CLEAR', 'Clear cart')], max_length=20)),
                ('cart_item_id', models.UUIDField(blank=True, help_text='Local line this intent targets (the line may since be deleted)', null=True)),
                ('remote_product_id', models.PositiveIntegerField(blank=True, null=True)),
                ('quantity', models.PositiveIntegerField(default=0)),
                ('item_data', models.JSONField(blank=True, default=list)),
                ('remote_item_key', models.CharField(blank=True, default='', max_length=100)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('SYNCED', 'Synced'), ('FAILED', 'Failed'), ('SKIPPED', 'Skipped'), ('SUPERSEDED', 'Superseded')], db_index=True, default='PENDING', max_length=20)),
                ('error', models.TextField(blank=True, default='')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('processed_at', models.DateTimeField(blank=True, null=True)),
                ('cart', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='sync_intents', to='cart.cart')),
            ],
            options={
                'ordering': ['created_at', 'id'],
                'indexes': [models.Index(fields=['cart', 'status'], name='cart_sync_intent_status_idx')],
            },
        ),
        migrations.AddConstraint(
            model_name='cartitem',
            constraint=models.UniqueConstraint(fields=('cart', 'menu_item', 'service_date', 'customization_key'), name='unique_line_per_cart'),
        ),
    ]
