from decimal import Decimal

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='MenuItem',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('code', models.SlugField(help_text="Stable public identifier, e.g. 'm-med-chicken'.", max_length=64, unique=True)),
                ('name', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('price', models.DecimalField(decimal_places=2, max_digits=10, validators=[django.core.validators.MinValueValidator(Decimal('0.00'))])),
                ('tags', models.JSONField(blank=True, default=list)),
                ('calories', models.PositiveIntegerField(blank=True, null=True)),
                ('image_url', models.URLField(blank=True, max_length=500)),
                ('is_popular', models.BooleanField(default=False)),
                ('woo_product_id', models.PositiveIntegerField(blank=True, help_text='WooCommerce product id. Leave blank to keep the item out of remote carts.', null=True)),
                ('customization_options', models.JSONField(blank=True, default=dict, help_text='Allowed choices: bases, sauces, proteins, swaps, dislikes (lists of strings) and has_vegetarian_option ({label, instructions}).')),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Menu Item',
                'verbose_name_plural': 'Menu Items',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='DayMenuEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('weekday', models.PositiveSmallIntegerField(choices=[(0, 'Monday'), (1, 'Tuesday'), (2, 'Wednesday'), (3, 'Thursday'), (4, 'Friday'), (5, 'Saturday'), (6, 'Sunday')])),
                ('category_name', models.CharField(default='Daily Selection', max_length=100)),
                ('position', models.PositiveIntegerField(default=0)),
                ('menu_item', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='day_entries', to='menu.menuitem')),
            ],
            options={
                'verbose_name': 'Day Menu Entry',
                'verbose_name_plural': 'Day Menu Entries',
                'ordering': ['weekday', 'position', 'id'],
            },
        ),
        migrations.AddConstraint(
            model_name='daymenuentry',
            constraint=models.UniqueConstraint(fields=('weekday', 'menu_item'), name='unique_menu_item_per_weekday'),
        ),
    ]
