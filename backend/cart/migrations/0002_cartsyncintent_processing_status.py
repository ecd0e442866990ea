from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('cart', '0001_initial'),
    ]

    operations = [
        migrations.AlterField(
            model_name='cartsyncintent',
            name='status',
            field=models.CharField(choices=[('PENDING', 'Pending'), ('PROCESSING', 'Processing'), ('SYNCED', 'Synced'), ('FAILED', 'Failed'), ('SKIPPED', 'Skipped'), ('SUPERSEDED', 'Superseded')], db_index=True, default='PENDING', max_length=20),
        ),
    ]
