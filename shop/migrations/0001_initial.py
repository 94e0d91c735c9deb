from decimal import Decimal

from django.db import migrations, models
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Card',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('set_name', models.CharField(max_length=200)),
                ('card_number', models.CharField(max_length=20)),
                ('rarity', models.CharField(blank=True, max_length=60)),
                ('image_url', models.URLField(blank=True, max_length=500)),
                ('price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=10)),
                ('condition', models.CharField(choices=[('Mint', 'Mint'), ('Near Mint', 'Near Mint'), ('Excellent', 'Excellent'), ('Good', 'Good'), ('Played', 'Played')], default='Near Mint', max_length=20)),
                ('description', models.TextField(blank=True)),
                ('seller_notes', models.TextField(blank=True)),
                ('is_featured', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['name', 'set_name', 'card_number'], name='card_identity_idx')],
            },
        ),
    ]
