# Initial schema for radio stations

import apps.stations.models
from django.db import migrations, models
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('taxonomy', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Station',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('name', models.CharField(max_length=200, unique=True)),
                ('description', models.TextField(blank=True)),
                ('logo_url', models.URLField(blank=True, max_length=1000)),
                ('province', models.CharField(choices=[('EASTERN_CAPE', 'Eastern Cape'), ('FREE_STATE', 'Free State'), ('GAUTENG', 'Gauteng'), ('KWAZULU_NATAL', 'KwaZulu-Natal'), ('LIMPOPO', 'Limpopo'), ('MPUMALANGA', 'Mpumalanga'), ('NORTHERN_CAPE', 'Northern Cape'), ('NORTH_WEST', 'North West'), ('WESTERN_CAPE', 'Western Cape'), ('NATIONAL', 'National')], default='GAUTENG', max_length=20)),
                ('contact_number', models.CharField(blank=True, max_length=30)),
                ('contact_email', models.EmailField(blank=True, max_length=254)),
                ('website', models.URLField(blank=True)),
                ('is_active', models.BooleanField(db_index=True, default=True)),
                ('has_content_access', models.BooleanField(default=True)),
                ('allowed_languages', models.JSONField(blank=True, default=apps.stations.models.default_allowed_languages)),
                ('allowed_religions', models.JSONField(blank=True, default=apps.stations.models.default_allowed_religions)),
                ('blocked_categories', models.JSONField(blank=True, default=list, help_text='Category ids hidden from this station')),
                ('classifications', models.ManyToManyField(blank=True, related_name='stations', to='taxonomy.classification')),
            ],
            options={
                'db_table': 'stations',
                'ordering': ['name'],
            },
        ),
    ]
