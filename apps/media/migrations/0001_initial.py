# Initial schema for the audio library

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='AudioClip',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('filename', models.CharField(help_text='Storage path of the object', max_length=500)),
                ('original_name', models.CharField(max_length=255)),
                ('url', models.URLField(max_length=1000)),
                ('duration', models.PositiveIntegerField(blank=True, help_text='Seconds', null=True)),
                ('file_size', models.PositiveBigIntegerField(default=0)),
                ('mime_type', models.CharField(max_length=100)),
                ('title', models.CharField(blank=True, max_length=255)),
                ('description', models.TextField(blank=True)),
                ('tags', models.JSONField(blank=True, default=list)),
                ('uploaded_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='uploaded_audio_clips', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'audio_clips',
                'ordering': ['-created_at'],
            },
        ),
    ]
