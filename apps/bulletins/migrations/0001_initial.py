# Initial schema for bulletins and their schedules

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid

LANGUAGES = [('ENGLISH', 'English'), ('AFRIKAANS', 'Afrikaans'), ('XHOSA', 'Xhosa')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('taxonomy', '0001_initial'),
        ('stories', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='BulletinSchedule',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('title', models.CharField(max_length=200)),
                ('time', models.CharField(help_text='HH:MM, 24-hour', max_length=5)),
                ('language', models.CharField(choices=LANGUAGES, max_length=20)),
                ('schedule_type', models.CharField(choices=[('WEEKDAY', 'Weekday'), ('WEEKEND', 'Weekend'), ('PUBLIC_HOLIDAY', 'Public Holiday')], max_length=20)),
                ('is_active', models.BooleanField(default=True)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'bulletin_schedules',
                'ordering': ['schedule_type', 'time', 'language'],
                'constraints': [models.UniqueConstraint(fields=('time', 'language', 'schedule_type'), name='unique_bulletin_slot')],
            },
        ),
        migrations.CreateModel(
            name='Bulletin',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('title', models.CharField(max_length=255)),
                ('slug', models.SlugField(max_length=300, unique=True)),
                ('intro', models.TextField()),
                ('outro', models.TextField()),
                ('language', models.CharField(choices=LANGUAGES, db_index=True, max_length=20)),
                ('status', models.CharField(choices=[('DRAFT', 'Draft'), ('IN_REVIEW', 'In Review'), ('NEEDS_REVISION', 'Needs Revision'), ('APPROVED', 'Approved'), ('PUBLISHED', 'Published'), ('ARCHIVED', 'Archived')], db_index=True, default='DRAFT', max_length=20)),
                ('scheduled_for', models.DateTimeField(blank=True, null=True)),
                ('published_at', models.DateTimeField(blank=True, null=True)),
                ('review_checklist', models.JSONField(blank=True, null=True)),
                ('author', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='authored_bulletins', to=settings.AUTH_USER_MODEL)),
                ('category', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='bulletins', to='taxonomy.category')),
                ('published_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='published_bulletins', to=settings.AUTH_USER_MODEL)),
                ('reviewer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reviewed_bulletins', to=settings.AUTH_USER_MODEL)),
                ('schedule', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='bulletins', to='bulletins.bulletinschedule')),
            ],
            options={
                'db_table': 'bulletins',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='BulletinStory',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('order', models.PositiveIntegerField(default=0)),
                ('bulletin', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='story_links', to='bulletins.bulletin')),
                ('story', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='bulletin_links', to='stories.story')),
            ],
            options={
                'db_table': 'bulletin_stories',
                'ordering': ['order'],
                'constraints': [models.UniqueConstraint(fields=('bulletin', 'story'), name='unique_bulletin_story')],
            },
        ),
        migrations.AddField(
            model_name='bulletin',
            name='stories',
            field=models.ManyToManyField(blank=True, related_name='bulletins', through='bulletins.BulletinStory', to='stories.story'),
        ),
    ]
