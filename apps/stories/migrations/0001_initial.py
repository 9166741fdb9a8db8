# Initial schema for stories, audio links, comments and revision requests

from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid

STAFF_ROLES = [('SUPERADMIN', 'Super Admin'), ('ADMIN', 'Admin'), ('EDITOR', 'Editor'), ('SUB_EDITOR', 'Sub-Editor'), ('JOURNALIST', 'Journalist'), ('INTERN', 'Intern')]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('taxonomy', '0001_initial'),
        ('media', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Story',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('title', models.CharField(max_length=255)),
                ('slug', models.SlugField(max_length=300, unique=True)),
                ('content', models.TextField(blank=True)),
                ('status', models.CharField(choices=[('DRAFT', 'Draft'), ('IN_REVIEW', 'In Review'), ('NEEDS_REVISION', 'Needs Revision'), ('PENDING_APPROVAL', 'Pending Approval'), ('PENDING_TRANSLATION', 'Pending Translation'), ('APPROVED', 'Approved'), ('READY_TO_PUBLISH', 'Ready to Publish'), ('PUBLISHED', 'Published'), ('ARCHIVED', 'Archived')], db_index=True, default='DRAFT', max_length=30)),
                ('stage', models.CharField(choices=[('DRAFT', 'Draft'), ('NEEDS_JOURNALIST_REVIEW', 'Needs Journalist Review'), ('NEEDS_SUB_EDITOR_APPROVAL', 'Needs Sub-Editor Approval'), ('APPROVED', 'Approved'), ('TRANSLATED', 'Translated'), ('PUBLISHED', 'Published')], db_index=True, default='DRAFT', max_length=30)),
                ('author_role', models.CharField(blank=True, choices=STAFF_ROLES, max_length=20, null=True)),
                ('language', models.CharField(choices=[('ENGLISH', 'English'), ('AFRIKAANS', 'Afrikaans'), ('XHOSA', 'Xhosa')], db_index=True, default='ENGLISH', max_length=20)),
                ('is_translation', models.BooleanField(db_index=True, default=False)),
                ('published_at', models.DateTimeField(blank=True, db_index=True, null=True)),
                ('scheduled_publish_at', models.DateTimeField(blank=True, db_index=True, null=True)),
                ('follow_up_date', models.DateTimeField(blank=True, db_index=True, null=True)),
                ('follow_up_note', models.TextField(blank=True)),
                ('follow_up_completed', models.BooleanField(default=False)),
                ('follow_up_completed_at', models.DateTimeField(blank=True, null=True)),
                ('author_checklist', models.JSONField(blank=True, null=True)),
                ('reviewer_checklist', models.JSONField(blank=True, null=True)),
                ('approver_checklist', models.JSONField(blank=True, null=True)),
                ('translation_checklist', models.JSONField(blank=True, null=True)),
                ('flagged_for_bulletin', models.BooleanField(db_index=True, default=False)),
                ('flagged_for_bulletin_at', models.DateTimeField(blank=True, null=True)),
                ('assigned_approver', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='stories_to_approve', to=settings.AUTH_USER_MODEL)),
                ('assigned_reviewer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='stories_to_review', to=settings.AUTH_USER_MODEL)),
                ('assigned_to', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_stories', to=settings.AUTH_USER_MODEL)),
                ('author', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='authored_stories', to=settings.AUTH_USER_MODEL)),
                ('category', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='stories', to='taxonomy.category')),
                ('classifications', models.ManyToManyField(blank=True, related_name='stories', to='taxonomy.classification')),
                ('flagged_for_bulletin_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='flagged_stories', to=settings.AUTH_USER_MODEL)),
                ('follow_up_completed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='completed_follow_ups', to=settings.AUTH_USER_MODEL)),
                ('original_story', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='translations', to='stories.story')),
                ('published_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='published_stories', to=settings.AUTH_USER_MODEL)),
                ('reviewer', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='reviewed_stories', to=settings.AUTH_USER_MODEL)),
                ('tags', models.ManyToManyField(blank=True, related_name='stories', to='taxonomy.tag')),
            ],
            options={
                'verbose_name_plural': 'Stories',
                'db_table': 'stories',
                'ordering': ['-updated_at'],
            },
        ),
        migrations.CreateModel(
            name='StoryAudioClip',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('added_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('audio_clip', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='story_links', to='media.audioclip')),
                ('story', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='audio_links', to='stories.story')),
            ],
            options={
                'db_table': 'story_audio_clips',
                'ordering': ['created_at'],
            },
        ),
        migrations.AddField(
            model_name='story',
            name='audio_clips',
            field=models.ManyToManyField(blank=True, related_name='stories', through='stories.StoryAudioClip', to='media.audioclip'),
        ),
        migrations.AddConstraint(
            model_name='storyaudioclip',
            constraint=models.UniqueConstraint(fields=('story', 'audio_clip'), name='unique_story_audio_clip'),
        ),
        migrations.AddIndex(
            model_name='story',
            index=models.Index(fields=['stage', '-published_at'], name='story_stage_published_idx'),
        ),
        migrations.AddIndex(
            model_name='story',
            index=models.Index(fields=['author', 'stage'], name='story_author_stage_idx'),
        ),
        migrations.CreateModel(
            name='Comment',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('content', models.TextField()),
                ('type', models.CharField(choices=[('GENERAL', 'General'), ('REVISION_REQUEST', 'Revision Request'), ('APPROVAL', 'Approval'), ('REJECTION', 'Rejection'), ('EDITORIAL_NOTE', 'Editorial Note')], default='GENERAL', max_length=30)),
                ('category', models.CharField(blank=True, max_length=50)),
                ('is_resolved', models.BooleanField(default=False)),
                ('resolved_at', models.DateTimeField(blank=True, null=True)),
                ('author', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='story_comments', to=settings.AUTH_USER_MODEL)),
                ('parent', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='replies', to='stories.comment')),
                ('resolved_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('story', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='comments', to='stories.story')),
            ],
            options={
                'db_table': 'comments',
                'ordering': ['created_at'],
            },
        ),
        migrations.CreateModel(
            name='RevisionRequest',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('requested_by_role', models.CharField(choices=STAFF_ROLES, max_length=20)),
                ('reason', models.TextField()),
                ('resolved_at', models.DateTimeField(blank=True, null=True)),
                ('assigned_to', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='revision_requests_received', to=settings.AUTH_USER_MODEL)),
                ('requested_by', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='revision_requests_made', to=settings.AUTH_USER_MODEL)),
                ('story', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='revision_requests', to='stories.story')),
            ],
            options={
                'db_table': 'revision_requests',
                'ordering': ['-created_at'],
            },
        ),
    ]
