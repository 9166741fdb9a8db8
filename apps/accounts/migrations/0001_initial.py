# Initial schema for the custom user model

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('auth', '0012_alter_user_first_name_max_length'),
        ('stations', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='User',
            fields=[
                ('password', models.CharField(max_length=128, verbose_name='password')),
                ('last_login', models.DateTimeField(blank=True, null=True, verbose_name='last login')),
                ('is_superuser', models.BooleanField(default=False, help_text='Designates that this user has all permissions without explicitly assigning them.', verbose_name='superuser status')),
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('email', models.EmailField(max_length=254, unique=True)),
                ('first_name', models.CharField(max_length=100)),
                ('last_name', models.CharField(max_length=100)),
                ('mobile_number', models.CharField(blank=True, max_length=30)),
                ('user_type', models.CharField(choices=[('STAFF', 'Staff'), ('RADIO', 'Radio')], db_index=True, max_length=10)),
                ('staff_role', models.CharField(blank=True, choices=[('SUPERADMIN', 'Super Admin'), ('ADMIN', 'Admin'), ('EDITOR', 'Editor'), ('SUB_EDITOR', 'Sub-Editor'), ('JOURNALIST', 'Journalist'), ('INTERN', 'Intern')], db_index=True, max_length=20, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('is_primary_contact', models.BooleanField(default=False)),
                ('must_change_password', models.BooleanField(default=False)),
                ('translation_language', models.CharField(blank=True, choices=[('AFRIKAANS', 'Afrikaans'), ('XHOSA', 'Xhosa')], max_length=20, null=True)),
                ('default_language_preference', models.CharField(choices=[('ENGLISH', 'English'), ('AFRIKAANS', 'Afrikaans'), ('XHOSA', 'Xhosa')], default='ENGLISH', max_length=20)),
                ('last_login_at', models.DateTimeField(blank=True, null=True)),
                ('reset_token', models.CharField(blank=True, max_length=128, null=True, unique=True)),
                ('reset_token_expires_at', models.DateTimeField(blank=True, null=True)),
                ('profile_picture_url', models.URLField(blank=True, max_length=1000)),
                ('radio_station', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='users', to='stations.station')),
                ('groups', models.ManyToManyField(blank=True, help_text='The groups this user belongs to. A user will get all permissions granted to each of their groups.', related_name='user_set', related_query_name='user', to='auth.group', verbose_name='groups')),
                ('user_permissions', models.ManyToManyField(blank=True, help_text='Specific permissions for this user.', related_name='user_set', related_query_name='user', to='auth.permission', verbose_name='user permissions')),
            ],
            options={
                'db_table': 'users',
                'ordering': ['first_name', 'last_name'],
            },
        ),
    ]
