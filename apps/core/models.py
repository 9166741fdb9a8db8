"""
Core models for Newskoop.
Base classes plus the audit and email trails shared by every app.
"""

import uuid
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.utils import timezone


class BaseModel(models.Model):
    """
    Abstract base model with common fields for all Newskoop models.
    Provides UUID primary key and timestamp tracking.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    created_at = models.DateTimeField(default=timezone.now, editable=False)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.__class__.__name__} ({self.id})"


class AuditLog(BaseModel):
    """
    Append-only record of security and editorial events.

    Written through apps.core.audit.log_audit, which redacts secrets
    from metadata before it reaches this table.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='audit_logs',
        help_text='Null for system actions',
    )
    action = models.CharField(max_length=100, db_index=True, help_text='Dotted action name, e.g. story.stage.approve_story')
    entity_type = models.CharField(max_length=50, blank=True, db_index=True)
    entity_id = models.CharField(max_length=64, blank=True, db_index=True)
    metadata = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    ip_address = models.CharField(max_length=64, blank=True)
    user_agent = models.CharField(max_length=500, blank=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        verbose_name = 'Audit Log'
        verbose_name_plural = 'Audit Logs'
        indexes = [
            models.Index(fields=['entity_type', 'entity_id'], name='audit_entity_idx'),
            models.Index(fields=['user', '-created_at'], name='audit_user_created_idx'),
        ]

    def __str__(self):
        return f"{self.action} {self.entity_type}:{self.entity_id}"


class EmailLog(BaseModel):
    """Delivery log for every outbound email."""

    class Type(models.TextChoices):
        WELCOME = 'WELCOME', 'Welcome'
        PASSWORD_RESET = 'PASSWORD_RESET', 'Password Reset'
        NOTIFICATION = 'NOTIFICATION', 'Notification'
        SYSTEM = 'SYSTEM', 'System'

    class Status(models.TextChoices):
        PENDING = 'PENDING', 'Pending'
        SENT = 'SENT', 'Sent'
        FAILED = 'FAILED', 'Failed'

    to = models.EmailField(db_index=True)
    from_email = models.CharField(max_length=255, blank=True)
    subject = models.CharField(max_length=255)
    type = models.CharField(max_length=20, choices=Type.choices, db_index=True)
    status = models.CharField(
        max_length=20,
        choices=Status.choices,
        default=Status.PENDING,
        db_index=True,
    )
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='email_logs',
    )
    metadata = models.JSONField(default=dict, blank=True, encoder=DjangoJSONEncoder)
    sent_at = models.DateTimeField(null=True, blank=True)
    failed_at = models.DateTimeField(null=True, blank=True)
    failure_reason = models.TextField(blank=True)
    environment = models.CharField(max_length=20, blank=True)

    class Meta:
        db_table = 'email_logs'
        ordering = ['-created_at']
        verbose_name = 'Email Log'
        verbose_name_plural = 'Email Logs'

    def __str__(self):
        return f"{self.type} to {self.to} ({self.status})"

    def mark_sent(self):
        self.status = self.Status.SENT
        self.sent_at = timezone.now()
        self.save(update_fields=['status', 'sent_at', 'updated_at'])

    def mark_failed(self, reason: str):
        self.status = self.Status.FAILED
        self.failed_at = timezone.now()
        self.failure_reason = reason[:2000]
        self.save(update_fields=['status', 'failed_at', 'failure_reason', 'updated_at'])
