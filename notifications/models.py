"""
Notification models for PropDesk Backend.

Provides:
- Notification model carrying a recipient set
- Read tracking (one flag per notification row)

Design principles:
- Created once by NotificationService.publish, never edited except for
  the read flag
- Removed only by soft delete, on request of a recipient
- Ordered by newest first
"""

from django.db import models
from django.utils import timezone

from core.models import BaseModel, SoftDeleteManager


class NotificationModule:
    """Subsystems that publish notifications."""
    WORK_ORDERS = 'Work Orders'


class NotificationAction:
    """Notification action constants."""
    CREATED = 'created'
    UPDATED = 'updated'
    DELETED = 'deleted'
    STATUS_CHANGED = 'status_changed'

    CHOICES = [
        (CREATED, 'Created'),
        (UPDATED, 'Updated'),
        (DELETED, 'Deleted'),
        (STATUS_CHANGED, 'Status Changed'),
    ]


class NotificationManager(SoftDeleteManager):
    """Custom manager for notifications - prevents bulk deletes."""

    def for_user(self, user):
        """Notifications whose recipient set contains `user`."""
        return self.get_queryset().filter(recipients=user)

    def delete(self, *args, **kwargs):
        raise PermissionError("Notifications cannot be bulk deleted.")


class Notification(BaseModel):
    """
    A lifecycle event addressed to a set of users.

    `recipients` always contains the acting user; `entity_id` is the id of
    the affected record (stored as a string so it survives the record).
    """

    actor = models.ForeignKey(
        'authentication.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='sent_notifications',
        help_text="User whose action produced this notification"
    )

    module = models.CharField(
        max_length=50,
        default=NotificationModule.WORK_ORDERS,
        db_index=True,
        help_text="Publishing subsystem"
    )

    action = models.CharField(
        max_length=30,
        choices=NotificationAction.CHOICES,
        db_index=True
    )

    entity_id = models.CharField(
        max_length=36,
        blank=True,
        db_index=True,
        help_text="ID of the affected record"
    )

    message = models.TextField(
        help_text="Notification message body"
    )

    recipients = models.ManyToManyField(
        'authentication.User',
        related_name='received_notifications',
        help_text="Users who should see this notification"
    )

    # Read tracking
    is_read = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Whether the notification has been read"
    )

    read_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the notification was read"
    )

    objects = NotificationManager()
    all_objects = models.Manager()  # For admin access to all

    class Meta:
        db_table = 'notifications'
        verbose_name = 'Notification'
        verbose_name_plural = 'Notifications'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['module', 'entity_id'], name='notif_module_entity_idx'),
            models.Index(fields=['is_read', '-created_at'], name='notif_read_created_idx'),
        ]

    def __str__(self):
        return f"[{self.module}] {self.action}: {self.message[:50]}"

    def mark_as_read(self):
        """Mark this notification as read. Calling it again is a no-op."""
        if not self.is_read:
            self.is_read = True
            self.read_at = timezone.now()
            self.save(update_fields=['is_read', 'read_at', 'updated_at'])
