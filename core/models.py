"""
Core models for PropDesk Backend.

Abstract base shared by every persisted entity:
- UUID primary keys
- created/updated timestamps
- soft delete (rows are flagged, never physically removed)
"""

import uuid
from django.db import models
from django.utils import timezone


class SoftDeleteManager(models.Manager):
    """
    Default manager hiding soft-deleted rows.

    `all_with_deleted()` exposes everything, e.g. for admin screens and
    for resolving history that points at a deleted work order.
    """

    def get_queryset(self):
        return super().get_queryset().filter(is_deleted=False)

    def all_with_deleted(self):
        return super().get_queryset()


class BaseModel(models.Model):
    """
    Abstract base model providing a UUID primary key, timestamps and
    soft delete.

    `updated_at` is maintained by Django on every save(), so any code path
    that persists a change (edit, transition) bumps it automatically.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Opaque, stable identifier"
    )

    created_at = models.DateTimeField(
        auto_now_add=True,
        db_index=True,
        help_text="Timestamp when record was created"
    )

    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="Timestamp when record was last updated"
    )

    is_deleted = models.BooleanField(
        default=False,
        db_index=True,
        help_text="Soft delete flag"
    )

    deleted_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="Timestamp when record was soft-deleted"
    )

    objects = SoftDeleteManager()
    all_objects = models.Manager()

    class Meta:
        abstract = True
        ordering = ['-created_at']

    def soft_delete(self):
        """Flag the record as deleted and stamp the deletion time."""
        self.is_deleted = True
        self.deleted_at = timezone.now()
        self.save(update_fields=['is_deleted', 'deleted_at', 'updated_at'])

    def delete(self, *args, **kwargs):
        """Deleting through the ORM soft-deletes."""
        self.soft_delete()
