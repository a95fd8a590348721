"""
Audit models for PropDesk Backend.

Implements the immutable, append-only work order history.

Design principles:
- Append-only: no updates or deletes allowed, neither per row nor in bulk
- Actor stored as an id string, not a foreign key, so deleting a profile
  never touches the log; display names are resolved at read time
- One entry per create, edit, transition and delete of a work order
"""

from django.db import models
from django.utils import timezone


class HistoryAction:
    """
    Action labels recorded in the history.

    Transitions are recorded with the display label of the target status
    (e.g. "In Progress", "Review"), see `workorders.lifecycle`.
    """
    CREATED = 'Created'
    UPDATED = 'Updated'
    PHOTO_ADDED = 'Photo Added'
    DELETED = 'Deleted'


class WorkOrderHistoryQuerySet(models.QuerySet):
    """Blocks bulk modification of history rows."""

    def update(self, *args, **kwargs):
        raise PermissionError("Work order history is immutable and cannot be updated.")

    def delete(self, *args, **kwargs):
        raise PermissionError("Work order history is immutable and cannot be deleted.")


class WorkOrderHistory(models.Model):
    """
    Immutable history entry for a work order.

    Uses an auto-increment primary key so entries written within the same
    instant still sort in insertion order.
    """

    id = models.BigAutoField(primary_key=True)

    work_order = models.ForeignKey(
        'workorders.WorkOrder',
        on_delete=models.PROTECT,
        related_name='history_entries'
    )

    action = models.CharField(
        max_length=50,
        db_index=True,
        help_text="Created, Updated, Deleted or the target status label"
    )

    description = models.TextField(blank=True)

    # Stored as string for immutability
    performed_by = models.CharField(
        max_length=36,
        blank=True,
        db_index=True,
        help_text="ID of the acting user"
    )

    performed_at = models.DateTimeField(
        default=timezone.now,
        db_index=True
    )

    objects = WorkOrderHistoryQuerySet.as_manager()

    class Meta:
        db_table = 'work_order_history'
        verbose_name = 'Work Order History Entry'
        verbose_name_plural = 'Work Order History'
        ordering = ['-performed_at', '-id']
        indexes = [
            models.Index(fields=['work_order', 'performed_at'], name='woh_order_time_idx'),
        ]

    def __str__(self):
        return f"{self.action} on {self.work_order_id} at {self.performed_at}"

    def save(self, *args, **kwargs):
        """
        Override save to enforce append-only behavior.
        Only allows creation, not updates.
        """
        if self.pk and WorkOrderHistory.objects.filter(pk=self.pk).exists():
            raise PermissionError("Work order history is immutable and cannot be updated.")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise PermissionError("Work order history is immutable and cannot be deleted.")
