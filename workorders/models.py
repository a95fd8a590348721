"""
Work order models for PropDesk Backend.

Contains:
- Location / Asset: reference entities a work order points at
- WorkOrder: the canonical record moving through the lifecycle
- WorkOrderPhoto: photographic evidence, referenced by URL

Status values and the transition table live in `workorders.lifecycle`;
type-specific fields live in `workorders.details`.
"""

from datetime import timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone

from core.models import BaseModel
from .details import WorkType, details_from_json, details_to_json
from .lifecycle import WorkOrderStatus, available_actions


class WorkOrderPriority:
    """Work order priority levels."""
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'

    CHOICES = [
        (LOW, 'Low'),
        (MEDIUM, 'Medium'),
        (HIGH, 'High'),
    ]


class Location(BaseModel):
    """A building, floor or area assets are installed in."""

    name = models.CharField(max_length=200)

    address = models.CharField(
        max_length=500,
        blank=True
    )

    class Meta:
        db_table = 'locations'
        ordering = ['name']

    def __str__(self):
        return self.name


class Asset(BaseModel):
    """A maintainable item; always sits in exactly one location."""

    name = models.CharField(max_length=200)

    asset_tag = models.CharField(
        max_length=50,
        blank=True,
        db_index=True,
        help_text="Label printed on the asset"
    )

    location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        related_name='assets'
    )

    class Meta:
        db_table = 'assets'
        ordering = ['name']

    def __str__(self):
        return self.name


class WorkOrder(BaseModel):
    """
    A maintenance, complaint, job or repair record.

    `work_type` is set once at creation. `status` only changes through
    `WorkOrderService.transition_work_order`, which validates the move
    with the lifecycle engine first. `location` is copied from the asset
    whenever the asset is assigned.
    """

    work_order_number = models.CharField(
        max_length=30,
        unique=True,
        editable=False,
        help_text="Human-readable code (e.g. WO-2026-000042)"
    )

    title = models.CharField(max_length=200)

    description = models.TextField(blank=True)

    work_type = models.CharField(
        max_length=20,
        choices=WorkType.CHOICES,
        db_index=True
    )

    status = models.CharField(
        max_length=20,
        choices=WorkOrderStatus.CHOICES,
        default=WorkOrderStatus.INITIAL,
        db_index=True
    )

    priority = models.CharField(
        max_length=10,
        choices=WorkOrderPriority.CHOICES,
        default=WorkOrderPriority.MEDIUM,
        db_index=True
    )

    asset = models.ForeignKey(
        Asset,
        on_delete=models.PROTECT,
        related_name='work_orders'
    )

    location = models.ForeignKey(
        Location,
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='work_orders',
        help_text="Copied from the asset at assignment time"
    )

    assigned_to = models.ForeignKey(
        'authentication.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='assigned_work_orders'
    )

    requested_by = models.ForeignKey(
        'authentication.User',
        on_delete=models.PROTECT,
        related_name='requested_work_orders'
    )

    due_date = models.DateField()

    details = models.JSONField(
        default=dict,
        blank=True,
        help_text="Fields specific to the work type"
    )

    class Meta:
        db_table = 'work_orders'
        verbose_name = 'Work Order'
        verbose_name_plural = 'Work Orders'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['status', 'priority'], name='wo_status_priority_idx'),
            models.Index(fields=['work_type', 'status'], name='wo_type_status_idx'),
            models.Index(fields=['assigned_to', 'status'], name='wo_assignee_status_idx'),
        ]

    def __str__(self):
        return f"{self.work_order_number} ({self.status})"

    @classmethod
    def generate_work_order_number(cls):
        """
        Generate the next display code.
        Format: <PREFIX>-YYYY-NNNNNN, sequential per year.
        """
        year = timezone.now().year
        number_prefix = settings.PROPDESK_WORK_ORDERS['NUMBER_PREFIX']
        prefix = f"{number_prefix}-{year}-"

        # Deleted rows keep their number, so count them too
        latest = cls.all_objects.filter(
            work_order_number__startswith=prefix
        ).order_by('-work_order_number').first()

        if latest:
            try:
                seq = int(latest.work_order_number.split('-')[-1]) + 1
            except ValueError:
                seq = 1
        else:
            seq = 1

        return f"{prefix}{seq:06d}"

    def save(self, *args, **kwargs):
        if not self.work_order_number:
            self.work_order_number = self.generate_work_order_number()
        super().save(*args, **kwargs)

    @property
    def type_details(self):
        """The work-type variant rebuilt from `details`."""
        return details_from_json(self.work_type, self.details)

    @type_details.setter
    def type_details(self, value):
        self.details = details_to_json(value)

    @property
    def photo_count(self):
        return self.photos.count()

    @property
    def is_overdue(self):
        return self.status != WorkOrderStatus.DONE and self.due_date < timezone.localdate()

    @property
    def is_due_soon(self):
        """Due within the configured window and not already overdue."""
        if self.status == WorkOrderStatus.DONE:
            return False
        today = timezone.localdate()
        window = settings.PROPDESK_WORK_ORDERS['DUE_SOON_DAYS']
        return today <= self.due_date <= today + timedelta(days=window)

    @property
    def is_new(self):
        hours = settings.PROPDESK_WORK_ORDERS['NEW_WITHIN_HOURS']
        return self.created_at >= timezone.now() - timedelta(hours=hours)

    def get_available_actions(self):
        return available_actions(self.status, self.photo_count)


class WorkOrderPhoto(BaseModel):
    """
    Photo evidence attached to a work order.

    The file itself lives in external storage; only its URL is kept.
    """

    work_order = models.ForeignKey(
        WorkOrder,
        on_delete=models.PROTECT,
        related_name='photos'
    )

    url = models.URLField(max_length=1000)

    uploaded_by = models.ForeignKey(
        'authentication.User',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='work_order_photos'
    )

    class Meta:
        db_table = 'work_order_photos'
        ordering = ['created_at']

    def __str__(self):
        return f"Photo for {self.work_order_id}"
