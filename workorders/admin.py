"""
Admin configuration for work order models.

Design principles:
- Locations and assets are maintained here
- Work orders are read-only: status, history and notifications must go
  through WorkOrderService, which the admin does not bypass
"""

from django.contrib import admin

from .models import Asset, Location, WorkOrder, WorkOrderPhoto


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ['name', 'address', 'created_at']
    search_fields = ['name', 'address']


@admin.register(Asset)
class AssetAdmin(admin.ModelAdmin):
    list_display = ['name', 'asset_tag', 'location', 'created_at']
    list_filter = ['location']
    search_fields = ['name', 'asset_tag']
    autocomplete_fields = ['location']


class WorkOrderPhotoInline(admin.TabularInline):
    model = WorkOrderPhoto
    extra = 0
    fields = ['url', 'uploaded_by', 'created_at']
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(WorkOrder)
class WorkOrderAdmin(admin.ModelAdmin):
    """Admin for work orders - read only, deleted rows included."""

    list_display = [
        'work_order_number', 'title', 'work_type', 'status', 'priority',
        'assigned_to', 'due_date', 'is_deleted',
    ]
    list_filter = ['work_type', 'status', 'priority', 'is_deleted']
    search_fields = ['work_order_number', 'title', 'description']
    ordering = ['-created_at']
    inlines = [WorkOrderPhotoInline]

    fieldsets = (
        (None, {'fields': ('work_order_number', 'title', 'description', 'work_type', 'status', 'priority')}),
        ('Assignment', {'fields': ('asset', 'location', 'assigned_to', 'requested_by', 'due_date')}),
        ('Details', {'fields': ('details',)}),
        ('Lifecycle', {'fields': ('id', 'created_at', 'updated_at', 'is_deleted', 'deleted_at')}),
    )
    readonly_fields = [
        'id', 'work_order_number', 'title', 'description', 'work_type', 'status',
        'priority', 'asset', 'location', 'assigned_to', 'requested_by', 'due_date',
        'details', 'created_at', 'updated_at', 'is_deleted', 'deleted_at',
    ]

    def get_queryset(self, request):
        return WorkOrder.all_objects.select_related('asset', 'assigned_to')

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
