"""
Admin configuration for audit models.

Note: History is read-only in admin.
"""

from django.contrib import admin

from .models import WorkOrderHistory


@admin.register(WorkOrderHistory)
class WorkOrderHistoryAdmin(admin.ModelAdmin):
    """Admin for work order history - read only."""

    list_display = ['work_order', 'action', 'performed_by', 'performed_at']
    list_filter = ['action', 'performed_at']
    search_fields = ['work_order__work_order_number', 'performed_by', 'description']
    readonly_fields = ['id', 'work_order', 'action', 'description', 'performed_by', 'performed_at']

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
