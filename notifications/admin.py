"""
Admin configuration for notifications.

READ-ONLY admin interface for notifications.
Notifications should only be created via the NotificationService.
"""

from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    """
    Admin for Notification model.

    READ-ONLY: Notifications are system-generated.
    """

    list_display = [
        'short_id',
        'module',
        'action',
        'actor',
        'message_short',
        'recipient_count',
        'is_read',
        'is_deleted',
        'created_at',
    ]
    list_filter = ['module', 'action', 'is_read', 'is_deleted', 'created_at']
    search_fields = ['id', 'entity_id', 'message', 'actor__email']
    ordering = ['-created_at']
    date_hierarchy = 'created_at'

    readonly_fields = [
        'id', 'actor', 'module', 'action', 'entity_id', 'message', 'recipients',
        'is_read', 'read_at', 'is_deleted', 'deleted_at', 'created_at', 'updated_at',
    ]

    fieldsets = (
        ('Notification', {
            'fields': ('id', 'actor', 'module', 'action', 'entity_id'),
        }),
        ('Content', {
            'fields': ('message', 'recipients'),
        }),
        ('Read Status', {
            'fields': ('is_read', 'read_at', 'is_deleted', 'deleted_at'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    def get_queryset(self, request):
        return Notification.all_objects.select_related('actor').prefetch_related('recipients')

    def short_id(self, obj):
        return str(obj.id)[:8] + '...'
    short_id.short_description = 'ID'
    short_id.admin_order_field = 'id'

    def message_short(self, obj):
        text = obj.message or ''
        return text[:40] + '...' if len(text) > 40 else text
    message_short.short_description = 'Message'

    def recipient_count(self, obj):
        return len(obj.recipients.all())
    recipient_count.short_description = 'Recipients'

    # === Permissions (READ-ONLY) ===

    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
