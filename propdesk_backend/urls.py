"""
URL configuration for PropDesk Backend.

API Structure:
- /api/v1/auth/           - Token and profile endpoints
- /api/v1/work-orders/    - Work orders, transitions, photos, history
- /api/v1/notifications/  - Notifications and live stream
- /admin/                 - Django admin (restricted)
"""

from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse


def health_check(request):
    """Health check endpoint for load balancers."""
    return JsonResponse({
        'status': 'healthy',
        'service': 'propdesk-backend'
    })


def api_root(request):
    """API root endpoint with version info."""
    return JsonResponse({
        'name': 'PropDesk API',
        'version': 'v1',
        'endpoints': {
            'auth': '/api/v1/auth/',
            'work_orders': '/api/v1/work-orders/',
            'notifications': '/api/v1/notifications/',
            'notification_stream': '/api/v1/notifications/stream/',
        }
    })


urlpatterns = [
    # Health check (public)
    path('health/', health_check, name='health-check'),

    # API root
    path('api/v1/', api_root, name='api-root'),

    # Authentication endpoints
    path('api/v1/auth/', include('authentication.urls', namespace='auth')),

    # Work order endpoints
    path('api/v1/work-orders/', include('workorders.urls', namespace='workorders')),

    # Work order history (append-only log)
    path('api/v1/', include('audit.urls', namespace='audit')),

    # Notification endpoints
    path('api/v1/notifications/', include('notifications.urls', namespace='notifications')),

    # Django admin (restricted access)
    path('admin/', admin.site.urls),
]
