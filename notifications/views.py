"""
Notification views for PropDesk Backend.

Provides API endpoints for:
- List user notifications
- Get or delete a notification
- Mark notification as read
- Mark all as read
- Get unread count
- Live stream of new notifications (server-sent events)
"""

from django.http import StreamingHttpResponse
from rest_framework import generics, views, status
from rest_framework.renderers import JSONRenderer
from rest_framework.response import Response

from authentication.permissions import IsActiveUser
from .serializers import NotificationSerializer
from .services import NotificationService
from .stream import EventStreamRenderer, NotificationStream


class NotificationListView(generics.ListAPIView):
    """
    List notifications addressed to the authenticated user.

    GET /api/v1/notifications/

    Query parameters:
    - is_read: Filter by read status (true/false)
    - module: Filter by publishing module
    - action: Filter by action (created, updated, deleted, status_changed)

    Returns: Paginated list of notifications, newest first.
    """

    permission_classes = [IsActiveUser]
    serializer_class = NotificationSerializer

    def get_queryset(self):
        queryset = NotificationService.list_for_user(self.request.user)

        # Optional filters
        is_read = self.request.query_params.get('is_read')
        if is_read is not None:
            queryset = queryset.filter(is_read=is_read.lower() == 'true')

        module = self.request.query_params.get('module')
        if module:
            queryset = queryset.filter(module=module)

        action = self.request.query_params.get('action')
        if action:
            queryset = queryset.filter(action=action)

        return queryset


class NotificationDetailView(views.APIView):
    """
    Get or delete a single notification.

    GET    /api/v1/notifications/{id}/
    DELETE /api/v1/notifications/{id}/

    Only recipients can see or delete a notification.
    """

    permission_classes = [IsActiveUser]

    def get(self, request, pk):
        notification = NotificationService.get_for_user(pk, request.user)
        return Response(NotificationSerializer(notification).data)

    def delete(self, request, pk):
        NotificationService.delete_notification(pk, request.user)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MarkNotificationReadView(views.APIView):
    """
    Mark a notification as read. Repeating the request is harmless.

    POST /api/v1/notifications/{id}/read/
    """

    permission_classes = [IsActiveUser]

    def post(self, request, pk):
        notification = NotificationService.mark_read(pk, request.user)
        return Response(NotificationSerializer(notification).data)


class MarkAllReadView(views.APIView):
    """
    Mark all notifications as read for the authenticated user.

    POST /api/v1/notifications/read-all/
    """

    permission_classes = [IsActiveUser]

    def post(self, request):
        count = NotificationService.mark_all_read(request.user)

        return Response({
            'message': f'Marked {count} notifications as read.',
            'count': count,
        })


class UnreadCountView(views.APIView):
    """
    Get count of unread notifications.

    GET /api/v1/notifications/unread-count/
    """

    permission_classes = [IsActiveUser]

    def get(self, request):
        count = NotificationService.get_unread_count(request.user)

        return Response({
            'unread_count': count,
        })


class NotificationStreamView(views.APIView):
    """
    Live notifications as server-sent events.

    GET /api/v1/notifications/stream/

    Frames:
    - event: ready         sent once after subscribing
    - event: notification  one per new notification (full row as JSON)
    - event: reconnect     the server dropped the subscription; reconnect
                           and refetch the list
    - ": keep-alive"       comment sent when idle

    Only notifications addressed to the user are streamed. Events
    published while disconnected are not replayed.
    """

    permission_classes = [IsActiveUser]
    renderer_classes = [JSONRenderer, EventStreamRenderer]

    def get(self, request):
        stream = NotificationStream(request.user.pk).open()

        response = StreamingHttpResponse(
            stream.events(),
            content_type='text/event-stream'
        )
        response['Cache-Control'] = 'no-cache'
        response['X-Accel-Buffering'] = 'no'  # Disable nginx buffering
        return response
