"""
Work order views for PropDesk Backend.

Provides REST API endpoints for:
- Work order listing (tabs, filters, search) and creation
- Work order detail, edit and delete
- Status transitions
- Photo attachment

Every change goes through WorkOrderService, which records history and
publishes notifications.
"""

from django.db.models import Q
from django_filters import rest_framework as filters
from rest_framework import generics, status, views
from rest_framework.response import Response

from authentication.permissions import IsActiveUser
from .details import WorkType
from .lifecycle import WorkOrderStatus
from .models import WorkOrder, WorkOrderPriority
from .serializers import (
    PhotoCreateSerializer,
    TransitionSerializer,
    WorkOrderDetailSerializer,
    WorkOrderListSerializer,
    WorkOrderPhotoSerializer,
)
from .services import WorkOrderService


class WorkOrderFilter(filters.FilterSet):
    """Filter for the work order list."""

    TAB_CHOICES = [
        ('active', 'Active'),
        ('review', 'Review'),
        ('completed', 'Completed'),
    ]

    TAB_STATUSES = {
        'active': WorkOrderStatus.OPEN_STATES,
        'review': [WorkOrderStatus.REVIEW],
        'completed': [WorkOrderStatus.DONE],
    }

    work_type = filters.ChoiceFilter(choices=WorkType.CHOICES)
    priority = filters.ChoiceFilter(choices=WorkOrderPriority.CHOICES)
    status = filters.ChoiceFilter(choices=WorkOrderStatus.CHOICES)
    tab = filters.ChoiceFilter(choices=TAB_CHOICES, method='filter_tab')
    search = filters.CharFilter(method='filter_search')
    assigned_to = filters.UUIDFilter(field_name='assigned_to__id')
    asset = filters.UUIDFilter(field_name='asset__id')
    due_before = filters.DateFilter(field_name='due_date', lookup_expr='lte')
    due_after = filters.DateFilter(field_name='due_date', lookup_expr='gte')

    class Meta:
        model = WorkOrder
        fields = ['work_type', 'priority', 'status', 'assigned_to', 'asset']

    def filter_tab(self, queryset, name, value):
        return queryset.filter(status__in=self.TAB_STATUSES[value])

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(title__icontains=value)
            | Q(description__icontains=value)
            | Q(work_order_number__icontains=value)
        )


class WorkOrderListCreateView(generics.ListAPIView):
    """
    List or create work orders.

    GET /api/v1/work-orders/

    Query parameters:
    - tab: active (Active + In Progress), review, completed
    - work_type, priority, status: exact filters
    - search: matches title, description or work order number

    POST /api/v1/work-orders/

    Request:
    {
        "title": "Leaking tap",
        "work_type": "repair",
        "asset": "<asset uuid>",
        "due_date": "2026-10-20",
        "priority": "high",
        "assigned_to": "<user uuid>",
        "details": {"unit_number": "4B", "contact_person": "..."}
    }
    """

    permission_classes = [IsActiveUser]
    serializer_class = WorkOrderListSerializer
    filterset_class = WorkOrderFilter
    ordering_fields = ['created_at', 'due_date', 'priority', 'status']
    ordering = ['-created_at']

    def get_queryset(self):
        return WorkOrder.objects.select_related(
            'asset', 'location', 'assigned_to', 'requested_by'
        )

    def post(self, request):
        outcome = WorkOrderService.create_work_order(request.user, request.data)
        return Response(
            WorkOrderDetailSerializer(outcome.work_order).data,
            status=status.HTTP_201_CREATED
        )


class WorkOrderDetailView(views.APIView):
    """
    Retrieve, edit or delete a work order.

    GET    /api/v1/work-orders/{id}/
    PATCH  /api/v1/work-orders/{id}/   (status and work_type are rejected)
    DELETE /api/v1/work-orders/{id}/
    """

    permission_classes = [IsActiveUser]

    def get(self, request, work_order_id):
        work_order = WorkOrderService.get_work_order(work_order_id)
        return Response(WorkOrderDetailSerializer(work_order).data)

    def patch(self, request, work_order_id):
        outcome = WorkOrderService.update_work_order(request.user, work_order_id, request.data)
        return Response(WorkOrderDetailSerializer(outcome.work_order).data)

    def delete(self, request, work_order_id):
        WorkOrderService.delete_work_order(request.user, work_order_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class WorkOrderTransitionView(views.APIView):
    """
    Change the status of a work order.

    POST /api/v1/work-orders/{id}/transition/

    Request:
    {
        "status": "review",
        "staged_photos": ["https://files.example.com/wo/123.jpg"]
    }

    Rejected moves answer 409 and leave the work order untouched.
    """

    permission_classes = [IsActiveUser]

    def post(self, request, work_order_id):
        serializer = TransitionSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        outcome = WorkOrderService.transition_work_order(
            request.user,
            work_order_id,
            serializer.validated_data['status'],
            staged_photos=serializer.validated_data['staged_photos'],
        )

        return Response({
            'work_order': WorkOrderDetailSerializer(outcome.work_order).data,
            'changed': outcome.changed,
            'from_status': outcome.plan.from_status,
            'to_status': outcome.plan.to_status,
            'notification_delivered': outcome.notification.delivered,
        })


class WorkOrderPhotoListCreateView(views.APIView):
    """
    List or attach photos.

    GET  /api/v1/work-orders/{id}/photos/
    POST /api/v1/work-orders/{id}/photos/   {"url": "https://..."}
    """

    permission_classes = [IsActiveUser]

    def get(self, request, work_order_id):
        work_order = WorkOrderService.get_work_order(work_order_id)
        photos = work_order.photos.select_related('uploaded_by')
        return Response(WorkOrderPhotoSerializer(photos, many=True).data)

    def post(self, request, work_order_id):
        serializer = PhotoCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        photo, _ = WorkOrderService.attach_photo(
            request.user, work_order_id, serializer.validated_data['url']
        )
        return Response(
            WorkOrderPhotoSerializer(photo).data,
            status=status.HTTP_201_CREATED
        )
