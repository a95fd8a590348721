"""
URL configuration for PropDesk Work Orders API.
"""

from django.urls import path
from .views import (
    WorkOrderListCreateView,
    WorkOrderDetailView,
    WorkOrderTransitionView,
    WorkOrderPhotoListCreateView,
)

app_name = 'workorders'

urlpatterns = [
    path('', WorkOrderListCreateView.as_view(), name='work-order-list'),
    path('<uuid:work_order_id>/', WorkOrderDetailView.as_view(), name='work-order-detail'),
    path('<uuid:work_order_id>/transition/', WorkOrderTransitionView.as_view(), name='work-order-transition'),
    path('<uuid:work_order_id>/photos/', WorkOrderPhotoListCreateView.as_view(), name='work-order-photos'),
]
