"""
URL configuration for PropDesk Audit API.
"""

from django.urls import path

from .views import WorkOrderHistoryListView

app_name = 'audit'

urlpatterns = [
    path(
        'work-orders/<uuid:work_order_id>/history/',
        WorkOrderHistoryListView.as_view(),
        name='work-order-history'
    ),
]
