"""
Audit Views - Read-Only Access to Work Order History

History is append-only; there is no create, update or delete endpoint.
"""

from rest_framework import views
from rest_framework.response import Response

from authentication.permissions import IsActiveUser
from workorders.services import WorkOrderService
from .serializers import WorkOrderHistorySerializer


class WorkOrderHistoryListView(views.APIView):
    """
    History of one work order, most recent first.

    GET /api/v1/work-orders/{id}/history/

    Not paginated: the full log is returned and can be re-fetched at any
    time.
    """

    permission_classes = [IsActiveUser]

    def get(self, request, work_order_id):
        entries = WorkOrderService.get_history(work_order_id)
        serializer = WorkOrderHistorySerializer(entries, many=True)
        return Response({
            'count': len(entries),
            'results': serializer.data,
        })
