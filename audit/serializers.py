"""
Audit Serializers - Read-Only Serializers for Work Order History

History is append-only, so there is no write serializer.
"""

from rest_framework import serializers

from .models import WorkOrderHistory
from .services import UNKNOWN_USER


class WorkOrderHistorySerializer(serializers.ModelSerializer):
    """
    Serializer for history entries.

    `performed_by_name` is filled in by `HistoryRecorder.list_for`.
    """

    performed_by_name = serializers.SerializerMethodField()

    class Meta:
        model = WorkOrderHistory
        fields = [
            'id',
            'work_order',
            'action',
            'description',
            'performed_by',
            'performed_by_name',
            'performed_at',
        ]
        read_only_fields = fields

    def get_performed_by_name(self, obj):
        return getattr(obj, 'performed_by_name', UNKNOWN_USER)
