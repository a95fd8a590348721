"""
Serializers for notifications.
"""

from rest_framework import serializers

from .models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """
    Full notification row.

    This is also the payload pushed to subscribers, so every value must be
    JSON-safe (ids and timestamps come out as strings).
    """

    action_display = serializers.CharField(source='get_action_display', read_only=True)
    actor_name = serializers.SerializerMethodField()
    recipients = serializers.PrimaryKeyRelatedField(
        many=True,
        read_only=True,
        pk_field=serializers.UUIDField(format='hex_verbose')
    )

    class Meta:
        model = Notification
        fields = [
            'id',
            'actor',
            'actor_name',
            'module',
            'action',
            'action_display',
            'entity_id',
            'message',
            'recipients',
            'is_read',
            'read_at',
            'created_at',
        ]
        read_only_fields = fields

    def get_actor_name(self, obj):
        return obj.actor.display_name if obj.actor else None

    def to_representation(self, instance):
        data = super().to_representation(instance)
        if data.get('actor') is not None:
            data['actor'] = str(data['actor'])
        return data
