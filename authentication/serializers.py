"""
Serializers for actors.
"""

from rest_framework import serializers

from .models import User


class UserSerializer(serializers.ModelSerializer):
    """Public profile of an actor."""

    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = [
            'id',
            'email',
            'full_name',
            'display_name',
            'role',
        ]
        read_only_fields = fields
