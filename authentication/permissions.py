"""
Permissions for PropDesk Backend.

There is no per-record ownership: any active actor may mutate any work
order and manage the notifications addressed to them.
"""

from rest_framework import permissions


class IsActiveUser(permissions.IsAuthenticated):
    """IsAuthenticated that also rejects deactivated or soft-deleted profiles."""

    message = "Your account is not active."

    def has_permission(self, request, view):
        if not super().has_permission(request, view):
            return False

        user = request.user
        return user.is_active and not user.is_deleted
