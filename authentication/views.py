"""
Authentication views for PropDesk Backend.

Token issuance and refresh come straight from simplejwt; this module only
adds the current-user endpoint used by clients to learn their actor id
before subscribing to notifications.
"""

from rest_framework import views
from rest_framework.response import Response

from .permissions import IsActiveUser
from .serializers import UserSerializer


class CurrentUserView(views.APIView):
    """
    GET /api/v1/auth/me/
    """

    permission_classes = [IsActiveUser]

    def get(self, request):
        return Response(UserSerializer(request.user).data)
