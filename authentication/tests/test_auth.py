"""
Token login, current user and the active-user permission.
"""
from django.core.cache import cache
from django.urls import reverse
from rest_framework.test import APIClient


class TestTokenLogin:

    def test_obtain_and_use_token(self, manager):
        cache.clear()
        client = APIClient()

        response = client.post(
            reverse('auth:token-obtain'),
            {'email': 'manager@propdesk.test', 'password': 'test123'},
            format='json'
        )
        assert response.status_code == 200

        client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        me = client.get(reverse('auth:current-user'))

        assert me.status_code == 200
        assert me.data['id'] == str(manager.pk)
        assert me.data['display_name'] == 'Maria Manager'

    def test_wrong_password(self, manager):
        cache.clear()
        response = APIClient().post(
            reverse('auth:token-obtain'),
            {'email': 'manager@propdesk.test', 'password': 'wrong'},
            format='json'
        )
        assert response.status_code == 401
        assert response.data['success'] is False


class TestActiveUserPermission:

    def test_deactivated_user_rejected(self, api_client, manager):
        manager.is_active = False
        manager.save()

        response = api_client.get(reverse('workorders:work-order-list'))

        assert response.status_code == 403

    def test_soft_deleted_user_rejected(self, api_client, manager):
        manager.soft_delete()

        response = api_client.get(reverse('notifications:list'))

        assert response.status_code == 403

    def test_display_name_falls_back_to_email(self, technician):
        technician.full_name = ''
        assert technician.display_name == 'tech@propdesk.test'
