"""
Shared fixtures for the PropDesk test suite.
"""
from datetime import timedelta

import pytest
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from authentication.models import User, UserRole
from notifications.fanout import RecipientTopicSink, set_sink
from workorders.details import WorkType
from workorders.models import Asset, Location
from workorders.services import WorkOrderService


@pytest.fixture
def manager(db):
    """Property manager who creates most work orders."""
    return User.objects.create_user(
        email='manager@propdesk.test',
        password='test123',
        full_name='Maria Manager',
        role=UserRole.MANAGER
    )


@pytest.fixture
def technician(db):
    """Technician that work orders get assigned to."""
    return User.objects.create_user(
        email='tech@propdesk.test',
        password='test123',
        full_name='Tomas Technician',
        role=UserRole.TECHNICIAN
    )


@pytest.fixture
def location(db):
    return Location.objects.create(name='Building A', address='1 Main Street')


@pytest.fixture
def other_location(db):
    return Location.objects.create(name='Building B', address='2 Main Street')


@pytest.fixture
def asset(db, location):
    return Asset.objects.create(name='Boiler 1', asset_tag='BLR-001', location=location)


@pytest.fixture
def other_asset(db, other_location):
    return Asset.objects.create(name='Elevator 2', asset_tag='ELV-002', location=other_location)


@pytest.fixture
def sink():
    """A fresh process-wide sink for each test; the previous one is restored."""
    fresh = RecipientTopicSink()
    previous = set_sink(fresh)
    yield fresh
    set_sink(previous)


@pytest.fixture
def work_order_fields(asset):
    """Builds a valid create payload; keyword arguments override fields."""
    def build(**overrides):
        fields = {
            'title': 'Leaking radiator',
            'work_type': WorkType.COMPLAINT,
            'asset': str(asset.pk),
            'due_date': (timezone.localdate() + timedelta(days=7)).isoformat(),
        }
        fields.update(overrides)
        return fields
    return build


@pytest.fixture
def create_work_order(manager, work_order_fields, sink):
    """Creates a work order through the service as `manager`."""
    def create(actor=None, **overrides):
        outcome = WorkOrderService.create_work_order(
            actor or manager, work_order_fields(**overrides)
        )
        return outcome.work_order
    return create


@pytest.fixture
def api_client(manager):
    """API client authenticated as the manager."""
    cache.clear()  # throttle counters
    client = APIClient()
    client.force_authenticate(user=manager)
    return client
