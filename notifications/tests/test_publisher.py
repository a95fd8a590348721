"""
NotificationService: publishing, recipients and read state.
"""
import pytest

from core.exceptions import NotFoundError
from notifications.models import Notification, NotificationAction, NotificationModule
from notifications.services import NotificationService


def publish(actor, recipients=(), message='Work order WO-1 was updated.'):
    return NotificationService.publish(
        actor=actor,
        module=NotificationModule.WORK_ORDERS,
        action=NotificationAction.UPDATED,
        entity_id='4b1f7c2e-0000-0000-0000-000000000001',
        message=message,
        recipients=recipients,
    )


class TestPublish:

    def test_actor_always_recipient(self, manager, sink):
        notification = publish(manager)
        assert list(notification.recipients.all()) == [manager]

    def test_actor_added_to_explicit_recipients(self, manager, technician, sink):
        notification = publish(manager, recipients=[technician.pk])
        assert set(notification.recipients.all()) == {manager, technician}

    def test_starts_unread(self, manager, sink):
        notification = publish(manager)
        assert notification.is_read is False
        assert notification.read_at is None

    def test_stored_row_round_trips(self, manager, sink):
        notification = publish(manager, message='Work order WO-7 moved from Active to Review.')

        listed = NotificationService.list_for_user(manager).get()
        payload = NotificationService.serialize(listed)

        assert listed.pk == notification.pk
        assert payload['id'] == str(notification.pk)
        assert payload['actor'] == str(manager.pk)
        assert payload['actor_name'] == 'Maria Manager'
        assert payload['module'] == 'Work Orders'
        assert payload['action'] == NotificationAction.UPDATED
        assert payload['entity_id'] == '4b1f7c2e-0000-0000-0000-000000000001'
        assert payload['message'] == 'Work order WO-7 moved from Active to Review.'
        assert payload['recipients'] == [str(manager.pk)]

    def test_dispatched_after_commit(self, manager, sink, django_capture_on_commit_callbacks):
        received = []
        unsubscribe = NotificationService.subscribe(manager.pk, received.append)

        with django_capture_on_commit_callbacks(execute=True) as callbacks:
            notification = publish(manager)
            assert received == []

        assert len(callbacks) == 1
        assert [e["id"] for e in received] == [str(notification.pk)]

        unsubscribe()
        assert sink.subscriber_count == 0

    def test_best_effort_captures_failure(self, manager, sink, monkeypatch):
        def broken_publish(*args, **kwargs):
            raise RuntimeError('connection refused')

        monkeypatch.setattr(NotificationService, 'publish', broken_publish)

        outcome = NotificationService.publish_best_effort(
            manager, NotificationModule.WORK_ORDERS, NotificationAction.CREATED, 'abc', 'msg'
        )

        assert outcome.delivered is False
        assert outcome.notification_id is None
        assert outcome.error.error_type == 'RuntimeError'
        assert 'connection refused' in str(outcome.error)


class TestRecipientResolution:

    def test_actor_only_by_default(self, create_work_order, manager, technician):
        work_order = create_work_order(assigned_to=str(technician.pk))
        notification = Notification.objects.get(entity_id=str(work_order.pk))
        assert list(notification.recipients.all()) == [manager]

    def test_participants_resolver(self, create_work_order, manager, technician, settings):
        settings.PROPDESK_NOTIFICATIONS = {
            **settings.PROPDESK_NOTIFICATIONS,
            'RECIPIENT_RESOLVER': 'notifications.resolvers.WorkOrderParticipantsResolver',
        }

        work_order = create_work_order(assigned_to=str(technician.pk))

        notification = Notification.objects.get(entity_id=str(work_order.pk))
        assert set(notification.recipients.all()) == {manager, technician}
        assert NotificationService.get_unread_count(technician) == 1

    def test_broken_resolver_does_not_block_mutation(self, create_work_order, settings):
        settings.PROPDESK_NOTIFICATIONS = {
            **settings.PROPDESK_NOTIFICATIONS,
            'RECIPIENT_RESOLVER': 'notifications.resolvers.DoesNotExist',
        }

        work_order = create_work_order()

        assert work_order.pk is not None
        assert not Notification.objects.filter(entity_id=str(work_order.pk)).exists()


class TestReadState:

    def test_mark_read_is_idempotent(self, manager, sink):
        notification = publish(manager)

        first = NotificationService.mark_read(notification.pk, manager)
        read_at = first.read_at
        second = NotificationService.mark_read(notification.pk, manager)

        assert second.is_read is True
        assert second.read_at == read_at
        assert NotificationService.get_unread_count(manager) == 0

    def test_mark_all_read(self, manager, technician, sink):
        publish(manager)
        publish(manager)
        other = publish(technician)

        assert NotificationService.mark_all_read(manager) == 2
        assert NotificationService.get_unread_count(manager) == 0

        other.refresh_from_db()
        assert other.is_read is False
        assert NotificationService.mark_all_read(manager) == 0

    def test_delete_removes_for_recipient(self, manager, sink):
        notification = publish(manager)

        NotificationService.delete_notification(notification.pk, manager)

        assert not NotificationService.list_for_user(manager).exists()
        assert Notification.all_objects.filter(pk=notification.pk, is_deleted=True).exists()

    def test_non_recipient_cannot_touch(self, manager, technician, sink):
        notification = publish(manager)

        with pytest.raises(NotFoundError):
            NotificationService.mark_read(notification.pk, technician)
        with pytest.raises(NotFoundError):
            NotificationService.delete_notification(notification.pk, technician)

    def test_bulk_delete_blocked(self, manager, sink):
        publish(manager)
        with pytest.raises(PermissionError):
            Notification.objects.delete()

