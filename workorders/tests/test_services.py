"""
WorkOrderService: create, edit, transition, photos and delete.

Every command must append exactly one history entry when it changes
something, publish one notification afterwards, and leave no trace when
it is rejected.
"""
from datetime import timedelta

import pytest
from django.db import IntegrityError
from django.utils import timezone

from audit.models import WorkOrderHistory
from core.exceptions import NotFoundError, TransitionError, WorkOrderValidationError
from notifications.models import Notification, NotificationAction
from notifications.services import NotificationService
from workorders.details import RepairDetails, WorkType
from workorders.lifecycle import WorkOrderStatus
from workorders.models import WorkOrder, WorkOrderPhoto
from workorders.services import WorkOrderService

PHOTO_URL = 'https://files.propdesk.test/wo/evidence-1.jpg'


def history_actions(work_order):
    return [e.action for e in WorkOrderService.get_history(work_order.pk)]


def notifications_for(work_order):
    return Notification.objects.filter(entity_id=str(work_order.pk))


class TestCreateWorkOrder:

    def test_starts_active_with_number(self, create_work_order, manager):
        work_order = create_work_order()

        assert work_order.status == WorkOrderStatus.ACTIVE
        assert work_order.requested_by == manager
        year = timezone.now().year
        assert work_order.work_order_number == f'WO-{year}-000001'

    def test_numbers_are_sequential(self, create_work_order):
        first = create_work_order()
        second = create_work_order(title='Broken window')
        assert int(second.work_order_number[-6:]) == int(first.work_order_number[-6:]) + 1

    def test_taken_number_redrawn(self, create_work_order, monkeypatch):
        first = create_work_order()
        generate = WorkOrder.generate_work_order_number
        # The first draw repeats a code a concurrent create already committed
        draws = iter([first.work_order_number])
        monkeypatch.setattr(
            WorkOrder, 'generate_work_order_number',
            staticmethod(lambda: next(draws, None) or generate())
        )

        second = create_work_order(title='Broken window')

        year = timezone.now().year
        assert second.work_order_number == f'WO-{year}-000002'
        assert WorkOrder.objects.count() == 2
        assert history_actions(second) == ['Created']

    def test_number_retries_exhausted(self, create_work_order, monkeypatch):
        first = create_work_order()
        monkeypatch.setattr(
            WorkOrder, 'generate_work_order_number',
            staticmethod(lambda: first.work_order_number)
        )

        with pytest.raises(IntegrityError):
            create_work_order(title='Broken window')

        assert WorkOrder.objects.count() == 1
        assert WorkOrderHistory.objects.count() == 1

    def test_location_copied_from_asset(self, create_work_order, location):
        assert create_work_order().location == location

    def test_records_history_and_notification(self, create_work_order, manager):
        work_order = create_work_order()

        assert history_actions(work_order) == ['Created']
        notification = notifications_for(work_order).get()
        assert notification.action == NotificationAction.CREATED
        assert list(notification.recipients.all()) == [manager]

    def test_type_specific_details_stored(self, create_work_order):
        work_order = create_work_order(
            work_type=WorkType.REPAIR,
            details={'unit_number': '4B', 'contact_person': 'Ana'},
        )
        assert work_order.type_details == RepairDetails(unit_number='4B', contact_person='Ana')

    @pytest.mark.parametrize('missing', ['title', 'due_date', 'asset'])
    def test_required_fields(self, manager, work_order_fields, missing):
        fields = work_order_fields()
        del fields[missing]

        with pytest.raises(WorkOrderValidationError) as exc_info:
            WorkOrderService.create_work_order(manager, fields)

        assert missing in exc_info.value.details
        assert WorkOrder.objects.count() == 0
        assert WorkOrderHistory.objects.count() == 0
        assert Notification.objects.count() == 0

    def test_blank_title_rejected(self, manager, work_order_fields):
        with pytest.raises(WorkOrderValidationError):
            WorkOrderService.create_work_order(manager, work_order_fields(title='   '))

    def test_field_of_other_type_rejected(self, manager, work_order_fields):
        fields = work_order_fields(work_type=WorkType.COMPLAINT, details={'unit_number': '4B'})

        with pytest.raises(WorkOrderValidationError) as exc_info:
            WorkOrderService.create_work_order(manager, fields)
        assert 'details' in exc_info.value.details


class TestTransitionScenarios:

    def test_review_without_photo_rejected(self, create_work_order):
        work_order = create_work_order(
            due_date=(timezone.localdate() + timedelta(days=1)).isoformat()
        )

        with pytest.raises(TransitionError):
            WorkOrderService.transition_work_order(
                work_order.requested_by, work_order.pk, WorkOrderStatus.REVIEW
            )

        work_order.refresh_from_db()
        assert work_order.status == WorkOrderStatus.ACTIVE
        assert history_actions(work_order) == ['Created']
        assert notifications_for(work_order).count() == 1

    def test_review_after_photo_attached(self, create_work_order, manager):
        work_order = create_work_order()
        WorkOrderService.attach_photo(manager, work_order.pk, PHOTO_URL)
        notifications_before = notifications_for(work_order).count()

        outcome = WorkOrderService.transition_work_order(
            manager, work_order.pk, WorkOrderStatus.REVIEW
        )

        work_order.refresh_from_db()
        assert work_order.status == WorkOrderStatus.REVIEW
        assert outcome.changed
        assert outcome.history_entry.action == 'Review'
        assert history_actions(work_order)[0] == 'Review'
        assert history_actions(work_order).count('Review') == 1
        assert outcome.notification.delivered
        assert notifications_for(work_order).count() == notifications_before + 1

        latest = notifications_for(work_order).get(action=NotificationAction.STATUS_CHANGED)
        assert 'from Active to Review' in latest.message

    def test_done_from_active_rejected(self, create_work_order, manager):
        work_order = create_work_order()

        with pytest.raises(TransitionError):
            WorkOrderService.transition_work_order(manager, work_order.pk, WorkOrderStatus.DONE)

        work_order.refresh_from_db()
        assert work_order.status == WorkOrderStatus.ACTIVE


class TestTransitionWorkOrder:

    def test_full_lifecycle(self, create_work_order, manager):
        work_order = create_work_order()

        WorkOrderService.transition_work_order(manager, work_order.pk, WorkOrderStatus.IN_PROGRESS)
        WorkOrderService.transition_work_order(
            manager, work_order.pk, WorkOrderStatus.REVIEW, staged_photos=[PHOTO_URL]
        )
        WorkOrderService.transition_work_order(manager, work_order.pk, WorkOrderStatus.DONE)

        work_order.refresh_from_db()
        assert work_order.status == WorkOrderStatus.DONE
        assert history_actions(work_order) == ['Done', 'Review', 'In Progress', 'Created']

    def test_staged_photos_attached_on_success(self, create_work_order, manager):
        work_order = create_work_order()

        WorkOrderService.transition_work_order(
            manager, work_order.pk, WorkOrderStatus.REVIEW, staged_photos=[PHOTO_URL]
        )

        photo = work_order.photos.get()
        assert photo.url == PHOTO_URL
        assert photo.uploaded_by == manager

    def test_staged_photos_discarded_on_rejection(self, create_work_order, manager):
        work_order = create_work_order()

        with pytest.raises(TransitionError):
            WorkOrderService.transition_work_order(
                manager, work_order.pk, WorkOrderStatus.DONE, staged_photos=[PHOTO_URL]
            )
        assert WorkOrderPhoto.objects.count() == 0

    def test_invalid_photo_url(self, create_work_order, manager):
        work_order = create_work_order()

        with pytest.raises(WorkOrderValidationError) as exc_info:
            WorkOrderService.transition_work_order(
                manager, work_order.pk, WorkOrderStatus.REVIEW, staged_photos=['not a url']
            )
        assert 'photos' in exc_info.value.details

    def test_repeated_start_is_noop(self, create_work_order, manager):
        work_order = create_work_order()
        WorkOrderService.transition_work_order(manager, work_order.pk, WorkOrderStatus.IN_PROGRESS)
        notifications_before = notifications_for(work_order).count()

        outcome = WorkOrderService.transition_work_order(
            manager, work_order.pk, WorkOrderStatus.IN_PROGRESS
        )

        assert not outcome.changed
        assert outcome.plan.is_noop
        assert not outcome.notification.delivered
        assert history_actions(work_order) == ['In Progress', 'Created']
        assert notifications_for(work_order).count() == notifications_before

    def test_back_to_active(self, create_work_order, manager):
        work_order = create_work_order()
        WorkOrderService.transition_work_order(manager, work_order.pk, WorkOrderStatus.IN_PROGRESS)

        WorkOrderService.transition_work_order(manager, work_order.pk, WorkOrderStatus.ACTIVE)

        work_order.refresh_from_db()
        assert work_order.status == WorkOrderStatus.ACTIVE

    def test_unknown_work_order(self, manager, db):
        with pytest.raises(NotFoundError):
            WorkOrderService.transition_work_order(
                manager, '00000000-0000-0000-0000-000000000000', WorkOrderStatus.IN_PROGRESS
            )


class TestPublishFailure:

    def test_mutation_stands_when_publish_fails(self, create_work_order, manager, monkeypatch):
        work_order = create_work_order()

        def broken_publish(*args, **kwargs):
            raise RuntimeError('notification store unavailable')

        monkeypatch.setattr(NotificationService, 'publish', broken_publish)

        outcome = WorkOrderService.transition_work_order(
            manager, work_order.pk, WorkOrderStatus.IN_PROGRESS
        )

        work_order.refresh_from_db()
        assert work_order.status == WorkOrderStatus.IN_PROGRESS
        assert history_actions(work_order)[0] == 'In Progress'
        assert not outcome.notification.delivered
        assert outcome.notification.error.error_type == 'RuntimeError'
        assert outcome.notification.error.entity_id == str(work_order.pk)
        # Only the creation was published
        assert notifications_for(work_order).count() == 1


class TestUpdateWorkOrder:

    def test_edit_records_changed_fields(self, create_work_order, manager):
        work_order = create_work_order()

        outcome = WorkOrderService.update_work_order(
            manager, work_order.pk, {'priority': 'high', 'title': 'Radiator leaking badly'}
        )

        assert outcome.work_order.priority == 'high'
        assert outcome.history_entry.action == 'Updated'
        assert 'priority' in outcome.history_entry.description
        assert outcome.notification.notification.action == NotificationAction.UPDATED

    def test_changing_asset_moves_location(self, create_work_order, manager, other_asset):
        work_order = create_work_order()

        outcome = WorkOrderService.update_work_order(
            manager, work_order.pk, {'asset': str(other_asset.pk)}
        )

        assert outcome.work_order.location == other_asset.location

    @pytest.mark.parametrize('field,value', [
        ('status', WorkOrderStatus.DONE),
        ('work_type', WorkType.REPAIR),
    ])
    def test_read_only_fields_rejected(self, create_work_order, manager, field, value):
        work_order = create_work_order()

        with pytest.raises(WorkOrderValidationError) as exc_info:
            WorkOrderService.update_work_order(manager, work_order.pk, {field: value})

        assert field in exc_info.value.details
        work_order.refresh_from_db()
        assert work_order.status == WorkOrderStatus.ACTIVE
        assert work_order.work_type == WorkType.COMPLAINT

    def test_unchanged_values_record_nothing(self, create_work_order, manager):
        work_order = create_work_order()

        outcome = WorkOrderService.update_work_order(
            manager, work_order.pk, {'title': work_order.title}
        )

        assert not outcome.changed
        assert history_actions(work_order) == ['Created']

    def test_details_merged(self, create_work_order, manager):
        work_order = create_work_order(
            work_type=WorkType.REPAIR, details={'unit_number': '4B'}
        )

        outcome = WorkOrderService.update_work_order(
            manager, work_order.pk, {'details': {'contact_person': 'Ana'}}
        )

        details = outcome.work_order.type_details
        assert details.unit_number == '4B'
        assert details.contact_person == 'Ana'


class TestAttachPhoto:

    def test_attach_records_history(self, create_work_order, manager):
        work_order = create_work_order()

        photo, outcome = WorkOrderService.attach_photo(manager, work_order.pk, PHOTO_URL)

        assert photo.work_order == work_order
        assert outcome.history_entry.action == 'Photo Added'
        assert work_order.get_available_actions()['review'] is True


class TestDeleteWorkOrder:

    def test_soft_delete(self, create_work_order, manager):
        work_order = create_work_order()

        outcome = WorkOrderService.delete_work_order(manager, work_order.pk)

        assert outcome.notification.notification.action == NotificationAction.DELETED
        assert not WorkOrder.objects.filter(pk=work_order.pk).exists()
        assert WorkOrder.all_objects.filter(pk=work_order.pk, is_deleted=True).exists()
        actions = list(
            WorkOrderHistory.objects.filter(work_order=work_order).values_list('action', flat=True)
        )
        assert actions == ['Deleted', 'Created']

    def test_deleted_work_order_is_gone(self, create_work_order, manager):
        work_order = create_work_order()
        WorkOrderService.delete_work_order(manager, work_order.pk)

        with pytest.raises(NotFoundError):
            WorkOrderService.get_work_order(work_order.pk)
        with pytest.raises(NotFoundError):
            WorkOrderService.delete_work_order(manager, work_order.pk)
        with pytest.raises(NotFoundError):
            WorkOrderService.transition_work_order(
                manager, work_order.pk, WorkOrderStatus.IN_PROGRESS
            )
