"""
Work order service for PropDesk Backend.

The commands other code uses to change work orders. Each command runs in
two phases:

1. Mutation: validate, write the work order and append exactly one
   history entry, all in one transaction. Validation and transition
   errors are raised before anything is written.
2. Publish: best-effort notification via NotificationService. A failure
   here is logged and returned in the outcome; the mutation stands.

Usage:
    from workorders.services import WorkOrderService

    outcome = WorkOrderService.create_work_order(actor, {...})
    outcome = WorkOrderService.transition_work_order(actor, outcome.work_order.id, 'review')
"""

import logging
from dataclasses import dataclass

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import URLValidator
from django.db import IntegrityError, transaction

from audit.models import HistoryAction
from audit.services import HistoryRecorder
from core.exceptions import NotFoundError, WorkOrderValidationError
from notifications.models import NotificationAction
from notifications.services import NotificationService, PublishOutcome
from .details import details_to_json
from .lifecycle import WorkOrderStatus, TransitionPlan, plan_transition
from .models import WorkOrder, WorkOrderPhoto
from .serializers import WorkOrderCreateSerializer, WorkOrderUpdateSerializer

logger = logging.getLogger('propdesk.workorders')

# Concurrent creates can compute the same display code
NUMBER_ATTEMPTS = 5


@dataclass(frozen=True)
class WorkOrderOutcome:
    """What a work order command did."""
    work_order: WorkOrder
    history_entry: object = None
    notification: PublishOutcome = PublishOutcome.skipped()
    plan: TransitionPlan = None

    @property
    def changed(self):
        return self.history_entry is not None


class WorkOrderService:
    """
    Work order commands.

    Every active user may act on any work order; the acting user is passed
    in explicitly and recorded in history and notifications.
    """

    # =========================================================================
    # LOOKUPS
    # =========================================================================

    @classmethod
    def get_work_order(cls, work_order_id, for_update=False):
        """Fetch a live work order or raise NotFoundError."""
        queryset = WorkOrder.objects.all()
        if for_update:
            queryset = queryset.select_for_update()
        try:
            return queryset.get(pk=work_order_id)
        except (WorkOrder.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError('Work order not found.')

    @classmethod
    def get_history(cls, work_order_id):
        """History of a live work order, most recent first."""
        work_order = cls.get_work_order(work_order_id)
        return HistoryRecorder.list_for(work_order.pk)

    # =========================================================================
    # COMMANDS
    # =========================================================================

    @classmethod
    def create_work_order(cls, actor, fields):
        """
        Create a work order in status Active.

        Raises WorkOrderValidationError when title, due date or asset is
        missing or a field does not fit the work type.
        """
        serializer = WorkOrderCreateSerializer(data=fields)
        if not serializer.is_valid():
            raise WorkOrderValidationError(details=serializer.errors)
        data = serializer.validated_data

        with transaction.atomic():
            work_order = WorkOrder(
                title=data['title'],
                description=data.get('description', ''),
                work_type=data['work_type'],
                status=WorkOrderStatus.INITIAL,
                priority=data['priority'],
                asset=data['asset'],
                location=data['asset'].location,
                assigned_to=data.get('assigned_to'),
                requested_by=actor,
                due_date=data['due_date'],
                details=details_to_json(data['details']),
            )
            cls._insert_numbered(work_order)
            entry = HistoryRecorder.append(
                work_order,
                HistoryAction.CREATED,
                f"Work order {work_order.work_order_number} created",
                actor,
            )

        logger.info(
            f"WORK ORDER CREATED: {work_order.work_order_number} ({work_order.work_type}) "
            f"by {actor.pk}"
        )

        notification = NotificationService.notify_work_order_event(
            work_order,
            NotificationAction.CREATED,
            actor,
            f"Work order {work_order.work_order_number} \"{work_order.title}\" was created.",
        )
        return WorkOrderOutcome(work_order, entry, notification)

    @classmethod
    def _insert_numbered(cls, work_order):
        """
        Insert a new work order, drawing a fresh display code whenever a
        concurrent create took the one just computed.
        """
        for attempt in range(1, NUMBER_ATTEMPTS + 1):
            work_order.work_order_number = WorkOrder.generate_work_order_number()
            try:
                with transaction.atomic():
                    work_order.save()
                return
            except IntegrityError:
                if attempt == NUMBER_ATTEMPTS:
                    raise
                logger.warning(
                    f"WORK ORDER NUMBER TAKEN: {work_order.work_order_number}, "
                    f"retrying ({attempt}/{NUMBER_ATTEMPTS})"
                )

    @classmethod
    def update_work_order(cls, actor, work_order_id, fields):
        """
        Edit the editable fields of a work order.

        Status and work type cannot be changed here. Changing the asset
        moves the work order to the asset's location.
        """
        with transaction.atomic():
            work_order = cls.get_work_order(work_order_id, for_update=True)

            serializer = WorkOrderUpdateSerializer(
                data=fields, context={'work_order': work_order}
            )
            if not serializer.is_valid():
                raise WorkOrderValidationError(details=serializer.errors)
            data = dict(serializer.validated_data)

            if 'details' in data:
                data['details'] = details_to_json(data['details'])

            changed = []
            for name, value in data.items():
                if getattr(work_order, name) != value:
                    setattr(work_order, name, value)
                    changed.append(name)

            if 'asset' in changed:
                work_order.location = work_order.asset.location
                changed.append('location')

            if not changed:
                return WorkOrderOutcome(work_order)

            work_order.save()
            entry = HistoryRecorder.append(
                work_order,
                HistoryAction.UPDATED,
                f"Updated {', '.join(f.replace('_', ' ') for f in changed)}",
                actor,
            )

        logger.info(
            f"WORK ORDER UPDATED: {work_order.work_order_number} fields={changed} by {actor.pk}"
        )

        notification = NotificationService.notify_work_order_event(
            work_order,
            NotificationAction.UPDATED,
            actor,
            f"Work order {work_order.work_order_number} \"{work_order.title}\" was updated.",
        )
        return WorkOrderOutcome(work_order, entry, notification)

    @classmethod
    def transition_work_order(cls, actor, work_order_id, target_status, staged_photos=()):
        """
        Move a work order to `target_status`.

        `staged_photos` are photo URLs uploaded alongside the request; they
        count towards the photo requirement and are attached only if the
        move succeeds. Raises TransitionError when the move is illegal; in
        that case nothing is written.

        Re-issuing Start on an In Progress work order is accepted and does
        nothing: no write, no history, no notification.
        """
        staged_photos = list(staged_photos or ())
        cls._validate_photo_urls(staged_photos)

        with transaction.atomic():
            work_order = cls.get_work_order(work_order_id, for_update=True)

            photo_count = work_order.photos.count() + len(staged_photos)
            plan = plan_transition(work_order.status, target_status, photo_count)

            if plan.is_noop:
                logger.info(
                    f"TRANSITION NO-OP: {work_order.work_order_number} already {plan.to_status}"
                )
                return WorkOrderOutcome(work_order, plan=plan)

            for url in staged_photos:
                WorkOrderPhoto.objects.create(work_order=work_order, url=url, uploaded_by=actor)

            work_order.status = plan.to_status
            work_order.save(update_fields=['status', 'updated_at'])
            entry = HistoryRecorder.append(
                work_order,
                plan.history_action,
                plan.description,
                actor,
            )

        logger.info(
            f"WORK ORDER TRANSITION: {work_order.work_order_number} "
            f"{plan.from_status} -> {plan.to_status} by {actor.pk}"
        )

        notification = NotificationService.notify_work_order_event(
            work_order,
            NotificationAction.STATUS_CHANGED,
            actor,
            f"Work order {work_order.work_order_number} moved from "
            f"{WorkOrderStatus.label(plan.from_status)} to {WorkOrderStatus.label(plan.to_status)}.",
        )
        return WorkOrderOutcome(work_order, entry, notification, plan)

    @classmethod
    def attach_photo(cls, actor, work_order_id, url):
        """Attach one photo by URL. Recorded as an edit."""
        cls._validate_photo_urls([url])

        with transaction.atomic():
            work_order = cls.get_work_order(work_order_id, for_update=True)
            photo = WorkOrderPhoto.objects.create(
                work_order=work_order, url=url, uploaded_by=actor
            )
            # Bump updated_at
            work_order.save(update_fields=['updated_at'])
            entry = HistoryRecorder.append(
                work_order,
                HistoryAction.PHOTO_ADDED,
                "Photo attached",
                actor,
            )

        logger.info(f"PHOTO ATTACHED: {work_order.work_order_number} photo={photo.id}")

        notification = NotificationService.notify_work_order_event(
            work_order,
            NotificationAction.UPDATED,
            actor,
            f"A photo was added to work order {work_order.work_order_number}.",
        )
        return photo, WorkOrderOutcome(work_order, entry, notification)

    @classmethod
    def delete_work_order(cls, actor, work_order_id):
        """
        Soft delete a work order.

        Raises NotFoundError for unknown or already deleted work orders.
        The history stays readable for administrators.
        """
        with transaction.atomic():
            work_order = cls.get_work_order(work_order_id, for_update=True)
            work_order.soft_delete()
            entry = HistoryRecorder.append(
                work_order,
                HistoryAction.DELETED,
                f"Work order {work_order.work_order_number} deleted",
                actor,
            )

        logger.info(f"WORK ORDER DELETED: {work_order.work_order_number} by {actor.pk}")

        notification = NotificationService.notify_work_order_event(
            work_order,
            NotificationAction.DELETED,
            actor,
            f"Work order {work_order.work_order_number} \"{work_order.title}\" was deleted.",
        )
        return WorkOrderOutcome(work_order, entry, notification)

    @classmethod
    def _validate_photo_urls(cls, urls):
        validate = URLValidator()
        errors = {}
        for index, url in enumerate(urls):
            try:
                validate(url)
            except DjangoValidationError:
                errors[str(index)] = ['Enter a valid URL.']
        if errors:
            raise WorkOrderValidationError('Invalid photo URL.', details={'photos': errors})
