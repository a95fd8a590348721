"""
Notification service for PropDesk Backend.

Central service for creating notifications and managing their read state.
All notification creation goes through `publish`.

Usage:
    from notifications.services import NotificationService

    outcome = NotificationService.notify_work_order_event(
        work_order, NotificationAction.STATUS_CHANGED, actor, message
    )
    if not outcome.delivered:
        ...  # already logged; the work order change stands

Publishing is the second phase of every work order command: the
mutation and its history entry are committed first, then the notification
is written. A failure in this phase is captured as a `PublishOutcome`
carrying a `DeliveryFailure` instead of propagating, so the caller still
reports success and history and notifications may diverge.
"""

import logging
from dataclasses import dataclass
from functools import partial

from django.db import transaction
from django.utils import timezone

from authentication.models import User
from core.exceptions import NotFoundError
from .fanout import dispatch, get_sink
from .models import Notification, NotificationModule
from .resolvers import get_recipient_resolver
from .serializers import NotificationSerializer

logger = logging.getLogger('propdesk.notifications')


@dataclass(frozen=True)
class DeliveryFailure:
    """Structured record of a publish that failed after its mutation."""
    module: str
    action: str
    entity_id: str
    error_type: str
    error: str

    def __str__(self):
        return (
            f"{self.module}/{self.action} for {self.entity_id}: "
            f"{self.error_type}: {self.error}"
        )


@dataclass(frozen=True)
class PublishOutcome:
    """Result of the best-effort publish phase."""
    delivered: bool
    notification: Notification = None
    error: DeliveryFailure = None

    @property
    def notification_id(self):
        return self.notification.pk if self.notification else None

    @classmethod
    def skipped(cls):
        """Nothing was published (e.g. a no-op transition)."""
        return cls(delivered=False)


class NotificationService:
    """
    Central service for creating and managing notifications.

    All notification logic is centralized here to:
    - Guarantee the actor is always among the recipients
    - Hand committed rows to the fan-out sink
    - Keep read/delete state changes scoped to recipients
    """

    # =========================================================================
    # PUBLISHING
    # =========================================================================

    @classmethod
    def serialize(cls, notification):
        """The event payload: the full notification row as plain data."""
        return dict(NotificationSerializer(notification).data)

    @classmethod
    def publish(cls, actor, module, action, entity_id, message, recipients=()):
        """
        Create a notification and schedule its fan-out.

        `recipients` is any iterable of user ids; the actor is always added.
        Subscribers are only called once the surrounding transaction has
        committed. Raises on database errors.
        """
        recipient_ids = {str(r) for r in recipients}
        recipient_ids.add(str(actor.pk))

        users = list(User.objects.filter(pk__in=recipient_ids))
        if actor.pk not in {u.pk for u in users}:
            users.append(actor)

        with transaction.atomic():
            notification = Notification.objects.create(
                actor=actor,
                module=module,
                action=action,
                entity_id=str(entity_id) if entity_id else '',
                message=message,
            )
            notification.recipients.set(users)
            event = cls.serialize(notification)
            transaction.on_commit(partial(dispatch, event))

        logger.info(
            f"NOTIFICATION: {notification.id} {module}/{action} "
            f"entity={notification.entity_id} recipients={len(users)}"
        )
        return notification

    @classmethod
    def publish_best_effort(cls, actor, module, action, entity_id, message, recipients=()):
        """
        `publish`, with failures captured instead of raised.

        The inner atomic block is a savepoint when called inside another
        transaction, so a failed insert never poisons the caller's work.
        """
        try:
            notification = cls.publish(actor, module, action, entity_id, message, recipients)
        except Exception as exc:
            failure = DeliveryFailure(
                module=module,
                action=action,
                entity_id=str(entity_id),
                error_type=exc.__class__.__name__,
                error=str(exc),
            )
            logger.exception(f"DELIVERY FAILURE: {failure}")
            return PublishOutcome(delivered=False, error=failure)

        return PublishOutcome(delivered=True, notification=notification)

    @classmethod
    def notify_work_order_event(cls, work_order, action, actor, message):
        """
        Publish a work order event to the configured recipients.

        Called when: a work order is created, edited, transitioned or deleted.
        Recipients: the resolver's set plus the actor.
        """
        try:
            recipients = get_recipient_resolver().resolve(work_order, action, actor)
        except Exception as exc:
            failure = DeliveryFailure(
                module=NotificationModule.WORK_ORDERS,
                action=action,
                entity_id=str(work_order.pk),
                error_type=exc.__class__.__name__,
                error=str(exc),
            )
            logger.exception(f"DELIVERY FAILURE: recipient resolution failed, {failure}")
            return PublishOutcome(delivered=False, error=failure)

        return cls.publish_best_effort(
            actor=actor,
            module=NotificationModule.WORK_ORDERS,
            action=action,
            entity_id=work_order.pk,
            message=message,
            recipients=recipients,
        )

    # =========================================================================
    # SUBSCRIPTIONS
    # =========================================================================

    @classmethod
    def subscribe(cls, user_id, on_event, on_error=None):
        """Subscribe to pushed notifications; returns `unsubscribe()`."""
        return get_sink().subscribe(user_id, on_event, on_error).unsubscribe

    # =========================================================================
    # RECIPIENT OPERATIONS
    # =========================================================================

    @classmethod
    def list_for_user(cls, user):
        """Every notification addressed to `user`, newest first."""
        return (
            Notification.objects.for_user(user)
            .select_related('actor')
            .prefetch_related('recipients')
            .order_by('-created_at')
        )

    @classmethod
    def get_for_user(cls, notification_id, user):
        try:
            return Notification.objects.for_user(user).get(pk=notification_id)
        except Notification.DoesNotExist:
            raise NotFoundError('Notification not found.')

    @classmethod
    def get_unread_count(cls, user):
        """Get count of unread notifications for a user."""
        return Notification.objects.for_user(user).filter(is_read=False).count()

    @classmethod
    def mark_read(cls, notification_id, user):
        """Mark one notification as read. Repeating the call is harmless."""
        notification = cls.get_for_user(notification_id, user)
        notification.mark_as_read()
        return notification

    @classmethod
    def delete_notification(cls, notification_id, user):
        """Soft delete a notification on behalf of one of its recipients."""
        notification = cls.get_for_user(notification_id, user)
        notification.delete()
        logger.info(f"NOTIFICATION DELETED: {notification.id} by {user.pk}")

    @classmethod
    def mark_all_read(cls, user):
        """Mark all notifications as read for a user. Returns the count."""
        now = timezone.now()
        return Notification.objects.for_user(user).filter(is_read=False).update(
            is_read=True,
            read_at=now,
            updated_at=now,
        )
