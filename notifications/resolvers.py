"""
Recipient resolution for work order notifications.

The resolver decides who, besides the acting user, should see a
notification. It is chosen with PROPDESK_NOTIFICATIONS['RECIPIENT_RESOLVER'];
NotificationService.publish always adds the actor on top of whatever a
resolver returns.
"""

from django.conf import settings
from django.utils.module_loading import import_string


class RecipientResolver:
    """Base class. `resolve` returns a set of user id strings."""

    def resolve(self, work_order, action, actor):
        raise NotImplementedError


class ActorOnlyResolver(RecipientResolver):
    """Notify only the user who acted."""

    def resolve(self, work_order, action, actor):
        return {str(actor.pk)}


class WorkOrderParticipantsResolver(RecipientResolver):
    """Notify the actor, the assignee and the requester of the work order."""

    def resolve(self, work_order, action, actor):
        recipients = {str(actor.pk)}
        for user_id in (work_order.assigned_to_id, work_order.requested_by_id):
            if user_id:
                recipients.add(str(user_id))
        return recipients


def get_recipient_resolver():
    return import_string(settings.PROPDESK_NOTIFICATIONS['RECIPIENT_RESOLVER'])()
