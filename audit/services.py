"""
History recorder for PropDesk Backend.

Usage:
    from audit.services import HistoryRecorder

    HistoryRecorder.append(work_order, HistoryAction.CREATED, "Work order created", actor)
    entries = HistoryRecorder.list_for(work_order.id)

`append` is the only write path. `list_for` returns entries most recent
first and can be called again at any time; each entry carries
`performed_by_name`, resolved against the current user profiles so a
deleted profile reads as "Unknown User".
"""

import logging

from authentication.models import User
from .models import WorkOrderHistory

logger = logging.getLogger('propdesk.audit')

UNKNOWN_USER = 'Unknown User'


class HistoryRecorder:

    @classmethod
    def append(cls, work_order, action, description='', actor=None):
        """Append one entry. Must run inside the mutation's transaction."""
        entry = WorkOrderHistory.objects.create(
            work_order=work_order,
            action=action,
            description=description,
            performed_by=str(actor.pk) if actor else '',
        )
        logger.info(
            f"HISTORY: {work_order.pk} action={action!r} by={entry.performed_by or 'system'}"
        )
        return entry

    @classmethod
    def list_for(cls, work_order_id):
        """All entries for a work order, most recent first, names resolved."""
        entries = list(
            WorkOrderHistory.objects.filter(work_order_id=work_order_id)
        )
        cls.resolve_names(entries)
        return entries

    @classmethod
    def resolve_names(cls, entries):
        """Attach `performed_by_name` to each entry from one user lookup."""
        ids = {e.performed_by for e in entries if e.performed_by}
        names = {}
        if ids:
            for user in User.objects.filter(pk__in=ids):
                names[str(user.pk)] = user.display_name

        for entry in entries:
            entry.performed_by_name = names.get(entry.performed_by, UNKNOWN_USER)
        return entries
