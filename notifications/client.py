"""
Client-side notification cache.

`NotificationClient` mirrors the notifications of one user for one
connection: it refetches on connect, keeps a newest-first list up to date
from pushed events, and applies read/delete changes both remotely (through
NotificationService) and locally. The cache is disposable and is discarded
on disconnect.

Usage:
    client = NotificationClient(user).connect()
    client.unread_count()
    client.mark_as_read(notification_id)
    client.disconnect()

If the subscription breaks (TransportFailure), the client subscribes
again and refetches, so events published while it was cut off are
recovered from the store.
"""

import logging
import threading

from .fanout import get_sink, is_recipient
from .services import NotificationService

logger = logging.getLogger('propdesk.notifications')


class NotificationClient:

    def __init__(self, user, sink=None):
        self.user = user
        self.user_id = str(user.pk)
        self.sink = sink
        self.reconnect_count = 0
        self._subscription = None
        self._items = []
        self._lock = threading.RLock()
        # Events pushed while a refresh is fetching
        self._refreshing = 0
        self._pending = []

    def __enter__(self):
        return self.connect()

    def __exit__(self, exc_type, exc, tb):
        self.disconnect()

    @property
    def connected(self):
        return self._subscription is not None and self._subscription.active

    # =========================================================================
    # CONNECTION
    # =========================================================================

    def connect(self):
        """
        Subscribe, then load everything from the store.

        Subscribing first means an event published during the fetch is
        either in the fetched rows or arrives as a push.
        """
        self._subscribe()
        self.refresh()
        return self

    def disconnect(self):
        with self._lock:
            if self._subscription is not None:
                self._subscription.unsubscribe()
                self._subscription = None
            self._items = []

    def reconnect(self):
        """Resubscribe and reconcile with the store."""
        with self._lock:
            if self._subscription is not None:
                self._subscription.unsubscribe()
                self._subscription = None
            self.reconnect_count += 1
        logger.info(f"CLIENT RECONNECT: user={self.user_id} attempt={self.reconnect_count}")
        self.connect()

    def _subscribe(self):
        sink = self.sink or get_sink()
        with self._lock:
            self._subscription = sink.subscribe(
                self.user_id, self._on_event, on_error=self._on_transport_failure
            )

    def _on_event(self, event):
        if not is_recipient(event, self.user_id):
            return
        with self._lock:
            if self._refreshing:
                self._pending.append(dict(event))
            if any(item['id'] == event['id'] for item in self._items):
                return
            self._items.insert(0, dict(event))

    def _on_transport_failure(self, exc):
        logger.warning(f"CLIENT TRANSPORT FAILURE: user={self.user_id}: {exc}")
        self.reconnect()

    # =========================================================================
    # CACHE OPERATIONS
    # =========================================================================

    def refresh(self):
        """
        Reload the cache from every notification addressed to the user.

        Events pushed while the rows are being fetched may be missing from
        them; those are kept ahead of the fetched rows, newest first.
        """
        with self._lock:
            if not self._refreshing:
                self._pending = []
            self._refreshing += 1
        try:
            rows = [
                NotificationService.serialize(n)
                for n in NotificationService.list_for_user(self.user)
            ]
        finally:
            with self._lock:
                pushed = self._pending
                self._refreshing -= 1
                if not self._refreshing:
                    self._pending = []

        with self._lock:
            fetched = {row['id'] for row in rows}
            missed = []
            for event in reversed(pushed):
                if event['id'] not in fetched:
                    fetched.add(event['id'])
                    missed.append(event)
            self._items = missed + rows
        return self.list()

    def list(self):
        """Cached notifications, newest first."""
        with self._lock:
            return [dict(item) for item in self._items]

    def unread_count(self):
        with self._lock:
            return sum(1 for item in self._items if not item['is_read'])

    def mark_as_read(self, notification_id):
        notification = NotificationService.mark_read(notification_id, self.user)
        self._apply_read_state([NotificationService.serialize(notification)])

    def delete(self, notification_id):
        NotificationService.delete_notification(notification_id, self.user)
        with self._lock:
            self._items = [
                item for item in self._items if item['id'] != str(notification_id)
            ]

    def mark_all_as_read(self):
        """Persisted for every notification of the user, then applied locally."""
        count = NotificationService.mark_all_read(self.user)
        with self._lock:
            ids = [item['id'] for item in self._items]
        self._apply_read_state(
            NotificationService.serialize(n)
            for n in NotificationService.list_for_user(self.user).filter(pk__in=ids)
        )
        return count

    def _apply_read_state(self, rows):
        """Copy the stored read state onto the matching cached items."""
        by_id = {row['id']: row for row in rows}
        with self._lock:
            for item in self._items:
                row = by_id.get(item['id'])
                if row is not None:
                    item['is_read'] = row['is_read']
                    item['read_at'] = row['read_at']
