"""
Fan-out of published notifications to connected subscribers.

A `NotificationSink` holds the live subscriptions of this process and
pushes every committed notification (its full serialized row) to the ones
it is addressed to. Two interchangeable strategies:

- `RecipientTopicSink` (default): one topic per user id; an event is only
  handed to subscriptions of its recipients.
- `BroadcastSink`: one global channel; every subscription sees every
  event and the membership predicate discards the rest.

Both strategies apply the same predicate (`is_recipient`) before calling
a subscriber, so a subscriber for user U receives an event if and only if
U is in the event's recipients.

Usage:
    from notifications.fanout import subscribe_notifications

    unsubscribe = subscribe_notifications(user.id, on_event)
    ...
    unsubscribe()

Delivery is in dispatch order per sink, best effort and without replay: a
subscriber that is not connected when an event is dispatched never sees
it and has to refetch.
"""

import logging
import threading
import uuid

from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger('propdesk.notifications')


def is_recipient(event, user_id):
    """Membership predicate shared by every delivery strategy."""
    return str(user_id) in {str(r) for r in event.get('recipients') or ()}


class Subscription:
    """
    One live subscription of one user.

    `on_event(event)` is called with each delivered event. If it raises,
    the subscription is dropped and `on_error(exc)` (when given) is called
    so the owner can reconnect and refetch.
    """

    def __init__(self, sink, user_id, on_event, on_error=None):
        self.id = uuid.uuid4().hex
        self.sink = sink
        self.user_id = str(user_id)
        self.on_event = on_event
        self.on_error = on_error
        self.active = True

    def __repr__(self):
        return f"<Subscription {self.id[:8]} user={self.user_id} active={self.active}>"

    def accepts(self, event):
        return self.active and is_recipient(event, self.user_id)

    def unsubscribe(self):
        self.sink.unsubscribe(self)


class NotificationSink:
    """
    Base class for delivery strategies.

    Subclasses decide which subscriptions are candidates for an event
    (`_candidates`) and how subscriptions are stored (`_add`, `_remove`).
    Subscriber callbacks run outside the registry lock, so a callback may
    subscribe or unsubscribe.
    """

    def __init__(self):
        self._lock = threading.RLock()
        # Serializes dispatch so every subscriber sees events in the same order
        self._dispatch_lock = threading.RLock()

    def subscribe(self, user_id, on_event, on_error=None):
        subscription = Subscription(self, user_id, on_event, on_error)
        with self._lock:
            self._add(subscription)
        logger.debug(f"SUBSCRIBE: {subscription!r} via {self.__class__.__name__}")
        return subscription

    def unsubscribe(self, subscription):
        """Remove a subscription. Unsubscribing twice is harmless."""
        with self._lock:
            subscription.active = False
            self._remove(subscription)
        logger.debug(f"UNSUBSCRIBE: {subscription!r}")

    def deliver(self, event):
        """
        Push one event to every matching subscription.

        Returns the number of subscribers that accepted it.
        """
        with self._dispatch_lock:
            with self._lock:
                candidates = list(self._candidates(event))

            delivered = 0
            for subscription in candidates:
                if not subscription.accepts(event):
                    continue
                try:
                    subscription.on_event(event)
                except Exception as exc:
                    self._drop(subscription, exc)
                else:
                    delivered += 1

        logger.debug(
            f"DISPATCH: notification={event.get('id')} "
            f"candidates={len(candidates)} delivered={delivered}"
        )
        return delivered

    def _drop(self, subscription, exc):
        """Transport failure: drop the subscription and tell its owner."""
        logger.warning(
            f"TRANSPORT FAILURE: {subscription!r} dropped "
            f"({exc.__class__.__name__}: {exc})"
        )
        self.unsubscribe(subscription)
        if subscription.on_error is None:
            return
        try:
            subscription.on_error(exc)
        except Exception:
            logger.exception(f"Reconnect handler failed for {subscription!r}")

    @property
    def subscriber_count(self):
        with self._lock:
            return len(self._all())

    def subscriptions_for(self, user_id):
        with self._lock:
            return [s for s in self._all() if s.user_id == str(user_id)]

    def _add(self, subscription):
        raise NotImplementedError

    def _remove(self, subscription):
        raise NotImplementedError

    def _candidates(self, event):
        raise NotImplementedError

    def _all(self):
        raise NotImplementedError


class BroadcastSink(NotificationSink):
    """Single global channel; filtering happens per subscriber."""

    def __init__(self):
        super().__init__()
        self._subscriptions = []

    def _add(self, subscription):
        self._subscriptions.append(subscription)

    def _remove(self, subscription):
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def _candidates(self, event):
        return self._subscriptions

    def _all(self):
        return list(self._subscriptions)


class RecipientTopicSink(NotificationSink):
    """One topic per user id; events go only to their recipients' topics."""

    def __init__(self):
        super().__init__()
        self._topics = {}

    def _add(self, subscription):
        self._topics.setdefault(subscription.user_id, []).append(subscription)

    def _remove(self, subscription):
        topic = self._topics.get(subscription.user_id, [])
        if subscription in topic:
            topic.remove(subscription)
        if not topic:
            self._topics.pop(subscription.user_id, None)

    def _candidates(self, event):
        seen = set()
        candidates = []
        for recipient in event.get('recipients') or ():
            recipient = str(recipient)
            if recipient in seen:
                continue
            seen.add(recipient)
            candidates.extend(self._topics.get(recipient, ()))
        return candidates

    def _all(self):
        return [s for topic in self._topics.values() for s in topic]


# =============================================================================
# PROCESS-WIDE SINK
# =============================================================================

_sink = None
_sink_lock = threading.Lock()


def get_sink():
    """The process-wide sink, built from DELIVERY_STRATEGY on first use."""
    global _sink
    with _sink_lock:
        if _sink is None:
            strategy = settings.PROPDESK_NOTIFICATIONS['DELIVERY_STRATEGY']
            _sink = import_string(strategy)()
            logger.info(f"Notification sink initialised: {strategy}")
        return _sink


def set_sink(sink):
    """Replace the process-wide sink; returns the previous one."""
    global _sink
    with _sink_lock:
        previous, _sink = _sink, sink
    return previous


def subscribe_notifications(user_id, on_event, on_error=None):
    """Subscribe `user_id` to pushed notifications; returns `unsubscribe()`."""
    subscription = get_sink().subscribe(user_id, on_event, on_error)
    return subscription.unsubscribe


def dispatch(event):
    """
    Hand a committed notification to the sink.

    Runs as an on-commit hook of the publishing transaction; failures are
    logged and never reach the code that committed.
    """
    try:
        return get_sink().deliver(event)
    except Exception:
        logger.exception(f"DELIVERY FAILURE: dispatch of notification {event.get('id')} failed")
        return 0
