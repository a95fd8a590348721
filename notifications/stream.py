"""
Server-sent events bridge for the notification stream.

One `NotificationStream` per HTTP connection: it subscribes the user to
the sink, buffers pushed events in a bounded queue and yields them as
`text/event-stream` frames. A full buffer means the client is not reading;
the subscriber raises TransportFailure, the sink drops the subscription
and the stream ends with a `reconnect` frame so the client reconnects and
refetches.
"""

import json
import logging
import queue

from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder
from rest_framework.renderers import BaseRenderer

from core.exceptions import TransportFailure
from .fanout import get_sink

logger = logging.getLogger('propdesk.notifications')


def sse_event(event_type, data, event_id=None):
    """
    Format one SSE frame:

        id: <id>
        event: <type>
        data: <json>
    """
    json_data = json.dumps(data, cls=DjangoJSONEncoder)
    frame = f"event: {event_type}\ndata: {json_data}\n\n"
    if event_id:
        frame = f"id: {event_id}\n" + frame
    return frame


class EventStreamRenderer(BaseRenderer):
    """Lets content negotiation accept `Accept: text/event-stream`."""

    media_type = 'text/event-stream'
    format = 'event-stream'
    charset = 'utf-8'

    def render(self, data, accepted_media_type=None, renderer_context=None):
        # Only error bodies pass through here; the stream itself bypasses it
        return json.dumps(data, cls=DjangoJSONEncoder).encode(self.charset)


class NotificationStream:
    """Bounded per-connection buffer between the sink and one HTTP response."""

    def __init__(self, user_id, sink=None, heartbeat_seconds=None, queue_size=None):
        config = settings.PROPDESK_NOTIFICATIONS
        self.user_id = str(user_id)
        self.sink = sink or get_sink()
        self.heartbeat_seconds = heartbeat_seconds or config['STREAM_HEARTBEAT_SECONDS']
        self.queue = queue.Queue(maxsize=queue_size or config['STREAM_QUEUE_SIZE'])
        self.subscription = None
        self.broken = False

    def open(self):
        self.subscription = self.sink.subscribe(
            self.user_id, self._enqueue, on_error=self._on_transport_failure
        )
        logger.info(f"STREAM OPEN: user={self.user_id}")
        return self

    def close(self):
        if self.subscription is not None:
            self.subscription.unsubscribe()
            self.subscription = None
            logger.info(f"STREAM CLOSED: user={self.user_id}")

    def _enqueue(self, event):
        try:
            self.queue.put_nowait(event)
        except queue.Full:
            raise TransportFailure(
                f"Notification stream buffer overflow for user {self.user_id}"
            )

    def _on_transport_failure(self, exc):
        self.broken = True

    def events(self):
        """Generator of SSE frames; unsubscribes when the client goes away."""
        try:
            yield f"retry: {self.heartbeat_seconds * 1000}\n\n"
            yield sse_event('ready', {'user_id': self.user_id})

            while not self.broken:
                try:
                    event = self.queue.get(timeout=self.heartbeat_seconds)
                except queue.Empty:
                    yield ": keep-alive\n\n"
                    continue
                yield sse_event('notification', event, event_id=event.get('id'))

            # Anything still buffered was delivered before the failure
            while not self.queue.empty():
                event = self.queue.get_nowait()
                yield sse_event('notification', event, event_id=event.get('id'))
            yield sse_event('reconnect', {'reason': 'transport_failure'})
        finally:
            self.close()
