"""
Fan-out: both delivery strategies must hand an event to a subscriber if
and only if the subscriber's user is a recipient.
"""
import uuid

import pytest

from core.exceptions import TransportFailure
from notifications.fanout import (
    BroadcastSink,
    RecipientTopicSink,
    dispatch,
    get_sink,
    is_recipient,
    set_sink,
    subscribe_notifications,
)

ALICE = '11111111-1111-1111-1111-111111111111'
BOB = '22222222-2222-2222-2222-222222222222'
CAROL = '33333333-3333-3333-3333-333333333333'


def event(event_id, *recipients):
    return {'id': event_id, 'message': f'event {event_id}', 'recipients': list(recipients)}


@pytest.fixture(params=[BroadcastSink, RecipientTopicSink], ids=['broadcast', 'topic'])
def any_sink(request):
    return request.param()


class TestMembershipPredicate:

    def test_member(self):
        assert is_recipient(event('1', ALICE, BOB), BOB)

    def test_not_member(self):
        assert not is_recipient(event('1', ALICE), BOB)

    def test_uuid_and_string_ids_match(self):
        assert is_recipient(event('1', uuid.UUID(ALICE)), ALICE)
        assert is_recipient(event('1', ALICE), uuid.UUID(ALICE))

    def test_missing_recipients(self):
        assert not is_recipient({'id': '1'}, ALICE)


class TestDelivery:

    def test_only_recipients_receive(self, any_sink):
        alice, bob, carol = [], [], []
        any_sink.subscribe(ALICE, alice.append)
        any_sink.subscribe(BOB, bob.append)
        any_sink.subscribe(CAROL, carol.append)

        delivered = any_sink.deliver(event('1', ALICE, BOB))

        assert delivered == 2
        assert [e['id'] for e in alice] == ['1']
        assert [e['id'] for e in bob] == ['1']
        assert carol == []

    def test_each_subscription_of_a_user_receives(self, any_sink):
        first, second = [], []
        any_sink.subscribe(ALICE, first.append)
        any_sink.subscribe(ALICE, second.append)

        any_sink.deliver(event('1', ALICE))

        assert len(first) == 1
        assert len(second) == 1

    def test_duplicate_recipient_delivered_once(self, any_sink):
        received = []
        any_sink.subscribe(ALICE, received.append)

        any_sink.deliver(event('1', ALICE, ALICE))

        assert len(received) == 1

    def test_dispatch_order_preserved(self, any_sink):
        received = []
        any_sink.subscribe(ALICE, received.append)

        for event_id in ('1', '2', '3'):
            any_sink.deliver(event(event_id, ALICE))

        assert [e['id'] for e in received] == ['1', '2', '3']

    def test_no_replay_for_late_subscriber(self, any_sink):
        any_sink.deliver(event('1', ALICE))
        received = []
        any_sink.subscribe(ALICE, received.append)

        any_sink.deliver(event('2', ALICE))

        assert [e['id'] for e in received] == ['2']

    def test_unsubscribe(self, any_sink):
        received = []
        subscription = any_sink.subscribe(ALICE, received.append)

        subscription.unsubscribe()
        subscription.unsubscribe()
        any_sink.deliver(event('1', ALICE))

        assert received == []
        assert any_sink.subscriber_count == 0

    def test_callback_may_unsubscribe_itself(self, any_sink):
        received = []
        holder = {}

        def once(evt):
            received.append(evt)
            holder['subscription'].unsubscribe()

        holder['subscription'] = any_sink.subscribe(ALICE, once)

        any_sink.deliver(event('1', ALICE))
        any_sink.deliver(event('2', ALICE))

        assert [e['id'] for e in received] == ['1']


class TestTransportFailure:

    def test_failing_subscriber_dropped(self, any_sink):
        errors = []
        healthy = []

        def broken(evt):
            raise TransportFailure('socket closed')

        any_sink.subscribe(ALICE, broken, on_error=errors.append)
        any_sink.subscribe(ALICE, healthy.append)

        delivered = any_sink.deliver(event('1', ALICE))

        assert delivered == 1
        assert len(healthy) == 1
        assert len(errors) == 1
        assert isinstance(errors[0], TransportFailure)
        assert len(any_sink.subscriptions_for(ALICE)) == 1

    def test_failing_error_handler_contained(self, any_sink):
        def broken(evt):
            raise TransportFailure('socket closed')

        def broken_handler(exc):
            raise RuntimeError('reconnect failed')

        any_sink.subscribe(ALICE, broken, on_error=broken_handler)

        assert any_sink.deliver(event('1', ALICE)) == 0
        assert any_sink.subscriber_count == 0


class TestProcessSink:

    @pytest.fixture(autouse=True)
    def isolated_sink(self):
        previous = set_sink(None)
        yield
        set_sink(previous)

    def test_built_from_settings(self, settings):
        settings.PROPDESK_NOTIFICATIONS = {
            **settings.PROPDESK_NOTIFICATIONS,
            'DELIVERY_STRATEGY': 'notifications.fanout.BroadcastSink',
        }

        sink = get_sink()

        assert isinstance(sink, BroadcastSink)
        assert get_sink() is sink

    def test_subscribe_and_dispatch(self):
        received = []
        unsubscribe = subscribe_notifications(ALICE, received.append)

        assert dispatch(event('1', ALICE)) == 1
        unsubscribe()
        assert dispatch(event('2', ALICE)) == 0

        assert [e['id'] for e in received] == ['1']

    def test_dispatch_never_raises(self, monkeypatch):
        sink = get_sink()

        def explode(evt):
            raise RuntimeError('sink offline')

        monkeypatch.setattr(sink, 'deliver', explode)

        assert dispatch(event('1', ALICE)) == 0
