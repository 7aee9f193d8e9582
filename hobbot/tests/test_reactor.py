import errno
import socket
from unittest import mock

import pytest

from hobbot import reactor


class Recorder(reactor.Handler):
    """
    Reads whatever is available on one socket and remembers it.
    """

    def __init__(self, reactor, sock, on_ready=None):
        super().__init__(reactor)
        self.socket = sock
        self.on_ready = on_ready
        self.received = []
        self.interest_calls = 0

    def descriptors(self):
        return {self.socket.fileno()}

    def interest(self, readable, writable, exceptional):
        self.interest_calls += 1
        readable.add(self.socket.fileno())

    def ready(self, readable, writable, exceptional):
        self.received.append(self.socket.recv(1024))
        if self.on_ready:
            self.on_ready(self)


@pytest.fixture
def pairs():
    made = [socket.socketpair() for i in range(2)]
    yield made
    for pair in made:
        for sock in pair:
            sock.close()


def test_register_issues_distinct_tokens():
    r = reactor.Reactor()
    handler = object()
    first = r.register(handler)
    second = r.register(handler)
    assert first != second
    assert list(r.handlers) == [first, second]
    r.unregister(first)
    assert list(r.handlers) == [second]
    r.unregister(first)
    assert list(r.handlers) == [second]


def test_only_ready_handlers_are_dispatched(pairs):
    r = reactor.Reactor()
    (a, a_peer), (b, b_peer) = pairs
    one = Recorder(r, a).start()
    two = Recorder(r, b).start()
    b_peer.send(b'hello')
    r.process_once(timeout=1)
    assert one.received == []
    assert two.received == [b'hello']


def test_double_registration_dispatches_twice(pairs):
    r = reactor.Reactor()
    (a, a_peer), _ = pairs
    handler = Recorder(r, a)
    r.register(handler)
    r.register(handler)
    a_peer.send(b'xxxx')
    a.setblocking(False)
    with pytest.raises(BlockingIOError):
        # the second dispatch finds nothing left to read
        r.process_once(timeout=1)
    assert handler.received == [b'xxxx']


def test_handler_removing_itself_leaves_others_polled(pairs):
    r = reactor.Reactor()
    (a, a_peer), (b, b_peer) = pairs
    one = Recorder(r, a, on_ready=reactor.Handler.stop).start()
    two = Recorder(r, b).start()
    a_peer.send(b'bye')
    b_peer.send(b'first')
    r.process_once(timeout=1)
    assert not one.active
    assert two.active
    assert one.received == [b'bye']
    assert two.received == [b'first']

    b_peer.send(b'second')
    r.process_once(timeout=1)
    assert two.received == [b'first', b'second']
    assert one.interest_calls == 1
    assert two.interest_calls == 2


def test_handler_removed_earlier_in_turn_is_skipped(pairs):
    r = reactor.Reactor()
    (a, a_peer), (b, b_peer) = pairs
    two = Recorder(r, b)
    one = Recorder(r, a, on_ready=lambda handler: two.stop()).start()
    two.start()
    a_peer.send(b'x')
    b_peer.send(b'y')
    r.process_once(timeout=1)
    assert one.received == [b'x']
    assert two.received == []


def test_process_forever_ends_with_last_handler(pairs):
    r = reactor.Reactor()
    (a, a_peer), _ = pairs
    Recorder(r, a, on_ready=reactor.Handler.stop).start()
    a_peer.send(b'done')
    r.process_forever()
    assert not r.handlers


def test_interrupted_wait_is_retried():
    r = reactor.Reactor()
    results = [InterruptedError(), ([], [], [])]

    def fake_select(*args):
        result = results.pop(0)
        if isinstance(result, Exception):
            raise result
        return result

    with mock.patch('select.select', fake_select):
        r.process_once()
    assert not results


def test_other_wait_failures_propagate():
    r = reactor.Reactor()
    failure = OSError(errno.EBADF, 'Bad file descriptor')
    with mock.patch('select.select', side_effect=failure):
        with pytest.raises(OSError):
            r.process_once()
