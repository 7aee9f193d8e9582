import sys

import pytest

from hobbot import connection
from hobbot import reactor

UPPER = 'import sys\nfor line in sys.stdin:\n    print(line.strip().upper(), flush=True)\n'


@pytest.fixture
def r():
    return reactor.Reactor()


def run(r, until, turns=50):
    for turn in range(turns):
        if until():
            return
        r.process_once(timeout=5)
    raise AssertionError("condition not reached")


def test_process_round_trip(r):
    lines = []
    closed = []
    child = connection.ProcessHandler(
        r, [sys.executable, '-c', UPPER], lines.append, on_close=closed.append
    ).start()
    child.write('hello\n')
    child.write('frodo\n')
    run(r, lambda: len(lines) == 2)
    assert lines == ['HELLO', 'FRODO']

    child.process.stdin.close()
    run(r, lambda: closed)
    assert closed == [child]
    assert not r.handlers
    child.process.wait(timeout=5)


def test_process_exit_tears_down(r):
    lines = []
    child = connection.ProcessHandler(
        r, [sys.executable, '-c', 'print("only line")'], lines.append
    ).start()
    r.process_forever()
    assert lines == ['only line']
    assert child.closed
    child.process.wait(timeout=5)


def test_process_descriptors(r):
    child = connection.ProcessHandler(r, [sys.executable, '-c', ''], lambda line: None)
    try:
        assert child.descriptors() == {child.stdin, child.stdout}
        readable, writable = set(), set()
        child.interest(readable, writable, set())
        assert readable == {child.stdout}
        assert writable == set()
        child.write('x\n')
        child.interest(readable, writable, set())
        assert writable == {child.stdin}
    finally:
        child.close()
        child.process.wait(timeout=5)


def test_write_after_close(r):
    child = connection.ProcessHandler(r, [sys.executable, '-c', ''], lambda line: None)
    child.close()
    child.close()
    with pytest.raises(OSError):
        child.write('late\n')
    child.process.wait(timeout=5)


def test_child_is_reaped_on_close(r):
    child = connection.ProcessHandler(
        r, [sys.executable, '-c', 'print("bye")'], lambda line: None
    ).start()
    r.process_forever()
    assert child.process.returncode == 0


LINGER = 'import os, time\nos.close(1)\ntime.sleep(30)\n'


def test_lingering_child_is_killed(r):
    child = connection.ProcessHandler(r, [sys.executable, '-c', LINGER], lambda line: None)
    child.wait_timeout = 0.1
    child.start()
    r.process_forever()
    assert child.closed
    assert child.process.returncode is not None
    assert child.process.returncode != 0


def test_line_handler_requires_release():
    assert '_release' in connection.LineHandler.__abstractmethods__
