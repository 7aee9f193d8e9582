import abc
import logging
import os
import socket
import subprocess

from . import buffer
from . import reactor

log = logging.getLogger(__name__)


class Factory:
    """
    A class for creating connected sockets.

    To create a simple connection:

    .. code-block:: python

       server_address = ('localhost', 6667)
       Factory()(server_address)

    To create an IPv6 connection:

    .. code-block:: python

       Factory(ipv6=True)(server_address)

    The connect itself blocks; the returned socket is switched to
    non-blocking mode by the handler that takes ownership of it.
    The Factory may be re-used to create new connections with the same
    settings.
    """

    family = socket.AF_INET

    def __init__(self, bind_address=None, ipv6=False):
        self.bind_address = bind_address
        if ipv6:
            self.family = socket.AF_INET6

    def connect(self, server_address):
        sock = socket.socket(self.family, socket.SOCK_STREAM)
        try:
            self.bind_address and sock.bind(self.bind_address)
            sock.connect(server_address)
        except OSError:
            sock.close()
            raise
        return sock

    __call__ = connect


class LineHandler(reactor.Handler):
    """
    A handler that frames its input into lines and queues its output.

    ``on_line`` is called with each complete inbound line;
    ``on_close`` (if given) once the handler has been torn down.
    """

    read_size = 2**14
    buffer_class = buffer.LineBuffer
    source = 'PEER'

    def __init__(self, reactor, on_line, on_close=None):
        super().__init__(reactor)
        self.buffer = self.buffer_class()
        self.on_line = on_line
        self.on_close = on_close
        self.closed = False

    def write(self, text):
        if self.closed:
            raise OSError("write to a closed handler")
        self.buffer.write(text)

    def receive(self, chunk):
        try:
            lines = self.buffer.feed(chunk)
        except buffer.EndOfStream:
            log.info("%s closed the connection", self.source)
            self.close()
            return
        for line in lines:
            log.debug("FROM %s: %s", self.source, line)
            self.on_line(line)

    def close(self):
        """
        Unregister and release the descriptors. Idempotent.
        """
        if self.closed:
            return
        self.closed = True
        self.stop()
        self._release()
        if self.on_close is not None:
            self.on_close(self)

    @abc.abstractmethod
    def _release(self):
        "Close the descriptors; called once, after the handler is stopped"


class SocketHandler(LineHandler):
    """
    A connected TCP socket registered with a Reactor.
    """

    source = 'SERVER'

    def __init__(self, reactor, sock, on_line, on_close=None):
        super().__init__(reactor, on_line, on_close)
        self.socket = sock
        self.socket.setblocking(False)
        self.fd = sock.fileno()

    def __repr__(self):
        return '<SocketHandler fd={self.fd}>'.format(self=self)

    def descriptors(self):
        return {self.fd}

    def interest(self, readable, writable, exceptional):
        readable.add(self.fd)
        if self.buffer.pending:
            writable.add(self.fd)

    def ready(self, readable, writable, exceptional):
        if self.fd in writable:
            try:
                self.buffer.flush(self.socket.send)
            except OSError as exc:
                log.warning("write to %r failed: %s", self, exc)
                self.close()
                return
        if self.fd in readable:
            try:
                chunk = self.socket.recv(self.read_size)
            except BlockingIOError:
                return
            except OSError as exc:
                log.warning("read from %r failed: %s", self, exc)
                self.close()
                return
            self.receive(chunk)

    def _release(self):
        try:
            self.socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            # already disconnected by the peer
            pass
        self.socket.close()


class ProcessHandler(LineHandler):
    """
    A child process whose stdin and stdout are registered as a pair.

    Lines written go to the child's stdin; lines the child prints are
    passed to ``on_line``. Both pipes are closed together once the child
    closes its stdout. The child is then reaped, and killed if it has not exited within
    ``wait_timeout`` seconds.
    """

    source = 'CHILD'
    wait_timeout = 1

    def __init__(self, reactor, args, on_line, on_close=None, **popen_kwargs):
        super().__init__(reactor, on_line, on_close)
        self.process = subprocess.Popen(
            args, stdin=subprocess.PIPE, stdout=subprocess.PIPE, **popen_kwargs
        )
        self.stdin = self.process.stdin.fileno()
        self.stdout = self.process.stdout.fileno()
        os.set_blocking(self.stdin, False)
        os.set_blocking(self.stdout, False)

    def __repr__(self):
        return '<ProcessHandler pid={self.process.pid}>'.format(self=self)

    def descriptors(self):
        return {self.stdin, self.stdout}

    def interest(self, readable, writable, exceptional):
        readable.add(self.stdout)
        if self.buffer.pending:
            writable.add(self.stdin)

    def _send(self, data):
        return os.write(self.stdin, data)

    def ready(self, readable, writable, exceptional):
        if self.stdin in writable:
            try:
                self.buffer.flush(self._send)
            except OSError as exc:
                log.warning("write to %r failed: %s", self, exc)
                self.close()
                return
        if self.stdout in readable:
            try:
                chunk = os.read(self.stdout, self.read_size)
            except BlockingIOError:
                return
            except OSError as exc:
                log.warning("read from %r failed: %s", self, exc)
                self.close()
                return
            self.receive(chunk)

    def _release(self):
        for pipe in (self.process.stdin, self.process.stdout):
            try:
                pipe.close()
            except OSError:
                # unflushed data on a pipe whose reader is gone
                pass
        try:
            returncode = self.process.wait(timeout=self.wait_timeout)
        except subprocess.TimeoutExpired:
            log.warning("%r did not exit, killing it", self)
            self.process.kill()
            returncode = self.process.wait()
        log.debug("%r released, returncode=%r", self, returncode)
