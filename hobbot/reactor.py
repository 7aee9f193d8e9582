"""
The readiness loop.

A Reactor owns the registered handlers and runs the only thread of
control. Each turn it collects the descriptors every handler is
interested in, waits in select() until one of them is ready, and hands
the result sets back to the handlers that own ready descriptors.

Nothing is locked: every handler runs to completion inside a turn and
must never block.
"""

import abc
import itertools
import logging
import select

log = logging.getLogger(__name__)


class Handler(metaclass=abc.ABCMeta):
    """
    Owner of one or more descriptors registered with a Reactor.

    Subclasses report their descriptors, say which readiness they care
    about for the coming turn, and react when the Reactor finds some of
    them ready.
    """

    token = None

    def __init__(self, reactor):
        self.reactor = reactor

    @abc.abstractmethod
    def descriptors(self):
        "The set of file descriptors owned by this handler"

    @abc.abstractmethod
    def interest(self, readable, writable, exceptional):
        "Add descriptors to the sets to be waited on"

    @abc.abstractmethod
    def ready(self, readable, writable, exceptional):
        "Perform I/O on whichever of our descriptors are ready"

    @property
    def active(self):
        return self.token is not None and self.token in self.reactor.handlers

    def start(self):
        self.token = self.reactor.register(self)
        return self

    def stop(self):
        """
        Leave the reactor. Safe to call from within ``ready``.
        """
        if self.token is not None:
            self.reactor.unregister(self.token)
        self.token = None


class Reactor:
    """
    Dispatches descriptor readiness to the registered handlers.

    Handlers are kept in registration order and keyed by the token issued
    at registration, so two handlers that compare equal never collapse.

    >>> reactor = Reactor()
    >>> reactor.handlers
    {}
    >>> reactor.unregister(42)
    """

    def __init__(self):
        self.handlers = {}
        self._tokens = itertools.count(1)

    def register(self, handler):
        """
        Add handler to the active set and return its token.

        Registering the same handler twice yields two tokens and the
        handler will be dispatched twice per turn.
        """
        token = next(self._tokens)
        self.handlers[token] = handler
        log.debug("register(%r) -> %d", handler, token)
        return token

    def unregister(self, token):
        "Remove the handler issued ``token``, if still present."
        handler = self.handlers.pop(token, None)
        if handler is not None:
            log.debug("unregister(%d) <- %r", token, handler)

    def _wait(self, readable, writable, exceptional, timeout):
        while True:
            try:
                return select.select(readable, writable, exceptional, timeout)
            except InterruptedError:
                continue
            except OSError:
                log.exception("select() failed")
                raise

    def process_once(self, timeout=None):
        """
        Run one turn of the loop.

        Arguments:

            timeout -- How long select() may wait; None blocks until a
                       descriptor is ready.
        """
        readable, writable, exceptional = set(), set(), set()
        for handler in list(self.handlers.values()):
            handler.interest(readable, writable, exceptional)
        in_, out, err = map(
            set, self._wait(readable, writable, exceptional, timeout)
        )
        ready = in_ | out | err
        for token, handler in list(self.handlers.items()):
            # dropped by a handler that ran earlier in this turn
            if token not in self.handlers:
                continue
            if handler.descriptors() & ready:
                handler.ready(in_, out, err)

    def process_forever(self):
        """
        Run turns until no handler remains.
        """
        log.debug("process_forever()")
        while self.handlers:
            self.process_once()
        log.debug("process_forever() finished")
