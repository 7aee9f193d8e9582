"""
Services: bots built on a session by supplying a message callback.

A service is a class with a ``start(launcher)`` method, registered under
a name. Third-party packages may publish services in the
``hobbot.services`` entry point group; those are looked up only when a
name isn't registered here.
"""

import abc
import logging

from importlib import metadata

import jaraco.functools

from . import client
from . import router
from .strings import same_name

log = logging.getLogger(__name__)

registry = {}
"Service classes by name"

entry_point_group = 'hobbot.services'


class Service(metaclass=abc.ABCMeta):
    suffix = ''
    "Appended to the launcher's nickname to form this service's nick"

    @abc.abstractmethod
    def start(self, launcher):
        """
        Start the service's session(s), typically by calling
        ``launcher.connect(self.suffix, callback)``.
        """


class Launcher:
    """
    What a service needs to know to open its sessions.
    """

    def __init__(self, reactor, server_address, nickname, channels=(), password=None, **session_params):
        self.reactor = reactor
        self.server_address = server_address
        self.nickname = nickname
        self.channels = list(channels)
        self.password = password
        self.session_params = session_params

    def open_session(self, suffix, callback, **params):
        params = dict(self.session_params, **params)
        return client.open_session(
            self.reactor,
            self.server_address,
            self.nickname + suffix,
            self.channels,
            callback,
            password=self.password,
            **params
        )

    def connect(self, suffix, callback, **params):
        "Open a session and return its send function"
        return self.open_session(suffix, callback, **params).send


def register(name):
    """
    Class decorator adding a service to the registry.
    """

    def decorator(cls):
        registry[name] = cls
        return cls

    return decorator


@jaraco.functools.once
def _entry_points():
    return {ep.name: ep for ep in metadata.entry_points(group=entry_point_group)}


def load(name):
    """
    Return the service class registered as ``name``.

    >>> load('echo').__name__
    'Echo'
    >>> load('no-such-service')
    Traceback (most recent call last):
    ...
    LookupError: no service named 'no-such-service'
    """
    try:
        return registry[name]
    except KeyError:
        pass
    try:
        entry_point = _entry_points()[name]
    except KeyError:
        raise LookupError("no service named {name!r}".format(name=name)) from None
    log.info("loading service %s from %s", name, entry_point.value)
    return register(name)(entry_point.load())


@register('echo')
class Echo(Service):
    """
    A demonstration service. Addressed as ``<nick>-echo: <command>``:

        ping -- answers "pong"

        say <text> -- repeats the text

        topic <channel> -- tells the cached topic of a channel

        who <channel> -- lists the cached members of a channel

    Anything else gets "I don't understand".
    """

    suffix = '-echo'

    def __init__(self):
        self.session = None
        self.router = router.Router(
            [
                (r'ping\b', self.ping),
                (r'say\s+(?P<text>.+)', self.say),
                (r'topic\s+(?P<channel>\S+)', self.topic),
                (r'who\s+(?P<channel>\S+)', self.who),
                (router.FALLBACK, self.huh),
            ]
        )

    def start(self, launcher):
        self.session = launcher.open_session(self.suffix, self.on_message)
        return self.session

    def on_message(self, addressed, sender, destination, text):
        if not addressed:
            return
        # private messages are answered privately
        reply_to = sender if same_name(destination, self.session.nickname) else destination
        reply = self.router.route(text)
        client.privmsg(self.session.send, reply_to, reply)

    def ping(self, match):
        return "pong"

    def say(self, match):
        return match.group('text')

    def topic(self, match):
        name = match.group('channel')
        if name not in self.session.channels:
            return "I don't know {name}".format(name=name)
        return self.session.channels[name].topic or "{name} has no topic".format(name=name)

    def who(self, match):
        name = match.group('channel')
        if name not in self.session.channels:
            return "I don't know {name}".format(name=name)
        return ', '.join(sorted(self.session.channels[name].members))

    def huh(self, match):
        return "I don't understand {text!r}".format(text=match.text)
