"""
IRC sessions on top of the reactor.

A Session keeps one server connection's view of the world (its own nick,
the topic and members of each channel it hears about) and turns inbound
messages into calls of a single service callback::

    callback(addressed, sender, destination, text)

Services get a session through :func:`connect`, which returns the
function used to send pre-formatted lines. The helpers at the bottom of
this module format the few commands a bot needs.

Here is an example:

    reactor = hobbot.reactor.Reactor()

    def on_message(addressed, sender, destination, text):
        if addressed:
            hobbot.client.privmsg(send, sender, "Hi there!")

    send = hobbot.client.connect(
        reactor, ("irc.some.where", 6667), "my_nickname",
        ["#channel"], on_message)
    reactor.process_forever()

Current limitations:

  * The channel cache only grows: departed members and parted
    channels are never removed.
  * Output is queued without bound if the server stops reading.
"""

import enum
import logging
import re

from . import connection
from . import events
from . import features
from . import message
from .strings import IRCDict, NickSet, same_name

log = logging.getLogger(__name__)

MAX_LINE = 512
"Bytes per line, CR/LF included, that servers are obliged to accept"


class IRCError(Exception):
    "An IRC exception"


class ServerConnectionError(IRCError):
    pass


class ServerNotConnectedError(ServerConnectionError):
    pass


class InvalidCharacters(ValueError):
    "Invalid characters were encountered in the message"


class State(enum.Enum):
    CONNECTING = 'connecting'
    REGISTERED = 'registered'
    JOINED = 'joined'


class ChannelState:
    """
    What is known about one channel: its topic and who is in it.

    >>> ch = ChannelState('#hobbits')
    >>> ch.topic
    ''
    >>> ch.add_members(['frodo', 'sam'])
    >>> ch.has_member('Frodo')
    True
    """

    def __init__(self, name, topic=''):
        self.name = name
        self.topic = topic
        self.members = NickSet()

    def __repr__(self):
        return '<ChannelState {self.name} topic={self.topic!r} members={n}>'.format(
            self=self, n=len(self.members)
        )

    def add_members(self, nicks):
        self.members.update(nicks)

    def has_member(self, nick):
        return nick in self.members


def _do_nothing(*args, **kwargs):
    pass


_lead_in = re.compile(r"([^ :]+) *:")
"A nick followed by a colon at the start of a message"


class Session:
    """
    The protocol state of one connection and the router of its messages.

    Arguments:

        nickname -- The nickname we log in with.

        channels -- Channels to join once the server welcomes us.

        callback -- Called as callback(addressed, sender, destination, text)
                    for every text message, once per destination.

        send -- Callable taking one outgoing line (without CR/LF).

        on_raw -- Optional callable receiving every parsed RawMessage
                  before it is dispatched.
    """

    arity = dict(welcome=1, currenttopic=3, notopic=2, namreply=2, privmsg=2)
    "Parameters a message needs before it can be interpreted"

    def __init__(self, nickname, channels=(), callback=_do_nothing, send=None, on_raw=None):
        self.nickname = nickname
        self.wanted = list(channels)
        self.callback = callback
        self.send = send
        self.on_raw = on_raw
        self.channels = IRCDict()
        self.features = features.FeatureSet()
        self.state = State.CONNECTING
        self.connection = None

    def __repr__(self):
        return '<Session {self.nickname} {self.state.value}>'.format(self=self)

    def handle_line(self, line):
        """
        Parse and dispatch one line from the server. A malformed line is
        logged and dropped.
        """
        if not line:
            return
        try:
            msg = message.RawMessage.parse(line)
        except message.ParseError as exc:
            log.warning("dropping line: %s", exc)
            return
        self.dispatch(msg)

    def dispatch(self, msg):
        if self.on_raw is not None:
            self.on_raw(msg)
        command = events.Code.lookup(msg.command)
        method = getattr(self, '_on_' + command, None)
        if method is None:
            log.debug("ignoring %s from %s", command, msg.prefix)
            return
        if len(msg.params) < self.arity.get(command, 0):
            log.warning("too few parameters, dropping: %s", msg)
            return
        method(msg)

    def channel(self, name):
        "Return the state for channel ``name``, creating it if needed"
        try:
            return self.channels[name]
        except KeyError:
            state = self.channels[name] = ChannelState(name)
            return state

    def login(self, password=None, realname=None):
        login(self.send, self.nickname, password, realname)

    def _on_welcome(self, msg):
        # the server may have truncated or altered our nickname
        self.nickname = msg.arguments()[0]
        self.state = State.REGISTERED
        log.info("registered as %s", self.nickname)
        for name in self.wanted:
            join(self.send, name)
        self.state = State.JOINED

    def _on_featurelist(self, msg):
        self.features.load(msg.arguments())

    def _on_currenttopic(self, msg):
        target, name, text = msg.arguments()[-3:]
        self.channel(name).topic = text

    def _on_notopic(self, msg):
        name = msg.arguments()[1]
        self.channel(name).topic = ''

    def _on_namreply(self, msg):
        """
        arguments: our nick, channel type ("=", "*" or "@"), channel,
        space-separated nicks, each possibly carrying mode prefixes
        """
        name, nick_list = msg.arguments()[-2:]
        if name == '*':
            # not a visible channel
            return
        nicks = (self.features.split_nick(nick)[0] for nick in nick_list.split())
        self.channel(name).add_members(nicks)

    def _on_ping(self, msg):
        pong(self.send, msg.arguments()[0] if msg.params else '')

    def _on_privmsg(self, msg):
        sender = msg.source.nick if msg.source else ''
        body = ','.join(msg.params[-1])
        for destination in msg.params[0]:
            addressed, text = self.addressed(destination, body)
            self.callback(addressed, sender, destination, text)

    def addressed(self, destination, body):
        """
        Decide whether a message is meant for us and strip the
        ``nick:`` lead-in if that is how it was addressed.

        >>> session = Session('bot')
        >>> session.addressed('#chan', 'bot: hello')
        (True, 'hello')
        >>> session.addressed('#chan', 'Bot  :  hello ')
        (True, 'hello')
        >>> session.addressed('bot', ' hi there ')
        (True, 'hi there')
        >>> session.addressed('#chan', 'bottle: hi')
        (False, 'bottle: hi')
        >>> Session("bot[1]").addressed("#chan", "bot{1}: hi")
        (True, 'hi')
        """
        addressed = same_name(destination, self.nickname)
        lead_in = _lead_in.match(body)
        if lead_in and same_name(lead_in.group(1), self.nickname):
            addressed = True
            body = body[lead_in.end():]
        return addressed, body.strip()


def _prep_message(string):
    # The string should not contain any carriage return other than the
    # one added here.
    if '\n' in string or '\r' in string:
        msg = "Carriage returns not allowed in outgoing lines"
        raise InvalidCharacters(msg)
    line = string + '\r\n'
    if len(line.encode('utf-8')) > MAX_LINE:
        log.warning("line exceeds %d bytes: %s", MAX_LINE, string)
    return line


class ServerConnection(connection.SocketHandler):
    """
    A server connection feeding its lines to a Session.
    """

    def __init__(self, reactor, sock, session):
        super().__init__(reactor, sock, session.handle_line, self._closed)
        self.session = session
        session.connection = self
        session.send = self.send_raw

    def _closed(self, handler):
        log.info("disconnected from server (%s)", self.session.nickname)

    def send_raw(self, string):
        """Send a raw line to the server.

        The line will be padded with appropriate CR LF.
        """
        if self.closed:
            raise ServerNotConnectedError("Not connected.")
        self.write(_prep_message(string))
        log.debug("TO SERVER: %s", string)


def open_session(
    reactor,
    server_address,
    nickname,
    channels=(),
    callback=_do_nothing,
    password=None,
    on_raw=None,
    connect_factory=connection.Factory(),
):
    """Connect to a server, log in and return the Session.

    Arguments:

    * reactor - The Reactor the connection is registered with
    * server_address - The (host, port) of the server
    * nickname - The nickname
    * channels - Channels to join once registered
    * callback - The message callback (see Session)
    * password - Password (if any)
    * on_raw - Optional hook seeing every parsed message
    * connect_factory - A callable that takes the server address and
      returns a connected socket
    """
    log.debug("open_session(server_address=%r, nickname=%r, ...)", server_address, nickname)
    try:
        sock = connect_factory(server_address)
    except OSError as ex:
        raise ServerConnectionError("Couldn't connect to socket: %s" % ex)
    session = Session(nickname, channels, callback, on_raw=on_raw)
    ServerConnection(reactor, sock, session).start()
    session.login(password)
    return session


def connect(*args, **kwargs):
    """
    Establish a session (see :func:`open_session` for the arguments)
    and return its send function.
    """
    return open_session(*args, **kwargs).send


def login(send, nickname, password=None, realname=None):
    """Send PASS (if any), NICK and USER."""
    if password:
        send(message.format_items('PASS', password))
    send(message.format_items('NICK', nickname))
    send(message.format_items('USER', nickname, '0', '*', message.text(realname or nickname)))


def join(send, channels, key=""):
    """Send a JOIN command."""
    send(message.format_items('JOIN', message.join_values(channels), key))


def part(send, channels, reason=""):
    """Send a PART command."""
    send(message.format_items('PART', message.join_values(channels), reason and message.text(reason)))


def topic(send, channel, new_topic):
    """Send a TOPIC command setting the topic."""
    send(message.format_items('TOPIC', channel, message.text(new_topic)))


def privmsg(send, targets, text):
    """Send a PRIVMSG command to one or more targets."""
    send(message.format_items('PRIVMSG', message.join_values(targets), message.text(text)))


def pong(send, target):
    """Send a PONG command."""
    send(message.format_items('PONG', message.text(target)))


def quit(send, reason=""):
    """Send a QUIT command."""
    send(message.format_items('QUIT', reason and message.text(reason)))
