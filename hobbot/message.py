r"""
Parsing and formatting of IRC protocol lines.

>>> RawMessage.parse('PASS secretpasswordhere')
RawMessage(prefix='', command='PASS', params=[['secretpasswordhere']])

>>> RawMessage.parse(':WiZ NICK Kilroy')
RawMessage(prefix='WiZ', command='NICK', params=[['Kilroy']])

>>> RawMessage.parse('JOIN #foo,#bar fubar,foobar').params
[['#foo', '#bar'], ['fubar', 'foobar']]

The trailing parameter keeps its spaces.

>>> RawMessage.parse(':nick!u@h PRIVMSG #chan :hello there').params
[['#chan'], ['hello there']]

>>> str(RawMessage.parse('JOIN #foo,#bar fubar,foobar'))
'JOIN #foo,#bar :fubar,foobar'
"""

import collections
import re

from more_itertools import always_iterable


class ParseError(ValueError):
    "The line is not a well-formed IRC message"


_message_pat = (
    r"(?::(?P<prefix>[^ \0]+) +)?"
    r"(?P<command>[^ \0:][^ \0]*)"
    r"(?P<middle>(?: +[^ \0:][^ \0]*)*)"
    r"(?: +:(?P<trailing>.*))?"
)
_message_regexp = re.compile(_message_pat, re.DOTALL)


def _values(param):
    return param.split(',')


class RawMessage(collections.namedtuple('RawMessage', 'prefix command params')):
    """
    A parsed line: the prefix (empty when absent), the command, and the
    parameters, each parameter being the list of its comma-separated values.
    """

    __slots__ = ()

    @classmethod
    def parse(cls, line):
        """
        Parse one line (without its terminator).

        >>> RawMessage.parse('')
        Traceback (most recent call last):
        ...
        hobbot.message.ParseError: empty line

        >>> RawMessage.parse(' NICK foo')
        Traceback (most recent call last):
        ...
        hobbot.message.ParseError: malformed line: ' NICK foo'

        >>> RawMessage.parse(':WiZ')
        Traceback (most recent call last):
        ...
        hobbot.message.ParseError: malformed line: ':WiZ'

        >>> RawMessage.parse('PRIVMSG #chan :').params
        [['#chan'], ['']]
        """
        if not line:
            raise ParseError("empty line")
        match = _message_regexp.fullmatch(line)
        if not match:
            raise ParseError("malformed line: {line!r}".format(line=line))
        params = [_values(param) for param in match.group('middle').split(' ') if param]
        trailing = match.group('trailing')
        if trailing is not None:
            params.append(_values(trailing))
        return cls(match.group('prefix') or '', match.group('command'), params)

    @property
    def source(self):
        return NickMask.from_group(self.prefix)

    def arguments(self):
        """
        The parameters with each one's values re-joined.

        >>> RawMessage.parse('PRIVMSG a,b :one, two').arguments()
        ['a,b', 'one, two']
        """
        return [','.join(values) for values in self.params]

    def __str__(self):
        """
        Format the message so that it parses back to an equal one.
        The last parameter is always written in trailing form.
        """
        arguments = self.arguments()
        if arguments:
            arguments[-1] = ':' + arguments[-1]
        prefix = self.prefix and ':' + self.prefix
        return format_items(prefix, self.command, *arguments)


def format_items(*items):
    """
    Join all non-empty items, separated by spaces.

    >>> format_items('TOPIC', '#chan', '')
    'TOPIC #chan'
    """
    return ' '.join(filter(None, items))


def join_values(values):
    """
    Join a single value or an iterable of them with commas.

    >>> join_values('#a')
    '#a'
    >>> join_values(['#a', '#b'])
    '#a,#b'
    """
    return ','.join(always_iterable(values))


def text(value):
    """
    Mark ``value`` as the free-text final parameter.

    >>> text('hello there')
    ':hello there'
    """
    return ':' + value


class NickMask(str):
    """
    A nickmask (the prefix of a message from a user)

    >>> nm = NickMask('pinky!username@example.com')
    >>> nm.nick
    'pinky'

    >>> nm.host
    'example.com'

    >>> nm.user
    'username'

    Server messages omit the userhost. In that case, None is returned.

    >>> nm = NickMask('irc.server.net')
    >>> nm.nick
    'irc.server.net'
    >>> nm.userhost
    >>> nm.host
    """

    @property
    def nick(self):
        nick, sep, userhost = self.partition("!")
        return nick

    @property
    def userhost(self):
        nick, sep, userhost = self.partition("!")
        return userhost or None

    @property
    def host(self):
        nick, sep, userhost = self.partition("!")
        user, sep, host = userhost.partition('@')
        return host or None

    @property
    def user(self):
        nick, sep, userhost = self.partition("!")
        user, sep, host = userhost.partition('@')
        return user or None

    @classmethod
    def from_group(cls, group):
        return cls(group) if group else None
