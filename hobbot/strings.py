"""
Case-insensitive names as IRC compares them (RFC 1459).
"""

from jaraco.collections import KeyTransformingDict
from jaraco.text import FoldedCase


class IRCFoldedCase(FoldedCase):
    """
    A version of FoldedCase that honors the IRC specification for lowercased
    strings (RFC 1459).

    >>> IRCFoldedCase('Foo^').lower()
    'foo~'

    >>> IRCFoldedCase('[this]') == IRCFoldedCase('{THIS}')
    True

    >>> IRCFoldedCase('[This]').casefold()
    '{this}'
    """

    translation = dict(
        zip(
            map(ord, r"[]\^"),
            map(ord, r"{}|~"),
        )
    )

    def lower(self):
        return super().lower().translate(self.translation)

    def casefold(self):
        return super().casefold().translate(self.translation)

    def __setattr__(self, key, val):
        # FoldedCase caches casefold on the instance
        if key == 'casefold':
            return
        return super().__setattr__(key, val)


def same_name(a, b):
    """
    >>> same_name('Bot[1]', 'bot{1}')
    True
    >>> same_name('bot', 'bot2')
    False
    """
    return IRCFoldedCase(a) == IRCFoldedCase(b)


class IRCDict(KeyTransformingDict):
    """
    A dictionary of channels or nicks, looked up case-insensitively but
    keeping the case first seen.

    >>> d = IRCDict({'#[This]': 'that'})
    >>> d['#{this}']
    'that'
    >>> list(d)
    ['#[This]']
    """

    @staticmethod
    def transform_key(key):
        if isinstance(key, str):
            key = IRCFoldedCase(key)
        return key


class NickSet:
    """
    A set of nicknames, unique under IRC case folding.

    >>> members = NickSet(['alice', 'Bob'])
    >>> members.update(['ALICE', 'carol'])
    >>> 'bob' in members
    True
    >>> sorted(members)
    ['Bob', 'alice', 'carol']
    >>> len(members)
    3
    """

    def __init__(self, nicks=()):
        self._nicks = IRCDict()
        self.update(nicks)

    def add(self, nick):
        self._nicks.setdefault(nick, nick)

    def update(self, nicks):
        for nick in nicks:
            self.add(nick)

    def discard(self, nick):
        self._nicks.pop(nick, None)

    def __contains__(self, nick):
        return nick in self._nicks

    def __iter__(self):
        return iter(self._nicks.values())

    def __len__(self):
        return len(self._nicks)

    def __repr__(self):
        return 'NickSet({nicks!r})'.format(nicks=sorted(self))
