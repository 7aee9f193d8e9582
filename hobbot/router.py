"""
First-match routing of free text to actions.

>>> router = Router()
>>> @router.rule(r'say (?P<what>.+)')
... def say(match):
...     return match.group('what')
>>> @router.rule(FALLBACK)
... def huh(match):
...     return "I don't understand " + repr(match.text)
>>> router.route('say hello world')
'hello world'
>>> router.route('dance')
"I don't understand 'dance'"
"""

import collections
import logging
import re

log = logging.getLogger(__name__)

FALLBACK = ''
"A pattern matching any text"


class Match(collections.namedtuple('Match', 'text groups named rest')):
    """
    The result of a rule matching: the routed text, the positional and
    named groups captured, and whatever followed the matched part.
    """

    __slots__ = ()

    @classmethod
    def from_re(cls, match):
        return cls(
            match.string,
            match.groups(),
            match.groupdict(),
            match.string[match.end():],
        )

    def group(self, key=0):
        """
        Index positional groups by number (1-based, like re) and named
        groups by name.

        >>> m = Match('add 2', ('2',), {'n': '2'}, '')
        >>> m.group(1), m.group('n'), m.group()
        ('2', '2', 'add 2')
        """
        if isinstance(key, str):
            return self.named[key]
        if key == 0:
            return self.text[: len(self.text) - len(self.rest)]
        return self.groups[key - 1]


class Rule(collections.namedtuple('Rule', 'pattern action')):
    __slots__ = ()

    @classmethod
    def ensure(cls, item):
        pattern, action = item
        if isinstance(pattern, str):
            pattern = re.compile(pattern)
        return cls(pattern, action)

    def match(self, text):
        found = self.pattern.match(text)
        return Match.from_re(found) if found else None


class Router:
    """
    An ordered list of (pattern, action) rules.

    Patterns are matched at the start of the text in list order; the
    first that matches has its action called with the Match (and any
    extra arguments given to ``route``) and no later rule is tried.
    """

    def __init__(self, rules=()):
        self.rules = list(map(Rule.ensure, rules))

    def add(self, pattern, action):
        self.rules.append(Rule.ensure((pattern, action)))

    def rule(self, pattern):
        """
        Decorator form of :meth:`add`.
        """

        def decorator(action):
            self.add(pattern, action)
            return action

        return decorator

    def match(self, text):
        """
        Return (rule, match) for the first rule matching ``text``, or
        (None, None).
        """
        for rule in self.rules:
            match = rule.match(text)
            if match is not None:
                return rule, match
        return None, None

    def route(self, text, *args, **kwargs):
        """
        Call the action of the first matching rule and return its result.
        Return None when no rule matches.
        """
        rule, match = self.match(text)
        if rule is None:
            log.debug("no rule matches %r", text)
            return None
        log.debug("%r matched %s", text, rule.pattern.pattern)
        return rule.action(match, *args, **kwargs)
