import collections


class FeatureSet:
    """
    Server features as announced by ISUPPORT (005) replies.

    Each feature is loaded into an attribute of the same name (but lowercased
    to match Python sensibilities).

    >>> f = FeatureSet()
    >>> f.load(['bot', 'PREFIX=(qov)~@+', 'NETWORK=Example', 'NICKLEN=30',
    ...     'are supported by this server'])
    >>> f.prefix == {'~': 'q', '@': 'o', '+': 'v'}
    True
    >>> f.network
    'Example'
    >>> f.nicklen
    30

    Order of prefix is relevant, so it is retained.

    >>> tuple(f.prefix)
    ('~', '@', '+')
    """

    def __init__(self):
        self._set_rfc1459_prefixes()

    def _set_rfc1459_prefixes(self):
        "install standard (RFC1459) prefixes"
        self.set('PREFIX', collections.OrderedDict([('@', 'o'), ('+', 'v')]))

    def set(self, name, value=True):
        "set a feature value"
        setattr(self, name.lower(), value)

    def remove(self, feature_name):
        if feature_name in vars(self):
            delattr(self, feature_name)

    def load(self, arguments):
        "Load the features from the arguments of a featurelist reply"
        features = arguments[1:-1]
        list(map(self.load_feature, features))

    def load_feature(self, feature):
        # negating
        if feature[0] == '-':
            return self.remove(feature[1:].lower())

        name, sep, value = feature.partition('=')

        if not sep:
            self.set(name)
            return

        parser = getattr(self, '_parse_' + name, self._parse_other)
        self.set(name, parser(value))

    def split_nick(self, nick):
        """
        Separate the channel mode prefixes from a name in a namreply.

        >>> FeatureSet().split_nick('@+alice')
        ('alice', ['o', 'v'])
        >>> FeatureSet().split_nick('bob')
        ('bob', [])
        """
        modes = []
        while nick and nick[0] in self.prefix:
            modes.append(self.prefix[nick[0]])
            nick = nick[1:]
        return nick, modes

    @staticmethod
    def _parse_PREFIX(value):
        "channel user prefixes"
        channel_modes, channel_chars = value.split(')')
        channel_modes = channel_modes[1:]
        return collections.OrderedDict(zip(channel_chars, channel_modes))

    @staticmethod
    def _parse_other(value):
        if value.isdigit():
            return int(value)
        return value
