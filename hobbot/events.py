import itertools
import sys

from jaraco.text import clean, drop_comment, lines_from

if sys.version_info >= (3, 12):
    from importlib.resources import files
else:
    from importlib_resources import files


class Code(str):
    """
    A numeric reply, named for readability but remembering its number.
    """

    def __new__(cls, code, name):
        return super().__new__(cls, name)

    def __init__(self, code, name):
        self.code = code

    def __int__(self):
        return int(self.code)

    @staticmethod
    def lookup(command) -> 'Code':
        """
        Lookup a command by numeric or by name.

        >>> Code.lookup('332')
        'currenttopic'
        >>> Code.lookup('332').code
        '332'
        >>> int(Code.lookup('namreply'))
        353

        Anything else, including protocol commands, comes back lowercased.

        >>> Code.lookup('PRIVMSG')
        'privmsg'
        >>> Code.lookup('999')
        '999'
        """
        fallback = Code(command.lower(), command.lower())
        return numeric.get(command, _by_name.get(command.lower(), fallback))


_codes = itertools.starmap(
    Code,
    map(
        str.split,
        map(drop_comment, clean(lines_from(files(__package__).joinpath('codes.txt')))),
    ),
)


numeric = {code.code: code for code in _codes}

codes = {v: k for k, v in numeric.items()}

_by_name = {v: v for v in numeric.values()}
