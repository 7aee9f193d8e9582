"""
hobbot: an event-driven IRC bot framework.
"""

import contextlib

from importlib import metadata


def _get_version():
    with contextlib.suppress(Exception):
        return metadata.version('hobbot')
    return 'unknown'


__version__ = _get_version()
