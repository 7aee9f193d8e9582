"""
Run one or more services against a server.

    hobbot irc.example.net hob echo -c '#hobbits'
"""

import argparse
import logging

import jaraco.logging

from . import client
from . import reactor
from . import services

log = logging.getLogger(__name__)


def get_args(argv=None):
    parser = argparse.ArgumentParser(description=__doc__.strip().splitlines()[0])
    parser.add_argument('server')
    parser.add_argument('nickname', help="nickname; each service appends its suffix")
    parser.add_argument('services', nargs='+', metavar='service')
    parser.add_argument('-p', '--port', default=6667, type=int)
    parser.add_argument(
        '-c',
        '--channel',
        dest='channels',
        action='append',
        default=[],
        help="a channel to join (may be repeated)",
    )
    parser.add_argument('--password', help="server password")
    jaraco.logging.add_arguments(parser)
    return parser.parse_args(argv)


def main(argv=None):
    args = get_args(argv)
    jaraco.logging.setup(args)

    try:
        service_classes = [services.load(name) for name in args.services]
    except LookupError as exc:
        raise SystemExit(exc)

    the_reactor = reactor.Reactor()
    launcher = services.Launcher(
        the_reactor,
        (args.server, args.port),
        args.nickname,
        args.channels,
        args.password,
    )
    for cls in service_classes:
        log.info("starting %s", cls.__name__)
        try:
            cls().start(launcher)
        except client.ServerConnectionError as exc:
            print(exc)
            raise SystemExit(1)

    the_reactor.process_forever()


if __name__ == '__main__':
    main()
