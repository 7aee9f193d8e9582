import pytest

from hobbot import client
from hobbot import services


class FakeLauncher:
    nickname = 'hob'

    def __init__(self):
        self.sent = []

    def open_session(self, suffix, callback):
        return client.Session(self.nickname + suffix, ['#shire'], callback, self.sent.append)


@pytest.fixture
def launcher():
    return FakeLauncher()


@pytest.fixture
def echo(launcher):
    service = services.Echo()
    service.start(launcher)
    return service


def feed(service, *lines):
    for line in lines:
        service.session.handle_line(line)


def test_echo_is_registered():
    assert services.load('echo') is services.Echo


def test_unknown_service():
    with pytest.raises(LookupError):
        services.load('no-such-service')


def test_register():
    @services.register('test-dummy')
    class Dummy(services.Service):
        def start(self, launcher):
            pass

    try:
        assert services.load('test-dummy') is Dummy
    finally:
        del services.registry['test-dummy']


def test_echo_commands(echo, launcher):
    feed(
        echo,
        ':frodo!f@shire PRIVMSG #shire :hob-echo: ping',
        ':frodo!f@shire PRIVMSG #shire :hob-echo: say hello, world',
        ':frodo!f@shire PRIVMSG #shire :hob-echo: dance',
    )
    assert launcher.sent == [
        'PRIVMSG #shire :pong',
        'PRIVMSG #shire :hello, world',
        "PRIVMSG #shire :I don't understand 'dance'",
    ]


def test_echo_ignores_chatter(echo, launcher):
    feed(echo, ':frodo!f@shire PRIVMSG #shire :ping')
    assert launcher.sent == []


def test_echo_answers_privately(echo, launcher):
    feed(echo, ':frodo!f@shire PRIVMSG hob-echo :ping')
    assert launcher.sent == ['PRIVMSG frodo :pong']


def test_echo_reports_channel_cache(echo, launcher):
    feed(
        echo,
        ':srv 332 hob-echo #shire :Second breakfast',
        ':srv 353 hob-echo = #shire :sam @frodo',
        ':frodo!f@shire PRIVMSG hob-echo :topic #shire',
        ':frodo!f@shire PRIVMSG hob-echo :who #shire',
        ':frodo!f@shire PRIVMSG hob-echo :who #mordor',
    )
    assert launcher.sent == [
        'PRIVMSG frodo :Second breakfast',
        'PRIVMSG frodo :frodo, sam',
        "PRIVMSG frodo :I don't know #mordor",
    ]


def test_launcher_appends_suffix(monkeypatch):
    calls = []

    def open_session(*args, **kwargs):
        calls.append((args, kwargs))
        return client.Session(args[2], send='send-function')

    monkeypatch.setattr(client, 'open_session', open_session)
    launcher = services.Launcher('reactor', ('irc.example.net', 6667), 'hob', ['#shire'], 'pw')
    assert launcher.connect('-echo', print) == 'send-function'
    (args, kwargs), = calls
    assert args == ('reactor', ('irc.example.net', 6667), 'hob-echo', ['#shire'], print)
    assert kwargs == dict(password='pw')
