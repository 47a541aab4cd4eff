import pytest

from clitree import (Application,
                     HelpHandler,
                     Terminate,
                     UnknownFlag)


def get_chat_app(**kwargs):
    kwargs.setdefault('help_handler', HelpHandler(width=80))
    app = Application('chat', 'A command-line chat application.',
                      environ={}, **kwargs)
    app.flag('debug', 'Enable debug mode.', char='d').bool()
    app.flag('server', 'Server address.').default('127.0.0.1').envar('CHAT_SERVER').string()
    app.flag('secret', 'Not for mortals.').hidden().string()

    register = app.command('register', 'Register a new user.')
    register.flag('name', 'Name of user.', char='n').required().string()
    register.arg('nick', 'Nickname for user.').required().string()

    post = app.command('post', 'Post a message to a channel.')
    post.flag('channel', 'Channel to post to.').short('a').required().string()
    post.flag('image', 'Image to post.').placeholder('PATH').string()
    post.arg('text', 'Text to post.').strings()

    remote = app.command('remote', 'Manage remotes.')
    remote.command('add', 'Add a remote.').arg('url').required().string()
    remote.command('rm', 'Remove a remote.').hidden()

    return app


@pytest.fixture
def chat_app():
    return get_chat_app()


@pytest.mark.parametrize(
    "argv, contains",
    [(['--help'], ['usage: chat [<flags>] <command> [<args> ...]',
                   'A command-line chat application.',
                   'Flags:', '  -d, --debug', '--server="127.0.0.1"',
                   "(defaults to '127.0.0.1', $CHAT_SERVER)",
                   'Commands:', 'register', 'Post a message to a channel.',
                   'remote add']),
     (['register', '--help'], ['usage: chat register --name=NAME [<flags>] <nick>',
                               'Register a new user.', '-n, --name=NAME',
                               '(required)', 'Args:', '<nick>']),
     (['post', '-h'], []),  # short form is not builtin
     (['post', '--help'], ['usage: chat post --channel=CHANNEL [<flags>] [<text>...]',
                           '-a, --channel=CHANNEL', '--image=PATH', '<text>...']),
     (['remote', '--help'], ['usage: chat remote [<flags>] <command> [<args> ...]',
                             'remote add'])]
)
def test_help(chat_app, argv, contains):
    if not contains:
        with pytest.raises(UnknownFlag):
            chat_app.parse(argv)
        return

    res = chat_app.parse(argv)
    assert isinstance(res.terminate, Terminate)
    assert res.terminate.code == 0

    text = res.terminate.output
    for cont in contains:
        assert cont in text
    assert 'secret' not in text


def test_help_hides_commands(chat_app):
    text = chat_app.parse(['remote', '--help']).terminate.output
    assert 'remote add' in text
    assert 'remote rm' not in text


def test_help_with_error(chat_app):
    res = chat_app.parse(['--help', '--bogus'])
    assert res.terminate.code == 1

    text = res.terminate.output
    assert text.startswith("chat: error: unknown long flag '--bogus'\n")
    assert 'usage: chat [<flags>] <command> [<args> ...]' in text


def test_help_skips_validation(chat_app):
    # required flags and subcommands aren't enforced when asking for help
    res = chat_app.parse(['post', '--help'])
    assert res.command == 'post'
    assert res.terminate.code == 0

    res = chat_app.parse(['remote', '--help'])
    assert res.command == 'remote'


def test_usage_line(chat_app):
    handler = chat_app.help_handler
    assert handler.get_usage_line(chat_app) == 'usage: chat [<flags>] <command> [<args> ...]'

    app = Application('cp', help_handler=HelpHandler(width=80), environ={})
    app.flag('force', char='f').bool()
    app.arg('src').required().string()
    app.arg('dst').string()
    app.arg('extra').strings()
    app.init()

    assert app.help_handler.get_usage_line(app) == 'usage: cp [<flags>] <src> [<dst> [<extra>...]]'


def test_usage_required_boolean():
    app = Application('yes', help_handler=HelpHandler(width=80), environ={})
    app.flag('confirm').required().bool()

    assert app.help_handler.get_usage_line(app) == 'usage: yes --[no-]confirm'


def test_custom_help_handler():
    handler = HelpHandler(usage_label='Usage:', flags_section_heading='Options:', width=60)
    app = get_chat_app(help_handler=handler)

    text = app.parse(['--help']).terminate.output
    assert text.startswith('Usage: chat')
    assert 'Options:' in text

    with pytest.raises(TypeError, match='unexpected keyword'):
        HelpHandler(colour=True)


def test_help_disabled():
    app = get_chat_app(help_handler=False)
    with pytest.raises(UnknownFlag, match="'--help'"):
        app.parse(['--help'])


def test_help_flag_shadowed():
    app = Application('shadow', environ={})
    sub = app.command('sub')
    user_help = sub.flag('help', 'Get help on a topic.').bool()

    res = app.parse(['sub', '--help'])
    assert res.terminate is None
    assert user_help.value is True

    res = app.parse(['--help'])
    assert res.terminate.code == 0


def test_long_help_wraps():
    app = Application('wrap', help_handler=HelpHandler(width=60), environ={})
    app.flag('long', ' '.join(['word'] * 40)).string()

    text = app.parse(['--help']).terminate.output
    assert all(len(line) <= 60 for line in text.splitlines())


def test_help_unwraps_description():
    app = Application('doc', help_handler=HelpHandler(width=80), environ={},
                      help="""Does a thing,
                      and does it well.

                      Then stops.""")

    text = app.parse(['--help']).terminate.output
    assert 'Does a thing, and does it well.\nThen stops.' in text


def test_term_width_from_environ(monkeypatch):
    from clitree import helpers

    def _no_terminal():
        raise OSError('not a terminal')

    monkeypatch.setattr(helpers, '_get_termios_width', _no_terminal)
    monkeypatch.setenv('COLUMNS', '72')
    assert helpers.get_term_width() == 72
    assert HelpHandler().get_width() == 70
    assert HelpHandler(max_width=50).get_width() == 48

    monkeypatch.setenv('COLUMNS', 'wide')
    assert helpers.get_term_width() is None
    assert HelpHandler().get_width() == 78

    app = Application('narrow', help_handler=HelpHandler(), environ={})
    app.flag('long', ' '.join(['word'] * 40)).string()
    text = app.parse(['--help']).terminate.output
    assert all(len(line) <= 78 for line in text.splitlines())
