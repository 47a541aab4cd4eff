import pytest

from clitree import Application, Terminate, ValidationError, TestClient


def get_app():
    app = Application('chat', 'A command-line chat application.')
    app.version('1.0')
    app.flag('user').envar('CHAT_USER').default('anonymous').string()

    post = app.command('post', 'Post a message.')
    channel = post.flag('channel', char='c').required().string()
    post.arg('text').strings()

    quit_cmd = app.command('quit', 'Leave, with a status code.')
    code = quit_cmd.arg('code').default('0').int()
    quit_cmd.action(lambda ctx: Terminate(code.value, 'bye'))

    def _check_channel(cmd):
        if channel.value == 'void':
            raise ValidationError('the void does not accept messages')

    post.validate(_check_channel)

    return app


@pytest.fixture
def client():
    return TestClient(get_app())


def test_run_success(client):
    res = client.invoke(['post', '-c', 'general', 'hi'])
    assert res.exit_code == 0
    assert res.command == 'post'
    assert res.stdout == ''
    assert res.stderr == ''


def test_run_errors(client):
    res = client.invoke(['--nope'])
    assert res.exit_code == 1
    assert res.command is None
    assert res.stderr == "chat: error: unknown long flag '--nope'\n"

    res = client.invoke('post hello')
    assert res.exit_code == 1
    assert res.stderr == 'chat: error: required flag --channel not provided\n'

    res = client.invoke('post -c void hello')
    assert res.exit_code == 1
    assert 'the void does not accept messages' in res.stderr

    res = client.invoke(['nope'])
    assert res.exit_code == 1
    assert "no such command 'nope', choose from: post, quit" in res.stderr


def test_run_version(client):
    res = client.invoke(['--version'])
    assert res.exit_code == 0
    assert res.stdout == '1.0\n'


def test_run_help(client):
    res = client.invoke(['--help'])
    assert res.exit_code == 0
    assert res.stdout.startswith('usage: chat [<flags>] <command> [<args> ...]')
    assert '--version' in res.stdout

    res = client.invoke(['--help', '--nope'])
    assert res.exit_code == 1
    assert "chat: error: unknown long flag '--nope'" in res.stdout


def test_run_terminate_action(client):
    res = client.invoke(['quit', '3'])
    assert res.exit_code == 3
    assert res.stdout == 'bye\n'

    res = client.invoke(['quit'])
    assert res.exit_code == 0


def test_run_environment():
    app = get_app()
    user = app.flag_group.flags[-1].value

    client = TestClient(app, env={'CHAT_USER': 'alice'})
    res = client.invoke(['post', '-c', 'general'])
    assert res.exit_code == 0
    assert user.value == 'alice'

    # the environment is only read once, when the grammar is built
    res = client.invoke(['post', '-c', 'general'], env={'CHAT_USER': 'bob'})
    assert user.value == 'alice'


def test_mix_stderr():
    client = TestClient(get_app(), mix_stderr=True)
    res = client.invoke(['--nope'])
    assert res.exit_code == 1
    assert "unknown long flag '--nope'" in res.stdout

    with pytest.raises(ValueError, match='not separately captured'):
        res.stderr


def test_error_helpers():
    printed, codes = [], []
    app = Application('tool', terminate=codes.append, print_error=printed.append, environ={})

    app.errorf('could not open %s', 'x.txt')
    assert printed == ['tool: error: could not open x.txt']
    assert codes == []

    app.fatalf('bad %d', 5)
    assert printed[-1] == 'tool: error: bad 5'
    assert codes == [1]

    app.fatal_if_error(None)
    assert codes == [1]

    app.fatal_if_error(OSError('disk full'), 'saving')
    assert printed[-1] == 'tool: error: saving: disk full'
    assert codes == [1, 1]

    del printed[:]
    app.usage_errorf('missing %s', 'thing')
    assert printed == ['tool: error: missing thing', 'usage: tool']
    assert codes == [1, 1, 1]


def test_run_with_custom_terminate():
    codes = []
    app = Application('soft', terminate=codes.append, print_error=lambda msg: None,
                      environ={})
    app.flag('count').int()

    assert app.run(['--count', '1']) == ''
    assert app.run(['--count', 'x']) is None
    assert codes == [1]


def test_run_unexpected_argument():
    app = Application('bare', environ={})
    app.command('leaf')

    res = TestClient(app).invoke(['leaf', 'extra'])
    assert res.exit_code == 1
    assert res.stderr == "bare: error: unexpected argument 'extra'\n"

    res = TestClient(app).invoke(['leaf', '--count', '--verbose'])
    assert res.exit_code == 1
    assert res.stderr == "bare: error: unknown long flag '--count'\n"


def test_run_missing_flag_argument():
    app = Application('pair', environ={})
    app.flag('name').string()
    app.flag('count').int()

    res = TestClient(app).invoke(['--name', '--count', '3'])
    assert res.exit_code == 1
    assert res.stderr == ("pair: error: expected argument for flag '--name',"
                          " got flag '--count'\n")


def test_run_validator_value_error():
    app = Application('picky', environ={})

    def _reject(app):
        raise ValueError('nope')

    app.validate(_reject)

    res = TestClient(app).invoke([])
    assert res.exit_code == 1
    assert res.stderr == 'picky: error: nope\n'
