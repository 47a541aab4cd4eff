
import datetime

import pytest

from clitree import (Application,
                     BoolValue,
                     DurationValue,
                     EnumValue,
                     ListValue,
                     IntValue,
                     CumulativeValue,
                     StringMapValue,
                     InvalidFlagArgument,
                     InvalidDefault)
from clitree.values import parse_sv_line


def test_bool_value():
    val = BoolValue()
    assert val.value is False
    assert str(val) == 'false'

    for text in ('true', 'T', 'yes', 'on', '1'):
        val.set(text)
        assert val.value is True
    for text in ('false', 'F', 'No', 'off', '0'):
        val.set(text)
        assert val.value is False

    val.set('y')
    assert str(val) == 'true'

    with pytest.raises(ValueError, match='not a valid boolean'):
        val.set('maybe')


def test_duration_value():
    val = DurationValue()
    assert val.value is None

    val.set('90s')
    assert val.value == datetime.timedelta(seconds=90)

    val.set('1d 2h')
    assert val.value == datetime.timedelta(days=1, hours=2)

    with pytest.raises(ValueError, match='not a valid duration'):
        val.set('soon')

    with pytest.raises(ValueError, match='not a valid duration'):
        val.set('5x')

    # compact pairs are all counted
    val.set('1h30m')
    assert val.value == datetime.timedelta(hours=1, minutes=30)

    val.set('1.5h 10s')
    assert val.value == datetime.timedelta(minutes=90, seconds=10)

    for text in ('', '90', '1h 30', '1h-', '1h?30m'):
        with pytest.raises(ValueError, match='not a valid duration'):
            val.set(text)


def test_duration_flag():
    app = Application('durations', environ={})
    wait = app.flag('wait').duration()

    app.parse(['--wait', '1h30m'])
    assert wait.value == datetime.timedelta(seconds=5400)

    with pytest.raises(InvalidFlagArgument, match="'1h30' is not a valid duration"):
        app.parse(['--wait=1h30'])


def test_enum_value():
    val = EnumValue(['red', 'green'])
    val.set('red')
    assert val.value == 'red'

    with pytest.raises(ValueError, match='must be one of red, green'):
        val.set('Red')

    with pytest.raises(ValueError):
        EnumValue([])


def test_list_value():
    assert parse_sv_line('a1,"b,2",c3') == ['a1', 'b,2', 'c3']
    assert parse_sv_line('') == []

    val = ListValue()
    assert val.value == []
    val.set('a1,"b,2",c3')
    assert val.value == ['a1', 'b,2', 'c3']

    # setting again replaces the list
    val.set('x')
    assert val.value == ['x']

    val = ListValue(IntValue(), sep=':', strip=True)
    val.set('1: 2 :3')
    assert val.value == [1, 2, 3]
    assert str(val) == '1:2:3'
    assert val.display_name == 'list of integer'

    with pytest.raises(ValueError, match='not a valid integer'):
        val.set('1:two')


def test_cumulative_value():
    val = CumulativeValue(IntValue())
    assert val.is_cumulative
    val.set('1')
    val.set('2')
    assert val.value == [1, 2]

    val.reset()
    assert val.value == []


def test_string_map_value():
    val = StringMapValue()
    val.set('a=1')
    val.set('b=x=y')
    val.set('a=2')
    assert val.value == {'a': '2', 'b': 'x=y'}

    with pytest.raises(ValueError, match='expected KEY=VALUE'):
        val.set('novalue')

    with pytest.raises(ValueError, match='expected KEY=VALUE'):
        val.set('=empty')


def test_typed_flags():
    app = Application('typed', environ={})
    timeout = app.flag('timeout').default('30s').duration()
    color = app.flag('color').enum('red', 'green', 'blue')
    ratio = app.flag('ratio').float()
    tags = app.flag('tags').list()
    port = app.flag('port').parse_as(int, 'port number')
    ids = app.arg('ids').ints()

    app.parse(['--color', 'blue', '--ratio=0.5', '--tags', 'a,b', '--port', '80', '1', '2'])
    assert timeout.value == datetime.timedelta(seconds=30)
    assert color.value == 'blue'
    assert ratio.value == 0.5
    assert tags.value == ['a', 'b']
    assert port.value == 80
    assert ids.value == [1, 2]

    with pytest.raises(InvalidFlagArgument, match='must be one of red, green, blue'):
        app.parse(['--color', 'purple'])

    with pytest.raises(InvalidFlagArgument, match='not a valid port number'):
        app.parse(['--port', 'http'])


def test_existing_paths(tmp_path):
    target = tmp_path / 'conf.ini'
    target.write_text(u'[main]\n')

    app = Application('paths', environ={})
    conf = app.flag('conf').existing_file()
    root = app.flag('root').existing_dir()

    app.parse(['--conf', str(target), '--root', str(tmp_path)])
    assert conf.value == str(target)
    assert root.value == str(tmp_path)

    with pytest.raises(InvalidFlagArgument, match='not a file'):
        app.parse(['--conf', str(tmp_path)])

    with pytest.raises(InvalidFlagArgument, match='not a directory'):
        app.parse(['--root', str(target)])


def test_invalid_default():
    app = Application('baddef', environ={})
    app.flag('count').default('many').int()

    with pytest.raises(InvalidDefault, match="'many' for flag --count"):
        app.parse([])

    app = Application('badenv', environ={'BADENV_COUNT': 'lots'})
    app.flag('count').envar('BADENV_COUNT').default('1').int()

    with pytest.raises(InvalidDefault, match="'lots'"):
        app.parse([])
