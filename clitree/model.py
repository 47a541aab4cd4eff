"""The grammar model: flag, argument, and command declarations, plus
the per-scope groups that hold them.

Declarations can be configured with constructor keyword arguments::

  app.flag('verbose', 'Be chatty.', char='v')

or with chained setters, each of which returns the declaration::

  app.flag('verbose', 'Be chatty.').short('v').envar('APP_VERBOSE')

The chain is ended by a type method (``.bool()``, ``.string()``,
``.int()``, ...), which attaches a value sink and returns it. After
parsing, read the result off the sink's ``value`` attribute.
"""

from collections import OrderedDict

from clitree.errors import GrammarError
from clitree.utils import process_name, process_short, format_nonexp_repr
from clitree.values import (Value,
                            BoolValue,
                            StringValue,
                            IntValue,
                            FloatValue,
                            DurationValue,
                            EnumValue,
                            ListValue,
                            CumulativeValue,
                            StringMapValue,
                            ExistingFileValue,
                            ExistingDirValue,
                            ConvertedValue)


class _ValueMixin(object):
    """Type methods shared by flags and arguments. Each attaches a new
    sink to the declaration and returns the sink.
    """
    value = None

    def set_value(self, value):
        "Attach a custom :class:`~clitree.values.Value` instance."
        if not isinstance(value, Value):
            raise TypeError('expected Value instance, not: %r' % (value,))
        self.value = value
        return value

    def bool(self):
        return self.set_value(BoolValue())

    def string(self):
        return self.set_value(StringValue())

    def strings(self):
        return self.set_value(CumulativeValue(StringValue()))

    def int(self):
        return self.set_value(IntValue())

    def ints(self):
        return self.set_value(CumulativeValue(IntValue()))

    def float(self):
        return self.set_value(FloatValue())

    def duration(self):
        return self.set_value(DurationValue())

    def enum(self, *choices):
        return self.set_value(EnumValue(choices))

    def list(self, sep=',', strip=False):
        return self.set_value(ListValue(sep=sep, strip=strip))

    def string_map(self):
        return self.set_value(StringMapValue())

    def existing_file(self):
        return self.set_value(ExistingFileValue())

    def existing_dir(self):
        return self.set_value(ExistingDirValue())

    def parse_as(self, func, display_name=None):
        "Attach a sink that converts with any single-argument callable."
        return self.set_value(ConvertedValue(func, display_name))


class Flag(_ValueMixin):
    """The Flag object represents all there is to know about a named,
    order-independent option on the command line.

    Args:
       name (str): The long name, used as ``--name`` on the command
          line. Starts with a letter, and consists of only ASCII
          letters, numbers, '-', and '_'.
       help (str): A summary of the flag's behavior, used in help
          generation.
       char (str): A single-character short alias, used as ``-c``.
       required (bool): Make the flag required. Required flags cannot
          have a default.
       default (str): A string parsed by the flag's sink when the flag
          is absent.
       envar (str): The name of an environment variable whose value,
          if set and non-empty when the grammar is built, overrides
          *default*.
       placeholder (str): The value placeholder shown in help.
       hidden (bool): Hide the flag from help output.
       action (callable): Called with the ParseContext after all
          values are populated, if the flag was matched.
    """
    def __init__(self, name, help=None, char=None, required=False,
                 default=None, envar=None, placeholder=None, hidden=False,
                 action=None, builtin=False):
        self.name = process_name(name, 'flag')
        self.help = help
        self.char = process_short(char) if char else None
        self.is_required = bool(required)
        self.default_value = default
        self.envar_name = envar
        self.placeholder_text = placeholder
        self.is_hidden = bool(hidden)
        self.dispatch = action
        self.builtin = builtin
        self.env_default = None

    @property
    def is_boolean(self):
        return self.value is not None and self.value.is_boolean

    @property
    def label(self):
        return 'flag --%s' % self.name

    @property
    def effective_default(self):
        "The environment-derived default if one was captured, else the literal default."
        if self.env_default is not None:
            return self.env_default
        return self.default_value

    def needs_value(self):
        return self.is_required and self.env_default is None

    def short(self, char):
        self.char = process_short(char)
        return self

    def required(self):
        self.is_required = True
        return self

    def default(self, text):
        self.default_value = text
        return self

    def envar(self, name):
        self.envar_name = name
        return self

    def placeholder(self, text):
        self.placeholder_text = text
        return self

    def hidden(self):
        self.is_hidden = True
        return self

    def action(self, func):
        self.dispatch = func
        return self

    def init(self, environ):
        if self.is_required and self.default_value:
            raise GrammarError("required flag '--%s' with default value that will never be used"
                               % self.name)
        if self.value is None:
            raise GrammarError('no type defined for --%s (e.g., .string())' % self.name)
        self.env_default = None
        if self.envar_name:
            env_val = environ.get(self.envar_name)
            if env_val:
                self.env_default = env_val
        return

    def __repr__(self):
        return format_nonexp_repr(self, ['name'], ['char', 'value'])


class Argument(_ValueMixin):
    """A positional, order-dependent value within a scope's argument
    list. An argument whose sink is cumulative (``.strings()``,
    ``.ints()``, ...) consumes the remainder of the positional
    tokens, and must be the last argument declared.

    Args:
       name (str): Name of the argument, used in help and errors.
       help (str): Summary of the argument, used in help generation.
       required (bool): Make the argument required. All required
          arguments must come before optional ones.
       default (str): A string parsed by the sink when the argument is
          absent.
       action (callable): Called with the ParseContext after all
          values are populated, once per matched value.
    """
    def __init__(self, name, help=None, required=False, default=None, action=None):
        self.name = process_name(name, 'argument')
        self.help = help
        self.is_required = bool(required)
        self.default_value = default
        self.dispatch = action

    @property
    def consumes_remainder(self):
        return self.value is not None and self.value.is_cumulative

    @property
    def label(self):
        return "argument '%s'" % self.name

    @property
    def effective_default(self):
        return self.default_value

    def needs_value(self):
        return self.is_required

    def required(self):
        self.is_required = True
        return self

    def default(self, text):
        self.default_value = text
        return self

    def action(self, func):
        self.dispatch = func
        return self

    def init(self):
        if self.is_required and self.default_value:
            raise GrammarError("required argument '%s' with unusable default value" % self.name)
        if self.value is None:
            raise GrammarError("no type defined for argument '%s' (e.g., .string())" % self.name)
        return

    def __repr__(self):
        return format_nonexp_repr(self, ['name'], ['value'])


class FlagGroup(object):
    """The flags declared directly on one scope, in declaration
    order. The lookup maps are only built by ``init()``, at which
    point duplicates within the scope are rejected.
    """
    def __init__(self):
        self.flags = []
        self.long_map = OrderedDict()
        self.short_map = OrderedDict()

    def add(self, flag):
        if not isinstance(flag, Flag):
            raise TypeError('expected Flag instance, not: %r' % (flag,))
        self.flags.append(flag)
        return flag

    def have(self):
        return bool(self.flags)

    def get_flags(self, with_hidden=True):
        return [f for f in self.flags if with_hidden or not f.is_hidden]

    def init(self, environ):
        long_map, short_map = OrderedDict(), OrderedDict()
        # builtins first, so that a user flag of the same name shadows it
        ordered = ([f for f in self.flags if f.builtin]
                   + [f for f in self.flags if not f.builtin])
        for flag in ordered:
            flag.init(environ)
            prev = long_map.get(flag.name)
            if prev is not None and not prev.builtin:
                raise GrammarError('duplicate long flag --%s' % flag.name)
            long_map[flag.name] = flag
            if flag.char:
                prev = short_map.get(flag.char)
                if prev is not None and not prev.builtin:
                    raise GrammarError('duplicate short flag -%s' % flag.char)
                short_map[flag.char] = flag
        self.long_map, self.short_map = long_map, short_map
        return


class ArgGroup(object):
    "The ordered positional arguments declared directly on one scope."
    def __init__(self):
        self.args = []

    def add(self, arg):
        if not isinstance(arg, Argument):
            raise TypeError('expected Argument instance, not: %r' % (arg,))
        self.args.append(arg)
        return arg

    def have(self):
        return bool(self.args)

    def init(self):
        required = 0
        seen = set()
        remainder_arg = None
        for i, arg in enumerate(self.args):
            if remainder_arg is not None:
                raise GrammarError("remainder argument '%s' can't be followed by"
                                   " another argument '%s'" % (remainder_arg.name, arg.name))
            if arg.name in seen:
                raise GrammarError("duplicate argument '%s'" % arg.name)
            seen.add(arg.name)
            arg.init()
            if arg.is_required and required != i:
                raise GrammarError("required argument '%s' found after non-required"
                                   % arg.name)
            if arg.is_required:
                required += 1
            if arg.consumes_remainder:
                remainder_arg = arg
        return


class CommandGroup(object):
    "The child commands declared directly on one scope, in declaration order."
    def __init__(self):
        self.commands = []
        self.command_map = OrderedDict()

    def add(self, cmd):
        self.commands.append(cmd)
        return cmd

    def have(self):
        return bool(self.commands)

    def get(self, name):
        return self.command_map.get(name)

    def init(self, environ):
        command_map = OrderedDict()
        for cmd in self.commands:
            if cmd.name in command_map:
                raise GrammarError("duplicate command '%s'" % cmd.name)
            command_map[cmd.name] = cmd
            cmd.init(environ)
        self.command_map = command_map
        return

    def flattened(self):
        "All leaf commands below this group, depth-first."
        ret = []
        for cmd in self.commands:
            if not cmd.cmd_group.have():
                ret.append(cmd)
            ret.extend(cmd.cmd_group.flattened())
        return ret


class Scope(object):
    """A grammar scope: its own flags, and either positional arguments
    or child commands (never both). Both the :class:`Application` and
    each :class:`Command` are scopes.
    """
    def __init__(self, app):
        self.app = app
        self.flag_group = FlagGroup()
        self.arg_group = ArgGroup()
        self.cmd_group = CommandGroup()
        self.validator = None
        self.dispatch = None

    def _check_mutable(self):
        if self.app.initialized:
            raise GrammarError('cannot modify the grammar of %r after it has been'
                               ' initialized' % self.app.name)

    def flag(self, name, help=None, **kw):
        """Declare a new flag on this scope. See :class:`Flag` for
        arguments. Returns the Flag, for further configuration.
        """
        self._check_mutable()
        if isinstance(name, Flag):
            return self.flag_group.add(name)
        return self.flag_group.add(Flag(name, help, **kw))

    def arg(self, name, help=None, **kw):
        """Declare the next positional argument on this scope. See
        :class:`Argument` for arguments. Returns the Argument.
        """
        self._check_mutable()
        if isinstance(name, Argument):
            return self.arg_group.add(name)
        return self.arg_group.add(Argument(name, help, **kw))

    def command(self, name, help=None):
        "Declare a child command. Returns the new :class:`Command`."
        self._check_mutable()
        return self.cmd_group.add(self.app._new_command(name, help, parent=self))

    def validate(self, validator):
        """Set a function to run after values are populated. Command
        validators are called with the Command, the application
        validator with the Application. Raise
        :class:`~clitree.errors.ValidationError` (or ValueError) to
        reject the input. Other exceptions propagate as bugs.
        """
        self.validator = validator
        return self

    def action(self, func):
        "Set a function called with the ParseContext at dispatch time."
        self.dispatch = func
        return self

    def get_flags(self, with_hidden=True):
        return self.flag_group.get_flags(with_hidden=with_hidden)

    @property
    def args(self):
        return list(self.arg_group.args)

    @property
    def commands(self):
        return list(self.cmd_group.commands)

    def init_scope(self, environ):
        if self.arg_group.have() and self.cmd_group.have():
            raise GrammarError("can't mix arguments with commands in %r" % self.name)
        self.flag_group.init(environ)
        self.arg_group.init()
        self.cmd_group.init(environ)
        return


class Command(Scope):
    """A named sub-grammar, selected by its exact name on the command
    line. Created with :meth:`Application.command` or
    :meth:`Command.command`, never directly.

    Commands refer to their parent by index into
    ``Application.commands_by_id``; the root application has no
    index, so top-level commands have a *parent_id* of None.
    """
    def __init__(self, app, id, name, help=None, parent_id=None):
        super(Command, self).__init__(app)
        self.id = id
        self.name = process_name(name, 'command')
        self.help = help
        self.parent_id = parent_id
        self.is_hidden = False

    @property
    def parent(self):
        if self.parent_id is None:
            return None
        return self.app.commands_by_id[self.parent_id]

    def hidden(self):
        self.is_hidden = True
        return self

    def full_command(self):
        "The space-joined path of command names from the root to this command."
        out = [self.name]
        cur = self.parent
        while cur is not None:
            out.insert(0, cur.name)
            cur = cur.parent
        return ' '.join(out)

    def init(self, environ):
        self.init_scope(environ)

    def __repr__(self):
        return format_nonexp_repr(self, ['name'], ['parent_id'])
