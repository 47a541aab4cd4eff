import os
import sys
import logging

from boltons.dictutils import OrderedMultiDict as OMD

from clitree.errors import (GrammarError,
                            ArgumentParseError,
                            UnexpectedArgument,
                            MissingRequired,
                            InvalidFlagArgument,
                            InvalidPositionalArgument,
                            InvalidDefault,
                            SubcommandRequired,
                            ValidationError)
from clitree.model import Scope, Command, Flag
from clitree.matcher import ParseContext, match_scope
from clitree.tokens import tokenize
from clitree.helpers import HelpHandler
from clitree.utils import format_nonexp_repr


log = logging.getLogger(__name__)

HELP_FLAG_NAME = 'help'
VERSION_FLAG_NAME = 'version'


class Terminate(object):
    """Returned by actions (and produced by the builtin help and version
    flags) to request that the host end the process with *code*, after
    printing *output*, if any. Dispatch stops at the first Terminate.
    """
    def __init__(self, code=0, output=None):
        self.code = code
        self.output = output

    def __repr__(self):
        return format_nonexp_repr(self, ['code'], ['output'])


class ParseResult(object):
    """The outcome of a successful :meth:`Application.parse`.

    Args:
       command (str): The selected command path, space-joined in
          descent order, e.g. ``"remote add"``. Empty when no command
          was selected.
       context (ParseContext): The context of the parse, holding the
          matched elements.
       terminate (Terminate): Set when help or version output was
          requested, or an action asked to end the process. None
          otherwise.
    """
    def __init__(self, command, context, terminate=None):
        self.command = command
        self.context = context
        self.terminate = terminate

    @property
    def selected(self):
        return tuple(self.command.split()) if self.command else ()

    @property
    def values(self):
        """An OrderedMultiDict of the literal values matched on the
        command line, keyed by flag/argument name.
        """
        ret = OMD()
        for el in self.context.elements:
            if el.kind != 'command':
                ret.add(el.decl.name, el.value)
        return ret

    def __repr__(self):
        return format_nonexp_repr(self, ['command'], ['terminate'])


def _default_print_error(msg):
    return sys.stderr.write(msg + '\n')


class Application(Scope):
    """An Application contains the definitions of flags, arguments, and
    commands for a command-line program, and is the entry point for
    parsing.

    Args:
       name (str): Program name, used in usage and error messages.
       help (str): Summary description of the program.
       terminate (callable): Called with an integer status code by
          :meth:`run` and the ``fatal*`` methods. Defaults to
          ``sys.exit``. The parser itself never calls it.
       environ (dict): Mapping consulted for flags' environment
          variable defaults, once, when the grammar is initialized.
          Defaults to ``os.environ``.
       help_handler (HelpHandler): Renders usage and help text. Pass
          False to disable the builtin ``--help`` flag.

    Grammar errors (duplicate names, required flags with defaults, and
    so on) are raised as :class:`~clitree.errors.GrammarError` by
    :meth:`init`, which :meth:`parse` calls automatically the first
    time. After initialization, the grammar is frozen.

    Value sinks are shared, so an Application must not be parsed
    from more than one thread at once.
    """
    def __init__(self, name, help=None, **kwargs):
        self.initialized = False
        self.name = name
        super(Application, self).__init__(self)
        self.help = help
        self.terminate = kwargs.pop('terminate', sys.exit)
        environ = kwargs.pop('environ', None)
        self.environ = environ if environ is not None else os.environ
        help_handler = kwargs.pop('help_handler', None)
        if help_handler is None:
            help_handler = HelpHandler()
        self.help_handler = help_handler
        self.print_error = kwargs.pop('print_error', _default_print_error)
        if kwargs:
            raise TypeError('unexpected keyword arguments: %r' % sorted(kwargs.keys()))

        self.commands_by_id = []
        self.help_flag = None
        if self.help_handler:
            self.help_flag = self.flag(Flag(HELP_FLAG_NAME, 'Show help.', builtin=True))
            self.help_flag.bool()
        return

    def _new_command(self, name, help, parent):
        parent_id = parent.id if isinstance(parent, Command) else None
        cmd = Command(self, len(self.commands_by_id), name, help, parent_id=parent_id)
        self.commands_by_id.append(cmd)
        return cmd

    def version(self, version):
        """Add a builtin ``--version`` flag, which prints *version* and
        terminates with status 0.
        """
        self._check_mutable()

        def _print_version(ctx):
            return Terminate(0, version)

        flag = self.flag(Flag(VERSION_FLAG_NAME, 'Show application version.',
                              action=_print_version, builtin=True))
        flag.bool()
        return self

    def get_command(self, path):
        """Look up a command by its selection path, either a
        space-separated string or a sequence of names. Returns None if
        no such command exists.
        """
        if isinstance(path, str):
            path = path.split()
        scope = self
        for name in path:
            scope = next((c for c in scope.commands if c.name == name), None)
            if scope is None:
                return None
        return scope if scope is not self else None

    def init(self):
        """The build and validation pass. Checks the whole grammar for
        conflicts, captures environment defaults, and freezes the
        grammar. Called automatically by :meth:`parse`. Safe to call
        more than once.
        """
        if self.initialized:
            return
        self.init_scope(self.environ)
        for cmd in self.cmd_group.commands:
            _check_duplicate_flags(cmd, [self.flag_group])
        self.initialized = True
        log.debug('initialized grammar for %r with %s commands',
                  self.name, len(self.commands_by_id))
        return

    def parse_context(self, argv):
        """Tokenize *argv* and match it against the grammar, without
        touching any value sinks. Returns the :class:`ParseContext`.
        Raises ArgumentParseError (or a subtype) on unmatched input.
        """
        self.init()
        ctx = ParseContext(self, tokenize(list(argv)))
        try:
            match_scope(ctx, self)
            if not ctx.eol:
                raise UnexpectedArgument.from_parse(ctx.peek())
        except ArgumentParseError as ape:
            ape.context = ctx
            raise
        return ctx

    def parse(self, argv):
        """Parse a list of strings (*not* including the program name,
        i.e., ``sys.argv[1:]``), populate all value sinks, and call
        validators and actions.

        Returns a :class:`ParseResult`. Raises ArgumentParseError (or
        one of its subtypes) if the input does not match the grammar or
        fails validation. Sinks assigned before the failing step keep
        their values.
        """
        argv = list(argv)
        try:
            ctx = self.parse_context(argv)
        except ArgumentParseError as ape:
            if self.help_flag is not None and _help_in_tokens(ape.context.tokens):
                text = self.help_handler.get_error_text(self, ape, ape.context)
                return ParseResult('', ape.context, terminate=Terminate(1, text))
            raise

        if self._help_requested(ctx):
            text = self.help_handler.get_help_text(self, ctx)
            return ParseResult(' '.join(ctx.selected), ctx, terminate=Terminate(0, text))

        try:
            return self.execute(ctx)
        except ArgumentParseError as ape:
            ape.context = ctx
            raise

    def _help_requested(self, ctx):
        if self.help_flag is None:
            return False
        for el in ctx.elements:
            if el.kind == 'flag' and el.decl is self.help_flag and el.value == 'true':
                return True
        return False

    def execute(self, ctx):
        """Run the execution pipeline over a fully-matched context:
        defaults, values, validators, the subcommand check, then
        actions. Each step is fail-fast.
        """
        self._reset_values()
        self._set_defaults(ctx)
        self._set_values(ctx)
        self._apply_validators(ctx)

        selected_cmd = ctx.selected_command
        if selected_cmd is not None and selected_cmd.cmd_group.have():
            raise SubcommandRequired.from_parse(selected_cmd)

        terminate = self._apply_actions(ctx)
        return ParseResult(' '.join(ctx.selected), ctx, terminate=terminate)

    def _iter_scopes(self):
        yield self
        for cmd in self.commands_by_id:
            yield cmd

    def _reset_values(self):
        # every sink in the grammar, so that repeated parses don't accumulate
        for scope in self._iter_scopes():
            for flag in scope.flag_group.flags:
                flag.value.reset()
            for arg in scope.arg_group.args:
                arg.value.reset()
        return

    def _set_defaults(self, ctx):
        matched = set([id(el.decl) for el in ctx.elements if el.kind != 'command'])

        for decl in ctx.get_flags() + ctx.arguments:
            if id(decl) in matched:
                continue
            if decl.needs_value():
                if isinstance(decl, Flag):
                    raise MissingRequired.from_flag(decl)
                raise MissingRequired.from_arg(decl)
            default = decl.effective_default
            if not default:
                continue
            try:
                decl.value.set(default)
            except ValueError as ve:
                raise InvalidDefault.from_parse(decl, default, ve)
        return

    def _set_values(self, ctx):
        for el in ctx.elements:
            if el.kind == 'flag':
                try:
                    el.decl.value.set(el.value)
                except ValueError as ve:
                    raise InvalidFlagArgument.from_parse(el.decl, el.value, ve)
            elif el.kind == 'arg':
                try:
                    el.decl.value.set(el.value)
                except ValueError as ve:
                    raise InvalidPositionalArgument.from_parse(el.decl, el.value, ve)
        return

    def _apply_validators(self, ctx):
        for el in ctx.elements:
            if el.kind == 'command' and el.decl.validator is not None:
                _call_validator(el.decl.validator, el.decl)
        if self.validator is not None:
            _call_validator(self.validator, self)
        return

    def _apply_actions(self, ctx):
        if self.dispatch is not None:
            res = self.dispatch(ctx)
            if isinstance(res, Terminate):
                return res
        for el in ctx.elements:
            if el.decl.dispatch is None:
                continue
            res = el.decl.dispatch(ctx)
            if isinstance(res, Terminate):
                return res
        return None

    def run(self, argv=None):
        """Parse *argv* (defaulting to ``sys.argv[1:]``) and handle the
        outcome the way a command-line program should: errors are
        printed as ``<name>: error: <message>`` followed by a call to
        ``terminate(1)``, and help/version output is printed before
        calling ``terminate()`` with the requested code.

        Returns the selected command path on success.
        """
        if argv is None:
            argv = sys.argv[1:]
        try:
            res = self.parse(argv)
        except ArgumentParseError as ape:
            self.fatalf('%s', ape)
            return None
        if res.terminate is not None:
            if res.terminate.output:
                print(res.terminate.output)
            self.terminate(res.terminate.code)
            return None
        return res.command

    def errorf(self, fmt, *a):
        "Print a formatted error message, prefixed with the application name."
        self.print_error(('%s: error: ' % self.name) + (fmt % a))

    def fatalf(self, fmt, *a):
        "Print a formatted error message, then terminate with status 1."
        self.errorf(fmt, *a)
        self.terminate(1)

    def usage_errorf(self, fmt, *a):
        "Print a formatted error message and usage, then terminate with status 1."
        self.errorf(fmt, *a)
        if self.help_handler:
            self.print_error(self.help_handler.get_usage_line(self))
        self.terminate(1)

    def fatal_if_error(self, err, prefix=''):
        """If *err* is not None, print it (with an optional *prefix*) and
        terminate with status 1.
        """
        if err is None:
            return
        if prefix:
            prefix += ': '
        self.errorf('%s%s', prefix, err)
        self.terminate(1)

    def __repr__(self):
        return format_nonexp_repr(self, ['name'], ['help'])


def _call_validator(validator, scope):
    try:
        validator(scope)
    except ValueError as ve:
        raise ValidationError.from_exc(ve)
    return


def _help_in_tokens(tokens):
    "Whether --help appears as a flag anywhere in the stream, consumed or not."
    for token in tokens.tokens:
        if token.is_long and token.value == HELP_FLAG_NAME:
            return True
    return False


def _check_duplicate_flags(cmd, ancestor_groups):
    """Recursively check that no flag in *cmd* (or its subcommands)
    reuses a long name or short alias visible from an ancestor
    scope. Builtin flags (help, version) are exempt on both sides.
    """
    for group in ancestor_groups:
        for flag in cmd.flag_group.flags:
            if flag.builtin:
                continue
            prev = group.short_map.get(flag.char) if flag.char else None
            if prev is not None and not prev.builtin:
                raise GrammarError('duplicate short flag -%s in command %r'
                                   % (flag.char, cmd.full_command()))
            prev = group.long_map.get(flag.name)
            if prev is not None and not prev.builtin:
                raise GrammarError('duplicate long flag --%s in command %r'
                                   % (flag.name, cmd.full_command()))
    ancestor_groups = ancestor_groups + [cmd.flag_group]
    for subcmd in cmd.cmd_group.commands:
        _check_duplicate_flags(subcmd, ancestor_groups)
    return
