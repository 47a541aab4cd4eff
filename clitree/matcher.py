"""The recursive-descent matcher.

Given a :class:`ParseContext` and a scope (the application, or a
selected command), the matcher consumes flag tokens into the visible
flags, and positional tokens into exactly one of the scope's argument
list or a single child command (which is then matched recursively).

The matcher only records what it consumed, as an ordered list of
matched elements. No value sink is touched until the execution
pipeline in :mod:`clitree.app` runs.
"""

import logging
from collections import OrderedDict

from boltons.iterutils import unique

from clitree.errors import (UnknownFlag,
                            MissingFlagArgument,
                            UnexpectedFlagArgument,
                            UnexpectedArgument,
                            InvalidSubcommand)
from clitree.utils import format_nonexp_repr


log = logging.getLogger(__name__)

NEGATION_PREFIX = 'no-'


class ParseElement(object):
    """A single matched element: which declaration matched, and the
    literal string consumed for it. Use the concrete subtypes,
    :class:`FlagMatch`, :class:`ArgumentMatch`, and
    :class:`CommandMatch`.
    """
    kind = None

    def __init__(self, decl, value):
        self.decl = decl
        self.value = value

    def __repr__(self):
        return format_nonexp_repr(self, ['decl', 'value'])


class FlagMatch(ParseElement):
    kind = 'flag'

    @property
    def flag(self):
        return self.decl


class ArgumentMatch(ParseElement):
    kind = 'arg'

    @property
    def arg(self):
        return self.decl


class CommandMatch(ParseElement):
    kind = 'command'

    @property
    def command(self):
        return self.decl


class ParseContext(object):
    """The mutable accumulator for a single parse. Created fresh for
    every call to :meth:`Application.parse`, and never shared.

    Attributes:
       app: The Application being parsed against.
       tokens: The :class:`~clitree.tokens.TokenStream`.
       flags: Visible flags by long name. Grows as commands are
          selected, since a command's flags stay visible for the rest
          of the line.
       short_flags: Visible flags by short alias.
       arguments: Visible argument declarations, in scope order.
       scopes: The scopes entered so far, root first.
       elements: Matched elements in the order they were consumed.
    """
    def __init__(self, app, tokens):
        self.app = app
        self.tokens = tokens
        self.flags = OrderedDict()
        self.short_flags = OrderedDict()
        self.arguments = []
        self.scopes = []
        self.elements = []

    def peek(self):
        return self.tokens.peek()

    def next(self):
        return self.tokens.next()

    @property
    def eol(self):
        return self.tokens.eol

    def enter_scope(self, scope):
        self.scopes.append(scope)
        self.flags.update(scope.flag_group.long_map)
        self.short_flags.update(scope.flag_group.short_map)
        self.arguments.extend(scope.arg_group.args)

    def get_flags(self):
        "The visible flags, without repeats."
        return unique(self.flags.values())

    def matched_flag(self, flag, value):
        self.elements.append(FlagMatch(flag, value))

    def matched_arg(self, arg, value):
        self.elements.append(ArgumentMatch(arg, value))

    def matched_command(self, cmd):
        self.elements.append(CommandMatch(cmd, cmd.name))

    @property
    def selected(self):
        "Names of the matched commands, root first."
        return [el.value for el in self.elements if el.kind == 'command']

    @property
    def selected_command(self):
        "The deepest matched Command, or None."
        cmds = [el.decl for el in self.elements if el.kind == 'command']
        return cmds[-1] if cmds else None

    def __repr__(self):
        cn = self.__class__.__name__
        return '<%s tokens=%r elements=%r>' % (cn, self.tokens, self.elements)


def _take_value(ctx, flag_text):
    token = ctx.peek()
    if not token.is_arg:
        raise MissingFlagArgument.from_parse(flag_text, token)
    ctx.next()
    return token.value


def _match_long(ctx, token):
    name = token.value
    flag_text = '--' + name
    invert = False
    flag = ctx.flags.get(name)
    if flag is None and name.startswith(NEGATION_PREFIX):
        flag = ctx.flags.get(name[len(NEGATION_PREFIX):])
        if flag is not None and not flag.is_boolean:
            # --no-X only makes sense for boolean flags
            flag = None
        invert = True
    if flag is None:
        raise UnknownFlag.from_parse(flag_text)

    if flag.is_boolean:
        if token.inline is not None:
            raise UnexpectedFlagArgument.from_parse(flag_text, token.inline)
        ctx.matched_flag(flag, 'false' if invert else 'true')
        return

    if token.inline is not None:
        value = token.inline
    else:
        value = _take_value(ctx, flag_text)
    ctx.matched_flag(flag, value)
    return


def _match_short(ctx, token):
    cluster = token.value
    for i, char in enumerate(cluster):
        flag = ctx.short_flags.get(char)
        if flag is None:
            raise UnknownFlag.from_parse('-' + char)
        if flag.is_boolean:
            ctx.matched_flag(flag, 'true')
            continue
        # first value-taking letter takes the rest of the cluster, if any
        rest = cluster[i + 1:]
        if rest:
            value = rest
        else:
            value = _take_value(ctx, '-' + char)
        ctx.matched_flag(flag, value)
        return
    return


def match_flags(ctx):
    "Consume flag tokens (and their values) until a non-flag token."
    while ctx.peek().is_flag:
        token = ctx.next()
        if token.is_long:
            _match_long(ctx, token)
        else:
            _match_short(ctx, token)
    return


def match_command(ctx, cmd_group):
    token = ctx.next()
    cmd = cmd_group.get(token.value)
    if cmd is None:
        raise InvalidSubcommand.from_parse(cmd_group, token)
    log.debug('selected command %r', cmd.full_command())
    ctx.matched_command(cmd)
    match_scope(ctx, cmd)
    return


class _ArgCursor(object):
    "Tracks the next argument declaration to fill within one scope."
    def __init__(self, args):
        self.args = args
        self.index = 0

    def current(self):
        try:
            return self.args[self.index]
        except IndexError:
            return None

    def advance(self):
        self.index += 1


def match_args(ctx, cursor):
    """Consume positional tokens into successive argument declarations,
    until a flag token or EOL. A remainder-consuming argument keeps
    consuming, one matched element per token.
    """
    while ctx.peek().is_arg:
        arg = cursor.current()
        if arg is None:
            raise UnexpectedArgument.from_parse(ctx.peek())
        token = ctx.next()
        ctx.matched_arg(arg, token.value)
        if not arg.consumes_remainder:
            cursor.advance()
    return


def match_scope(ctx, scope):
    """Match tokens against *scope* until EOL, or until a positional
    token is left that this scope has no use for. In that case control
    returns to the enclosing scope (or the top level), which reports it.
    """
    ctx.enter_scope(scope)
    log.debug('matching scope %r at token %r', scope.name, str(ctx.peek()))
    cursor = _ArgCursor(scope.arg_group.args)
    seen_command = False

    while not ctx.eol:
        token = ctx.peek()
        if token.is_flag:
            match_flags(ctx)
        elif scope.cmd_group.have():
            if seen_command:
                raise UnexpectedArgument.from_parse(token)
            match_command(ctx, scope.cmd_group)
            seen_command = True
        elif scope.arg_group.have():
            match_args(ctx, cursor)
        else:
            break

        if not ctx.eol and ctx.peek().pos == token.pos:
            # no progress was made, nothing matched
            raise UnexpectedArgument.from_parse(token)
    return
