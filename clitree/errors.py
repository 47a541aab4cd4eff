
from boltons.iterutils import unique


class CliTreeException(Exception):
    """The basest base exception clitree has. Rarely directly
    instantiated if ever, but useful for catching.
    """
    pass


class GrammarError(CliTreeException, ValueError):
    """Raised by the build pass (:meth:`Application.init`) and by
    registration methods when the grammar itself is misconfigured:
    duplicate names, required declarations with defaults, bad argument
    ordering, and so on. These errors do not depend on user input.
    """
    pass


class ArgumentParseError(CliTreeException):
    """A base exception used for all errors raised during argument
    parsing and execution.

    Many subtypes have a ".from_parse()" classmethod that creates an
    exception message from the values available during the parse
    process. The :class:`~clitree.matcher.ParseContext` active when
    the error occurred is attached as the *context* attribute, when
    available.
    """
    context = None


class UnknownFlag(ArgumentParseError):
    """
    Raised when an unrecognized flag is passed.
    """
    @classmethod
    def from_parse(cls, flag_text):
        if flag_text.startswith('--'):
            return cls("unknown long flag '%s'" % flag_text)
        return cls("unknown short flag '%s'" % flag_text)


class MissingFlagArgument(ArgumentParseError):
    """Raised when a value-taking flag is the last thing on the command
    line, or is followed by another flag instead of its value.
    """
    @classmethod
    def from_parse(cls, flag_text, next_token=None):
        msg = "expected argument for flag '%s'" % flag_text
        if next_token is not None and next_token.is_flag:
            msg += ", got flag '%s'" % (next_token,)
        return cls(msg)


class UnexpectedFlagArgument(ArgumentParseError):
    """Raised when an inline value (``--flag=value``) is passed to a
    boolean flag.
    """
    @classmethod
    def from_parse(cls, flag_text, value):
        return cls("boolean flag '%s' does not take a value, not: %r"
                   % (flag_text, value))


class UnexpectedArgument(ArgumentParseError):
    """Raised when a positional token cannot be consumed by the scope
    it appears in.
    """
    @classmethod
    def from_parse(cls, token):
        return cls("unexpected argument '%s'" % (token,))


class InvalidSubcommand(ArgumentParseError):
    """
    Raised when an unrecognized subcommand is passed.
    """
    @classmethod
    def from_parse(cls, cmd_group, token):
        valid_subcmds = unique([c.name for c in cmd_group.commands if not c.is_hidden])
        msg = ("no such command '%s', choose from: %s"
               % (token, ', '.join(valid_subcmds)))
        return cls(msg)


class MissingRequired(ArgumentParseError):
    """
    Raised when a required flag or argument is not passed.
    """
    @classmethod
    def from_flag(cls, flag):
        return cls('required flag --%s not provided' % flag.name)

    @classmethod
    def from_arg(cls, arg):
        return cls("required argument '%s' not provided" % arg.name)


class InvalidFlagArgument(ArgumentParseError):
    """Raised when the argument passed to a flag (the value directly
    after it in argv, or inline after ``=``) fails to parse.
    """
    @classmethod
    def from_parse(cls, flag, text, exc):
        msg = 'invalid value for flag --%s: %s' % (flag.name, exc)
        if text.startswith('-'):
            msg += '. (Did you forget to pass an argument?)'
        return cls(msg)


class InvalidPositionalArgument(ArgumentParseError):
    """Raised when one of the positional arguments does not parse as its
    declared type.
    """
    @classmethod
    def from_parse(cls, arg, text, exc):
        return cls("invalid value for argument '%s': %s" % (arg.name, exc))


class InvalidDefault(ArgumentParseError):
    """Raised when a declared (or environment-supplied) default fails to
    parse with the declaration's sink.
    """
    @classmethod
    def from_parse(cls, decl, text, exc):
        return cls("invalid default value %r for %s: %s" % (text, decl.label, exc))


class SubcommandRequired(ArgumentParseError):
    """Raised when the deepest selected command has subcommands of its
    own, but none of them was selected.
    """
    @classmethod
    def from_parse(cls, cmd):
        return cls("must select a subcommand of '%s'" % cmd.full_command())


class ValidationError(ArgumentParseError):
    """Raise this from an :class:`Application` or :class:`Command`
    validator to reject an otherwise well-formed command line. A
    ValueError raised by a validator is converted to this type.
    """
    @classmethod
    def from_exc(cls, exc):
        ret = cls(str(exc))
        ret.__cause__ = exc
        return ret
