
import re

from boltons.iterutils import unique


# keep it just to a conservative subset of ASCII for now
VALID_NAME_RE = re.compile(r"^[A-Za-z][-_A-Za-z0-9]*\Z")

_VALID_CHARS = 'abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789!*+./?@_'


def process_name(name, kind='flag'):
    """Validate a flag, argument, or command name, generally on
    declaration. Only letters, numbers, '-', and/or '_'. Must begin
    with a letter, and no trailing underscores or dashes.

    Names are not normalized: matching on the command line is exact
    and case-sensitive, so the name is returned as-is.
    """
    if not name or not isinstance(name, str):
        raise ValueError('expected non-zero length string for %s name, not: %r' % (kind, name))

    if name.endswith('-') or name.endswith('_'):
        raise ValueError('expected %s name without trailing dashes'
                         ' or underscores, not: %r' % (kind, name))

    if name.startswith('-'):
        raise ValueError('expected %s name without leading dashes, not: %r'
                         % (kind, name))

    name_match = VALID_NAME_RE.match(name)
    if not name_match:
        raise ValueError('valid %s names must begin with a letter, and'
                         ' consist only of letters, digits, underscores, and'
                         ' dashes, not: %r' % (kind, name))
    return name


def process_short(char):
    "Validate a single-character short flag alias, optionally given with a dash."
    orig_char = char
    if not char or not isinstance(char, str):
        raise ValueError('expected single character for short flag, not: %r' % (char,))
    if char[0] == '-' and len(char) > 1:
        char = char[1:]
    if len(char) > 1:
        raise ValueError('short flags must be exactly one character, optionally'
                         ' prefixed by a dash, not: %r' % orig_char)
    if char not in _VALID_CHARS:
        raise ValueError('expected valid flag character (ASCII letters, numbers,'
                         ' or shell-compatible punctuation), not: %r' % orig_char)
    return char


def format_flag_label(flag):
    "The default flag label formatter, used in help and error formatting"
    parts = []
    if flag.char:
        parts.append("-%s," % flag.char)
    parts.append('--' + flag.name)
    ret = ' '.join(parts)
    if not flag.is_boolean:
        ret += '=' + format_placeholder(flag)
    return ret


def format_placeholder(flag):
    "Value placeholder for a flag: explicit placeholder, then default, then NAME."
    if flag.placeholder_text:
        return flag.placeholder_text
    if flag.default_value:
        if flag.value is not None and flag.value.display_name == 'string':
            return '"%s"' % flag.default_value
        return flag.default_value
    return flag.name.upper()


def format_arg_label(arg):
    "Label for a positional argument, e.g. <name>, <name>..."
    ret = '<%s>' % arg.name
    if arg.consumes_remainder:
        ret += '...'
    return ret


def format_flag_summary(flags):
    """One-line summary of a group of flags for usage lines: required
    flags are spelled out, everything else collapses into
    ``[<flags>]``.
    """
    out = []
    count = 0
    for flag in flags:
        if not flag.builtin:
            count += 1
        if flag.is_required:
            if flag.is_boolean:
                out.append('--[no-]%s' % flag.name)
            else:
                out.append('--%s=%s' % (flag.name, format_placeholder(flag)))
    if count != len(out):
        out.append('[<flags>]')
    return ' '.join(out)


def format_arg_summary(args):
    "One-line summary of an argument list, optional args nested in brackets."
    depth = 0
    out = []
    for arg in args:
        label = format_arg_label(arg)
        if not arg.is_required:
            label = '[' + label
            depth += 1
        out.append(label)
    if not out:
        return ''
    out[-1] = out[-1] + (']' * depth)
    return ' '.join(out)


def unwrap_text(text):
    all_grafs = []
    cur_graf = []
    for line in text.splitlines():
        line = line.strip()
        if line:
            cur_graf.append(line)
        else:
            all_grafs.append(' '.join(cur_graf))
            cur_graf = []
    if cur_graf:
        all_grafs.append(' '.join(cur_graf))
    return '\n'.join(all_grafs)


def format_nonexp_repr(obj, req_names=None, opt_names=None, opt_key=None):
    """Format a non-expression-style repr

    Some object reprs look like object instantiation, e.g., App(r=[], mw=[]).

    This makes sense for smaller, lower-level objects whose state
    roundtrips. But a lot of objects contain values that don't
    roundtrip, like sinks and callbacks.

    For those objects, there is the non-expression style repr, which
    mimic's Python's default style to make a repr like this:

    <Flag name='abc' value=<IntValue value=None>>
    """
    cn = obj.__class__.__name__
    req_names = req_names or []
    opt_names = opt_names or []
    all_names = unique(req_names + opt_names)

    if opt_key is None:
        opt_key = lambda v: v is None
    assert callable(opt_key)

    items = [(name, getattr(obj, name, None)) for name in all_names]
    labels = ['%s=%r' % (name, val) for name, val in items
              if not (name in opt_names and opt_key(val))]
    if not labels:
        labels = ['id=%s' % id(obj)]
    ret = '<%s %s>' % (cn, ' '.join(labels))
    return ret
