"""Value sinks.

Every flag and argument writes into a :class:`Value`. A Value knows
three things: how to parse a string into its typed form (``set()``),
how to render itself back to a string (``str()``), and whether it is
boolean (takes no argument on the command line) or cumulative (can be
set repeatedly, each call adding to a collection).

The parsed value is available as the ``value`` attribute, or via
``get()``. New types are supported by subclassing :class:`Value`, then
attaching an instance with :meth:`Flag.set_value` or
:meth:`Argument.set_value`.
"""

import os
import re
from csv import reader, Dialect, QUOTE_MINIMAL

from boltons.timeutils import parse_timedelta

from clitree.utils import format_nonexp_repr


_TRUE_STRS = ('true', 't', 'yes', 'y', 'on', '1')
_FALSE_STRS = ('false', 'f', 'no', 'n', 'off', '0')

# one value/unit pair, e.g. "90s", "1.5h", "2 days"
_DURATION_PART_RE = re.compile(r"\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+))\s*([A-Za-z]+)")


class Value(object):
    """The base value sink. Subclasses override ``parse()`` at a
    minimum, and ``zero()`` if None isn't an appropriate initial value.
    """
    is_boolean = False
    is_cumulative = False
    display_name = 'value'

    def __init__(self):
        self.reset()

    def zero(self):
        return None

    def reset(self):
        "Return the sink to its initial state, as before any parse."
        self.value = self.zero()

    def parse(self, text):
        raise NotImplementedError()

    def set(self, text):
        """Parse *text* and store the result. Raises ValueError with a
        human-readable message if *text* is not acceptable.
        """
        self.value = self.parse(text)

    def get(self):
        return self.value

    def __str__(self):
        if self.value is None:
            return ''
        return str(self.value)

    def __repr__(self):
        return format_nonexp_repr(self, ['value'])


class ConvertedValue(Value):
    """Wraps any single-argument callable as a value sink. The
    *display_name* is used in error messages, e.g., "not a valid
    integer".
    """
    def __init__(self, parse_as, display_name=None):
        if not callable(parse_as):
            raise TypeError('expected parse_as to be callable, not %r' % parse_as)
        self.parse_as = parse_as
        if display_name is None:
            display_name = getattr(parse_as, '__name__', None) or repr(parse_as)
        self.display_name = display_name
        super(ConvertedValue, self).__init__()

    def parse(self, text):
        try:
            return self.parse_as(text)
        except (ValueError, TypeError):
            raise ValueError('%r is not a valid %s' % (text, self.display_name))


class StringValue(Value):
    display_name = 'string'

    def parse(self, text):
        return text


class IntValue(ConvertedValue):
    def __init__(self):
        super(IntValue, self).__init__(int, 'integer')


class FloatValue(ConvertedValue):
    def __init__(self):
        super(FloatValue, self).__init__(float, 'decimal')


class BoolValue(Value):
    """A boolean sink. On the command line, ``--flag`` sets True and
    ``--no-flag`` sets False. Defaults and environment values accept
    the usual spellings (true/false, yes/no, on/off, 1/0).
    """
    is_boolean = True
    display_name = 'boolean'

    def zero(self):
        return False

    def parse(self, text):
        lowered = text.strip().lower()
        if lowered in _TRUE_STRS:
            return True
        if lowered in _FALSE_STRS:
            return False
        raise ValueError('%r is not a valid boolean' % text)

    def __str__(self):
        return 'true' if self.value else 'false'


class DurationValue(Value):
    """Parses durations such as ``90s``, ``1.5h``, ``1h30m``, or ``1d 2h
    30m`` into a :class:`datetime.timedelta`. Every character must belong
    to a value/unit pair.
    """
    display_name = 'duration'

    def parse(self, text):
        parts, pos = [], 0
        stripped = text.strip()
        while pos < len(stripped):
            match = _DURATION_PART_RE.match(stripped, pos)
            if not match:
                raise ValueError('%r is not a valid duration' % text)
            parts.append('%s%s' % match.groups())
            pos = match.end()
        if not parts:
            raise ValueError('%r is not a valid duration' % text)
        # parse_timedelta() needs the pairs separated
        try:
            return parse_timedelta(' '.join(parts))
        except ValueError:
            raise ValueError('%r is not a valid duration' % text)


class EnumValue(Value):
    """Accepts a single value, limited to a set of string *choices*.
    Matching is exact and case-sensitive.
    """
    display_name = 'choice'

    def __init__(self, choices):
        if not choices:
            raise ValueError('expected at least one choice, not: %r' % (choices,))
        self.choices = list(choices)
        super(EnumValue, self).__init__()

    def parse(self, text):
        if text not in self.choices:
            raise ValueError('enum value must be one of %s, got %r'
                             % (', '.join(self.choices), text))
        return text


class ExistingFileValue(Value):
    display_name = 'file'

    def parse(self, text):
        if not os.path.isfile(text):
            raise ValueError('path %r does not exist or is not a file' % text)
        return text


class ExistingDirValue(Value):
    display_name = 'directory'

    def parse(self, text):
        if not os.path.isdir(text):
            raise ValueError('path %r does not exist or is not a directory' % text)
        return text


def parse_sv_line(line, sep=','):
    """Parse a single line of values, separated by the delimiter
    *sep*. Supports quoting.
    """
    class _sv_dialect(Dialect):
        delimiter = sep
        escapechar = '\\'
        quotechar = '"'
        doublequote = True
        skipinitialspace = False
        lineterminator = '\n'
        quoting = QUOTE_MINIMAL

    parsed = list(reader([line], dialect=_sv_dialect))
    return parsed[0] if parsed else []


class ListValue(Value):
    """Takes a single argument as a character-separated list, the
    argument equivalent of CSV::

      --tags 'a1,"b,2",c3'

    yields ``['a1', 'b,2', 'c3']``. Each item is parsed with
    *item_value*, a Value instance (a StringValue by default). Passing
    the flag again replaces the whole list.
    """
    def __init__(self, item_value=None, sep=',', strip=False):
        self.item_value = item_value if item_value is not None else StringValue()
        self.sep = sep
        self.strip = strip
        self.display_name = 'list of %s' % self.item_value.display_name
        super(ListValue, self).__init__()

    def zero(self):
        return []

    def parse(self, text):
        split_vals = parse_sv_line(text, self.sep)
        if self.strip:
            split_vals = [v.strip() for v in split_vals]
        return [self.item_value.parse(v) for v in split_vals]

    def __str__(self):
        return self.sep.join([str(v) for v in self.value])


class CumulativeValue(Value):
    """Collects every value it is set with, in order. Used for flags
    that may be repeated and for arguments that consume the remainder
    of the command line.
    """
    is_cumulative = True

    def __init__(self, item_value=None):
        self.item_value = item_value if item_value is not None else StringValue()
        self.display_name = self.item_value.display_name
        super(CumulativeValue, self).__init__()

    def zero(self):
        return []

    def parse(self, text):
        return self.item_value.parse(text)

    def set(self, text):
        self.value.append(self.parse(text))

    def __str__(self):
        return ', '.join([str(v) for v in self.value])


class StringMapValue(Value):
    """A cumulative ``KEY=VALUE`` sink, producing a dict. Later
    assignments to the same key win.
    """
    is_cumulative = True
    display_name = 'KEY=VALUE pair'

    def zero(self):
        return {}

    def parse(self, text):
        key, sep, val = text.partition('=')
        if not sep or not key:
            raise ValueError('expected KEY=VALUE, got %r' % text)
        return key, val

    def set(self, text):
        key, val = self.parse(text)
        self.value[key] = val

    def __str__(self):
        return ','.join(['%s=%s' % (k, v) for k, v in self.value.items()])
