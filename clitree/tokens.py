"""The tokenizer turns an argument vector into a replayable stream of
classified tokens. Classification is purely lexical: whether ``-abc``
is three boolean flags or ``-a`` with the value ``bc`` is decided later,
by the matcher, which knows the grammar.
"""

from collections import namedtuple


LONG = 'long'
SHORT = 'short'
ARG = 'arg'
EOL = 'eol'

END_OF_FLAGS = '--'


class Token(namedtuple('Token', 'type value inline pos')):
    """A single classified unit of the argument vector.

    Args:
       type (str): One of LONG, SHORT, ARG, or EOL.
       value (str): The flag name without dashes (LONG), the letter
          cluster after the dash (SHORT), or the literal text (ARG).
       inline (str): For LONG tokens of the form ``--name=value``, the
          text after the ``=``. None otherwise.
       pos (int): Position in the argument vector, used to detect
          lack of progress. The EOL sentinel's pos is ``len(argv)``.
    """
    __slots__ = ()

    @property
    def is_long(self):
        return self.type == LONG

    @property
    def is_flag(self):
        return self.type in (LONG, SHORT)

    @property
    def is_arg(self):
        return self.type == ARG

    @property
    def is_eol(self):
        return self.type == EOL

    def __str__(self):
        if self.type == LONG:
            ret = '--' + self.value
            if self.inline is not None:
                ret += '=' + self.inline
            return ret
        elif self.type == SHORT:
            return '-' + self.value
        elif self.type == EOL:
            return '<EOL>'
        return self.value


def classify(arg, index):
    if arg.startswith('--'):
        name, sep, inline = arg[2:].partition('=')
        return Token(LONG, name, inline if sep else None, index)
    if arg.startswith('-') and arg != '-':
        return Token(SHORT, arg[1:], None, index)
    return Token(ARG, arg, None, index)


class TokenStream(object):
    """A finite, replayable sequence of tokens, always terminated by an
    EOL sentinel. Peeking never consumes, and consuming past the end
    keeps yielding the sentinel rather than raising.
    """
    def __init__(self, tokens, eol_pos=None):
        self.tokens = tuple(tokens)
        if eol_pos is None:
            eol_pos = self.tokens[-1].pos + 1 if self.tokens else 0
        self.eol_token = Token(EOL, '', None, eol_pos)
        self.pos = 0

    def peek(self):
        try:
            return self.tokens[self.pos]
        except IndexError:
            return self.eol_token

    def next(self):
        "Consume and return the current token."
        ret = self.peek()
        if self.pos < len(self.tokens):
            self.pos += 1
        return ret

    @property
    def eol(self):
        return self.pos >= len(self.tokens)

    def remaining(self):
        return list(self.tokens[self.pos:])

    def __repr__(self):
        cn = self.__class__.__name__
        return '<%s pos=%r tokens=%r>' % (cn, self.pos, [str(t) for t in self.tokens])


def tokenize(argv):
    """Classify each string of *argv* (which should not include the
    program name). A bare ``--`` is dropped, and everything after it is
    treated as positional, conventional end-of-flags style.
    """
    tokens = []
    flags_done = False
    for index, arg in enumerate(argv):
        if flags_done:
            tokens.append(Token(ARG, arg, None, index))
        elif arg == END_OF_FLAGS:
            flags_done = True
        else:
            tokens.append(classify(arg, index))
    return TokenStream(tokens, eol_pos=len(argv))
