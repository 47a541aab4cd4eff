
import os
import sys
import array
import textwrap

from boltons.iterutils import unique

from clitree.utils import (format_flag_label,
                           format_flag_summary,
                           format_arg_label,
                           format_arg_summary,
                           unwrap_text)


DEFAULT_WIDTH = 80


def _get_termios_width():
    import fcntl
    import termios

    # rows, columns, xpixels, ypixels
    winsize = array.array('H', [0, 0, 0, 0])
    if fcntl.ioctl(sys.stdout, termios.TIOCGWINSZ, winsize):
        return None
    return winsize[1] or None


def get_term_width():
    """Column count of the terminal on stdout, else the COLUMNS
    environment variable, else None.
    """
    width = None
    try:
        width = _get_termios_width()
    except (ImportError, OSError, ValueError, TypeError):
        # no termios, or stdout is not a terminal
        pass
    if width:
        return width
    try:
        return int(os.environ['COLUMNS'])
    except (KeyError, ValueError):
        return None


def _format_row(lhs, sep, doc, doc_start, doc_width):
    "One help row: label on the left, doc wrapped into its own column."
    lines = textwrap.wrap(doc or '', doc_width)
    if not lines:
        return [lhs]
    pad = ' ' * doc_start
    if len(lhs) + len(sep) <= doc_start:
        ret = [(lhs + sep).ljust(doc_start) + lines[0]]
    else:
        ret = [lhs, pad + lines[0]]
    ret.extend([pad + line for line in lines[1:]])
    return ret


def format_flag_post_doc(flag):
    "Parenthetical after a flag's help: required, default, or environment variable."
    parts = []
    if flag.is_required:
        parts.append('required')
    elif flag.default_value and not flag.is_boolean:
        parts.append('defaults to %r' % flag.default_value)
    if flag.envar_name:
        parts.append('$%s' % flag.envar_name)
    if not parts:
        return ''
    return '(%s)' % ', '.join(parts)


def _get_scope(app, ctx):
    if ctx is not None and ctx.selected_command is not None:
        return ctx.selected_command
    return app


def _get_shown_flags(app, ctx):
    if ctx is not None:
        flags = ctx.get_flags()
    else:
        flags = app.get_flags()
    return unique([f for f in flags if not f.is_hidden])


class HelpHandler(object):
    """Renders usage and help text from an Application's grammar. The
    grammar is only read, never modified, and nothing is printed: the
    caller decides where text goes.

    Pass any of the keys in ``default_context`` as keyword arguments to
    customize headings, widths, and separators.
    """
    default_context = {
        'usage_label': 'usage:',
        'subcmd_section_heading': 'Commands:',
        'flags_section_heading': 'Flags:',
        'args_section_heading': 'Args:',
        'section_break': '',
        'width': None,
        'max_width': 120,
        'min_doc_width': 40,
        'doc_separator': '  ',
        'section_indent': '  ',
    }

    def __init__(self, **kwargs):
        ctx = {}
        for key, val in self.default_context.items():
            ctx[key] = kwargs.pop(key, val)
        if kwargs:
            raise TypeError('unexpected keyword arguments: %r' % list(kwargs.keys()))
        self.ctx = ctx

    def get_width(self):
        "The configured width, or the terminal's, capped at max_width."
        width = self.ctx['width']
        if width is None:
            width = min(get_term_width() or DEFAULT_WIDTH, self.ctx['max_width']) - 2
        return width

    def _get_section(self, heading, rows):
        ctx = self.ctx
        indent, sep = ctx['section_indent'], ctx['doc_separator']
        min_doc_width = ctx['min_doc_width']
        width = self.get_width()

        # the doc column starts after the widest label that leaves it enough room
        fitting = [len(label) for label, _ in rows
                   if len(indent) + len(label) + len(sep) + min_doc_width < width]
        if fitting:
            doc_start = len(indent) + max(fitting) + len(sep)
        else:
            doc_start = width - min_doc_width
        doc_width = max(width - doc_start, min_doc_width)

        ret = [heading]
        for label, doc in rows:
            ret.extend(_format_row(indent + label, sep, doc, doc_start, doc_width))
        ret.append(ctx['section_break'])
        return ret

    def get_usage_line(self, app, ctx=None):
        scope = _get_scope(app, ctx)
        parts = [self.ctx['usage_label']] if self.ctx['usage_label'] else []
        append = parts.append

        append(app.name)
        if scope is not app:
            append(scope.full_command())

        flag_summary = format_flag_summary(_get_shown_flags(app, ctx))
        if flag_summary:
            append(flag_summary)

        if scope.cmd_group.have():
            append('<command> [<args> ...]')
        elif scope.arg_group.have():
            append(format_arg_summary(scope.args))

        return ' '.join(parts)

    def get_help_text(self, app, ctx=None):
        """Full help for the deepest command selected in *ctx* (or the
        application, if none): usage line, description, then flag,
        argument, and command listings.
        """
        scope = _get_scope(app, ctx)

        ret = [self.get_usage_line(app, ctx), '']
        if scope.help:
            ret.extend([unwrap_text(scope.help), ''])

        flags = _get_shown_flags(app, ctx)
        if flags:
            rows = []
            for flag in flags:
                doc = ' '.join([p for p in (flag.help, format_flag_post_doc(flag)) if p])
                rows.append((format_flag_label(flag), doc))
            ret.extend(self._get_section(self.ctx['flags_section_heading'], rows))

        if scope.arg_group.have():
            rows = [(format_arg_label(arg), arg.help) for arg in scope.args]
            ret.extend(self._get_section(self.ctx['args_section_heading'], rows))

        if scope.cmd_group.have():
            rows = []
            for cmd in scope.cmd_group.flattened():
                if cmd.is_hidden:
                    continue
                rows.append((cmd.full_command(), cmd.help))
            ret.extend(self._get_section(self.ctx['subcmd_section_heading'], rows))

        return '\n'.join(ret).rstrip() + '\n'

    def get_error_text(self, app, exc, ctx=None):
        "An error message followed by the usage line, for bad input with --help."
        return '%s: error: %s\n%s' % (app.name, exc, self.get_usage_line(app, ctx))
