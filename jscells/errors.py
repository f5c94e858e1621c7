"""
Exceptions raised by jscells and translation of execution failures into
cell messages.

Compilation problems a user can fix (syntax errors, non-expression cells,
documentation inconsistencies) never raise: they are recorded as messages
on the cell. The exceptions below signal that a caller or a piece of source
stepped outside what the compiler and calling convention support.
"""
import re
from typing import Any

from .model import Message

# Lines the evaluator prepends to a cell body before running it
WRAPPER_LINE_OFFSET = 2

_ANONYMOUS_FRAME = re.compile(r'<anonymous>:(\d+):(\d+)')


class JsCellsError(Exception):
    pass


class UnsupportedSyntaxError(JsCellsError):
    """An AST node shape the analyzer or extractor does not handle."""


class CallError(JsCellsError):
    """A call descriptor does not fit the parameters of the called method."""


class ResolveError(JsCellsError, LookupError):
    pass


class LiteralFormatError(JsCellsError, ValueError):
    pass


class ExecutionError(JsCellsError):
    """
    Raised by host evaluators when running a cell fails. `stack` holds the
    JavaScript stack trace when the evaluator has one.
    """

    def __init__(self, message: str, stack: str = None):
        super().__init__(message)
        self.message = message
        self.stack = stack


def _is_syntax_error(error: Any) -> bool:
    if isinstance(error, SyntaxError):
        return True
    # esprima errors carry these instead of subclassing SyntaxError
    return getattr(error, 'lineNumber', None) is not None


def pack_error(error: Exception) -> Message:
    """Translate a parse or execution failure into an error message."""
    line = 0
    column = 0
    message = str(error)
    if _is_syntax_error(error):
        if isinstance(error, SyntaxError):
            description = error.msg
            line = error.lineno or 0
            column = error.offset or 0
        else:
            description = getattr(error, 'description', None) or str(error)
            line = error.lineNumber or 0
            column = error.column or 0
        message = 'Syntax error in Javascript: ' + str(description)
    else:
        stack = getattr(error, 'stack', None)
        if stack:
            lines = stack.split('\n')
            if len(lines) > 1:
                match = _ANONYMOUS_FRAME.search(lines[1])
                if match:
                    line = int(match.group(1)) - WRAPPER_LINE_OFFSET
                    column = int(match.group(2))
            message = lines[0] or message
    return Message(message, line=line, column=column)
