import json
import re
from typing import Any

from .errors import LiteralFormatError

_NUMBER = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')
_TICKS = re.compile(r"^'(.*)'$")
_QUOTES = re.compile(r'^"(.*)"$')


def parse_value(text: Any) -> Any:
    """
    Parse the source text of a literal (e.g. a parameter default) into a value.

    Only booleans, null, numbers, quoted strings and JSON arrays/objects are
    recognised; anything else raises LiteralFormatError.
    """
    if not isinstance(text, str):
        return text
    text = text.strip()
    if text == 'false':
        return False
    if text == 'true':
        return True
    if text == 'null':
        return None
    if _NUMBER.match(text):
        try:
            return int(text)
        except ValueError:
            number = float(text)
        return int(number) if number.is_integer() else number
    if text.startswith("'"):
        m = _TICKS.match(text)
        if not m:
            raise LiteralFormatError('Illegal format')
        return m.group(1)
    if text.startswith('"'):
        m = _QUOTES.match(text)
        if not m:
            raise LiteralFormatError('Illegal format')
        return m.group(1)
    # arrays and objects only in JSON notation
    if text.startswith(('[', '{')):
        try:
            return json.loads(text)
        except ValueError as exc:
            raise LiteralFormatError(f'Illegal format: {exc}') from exc
    raise LiteralFormatError('Illegal format')
