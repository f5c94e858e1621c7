"""
Parsing of JSDoc style documentation blocks.

Only the tags used to describe cell functions are interpreted:
@name, @title, @summary, @description, @param, @return(s) and @example.
Other tags are kept on the parsed comment but otherwise ignored.
"""
import re
from typing import List, Optional, Tuple

from .model import ParamKind

EXTENDS_PREFIX = '___'
REPEATS_PREFIX = '...'

_LEADING = re.compile(r'^\s*\*? ?')
_TAG = re.compile(r'^@(\w+)(?:\s+(.*))?$')
_CAPTION = re.compile(r'^\s*<caption>(.*?)</caption>', re.DOTALL)
_APPLICATION = re.compile(r'^([\w$.]+?)\.?<(.*)>$')


class DocTag:
    def __init__(self, title: str, body: str, line: int):
        self.title = title
        self.body = body
        # line within the comment, 0-based
        self.line = line

    def __repr__(self):
        return f'DocTag({self.title!r}, {self.body!r})'


class DocComment:
    def __init__(self, description: Optional[str], tags: List[DocTag]):
        self.description = description
        self.tags = tags


def unwrap(text: str) -> List[str]:
    """Strip comment decoration (leading whitespace and `*`) from each line."""
    return [_LEADING.sub('', line) for line in text.split('\n')]


def parse_doc(text: str) -> DocComment:
    description: List[str] = []
    tags: List[Tuple[str, List[str], int]] = []
    for index, line in enumerate(unwrap(text)):
        match = _TAG.match(line.strip())
        if match:
            tags.append((match.group(1), [match.group(2) or ''], index))
        elif tags:
            tags[-1][1].append(line)
        else:
            description.append(line)
    return DocComment(
        '\n'.join(description).strip() or None,
        [DocTag(title, '\n'.join(body).strip(), line) for title, body, line in tags],
    )


def split_type(body: str) -> Tuple[Optional[str], str]:
    """Split a leading `{type}` expression off a tag body."""
    body = body.lstrip()
    if not body.startswith('{'):
        return None, body
    depth = 0
    for index, char in enumerate(body):
        if char == '{':
            depth += 1
        elif char == '}':
            depth -= 1
            if depth == 0:
                return body[1:index].strip(), body[index + 1:].strip()
    # unbalanced braces: treat the whole body as text
    return None, body


def _strip_hyphen(text: str) -> str:
    if text.startswith('- '):
        return text[2:].lstrip()
    return text


def normalize_type(expr: str) -> Tuple[str, ParamKind]:
    """
    Turn a type expression into a type name and the parameter kind it marks:
    `...T` marks a repeats parameter, `___T` an extends parameter.
    """
    expr = expr.strip()
    kind = ParamKind.POSITIONAL
    if expr.startswith(REPEATS_PREFIX):
        kind = ParamKind.REPEATS
        expr = expr[len(REPEATS_PREFIX):].strip()
    elif expr.startswith(EXTENDS_PREFIX):
        kind = ParamKind.EXTENDS
        expr = expr[len(EXTENDS_PREFIX):]
    return _type_name(expr), kind


def _type_name(expr: str) -> str:
    expr = expr.strip()
    if expr.endswith('='):
        expr = expr[:-1].strip()
    if expr[:1] in ('?', '!') and len(expr) > 1:
        expr = expr[1:]
    if expr.startswith('(') and expr.endswith(')'):
        expr = expr[1:-1].strip()
    if expr in ('', '*'):
        return 'any'
    if '|' in expr:
        return '|'.join(_type_name(part) for part in expr.split('|'))
    match = _APPLICATION.match(expr)
    if match:
        applications = [_type_name(part) for part in match.group(2).split(',')]
        return f"{match.group(1)}[{','.join(applications)}]"
    return expr


def parse_param_tag(body: str) -> dict:
    """`@param {type} name description` -> dict(name, type, kind, description)."""
    type_expr, rest = split_type(body)
    name = None
    if rest.startswith('['):
        # optional parameter, possibly with a default: [name=value]
        close = rest.find(']')
        if close > 0:
            name = rest[1:close].split('=', 1)[0].strip() or None
            rest = rest[close + 1:].strip()
    elif rest:
        parts = rest.split(None, 1)
        name = parts[0]
        rest = parts[1] if len(parts) > 1 else ''
    result = {'name': name, 'type': None, 'kind': ParamKind.POSITIONAL,
              'description': _strip_hyphen(rest.strip()) or None}
    if type_expr is not None:
        result['type'], result['kind'] = normalize_type(type_expr)
    return result


def parse_return_tag(body: str) -> dict:
    type_expr, rest = split_type(body)
    result = {}
    if type_expr is not None:
        result['type'] = _type_name(type_expr)
    description = _strip_hyphen(rest.strip())
    if description:
        result['description'] = description
    return result


def parse_example_tag(body: str) -> dict:
    example = {}
    match = _CAPTION.match(body)
    if match:
        example['caption'] = match.group(1).strip()
        body = body[match.end():]
    example['usage'] = body.strip()
    return example
