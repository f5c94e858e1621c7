"""
Compilation of JavaScript cells.

A cell is parsed once with esprima; its free identifiers become inputs and
its last top-level statement decides the (single) output:

  function f() {}        -> output `f` with a function spec
  let x = ...            -> output `x`
  x                      -> output `x` unless `x` is an input
  <other expression>     -> no output, `implicit_return` holds its source
  block / if             -> no output
  anything else          -> UnsupportedSyntaxError
"""
import logging
from collections.abc import Mapping
from typing import Any, Callable, Iterable, List, Optional, Tuple

import esprima
from esprima.error_handler import Error as ParseError

from .builtins import JS_GLOBALS
from .errors import UnsupportedSyntaxError, pack_error
from .function_spec import extract_function_spec
from .model import Cell, FunctionSpec, Input, Message, Output
from .scope import find_globals

logger = logging.getLogger(__name__)

NOT_AN_EXPRESSION = 'Code is not a single, simple expression'

_NOT_SIMPLE = {'AssignmentExpression', 'UpdateExpression', 'AwaitExpression', 'Super'}

_FUNCTION_DECLS = {'FunctionDeclaration', 'AsyncFunctionDeclaration'}

_NO_VALUE = {'BlockStatement', 'IfStatement'}

# the evaluator runs a cell as a function body, so top-level return is allowed
_TOLERATED = {'Illegal return statement'}

_PARSE_OPTIONS = {'range': True, 'loc': True, 'comment': True, 'tolerant': True}


def to_estree(node: Any) -> Any:
    """Convert an esprima node into plain ESTree dicts with `start`/`end` offsets."""
    if node is None or isinstance(node, (str, int, float, bool)):
        return node
    if isinstance(node, list):
        return [to_estree(item) for item in node]
    if isinstance(node, Mapping):
        items = node.items()
    elif hasattr(node, '__dict__'):
        items = vars(node).items()
    else:
        return node
    out = {key: to_estree(value) for key, value in items if not key.startswith('_')}
    span = out.get('range')
    if span and 'start' not in out:
        out['start'], out['end'] = span[0], span[1]
    return out


def _blank_hashbang(code: str) -> str:
    """Replace a leading `#!` line with spaces, keeping offsets and lines."""
    if not code.startswith('#!'):
        return code
    end = code.find('\n')
    if end < 0:
        end = len(code)
    return ' ' * end + code[end:]


def _parse_as(parse_fn: Callable, source: str) -> Any:
    tree = parse_fn(source, _PARSE_OPTIONS)
    for error in getattr(tree, 'errors', None) or []:
        if getattr(error, 'description', None) not in _TOLERATED:
            raise error
    return tree


def parse(code: str) -> Tuple[dict, List[dict]]:
    """
    Parse `code` as a script, falling back to a module so that import and
    export are accepted. A leading `#!` line and `return` outside a function
    are allowed. Returns the Program node and the block comments
    (`{start, end, text}`) sorted by position. Raises the script's parse
    error when neither parse succeeds.
    """
    source = _blank_hashbang(code)
    try:
        tree = _parse_as(esprima.parseScript, source)
    except ParseError as script_error:
        try:
            tree = _parse_as(esprima.parseModule, source)
        except ParseError:
            raise script_error
    program = to_estree(tree)
    program.pop('errors', None)
    comments = program.pop('comments', None) or []
    docs = [
        {'start': c['start'], 'end': c['end'], 'text': c['value']}
        for c in comments if c['type'] == 'Block'
    ]
    docs.sort(key=lambda doc: doc['start'])
    return program, docs


def is_simple_expression(program: Mapping) -> bool:
    body = program['body']
    if not body:
        return True
    if len(body) > 1:
        return False
    node = body[0]
    return node['type'] == 'ExpressionStatement' and node['expression']['type'] not in _NOT_SIMPLE


def _extract_output(program: Mapping, inputs: List[str], code: str, docs: List[dict],
                    messages: List[Message]) -> Tuple[Optional[str], Optional[str], Optional[FunctionSpec]]:
    # (output name, value expression, function spec)
    if not program['body']:
        return None, None, None
    last = program['body'][-1]
    kind = last['type']
    if kind in _FUNCTION_DECLS:
        name = last['id']['name']
        return name, name, extract_function_spec(name, last, code, docs, messages=messages)
    if kind == 'ExportDefaultDeclaration':
        decl = last['declaration']
        # only exported, named functions are handled
        if decl['type'] in _FUNCTION_DECLS and decl.get('id'):
            name = decl['id']['name']
            spec = extract_function_spec(name, decl, code, docs, anchor=last, messages=messages)
            return name, name, spec
        return None, None, None
    if kind == 'VariableDeclaration':
        target = last['declarations'][0]['id']
        if target['type'] == 'Identifier':
            return target['name'], target['name'], None
        return None, None, None
    if kind == 'ExpressionStatement':
        expression = last['expression']
        text = code[expression['start']:expression['end']]
        if expression['type'] == 'Identifier' and expression['name'] not in inputs:
            return expression['name'], text, None
        return None, text, None
    if kind in _NO_VALUE:
        return None, None, None
    raise UnsupportedSyntaxError('Unhandled AST node type: ' + kind)


def compile_cell(code: str, expr: bool = False, builtins: Optional[Iterable[str]] = None,
                 id: Optional[str] = None) -> Cell:
    """
    Compile JavaScript source into a Cell.

    `expr` requires the cell to be a single expression without side effects
    (assignment, update, await); `builtins` are global names never reported
    as inputs (defaults to the ES6 and Node.js globals).
    """
    cell = Cell(code, id=id)
    try:
        program, docs = parse(cell.code)
    except ParseError as exc:
        cell.messages.append(pack_error(exc))
        return cell

    cell.expr = is_simple_expression(program)
    if expr and not cell.expr:
        cell.messages.append(Message(NOT_AN_EXPRESSION))
        return cell

    ignore = JS_GLOBALS if builtins is None else builtins
    names = find_globals(program, ignore)
    cell.inputs = [Input(name) for name in names]

    name, value_expr, spec = _extract_output(program, names, cell.code, docs, cell.messages)
    if name:
        cell.outputs.append(Output(name, spec))
    cell.implicit_return = value_expr
    logger.debug("Compiled cell: inputs=%s outputs=%s", names, [o.name for o in cell.outputs])
    return cell
