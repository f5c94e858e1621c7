"""
Function specifications extracted from declarations and their doc comments.
"""
import inspect
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from .doc import EXTENDS_PREFIX, parse_doc, parse_example_tag, parse_param_tag, parse_return_tag
from .errors import LiteralFormatError, UnsupportedSyntaxError
from .literals import parse_value
from .model import MISSING, FunctionSpec, Message, Method, Param, ParamKind

logger = logging.getLogger(__name__)

_SINGLE_TAGS = ('name', 'title', 'summary', 'description')

_PYTHON_TYPES = {
    bool: 'boolean',
    int: 'integer',
    float: 'number',
    str: 'string',
    list: 'array',
    tuple: 'array',
    dict: 'object',
}


def _check_variadics(params: List[Param]):
    last = len(params) - 1
    for index, param in enumerate(params):
        if param.kind is not ParamKind.POSITIONAL and index != last:
            raise UnsupportedSyntaxError(
                f"Parameter '{param.name}' ({param.kind.value}) must be the last parameter"
            )


def params_from_declaration(decl: Mapping, code: str) -> List[Param]:
    params = []
    for node in decl.get('params') or []:
        kind = node['type']
        if kind == 'Identifier':
            name = node['name']
            if name.startswith(EXTENDS_PREFIX):
                params.append(Param(name[len(EXTENDS_PREFIX):], kind=ParamKind.EXTENDS))
            else:
                params.append(Param(name))
        elif kind == 'RestElement' and node['argument']['type'] == 'Identifier':
            params.append(Param(node['argument']['name'], kind=ParamKind.REPEATS))
        elif kind == 'AssignmentPattern' and node['left']['type'] == 'Identifier':
            name = node['left']['name']
            right = node['right']
            text = code[right['start']:right['end']]
            try:
                default = parse_value(text)
            except LiteralFormatError as exc:
                raise UnsupportedSyntaxError(
                    f"Default value of parameter '{name}' is not a literal: {text}"
                ) from exc
            params.append(Param(name, default=default))
        else:
            raise UnsupportedSyntaxError(f'Unhandled parameter node type "{kind}"')
    _check_variadics(params)
    return params


def find_doc_block(docs: List[Mapping], start: int, code: str) -> Optional[Mapping]:
    """The doc block separated from offset `start` by whitespace only."""
    found = None
    for doc in docs:
        if doc['start'] > start:
            break
        if doc['end'] <= start and not code[doc['end']:start].strip():
            found = doc
    return found


def signature_of(name: str, params: List[Param], returns: Optional[Mapping] = None) -> str:
    parts = [p.name + (f': {p.type}' if p.type else '') for p in params]
    signature = f"{name}({', '.join(parts)})"
    if returns and returns.get('type'):
        signature += f": {returns['type']}"
    return signature


class _Reporter:
    """Records recoverable documentation problems as warnings."""

    def __init__(self, messages: Optional[List[Message]], code: str, offset: int):
        self.messages = messages
        self.first_line = code.count('\n', 0, offset) + 1

    def __call__(self, text: str, line: int = 0):
        logger.warning(text)
        if self.messages is not None:
            self.messages.append(Message(text, line=self.first_line + line, type='warning'))


def _merge_param(param: Param, doc: Dict[str, Any], is_last: bool, report: _Reporter, line: int):
    if doc['type']:
        param.type = doc['type']
    if doc['description']:
        param.description = doc['description']
    marked = doc['kind']
    if marked is ParamKind.POSITIONAL or marked is param.kind:
        return
    if param.kind is ParamKind.POSITIONAL and is_last:
        param.kind = marked
    else:
        report(f"@param {param.name} is documented as {marked.value} "
               f"but declared as {param.kind.value}", line)


def extract_function_spec(name: str, decl: Mapping, code: str,
                          docs: Optional[List[Mapping]] = None,
                          anchor: Optional[Mapping] = None,
                          messages: Optional[List[Message]] = None) -> FunctionSpec:
    """
    Build the specification of the function declared by `decl`.

    Parameters come from the declaration; the doc block directly preceding
    it (or preceding `anchor`, e.g. an enclosing `export default`) adds
    types, descriptions, a return and examples. Problems in the doc block
    are reported into `messages`; unsupported parameter syntax raises.
    """
    params = params_from_declaration(decl, code)
    title = summary = description = None
    returns = None
    examples: List[Dict[str, str]] = []

    doc = find_doc_block(docs or [], (anchor or decl)['start'], code)
    if doc is not None:
        report = _Reporter(messages, code, doc['start'])
        parsed = parse_doc(doc['text'])
        description = parsed.description
        by_name = {p.name: p for p in params}
        seen = set()
        documented = set()
        for tag in parsed.tags:
            title_ = 'return' if tag.title == 'returns' else tag.title
            if title_ in _SINGLE_TAGS or title_ == 'return':
                if title_ in seen:
                    report(f'duplicate @{title_}', tag.line)
                    continue
            if title_ == 'name':
                seen.add(title_)
                if tag.body != name:
                    report(f'Documentation tag @name with name "{tag.body}" '
                           f'differs from name in function definition "{name}"', tag.line)
            elif title_ == 'title':
                seen.add(title_)
                title = tag.body or None
            elif title_ == 'summary':
                seen.add(title_)
                summary = tag.body or None
            elif title_ == 'description':
                seen.add(title_)
                description = tag.body or None
            elif title_ == 'param':
                entry = parse_param_tag(tag.body)
                param_name = entry['name']
                if not param_name:
                    report('@param should have a name: expected format '
                           '@param [type] <name> [description]', tag.line)
                    continue
                if param_name.startswith(EXTENDS_PREFIX):
                    param_name = param_name[len(EXTENDS_PREFIX):]
                if param_name in documented:
                    report(f'duplicate @param for {param_name}', tag.line)
                    continue
                param = by_name.get(param_name)
                if param is None:
                    report(f'@param {param_name} does not match any parameter of {name}', tag.line)
                    continue
                documented.add(param_name)
                _merge_param(param, entry, param is params[-1], report, tag.line)
            elif title_ == 'return':
                entry = parse_return_tag(tag.body)
                if not entry:
                    report('@return is empty', tag.line)
                    continue
                seen.add(title_)
                returns = entry
            elif title_ == 'example':
                examples.append(parse_example_tag(tag.body))
        _check_variadics(params)

    method = Method(signature_of(name, params, returns), params, returns, examples)
    return FunctionSpec(name, code, [method], title=title, summary=summary, description=description)


def _python_type(annotation: Any) -> Optional[str]:
    if annotation is inspect.Parameter.empty:
        return None
    if annotation in _PYTHON_TYPES:
        return _PYTHON_TYPES[annotation]
    return getattr(annotation, '__name__', None) or str(annotation)


def function_spec_from_callable(func: Callable, name: Optional[str] = None) -> FunctionSpec:
    """Specification of a Python callable: *args repeats, **kwargs extends."""
    name = name or getattr(func, '__name__', None) or 'anonymous'
    signature = inspect.signature(func)
    params = []
    for p in signature.parameters.values():
        if p.kind is inspect.Parameter.VAR_POSITIONAL:
            params.append(Param(p.name, _python_type(p.annotation), kind=ParamKind.REPEATS))
        elif p.kind is inspect.Parameter.VAR_KEYWORD:
            params.append(Param(p.name, _python_type(p.annotation), kind=ParamKind.EXTENDS))
        elif p.kind is inspect.Parameter.KEYWORD_ONLY:
            raise UnsupportedSyntaxError(f"Keyword-only parameter '{p.name}' of {name} is not supported")
        else:
            default = MISSING if p.default is inspect.Parameter.empty else p.default
            params.append(Param(p.name, _python_type(p.annotation), default=default))
    _check_variadics(params)

    returns = None
    return_type = _python_type(signature.return_annotation)
    if return_type:
        returns = {'type': return_type}
    doc = inspect.getdoc(func)
    summary = doc.split('\n\n', 1)[0].strip() if doc else None
    method = Method(signature_of(name, params, returns), params, returns)
    return FunctionSpec(name, None, [method], summary=summary, description=doc or None)
