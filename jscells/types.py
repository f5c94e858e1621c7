"""
Value types and packing of values into their wire form.

A packed value is a dict `{'type': <type>, 'data': <value>}` (images use
`src` instead of `data`, functions pack to a reference, never to code).
"""
from collections.abc import Mapping
from numbers import Number
from typing import Any, Dict, Iterable, List, Optional

# Parent of each type
PARENT_TYPES: Dict[str, Optional[str]] = {
    'any': None,
    'null': 'any',
    'boolean': 'any',
    'number': 'any',
    'integer': 'number',
    'string': 'any',
    'object': 'any',
    'array': 'any',
    'array[boolean]': 'array',
    'array[number]': 'array',
    'array[integer]': 'array[number]',
    'array[string]': 'array',
    'array[object]': 'array',
    'table': 'any',
    'image': 'any',
    'function': 'any',
}

CHILDREN_TYPES: Dict[str, List[str]] = {t: [] for t in PARENT_TYPES}
for _type, _parent in PARENT_TYPES.items():
    if _parent:
        CHILDREN_TYPES[_parent].append(_type)

DESCENDANT_TYPES: Dict[str, List[str]] = {t: [] for t in PARENT_TYPES}
for _type in PARENT_TYPES:
    _parent = PARENT_TYPES[_type]
    while _parent:
        DESCENDANT_TYPES[_parent].append(_type)
        _parent = PARENT_TYPES[_parent]


def ancestor_types(type_: str) -> List[str]:
    """Ancestors of a type, nearest first, ending with 'any'."""
    out = []
    parent = PARENT_TYPES.get(type_)
    while parent:
        out.append(parent)
        parent = PARENT_TYPES.get(parent)
    return out


def is_subtype(type_: str, ancestor: str) -> bool:
    return type_ == ancestor or ancestor in ancestor_types(type_)


def type_of(value: Any) -> str:
    if value is None:
        return 'null'
    # bool before numbers: True is an int
    if isinstance(value, bool):
        return 'boolean'
    if isinstance(value, int):
        return 'integer'
    if isinstance(value, Number):
        try:
            return 'integer' if float(value).is_integer() else 'number'
        except (TypeError, ValueError):
            return 'number'
    if isinstance(value, str):
        return 'string'
    if isinstance(value, (list, tuple)):
        return 'array'
    if isinstance(value, Mapping):
        tag = value.get('type')
        return tag if isinstance(tag, str) and tag else 'object'
    if callable(value):
        return 'function'
    return 'object'


def _item_type(item: Any) -> Optional[str]:
    # packed values, bare type names or plain values
    if item is None:
        return None
    if isinstance(item, str):
        return item
    if isinstance(item, Mapping):
        return item.get('type')
    return type_of(item)


def _most_specific_type(current: Optional[str], item: Any) -> str:
    next_type = _item_type(item)
    if not next_type:
        return 'any'
    if current is None:
        return next_type
    if current == next_type:
        return current
    if {current, next_type} == {'integer', 'number'}:
        return 'number'
    return 'any'


def coerced_array_type(items: Iterable[Any]) -> str:
    """
    Array type for a sequence of packed values, bare type names or plain
    non-string values, e.g. integers and numbers give 'array[number]', mixed
    types give 'array'.
    """
    value_type = None
    for item in items:
        value_type = _most_specific_type(value_type, item)
    if value_type is None or value_type == 'any':
        return 'array'
    return f'array[{value_type}]'


def coerce_array(items: List[Optional[Dict[str, Any]]]) -> Dict[str, Any]:
    return {
        'type': coerced_array_type(items),
        'data': [unpack(item) for item in items],
    }


def pack(value: Any, context: Any = None) -> Dict[str, Any]:
    if value is None:
        return {'type': 'null', 'data': None}
    if callable(value) and not isinstance(value, Mapping):
        return {
            'type': 'function',
            'data': {
                'id': getattr(value, 'id', None),
                'name': getattr(value, 'name', None) or getattr(value, '__name__', None),
                'context': getattr(context, 'id', None),
            },
        }
    if isinstance(value, Mapping) and value.get('type') == 'image':
        return {'type': 'image', 'src': value.get('src')}
    return {'type': type_of(value), 'data': value}


def unpack(pkg: Optional[Dict[str, Any]]) -> Any:
    if pkg is None:
        return None
    if pkg.get('type') == 'image' and 'data' not in pkg:
        return dict(pkg)
    return pkg.get('data')
