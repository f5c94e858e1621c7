"""
Compiled artifacts and their wire forms.

Objects here are built once by the compiler; `to_dict()` gives the JSON
shape exchanged with the hosting runtime.
"""
from enum import Enum
from typing import Any, Dict, List, Optional


class _Missing:
    def __repr__(self):
        return 'MISSING'

    def __bool__(self):
        return False


# A parameter without a default (a None default is a JavaScript null)
MISSING = _Missing()


class ParamKind(Enum):
    POSITIONAL = 'positional'
    REPEATS = 'repeats'
    EXTENDS = 'extends'


class Param:
    def __init__(self, name: str, type: Optional[str] = None,
                 kind: ParamKind = ParamKind.POSITIONAL,
                 default: Any = MISSING, description: Optional[str] = None):
        self.name = name
        self.type = type
        self.kind = kind
        self.default = default
        self.description = description

    @property
    def repeats(self) -> bool:
        return self.kind is ParamKind.REPEATS

    @property
    def extends(self) -> bool:
        return self.kind is ParamKind.EXTENDS

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {'name': self.name}
        if self.type:
            out['type'] = self.type
        if self.repeats:
            out['repeats'] = True
        if self.extends:
            out['extends'] = True
        if self.has_default:
            out['default'] = self.default
        if self.description:
            out['description'] = self.description
        return out

    def __repr__(self):
        return f'Param({self.to_dict()!r})'


class Method:
    def __init__(self, signature: str, params: Optional[List[Param]] = None,
                 returns: Optional[Dict[str, str]] = None,
                 examples: Optional[List[Dict[str, str]]] = None,
                 description: Optional[str] = None):
        self.signature = signature
        self.params = params or []
        self.returns = returns
        self.examples = examples or []
        self.description = description

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {'signature': self.signature}
        if self.params:
            out['params'] = [p.to_dict() for p in self.params]
        if self.returns:
            out['return'] = dict(self.returns)
        if self.examples:
            out['examples'] = [dict(e) for e in self.examples]
        if self.description:
            out['description'] = self.description
        return out


class FunctionSpec:
    def __init__(self, name: str, code: Optional[str] = None,
                 methods: Optional[List[Method]] = None,
                 title: Optional[str] = None, summary: Optional[str] = None,
                 description: Optional[str] = None):
        self.name = name
        self.code = code
        # overload variants; the extractor currently produces exactly one
        self.methods = methods or []
        self.title = title
        self.summary = summary
        self.description = description

    @property
    def method(self) -> Method:
        return self.methods[0]

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            'type': 'function',
            'name': self.name,
            'code': self.code,
            'methods': {m.signature: m.to_dict() for m in self.methods},
        }
        for key in ('title', 'summary', 'description'):
            value = getattr(self, key)
            if value:
                out[key] = value
        return out


class Message:
    def __init__(self, message: str, line: int = 0, column: int = 0, type: str = 'error'):
        self.type = type
        self.message = message
        self.line = line
        self.column = column

    def to_dict(self) -> Dict[str, Any]:
        return {'type': self.type, 'message': self.message, 'line': self.line, 'column': self.column}

    def __repr__(self):
        return f'Message({self.to_dict()!r})'


class Input:
    def __init__(self, name: str, value: Optional[Dict[str, Any]] = None):
        self.name = name
        # attached by the host before execution
        self.value = value

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {'name': self.name}
        if self.value is not None:
            out['value'] = self.value
        return out


class Output:
    def __init__(self, name: Optional[str] = None, spec: Optional[FunctionSpec] = None,
                 value: Optional[Dict[str, Any]] = None):
        self.name = name
        self.spec = spec
        # set once by the host at execution
        self.value = value

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {}
        if self.name:
            out['name'] = self.name
        if self.spec is not None:
            out['spec'] = self.spec.to_dict()
        if self.value is not None:
            out['value'] = self.value
        return out


class Cell:
    def __init__(self, code: str, inputs: Optional[List[Input]] = None,
                 outputs: Optional[List[Output]] = None,
                 messages: Optional[List[Message]] = None,
                 expr: bool = False, implicit_return: Optional[str] = None,
                 id: Optional[str] = None):
        self.id = id
        self.code = code or ""
        self.inputs: List[Input] = inputs or []
        self.outputs: List[Output] = outputs or []
        self.messages: List[Message] = messages or []
        self.expr = expr
        self.implicit_return = implicit_return

    @property
    def input_names(self) -> List[str]:
        return [i.name for i in self.inputs]

    @property
    def errors(self) -> List[Message]:
        return [m for m in self.messages if m.type == 'error']

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            'type': 'cell',
            'code': self.code,
            'inputs': [i.to_dict() for i in self.inputs],
            'outputs': [o.to_dict() for o in self.outputs],
            'messages': [m.to_dict() for m in self.messages],
            'expr': self.expr,
        }
        if self.id is not None:
            out['id'] = self.id
        if self.implicit_return is not None:
            out['implicitReturn'] = self.implicit_return
        return out


class Call:
    """A call of a function reference with wire-packed arguments."""

    def __init__(self, func: Dict[str, Any], args: Optional[List[Dict[str, Any]]] = None,
                 named_args: Optional[Dict[str, Dict[str, Any]]] = None):
        self.func = func
        self.args = args
        self.named_args = named_args
        self.value: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Call':
        return cls(data.get('func') or {}, data.get('args'), data.get('namedArgs'))

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {'type': 'call', 'func': self.func}
        if self.args is not None:
            out['args'] = self.args
        if self.named_args is not None:
            out['namedArgs'] = self.named_args
        if self.value is not None:
            out['value'] = self.value
        return out
