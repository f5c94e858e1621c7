"""
A hosting context for compiled cells.

The context keeps the functions produced by executed cells and imported
libraries, resolves function references from call descriptors and invokes
them through the argument binding convention. Running cell code is left to
an evaluator supplied by the host. A context is not thread-safe: use one
per thread, one call at a time.
"""
import logging
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from .binding import bind_args
from .compiler import compile_cell
from .errors import ResolveError, pack_error
from .function_spec import function_spec_from_callable
from .model import Call, Cell, FunctionSpec, Message, Output
from .types import pack, unpack

logger = logging.getLogger(__name__)

UNDEFINED_OUTPUT = 'Cell output value is undefined'

# evaluator(cell, input_names, input_values) -> list of output values
Evaluator = Callable[[Cell, List[str], List[Any]], List[Any]]


class Function:
    """A callable with the specification used to bind calls to it."""

    def __init__(self, name: str, body: Callable, spec: Optional[FunctionSpec] = None,
                 id: Optional[str] = None):
        self.name = name
        self.body = body
        self.spec = spec or function_spec_from_callable(body, name)
        self.id = id

    def __call__(self, *args, **kwargs):
        return self.body(*args, **kwargs)

    def __repr__(self):
        return f'Function({self.name!r}, id={self.id!r})'


class Library:
    def __init__(self, name: str, funcs: Optional[Dict[str, Function]] = None):
        self.name = name
        self.funcs: Dict[str, Function] = dict(funcs or {})

    @classmethod
    def from_callables(cls, name: str, callables: Iterable[Callable]) -> 'Library':
        funcs = {}
        for body in callables:
            func = Function(body.__name__, body)
            funcs[func.name] = func
        return cls(name, funcs)


class Context:
    def __init__(self, id: str):
        if not id:
            raise ValueError('id is required')
        self.id = id
        self._values: Dict[str, Function] = {}
        self._libraries: Dict[str, Library] = {}

    def import_library(self, library: Library):
        self._libraries[library.name] = library

    def register(self, func: Function, cell_id: Optional[str] = None) -> Dict[str, Any]:
        """Keep `func` so that calls can refer to it by id; returns its packed reference."""
        func.id = f'{cell_id}@{func.name}' if cell_id else func.name
        self._values[func.id] = func
        return self.pack(func)

    def pack(self, value: Any) -> Dict[str, Any]:
        return pack(value, context=self)

    def unpack(self, pkg: Optional[Mapping]) -> Any:
        return unpack(pkg)

    def resolve(self, ref: Mapping) -> Function:
        """Find a function by `id`, by `library` and `name`, or by `name` alone."""
        value = None
        if ref.get('id'):
            value = self._values.get(ref['id'])
        elif ref.get('library'):
            library = self._libraries.get(ref['library'])
            if library is not None:
                value = library.funcs.get(ref.get('name'))
        else:
            name = ref.get('name')
            logger.debug("Resolving %r across all libraries", name)
            for library in self._libraries.values():
                value = library.funcs.get(name)
                if value is not None:
                    break
        if value is None:
            raise ResolveError(f'Could not resolve value "{ref.get("id") or ref.get("name")}"')
        return value

    def evaluate_call(self, call: Call) -> Call:
        func = self.resolve(call.func)
        method = func.spec.method
        args, named_args = bind_args(method, call, func.name, unpack=self.unpack)
        if method.params and method.params[-1].repeats:
            args = args[:-1] + list(args[-1])
        value = func.body(*args, **(named_args or {}))
        if value is not None:
            call.value = self.pack(value)
        return call

    def compile(self, code: str, expr: bool = False, id: Optional[str] = None) -> Cell:
        return compile_cell(code, expr=expr, id=id)

    def _collect_inputs(self, cell: Cell):
        names, values = [], []
        for input_ in cell.inputs:
            value = input_.value
            if value is not None and value.get('type') == 'function':
                data = value.get('data') or {}
                if data.get('context') != self.id:
                    raise ResolveError(f'Function "{data.get("name")}" lives in another context')
                names.append(input_.name)
                values.append(self.resolve(data))
                continue
            names.append(input_.name)
            values.append(self.unpack(value))
        return names, values

    def execute(self, cell: Cell, evaluator: Evaluator) -> Cell:
        """
        Run a compiled cell with a host evaluator and record its outputs.

        Failures raised by the evaluator become error messages on the cell;
        output values are packed, and function outputs registered so they
        can be called later.
        """
        names, values = self._collect_inputs(cell)
        try:
            result = evaluator(cell, names, values)
        except Exception as exc:
            logger.debug("Cell %s raised %r", cell.id, exc)
            cell.messages.append(pack_error(exc))
            return cell
        result = list(result or [])
        if not cell.outputs and cell.implicit_return is not None and result:
            # unnamed result of a trailing expression
            cell.outputs.append(Output())
        for index, output in enumerate(cell.outputs):
            if index >= len(result):
                cell.messages.append(Message(UNDEFINED_OUTPUT))
                continue
            value = result[index]
            if callable(value) and not isinstance(value, Function):
                name = output.name or getattr(value, '__name__', 'anonymous')
                value = Function(name, value, spec=output.spec)
            if isinstance(value, Function):
                output.value = self.register(value, cell.id)
            else:
                output.value = self.pack(value)
        return cell
