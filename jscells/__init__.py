"""jscells core library.

Key entry points:
- compile_cell (free inputs, output and function spec of a JavaScript cell)
- find_globals (free variable analysis of an ESTree program)
- extract_function_spec (callable specification from a declaration and its doc)
- pack / unpack (wire values)
- bind_args (calling convention)
- Context (function table, call evaluation and cell execution)
- analyze_notebook (compile the JavaScript cells of a notebook)
"""
from .binding import bind_args
from .compiler import compile_cell, parse
from .context import Context, Function, Library
from .errors import (
    CallError,
    ExecutionError,
    JsCellsError,
    LiteralFormatError,
    ResolveError,
    UnsupportedSyntaxError,
    pack_error,
)
from .function_spec import extract_function_spec, function_spec_from_callable
from .graph import build_cell_graph, write_cell_graph
from .literals import parse_value
from .model import Call, Cell, FunctionSpec, Input, Message, Method, Output, Param, ParamKind
from .notebook import analyze_notebook
from .scope import find_free_identifiers, find_globals
from .types import coerce_array, coerced_array_type, pack, type_of, unpack
