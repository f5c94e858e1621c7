from typing import Any, Callable, Dict, List, Optional, Tuple

from .errors import CallError
from .model import Call, Method
from .types import unpack as default_unpack


def bind_args(method: Method, call: Call, func_name: Optional[str] = None,
              unpack: Callable[[Any], Any] = default_unpack) -> Tuple[List[Any], Optional[Dict[str, Any]]]:
    """
    Map the arguments of `call` onto the parameters of `method`.

    Named arguments win over positional ones; a repeats parameter takes the
    remaining positional arguments as a list and an extends parameter the
    remaining named arguments as a dict. Returns `(args, named_args)` with
    values unpacked; raises CallError when the call does not fit.
    """
    call_args = call.args or []
    call_named = call.named_args
    args: List[Any] = []
    named_args: Optional[Dict[str, Any]] = None

    position = 0
    used_names: List[str] = []
    for param in method.params:
        if param.repeats:
            args.append([unpack(arg) for arg in call_args[position:]])
            position = len(call_args)
            break
        if param.extends:
            if call_named is not None:
                named_args = {}
                for name, arg in call_named.items():
                    if name not in used_names:
                        named_args[name] = unpack(arg)
                        used_names.append(name)
            break

        arg = None
        if call_named is not None and param.name in call_named:
            arg = call_named[param.name]
            used_names.append(param.name)
        elif position < len(call_args):
            arg = call_args[position]
            position += 1
        else:
            if not param.has_default:
                raise CallError(f"Function '{func_name}' requires parameter '{param.name}'")
            args.append(param.default)
            continue
        args.append(unpack(arg))

    if position < len(call_args):
        extra = len(call_args) - position
        raise CallError(f'Function was supplied {extra} extra arguments')
    if call_named is not None:
        extra_names = [name for name in call_named if name not in used_names]
        if extra_names:
            listed = ', '.join(f'"{name}"' for name in extra_names)
            raise CallError(f'Function was supplied extra named arguments {listed}')
    return args, named_args
