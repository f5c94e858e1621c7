import os
from typing import Any, Dict, FrozenSet, Optional

import yaml

from .builtins import JS_GLOBALS

BUILTINS_ENV = 'JSCELLS_BUILTINS'


def load_yaml(path: Optional[str]) -> Dict[str, Any]:
    if not path:
        return {}
    with open(path, 'r', encoding='utf-8') as f:
        return yaml.safe_load(f) or {}


def load_builtins(path: Optional[str] = None) -> FrozenSet[str]:
    """
    Global names to ignore when finding cell inputs.

    The YAML file (`path`, or the file named by $JSCELLS_BUILTINS) may list
    extra names under `builtins`; with `replace: true` only those names are
    used instead of the JavaScript defaults.
    """
    path = path or os.environ.get(BUILTINS_ENV)
    config = load_yaml(path)
    names = config.get('builtins') or []
    if isinstance(names, str):
        names = names.split()
    if config.get('replace'):
        return frozenset(map(str, names))
    return JS_GLOBALS | frozenset(map(str, names))
