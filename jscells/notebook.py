import logging
from typing import Any, Dict, Iterable, List, Optional

import nbformat

from .compiler import compile_cell
from .model import Cell

logger = logging.getLogger(__name__)

JS_KERNELS = ('javascript', 'js', 'node', 'nodejs', 'ijavascript', 'jslab', 'tslab', 'deno')
JS_MAGICS = ('%%javascript', '%%js')


class NotebookCell:
    def __init__(self, idx: int, kernel: str, source: str, cell: Optional[Cell] = None):
        self.idx = idx
        self.kernel = kernel or "javascript"
        self.source = source or ""
        self.cell = cell

    def to_dict(self) -> Dict[str, Any]:
        return {'idx': self.idx, 'kernel': self.kernel, 'cell': self.cell.to_dict() if self.cell else None}


def _kernel_for_cell(nb, cell) -> str:
    """Kernel name of a cell; notebooks without a kernelspec count as JavaScript."""
    kernel = (cell.get('metadata') or {}).get('kernel')
    if not kernel:
        kernel = (nb.metadata.get('kernelspec') or {}).get('name')
    return str(kernel or 'javascript')


def _is_javascript(kernel: str) -> bool:
    kernel = kernel.lower()
    return any(kernel.startswith(name) for name in JS_KERNELS)


def _javascript_source(source: str) -> Optional[str]:
    """Cell body of a %%javascript cell (magic line blanked), else None."""
    lines = source.splitlines()
    if lines and lines[0].strip().split(' ')[0] in JS_MAGICS:
        return '\n'.join([''] + lines[1:])
    return None


def analyze_notebook(nb_path: str, builtins: Optional[Iterable[str]] = None) -> Dict[str, Any]:
    """
    Compile the JavaScript cells of a notebook and link them by name.

    Returns a capture dict:
    {
      'nb_path': str,
      'cells': List[NotebookCell],
      'graph': {'edges': [(u, v, {'type': 'uses', 'vars': set(...)}), ...]},
    }
    where an edge goes from the last cell producing a name to each later
    cell using it as an input.
    """
    nb = nbformat.read(nb_path, as_version=4)
    code_cells = [c for c in nb.cells if c.cell_type == 'code']

    cells: List[NotebookCell] = []
    last_def: Dict[str, int] = {}
    edges: List[tuple] = []

    for i, c in enumerate(code_cells):
        kernel = _kernel_for_cell(nb, c)
        source = c.source or ""
        code = _javascript_source(source)
        if code is not None:
            kernel = 'javascript'
        elif _is_javascript(kernel):
            code = source
        else:
            logger.debug("Skipping cell %d with kernel %s", i, kernel)
            continue

        info = NotebookCell(i, kernel, source, compile_cell(code, builtins=builtins, id=f'cell-{i}'))
        if info.cell.errors:
            logger.info("Cell %d has errors: %s", i, [m.message for m in info.cell.errors])

        uses: Dict[int, set] = {}
        for name in info.cell.input_names:
            if name in last_def:
                uses.setdefault(last_def[name], set()).add(name)
        for u, names in uses.items():
            edges.append((u, i, {'type': 'uses', 'vars': names}))
        for output in info.cell.outputs:
            if output.name:
                last_def[output.name] = i

        cells.append(info)

    return {'nb_path': nb_path, 'cells': cells, 'graph': {'edges': edges}}


def capture_to_json(capture: Dict[str, Any]) -> Dict[str, Any]:
    edges = []
    for u, v, data in capture['graph'].get('edges', []):
        payload = {key: sorted(value) if isinstance(value, set) else value for key, value in data.items()}
        edges.append({'source': u, 'target': v, **payload})
    return {
        'nb_path': capture.get('nb_path'),
        'cells': [c.to_dict() for c in capture['cells']],
        'edges': edges,
    }
