import json
import os
from typing import Any, Dict, Set

import networkx as nx


def build_cell_graph(capture: Dict[str, Any]) -> nx.DiGraph:
    """Directed graph of notebook cells; an edge u -> v means v uses names u produces."""
    G = nx.DiGraph()
    for c in capture['cells']:
        cell = c.cell
        G.add_node(c.idx, kernel=c.kernel,
                   inputs=json.dumps(cell.input_names),
                   outputs=json.dumps([o.name for o in cell.outputs if o.name]),
                   functions=json.dumps([o.name for o in cell.outputs if o.spec is not None]),
                   messages=len(cell.messages))
    edge_accum: Dict[tuple, Set[str]] = {}
    for (u, v, d) in capture['graph']['edges']:
        edge_accum.setdefault((u, v), set()).update(set(d.get('vars', [])))
    for (u, v), vars_set in edge_accum.items():
        G.add_edge(u, v, type='uses', label=",".join(sorted(vars_set)))
    return G


def write_cell_graph(capture: Dict[str, Any], graph_path: str) -> str:
    G = build_cell_graph(capture)
    parent = os.path.dirname(graph_path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    nx.write_graphml(G, graph_path)
    return graph_path
