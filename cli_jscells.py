#!/usr/bin/env python
import argparse
import json
import logging
import sys

from jscells.compiler import compile_cell
from jscells.graph import write_cell_graph
from jscells.notebook import analyze_notebook, capture_to_json
from jscells.utils import load_builtins


def cmd_compile(args):
    if args.code is not None:
        code = args.code
    elif args.file and args.file != '-':
        with open(args.file, 'r', encoding='utf-8') as f:
            code = f.read()
    else:
        code = sys.stdin.read()
    cell = compile_cell(code, expr=args.expr, builtins=load_builtins(args.builtins))
    print(json.dumps(cell.to_dict(), indent=2))
    if cell.errors:
        raise SystemExit(2)


def cmd_notebook(args):
    capture = analyze_notebook(args.notebook, builtins=load_builtins(args.builtins))
    print(json.dumps(capture_to_json(capture), indent=2))
    if args.graph:
        path = write_cell_graph(capture, args.graph)
        print(f"Cell graph written to {path}", file=sys.stderr)


def main():
    parser = argparse.ArgumentParser(
        description='Compile JavaScript cells into inputs, outputs and function specifications'
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Log debug output')
    sub = parser.add_subparsers(dest='cmd', required=True)

    pc = sub.add_parser('compile', help='Compile a JavaScript cell')
    pc.add_argument('file', nargs='?', help='Path to a .js file (stdin when omitted or -)')
    pc.add_argument('--code', help='Source code given inline instead of a file')
    pc.add_argument('--expr', action='store_true', help='Require a single, simple expression')
    pc.add_argument('--builtins', help='YAML file with extra global names to ignore')
    pc.set_defaults(func=cmd_compile)

    pn = sub.add_parser('notebook', help='Compile the JavaScript cells of a notebook')
    pn.add_argument('notebook', help='Path to notebook.ipynb')
    pn.add_argument('--graph', help='Write the cell dependency graph as GraphML to this path')
    pn.add_argument('--builtins', help='YAML file with extra global names to ignore')
    pn.set_defaults(func=cmd_notebook)

    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    args.func(args)


if __name__ == '__main__':
    main()
