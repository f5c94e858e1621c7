"""
Free variable analysis for ESTree syntax trees.

Finds the identifiers a cell reads without declaring them; those become the
cell's inputs. The tree is never annotated: scopes live in a ScopeTable
(an arena of scope records addressed by index) and every captured reference
keeps the index of its enclosing scope, so resolution is a walk up parent
indices.

Scoping rules:
  - `var`, function declaration names and class declaration names belong to
    the nearest function (or the program).
  - `let` and `const` belong to the nearest block, loop or function; a loop
    head shares the scope of its body.
  - functions declare their parameters and, when named, their own name.
  - a catch clause declares its parameter for the handler only.
  - imports declare their local names at program level.
"""
from collections.abc import Mapping
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from .errors import UnsupportedSyntaxError

PROGRAM = 'program'
FUNCTION = 'function'
ARROW = 'arrow'
BLOCK = 'block'
LOOP = 'loop'
CATCH = 'catch'

# Scopes that receive hoisted declarations
_HOISTING = (PROGRAM, FUNCTION, ARROW)

_BLOCK_DECLS = {'let', 'const'}
_ARROWS = {'ArrowFunctionExpression', 'AsyncArrowFunctionExpression'}
_SKIP_KEYS = {'type', 'loc', 'range', 'start', 'end'}


class ScopeTable:
    def __init__(self):
        self.parents: List[Optional[int]] = []
        self.kinds: List[str] = []
        self.names: List[Set[str]] = []
        # id() of a scope-owning node -> its scope index
        self.node_scopes: Dict[int, int] = {}

    def open(self, kind: str, parent: Optional[int], node: Optional[Mapping] = None) -> int:
        index = len(self.kinds)
        self.parents.append(parent)
        self.kinds.append(kind)
        self.names.append(set())
        if node is not None:
            self.node_scopes[id(node)] = index
        return index

    def declare(self, scope: int, name: str):
        self.names[scope].add(name)

    def hoisting_scope(self, scope: int) -> int:
        while self.kinds[scope] not in _HOISTING:
            scope = self.parents[scope]
        return scope

    def declared(self, node: Mapping) -> Set[str]:
        """Names declared in the scope owned by `node` (empty if it owns none)."""
        index = self.node_scopes.get(id(node))
        return set(self.names[index]) if index is not None else set()

    def is_bound(self, name: str, scope: Optional[int]) -> bool:
        while scope is not None:
            if name in ('this', 'arguments') and self.kinds[scope] == FUNCTION:
                return True
            if name in self.names[scope]:
                return True
            scope = self.parents[scope]
        return False


def _is_node(value: Any) -> bool:
    return isinstance(value, Mapping) and 'type' in value


def iter_children(node: Mapping) -> Iterator[Mapping]:
    """Child nodes in field order (source order for ESTree trees)."""
    for key, value in node.items():
        if key in _SKIP_KEYS:
            continue
        if _is_node(value):
            yield value
        elif isinstance(value, list):
            for item in value:
                if _is_node(item):
                    yield item


class _Collector:
    def __init__(self):
        self.scopes = ScopeTable()
        self.candidates: List[Tuple[str, int]] = []

    def run(self, program: Mapping):
        root = self.scopes.open(PROGRAM, None, program)
        self.root = root
        for child in iter_children(program):
            self.visit(child, root)

    def capture(self, name: str, scope: int):
        self.candidates.append((name, scope))

    def visit(self, node: Optional[Mapping], scope: int):
        if node is None:
            return
        handler = getattr(self, 'visit_' + node['type'], None)
        if handler is not None:
            handler(node, scope)
        else:
            for child in iter_children(node):
                self.visit(child, scope)

    def visit_all(self, nodes: Iterable[Optional[Mapping]], scope: int):
        for node in nodes:
            self.visit(node, scope)

    # declarations

    def declare_pattern(self, node: Mapping, scope: int):
        kind = node['type']
        if kind == 'Identifier':
            self.scopes.declare(scope, node['name'])
        elif kind == 'ObjectPattern':
            for prop in node['properties']:
                if prop['type'] == 'RestElement':
                    self.declare_pattern(prop['argument'], scope)
                else:
                    self.declare_pattern(prop['value'], scope)
        elif kind == 'ArrayPattern':
            for element in node['elements']:
                if element is not None:
                    self.declare_pattern(element, scope)
        elif kind == 'RestElement':
            self.declare_pattern(node['argument'], scope)
        elif kind == 'AssignmentPattern':
            self.declare_pattern(node['left'], scope)
        else:
            raise UnsupportedSyntaxError('Unrecognized pattern type: ' + kind)

    def visit_pattern_refs(self, node: Mapping, scope: int):
        # defaults and computed keys inside a declaring pattern are references
        kind = node['type']
        if kind == 'ObjectPattern':
            for prop in node['properties']:
                if prop['type'] == 'RestElement':
                    self.visit_pattern_refs(prop['argument'], scope)
                    continue
                if prop.get('computed'):
                    self.visit(prop['key'], scope)
                self.visit_pattern_refs(prop['value'], scope)
        elif kind == 'ArrayPattern':
            for element in node['elements']:
                if element is not None:
                    self.visit_pattern_refs(element, scope)
        elif kind == 'RestElement':
            self.visit_pattern_refs(node['argument'], scope)
        elif kind == 'AssignmentPattern':
            self.visit_pattern_refs(node['left'], scope)
            self.visit(node['right'], scope)

    def visit_VariableDeclaration(self, node: Mapping, scope: int):
        if node.get('kind') in _BLOCK_DECLS:
            target = scope
        else:
            target = self.scopes.hoisting_scope(scope)
        for declarator in node['declarations']:
            self.declare_pattern(declarator['id'], target)
            self.visit_pattern_refs(declarator['id'], scope)
            self.visit(declarator.get('init'), scope)

    def visit_FunctionDeclaration(self, node: Mapping, scope: int):
        if node.get('id'):
            self.scopes.declare(self.scopes.hoisting_scope(scope), node['id']['name'])
        self.visit_function(node, scope)

    def visit_FunctionExpression(self, node: Mapping, scope: int):
        self.visit_function(node, scope)

    def visit_ArrowFunctionExpression(self, node: Mapping, scope: int):
        self.visit_function(node, scope)

    # esprima tags async functions with their own node types
    visit_AsyncFunctionDeclaration = visit_FunctionDeclaration
    visit_AsyncFunctionExpression = visit_FunctionExpression
    visit_AsyncArrowFunctionExpression = visit_ArrowFunctionExpression

    def visit_function(self, node: Mapping, scope: int):
        kind = ARROW if node['type'] in _ARROWS else FUNCTION
        inner = self.scopes.open(kind, scope, node)
        if node.get('id'):
            self.scopes.declare(inner, node['id']['name'])
        params = node.get('params') or []
        for param in params:
            self.declare_pattern(param, inner)
        for param in params:
            self.visit_pattern_refs(param, inner)
        self.visit(node.get('body'), inner)

    def visit_ClassDeclaration(self, node: Mapping, scope: int):
        if node.get('id'):
            self.scopes.declare(self.scopes.hoisting_scope(scope), node['id']['name'])
        self.visit(node.get('superClass'), scope)
        self.visit(node.get('body'), scope)

    def visit_ClassExpression(self, node: Mapping, scope: int):
        self.visit(node.get('superClass'), scope)
        self.visit(node.get('body'), scope)

    def visit_CatchClause(self, node: Mapping, scope: int):
        inner = self.scopes.open(CATCH, scope, node)
        if node.get('param'):
            self.declare_pattern(node['param'], inner)
            self.visit_pattern_refs(node['param'], inner)
        self.visit(node.get('body'), inner)

    def visit_ImportDeclaration(self, node: Mapping, scope: int):
        for specifier in node.get('specifiers') or []:
            self.scopes.declare(self.root, specifier['local']['name'])

    # scopes

    def visit_BlockStatement(self, node: Mapping, scope: int):
        inner = self.scopes.open(BLOCK, scope, node)
        self.visit_all(node['body'], inner)

    def visit_loop(self, node: Mapping, scope: int):
        inner = self.scopes.open(LOOP, scope, node)
        for child in iter_children(node):
            self.visit(child, inner)

    visit_ForStatement = visit_loop
    visit_ForInStatement = visit_loop
    visit_ForOfStatement = visit_loop

    # references

    def visit_Identifier(self, node: Mapping, scope: int):
        self.capture(node['name'], scope)

    def visit_ThisExpression(self, node: Mapping, scope: int):
        self.capture('this', scope)

    def visit_MemberExpression(self, node: Mapping, scope: int):
        self.visit(node['object'], scope)
        if node.get('computed'):
            self.visit(node['property'], scope)

    def visit_Property(self, node: Mapping, scope: int):
        if node.get('computed'):
            self.visit(node['key'], scope)
        self.visit(node.get('value'), scope)

    visit_MethodDefinition = visit_Property
    visit_PropertyDefinition = visit_Property

    def visit_LabeledStatement(self, node: Mapping, scope: int):
        self.visit(node['body'], scope)

    def visit_ExportNamedDeclaration(self, node: Mapping, scope: int):
        self.visit(node.get('declaration'), scope)
        # re-exports from another module reference nothing local
        if node.get('source') is None:
            for specifier in node.get('specifiers') or []:
                self.visit(specifier['local'], scope)

    def _ignore(self, node: Mapping, scope: int):
        pass

    visit_BreakStatement = _ignore
    visit_ContinueStatement = _ignore
    visit_MetaProperty = _ignore
    visit_ExportAllDeclaration = _ignore


class ScopeAnalysis:
    def __init__(self, scopes: ScopeTable, candidates: List[Tuple[str, int]]):
        self.scopes = scopes
        self.candidates = candidates

    def free_names(self, ignore: Optional[Iterable[str]] = None) -> List[str]:
        ignore = set(ignore or ())
        found: List[str] = []
        seen: Set[str] = set()
        for name, scope in self.candidates:
            if name == 'undefined' or name in seen or name in ignore:
                continue
            if not self.scopes.is_bound(name, scope):
                seen.add(name)
                found.append(name)
        return found


def analyze_scopes(ast: Mapping) -> ScopeAnalysis:
    if not (isinstance(ast, Mapping) and ast.get('type') == 'Program'):
        raise TypeError('Source must be an ESTree Program node')
    collector = _Collector()
    collector.run(ast)
    return ScopeAnalysis(collector.scopes, collector.candidates)


def find_globals(ast: Mapping, ignore: Optional[Iterable[str]] = None) -> List[str]:
    """Names referenced but not declared in `ast`, in order of first use."""
    return analyze_scopes(ast).free_names(ignore)


def find_free_identifiers(ast: Mapping, options: Optional[Mapping] = None) -> List[str]:
    options = options or {}
    return find_globals(ast, options.get('builtins'))
