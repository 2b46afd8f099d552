"""Python front end: lower a module's AST into ops and a symbol table.

Lowering rules, in short:

    module                  leave(enter, nextstate, <stmt>, nextstate, <stmt>, ...)
    def at module/class     CodeObject bound in the namespace, body
                            leavesub(lineseq(nextstate, <stmt>, ...));
                            nothing else is emitted where the def appears
    decorators, defaults,   evaluated where the def appears: null(<ops>) in
    annotations             the enclosing body, or inside the anoncode
    nested def, lambda      anoncode(...) with the body inline
    class                   scope(<decorators>, <bases>, <statements>), methods
                            go to the nested namespace <module>.<Class>
    call                    entersub(pushmark, <args>, <callee>)
    if / if-else            and(test, block) / cond_expr(test, block, block)
    for, while, comp.       leaveloop(enteriter|enterloop(...), lineseq(...))
    try                     leavetry(entertry, lineseq(...), scope(handler)...)

Every AST node type without a rule becomes a plain op named after the node
class, with its children lowered, so new syntax is counted rather than
rejected.
"""

from __future__ import annotations

import ast
from pathlib import Path
from typing import Iterable, Optional, Union

from ..exceptions import ParsingError
from ..logging_config import get_logger
from ..optree import CodeObject, Namespace, Node, OpFamily, Program

logger = get_logger(__name__)

# Operator and context nodes carry no structure of their own.
_MARKER_NODES = (ast.expr_context, ast.boolop, ast.operator, ast.unaryop, ast.cmpop)

FunctionNode = Union[ast.FunctionDef, ast.AsyncFunctionDef]


def _op_name(op: ast.AST) -> str:
    return type(op).__name__.lower()


class OpTreeBuilder(ast.NodeVisitor):
    """Lower one module. Statement visitors return an op or ``None``;
    expression visitors always return an op."""

    def __init__(self, module: str = "__main__"):
        self.symbols = Namespace(module)
        self._namespace = self.symbols
        self._function_depth = 0

    # -- entry points ---------------------------------------------------

    def build(self, tree: ast.Module, source: str = "<string>") -> Program:
        main = Node("leave", children=[Node("enter"), *self._statements(tree.body)])
        return Program(main=main, symbols=self.symbols, source=source)

    # -- helpers --------------------------------------------------------

    def _statements(self, body: Iterable[ast.stmt]) -> list[Node]:
        ops: list[Node] = []
        for stmt in body:
            op = self.visit(stmt)
            if op is None:
                continue
            ops.append(Node("nextstate", line=getattr(stmt, "lineno", None)))
            ops.append(op)
        return ops

    def _block(self, body: list[ast.stmt]) -> Node:
        return Node("leave", children=[Node("enter"), *self._statements(body)])

    def _ops(self, nodes: Iterable[Optional[ast.AST]]) -> list[Node]:
        return [self.visit(node) for node in nodes if node is not None]

    def _node(
        self, name: str, family: OpFamily, source: ast.AST, children: Iterable[Node] = ()
    ) -> Node:
        return Node(name, family, list(children), line=getattr(source, "lineno", None))

    def generic_visit(self, node: ast.AST) -> Node:
        children: list[Node] = []
        for child in ast.iter_child_nodes(node):
            if isinstance(child, _MARKER_NODES):
                continue
            if isinstance(child, ast.stmt):
                children.extend(self._statements([child]))
            else:
                children.append(self.visit(child))
        return self._node(_op_name(node), OpFamily.PLAIN, node, children)

    # -- definitions ----------------------------------------------------

    def visit_FunctionDef(self, node: FunctionNode) -> Optional[Node]:
        signature = self._signature(node)
        if self._function_depth:
            return self._node(
                "anoncode", OpFamily.PLAIN, node, [*signature, *self._function_body(node)]
            )

        code = CodeObject(self._namespace.qualify(node.name))
        self._namespace.bind(node.name, code)
        code.body = self._node("leavesub", OpFamily.UNARY, node, self._function_body(node))
        if signature:
            return self._node("null", OpFamily.PLAIN, node, signature)
        return None

    visit_AsyncFunctionDef = visit_FunctionDef

    def _function_body(self, node: FunctionNode) -> list[Node]:
        self._function_depth += 1
        try:
            statements = self._statements(node.body)
        finally:
            self._function_depth -= 1
        return [Node("lineseq", children=statements)]

    def _signature(self, node: Union[FunctionNode, ast.Lambda]) -> list[Node]:
        """Decorators, defaults and annotations, all evaluated at definition time."""
        args = node.args
        exprs: list[Optional[ast.expr]] = [
            *getattr(node, "decorator_list", ()),
            *args.defaults,
            *args.kw_defaults,
        ]
        if not isinstance(node, ast.Lambda):
            params = [*args.posonlyargs, *args.args, args.vararg, *args.kwonlyargs, args.kwarg]
            exprs.extend(param.annotation for param in params if param is not None)
            exprs.append(node.returns)
        return self._ops(exprs)

    def visit_Lambda(self, node: ast.Lambda) -> Node:
        signature = self._signature(node)
        self._function_depth += 1
        try:
            body = self.visit(node.body)
        finally:
            self._function_depth -= 1
        return self._node("anoncode", OpFamily.PLAIN, node, [*signature, body])

    def visit_ClassDef(self, node: ast.ClassDef) -> Node:
        header = self._ops(
            [*node.decorator_list, *node.bases, *(kw.value for kw in node.keywords)]
        )
        if self._function_depth:
            return self._node("scope", OpFamily.PLAIN, node, [*header, *self._statements(node.body)])

        enclosing = self._namespace
        self._namespace = enclosing.child(node.name)
        try:
            statements = self._statements(node.body)
        finally:
            self._namespace = enclosing
        return self._node("scope", OpFamily.PLAIN, node, [*header, *statements])

    # -- simple statements ----------------------------------------------

    def visit_Expr(self, node: ast.Expr) -> Node:
        return self.visit(node.value)

    def visit_Assign(self, node: ast.Assign) -> Node:
        self._bind_targets(node.targets, node.value)
        if len(node.targets) == 1 and isinstance(node.targets[0], (ast.Name, ast.Attribute)):
            return self._node(
                "sassign", OpFamily.BINARY, node, [self.visit(node.value), self.visit(node.targets[0])]
            )
        return self._node(
            "aassign", OpFamily.BINARY, node, [self.visit(node.value), *self._ops(node.targets)]
        )

    def visit_AnnAssign(self, node: ast.AnnAssign) -> Node:
        if node.value is None:
            return self.visit(node.target)
        self._bind_targets([node.target], node.value)
        return self._node(
            "sassign", OpFamily.BINARY, node, [self.visit(node.value), self.visit(node.target)]
        )

    def visit_AugAssign(self, node: ast.AugAssign) -> Node:
        self._bind_targets([node.target], None)
        return self._node(
            f"{_op_name(node.op)}_assign",
            OpFamily.BINARY,
            node,
            [self.visit(node.target), self.visit(node.value)],
        )

    def visit_Return(self, node: ast.Return) -> Node:
        return self._node("return", OpFamily.LIST, node, [Node("pushmark"), *self._ops([node.value])])

    def visit_Delete(self, node: ast.Delete) -> Node:
        return self._node("delete", OpFamily.UNARY, node, self._ops(node.targets))

    def visit_Pass(self, node: ast.Pass) -> Node:
        return self._node("stub", OpFamily.PLAIN, node)

    def visit_Break(self, node: ast.Break) -> Node:
        return self._node("last", OpFamily.PLAIN, node)

    def visit_Continue(self, node: ast.Continue) -> Node:
        return self._node("next", OpFamily.PLAIN, node)

    def visit_Raise(self, node: ast.Raise) -> Node:
        return self._node(
            "die", OpFamily.LIST, node, [Node("pushmark"), *self._ops([node.exc, node.cause])]
        )

    def visit_Assert(self, node: ast.Assert) -> Node:
        return self._node(
            "assert", OpFamily.LIST, node, [Node("pushmark"), *self._ops([node.test, node.msg])]
        )

    def visit_Import(self, node: ast.Import) -> Node:
        if not self._function_depth:
            for alias in node.names:
                self._namespace.bind(alias.asname or alias.name.split(".")[0], alias.name)
        return self._node("require", OpFamily.UNARY, node)

    def visit_ImportFrom(self, node: ast.ImportFrom) -> Node:
        if not self._function_depth:
            module = "." * node.level + (node.module or "")
            for alias in node.names:
                if alias.name != "*":
                    self._namespace.bind(alias.asname or alias.name, f"{module}.{alias.name}")
        return self._node("require", OpFamily.UNARY, node)

    def visit_Global(self, node: ast.Global) -> Node:
        return self._node("null", OpFamily.PLAIN, node)

    visit_Nonlocal = visit_Global

    # -- compound statements --------------------------------------------

    def visit_If(self, node: ast.If) -> Node:
        test = self.visit(node.test)
        body = self._block(node.body)
        if not node.orelse:
            return self._node("and", OpFamily.LOGICAL, node, [test, body])
        if len(node.orelse) == 1 and isinstance(node.orelse[0], ast.If):
            orelse = self.visit(node.orelse[0])
        else:
            orelse = self._block(node.orelse)
        return self._node("cond_expr", OpFamily.CONDITIONAL, node, [test, body, orelse])

    def visit_For(self, node: Union[ast.For, ast.AsyncFor]) -> Node:
        enter = self._node(
            "enteriter", OpFamily.LOOP, node, [Node("pushmark"), self.visit(node.iter), self.visit(node.target)]
        )
        return self._loop(node, enter, node.body, node.orelse)

    visit_AsyncFor = visit_For

    def visit_While(self, node: ast.While) -> Node:
        enter = self._node("enterloop", OpFamily.LOOP, node, [self.visit(node.test)])
        return self._loop(node, enter, node.body, node.orelse)

    def _loop(self, node: ast.AST, enter: Node, body: list[ast.stmt], orelse: list[ast.stmt]) -> Node:
        children = [enter, Node("lineseq", children=[*self._statements(body), Node("unstack")])]
        if orelse:
            children.append(self._block(orelse))
        return self._node("leaveloop", OpFamily.BINARY, node, children)

    def visit_Try(self, node: ast.Try) -> Node:
        children = [
            self._node("entertry", OpFamily.LOGICAL, node),
            Node("lineseq", children=self._statements(node.body)),
        ]
        for handler in node.handlers:
            children.append(
                self._node(
                    "scope",
                    OpFamily.PLAIN,
                    handler,
                    [*self._ops([handler.type]), *self._statements(handler.body)],
                )
            )
        for extra in (node.orelse, node.finalbody):
            if extra:
                children.append(Node("scope", children=self._statements(extra)))
        return self._node("leavetry", OpFamily.PLAIN, node, children)

    visit_TryStar = visit_Try

    def visit_With(self, node: Union[ast.With, ast.AsyncWith]) -> Node:
        items: list[Node] = []
        for item in node.items:
            items.extend(self._ops([item.context_expr, item.optional_vars]))
        return self._node("scope", OpFamily.PLAIN, node, [*items, *self._statements(node.body)])

    visit_AsyncWith = visit_With

    # -- expressions ----------------------------------------------------

    def visit_Constant(self, node: ast.Constant) -> Node:
        return self._node("const", OpFamily.PLAIN, node)

    def visit_Name(self, node: ast.Name) -> Node:
        return self._node("padsv", OpFamily.PLAIN, node)

    def visit_Attribute(self, node: ast.Attribute) -> Node:
        return self._node("attr", OpFamily.UNARY, node, [self.visit(node.value)])

    def visit_Subscript(self, node: ast.Subscript) -> Node:
        return self._node(
            "subscript", OpFamily.BINARY, node, [self.visit(node.value), self.visit(node.slice)]
        )

    def visit_Slice(self, node: ast.Slice) -> Node:
        return self._node(
            "slice", OpFamily.LIST, node, [Node("pushmark"), *self._ops([node.lower, node.upper, node.step])]
        )

    def visit_Call(self, node: ast.Call) -> Node:
        args = self._ops([*node.args, *(kw.value for kw in node.keywords)])
        return self._node(
            "entersub", OpFamily.UNARY, node, [Node("pushmark"), *args, self.visit(node.func)]
        )

    def visit_BinOp(self, node: ast.BinOp) -> Node:
        # a + b + c nests to the left; lower the left spine iteratively
        spine: list[ast.BinOp] = []
        current: ast.expr = node
        while isinstance(current, ast.BinOp):
            spine.append(current)
            current = current.left
        result = self.visit(current)
        for binop in reversed(spine):
            result = self._node(
                _op_name(binop.op), OpFamily.BINARY, binop, [result, self.visit(binop.right)]
            )
        return result

    def visit_UnaryOp(self, node: ast.UnaryOp) -> Node:
        return self._node(_op_name(node.op), OpFamily.UNARY, node, [self.visit(node.operand)])

    def visit_Compare(self, node: ast.Compare) -> Node:
        return self._node(
            _op_name(node.ops[0]),
            OpFamily.BINARY,
            node,
            [self.visit(node.left), *self._ops(node.comparators)],
        )

    def visit_BoolOp(self, node: ast.BoolOp) -> Node:
        # a and b and c -> and(and(a, b), c)
        name = _op_name(node.op)
        values = self._ops(node.values)
        result = values[0]
        for value in values[1:]:
            result = self._node(name, OpFamily.LOGICAL, node, [result, value])
        return result

    def visit_IfExp(self, node: ast.IfExp) -> Node:
        return self._node(
            "cond_expr", OpFamily.CONDITIONAL, node, self._ops([node.test, node.body, node.orelse])
        )

    def visit_NamedExpr(self, node: ast.NamedExpr) -> Node:
        return self._node(
            "sassign", OpFamily.BINARY, node, [self.visit(node.value), self.visit(node.target)]
        )

    def _literal(self, name: str, node: ast.AST, elements: Iterable[Optional[ast.AST]]) -> Node:
        return self._node(name, OpFamily.LIST, node, [Node("pushmark"), *self._ops(elements)])

    def visit_List(self, node: ast.List) -> Node:
        return self._literal("anonlist", node, node.elts)

    visit_Tuple = visit_List
    visit_Set = visit_List

    def visit_Dict(self, node: ast.Dict) -> Node:
        elements: list[Optional[ast.AST]] = []
        for key, value in zip(node.keys, node.values):
            elements.extend([key, value])
        return self._literal("anonhash", node, elements)

    def visit_JoinedStr(self, node: ast.JoinedStr) -> Node:
        return self._literal("concat", node, node.values)

    def visit_FormattedValue(self, node: ast.FormattedValue) -> Node:
        return self._node(
            "stringify", OpFamily.UNARY, node, self._ops([node.value, node.format_spec])
        )

    def _comprehension(self, node: ast.AST, generators: list[ast.comprehension], elements: list[ast.expr]) -> Node:
        children: list[Node] = []
        for generator in generators:
            children.append(
                self._node(
                    "enteriter",
                    OpFamily.LOOP,
                    generator.iter,
                    [
                        Node("pushmark"),
                        self.visit(generator.iter),
                        self.visit(generator.target),
                        *self._ops(generator.ifs),
                    ],
                )
            )
        children.append(Node("lineseq", children=[*self._ops(elements), Node("unstack")]))
        return self._node("leaveloop", OpFamily.BINARY, node, children)

    def visit_ListComp(self, node: Union[ast.ListComp, ast.SetComp, ast.GeneratorExp]) -> Node:
        return self._comprehension(node, node.generators, [node.elt])

    visit_SetComp = visit_ListComp
    visit_GeneratorExp = visit_ListComp

    def visit_DictComp(self, node: ast.DictComp) -> Node:
        return self._comprehension(node, node.generators, [node.key, node.value])

    def visit_Starred(self, node: ast.Starred) -> Node:
        return self._node("starred", OpFamily.UNARY, node, [self.visit(node.value)])

    def visit_Await(self, node: ast.Await) -> Node:
        return self._node("await", OpFamily.UNARY, node, [self.visit(node.value)])

    def visit_Yield(self, node: ast.Yield) -> Node:
        return self._node("yield", OpFamily.UNARY, node, self._ops([node.value]))

    def visit_YieldFrom(self, node: ast.YieldFrom) -> Node:
        return self._node("yield_from", OpFamily.UNARY, node, [self.visit(node.value)])

    # -- symbol table ---------------------------------------------------

    def _bind_targets(self, targets: list[ast.expr], value: Optional[ast.expr]) -> None:
        """Record module- and class-level name bindings.

        ``g = f`` binds ``g`` to the same code object as ``f``; every other
        assignment is a data binding.
        """
        if self._function_depth:
            return
        code = self._resolve_code(value) if value is not None else None
        for target in targets:
            if isinstance(target, ast.Name):
                self._namespace.bind(target.id, code)
            elif isinstance(target, (ast.Tuple, ast.List)):
                self._bind_targets(list(target.elts), None)

    def _resolve_code(self, expr: ast.expr) -> Optional[CodeObject]:
        path: list[str] = []
        while isinstance(expr, ast.Attribute):
            path.append(expr.attr)
            expr = expr.value
        if not isinstance(expr, ast.Name):
            return None
        path.append(expr.id)
        path.reverse()

        # class bodies can see module-level names
        for start in dict.fromkeys([self._namespace, self.symbols]):
            entry = None
            scope: Optional[Namespace] = start
            for part in path:
                if scope is None:
                    entry = None
                    break
                entry = scope.entries.get(part)
                scope = entry if isinstance(entry, Namespace) else None
            if entry is not None and not isinstance(entry, Namespace):
                return entry.code
        return None


def lower_source(source: str, filename: str = "<string>", module: str = "__main__") -> Program:
    """Parse Python source and lower it into a Program.

    Raises:
        ParsingError: If the source is not valid Python.
    """
    try:
        tree = ast.parse(source, filename=filename)
    except SyntaxError as e:
        raise ParsingError(filename, f"{e.msg} (line {e.lineno})")
    except ValueError as e:
        # e.g. source containing null bytes
        raise ParsingError(filename, str(e))
    except RecursionError:
        raise ParsingError(filename, "nesting too deep")

    try:
        program = OpTreeBuilder(module).build(tree, source=filename)
    except RecursionError:
        raise ParsingError(filename, "nesting too deep")

    logger.debug(f"Lowered {filename}: {program.main.size()} ops in main body")
    return program


def lower_file(path: Path, module: Optional[str] = None) -> Program:
    """Read and lower a Python file. The module name defaults to the stem."""
    source = path.read_text(encoding="utf-8", errors="replace")
    return lower_source(source, filename=str(path), module=module or path.stem)
