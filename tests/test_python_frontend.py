"""Tests for frontends/python_ast.py - lowering Python source into op trees."""

import sys
import textwrap

import pytest

from fathom import analyze_source
from fathom.exceptions import DegenerateInputError, ParsingError
from fathom.frontends import lower_file, lower_source
from fathom.frontends.python_ast import OpTreeBuilder
from fathom.optree import CodeObject, Namespace, OpFamily


def _lower(source, **kwargs):
    return lower_source(textwrap.dedent(source), **kwargs)


def _names(node):
    """Op names in pre-order."""
    names = []
    stack = [node]
    while stack:
        current = stack.pop()
        names.append(current.name)
        stack.extend(reversed(current.children))
    return names


class TestMainBody:
    """Test lowering of top-level statements."""

    def test_single_call(self):
        program = _lower("print('hello')")
        assert _names(program.main) == [
            "leave",
            "enter",
            "nextstate",
            "entersub",
            "pushmark",
            "const",
            "padsv",
        ]

    def test_statement_boundaries_carry_lines(self):
        program = _lower(
            """
            x = 1
            y = 2
            """
        )
        lines = [op.line for op in program.main.children if op.name == "nextstate"]
        assert lines == [2, 3]

    def test_assignment(self):
        program = _lower("x = y + 1")
        assign = program.main.children[2]
        assert assign.name == "sassign"
        assert assign.family is OpFamily.BINARY
        assert [child.name for child in assign.children] == ["add", "padsv"]

    def test_tuple_unpacking_is_list_assignment(self):
        program = _lower("a, b = b, a")
        assert program.main.children[2].name == "aassign"

    def test_if_without_else(self):
        program = _lower(
            """
            if x:
                y()
            """
        )
        op = program.main.children[2]
        assert op.name == "and"
        assert op.family is OpFamily.LOGICAL

    def test_if_else_is_conditional(self):
        program = _lower(
            """
            if x:
                y()
            elif z:
                w()
            else:
                v()
            """
        )
        op = program.main.children[2]
        assert op.name == "cond_expr"
        assert op.children[2].name == "cond_expr"

    def test_for_loop(self):
        program = _lower(
            """
            for item in items:
                handle(item)
            """
        )
        loop = program.main.children[2]
        assert loop.name == "leaveloop"
        assert loop.children[0].name == "enteriter"
        assert loop.children[0].family is OpFamily.LOOP
        assert loop.children[1].children[-1].name == "unstack"

    def test_comprehension_is_a_loop(self):
        program = _lower("squares = [n * n for n in range(10)]")
        assert "enteriter" in _names(program.main)

    def test_try_block(self):
        program = _lower(
            """
            try:
                risky()
            except ValueError:
                pass
            finally:
                cleanup()
            """
        )
        op = program.main.children[2]
        assert op.name == "leavetry"
        assert [child.name for child in op.children] == ["entertry", "lineseq", "scope", "scope"]

    @pytest.mark.skipif(sys.version_info < (3, 10), reason="match statement needs Python 3.10")
    def test_unknown_syntax_becomes_plain_op(self):
        program = _lower(
            """
            match command:
                case "go":
                    move()
            """
        )
        op = program.main.children[2]
        assert op.name == "match"
        assert op.family is OpFamily.PLAIN


class TestDefinitions:
    """Test subroutines and the symbol table."""

    def test_def_emits_nothing_in_main(self):
        program = _lower(
            """
            def f():
                return 1
            """
        )
        assert _names(program.main) == ["leave", "enter"]

    def test_def_binds_code_object(self):
        program = _lower(
            """
            def f():
                return 1
            """,
            module="mod",
        )
        code = program.symbols.entries["f"].code
        assert isinstance(code, CodeObject)
        assert code.name == "mod.f"
        assert code.body.name == "leavesub"
        assert _names(code.body) == ["leavesub", "lineseq", "nextstate", "return", "pushmark", "const"]

    def test_nested_def_is_inline_code(self):
        program = _lower(
            """
            def outer():
                def inner():
                    pass
                return inner
            """
        )
        body = program.symbols.entries["outer"].code.body
        assert "anoncode" in _names(body)
        assert "inner" not in program.symbols.entries

    def test_lambda_is_inline_code(self):
        program = _lower("key = lambda item: item.name")
        assert "anoncode" in _names(program.main)
        assert program.symbols.entries["key"].code is None

    def test_methods_go_to_class_namespace(self):
        program = _lower(
            """
            class Greeter:
                greeting = "hi"

                def greet(self):
                    return self.greeting
            """
        )
        namespace = program.symbols.entries["Greeter"]
        assert isinstance(namespace, Namespace)
        assert namespace.name == "__main__.Greeter"
        assert namespace.entries["greet"].code.name == "__main__.Greeter.greet"
        assert program.main.children[2].name == "scope"

    def test_alias_shares_code_object(self):
        program = _lower(
            """
            def f():
                return 1

            g = f
            """
        )
        entries = program.symbols.entries
        assert entries["g"].code is entries["f"].code

    def test_class_attribute_alias_resolves_module_function(self):
        program = _lower(
            """
            def helper():
                return 1

            class Tools:
                run = helper
            """
        )
        tools = program.symbols.entries["Tools"]
        assert tools.entries["run"].code is program.symbols.entries["helper"].code

    def test_imports_are_data_bindings(self):
        program = _lower(
            """
            import os.path
            from collections import OrderedDict as OD
            """
        )
        entries = program.symbols.entries
        assert entries["os"].value == "os.path"
        assert entries["OD"].value == "collections.OrderedDict"
        assert not entries["os"].is_subroutine

    def test_decorator_is_evaluated_where_def_appears(self):
        program = _lower(
            """
            @lru_cache(maxsize=3)
            def f():
                return 1
            """
        )
        assert _names(program.main) == [
            "leave",
            "enter",
            "nextstate",
            "null",
            "entersub",
            "pushmark",
            "const",
            "padsv",
        ]
        assert program.symbols.entries["f"].code.body.name == "leavesub"

    def test_default_argument_call(self):
        program = _lower(
            """
            def f(x=g()):
                return x
            """
        )
        wrapper = program.main.children[3]
        assert wrapper.name == "null"
        assert [child.name for child in wrapper.children] == ["entersub"]

    def test_annotations(self):
        program = _lower(
            """
            def f(x: int, *rest: str) -> bool:
                return True
            """
        )
        assert [child.name for child in program.main.children[3].children] == [
            "padsv",
            "padsv",
            "padsv",
        ]

    def test_lambda_default_is_inside_anoncode(self):
        program = _lower("key = lambda item=fallback(): item")
        anon = program.main.children[2].children[0]
        assert anon.name == "anoncode"
        assert anon.children[0].name == "entersub"

    def test_nested_def_signature_is_inside_anoncode(self):
        program = _lower(
            """
            def outer():
                @wraps(outer)
                def inner(limit=compute()):
                    pass
                return inner
            """
        )
        body = program.symbols.entries["outer"].code.body
        anon = next(op for op in body.children[0].children if op.name == "anoncode")
        assert [child.name for child in anon.children[:2]] == ["entersub", "entersub"]

    def test_class_decorator_and_bases(self):
        program = _lower(
            """
            @dataclass
            class Point(Base):
                x = 0
            """
        )
        scope = program.main.children[2]
        assert [child.name for child in scope.children[:3]] == ["padsv", "padsv", "nextstate"]


class TestErrors:
    def test_syntax_error(self):
        with pytest.raises(ParsingError, match="Failed to parse <string>"):
            lower_source("def broken(:\n")

    def test_null_bytes(self):
        with pytest.raises(ParsingError):
            lower_source("x = 1\x00")

    def test_long_operator_chain(self):
        # one statement joining 1200 string literals
        result = analyze_source("x = " + " + ".join(["'a'"] * 1200))
        assert result.readability.expressions == 1200
        assert result.readability.statements == 1

    def test_runaway_nesting_is_a_parsing_error(self, monkeypatch):
        def overflow(self, node):
            raise RecursionError("maximum recursion depth exceeded")

        monkeypatch.setattr(OpTreeBuilder, "visit_Constant", overflow)
        with pytest.raises(ParsingError, match="nesting too deep"):
            lower_source("x = 1", filename="deep.py")


class TestLowerFile:
    def test_module_defaults_to_stem(self, tmp_path):
        path = tmp_path / "tools.py"
        path.write_text("def f():\n    return 1\n")
        program = lower_file(path)
        assert program.symbols.name == "tools"
        assert program.source == str(path)

    def test_explicit_module(self, tmp_path):
        path = tmp_path / "tools.py"
        path.write_text("x = 1\n")
        assert lower_file(path, module="pkg.tools").symbols.name == "pkg.tools"


class TestAnalyzeSource:
    """End-to-end scores for small Python programs."""

    def test_hello_world(self):
        result = analyze_source("print('hello')")
        assert result.readability.counts() == [
            ("tokens", 6),
            ("expressions", 1),
            ("statements", 1),
            ("subroutines", 1),
        ]
        assert result.score == pytest.approx(3.66)
        assert result.opinion == "readable"

    def test_function_and_call(self):
        result = analyze_source(
            textwrap.dedent(
                """
                def f():
                    return 1

                f()
                """
            )
        )
        assert result.readability.counts() == [
            ("tokens", 14),
            ("expressions", 3),
            ("statements", 2),
            ("subroutines", 2),
        ]
        assert result.analyzed == ["__main__.f"]

    def test_aliased_function_is_skipped(self):
        result = analyze_source(
            textwrap.dedent(
                """
                def f():
                    return 1

                g = f
                f()
                """
            )
        )
        assert result.skipped == ["__main__.f"]
        assert result.skipped_bindings == ["__main__.f", "__main__.g"]
        assert result.analyzed == []

    def test_empty_module_is_degenerate(self):
        with pytest.raises(DegenerateInputError, match="No tokens"):
            analyze_source("")
