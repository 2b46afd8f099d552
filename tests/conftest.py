"""Shared test fixtures for Fathom tests."""

import pytest

from fathom.optree import CodeObject, Namespace, Node, OpFamily


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep user and project config files and FATHOM_* vars out of every test."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(tmp_path)
    for key in ("VERBOSITY", "RECURSE_NAMESPACES", "EMIT_WARNINGS", "OUTPUT_FORMAT", "FAIL_ABOVE"):
        monkeypatch.delenv(f"FATHOM_{key}", raising=False)
    return tmp_path


@pytest.fixture
def call_statement():
    """One statement calling a subroutine: 4 tokens, 1 expression, 1 statement."""
    return Node(
        "leave",
        children=[
            Node("enter"),
            Node("nextstate"),
            Node("entersub", OpFamily.UNARY, [Node("pushmark")]),
        ],
    )


@pytest.fixture
def sub_body():
    """Body of ``sub { return $x }``: 9 tokens, 2 expressions, 1 statement, 1 sub."""
    return Node(
        "leavesub",
        OpFamily.UNARY,
        [
            Node(
                "lineseq",
                children=[
                    Node("nextstate"),
                    Node("return", OpFamily.LIST, [Node("pushmark"), Node("padsv")]),
                ],
            )
        ],
    )


@pytest.fixture
def empty_symbols():
    return Namespace("main")


@pytest.fixture
def shared_symbols(sub_body):
    """``helper`` authored once and re-exported under a second name in ``Util``."""
    code = CodeObject("helper", sub_body)
    symbols = Namespace("main")
    symbols.bind("helper", code)
    symbols.child("Util").bind("helper", code)
    return symbols
