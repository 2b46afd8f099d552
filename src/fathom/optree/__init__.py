"""Op-tree representation shared by front ends and the analysis core."""

from .model import Binding, CodeObject, Namespace, Node, OpFamily, Program

__all__ = [
    "Binding",
    "CodeObject",
    "Namespace",
    "Node",
    "OpFamily",
    "Program",
]
