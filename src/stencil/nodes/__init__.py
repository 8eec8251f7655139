"""Immutable AST nodes produced by the parser and walked by the renderer."""

from stencil.nodes.base import Node
from stencil.nodes.control_flow import For, If
from stencil.nodes.expressions import (
    BinOp,
    BoolOp,
    Compare,
    Concat,
    CondExpr,
    Const,
    Dict,
    Expr,
    Filter,
    FuncCall,
    Getattr,
    Getitem,
    List,
    Name,
    Slice,
    Test,
    Tuple,
    UnaryOp,
)
from stencil.nodes.functions import CallBlock, Macro, MacroParam
from stencil.nodes.output import Autoescape, Data, Do, FilterBlock, Output
from stencil.nodes.structure import Block, Extends, FromImport, Import, Include, Template, With
from stencil.nodes.variables import Capture, Set

__all__ = [
    "Autoescape",
    "BinOp",
    "Block",
    "BoolOp",
    "CallBlock",
    "Capture",
    "Compare",
    "Concat",
    "CondExpr",
    "Const",
    "Data",
    "Dict",
    "Do",
    "Expr",
    "Extends",
    "Filter",
    "FilterBlock",
    "For",
    "FromImport",
    "FuncCall",
    "Getattr",
    "Getitem",
    "If",
    "Import",
    "Include",
    "List",
    "Macro",
    "MacroParam",
    "Name",
    "Node",
    "Output",
    "Set",
    "Slice",
    "Template",
    "Test",
    "Tuple",
    "UnaryOp",
    "With",
]
