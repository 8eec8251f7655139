"""Stencil Template package: parsed templates and their runtime values.

Re-exports the public symbols so ``from stencil.template import Template``
works without knowing the module layout.
"""

from stencil.template.core import BlockLayer, ResolvedTemplate, Template
from stencil.template.helpers import Undefined
from stencil.template.loop_context import LoopContext
from stencil.template.macro import Macro, Module
from stencil.utils.html import Markup

__all__ = [
    "BlockLayer",
    "LoopContext",
    "Macro",
    "Markup",
    "Module",
    "ResolvedTemplate",
    "Template",
    "Undefined",
]
