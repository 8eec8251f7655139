"""Statement rendering for the stencil renderer.

Provides mixins that render statement nodes into an output buffer.

The statements package is organized into logical modules:
- basic: Text, output and ``do``
- control_flow: ``if`` and ``for``
- variables: ``set``, block ``set`` and ``with``
- functions: Macros and ``call`` blocks
- template_structure: Blocks, ``super()``, include and import
- special_blocks: ``filter`` and ``autoescape``

Uses inline TYPE_CHECKING declarations for host attributes.
"""

from __future__ import annotations

from stencil.renderer.statements.basic import BasicStatementMixin
from stencil.renderer.statements.control_flow import ControlFlowMixin
from stencil.renderer.statements.functions import FunctionRenderingMixin
from stencil.renderer.statements.special_blocks import SpecialBlockMixin
from stencil.renderer.statements.template_structure import TemplateStructureMixin
from stencil.renderer.statements.variables import VariableAssignmentMixin


class StatementRenderingMixin(
    BasicStatementMixin,
    ControlFlowMixin,
    VariableAssignmentMixin,
    FunctionRenderingMixin,
    TemplateStructureMixin,
    SpecialBlockMixin,
):
    """Combined mixin for rendering all statement types.

    Host attributes and cross-mixin dependencies are declared via inline
    TYPE_CHECKING blocks in each individual mixin.
    """
