"""
Control-flow components.

`If` includes its children only when its `when` prop holds. `when` is either a
literal (checked for truthiness) or a formula string such as "=count>5",
evaluated against the render inputs.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from prompttree.parsing.formula import evaluate_condition
from prompttree.structure.component import Component


class IfProps(BaseModel):
    model_config = ConfigDict(extra="forbid")

    when: Any = None


class If(Component):
    """
    Conditional subtree.

    A malformed formula raises FormulaParseError, which the walker records;
    the subtree is then left out.
    """

    schema = IfProps

    def render(self, props: Mapping[str, Any], context: Any) -> Any:
        if evaluate_condition(props.get("when"), context.inputs):
            return props.get("children")
        return None
