"""
Render engine.

Turns an element tree into final prompt text. Rendering never raises for
node-local failures: the result always carries the best-effort text, and
`ok` is False whenever a hard error was recorded.
"""

import logging
from collections.abc import Mapping
from typing import Any

from prompttree.components import create_default_registry
from prompttree.config import RenderOptions
from prompttree.core.element import Element
from prompttree.core.models import RenderResult
from prompttree.exceptions.core import RenderError
from prompttree.execution.context import RenderContext
from prompttree.execution.walker import TreeWalker
from prompttree.structure.registry import ComponentRegistry

logger = logging.getLogger(__name__)


class RenderEngine:
    """
    Renders element trees with a fixed registry and options.

    Params:
        registry: Component registry; defaults to the built-in components
        options: Render options; defaults to RenderOptions()
    """

    def __init__(
        self,
        registry: ComponentRegistry | None = None,
        options: RenderOptions | None = None,
    ):
        if registry is None:
            registry = create_default_registry()
        self.registry = registry
        self.options = options or RenderOptions()

    def create_context(self, inputs: Mapping[str, Any] | None = None) -> RenderContext:
        return RenderContext.create(
            inputs,
            env=self.options.env,
            registry=self.registry,
            max_depth=self.options.max_depth,
        )

    async def render(
        self,
        element: Element,
        inputs: Mapping[str, Any] | None = None,
        *,
        context: RenderContext | None = None,
    ) -> RenderResult:
        """
        Render an element tree to text.

        Params:
            element: Root element
            inputs: Input values, ignored when a context is given
            context: Pre-built context to render with

        Returns:
            RenderResult with text, errors, warnings and post-execution actions
        """
        context = context or self.create_context(inputs)
        walker = TreeWalker(context, validate_props=self.options.validate_props)
        text = await walker.walk(element)
        if self.options.trim:
            text = text.strip()

        errors, warnings = self._apply_warning_policy(context.errors, context.warnings)
        logger.debug(
            "Rendered %s: %d error(s), %d warning(s)", element.name, len(errors), len(warnings)
        )
        return RenderResult(
            ok=not errors,
            text=text,
            errors=errors,
            warnings=warnings,
            post_execution=context.post_execution,
        )

    def _apply_warning_policy(
        self, errors: list[RenderError], warnings: list[RenderError]
    ) -> tuple[list[RenderError], list[RenderError]]:
        kept = [warning for warning in warnings if warning.code not in self.options.ignore_warnings]
        if self.options.throw_on_warnings:
            return errors + kept, []
        return list(errors), kept


async def render(
    element: Element,
    inputs: Mapping[str, Any] | None = None,
    *,
    registry: ComponentRegistry | None = None,
    options: RenderOptions | None = None,
    **option_overrides: Any,
) -> RenderResult:
    """
    Render an element tree with a one-off engine.

    Params:
        element: Root element
        inputs: Input values visible to components and formulas
        registry: Component registry; defaults to the built-in components
        options: Render options
        option_overrides: Individual RenderOptions fields (e.g. `trim=False`)

    Returns:
        RenderResult

    Example:
        result = await render(h("Ask.Text", {"name": "topic", "label": "Topic"}),
                              {"topic": "owls"})
    """
    options = options or RenderOptions()
    if option_overrides:
        options = RenderOptions.model_validate({**options.model_dump(), **option_overrides})
    return await RenderEngine(registry, options).render(element, inputs)
