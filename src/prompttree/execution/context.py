"""
Per-walk render context.

One RenderContext is shared by reference across an entire walk. Environment
and inputs are read-only; errors, warnings, post-execution actions and the
input requirements met along the way are append-only lists, so their order is
document order.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from prompttree.components import create_default_registry
from prompttree.config import (
    DEFAULT_ENVIRONMENT,
    MAX_RENDER_DEPTH,
    EnvironmentContext,
    RuntimeConfig,
    create_runtime_config,
)
from prompttree.core.models import InputRequirement, PostExecutionAction
from prompttree.exceptions.core import RenderError
from prompttree.structure.registry import ComponentRegistry


@dataclass
class RenderContext:
    """
    Value holder for one walk over an element tree.

    Params:
        env: Environment configuration (read-only)
        inputs: Read-only view of the caller-supplied input values
        registry: Registry used to look up element types
        errors: Hard errors in encounter order
        warnings: Non-fatal issues in encounter order
        post_execution: Side-effect requests in encounter order
        requirements: Input requirements of visited input-producing nodes
        depth: Current element nesting depth
        max_depth: Deepest element nesting walked
    """

    env: EnvironmentContext
    inputs: Mapping[str, Any]
    registry: ComponentRegistry
    errors: list[RenderError] = field(default_factory=list)
    warnings: list[RenderError] = field(default_factory=list)
    post_execution: list[PostExecutionAction] = field(default_factory=list)
    requirements: list[InputRequirement] = field(default_factory=list)
    depth: int = 0
    max_depth: int = 100

    @classmethod
    def create(
        cls,
        inputs: Mapping[str, Any] | None = None,
        *,
        env: EnvironmentContext | None = None,
        registry: ComponentRegistry | None = None,
        max_depth: int = 100,
    ) -> "RenderContext":
        """
        Build a context for a new walk.

        The inputs are copied into a read-only view, so the walk can never
        change the caller's mapping. Runtime values are collected unless the
        environment already carries them.

        Params:
            inputs: Input values supplied by the caller
            env: Environment configuration; defaults to DEFAULT_ENVIRONMENT
            registry: Component registry; defaults to the built-in components
            max_depth: Deepest element nesting walked

        Returns:
            New RenderContext

        Raises:
            ValueError: If max_depth is outside 1..MAX_RENDER_DEPTH
        """
        if not 1 <= max_depth <= MAX_RENDER_DEPTH:
            raise ValueError(f"max_depth must be between 1 and {MAX_RENDER_DEPTH}, got {max_depth}")
        env = env or DEFAULT_ENVIRONMENT
        if env.runtime == RuntimeConfig():
            env = env.model_copy(update={"runtime": create_runtime_config()})
        if registry is None:
            registry = create_default_registry()
        return cls(
            env=env,
            inputs=MappingProxyType(dict(inputs or {})),
            registry=registry,
            max_depth=max_depth,
        )

    def record_error(self, error: RenderError) -> None:
        """Append an error, routing `warn_*` codes to the warnings list."""
        if error.is_warning:
            self.warnings.append(error)
        else:
            self.errors.append(error)

    def add_post_execution(self, action: PostExecutionAction) -> None:
        self.post_execution.append(action)
