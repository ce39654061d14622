"""
Shared element tree traversal.

The render engine and the input iterator both walk trees with `TreeWalker`,
differing only in options, so they visit nodes in the same order and prune
conditional subtrees the same way.

Per element, in document order:

1. Look up the component spec for the element type.
2. Substitute deferred references in props from the resolution table.
3. Validate props against the component schema (when enabled).
4. Report the input requirement of input-producing specs.
5. Call `resolve`, awaiting it if needed, and record the value.
6. Call `render` and walk its output.

A failure in any step is recorded on the context and only the failing node
(and its subtree) is left out; siblings are unaffected.
"""

import inspect
import logging
from typing import Any

from prompttree.core.element import DeferredRef, Element, Fragment
from prompttree.exceptions.core import (
    InvalidNodeError,
    MaxDepthExceededError,
    RenderError,
    SchemaValidationError,
    UnknownComponentError,
    UnresolvedReferenceError,
    is_warning_code,
)
from prompttree.execution.context import RenderContext
from prompttree.execution.resolution import ResolutionTable
from prompttree.structure.component import ComponentSpec

logger = logging.getLogger(__name__)


def stringify(value: Any) -> str:
    """Convert a resolved value into output text. None prints nothing."""
    if value is None:
        return ""
    return str(value)


async def _maybe_await(result: Any) -> Any:
    if inspect.isawaitable(result):
        return await result
    return result


class TreeWalker:
    """
    Depth-first, sequential walker over an element tree.

    Params:
        context: Render context shared by every node of the walk
        validate_props: Validate props against component schemas
        implicit_defaults: Fill requirement defaults from the component's
            implicit default when a node declares none
    """

    def __init__(
        self,
        context: RenderContext,
        *,
        validate_props: bool = True,
        implicit_defaults: bool = True,
    ):
        self.context = context
        self.validate_props = validate_props
        self.implicit_defaults = implicit_defaults
        self.table = ResolutionTable()

    async def walk(self, node: Any) -> str:
        """
        Walk a node and everything below it.

        Params:
            node: Root node (usually an Element)

        Returns:
            Concatenated text contributed by the walked nodes
        """
        parts: list[str] = []
        await self._walk_node(node, parts, owner="root")
        return "".join(parts)

    async def _walk_node(self, node: Any, parts: list[str], owner: str) -> None:
        if node is None or isinstance(node, bool):
            return

        if isinstance(node, (str, int, float)):
            parts.append(str(node))
            return

        if isinstance(node, (list, tuple)):
            for child in node:
                await self._walk_node(child, parts, owner)
            return

        if isinstance(node, DeferredRef):
            try:
                value = self.table.lookup(node, referenced_by=owner)
            except UnresolvedReferenceError as exc:
                self._record_failure(owner, exc)
                return
            parts.append(stringify(value))
            return

        if isinstance(node, Element):
            await self._walk_element(node, parts)
            return

        self._record_failure(owner, InvalidNodeError(node, component=owner))

    async def _walk_element(self, element: Element, parts: list[str]) -> None:
        if element in self.table:
            parts.append(stringify(self.table.value_of(element)))
            return

        context = self.context
        if context.depth >= context.max_depth:
            self._record_failure(element.name, MaxDepthExceededError(element.name, context.max_depth))
            return

        context.depth += 1
        try:
            if element.type is Fragment:
                await self._walk_node(element.children, parts, owner="Fragment")
            else:
                await self._evaluate(element, parts)
        finally:
            context.depth -= 1

    async def _evaluate(self, element: Element, parts: list[str]) -> None:
        context = self.context
        try:
            spec = context.registry.resolve_type(element.type)
        except UnknownComponentError as exc:
            self._record_failure(element.name, exc)
            return
        except Exception as exc:
            self._record_failure(element.name, exc, phase="setup")
            return

        name = spec.name
        logger.debug("Visiting %s at depth %d", name, context.depth)

        try:
            props = self.table.substitute_props(element.props, referenced_by=name)
        except UnresolvedReferenceError as exc:
            self._record_failure(name, exc)
            return

        if self.validate_props and spec.schema is not None and not self._validate(spec, props):
            return

        props["children"] = element.children

        if spec.requirement is not None:
            try:
                requirement = spec.requirement(props, context)
            except Exception as exc:
                self._record_failure(name, exc, phase="requirement")
                return
            if requirement.default is None and self.implicit_defaults and spec.implicit_default is not None:
                requirement = requirement.model_copy(update={"default": spec.implicit_default})
            context.requirements.append(requirement)

        value = None
        if spec.resolve is not None:
            try:
                value = await _maybe_await(spec.resolve(props, context))
            except Exception as exc:
                self.table.record(element, None)
                self._record_failure(name, exc, phase="resolve")
                return
            self.table.record(element, value)

        if spec.render is not None:
            try:
                if spec.resolve is not None:
                    output = spec.render(props, value, context)
                else:
                    output = spec.render(props, context)
                output = await _maybe_await(output)
            except Exception as exc:
                self._record_failure(name, exc, phase="render")
                return
        elif spec.resolve is not None:
            output = stringify(value)
        else:
            output = element.children

        await self._walk_node(output, parts, owner=name)

    def _validate(self, spec: ComponentSpec, props: dict[str, Any]) -> bool:
        """Record schema issues for a node. Returns False when any issue is a hard error."""
        try:
            issues = spec.schema(props)
        except Exception as exc:
            self._record_failure(spec.name, exc, phase="schema")
            return False

        hard_issues = []
        for issue in issues:
            if is_warning_code(issue.code):
                self.context.record_error(RenderError.from_issue(spec.name, issue))
            else:
                hard_issues.append(issue)
        if not hard_issues:
            return True

        error = SchemaValidationError(spec.name, hard_issues)
        logger.warning("Node %s failed (%s): %s", spec.name, error.code.value, error)
        for issue in error.issues:
            self.context.record_error(RenderError.from_issue(error.component, issue))
        return False

    def _record_failure(self, component: str, exc: BaseException, phase: str = "render") -> None:
        error = RenderError.from_exception(component, exc, phase=phase)
        logger.warning("Node %s failed (%s): %s", component, error.code, error.message)
        self.context.record_error(error)
