"""
Input requirement iterator.

Drives an interactive flow over the inputs a prompt needs. Every step re-walks
the tree with the values collected so far, so inputs inside conditional
subtrees appear and disappear exactly as they would in a render with the same
values.

Typical use:

    iterator = create_input_iterator(prompt)
    await iterator.start()
    while not iterator.is_done():
        requirement = iterator.current()
        result = await iterator.submit(ask_user(requirement))
        if result.valid:
            await iterator.advance()
    values = iterator.get_values()
"""

import logging
from collections.abc import Mapping
from enum import Enum
from typing import Any

from prompttree.components import create_default_registry
from prompttree.config import EnvironmentContext
from prompttree.core.element import Element
from prompttree.core.models import InputRequirement, ValidationResult
from prompttree.exceptions.core import (
    IteratorStateError,
    NonInteractiveInputError,
    RenderError,
)
from prompttree.execution.context import RenderContext
from prompttree.execution.input_validation import validate_input
from prompttree.execution.walker import TreeWalker
from prompttree.structure.registry import ComponentRegistry

logger = logging.getLogger(__name__)


class IteratorState(Enum):
    NOT_STARTED = "not_started"
    ITERATING = "iterating"
    DONE = "done"


class OnMissingDefault(Enum):
    """What non-interactive collection does with a required input lacking a default."""

    ERROR = "error"
    EMPTY = "empty"
    SKIP = "skip"


def empty_value(requirement: InputRequirement) -> Any:
    """Return the empty value matching a requirement's type."""
    if requirement.type in ("multiselect", "array") or (
        requirement.type == "file" and requirement.multiple
    ):
        return []
    if requirement.type == "object":
        return {}
    if requirement.type == "boolean":
        return False
    if requirement.type in ("number", "rating"):
        return requirement.min if requirement.min is not None else 0
    return ""


class InputIterator:
    """
    Step-by-step collection of the inputs an element tree requires.

    Params:
        element: Root element of the prompt
        registry: Component registry; defaults to the built-in components
        values: Pre-supplied values; their requirements are skipped
        env: Environment configuration for the walks
        validate_on_submit: Validate submitted values against their requirement
        validate_props: Validate props against component schemas during walks
        non_interactive: Make `start()` fill everything without user input
        on_missing_default: Policy for required inputs without a default in
            non-interactive collection
        implicit_defaults: Use component implicit defaults (e.g. False for
            confirmations) when a requirement declares none
        check_filesystem: Check file and path existence on submit
    """

    def __init__(
        self,
        element: Element,
        registry: ComponentRegistry | None = None,
        *,
        values: Mapping[str, Any] | None = None,
        env: EnvironmentContext | None = None,
        validate_on_submit: bool = True,
        validate_props: bool = False,
        non_interactive: bool = False,
        on_missing_default: OnMissingDefault = OnMissingDefault.ERROR,
        implicit_defaults: bool = True,
        check_filesystem: bool = True,
    ):
        if registry is None:
            registry = create_default_registry()
        self.element = element
        self.registry = registry
        self.env = env
        self.validate_on_submit = validate_on_submit
        self.validate_props = validate_props
        self.non_interactive = non_interactive
        self.on_missing_default = on_missing_default
        self.implicit_defaults = implicit_defaults
        self.check_filesystem = check_filesystem

        self._initial_values = dict(values or {})
        self._values: dict[str, Any] = dict(self._initial_values)
        self._skipped: set[str] = set()
        self._requirements: list[InputRequirement] = []
        self._errors: list[RenderError] = []
        self._index = 0
        self._state = IteratorState.NOT_STARTED

    @property
    def state(self) -> IteratorState:
        return self._state

    @property
    def requirements(self) -> list[InputRequirement]:
        """Requirements found by the latest walk, in visitation order."""
        return list(self._requirements)

    @property
    def errors(self) -> list[RenderError]:
        """Errors recorded by the latest walk."""
        return list(self._errors)

    async def start(self) -> None:
        """
        Walk the tree and place the cursor on the first input without a value.

        Raises:
            IteratorStateError: If the iterator was already started
            NonInteractiveInputError: In non-interactive mode, if a required
                input cannot be filled
        """
        if self._state is not IteratorState.NOT_STARTED:
            raise IteratorStateError("Iterator already started. Call reset() first.")
        if self.non_interactive:
            await self.run_non_interactive()
            return
        await self._collect()
        self._move_to(self._next_unfilled(0))

    def current(self) -> InputRequirement | None:
        """Return the awaiting requirement, or None when all inputs are collected."""
        self._ensure_started()
        if self._state is IteratorState.DONE:
            return None
        return self._requirements[self._index]

    async def submit(self, value: Any) -> ValidationResult:
        """
        Submit a value for the current requirement.

        On failure the value is not stored and the cursor does not move.

        Params:
            value: Value supplied by the user

        Returns:
            ValidationResult of the submitted value

        Raises:
            IteratorStateError: If not started or already done
        """
        self._ensure_started()
        if self._state is IteratorState.DONE:
            raise IteratorStateError("Iterator is done. No current requirement.")

        requirement = self._requirements[self._index]
        if self.validate_on_submit:
            result = validate_input(requirement, value, check_filesystem=self.check_filesystem)
            if not result.valid:
                logger.debug("Rejected value for %s: %d error(s)", requirement.name, len(result.errors))
                return result
        else:
            result = ValidationResult(valid=True)

        self._values[requirement.name] = value
        logger.debug("Accepted value for %s", requirement.name)
        return result

    async def advance(self) -> None:
        """
        Re-walk the tree and move to the next input without a value.

        Raises:
            IteratorStateError: If not started, done, or the current input has no value
        """
        self._ensure_started()
        if self._state is IteratorState.DONE:
            raise IteratorStateError("Iterator is done. Nothing to advance.")
        name = self._requirements[self._index].name
        if name not in self._values:
            raise IteratorStateError("Current requirement has no value. Call submit() first.")

        await self._collect()
        position = self._position_of(name)
        start = position + 1 if position is not None else self._index
        index = self._next_unfilled(start)
        if index == len(self._requirements):
            # Inputs before the cursor may still be open after go_to()
            index = self._next_unfilled(0)
        self._move_to(index)

    async def previous(self) -> None:
        """
        Move back to the requirement before the cursor, keeping all values.

        From the done state this returns to the last requirement.

        Raises:
            IteratorStateError: If not started or already at the first requirement
        """
        self._ensure_started()
        if self._state is IteratorState.DONE:
            await self._collect()
            target = len(self._requirements) - 1
        else:
            name = self._requirements[self._index].name
            await self._collect()
            position = self._position_of(name)
            target = (position if position is not None else self._index) - 1
        if target < 0:
            raise IteratorStateError("Already at the first requirement.")
        self._move_to(target)

    async def go_to(self, index: int) -> None:
        """
        Move the cursor to a requirement by position, keeping all values.

        Params:
            index: Position in `requirements` after a fresh walk

        Raises:
            IteratorStateError: If not started or index is out of range
        """
        self._ensure_started()
        await self._collect()
        if not 0 <= index < len(self._requirements):
            raise IteratorStateError(
                f"Requirement index {index} out of range (0-{len(self._requirements) - 1})."
            )
        self._move_to(index)

    def reset(self) -> None:
        """Discard collected values and return to the not-started state."""
        self._values = dict(self._initial_values)
        self._skipped.clear()
        self._requirements = []
        self._errors = []
        self._index = 0
        self._state = IteratorState.NOT_STARTED
        logger.debug("Iterator reset")

    async def run_non_interactive(self) -> dict[str, Any]:
        """
        Fill every reachable input without user interaction.

        Each input takes its existing value, then its default, then whatever
        `on_missing_default` prescribes. The tree is re-walked after every
        fill, so inputs revealed by a conditional are filled as well.
        Optional inputs without a default are left unset.

        Returns:
            Mapping of input name to collected value

        Raises:
            NonInteractiveInputError: If a required input has no default under
                OnMissingDefault.ERROR, or a default fails validation
        """
        while True:
            await self._collect()
            pending = self._first_pending()
            if pending is None:
                break
            self._fill(pending)

        self._move_to(len(self._requirements))
        return self.get_values()

    def is_done(self) -> bool:
        return self._state is IteratorState.DONE

    def get_values(self) -> dict[str, Any]:
        return dict(self._values)

    async def _collect(self) -> None:
        context = RenderContext.create(self._values, env=self.env, registry=self.registry)
        walker = TreeWalker(
            context,
            validate_props=self.validate_props,
            implicit_defaults=self.implicit_defaults,
        )
        await walker.walk(self.element)
        self._requirements = list(context.requirements)
        self._errors = list(context.errors)
        logger.debug("Collected %d requirement(s)", len(self._requirements))

    def _fill(self, requirement: InputRequirement) -> None:
        name = requirement.name
        if requirement.has_default:
            value = requirement.default
            if self.validate_on_submit:
                result = validate_input(requirement, value, check_filesystem=self.check_filesystem)
                if not result.valid:
                    messages = "; ".join(issue.message for issue in result.errors)
                    raise NonInteractiveInputError(name, f"failed validation: {messages}")
        elif not requirement.required or self.on_missing_default is OnMissingDefault.SKIP:
            self._skipped.add(name)
            return
        elif self.on_missing_default is OnMissingDefault.EMPTY:
            value = empty_value(requirement)
        else:
            raise NonInteractiveInputError(
                name,
                "is required and has no default value. Provide a default in the "
                "component, pre-supply a value, or use OnMissingDefault.SKIP.",
            )
        self._values[name] = value

    def _first_pending(self) -> InputRequirement | None:
        for requirement in self._requirements:
            if requirement.name not in self._values and requirement.name not in self._skipped:
                return requirement
        return None

    def _next_unfilled(self, start: int) -> int:
        for index in range(start, len(self._requirements)):
            if self._requirements[index].name not in self._values:
                return index
        return len(self._requirements)

    def _position_of(self, name: str) -> int | None:
        for index, requirement in enumerate(self._requirements):
            if requirement.name == name:
                return index
        return None

    def _move_to(self, index: int) -> None:
        self._index = index
        if index < len(self._requirements):
            self._state = IteratorState.ITERATING
            logger.debug("Cursor at %s", self._requirements[index].name)
        else:
            self._state = IteratorState.DONE
            logger.debug("All inputs collected")

    def _ensure_started(self) -> None:
        if self._state is IteratorState.NOT_STARTED:
            raise IteratorStateError("Iterator not started. Call start() first.")


def create_input_iterator(element: Element, registry: ComponentRegistry | None = None, **options: Any) -> InputIterator:
    """Create an InputIterator; see InputIterator for the options."""
    return InputIterator(element, registry, **options)
