"""
Exception classes for prompt tree rendering.

This module defines specific exception types for the error conditions that
can occur while walking an element tree, resolving deferred references,
evaluating conditional formulas and collecting user inputs.

Node-local failures are raised inside a single node's evaluation and are
converted into `RenderError` records by the walker; they never unwind past
that node. Iterator misuse is raised to the caller.
"""

from enum import Enum
from typing import Any

from attrs import field, frozen


class ErrorCode(str, Enum):
    """Codes attached to recorded render errors."""

    VALIDATION_ERROR = "validation_error"
    RUNTIME_ERROR = "runtime_error"
    UNRESOLVED_REFERENCE = "unresolved_reference"
    UNKNOWN_COMPONENT = "unknown_component"
    FORMULA_PARSE_ERROR = "formula_parse_error"
    INVALID_NODE = "invalid_node"
    MAX_DEPTH_EXCEEDED = "max_depth_exceeded"


WARNING_PREFIX = "warn_"


def is_warning_code(code: str) -> bool:
    """Check whether an error code marks a non-fatal warning.

    Params:
        code: Error code string

    Returns:
        True for codes using the `warn_` prefix (or the legacy `validation_warning`)
    """
    return code.startswith(WARNING_PREFIX) or code == "validation_warning"


class PromptTreeError(Exception):
    """Base exception for all prompt tree errors."""

    code: ErrorCode = ErrorCode.RUNTIME_ERROR


class SchemaValidationError(PromptTreeError):
    """Raised when a node's props do not satisfy its component schema."""

    code = ErrorCode.VALIDATION_ERROR

    def __init__(self, component: str, issues: list[Any]):
        """
        Initialize the exception.

        Params:
            component: Name of the component whose props failed validation
            issues: Validation issues reported by the schema
        """
        self.component = component
        self.issues = issues
        summary = "; ".join(f"{issue.field}: {issue.message}" for issue in issues)
        super().__init__(f"Invalid props for {component}: {summary}")


class ComponentExecutionError(PromptTreeError):
    """Raised when a component's requirement, resolve or render step fails."""

    def __init__(self, component: str, phase: str, reason: str):
        """
        Initialize the exception.

        Params:
            component: Name of the failing component
            phase: Step that failed ("setup", "schema", "requirement", "resolve" or "render")
            reason: Message of the underlying failure
        """
        self.component = component
        self.phase = phase
        self.reason = reason
        super().__init__(f"Runtime error in {component} ({phase}): {reason}")


class UnresolvedReferenceError(PromptTreeError):
    """Raised when a deferred reference points to a node that has not been resolved."""

    code = ErrorCode.UNRESOLVED_REFERENCE

    def __init__(self, target: str, path: tuple = (), referenced_by: str | None = None):
        """
        Initialize the exception.

        Params:
            target: Component name of the referenced element
            path: Property path requested on the referenced value
            referenced_by: Component name of the node holding the reference
        """
        self.target = target
        self.path = tuple(path)
        self.referenced_by = referenced_by

        dotted = "".join(f".{part}" for part in self.path)
        message = (
            f"Unresolved reference to {target}{dotted}: the referenced element has "
            "not been rendered yet (forward, cyclic or detached reference)"
        )
        if referenced_by:
            message = f"{message}\n  Context: referenced by {referenced_by}"
        super().__init__(message)


class UnknownComponentError(PromptTreeError):
    """Raised when an element type is not bound to any registry entry."""

    code = ErrorCode.UNKNOWN_COMPONENT

    def __init__(self, element_type: str):
        """
        Initialize the exception.

        Params:
            element_type: The element type that could not be found
        """
        self.element_type = element_type
        super().__init__(
            f'Element type "{element_type}" is undefined. '
            "Check the component name spelling or register the component."
        )


class DuplicateComponentError(PromptTreeError):
    """Raised when registering a component under a name that is already taken."""

    def __init__(self, name: str, existing: str, new: str):
        """
        Initialize the exception.

        Params:
            name: The registry name that already exists
            existing: Name of the component already registered
            new: Name of the component that conflicts
        """
        self.name = name
        self.existing = existing
        self.new = new
        super().__init__(
            f"Component '{name}' already registered (existing: {existing}, new: {new})"
        )


class FormulaParseError(PromptTreeError):
    """Raised when a conditional formula is malformed."""

    code = ErrorCode.FORMULA_PARSE_ERROR

    def __init__(self, formula: str, reason: str, position: int | None = None):
        """
        Initialize the exception.

        Params:
            formula: The formula text that failed to parse
            reason: Why parsing failed
            position: Character offset of the failure, if known
        """
        self.formula = formula
        self.reason = reason
        self.position = position
        location = f" at position {position}" if position is not None else ""
        super().__init__(f"Invalid formula '{formula}'{location}: {reason}")


class InvalidNodeError(PromptTreeError):
    """Raised when a render output contains a value that is not a node."""

    code = ErrorCode.INVALID_NODE

    def __init__(self, value: Any, component: str | None = None):
        self.value = value
        self.component = component
        origin = f" returned by {component}" if component else ""
        super().__init__(
            f"Cannot render value of type {type(value).__name__}{origin}"
        )


class MaxDepthExceededError(PromptTreeError):
    """Raised when the element tree is nested deeper than the configured limit."""

    code = ErrorCode.MAX_DEPTH_EXCEEDED

    def __init__(self, component: str, max_depth: int):
        self.component = component
        self.max_depth = max_depth
        super().__init__(
            f"Maximum render depth {max_depth} exceeded at {component}"
        )


class IteratorStateError(PromptTreeError):
    """Raised when an input iterator operation is called in the wrong state."""

    pass


class NonInteractiveInputError(PromptTreeError):
    """Raised when non-interactive collection cannot supply a required input."""

    def __init__(self, input_name: str, reason: str):
        """
        Initialize the exception.

        Params:
            input_name: Name of the input that could not be filled
            reason: Why the input could not be filled
        """
        self.input_name = input_name
        self.reason = reason
        super().__init__(
            f'Non-interactive mode: input "{input_name}" {reason}'
        )


@frozen
class RenderError:
    """A structured error recorded during a tree walk.

    Params:
        component: Component name (registry name or class name)
        message: Human-readable error message
        code: Error code (an `ErrorCode` value or a schema issue code)
        prop: Prop that failed validation, None for runtime errors
        path: Path within the props
        phase: Component step that raised, for runtime errors
    """

    component: str
    message: str
    code: str
    prop: str | None = None
    path: tuple = field(default=(), converter=tuple)
    phase: str | None = None

    @property
    def is_warning(self) -> bool:
        return is_warning_code(self.code)

    @classmethod
    def from_issue(cls, component: str, issue: Any) -> "RenderError":
        """Convert one schema issue into a record; `warn_` codes are kept as warnings."""
        code = issue.code if is_warning_code(issue.code) else ErrorCode.VALIDATION_ERROR.value
        return cls(
            component=component,
            message=f'Invalid prop "{issue.field}" on {component}: {issue.message}',
            code=code,
            prop=issue.field,
            path=issue.field.split("."),
        )

    @classmethod
    def from_exception(cls, component: str, exc: BaseException, phase: str = "render") -> "RenderError":
        """Convert an exception raised inside a node into a RenderError record.

        Exceptions from outside the library are wrapped in a
        ComponentExecutionError for the given phase.

        Params:
            component: Component name of the node being evaluated
            exc: The exception raised by the node
            phase: Component step that raised

        Returns:
            RenderError carrying the component name, message and code
        """
        if not isinstance(exc, PromptTreeError):
            exc = ComponentExecutionError(component, phase, str(exc))
        return cls(
            component=component,
            message=str(exc),
            code=exc.code.value,
            phase=getattr(exc, "phase", None),
        )
