"""
Value records exchanged between the walkers and their callers.

Input requirements and validation results are pydantic models so callers can
serialize them for a UI; post-execution actions and render results are frozen
attrs records produced once and never mutated.
"""

from typing import Any, ClassVar

from attrs import field, frozen
from pydantic import BaseModel, ConfigDict, Field

from prompttree.core.types import InputType
from prompttree.exceptions.core import RenderError


class SelectOption(BaseModel):
    """One choice of a select or multiselect input."""

    model_config = ConfigDict(frozen=True)

    value: str
    label: str
    text: str | None = None


class InputRequirement(BaseModel):
    """
    Metadata describing a value the tree needs from a user.

    Created transiently whenever an input-producing node is visited during a
    walk; `name` is the key into the inputs mapping.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    label: str
    description: str | None = None
    type: InputType = "string"
    required: bool = False
    default: Any = None

    # Type-specific constraints
    min: float | None = None
    max: float | None = None
    options: list[SelectOption] = Field(default_factory=list)
    labels: dict[int, str] = Field(default_factory=dict)
    min_date: str | None = None
    max_date: str | None = None
    extensions: list[str] = Field(default_factory=list)
    multiple: bool = False
    must_exist: bool = False
    must_be_directory: bool = False

    @property
    def has_default(self) -> bool:
        return self.default is not None


class ValidationIssue(BaseModel):
    """A single validation problem: which field, what went wrong, and a stable code."""

    model_config = ConfigDict(frozen=True)

    field: str
    message: str
    code: str


class ValidationResult(BaseModel):
    """Outcome of validating a submitted input value."""

    valid: bool
    errors: list[ValidationIssue] = Field(default_factory=list)
    warnings: list[ValidationIssue] = Field(default_factory=list)


@frozen
class ReviewFileAction:
    """Open a file for review in an editor."""

    type: ClassVar[str] = "reviewFile"

    file: str
    editor: str | None = None


@frozen
class OpenUrlAction:
    """Open a URL in a browser."""

    type: ClassVar[str] = "openUrl"

    url: str
    browser: str | None = None


@frozen
class RunCommandAction:
    """Execute a shell command."""

    type: ClassVar[str] = "runCommand"

    command: str
    cwd: str | None = None
    env: dict[str, str] | None = None


PostExecutionAction = ReviewFileAction | OpenUrlAction | RunCommandAction


@frozen
class RenderResult:
    """
    Result of rendering an element tree.

    `text` is always populated with the best-effort output; when `ok` is False
    it is partial and `errors` explains what was left out.

    Params:
        ok: True iff no hard errors were recorded
        text: Concatenated output in document order
        errors: Hard errors in encounter order
        warnings: Non-fatal issues in encounter order
        post_execution: Side-effect requests for the caller to run afterwards
    """

    ok: bool
    text: str
    errors: tuple[RenderError, ...] = field(default=(), converter=tuple)
    warnings: tuple[RenderError, ...] = field(default=(), converter=tuple)
    post_execution: tuple[PostExecutionAction, ...] = field(default=(), converter=tuple)
