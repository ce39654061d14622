"""
Core prompttree components.

This package provides the element tree model, the value records exchanged with
callers, and shared type definitions.
"""

from prompttree.core.element import (
    DeferredRef,
    Element,
    Fragment,
    component_name,
    h,
    is_deferred_ref,
    is_element,
)
from prompttree.core.models import (
    InputRequirement,
    OpenUrlAction,
    PostExecutionAction,
    RenderResult,
    ReviewFileAction,
    RunCommandAction,
    SelectOption,
    ValidationIssue,
    ValidationResult,
)
from prompttree.core.types import InputType

__all__ = [
    "Element",
    "DeferredRef",
    "Fragment",
    "h",
    "component_name",
    "is_element",
    "is_deferred_ref",
    "InputRequirement",
    "SelectOption",
    "ValidationIssue",
    "ValidationResult",
    "PostExecutionAction",
    "ReviewFileAction",
    "OpenUrlAction",
    "RunCommandAction",
    "RenderResult",
    "InputType",
]
