"""
Prompt tree exception classes.

This package provides all exception types and the structured error record
used throughout the render engine and input iterator.
"""

from prompttree.exceptions.core import (
    ComponentExecutionError,
    DuplicateComponentError,
    ErrorCode,
    FormulaParseError,
    InvalidNodeError,
    IteratorStateError,
    MaxDepthExceededError,
    NonInteractiveInputError,
    PromptTreeError,
    RenderError,
    SchemaValidationError,
    UnknownComponentError,
    UnresolvedReferenceError,
    is_warning_code,
)

__all__ = [
    "PromptTreeError",
    "ErrorCode",
    "RenderError",
    "ComponentExecutionError",
    "DuplicateComponentError",
    "FormulaParseError",
    "InvalidNodeError",
    "IteratorStateError",
    "MaxDepthExceededError",
    "NonInteractiveInputError",
    "SchemaValidationError",
    "UnknownComponentError",
    "UnresolvedReferenceError",
    "is_warning_code",
]
