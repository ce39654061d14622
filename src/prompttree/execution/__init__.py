"""
Prompt tree execution components.

This package provides the shared tree walker, the render engine, deferred
reference resolution, and the input requirement iterator with its validation.
"""

from prompttree.execution.context import RenderContext
from prompttree.execution.input_iterator import (
    InputIterator,
    IteratorState,
    OnMissingDefault,
    create_input_iterator,
    empty_value,
)
from prompttree.execution.input_validation import validate_input
from prompttree.execution.render import RenderEngine, render
from prompttree.execution.resolution import ResolutionTable, follow_path
from prompttree.execution.walker import TreeWalker, stringify

__all__ = [
    "RenderContext",
    "RenderEngine",
    "render",
    "ResolutionTable",
    "follow_path",
    "TreeWalker",
    "stringify",
    "InputIterator",
    "IteratorState",
    "OnMissingDefault",
    "create_input_iterator",
    "empty_value",
    "validate_input",
]
