"""
Core type definitions for prompttree.

This module contains fundamental type aliases used throughout the render
engine and input iterator for type safety and consistency.
"""

from typing import Literal

InputType = Literal[
    "string",
    "number",
    "boolean",
    "select",
    "multiselect",
    "date",
    "secret",
    "file",
    "path",
    "rating",
    "object",
    "array",
]
