"""
prompttree - Render declarative prompt component trees into LLM-ready text

prompttree walks element trees built with `h()`, resolves deferred references
between nodes, evaluates conditional formulas, and drives step-by-step
collection of the user inputs a prompt needs.
"""

from importlib.metadata import version

from prompttree.components import create_default_registry
from prompttree.config import EnvironmentContext, RenderOptions, create_environment
from prompttree.core import DeferredRef, Element, Fragment, InputRequirement, RenderResult, h
from prompttree.execution import (
    InputIterator,
    OnMissingDefault,
    RenderEngine,
    create_input_iterator,
    render,
)
from prompttree.structure import Component, ComponentRegistry, ComponentSpec

__version__ = version("prompttree")

__all__ = [
    "__version__",
    "h",
    "Element",
    "DeferredRef",
    "Fragment",
    "Component",
    "ComponentSpec",
    "ComponentRegistry",
    "create_default_registry",
    "render",
    "RenderEngine",
    "RenderResult",
    "RenderOptions",
    "EnvironmentContext",
    "create_environment",
    "InputIterator",
    "InputRequirement",
    "OnMissingDefault",
    "create_input_iterator",
]
