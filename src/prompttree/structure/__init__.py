"""
Component contract and registry.

This package provides the capability-based component spec, the Component base
class for class-based components, and the registry binding type names to specs.
"""

from prompttree.structure.component import (
    Component,
    ComponentSpec,
    SchemaFunction,
    as_schema_function,
    is_component_class,
    pydantic_schema,
)
from prompttree.structure.registry import ComponentRegistry, to_component_spec

__all__ = [
    "Component",
    "ComponentSpec",
    "ComponentRegistry",
    "SchemaFunction",
    "as_schema_function",
    "is_component_class",
    "pydantic_schema",
    "to_component_spec",
]
