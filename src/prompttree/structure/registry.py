"""
Component registry.

The registry binds element type identifiers to component specs. It is an
explicit value passed to the walkers through the render context; there is no
module-level "current registry".
"""

import logging
from collections.abc import Iterator, Mapping
from typing import Any

from prompttree.core.element import component_name
from prompttree.exceptions.core import DuplicateComponentError, UnknownComponentError
from prompttree.structure.component import ComponentSpec, is_component_class

logger = logging.getLogger(__name__)


def to_component_spec(component: Any, name: str | None = None) -> ComponentSpec:
    """
    Adapt a component class, function or spec into a ComponentSpec.

    Params:
        component: `Component` subclass, `ComponentSpec` or `function(props, context)`
        name: Optional display name overriding the component's own name

    Returns:
        ComponentSpec describing the component's capabilities

    Raises:
        TypeError: If the value cannot act as a component
    """
    if isinstance(component, ComponentSpec):
        return component
    if is_component_class(component):
        return ComponentSpec.from_component(component, name=name)
    if callable(component):
        return ComponentSpec.from_function(component, name=name)
    raise TypeError(f"Cannot use {type(component).__name__} as a component")


class ComponentRegistry:
    """Registry mapping element type names to component specs.

    Element types that are already component objects (classes, functions,
    specs) bypass the name table and are adapted on first use.
    """

    def __init__(self, components: Mapping[str, Any] | None = None):
        self._specs: dict[str, ComponentSpec] = {}
        self._adapted: dict[Any, ComponentSpec] = {}
        for name, component in (components or {}).items():
            self.register(name, component)

    def register(self, name: str, component: Any, replace: bool = False) -> ComponentSpec:
        """
        Register a component under a type name.

        Params:
            name: Element type identifier (e.g. "Ask.Text")
            component: Component class, function or spec
            replace: Allow overwriting an existing registration

        Returns:
            The registered ComponentSpec

        Raises:
            DuplicateComponentError: If the name is taken and replace is False
        """
        spec = to_component_spec(component, name=name)
        if name in self._specs and not replace:
            raise DuplicateComponentError(name, self._specs[name].name, spec.name)
        self._specs[name] = spec
        logger.debug("Registered component %s", name)
        return spec

    def unregister(self, name: str) -> None:
        """Remove a registration. Raises KeyError if the name is unknown."""
        del self._specs[name]

    def get(self, name: str) -> ComponentSpec | None:
        return self._specs.get(name)

    def has(self, name: str) -> bool:
        return name in self._specs

    def names(self) -> list[str]:
        return sorted(self._specs)

    def copy(self) -> "ComponentRegistry":
        """Return an independent registry with the same registrations."""
        clone = ComponentRegistry()
        clone._specs = dict(self._specs)
        return clone

    def resolve_type(self, element_type: Any) -> ComponentSpec:
        """
        Find the component spec for an element type.

        Params:
            element_type: Registry name or component object

        Returns:
            ComponentSpec for the type

        Raises:
            UnknownComponentError: If a name is not registered or an object
                cannot act as a component
        """
        if isinstance(element_type, str):
            spec = self._specs.get(element_type)
            if spec is None:
                raise UnknownComponentError(element_type)
            return spec

        if isinstance(element_type, ComponentSpec):
            return element_type

        if not callable(element_type):
            raise UnknownComponentError(component_name(element_type))

        spec = self._adapted.get(element_type)
        if spec is None:
            spec = to_component_spec(element_type)
            self._adapted[element_type] = spec
        return spec

    def __contains__(self, name: object) -> bool:
        return name in self._specs

    def __len__(self) -> int:
        return len(self._specs)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

