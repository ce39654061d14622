"""
Element tree model.

An `Element` describes one component invocation: its type, its props and its
children. Elements are immutable once built and compare by identity, which is
what the per-render resolution table keys on. A `DeferredRef` is a lookup key
for "the resolved value of element X, followed along a property path".
"""

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from attrs import field, frozen


class _FragmentType:
    """Sentinel element type that groups children without a wrapper."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Fragment"


Fragment = _FragmentType()


def _freeze_props(props: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(props or {}))


def _flatten_children(children: Iterable[Any]) -> tuple:
    flat: list[Any] = []
    for child in children:
        if child is None or child is False:
            continue
        if isinstance(child, (list, tuple)):
            flat.extend(_flatten_children(child))
        else:
            flat.append(child)
    return tuple(flat)


def component_name(element_type: Any) -> str:
    """Return a display name for an element type.

    Params:
        element_type: Registry name, component class, spec, function or Fragment

    Returns:
        Name used in error messages and logs
    """
    if isinstance(element_type, str):
        return element_type
    if element_type is Fragment:
        return "Fragment"
    name = getattr(element_type, "name", None)
    if isinstance(name, str):
        return name
    return getattr(element_type, "__name__", type(element_type).__name__)


@frozen(eq=False)
class Element:
    """
    Immutable tree node describing a component invocation.

    Equality and hashing are by identity: two structurally equal elements at
    different positions in the tree are different nodes.

    Params:
        type: Registry name, `Component` subclass, `ComponentSpec`, function or `Fragment`
        props: Read-only mapping of prop name to value (children excluded)
        children: Ordered child nodes
    """

    type: Any
    props: Mapping[str, Any] = field(factory=dict, converter=_freeze_props)
    children: tuple = field(default=(), converter=_flatten_children)

    @property
    def name(self) -> str:
        return component_name(self.type)

    def ref(self, *path: str | int) -> "DeferredRef":
        """Create a deferred reference to this element's resolved value.

        Params:
            path: Optional property path (keys, attribute names or indices)

        Returns:
            DeferredRef looked up when a later node is rendered
        """
        return DeferredRef(element=self, path=path)

    def __repr__(self) -> str:
        return f"Element({self.name!r}, props={dict(self.props)!r}, children={len(self.children)})"


@frozen
class DeferredRef:
    """
    Forward pointer to the resolved value of another element.

    Not an owning reference; the value is looked up in the resolution table of
    the render pass that encounters it.

    Params:
        element: The referenced element
        path: Property path followed on the resolved value
    """

    element: Element
    path: tuple = field(default=(), converter=tuple)

    def ref(self, *path: str | int) -> "DeferredRef":
        """Extend the property path of this reference."""
        return DeferredRef(element=self.element, path=self.path + tuple(path))

    def __str__(self) -> str:
        dotted = "".join(f".{part}" for part in self.path)
        return f"{self.element.name}{dotted}"


def h(element_type: Any, props: Mapping[str, Any] | None = None, *children: Any) -> Element:
    """
    Build an Element.

    Children may be passed positionally or through a `children` prop, as the
    tree transformer emits them. Nested lists are flattened and `None`/`False`
    children are dropped.

    Params:
        element_type: Registry name, component class, spec, function or `Fragment`
        props: Prop mapping
        children: Child nodes

    Returns:
        New Element

    Raises:
        ValueError: If element_type is None
    """
    if element_type is None:
        raise ValueError(
            "Element type is undefined. This usually means a component that does "
            "not exist was referenced; check the component name spelling."
        )
    props = dict(props or {})
    prop_children = props.pop("children", None)
    all_children: list[Any] = []
    if prop_children is not None:
        all_children.append(prop_children)
    all_children.extend(children)
    return Element(type=element_type, props=props, children=all_children)


def is_element(value: Any) -> bool:
    return isinstance(value, Element)


def is_deferred_ref(value: Any) -> bool:
    return isinstance(value, DeferredRef)
