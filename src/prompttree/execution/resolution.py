"""
Deferred reference resolution.

Every render pass owns one `ResolutionTable` mapping visited elements (by
identity) to their resolved values. A `DeferredRef` is only a lookup key into
that table: it succeeds when its target was resolved earlier in document order
and fails with `UnresolvedReferenceError` otherwise. There is no topological
sort, so forward, cyclic and detached references are all reported the same way.
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from prompttree.core.element import DeferredRef, Element
from prompttree.exceptions.core import UnresolvedReferenceError

logger = logging.getLogger(__name__)


def follow_path(value: Any, path: Sequence[str | int]) -> Any:
    """
    Follow a property path into a resolved value.

    Each step is tried as a mapping key, then as a sequence index, then as an
    attribute. A missing step yields None for the rest of the path.

    Params:
        value: Resolved value to start from
        path: Keys, indices or attribute names

    Returns:
        Value found at the end of the path, or None
    """
    current = value
    for part in path:
        if current is None:
            return None
        if isinstance(current, Mapping):
            current = current.get(part)
        elif isinstance(current, Sequence) and not isinstance(current, str):
            current = _index(current, part)
        else:
            current = getattr(current, str(part), None)
    return current


def _index(sequence: Sequence[Any], part: str | int) -> Any:
    if isinstance(part, str):
        if not part.lstrip("-").isdigit():
            return getattr(sequence, part, None)
        part = int(part)
    try:
        return sequence[part]
    except IndexError:
        return None


class ResolutionTable:
    """Per-render mapping of element identity to resolved value."""

    def __init__(self):
        self._values: dict[Element, Any] = {}

    def record(self, element: Element, value: Any) -> None:
        """Store the resolved value of an element. None is a valid value."""
        self._values[element] = value

    def has(self, element: Element) -> bool:
        return element in self._values

    def lookup(self, ref: DeferredRef, referenced_by: str | None = None) -> Any:
        """
        Look up the value a deferred reference points to.

        Params:
            ref: Reference to resolve
            referenced_by: Component name of the node holding the reference

        Returns:
            The target's resolved value followed along the reference path

        Raises:
            UnresolvedReferenceError: If the target has not been resolved
        """
        if ref.element not in self._values:
            raise UnresolvedReferenceError(
                ref.element.name, path=ref.path, referenced_by=referenced_by
            )
        return follow_path(self._values[ref.element], ref.path)

    def value_of(self, element: Element) -> Any:
        """Return the resolved value of a visited element."""
        return self._values[element]

    def substitute(self, value: Any, referenced_by: str | None = None) -> Any:
        """
        Replace every DeferredRef inside a prop value with its resolved value.

        Lists, tuples and dicts are rebuilt recursively; elements and other
        objects are returned unchanged.

        Params:
            value: Prop value, possibly containing references
            referenced_by: Component name used in error messages

        Returns:
            Value with all references substituted

        Raises:
            UnresolvedReferenceError: If any reference target is unresolved
        """
        if isinstance(value, DeferredRef):
            return self.lookup(value, referenced_by)
        if isinstance(value, list):
            return [self.substitute(item, referenced_by) for item in value]
        if isinstance(value, tuple):
            return tuple(self.substitute(item, referenced_by) for item in value)
        if isinstance(value, dict):
            return {key: self.substitute(item, referenced_by) for key, item in value.items()}
        return value

    def substitute_props(self, props: Mapping[str, Any], referenced_by: str | None = None) -> dict[str, Any]:
        """Substitute references in every prop value, returning a new dict."""
        return {key: self.substitute(value, referenced_by) for key, value in props.items()}

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, element: object) -> bool:
        return element in self._values
