"""
Component contract.

Every element type is reduced to a `ComponentSpec`: a flat record of optional
capabilities (schema, resolve, render, requirement). The walkers dispatch on
which capabilities are present rather than on class hierarchy, so class-based
components, plain functions and hand-built specs behave the same way.
"""

from collections.abc import Callable, Mapping
from typing import Any, ClassVar

from attrs import frozen
from pydantic import BaseModel, ValidationError

from prompttree.core.models import InputRequirement, ValidationIssue

SchemaFunction = Callable[[Mapping[str, Any]], list[ValidationIssue]]


class Component:
    """
    Base class for class-based components.

    Subclasses implement any combination of:
      - `resolve(props, context)`: compute a value (may be async). The value is
        recorded for deferred references and, without `render`, stringified.
      - `render(props, value, context)`: produce output nodes from the resolved
        value; `render(props, context)` when there is no `resolve`.
      - `requirement(props, context)`: describe the input this node collects,
        which makes the component input-producing.

    Props passed to these methods include `children`. Instances are shared
    across renders, so components keep per-node state in their resolved value.

    Class attributes:
        schema: Pydantic model or validation function for props (children excluded)
        implicit_default: Default used for input requirements that declare none
    """

    schema: ClassVar[type[BaseModel] | SchemaFunction | None] = None
    implicit_default: ClassVar[Any] = None


def pydantic_schema(model: type[BaseModel]) -> SchemaFunction:
    """
    Adapt a pydantic model into a prop validation function.

    Params:
        model: Pydantic model describing the props

    Returns:
        Function returning one ValidationIssue per pydantic error
    """

    def validate(props: Mapping[str, Any]) -> list[ValidationIssue]:
        try:
            model.model_validate(dict(props))
        except ValidationError as exc:
            return [
                ValidationIssue(
                    field=".".join(str(part) for part in error["loc"]) or "props",
                    message=error["msg"],
                    code=error["type"],
                )
                for error in exc.errors()
            ]
        return []

    validate.__name__ = f"validate_{model.__name__}"
    return validate


def as_schema_function(schema: Any) -> SchemaFunction | None:
    if schema is None:
        return None
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        return pydantic_schema(schema)
    if callable(schema):
        return schema
    raise TypeError(f"Unsupported schema type: {type(schema).__name__}")


def is_component_class(value: Any) -> bool:
    return isinstance(value, type) and issubclass(value, Component)


@frozen
class ComponentSpec:
    """
    Behavior contract of one element type.

    Params:
        name: Display name used in errors and logs
        schema: Prop validation function
        resolve: `resolve(props, context)`, sync or async
        render: `render(props, value, context)`, or `render(props, context)` without resolve
        requirement: `requirement(props, context) -> InputRequirement`
        implicit_default: Default used when an input requirement declares none
    """

    name: str
    schema: SchemaFunction | None = None
    resolve: Callable[..., Any] | None = None
    render: Callable[..., Any] | None = None
    requirement: Callable[..., InputRequirement] | None = None
    implicit_default: Any = None

    @property
    def produces_input(self) -> bool:
        return self.requirement is not None

    @classmethod
    def from_component(cls, component: type[Component], name: str | None = None) -> "ComponentSpec":
        """
        Build a spec from a Component subclass.

        Params:
            component: Component class
            name: Registry name; defaults to the class name

        Returns:
            ComponentSpec with the capabilities the class implements
        """
        instance = component()
        return cls(
            name=name or component.__name__,
            schema=as_schema_function(component.schema),
            resolve=getattr(instance, "resolve", None),
            render=getattr(instance, "render", None),
            requirement=getattr(instance, "requirement", None),
            implicit_default=component.implicit_default,
        )

    @classmethod
    def from_function(cls, function: Callable[..., Any], name: str | None = None) -> "ComponentSpec":
        """Build a render-only spec from `function(props, context)`."""
        return cls(name=name or function.__name__, render=function)
