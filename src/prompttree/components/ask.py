"""
Input-producing Ask components.

Each Ask component describes one value the prompt needs from the user. Visiting
one during a walk reports an `InputRequirement`; rendering resolves to the
supplied input (or the declared default) and prints it, or a `{name}`
placeholder when no value is available yet.
"""

from collections.abc import Mapping, Sequence
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field

from prompttree.core.element import Element
from prompttree.core.models import InputRequirement, SelectOption
from prompttree.core.types import InputType
from prompttree.structure.component import Component


class AskProps(BaseModel):
    """Props shared by every Ask component."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1)
    label: str
    description: str | None = None
    required: bool = False
    default: Any = None


class OptionProps(BaseModel):
    model_config = ConfigDict(extra="allow")

    value: str
    label: str | None = None
    text: str | None = None


class NumberProps(AskProps):
    default: float | None = None
    min: float | None = None
    max: float | None = None


class SelectProps(AskProps):
    default: str | None = None
    options: list[OptionProps] = Field(default_factory=list)


class MultiSelectProps(AskProps):
    default: list[str] | None = None
    options: list[OptionProps] = Field(default_factory=list)
    min: int | None = None
    max: int | None = None


class ConfirmProps(AskProps):
    default: bool | None = None


class DateProps(AskProps):
    default: str | None = None
    min_date: str | None = None
    max_date: str | None = None


class FileProps(AskProps):
    extensions: list[str] = Field(default_factory=list)
    multiple: bool = False
    must_exist: bool = False


class PathProps(AskProps):
    default: str | None = None
    must_exist: bool = False
    must_be_directory: bool = False


class RatingProps(AskProps):
    default: int | None = None
    min: int = 1
    max: int = 5
    labels: dict[int, str] = Field(default_factory=dict)


def text_of(children: Sequence[Any]) -> str | None:
    """Concatenate the literal text children of an element, None when there is none."""
    texts = [
        str(child)
        for child in children
        if isinstance(child, (str, int, float)) and not isinstance(child, bool)
    ]
    return "".join(texts) or None


def _is_child_of_kind(child: Any, component: type, names: tuple[str, ...]) -> bool:
    return isinstance(child, Element) and (child.type is component or child.type in names)


class AskComponent(Component):
    """
    Base class for Ask components.

    Subclasses set `input_type`, an optional props `schema`, and override
    `constraints` to add type-specific requirement fields and `format_value`
    to control how a collected value is printed.
    """

    schema: ClassVar[type[BaseModel]] = AskProps
    input_type: ClassVar[InputType] = "string"

    def requirement(self, props: Mapping[str, Any], context: Any) -> InputRequirement:
        """Describe the input this node collects."""
        return InputRequirement(
            name=props["name"],
            label=props["label"],
            description=props.get("description") or props["label"],
            type=self.input_type,
            required=bool(props.get("required", False)),
            default=props.get("default"),
            **self.constraints(props),
        )

    def constraints(self, props: Mapping[str, Any]) -> dict[str, Any]:
        return {}

    def resolve(self, props: Mapping[str, Any], context: Any) -> Any:
        value = context.inputs.get(props["name"])
        if value is None:
            return props.get("default")
        return value

    def render(self, props: Mapping[str, Any], value: Any, context: Any) -> str:
        if value is None:
            return "{" + props["name"] + "}"
        return self.format_value(props, value)

    def format_value(self, props: Mapping[str, Any], value: Any) -> str:
        return str(value)


class AskOption(Component):
    """Declares one choice of an enclosing select. Renders nothing on its own."""

    schema: ClassVar[type[BaseModel]] = OptionProps

    def render(self, props: Mapping[str, Any], context: Any) -> None:
        return None


class AskLabel(Component):
    """Declares the label of one rating value. Renders nothing on its own."""

    def render(self, props: Mapping[str, Any], context: Any) -> None:
        return None


_OPTION_NAMES = ("Ask.Option", "AskOption")
_LABEL_NAMES = ("Ask.Label", "AskLabel")


def collect_options(props: Mapping[str, Any]) -> list[SelectOption]:
    """
    Gather select options from `Ask.Option` children and the `options` prop.

    Child options come first. Missing labels fall back to the child text and
    then to the value; missing display text falls back to the label.

    Params:
        props: Props of a select component, including children

    Returns:
        Ordered list of SelectOption
    """
    raw: list[Mapping[str, Any]] = []
    for child in props.get("children", ()):
        if _is_child_of_kind(child, AskOption, _OPTION_NAMES):
            child_text = text_of(child.children)
            raw.append(
                {
                    "value": str(child.props.get("value", "")),
                    "label": child.props.get("label") or child_text,
                    "text": child_text,
                }
            )
    for option in props.get("options") or []:
        if isinstance(option, BaseModel):
            option = option.model_dump()
        raw.append(option)

    options = []
    for option in raw:
        value = str(option["value"])
        label = option.get("label") or value
        options.append(SelectOption(value=value, label=label, text=option.get("text") or label))
    return options


def collect_labels(props: Mapping[str, Any]) -> dict[int, str]:
    """Gather rating labels from `Ask.Label` children; the `labels` prop wins on conflicts."""
    labels: dict[int, str] = {}
    for child in props.get("children", ()):
        if not _is_child_of_kind(child, AskLabel, _LABEL_NAMES):
            continue
        text = text_of(child.children)
        try:
            value = int(child.props.get("value"))
        except (TypeError, ValueError):
            continue
        if text:
            labels[value] = text
    for key, text in (props.get("labels") or {}).items():
        labels[int(key)] = text
    return labels


def _option_text(options: list[SelectOption], value: Any) -> str:
    for option in options:
        if option.value == value:
            return option.text or option.label
    return str(value)


class AskText(AskComponent):
    pass


class AskEditor(AskComponent):
    pass


class AskSecret(AskComponent):
    input_type = "secret"


class AskNumber(AskComponent):
    schema = NumberProps
    input_type = "number"

    def constraints(self, props: Mapping[str, Any]) -> dict[str, Any]:
        return {"min": props.get("min"), "max": props.get("max")}

    def format_value(self, props: Mapping[str, Any], value: Any) -> str:
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)


class AskSelect(AskComponent):
    schema = SelectProps
    input_type = "select"

    def constraints(self, props: Mapping[str, Any]) -> dict[str, Any]:
        return {"options": collect_options(props)}

    def format_value(self, props: Mapping[str, Any], value: Any) -> str:
        return _option_text(collect_options(props), value)


class AskMultiSelect(AskComponent):
    schema = MultiSelectProps
    input_type = "multiselect"

    def constraints(self, props: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "options": collect_options(props),
            "min": props.get("min"),
            "max": props.get("max"),
        }

    def format_value(self, props: Mapping[str, Any], value: Any) -> str:
        if not isinstance(value, (list, tuple)):
            return str(value)
        options = collect_options(props)
        return ", ".join(_option_text(options, item) for item in value)


class AskConfirm(AskComponent):
    schema = ConfirmProps
    input_type = "boolean"
    implicit_default = False

    def format_value(self, props: Mapping[str, Any], value: Any) -> str:
        return "Yes" if value else "No"


class AskDate(AskComponent):
    schema = DateProps
    input_type = "date"

    def constraints(self, props: Mapping[str, Any]) -> dict[str, Any]:
        return {"min_date": props.get("min_date"), "max_date": props.get("max_date")}


class AskFile(AskComponent):
    schema = FileProps
    input_type = "file"

    def constraints(self, props: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "extensions": list(props.get("extensions") or []),
            "multiple": bool(props.get("multiple", False)),
            "must_exist": bool(props.get("must_exist", False)),
        }

    def format_value(self, props: Mapping[str, Any], value: Any) -> str:
        if isinstance(value, (list, tuple)):
            return ", ".join(str(item) for item in value)
        return str(value)


class AskPath(AskComponent):
    schema = PathProps
    input_type = "path"

    def constraints(self, props: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "must_exist": bool(props.get("must_exist", False)),
            "must_be_directory": bool(props.get("must_be_directory", False)),
        }


class AskRating(AskComponent):
    schema = RatingProps
    input_type = "rating"

    def constraints(self, props: Mapping[str, Any]) -> dict[str, Any]:
        return {
            "min": props.get("min", 1),
            "max": props.get("max", 5),
            "labels": collect_labels(props),
        }

    def format_value(self, props: Mapping[str, Any], value: Any) -> str:
        label = collect_labels(props).get(value) if isinstance(value, int) else None
        if label:
            return f"{value} ({label})"
        return str(value)


ASK_COMPONENTS: dict[str, type[Component]] = {
    "Text": AskText,
    "Editor": AskEditor,
    "Number": AskNumber,
    "Select": AskSelect,
    "MultiSelect": AskMultiSelect,
    "Confirm": AskConfirm,
    "Date": AskDate,
    "Secret": AskSecret,
    "File": AskFile,
    "Path": AskPath,
    "Rating": AskRating,
    "Option": AskOption,
    "Label": AskLabel,
}
