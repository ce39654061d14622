"""
Built-in components.

This package provides the conditional `If`, the input-producing `Ask.*`
components and the post-execution action components, plus a factory for a
registry holding all of them.
"""

from prompttree.components.ask import (
    ASK_COMPONENTS,
    AskComponent,
    AskConfirm,
    AskDate,
    AskEditor,
    AskFile,
    AskLabel,
    AskMultiSelect,
    AskNumber,
    AskOption,
    AskPath,
    AskRating,
    AskSecret,
    AskSelect,
    AskText,
)
from prompttree.components.control import If
from prompttree.components.post_execution import OpenUrl, ReviewFile, RunCommand
from prompttree.structure.registry import ComponentRegistry


def create_default_registry() -> ComponentRegistry:
    """
    Create a registry holding every built-in component.

    Ask components are registered under both their dotted name ("Ask.Text")
    and their flat class name ("AskText").

    Returns:
        New ComponentRegistry, independent of any other
    """
    registry = ComponentRegistry()
    registry.register("If", If)
    for suffix, component in ASK_COMPONENTS.items():
        registry.register(f"Ask.{suffix}", component)
        registry.register(f"Ask{suffix}", component)
    registry.register("ReviewFile", ReviewFile)
    registry.register("OpenUrl", OpenUrl)
    registry.register("RunCommand", RunCommand)
    return registry


__all__ = [
    "create_default_registry",
    "If",
    "AskComponent",
    "AskText",
    "AskEditor",
    "AskNumber",
    "AskSelect",
    "AskMultiSelect",
    "AskConfirm",
    "AskDate",
    "AskSecret",
    "AskFile",
    "AskPath",
    "AskRating",
    "AskOption",
    "AskLabel",
    "ReviewFile",
    "OpenUrl",
    "RunCommand",
]
