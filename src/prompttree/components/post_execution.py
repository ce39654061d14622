"""
Post-execution components.

These components print nothing. They append an action record to the render
context, which the caller receives in `RenderResult.post_execution` and may
run once the prompt has been used.
"""

from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from prompttree.core.models import OpenUrlAction, ReviewFileAction, RunCommandAction
from prompttree.structure.component import Component


class ReviewFileProps(BaseModel):
    model_config = ConfigDict(extra="forbid")

    file: str
    editor: str | None = None


class OpenUrlProps(BaseModel):
    model_config = ConfigDict(extra="forbid")

    url: str
    browser: str | None = None


class RunCommandProps(BaseModel):
    model_config = ConfigDict(extra="forbid")

    command: str
    cwd: str | None = None
    env: dict[str, str] | None = None


class ReviewFile(Component):
    """Request that a file be opened for review."""

    schema = ReviewFileProps

    def render(self, props: Mapping[str, Any], context: Any) -> None:
        context.add_post_execution(ReviewFileAction(file=props["file"], editor=props.get("editor")))


class OpenUrl(Component):
    """Request that a URL be opened in a browser."""

    schema = OpenUrlProps

    def render(self, props: Mapping[str, Any], context: Any) -> None:
        context.add_post_execution(OpenUrlAction(url=props["url"], browser=props.get("browser")))


class RunCommand(Component):
    """Request that a shell command be run."""

    schema = RunCommandProps

    def render(self, props: Mapping[str, Any], context: Any) -> None:
        env = props.get("env")
        context.add_post_execution(
            RunCommandAction(
                command=props["command"],
                cwd=props.get("cwd"),
                env=dict(env) if env is not None else None,
            )
        )
