"""
Shared test fixtures and components for the prompttree test suite.
"""

import asyncio

import pytest

from prompttree.components import create_default_registry
from prompttree.structure import Component


class Failing(Component):
    """Component whose resolve step always raises."""

    def resolve(self, props, context):
        raise RuntimeError("boom")


class Working(Component):
    """Render-only component printing a fixed text."""

    def render(self, props, context):
        return "I work"


class UserLookup(Component):
    """Component resolving to a nested record, used as a reference target."""

    def resolve(self, props, context):
        return {
            "name": props.get("name", "Ada"),
            "roles": ["admin", "author"],
            "profile": {"city": "London"},
        }

    def render(self, props, value, context):
        return value["name"]


class Greeting(Component):
    """Component printing a greeting for a `who` prop."""

    def render(self, props, context):
        return f"Hello, {props['who']}!"


class SlowValue(Component):
    """Component with an async resolve step."""

    async def resolve(self, props, context):
        await asyncio.sleep(0)
        return props.get("value", "slow")


@pytest.fixture
def registry():
    """Registry with the built-in components plus the test components above.

    Usage:
        def test_something(registry):
            result = await render(h("Working"), registry=registry)
    """
    registry = create_default_registry()
    registry.register("Failing", Failing)
    registry.register("Working", Working)
    registry.register("UserLookup", UserLookup)
    registry.register("Greeting", Greeting)
    registry.register("SlowValue", SlowValue)
    return registry
