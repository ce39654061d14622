"""
Tests for the render engine.

This module tests text assembly, deferred references between nodes, node-local
error isolation, the depth limit, warning handling and render options.
"""

import pytest

from prompttree.config import MAX_RENDER_DEPTH, RenderOptions
from prompttree.core import Fragment, h
from prompttree.core.models import ValidationIssue
from prompttree.execution import RenderContext, RenderEngine, render
from prompttree.structure import Component, ComponentSpec


class TestTextAssembly:
    """Tests for turning nodes into text."""

    @pytest.mark.asyncio
    async def test_leaves_in_document_order(self, registry):
        """Test text, numbers and nested elements concatenate in order."""
        element = h(Fragment, None, "a", 1, h("Working"), ["b", ["c"]], 2.5)
        result = await render(element, registry=registry)
        assert result.text == "a1I workbc2.5"

    @pytest.mark.asyncio
    async def test_none_and_booleans_contribute_nothing(self, registry):
        """Test None and booleans returned by render print nothing."""

        def flags(props, context):
            return [True, None, "x", False]

        result = await render(h(flags), registry=registry)
        assert result.text == "x"

    @pytest.mark.asyncio
    async def test_trim_option(self, registry):
        """Test the final text is trimmed unless disabled."""
        element = h(Fragment, None, "  padded  ")
        assert (await render(element, registry=registry)).text == "padded"
        assert (await render(element, registry=registry, trim=False)).text == "  padded  "

    @pytest.mark.asyncio
    async def test_resolve_without_render_prints_value(self, registry):
        """Test a resolve-only component prints its stringified value."""
        result = await render(h("SlowValue", {"value": 42}), registry=registry)
        assert result.text == "42"

    @pytest.mark.asyncio
    async def test_spec_without_capabilities_prints_children(self, registry):
        """Test a spec with neither resolve nor render passes its children through."""
        wrapper = ComponentSpec(name="Wrapper")
        result = await render(h(wrapper, None, "inner"), registry=registry)
        assert result.text == "inner"

    @pytest.mark.asyncio
    async def test_async_render(self, registry):
        """Test async render functions are awaited."""

        async def later(props, context):
            return "later"

        assert (await render(h(later), registry=registry)).text == "later"

    @pytest.mark.asyncio
    async def test_invalid_node_recorded(self, registry):
        """Test unsupported output shapes are recorded and skipped."""

        def weird(props, context):
            return [object(), "ok"]

        result = await render(h(weird), registry=registry)
        assert result.text == "ok"
        assert [error.code for error in result.errors] == ["invalid_node"]
        assert result.errors[0].component == "weird"


class TestDeferredReferences:
    """Tests for references between nodes in one render."""

    @pytest.mark.asyncio
    async def test_backward_reference_in_props(self, registry):
        """Test a prop reference to an earlier node gets its value."""
        user = h("UserLookup", {"name": "Grace"})
        element = h(Fragment, None, user, " / ", h("Greeting", {"who": user.ref("name")}))
        result = await render(element, registry=registry)
        assert result.ok
        assert result.text == "Grace / Hello, Grace!"

    @pytest.mark.asyncio
    async def test_reference_as_child(self, registry):
        """Test a reference used as a child prints the value at its path."""
        user = h("UserLookup")
        element = h(Fragment, None, user, ":", user.ref("profile", "city"), ":", user.ref("roles", 0))
        assert (await render(element, registry=registry)).text == "Ada:London:admin"

    @pytest.mark.asyncio
    async def test_reused_element_prints_value(self, registry):
        """Test an already resolved element placed again prints its value."""
        answer = h("Ask.Text", {"name": "topic", "label": "Topic"})
        element = h(Fragment, None, answer, " and again ", answer)
        result = await render(element, {"topic": "owls"}, registry=registry)
        assert result.text == "owls and again owls"

    @pytest.mark.asyncio
    async def test_forward_reference_is_error(self, registry):
        """Test a reference to a later node fails instead of printing nothing."""
        user = h("UserLookup")
        element = h(Fragment, None, h("Greeting", {"who": user.ref("name")}), user)
        result = await render(element, registry=registry)
        assert not result.ok
        assert result.text == "Ada"
        [error] = result.errors
        assert error.code == "unresolved_reference"
        assert error.component == "Greeting"
        assert "UserLookup.name" in error.message

    @pytest.mark.asyncio
    async def test_detached_reference_is_error(self, registry):
        """Test a reference to an element outside the tree fails."""
        element = h(Fragment, None, "x", h("UserLookup").ref("name"))
        result = await render(element, registry=registry)
        assert result.errors[0].code == "unresolved_reference"
        assert result.text == "x"

    @pytest.mark.asyncio
    async def test_reference_from_render_output(self, registry):
        """Test elements built by a render function can reference earlier nodes."""

        def echo(props, context):
            return h("Greeting", {"who": props["target"].ref("name")})

        user = h("UserLookup", {"name": "Lin"})
        result = await render(h(Fragment, None, user, " ", h(echo, {"target": user})), registry=registry)
        assert result.text == "Lin Hello, Lin!"


class TestErrorIsolation:
    """Tests for node-local failures."""

    @pytest.mark.asyncio
    async def test_failing_sibling(self, registry):
        """Test a failing node does not stop its sibling from rendering."""
        result = await render(h(Fragment, None, h("Failing"), h("Working")), registry=registry)
        assert not result.ok
        assert "I work" in result.text
        assert len(result.errors) == 1
        assert result.errors[0].component == "Failing"
        assert result.errors[0].code == "runtime_error"
        assert "boom" in result.errors[0].message

    @pytest.mark.asyncio
    async def test_failed_resolve_value_is_none(self, registry):
        """Test a failed node can still be referenced and gives None."""
        failing = h("Failing")
        element = h(Fragment, None, failing, "[", failing.ref(), "]")
        result = await render(element, registry=registry)
        assert result.text == "[]"
        assert len(result.errors) == 1

    @pytest.mark.asyncio
    async def test_unknown_component_siblings_render(self, registry):
        """Test unknown types are reported as undefined and skipped."""
        element = h(Fragment, None, h("Ask.FooBar", {}, "child text"), h("Working"))
        result = await render(element, registry=registry)
        assert result.text == "I work"
        [error] = result.errors
        assert error.code == "unknown_component"
        assert "undefined" in error.message
        assert "Ask.FooBar" in error.message

    @pytest.mark.asyncio
    async def test_render_exception(self, registry):
        """Test exceptions raised by render are recorded as runtime errors."""

        def broken(props, context):
            raise ValueError("bad render")

        result = await render(h(Fragment, None, h(broken), "after"), registry=registry)
        assert result.text == "after"
        assert result.errors[0].message == "Runtime error in broken (render): bad render"
        assert result.errors[0].phase == "render"

    @pytest.mark.asyncio
    async def test_schema_exception_siblings_render(self, registry):
        """Test a schema function that raises fails only its own node."""

        def schema(props):
            raise TypeError("schema blew up")

        bad = ComponentSpec(name="Bad", schema=schema, render=lambda props, context: "bad")
        result = await render(h(Fragment, None, h(bad), h("Working")), registry=registry)
        assert not result.ok
        assert result.text == "I work"
        [error] = result.errors
        assert error.code == "runtime_error"
        assert error.phase == "schema"
        assert "schema blew up" in error.message

    @pytest.mark.asyncio
    async def test_component_constructor_exception(self, registry):
        """Test a component class that cannot be instantiated fails only its own node."""

        class Unbuildable(Component):
            def __init__(self):
                raise RuntimeError("ctor")

            def render(self, props, context):
                return "never"

        result = await render(h(Fragment, None, h(Unbuildable), h("Working")), registry=registry)
        assert not result.ok
        assert result.text == "I work"
        [error] = result.errors
        assert error.component == "Unbuildable"
        assert error.phase == "setup"
        assert "ctor" in error.message

    @pytest.mark.asyncio
    async def test_requirement_exception_phase(self, registry):
        """Test a failing requirement step is recorded with its phase."""
        result = await render(h("Ask.Text", {"label": "No name"}), registry=registry, validate_props=False)
        assert result.errors[0].code == "runtime_error"
        assert result.errors[0].phase == "requirement"


class TestDepthLimit:
    """Tests for the maximum nesting depth."""

    @pytest.mark.asyncio
    async def test_deep_subtree_cut_off(self, registry):
        """Test nodes past max_depth are skipped with an error."""
        element = h(Fragment, None, "top", h(Fragment, None, "mid", h(Fragment, None, "deep")))
        result = await render(element, registry=registry, max_depth=2)
        assert result.text == "topmid"
        [error] = result.errors
        assert error.code == "max_depth_exceeded"

    @pytest.mark.asyncio
    async def test_self_expanding_component_stops(self, registry):
        """Test a component that renders itself forever is stopped by the limit."""

        def recurse(props, context):
            return [".", h(recurse)]

        result = await render(h(recurse), registry=registry, max_depth=5)
        assert result.text == "....."
        assert result.errors[0].code == "max_depth_exceeded"

    @pytest.mark.asyncio
    async def test_self_expanding_component_at_largest_depth(self, registry):
        """Test the largest allowed depth is cut off by the limit, not by the interpreter."""

        def recurse(props, context):
            return [".", h(recurse)]

        result = await render(h(recurse), registry=registry, max_depth=MAX_RENDER_DEPTH)
        assert result.text == "." * MAX_RENDER_DEPTH
        [error] = result.errors
        assert error.code == "max_depth_exceeded"


class TestWarnings:
    """Tests for warning handling and options."""

    @staticmethod
    def spec_with_warning():
        def schema(props):
            return [ValidationIssue(field="old", message="deprecated prop", code="warn_deprecated")]

        return ComponentSpec(name="Legacy", schema=schema, render=lambda props, context: "legacy")

    @pytest.mark.asyncio
    async def test_warning_does_not_fail(self, registry):
        """Test warnings are reported separately and the node still renders."""
        result = await render(h(self.spec_with_warning(), {"old": 1}), registry=registry)
        assert result.ok
        assert result.text == "legacy"
        assert [warning.code for warning in result.warnings] == ["warn_deprecated"]
        assert result.errors == ()

    @pytest.mark.asyncio
    async def test_throw_on_warnings(self, registry):
        """Test warnings can be promoted to errors."""
        result = await render(h(self.spec_with_warning()), registry=registry, throw_on_warnings=True)
        assert not result.ok
        assert result.errors[0].code == "warn_deprecated"

    @pytest.mark.asyncio
    async def test_ignore_warnings(self, registry):
        """Test ignored warning codes are dropped."""
        result = await render(
            h(self.spec_with_warning()), registry=registry, ignore_warnings={"warn_deprecated"}
        )
        assert result.warnings == ()

    @pytest.mark.asyncio
    async def test_validation_can_be_disabled(self, registry):
        """Test schemas are skipped when validate_props is off."""
        result = await render(h("Ask.Text", {"label": "No name"}), registry=registry, validate_props=False)
        # Without a name the component fails at runtime instead
        assert result.errors[0].code == "runtime_error"


class TestRenderEngine:
    """Tests for the engine object and determinism."""

    @pytest.mark.asyncio
    async def test_deterministic(self, registry):
        """Test rendering twice gives identical text and error order."""
        element = h(
            Fragment,
            None,
            h("Failing"),
            h("Ask.FooBar"),
            h("If", {"when": "=x>1"}, "big"),
            h("Working"),
        )
        engine = RenderEngine(registry)
        first = await engine.render(element, {"x": 2})
        second = await engine.render(element, {"x": 2})
        assert first.text == second.text == "bigI work"
        assert [e.message for e in first.errors] == [e.message for e in second.errors]

    @pytest.mark.asyncio
    async def test_inputs_not_mutated(self, registry):
        """Test the caller's inputs are never changed."""
        inputs = {"topic": "owls"}
        await render(h("Ask.Text", {"name": "other", "label": "Other", "default": "x"}), inputs)
        assert inputs == {"topic": "owls"}

    @pytest.mark.asyncio
    async def test_explicit_context(self, registry):
        """Test rendering with a prepared context uses its inputs."""
        engine = RenderEngine(registry, RenderOptions(trim=False))
        context = RenderContext.create({"topic": "owls"}, registry=registry)
        result = await engine.render(h("Ask.Text", {"name": "topic", "label": "Topic"}), context=context)
        assert result.text == "owls"
        assert context.inputs["topic"] == "owls"

    @pytest.mark.asyncio
    async def test_context_carries_runtime(self, registry):
        """Test components can read runtime values from the environment."""
        seen = {}

        def probe(props, context):
            seen["uuid"] = context.env.runtime.uuid
            return None

        await render(h(probe), registry=registry)
        assert seen["uuid"]
