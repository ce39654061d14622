"""
Tests for environment and render configuration.
"""

import pytest
from pydantic import ValidationError

from prompttree.config import (
    DEFAULT_ENVIRONMENT,
    MAX_RENDER_DEPTH,
    LlmConfig,
    OutputFormat,
    Provider,
    RenderOptions,
    RuntimeConfig,
    create_environment,
    create_runtime_config,
)
from prompttree.execution import RenderContext


class TestEnvironment:
    """Tests for environment models."""

    def test_defaults(self):
        """Test the default environment values."""
        assert DEFAULT_ENVIRONMENT.llm.provider is Provider.anthropic
        assert DEFAULT_ENVIRONMENT.output.format is OutputFormat.xml
        assert DEFAULT_ENVIRONMENT.runtime == RuntimeConfig()

    def test_create_environment_with_mapping(self):
        """Test section overrides given as mappings keep the other defaults."""
        env = create_environment(llm={"provider": "openai", "model": "gpt-4o"})
        assert env.llm.provider is Provider.openai
        assert env.llm.model == "gpt-4o"
        assert env.output == DEFAULT_ENVIRONMENT.output

    def test_create_environment_with_model(self):
        """Test section overrides given as model instances."""
        env = create_environment(llm=LlmConfig(model="gemini-pro", provider=Provider.google))
        assert env.llm.provider is Provider.google

    def test_environment_is_frozen(self):
        """Test environment sections cannot be changed."""
        with pytest.raises(ValidationError):
            DEFAULT_ENVIRONMENT.llm.model = "other"

    def test_unknown_provider_rejected(self):
        """Test invalid providers fail validation."""
        with pytest.raises(ValidationError):
            create_environment(llm={"provider": "unknown"})


class TestRuntimeConfig:
    """Tests for runtime value collection."""

    def test_runtime_values_filled(self):
        """Test runtime values are collected from the machine."""
        runtime = create_runtime_config()
        assert runtime.hostname
        assert runtime.uuid
        assert runtime.timestamp > 0
        assert len(runtime.date) == 10

    def test_context_fills_runtime(self):
        """Test contexts collect runtime values for default environments."""
        context = RenderContext.create()
        assert context.env.runtime.uuid

    def test_context_keeps_explicit_runtime(self):
        """Test an environment that already carries runtime values is kept."""
        env = create_environment(runtime={"hostname": "builder", "uuid": "fixed"})
        context = RenderContext.create(env=env)
        assert context.env.runtime.uuid == "fixed"


class TestRenderOptions:
    """Tests for render option validation."""

    def test_defaults(self):
        """Test default render options."""
        options = RenderOptions()
        assert options.trim
        assert options.validate_props
        assert options.max_depth == 100
        assert options.ignore_warnings == frozenset()

    def test_max_depth_positive(self):
        """Test max_depth must be at least 1."""
        with pytest.raises(ValidationError):
            RenderOptions(max_depth=0)

    def test_max_depth_upper_bound(self):
        """Test max_depth cannot exceed the depth the walker can recurse to."""
        RenderOptions(max_depth=MAX_RENDER_DEPTH)
        with pytest.raises(ValidationError):
            RenderOptions(max_depth=MAX_RENDER_DEPTH + 1)

    def test_context_rejects_excessive_depth(self):
        """Test contexts built directly enforce the same bound."""
        with pytest.raises(ValueError, match="max_depth"):
            RenderContext.create(max_depth=10_000)
