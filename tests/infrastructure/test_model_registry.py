"""Unit tests for ModelRegistry."""

import pytest

from application.exceptions import MissingCredentialError, UnknownModelError, UnknownProviderError
from domain.models import LlmProviderType
from infrastructure.model_registry import ModelRegistry


class TestModelRegistryResolve:
    """Test model resolution."""

    @pytest.mark.parametrize(
        ("name", "provider", "context_window"),
        [
            ("gpt-4", LlmProviderType.OPENAI, 8192),
            ("gpt-4o", LlmProviderType.OPENAI, 128000),
            ("sonar-medium-online", LlmProviderType.PERPLEXITY, 12000),
            ("llama3-70b-8192", LlmProviderType.GROQ, 8192),
        ],
    )
    def test_resolves_known_models(self, registry, name, provider, context_window):
        descriptor = registry.resolve(name)

        assert descriptor.name == name
        assert descriptor.provider == provider
        assert descriptor.context_window == context_window

    def test_credential_comes_from_configuration(self, registry):
        assert registry.resolve("gpt-4").credential == "sk-openai-test"
        assert registry.resolve("gemma-7b-it").credential == "gsk-test"

    def test_unknown_model(self, registry):
        with pytest.raises(UnknownModelError) as exc_info:
            registry.resolve("gpt-17")

        assert exc_info.value.status_code == 500
        assert exc_info.value.details == {"model": "gpt-17"}

    def test_missing_credential(self):
        registry = ModelRegistry(credentials={LlmProviderType.OPENAI: "sk-test"})

        with pytest.raises(MissingCredentialError):
            registry.resolve("mixtral-8x7b-32768")

    def test_lookups_are_pure(self, registry):
        """The same name always yields an equal descriptor or the same error."""
        assert registry.resolve("gpt-4") == registry.resolve("gpt-4")
        for _ in range(2):
            with pytest.raises(UnknownModelError):
                registry.resolve("nope")

    def test_only_openai_supports_tools(self, registry):
        assert registry.resolve("gpt-4").supports_tools is True
        assert registry.resolve("pplx-70b-online").supports_tools is False
        assert registry.resolve("llama3-8b-8192").supports_tools is False


class TestModelRegistryEndpoints:
    """Test provider endpoint lookup."""

    @pytest.mark.parametrize(
        ("provider", "endpoint"),
        [
            ("openai", "https://api.openai.com/v1/chat/completions"),
            ("perplexity", "https://api.perplexity.ai/chat/completions"),
            ("groq", "https://api.groq.com/openai/v1/chat/completions"),
        ],
    )
    def test_endpoint_for(self, registry, provider, endpoint):
        assert registry.endpoint_for(provider) == endpoint
        assert registry.endpoint_for(LlmProviderType(provider)) == endpoint

    def test_unknown_provider(self, registry):
        with pytest.raises(UnknownProviderError):
            registry.endpoint_for("anthropic")


class TestModelRegistryListing:
    """Test the model catalog exposed to clients."""

    def test_lists_every_provider(self, registry):
        providers = {descriptor.provider for descriptor in registry.list_models()}
        assert providers == set(LlmProviderType)

    def test_listing_never_exposes_credentials(self, registry):
        for descriptor in registry.list_models():
            assert "credential" not in descriptor.to_dict()
            assert "sk-openai-test" not in repr(descriptor)

    def test_filter_by_provider(self, registry):
        groq = registry.list_models(LlmProviderType.GROQ)
        assert {d.name for d in groq} == {"llama2-70b-4096", "mixtral-8x7b-32768", "gemma-7b-it", "llama3-8b-8192", "llama3-70b-8192"}
