"""Model Registry: static lookup of models, providers and endpoints.

The registry is built once at startup from the provider tables below and
the configured credentials, then shared read-only by every request.
"""

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING, Mapping, Optional, Union

from application.exceptions import MissingCredentialError, UnknownModelError, UnknownProviderError
from application.settings import Settings
from domain.models import LlmProviderType, ModelDescriptor

if TYPE_CHECKING:
    from neuroglia.hosting.web import WebApplicationBuilder

logger = logging.getLogger(__name__)


# =============================================================================
# Provider Tables
# =============================================================================

PROVIDER_ENDPOINTS: Mapping[LlmProviderType, str] = MappingProxyType(
    {
        LlmProviderType.OPENAI: "https://api.openai.com/v1/chat/completions",
        LlmProviderType.PERPLEXITY: "https://api.perplexity.ai/chat/completions",
        LlmProviderType.GROQ: "https://api.groq.com/openai/v1/chat/completions",
    }
)

# model name -> context window, per provider
PROVIDER_MODELS: Mapping[LlmProviderType, Mapping[str, int]] = MappingProxyType(
    {
        LlmProviderType.OPENAI: MappingProxyType(
            {
                "gpt-3.5-turbo": 4096,
                "gpt-4": 8192,
                "gpt-4-turbo": 128000,
                "gpt-4o-mini": 128000,
                "gpt-4o": 128000,
            }
        ),
        LlmProviderType.PERPLEXITY: MappingProxyType(
            {
                "mistral-7b-instruct": 16384,
                "mixtral-8x7b-instruct": 16384,
                "llama-2-13b-chat": 4096,
                "llama-2-70b-chat": 4096,
                "codellama-70b-instruct": 16384,
                "pplx-70b-online": 4096,
                "sonar-small-chat": 16384,
                "sonar-small-online": 12000,
                "sonar-medium-chat": 16384,
                "sonar-medium-online": 12000,
                "llama-3-sonar-large-32k-online": 28000,
                "llama-3-sonar-small-32k-online": 28000,
            }
        ),
        LlmProviderType.GROQ: MappingProxyType(
            {
                "llama2-70b-4096": 4096,
                "mixtral-8x7b-32768": 32768,
                "gemma-7b-it": 8192,
                "llama3-8b-8192": 8192,
                "llama3-70b-8192": 8192,
            }
        ),
    }
)


class ModelRegistry:
    """Pure lookups from model name to descriptor and from provider to endpoint.

    Nothing here performs I/O; the same input always yields the same
    descriptor or the same error.
    """

    def __init__(
        self,
        credentials: Mapping[LlmProviderType, str],
        models: Mapping[LlmProviderType, Mapping[str, int]] = PROVIDER_MODELS,
        endpoints: Mapping[LlmProviderType, str] = PROVIDER_ENDPOINTS,
    ) -> None:
        self._credentials = MappingProxyType({provider: credentials.get(provider, "") for provider in LlmProviderType})
        self._endpoints = MappingProxyType(dict(endpoints))
        self._descriptors: Mapping[str, ModelDescriptor] = MappingProxyType(
            {
                name: ModelDescriptor(
                    name=name,
                    provider=provider,
                    context_window=context_window,
                    credential=self._credentials.get(provider, ""),
                )
                for provider, table in models.items()
                for name, context_window in table.items()
            }
        )

    def resolve(self, name: str) -> ModelDescriptor:
        """Resolve a model name to its descriptor.

        Raises:
            UnknownModelError: If no provider table lists the model
            MissingCredentialError: If the model's provider has no credential
        """
        descriptor = self._descriptors.get(name)
        if descriptor is None:
            raise UnknownModelError(name)
        if not descriptor.credential:
            raise MissingCredentialError(descriptor.provider.value)
        return descriptor

    def endpoint_for(self, provider: Union[LlmProviderType, str]) -> str:
        """Return the chat-completion URL for a provider.

        Raises:
            UnknownProviderError: If the provider is not known
        """
        try:
            provider_type = LlmProviderType(provider)
        except ValueError:
            raise UnknownProviderError(str(provider)) from None
        endpoint = self._endpoints.get(provider_type)
        if endpoint is None:
            raise UnknownProviderError(provider_type.value)
        return endpoint

    def list_models(self, provider: Optional[LlmProviderType] = None) -> list[ModelDescriptor]:
        """List every known model, optionally for a single provider."""
        return [d for d in self._descriptors.values() if provider is None or d.provider == provider]

    def is_configured(self, provider: LlmProviderType) -> bool:
        return bool(self._credentials.get(provider))

    @classmethod
    def from_settings(cls, settings: Settings) -> "ModelRegistry":
        return cls(
            credentials={
                LlmProviderType.OPENAI: settings.openai_api_key,
                LlmProviderType.PERPLEXITY: settings.perplexity_api_key,
                LlmProviderType.GROQ: settings.groq_api_key,
            }
        )

    @staticmethod
    def configure(builder: "WebApplicationBuilder", settings: Settings) -> "ModelRegistry":
        """Build the registry and register it as a singleton."""
        registry = ModelRegistry.from_settings(settings)
        builder.services.add_singleton(ModelRegistry, singleton=registry)
        configured = [p.value for p in LlmProviderType if registry.is_configured(p)]
        logger.info(f"✅ ModelRegistry configured: {len(registry.list_models())} models, credentials for {configured or 'no providers'}")
        return registry
