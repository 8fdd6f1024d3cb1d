"""RIM Agent Host main application entry point with Neuroglia framework."""

import logging

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from neuroglia.hosting.web import SubAppConfig, WebApplicationBuilder
from neuroglia.mapping import Mapper
from neuroglia.mediation import Mediator
from neuroglia.observability import Observability
from neuroglia.serialization.json import JsonSerializer

from application.actions import (
    AddMemoHandler,
    GenerateImageHandler,
    GetWalletInfoHandler,
    SearchYoutubeVideoHandler,
    SwapHandler,
    ToolCatalog,
    TransferSolHandler,
    build_default_catalog,
)
from application.services import (
    ActionDispatcher,
    ActionResolver,
    AnswerSampling,
    BudgetAllocator,
    ConversationComposer,
    MessageService,
    RimService,
)
from application.settings import Settings, app_settings, configure_logging
from infrastructure import HttpClientsLifecycle, ModelRegistry
from infrastructure.adapters import CompletionClient, ImageGenerationClient, WalletClient, YoutubeSearchClient

configure_logging(log_level=app_settings.log_level)
log = logging.getLogger(__name__)


def create_app(settings: Settings = app_settings) -> FastAPI:
    """Create and configure the RIM Agent Host application.

    The API is mounted under ``/api``; controllers are discovered from
    ``api.controllers``.

    Returns:
        Configured FastAPI application with Neuroglia framework
    """
    log.debug("🚀 Creating RIM Agent Host application...")

    builder = WebApplicationBuilder(app_settings=settings)

    # Controllers resolve their services from the container; no commands or queries
    Mediator.configure(builder, [])
    Mapper.configure(builder, [])
    JsonSerializer.configure(builder, ["domain.models"])
    Observability.configure(builder)

    _configure_rim_services(builder, settings)

    builder.add_sub_app(
        SubAppConfig(
            path="/api",
            name="api",
            title=f"{settings.app_name} API",
            description="Action routing and streaming completions",
            version=settings.app_version,
            controllers=["api.controllers"],
            docs_url="/docs",
        )
    )

    app = builder.build_app_with_lifespan(
        title=settings.app_name,
        description="Conversational action routing with streamed rich interactive messages",
        version=settings.app_version,
        debug=settings.debug,
    )

    if settings.enable_cors:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    log.info("✅ RIM Agent Host application created successfully!")
    log.info("📊 Access points:")
    log.info(f"   - API Docs: http://localhost:{settings.app_port}/api/docs")
    return app


def _configure_rim_services(builder: WebApplicationBuilder, settings: Settings) -> None:
    """Build the registry, catalog, clients and services and register them as singletons.

    Handler/catalog mismatches raise ConfigurationError here, at startup.
    """
    log.info("🔧 Configuring RIM services...")

    builder.services.add_singleton(Settings, singleton=settings)

    registry = ModelRegistry.configure(builder, settings)
    catalog = build_default_catalog()
    builder.services.add_singleton(ToolCatalog, singleton=catalog)

    completion_http = httpx.AsyncClient(timeout=settings.completion_timeout)
    collaborator_http = httpx.AsyncClient(timeout=settings.collaborator_timeout)
    HttpClientsLifecycle.configure(builder, completion=completion_http, collaborators=collaborator_http)

    completion = CompletionClient.configure(builder, registry, settings, http_client=completion_http)
    allocator = BudgetAllocator()

    images = ImageGenerationClient(
        collaborator_http,
        api_key=settings.openai_api_key,
        url=settings.openai_images_url,
        model=settings.image_model,
        size=settings.image_size,
    )
    youtube = YoutubeSearchClient(collaborator_http, api_key=settings.youtube_api_key, url=settings.youtube_search_url)
    wallet = WalletClient(collaborator_http, rpc_url=settings.solana_rpc_url, token_program_id=settings.solana_token_program_id)

    persona = settings.luna_persona
    dispatcher = ActionDispatcher(
        [
            GenerateImageHandler(persona, images),
            SearchYoutubeVideoHandler(persona, youtube, max_results=settings.youtube_max_results),
            AddMemoHandler(persona, settings.blink_base_url),
            TransferSolHandler(persona, settings.blink_base_url),
            SwapHandler(persona, settings.blink_base_url),
            GetWalletInfoHandler(persona, wallet),
        ],
        catalog,
    )
    resolver = ActionResolver(
        completion,
        registry,
        catalog,
        allocator,
        model=settings.resolver_model,
        system_prompt=settings.resolver_system_prompt,
        reserved_tokens=settings.resolver_max_tokens,
    )
    rim_service = RimService(
        resolver,
        dispatcher,
        ConversationComposer(fallback_persona=settings.fallback_persona),
        completion,
        AnswerSampling(
            model=settings.answer_model,
            temperature=settings.answer_temperature,
            max_tokens=settings.answer_max_tokens,
            top_p=settings.answer_top_p,
            frequency_penalty=settings.answer_frequency_penalty,
            presence_penalty=settings.answer_presence_penalty,
        ),
    )

    builder.services.add_singleton(BudgetAllocator, singleton=allocator)
    builder.services.add_singleton(ActionDispatcher, singleton=dispatcher)
    builder.services.add_singleton(ActionResolver, singleton=resolver)
    builder.services.add_singleton(RimService, singleton=rim_service)
    builder.services.add_singleton(
        MessageService,
        singleton=MessageService(completion, registry, allocator, default_system_prompt=settings.default_system_prompt),
    )

    log.info(f"✅ RIM services configured: {len(catalog)} tools, handlers={dispatcher.handler_names}")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:create_app",
        factory=True,
        host=app_settings.app_host,
        port=app_settings.app_port,
        reload=app_settings.debug,
    )
