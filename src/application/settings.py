"""Application settings configuration for the RIM Agent Host."""

import logging
import sys
from typing import Optional

from neuroglia.hosting.abstractions import ApplicationSettings


class Settings(ApplicationSettings):
    """RIM Agent Host settings: provider credentials, sampling and collaborators."""

    # Debugging Configuration
    debug: bool = True
    environment: str = "development"  # development, production
    log_level: str = "INFO"

    # Application Configuration
    app_name: str = "RIM Agent Host"
    app_version: str = "1.0.0"
    app_host: str = "127.0.0.1"  # Uvicorn bind address
    app_port: int = 8060  # Uvicorn port

    # Observability Configuration
    service_name: str = "rim-agent-host"
    service_version: str = app_version
    deployment_environment: str = "development"

    observability_enabled: bool = True
    observability_metrics_enabled: bool = True
    observability_tracing_enabled: bool = True
    observability_logging_enabled: bool = True
    observability_health_endpoint: bool = True
    observability_metrics_endpoint: bool = True
    observability_ready_endpoint: bool = True
    observability_health_path: str = "/health"
    observability_metrics_path: str = "/metrics"
    observability_ready_path: str = "/ready"
    observability_health_checks: list[str] = []

    otel_enabled: bool = False  # Optional - enable for tracing
    otel_endpoint: str = "http://otel-collector:4317"
    otel_protocol: str = "grpc"
    otel_timeout: int = 10
    otel_console_export: bool = False
    otel_instrument_fastapi: bool = True
    otel_instrument_httpx: bool = True
    otel_instrument_logging: bool = True
    otel_instrument_system_metrics: bool = False
    otel_resource_attributes: dict = {}

    # CORS Configuration
    enable_cors: bool = True
    cors_origins: list[str] = ["http://localhost:3000"]

    # ==========================================================================
    # Language Model Providers
    # ==========================================================================
    # A provider without a credential is still listed; resolving one of its
    # models fails with a configuration error.
    openai_api_key: str = ""
    perplexity_api_key: str = ""
    groq_api_key: str = ""

    completion_timeout: float = 120.0  # Seconds; streaming reads may be long
    # Tokens kept free for the tool catalog when max_tokens is derived
    reserved_tool_overhead: int = 1024

    # ==========================================================================
    # Action Resolution
    # ==========================================================================
    resolver_model: str = "gpt-4"
    resolver_system_prompt: str = "You are an AI assistant that solves the best function to be performed based on user input."
    resolver_max_tokens: int = 1024  # Reserved when trimming the classification prompt

    # ==========================================================================
    # Final Answer Sampling
    # ==========================================================================
    answer_model: str = "gpt-4"
    answer_temperature: float = 0.5
    answer_max_tokens: int = 1024
    answer_top_p: float = 1.0
    answer_frequency_penalty: float = 0.0001
    answer_presence_penalty: float = 0.0

    # Personas
    luna_persona: str = "You are Luna AI, a Crypto Solana AI Assistant. Answer the user in a funny enthusiastic way."
    fallback_persona: str = "Answer the user in a funny sarcastic way"
    default_system_prompt: str = "You are a helpful assistant."

    # ==========================================================================
    # Action Collaborators
    # ==========================================================================
    blink_base_url: str = "https://appapi.lunadefi.ai/blinks"

    openai_images_url: str = "https://api.openai.com/v1/images/generations"
    image_model: str = "dall-e-3"
    image_size: str = "1024x1024"

    youtube_api_key: str = ""
    youtube_search_url: str = "https://www.googleapis.com/youtube/v3/search"
    youtube_max_results: int = 1

    solana_rpc_url: str = "https://api.mainnet-beta.solana.com"
    solana_token_program_id: str = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"

    collaborator_timeout: float = 30.0  # HTTP timeout for action collaborators

    # Optional public URL used in access-point logs
    app_url: Optional[str] = None

    class Config:
        env_file = ".env"
        env_prefix = "RIM_HOST_"  # All env vars prefixed with RIM_HOST_
        case_sensitive = False
        extra = "ignore"


app_settings = Settings()


def configure_logging(log_level: str = "INFO") -> None:
    """
    Configure application-wide logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from third-party loggers
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("fastapi").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
