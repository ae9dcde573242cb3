"""Application entry point: FastAPI routes plus the background refresh loop.

Runs the operator-facing HTTP API (FastAPI on uvicorn) and the thread cache
refresh loop concurrently in a single long-running process.

Configures:
- **structlog** with JSON rendering (production) or colored console (development)
- **Gmail** and **Anthropic** clients from settings, when credentials exist
- **ThreadCache** wired to the classifier, response generator, and
  attachment storage
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI

from replydesk.api import router as api_router
from replydesk.config import Settings, get_settings, validate_credentials
from replydesk.health import register_health_routes
from replydesk.llm.knowledge_base import (
    load_consultation_template,
    load_examples,
    load_signature,
)
from replydesk.storage.attachments import AttachmentStorage
from replydesk.threads.cache import ThreadCache, run_refresh_loop

logger = structlog.get_logger()


def configure_logging(production: bool = False) -> None:
    """Configure structlog for production (JSON) or development (console).

    Production mode (*production=True*): JSON rendering at INFO level.
    Development mode: colored console rendering at DEBUG level.

    Args:
        production: Enable production mode if ``True``.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if production:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
        log_level = logging.INFO
    else:
        renderer = structlog.dev.ConsoleRenderer()
        log_level = logging.DEBUG

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    structlog.contextvars.bind_contextvars(service="replydesk")


def initialize_services(settings: Settings | None = None) -> dict[str, Any]:
    """Set up all shared services for the application.

    Creates the attachment storage and loads the signature and knowledge
    base.  Creates the GmailClient (if the token file exists) and the
    Anthropic client (if an API key is set); the ThreadCache is only
    created when both are available.

    Args:
        settings: Application settings.  If ``None``, ``get_settings()`` is used.

    Returns:
        A dict of initialized service instances keyed by name.
    """
    if settings is None:
        settings = get_settings()

    services: dict[str, Any] = {"_settings": settings}

    kb_dir = settings.knowledge_base_dir
    services["attachment_storage"] = AttachmentStorage(settings.attachments_dir)
    services["signature_html"] = load_signature(kb_dir)

    # a. GmailClient (if gmail token file exists)
    gmail_client = None
    if settings.gmail_token_path.exists():
        try:
            from replydesk.auth.credentials import get_gmail_service
            from replydesk.email.client import GmailClient

            service = get_gmail_service(
                token_path=settings.gmail_token_path,
                credentials_path=settings.gmail_credentials_path,
            )
            gmail_client = GmailClient(service, settings.agent_email)
            logger.info("GmailClient initialized")
        except Exception:
            logger.warning("Failed to initialize GmailClient", exc_info=True)
    else:
        logger.info("Gmail token file not found, GmailClient disabled")
    services["gmail_client"] = gmail_client

    # b. Anthropic client (if anthropic_api_key is set)
    anthropic_client = None
    api_key = settings.anthropic_api_key.get_secret_value()
    if api_key:
        try:
            from replydesk.llm.client import get_anthropic_client

            anthropic_client = get_anthropic_client(api_key)
            logger.info("Anthropic client initialized")
        except Exception:
            logger.warning("Failed to initialize Anthropic client", exc_info=True)
    else:
        logger.info("ANTHROPIC_API_KEY not set, Anthropic client disabled")
    services["anthropic_client"] = anthropic_client

    # c. Thread cache (needs both providers)
    thread_cache = None
    if gmail_client is not None and anthropic_client is not None:
        from replydesk.llm.composer import ResponseGenerator
        from replydesk.threads.classifier import ThreadClassifier

        generator = ResponseGenerator(
            anthropic_client,
            load_examples(kb_dir),
            load_consultation_template(kb_dir),
            model=settings.compose_model,
            business_name=settings.business_name,
            business_domain=settings.business_domain,
            reply_language=settings.reply_language,
        )
        thread_cache = ThreadCache(
            gmail_client,
            ThreadClassifier(gmail_client, generator),
            services["attachment_storage"],
            services["signature_html"],
            unreplied_query=settings.unreplied_query,
            replied_query=settings.replied_query,
            max_results=settings.thread_list_max_results,
        )
        logger.info("ThreadCache initialized")
    else:
        logger.info("GmailClient or Anthropic client unavailable, ThreadCache disabled")
    services["thread_cache"] = thread_cache

    return services


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Lifespan context manager for FastAPI startup and shutdown logging.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application.
    """
    logger.info("FastAPI application starting")
    yield
    logger.info("FastAPI application stopped")


def create_app(services: dict[str, Any]) -> FastAPI:
    """Create the FastAPI app with the operator API and health routes.

    Args:
        services: The initialized services dict from ``initialize_services``.

    Returns:
        The configured FastAPI application.
    """
    fastapi_app = FastAPI(title="Reply Desk", lifespan=lifespan)
    fastapi_app.state.services = services
    fastapi_app.state.settings = services.get("_settings") or get_settings()
    fastapi_app.include_router(api_router)
    register_health_routes(fastapi_app)
    return fastapi_app


async def main() -> None:
    """Main entry point: run FastAPI and the refresh loop concurrently.

    1. Configure logging
    2. Validate credentials and initialize services
    3. Create FastAPI app
    4. Run uvicorn + the thread cache refresh loop with asyncio.gather
    """
    settings = get_settings()
    configure_logging(production=settings.production)
    logger.info("Application starting")

    validate_credentials(settings)

    services = initialize_services(settings)

    fastapi_app = create_app(services)

    config = uvicorn.Config(
        fastapi_app,
        host="0.0.0.0",
        port=settings.port,
        log_level="info",
    )
    server = uvicorn.Server(config)

    tasks_to_run: list[Any] = [server.serve()]
    thread_cache = services.get("thread_cache")
    if thread_cache is not None:
        tasks_to_run.append(run_refresh_loop(thread_cache, settings.refresh_interval_seconds))
    else:
        logger.warning("Refresh loop not started, thread cache unavailable")
    await asyncio.gather(*tasks_to_run)


def run() -> None:
    """Console-script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
