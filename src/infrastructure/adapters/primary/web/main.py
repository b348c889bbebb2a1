import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.configuration.config import Settings, get_settings
from src.configuration.di_container import DIContainer
from src.infrastructure.adapters.primary.web.middleware import configure_exception_handlers
from src.infrastructure.adapters.primary.web.routers import ai_agents, webhooks

logger = logging.getLogger(__name__)

# Fix LiteLLM duplicate logging - prevent log propagation to root logger
# LiteLLM adds its own handler AND allows propagation by default, causing duplicate logs
_litellm_loggers = ["LiteLLM", "LiteLLM Router", "LiteLLM Proxy"]
for _logger_name in _litellm_loggers:
    _litellm_logger = logging.getLogger(_logger_name)
    _litellm_logger.propagate = False


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=settings.log_format,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting AI Agent Bridge...")
    container: Optional[DIContainer] = getattr(app.state, "container", None)
    if container is None:
        container = DIContainer(settings=app.state.settings)
        app.state.container = container

    container.agent_registry().start()
    logger.info("AI Agent Bridge started")

    yield

    # Shutdown
    logger.info("Shutting down AI Agent Bridge...")
    await container.shutdown()
    logger.info("AI Agent Bridge stopped")


def create_app(
    settings: Optional[Settings] = None, container: Optional[DIContainer] = None
) -> FastAPI:
    settings = settings or (container.settings if container else get_settings())
    configure_logging(settings)

    app = FastAPI(
        title="AI Agent Bridge",
        description="Bridges Stream Chat channels with streaming LLM agents.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    if container is not None:
        app.state.container = container

    configure_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api_allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "version": "0.1.0"}

    # Register Routers
    app.include_router(ai_agents.router)
    app.include_router(webhooks.router)  # Inbound Stream Chat events

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(app, host=_settings.api_host, port=_settings.api_port)
