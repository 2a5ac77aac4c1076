"""FastAPI application entry point for the trend fusion service."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from rich.logging import RichHandler

from config.config_loader import AppConfig, load_config
from trendfusion.api.routes import request_validation_error_handler, router
from trendfusion.orchestrator import FusionOrchestrator
from trendfusion.providers.registry import build_providers

logger = logging.getLogger(__name__)


def build_orchestrator(config: AppConfig) -> FusionOrchestrator:
    """Build providers and the orchestrator; raises ConfigError on missing keys."""
    return FusionOrchestrator(
        providers=build_providers(config),
        referee=config.defaults.referee,
        prompts=config.prompts,
        max_topic_length=config.defaults.max_topic_length,
    )


def create_app(config: AppConfig, orchestrator: FusionOrchestrator | None = None) -> FastAPI:
    """Create the app. Without an explicit orchestrator one is built at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if orchestrator is None:
            app.state.orchestrator = build_orchestrator(config)
        else:
            app.state.orchestrator = orchestrator
        logger.info(
            "Trend Fusion ready: panel %s, referee %s",
            ", ".join(app.state.orchestrator.provider_names),
            app.state.orchestrator.referee,
        )
        yield
        logger.info("Trend Fusion shutting down")

    app = FastAPI(
        title="Trend Fusion",
        description="Multi-model trend research with cross-validation and fused summaries",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.include_router(router, prefix="/api", tags=["reports"])
    return app


def main() -> None:
    load_dotenv()
    logging.basicConfig(
        level=logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )
    config = load_config()
    app = create_app(config)
    uvicorn.run(app, host=config.server.host, port=config.server.port)


if __name__ == "__main__":
    main()
