"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scout_rag.config import get_settings
from scout_rag.infrastructure.dependencies import get_knowledge_base
from scout_rag.infrastructure.logging.log_config import setup_logging
from scout_rag.presentation.api.router import router as api_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan — configure logging; the knowledge base builds lazily."""
    settings = get_settings()
    setup_logging()

    knowledge_base = get_knowledge_base()
    logger.info(
        "Scouting retrieval API ready (teams_dir=%s, split=%s, state=%s)",
        settings.teams_dir,
        settings.live_split_strategy.value,
        knowledge_base.state.value,
    )
    if not settings.jina_api_key.strip():
        logger.warning("JINA_API_KEY is not configured; /api/v1/context will return no passages.")

    yield


def create_app() -> FastAPI:
    """Factory function that builds and configures the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title=settings.app_title,
        version=settings.app_version,
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Mount API routes
    app.include_router(api_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "scout_rag.main:app",
        host="0.0.0.0",
        port=8020,
        reload=True,
    )
