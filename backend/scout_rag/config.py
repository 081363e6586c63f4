from pathlib import Path

from pydantic_settings import BaseSettings
from functools import lru_cache

from scout_rag.application.services.text_splitter import SplitStrategy

_BACKEND_DIR = Path(__file__).resolve().parents[1]
_ENV_FILES = (
    _BACKEND_DIR / ".env",
    ".env",
)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_title: str = "Scouting Retrieval API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    cors_origins: list[str] = ["http://localhost:3000"]

    # Jina embeddings
    jina_api_key: str = ""
    jina_base_url: str = "https://api.jina.ai/v1"
    jina_model: str = "jina-embeddings-v3"
    jina_batch_size: int = 64
    embedding_max_input_chars: int = 800
    embedding_timeout: float = 120.0

    # Team data + embedding cache locations
    teams_dir: str = "public/precomputed/teams"
    prebuilt_cache_file: str = "public/precomputed/rag-cache.json"
    working_cache_file: str = ".cache/rag-embeddings.json"

    # Live build recipe: "fixed" or "semantic". The offline generator is always fixed.
    live_split_strategy: SplitStrategy = SplitStrategy.FIXED
    retrieval_default_k: int = 5

    # Logging — per-category log levels (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    log_level: str = "INFO"                  # Root / app-wide
    log_level_http: str = "WARNING"          # httpx / httpcore — outbound HTTP
    log_level_uvicorn: str = "INFO"          # uvicorn.access / uvicorn.error
    log_level_pipeline: str = "INFO"         # knowledge base build pipeline
    log_level_jina: str = "INFO"             # Jina embedding client

    model_config = {
        "env_file": _ENV_FILES,
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance — reads .env once."""
    return Settings()
