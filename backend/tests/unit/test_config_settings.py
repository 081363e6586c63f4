"""Unit tests for application settings configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from scout_rag.application.services.text_splitter import SplitStrategy
from scout_rag.config import Settings


def test_settings_uses_backend_env_file_independent_of_cwd():
    """Settings should always include backend/.env as an env source."""
    env_files = Settings.model_config.get("env_file")
    assert env_files is not None

    normalized = {str(Path(item)) for item in env_files}
    expected_backend_env = str(Path(__file__).resolve().parents[2] / ".env")

    assert expected_backend_env in normalized
    assert str(Path(".env")) in normalized


def test_retrieval_defaults():
    settings = Settings(_env_file=None, jina_api_key="")

    assert settings.jina_model == "jina-embeddings-v3"
    assert settings.jina_batch_size == 64
    assert settings.embedding_max_input_chars == 800
    assert settings.live_split_strategy == "fixed"
    assert settings.retrieval_default_k == 5


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("JINA_API_KEY", "jina_test")
    monkeypatch.setenv("TEAMS_DIR", "/data/teams")
    monkeypatch.setenv("LIVE_SPLIT_STRATEGY", "semantic")

    settings = Settings(_env_file=None)

    assert settings.jina_api_key == "jina_test"
    assert settings.teams_dir == "/data/teams"
    assert settings.live_split_strategy == "semantic"
    assert settings.live_split_strategy is SplitStrategy.SEMANTIC


def test_unknown_split_strategy_is_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, live_split_strategy="semantik")
