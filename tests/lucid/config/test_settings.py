from __future__ import annotations

import pytest

from lucid.config import Settings

ENV_VARS = (
    "LUCID_DATA_DIR",
    "LUCID_STATE_NAMESPACE",
    "LUCID_LOG_LEVEL",
    "LUCID_KNOWLEDGE_BACKEND",
    "NOTION_TOKEN",
    "NOTION_DATABASE_ID",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_settings_defaults_without_env(monkeypatch, tmp_path) -> None:
    monkeypatch.setenv("LUCID_DATA_DIR", str(tmp_path))

    s = Settings()

    assert s.knowledge_backend == "local"
    assert s.state_namespace == "modern-blog-store"
    assert s.log_level == "INFO"
    assert s.storage_dir == tmp_path / "storage"
    assert s.state_dir == tmp_path / "state"
    assert s.notion_property_title == "Title"


def test_notion_backend_requires_credentials(monkeypatch) -> None:
    monkeypatch.setenv("LUCID_KNOWLEDGE_BACKEND", "notion")
    monkeypatch.setenv("NOTION_TOKEN", "secret_test")

    with pytest.raises(ValueError, match="NOTION_DATABASE_ID"):
        Settings()


def test_unknown_backend_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("LUCID_KNOWLEDGE_BACKEND", "Sqlite")

    with pytest.raises(ValueError, match="sqlite"):
        Settings()


def test_values_are_normalized(monkeypatch) -> None:
    monkeypatch.setenv("LUCID_KNOWLEDGE_BACKEND", " Local ")
    monkeypatch.setenv("LUCID_LOG_LEVEL", "debug")

    s = Settings()

    assert s.knowledge_backend == "local"
    assert s.log_level == "DEBUG"
