"""
Pytest configuration and shared fixtures.

This module provides fixtures and configuration used across all tests.
"""

import logging

import pytest

from webchat.conversations import ConversationStore
from webchat.local_storage import InMemoryStorage

# ============================================================================
# Logging Configuration
# ============================================================================


@pytest.fixture(autouse=True)
def configure_test_logging(caplog):
    """
    Configure logging for tests.

    The CLI silences the ``webchat`` logger; reset it so every test starts
    with log capture enabled.
    """
    logging.getLogger("webchat").setLevel(logging.NOTSET)
    caplog.set_level(logging.DEBUG)
    yield


# ============================================================================
# Environment and Configuration
# ============================================================================


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """
    Point settings at a temporary storage file and ignore any project .env.

    Runs automatically for all tests.
    """
    from webchat.config import clear_settings_cache

    clear_settings_cache()
    monkeypatch.setenv("WEBCHAT_ENV_SOURCE", "environment")
    monkeypatch.setenv("STORAGE_PATH", str(tmp_path / "local_storage.json"))
    monkeypatch.delenv("WEBHOOK_URL", raising=False)
    monkeypatch.delenv("RENDER_ESCAPE_HTML", raising=False)
    monkeypatch.delenv("DEBUG", raising=False)
    monkeypatch.delenv("APP_NAME", raising=False)
    yield
    clear_settings_cache()


# ============================================================================
# Common Test Data
# ============================================================================


@pytest.fixture
def storage() -> InMemoryStorage:
    """Empty in-memory key-value storage."""
    return InMemoryStorage()


@pytest.fixture
def store(storage) -> ConversationStore:
    """Conversation store backed by in-memory storage."""
    return ConversationStore(storage)

