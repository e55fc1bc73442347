"""Pytest configuration and shared fixtures for all tests."""

import os
import sys
from pathlib import Path

# Minimal environment for Settings; tests never reach real services
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_HOST", "localhost")
os.environ.setdefault("TELEGRAM_BOT_TOKEN", "123456789:ABCdefGHIjklMNOpqrsTUVwxyz123456789")
os.environ.setdefault("ADMIN_TELEGRAM_IDS", "123456789")
os.environ.setdefault("ENVIRONMENT", "test")

# Add project root to PYTHONPATH
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

import pytest
from unittest.mock import AsyncMock, MagicMock

from affiliate_ledger.services.notification import LedgerNotifier


@pytest.fixture
def mock_session():
    """Mock AsyncSession for tests without a database."""
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    session.add_all = MagicMock()
    session.flush = AsyncMock()
    session.refresh = AsyncMock()
    session.get = AsyncMock(return_value=None)
    return session


@pytest.fixture
def enqueue_message():
    """Recorder for admin alerts handed to the task queue."""
    return MagicMock()


@pytest.fixture
def enqueue_email():
    """Recorder for emails handed to the task queue."""
    return MagicMock()


@pytest.fixture
def notifier(enqueue_message, enqueue_email):
    """Notifier wired to recorders instead of dramatiq."""
    return LedgerNotifier(
        enqueue_message=enqueue_message, enqueue_email=enqueue_email
    )
