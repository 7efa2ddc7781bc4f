"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

import efattura.infrastructure.storage.sqlite.connection as conn_module
from efattura.infrastructure.storage.sqlite import SQLiteInvoiceStore, close_pool


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "db" / "test.db"


@pytest.fixture
def mock_settings(temp_db_path: Path):
    """Mock settings with temp database path."""
    mock = MagicMock()
    mock.storage.db_path = temp_db_path
    mock.storage.pool_size = 2
    mock.storage.busy_timeout = 5000
    return mock


@pytest.fixture
async def store(mock_settings) -> AsyncGenerator[SQLiteInvoiceStore, None]:
    """Invoice store on a fresh database; the global pool is closed afterwards."""
    conn_module._pool = None
    with patch.object(conn_module, "get_settings", return_value=mock_settings):
        yield SQLiteInvoiceStore()
        await close_pool()
