"""
QuickNote - Test Configuration (conftest.py)
==============================================

What:  Shared pytest fixtures and storage fakes for the test suite.
How:   pytest auto-discovers conftest.py and makes fixtures available to all
       tests. Environment variables are set BEFORE any quicknote import so
       the settings singleton and the module-level app pick them up.

Fixture Hierarchy:
    Storage fakes:
    ├── memory_storage:   InMemoryStorage (dict-backed, contract-compliant)
    ├── spy_storage:      SpyStorage (records every call)
    └── failing_storage:  FailingStorage (every call raises StorageError)

    App / clients:
    ├── test_client:      AsyncClient over create_app(storage=memory_storage)
    ├── spy_client:       AsyncClient over create_app(storage=spy_storage)
    └── failing_client:   AsyncClient over create_app(storage=failing_storage)
"""

import os
import tempfile

# Override settings for testing BEFORE any app imports
os.environ["STORAGE_BACKEND"] = "disk"
os.environ["NOTE_DIR"] = tempfile.mkdtemp(prefix="quicknote_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("AWS_LAMBDA_FUNCTION_NAME", None)
os.environ.pop("URL", None)
os.environ.pop("PUBLIC_URL", None)

from typing import Dict, List, Tuple  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from quicknote.exceptions import StorageError  # noqa: E402
from quicknote.storage.base import Storage  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Storage Fakes
# ══════════════════════════════════════════════════════════════════════════


class InMemoryStorage(Storage):
    """Dict-backed Storage with the same semantics as the real backends."""

    name = "memory"

    def __init__(self):
        self.notes: Dict[str, str] = {}

    async def read(self, note_id: str) -> str:
        return self.notes.get(note_id, "")

    async def write(self, note_id: str, content: str) -> None:
        self.notes[note_id] = content

    async def delete(self, note_id: str) -> None:
        self.notes.pop(note_id, None)

    async def health_check(self) -> bool:
        return True


class SpyStorage(InMemoryStorage):
    """InMemoryStorage that records (operation, note_id) for every call."""

    name = "spy"

    def __init__(self):
        super().__init__()
        self.calls: List[Tuple[str, str]] = []

    async def read(self, note_id: str) -> str:
        self.calls.append(("read", note_id))
        return await super().read(note_id)

    async def write(self, note_id: str, content: str) -> None:
        self.calls.append(("write", note_id))
        await super().write(note_id, content)

    async def delete(self, note_id: str) -> None:
        self.calls.append(("delete", note_id))
        await super().delete(note_id)


class FailingStorage(Storage):
    """Every operation fails the way a broken backend would."""

    name = "failing"

    def _fail(self, operation: str, note_id: str) -> StorageError:
        return StorageError(
            message=f"Failed to {operation} note",
            operation=operation,
            note_id=note_id,
            backend=self.name,
            context={"os_error": "[Errno 13] Permission denied: '/secret/path'"},
        )

    async def read(self, note_id: str) -> str:
        raise self._fail("read", note_id)

    async def write(self, note_id: str, content: str) -> None:
        raise self._fail("write", note_id)

    async def delete(self, note_id: str) -> None:
        raise self._fail("delete", note_id)

    async def health_check(self) -> bool:
        return False


# ══════════════════════════════════════════════════════════════════════════
# Function-Scoped Fixtures (created fresh for each test)
# ══════════════════════════════════════════════════════════════════════════


@pytest.fixture
def memory_storage():
    return InMemoryStorage()


@pytest.fixture
def spy_storage():
    return SpyStorage()


@pytest.fixture
def failing_storage():
    return FailingStorage()


@pytest.fixture
def note_dir(tmp_path):
    """A fresh directory for disk backend tests (cleaned up by pytest)."""
    path = tmp_path / "notes"
    path.mkdir()
    return path


def _client_for(storage: Storage) -> AsyncClient:
    from quicknote.main import create_app

    transport = ASGITransport(app=create_app(storage=storage))
    return AsyncClient(transport=transport, base_url="http://test")


@pytest_asyncio.fixture
async def test_client(memory_storage):
    """
    HTTPX AsyncClient talking to a fresh app backed by memory_storage.

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    async with _client_for(memory_storage) as client:
        yield client


@pytest_asyncio.fixture
async def spy_client(spy_storage):
    async with _client_for(spy_storage) as client:
        yield client


@pytest_asyncio.fixture
async def failing_client(failing_storage):
    async with _client_for(failing_storage) as client:
        yield client
