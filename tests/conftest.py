"""Pytest configuration and shared fixtures."""

import json
from collections.abc import AsyncIterator, Callable
from pathlib import Path

import pytest

from skill_seekers.extraction.models import CodeBlock, DocumentationUnit, UnitType, make_snippet
from skill_seekers.packaging.skill_builder import SkillBuilder
from skill_seekers.repositories.blob_store import SqlBlobStore, create_blob_store, record_url
from skill_seekers.repositories.job_repository import JobRepository
from skill_seekers.utils.exceptions import StorageError


class InMemoryBlobStore:
    """BlobStore keeping records in a dict; dicts round-trip through JSON."""

    def __init__(self, public_url: str | None = None) -> None:
        self.records: dict[str, bytes | dict] = {}
        self.content_types: dict[str, str | None] = {}
        self.public_url = public_url

    async def put(self, key: str, value: bytes | dict, content_type: str | None = None) -> None:
        self.records[key] = json.loads(json.dumps(value)) if isinstance(value, dict) else bytes(value)
        self.content_types[key] = content_type

    async def get(self, key: str) -> bytes | dict | None:
        return self.records.get(key)

    async def delete(self, key: str) -> None:
        self.records.pop(key, None)

    async def iter_keys(self, prefix: str = "") -> AsyncIterator[str]:
        for key in sorted(self.records):
            if key.startswith(prefix):
                yield key

    def record_url(self, key: str) -> str:
        return record_url(key, self.public_url)


class FailingBlobStore(InMemoryBlobStore):
    """Store whose writes always fail."""

    async def put(self, key: str, value: bytes | dict, content_type: str | None = None) -> None:
        raise StorageError("disk full", is_retryable=True)

    async def delete(self, key: str) -> None:
        raise StorageError("disk full", is_retryable=True)


@pytest.fixture
def memory_store() -> InMemoryBlobStore:
    """Return an empty in-memory blob store."""
    return InMemoryBlobStore()


@pytest.fixture
def failing_store() -> FailingBlobStore:
    """Return a blob store rejecting every write."""
    return FailingBlobStore()


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Return path to temporary test database."""
    return tmp_path / "store" / "test.db"


@pytest.fixture
async def sql_store(temp_db_path: Path) -> AsyncIterator[SqlBlobStore]:
    """Create a SQLite-backed blob store with tables in place."""
    store, engine = await create_blob_store(f"sqlite+aiosqlite:///{temp_db_path}")
    yield store
    await engine.dispose()


@pytest.fixture
def job_repository(memory_store: InMemoryBlobStore) -> JobRepository:
    """Return a job repository over the in-memory store."""
    return JobRepository(memory_store)


@pytest.fixture
def builder(memory_store: InMemoryBlobStore) -> SkillBuilder:
    """Return a skill builder writing to the in-memory store."""
    return SkillBuilder(memory_store)


@pytest.fixture
def make_unit() -> Callable[..., DocumentationUnit]:
    """Return a factory for documentation units with sensible defaults."""

    def factory(
        position: int = 0,
        title: str = "Configuration",
        content: str = "Configure the client with environment variables before first use.",
        unit_type: UnitType = UnitType.GUIDE,
        category: str | None = None,
        url: str = "https://docs.example.com/guide/configuration",
        code_blocks: tuple[CodeBlock, ...] = (),
    ) -> DocumentationUnit:
        return DocumentationUnit(
            id=f"docs-{position + 1}",
            source="example",
            title=title,
            content=content,
            snippet=make_snippet(content),
            searchable_text=f"{title} {content}".lower(),
            type=unit_type,
            url=url,
            category=category,
            code_examples=tuple(block.code for block in code_blocks),
            code_blocks=code_blocks,
        )

    return factory
