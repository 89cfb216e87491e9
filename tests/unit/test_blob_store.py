"""Unit tests for the SQLite-backed blob store."""

from pathlib import Path

import pytest

from skill_seekers.repositories.blob_store import SqlBlobStore, create_blob_store, record_url


@pytest.mark.asyncio
class TestSqlBlobStore:
    """Test suite for SqlBlobStore."""

    async def test_bytes_round_trip(self, sql_store: SqlBlobStore) -> None:
        """Test storing and reading raw bytes."""
        await sql_store.put("skill-a", b"PK\x03\x04", content_type="application/zip")

        assert await sql_store.get("skill-a") == b"PK\x03\x04"

    async def test_dict_round_trip(self, sql_store: SqlBlobStore) -> None:
        """Test that dicts are stored as JSON and decoded on read."""
        await sql_store.put("job-1", {"id": "1", "status": "queued", "tags": ["ü"]})

        assert await sql_store.get("job-1") == {"id": "1", "status": "queued", "tags": ["ü"]}

    async def test_put_replaces(self, sql_store: SqlBlobStore) -> None:
        """Test that writing a key twice keeps the latest value."""
        await sql_store.put("job-1", {"progress": 10})
        await sql_store.put("job-1", {"progress": 50})

        assert await sql_store.get("job-1") == {"progress": 50}

    async def test_missing_and_delete(self, sql_store: SqlBlobStore) -> None:
        """Test absent keys and deletion, including of unknown keys."""
        await sql_store.put("job-1", {"a": 1})
        await sql_store.delete("job-1")
        await sql_store.delete("never-existed")

        assert await sql_store.get("job-1") is None

    async def test_iter_keys_prefix_is_literal(self, sql_store: SqlBlobStore) -> None:
        """Test prefix listing in key order without LIKE wildcards."""
        for key in ("job-b", "job-a", "jobXc", "skill-x"):
            await sql_store.put(key, b"x")

        assert [key async for key in sql_store.iter_keys("job-")] == ["job-a", "job-b"]
        assert [key async for key in sql_store.iter_keys("job_")] == []
        assert len([key async for key in sql_store.iter_keys()]) == 4


@pytest.mark.asyncio
async def test_create_blob_store_creates_directory(tmp_path: Path) -> None:
    """Test that the SQLite parent directory is created on demand."""
    db_path = tmp_path / "nested" / "dir" / "store.db"

    store, engine = await create_blob_store(f"sqlite+aiosqlite:///{db_path}", "https://skills.example.com/")
    try:
        assert db_path.parent.is_dir()
        assert store.record_url("skill-a") == "https://skills.example.com/records/skill-a"
    finally:
        await engine.dispose()


def test_record_url_without_public_base() -> None:
    """Test the local locator format."""
    assert record_url("skill-a") == "blobstore://records/skill-a"
