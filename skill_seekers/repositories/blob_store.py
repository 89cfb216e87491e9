"""Key-value blob store backed by SQLAlchemy async sessions."""

import json
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Protocol

import structlog
from sqlalchemy import delete, select
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from skill_seekers.models.base import Base
from skill_seekers.models.kv_record import KeyValueRecord
from skill_seekers.utils.exceptions import StorageError

logger = structlog.get_logger(__name__)

JSON_CONTENT_TYPE = "application/json"
BINARY_CONTENT_TYPE = "application/octet-stream"
LOCAL_URL_PREFIX = "blobstore://records"


class BlobStore(Protocol):
    """Generic key-value store for job records and skill packages."""

    async def put(self, key: str, value: bytes | dict, content_type: str | None = None) -> None:
        """Store bytes as-is or a dict as JSON under key."""
        ...

    async def get(self, key: str) -> bytes | dict | None:
        """Return the stored value, or None if absent."""
        ...

    async def delete(self, key: str) -> None:
        """Remove key if present."""
        ...

    def iter_keys(self, prefix: str = "") -> AsyncIterator[str]:
        """Iterate keys starting with prefix in key order."""
        ...

    def record_url(self, key: str) -> str:
        """Locator under which the record can be downloaded."""
        ...


def record_url(key: str, public_url: str | None = None) -> str:
    """Build the download locator for a record key."""
    base = public_url.rstrip("/") + "/records" if public_url else LOCAL_URL_PREFIX
    return f"{base}/{key}"


class SqlBlobStore:
    """BlobStore over the ``kv_records`` table.

    Dict values round-trip through JSON; anything else is stored as raw
    bytes. Database failures are raised as StorageError.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        public_url: str | None = None,
    ) -> None:
        """Initialize store.

        Args:
            session_maker: Factory for async sessions
            public_url: Base URL records are served under, if any
        """
        self.session_maker = session_maker
        self.public_url = public_url

    async def put(self, key: str, value: bytes | dict, content_type: str | None = None) -> None:
        """Insert or replace a record.

        Raises:
            StorageError: If the write fails
        """
        if isinstance(value, dict):
            data = json.dumps(value, ensure_ascii=False).encode("utf-8")
            content_type = content_type or JSON_CONTENT_TYPE
        else:
            data = bytes(value)
            content_type = content_type or BINARY_CONTENT_TYPE

        try:
            async with self.session_maker() as session:
                await session.merge(KeyValueRecord(key=key, content_type=content_type, data=data))
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to store record {key}: {e}", is_retryable=True) from e

        logger.debug("record_stored", key=key, content_type=content_type, size=len(data))

    async def get(self, key: str) -> bytes | dict | None:
        """Fetch a record, decoding JSON records to dicts.

        Raises:
            StorageError: If the read fails
        """
        try:
            async with self.session_maker() as session:
                record = await session.get(KeyValueRecord, key)
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to read record {key}: {e}", is_retryable=True) from e

        if record is None:
            return None
        if record.content_type == JSON_CONTENT_TYPE:
            return json.loads(record.data.decode("utf-8"))
        return record.data

    async def delete(self, key: str) -> None:
        """Delete a record; missing keys are ignored.

        Raises:
            StorageError: If the delete fails
        """
        try:
            async with self.session_maker() as session:
                await session.execute(delete(KeyValueRecord).where(KeyValueRecord.key == key))
                await session.commit()
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to delete record {key}: {e}", is_retryable=True) from e

    async def iter_keys(self, prefix: str = "") -> AsyncIterator[str]:
        """Yield keys starting with prefix, ordered by key.

        Raises:
            StorageError: If the query fails
        """
        stmt = select(KeyValueRecord.key).order_by(KeyValueRecord.key)
        if prefix:
            stmt = stmt.where(KeyValueRecord.key.startswith(prefix, autoescape=True))

        try:
            async with self.session_maker() as session:
                keys = list((await session.execute(stmt)).scalars())
        except SQLAlchemyError as e:
            raise StorageError(f"Failed to list records with prefix '{prefix}': {e}") from e

        for key in keys:
            yield key

    def record_url(self, key: str) -> str:
        """Download locator for a record."""
        return record_url(key, self.public_url)


def _ensure_sqlite_directory(database_url: str) -> None:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database and url.database != ":memory:":
        Path(url.database).parent.mkdir(parents=True, exist_ok=True)


async def init_models(engine: AsyncEngine) -> None:
    """Create missing tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def create_blob_store(
    database_url: str,
    public_url: str | None = None,
) -> tuple[SqlBlobStore, AsyncEngine]:
    """Open the database, create tables and return a ready store.

    Args:
        database_url: SQLAlchemy async URL
        public_url: Base URL records are served under, if any

    Returns:
        Tuple of (store, engine); the caller disposes the engine

    Raises:
        StorageError: If the database cannot be opened
    """
    _ensure_sqlite_directory(database_url)
    engine = create_async_engine(database_url, echo=False)

    try:
        await init_models(engine)
    except SQLAlchemyError as e:
        await engine.dispose()
        raise StorageError(f"Failed to initialize store at {database_url}: {e}") from e

    session_maker = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    logger.info("blob_store_initialized", database_url=database_url)
    return SqlBlobStore(session_maker, public_url), engine

