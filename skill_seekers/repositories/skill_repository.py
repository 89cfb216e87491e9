"""Read access to stored skill packages."""

from datetime import datetime

import structlog

from skill_seekers.packaging.skill_builder import META_SUFFIX, meta_key
from skill_seekers.repositories.blob_store import BlobStore

logger = structlog.get_logger(__name__)

SKILL_KEY_PREFIX = "skill-"


def summarize(skill_id: str, meta: dict, download_url: str) -> dict:
    """Listing entry for a stored package."""
    return {
        "id": skill_id,
        "name": meta.get("name"),
        "description": meta.get("description"),
        "created_at": meta.get("created_at"),
        "stats": meta.get("stats"),
        "download_url": download_url,
    }


class SkillRepository:
    """Lists skills and fetches their metadata and archives."""

    def __init__(self, store: BlobStore) -> None:
        self.store = store

    async def list_skills(self) -> list[dict]:
        """Return summaries of all stored skills, newest first.

        Raises:
            StorageError: If the store cannot be read
        """
        skills = []
        async for key in self.store.iter_keys(SKILL_KEY_PREFIX):
            if not key.endswith(META_SUFFIX):
                continue
            meta = await self.store.get(key)
            if not isinstance(meta, dict):
                continue
            skill_id = key.removesuffix(META_SUFFIX)
            skills.append(summarize(skill_id, meta, self.store.record_url(skill_id)))

        skills.sort(key=lambda skill: _created_at(skill["created_at"]), reverse=True)
        return skills

    async def get_skill(self, skill_id: str) -> dict | None:
        """Return the summary of one skill, or None if unknown."""
        meta = await self.store.get(meta_key(skill_id))
        if not isinstance(meta, dict):
            return None
        return summarize(skill_id, meta, self.store.record_url(skill_id))

    async def get_archive(self, skill_id: str) -> bytes | None:
        """Return the ZIP bytes of a skill, or None if unknown."""
        archive = await self.store.get(skill_id)
        return archive if isinstance(archive, bytes) else None


def _created_at(value: str | None) -> datetime:
    if not value:
        return datetime.min
    try:
        return datetime.fromisoformat(value).replace(tzinfo=None)
    except ValueError:
        logger.debug("skill_created_at_unparseable", value=value)
        return datetime.min
