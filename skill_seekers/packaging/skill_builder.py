"""Skill package assembly and persistence."""

import re
import uuid
from collections.abc import Sequence
from datetime import datetime

import structlog
from pydantic import BaseModel, Field

from skill_seekers.extraction.classifiers import extension_for_language
from skill_seekers.extraction.models import CodeBlock, DocumentationUnit
from skill_seekers.models.job import JobType, utc_now
from skill_seekers.packaging.archive import build_zip_archive
from skill_seekers.packaging.filenames import positional_name, slugify_title, unique_filename
from skill_seekers.packaging.markdown import (
    group_by_category,
    render_examples,
    render_reference,
    render_skill_md,
)
from skill_seekers.repositories.blob_store import BlobStore

logger = structlog.get_logger(__name__)

SKILL_ID_PATTERN = re.compile(r"[^a-z0-9]")
ZIP_CONTENT_TYPE = "application/zip"
META_SUFFIX = "-meta"


class SkillFile(BaseModel):
    """One generated file; content is omitted from stored metadata."""

    path: str
    content: str = ""
    size: int


class SkillStats(BaseModel):
    """Summary counts for a package."""

    total_pages: int
    categories: int
    code_examples: int


class SkillSource(BaseModel):
    """Where the package content came from."""

    type: JobType
    url: str | None = None


class SkillPackage(BaseModel):
    """A built skill bundle.

    Attributes:
        id: ``skill-<slug>-<6 hex>``
        name: Skill name
        description: When to use the skill
        files: Generated files in archive order
        created_at: Build time
        source: Source kind and locator
        stats: Summary counts
        download_url: Locator of the stored archive
    """

    id: str
    name: str
    description: str
    files: list[SkillFile]
    created_at: datetime = Field(default_factory=utc_now)
    source: SkillSource
    stats: SkillStats
    download_url: str | None = None

    def to_metadata(self) -> dict:
        """Serialize without file contents for cheap listing."""
        return self.model_dump(mode="json", exclude={"files": {"__all__": {"content"}}})


def make_skill_id(name: str) -> str:
    """Build a collision-resistant id from the skill name."""
    return f"skill-{SKILL_ID_PATTERN.sub('-', name.lower())}-{uuid.uuid4().hex[:6]}"


def meta_key(skill_id: str) -> str:
    """Store key of a package's metadata record."""
    return f"{skill_id}{META_SUFFIX}"


def _skill_file(path: str, content: str) -> SkillFile:
    return SkillFile(path=path, content=content, size=len(content.encode("utf-8")))


def collect_code_blocks(units: Sequence[DocumentationUnit]) -> list[CodeBlock]:
    """All enriched code blocks in unit order."""
    return [block for unit in units for block in unit.code_blocks]


def script_files(blocks: Sequence[CodeBlock]) -> list[SkillFile]:
    """Files for complete, non-template scripts under ``scripts/``."""
    files = []
    used: set[str] = set()
    scripts = [block for block in blocks if block.is_script and not block.is_template]

    for index, block in enumerate(scripts):
        stem = slugify_title(block.title) or positional_name("helper", index)
        filename = unique_filename(stem, extension_for_language(block.language), used)
        files.append(_skill_file(f"scripts/{filename}", block.code))

    return files


def template_files(blocks: Sequence[CodeBlock]) -> list[SkillFile]:
    """Files for template code under ``templates/``; templates win over scripts."""
    files = []
    used: set[str] = set()
    templates = [block for block in blocks if block.is_template]

    for index, block in enumerate(templates):
        stem = slugify_title(block.title) or positional_name("template", index)
        filename = unique_filename(stem, ".txt", used)
        files.append(_skill_file(f"templates/{filename}", block.code))

    return files


def compute_stats(units: Sequence[DocumentationUnit]) -> SkillStats:
    """Count units, distinct categories and code examples."""
    return SkillStats(
        total_pages=len(units),
        categories=len(group_by_category(units)),
        code_examples=sum(len(unit.code_examples) for unit in units),
    )


class SkillBuilder:
    """Assembles documentation units into a skill package and stores it.

    File assembly is synchronous and deterministic; only the id and the
    timestamps differ between two builds of the same units.
    """

    def __init__(self, store: BlobStore) -> None:
        """Initialize builder.

        Args:
            store: Blob store receiving the archive and metadata records
        """
        self.store = store

    def assemble_files(
        self,
        name: str,
        description: str,
        units: Sequence[DocumentationUnit],
        source_type: JobType,
        source_url: str | None = None,
    ) -> list[SkillFile]:
        """Render every package file in archive order.

        Returns:
            SKILL.md, reference.md and examples.md when applicable, then
            scripts and templates
        """
        files = [_skill_file("SKILL.md", render_skill_md(name, description, units, source_type, source_url))]

        reference = render_reference(units)
        if reference is not None:
            files.append(_skill_file("reference.md", reference))

        examples = render_examples(units)
        if examples is not None:
            files.append(_skill_file("examples.md", examples))

        blocks = collect_code_blocks(units)
        files.extend(script_files(blocks))
        files.extend(template_files(blocks))
        return files

    async def build(
        self,
        name: str,
        description: str,
        units: Sequence[DocumentationUnit],
        source_type: JobType,
        source_url: str | None = None,
    ) -> SkillPackage:
        """Build, archive and persist a skill package.

        Args:
            name: Skill name
            description: When to use the skill
            units: Units in build order
            source_type: Job type that produced the units
            source_url: Source locator, if any

        Returns:
            The package with its download locator set

        Raises:
            PackagingError: If archiving fails
            StorageError: If the archive or metadata cannot be stored
        """
        skill_id = make_skill_id(name)
        logger.info("skill_build_started", skill_id=skill_id, units=len(units))

        package = SkillPackage(
            id=skill_id,
            name=name,
            description=description,
            files=self.assemble_files(name, description, units, source_type, source_url),
            source=SkillSource(type=source_type, url=source_url),
            stats=compute_stats(units),
            download_url=self.store.record_url(skill_id),
        )

        archive = build_zip_archive((skill_file.path, skill_file.content) for skill_file in package.files)
        await self.store.put(skill_id, archive, content_type=ZIP_CONTENT_TYPE)
        await self.store.put(meta_key(skill_id), package.to_metadata())

        logger.info(
            "skill_build_completed",
            skill_id=skill_id,
            files=len(package.files),
            archive_bytes=len(archive),
        )
        return package
