"""Unit tests for skill package assembly and persistence."""

import io
import re
from zipfile import ZipFile

import pytest

from skill_seekers.extraction.code_blocks import enrich_code
from skill_seekers.models.job import JobType
from skill_seekers.packaging.skill_builder import SkillBuilder, make_skill_id, meta_key

TWENTY_LINE_SCRIPT = "\n".join(f"step_{i} = {i}" for i in range(20))


def _paths(files) -> list[str]:
    return [skill_file.path for skill_file in files]


class TestAssembleFiles:
    """Test cases for SkillBuilder.assemble_files."""

    def test_untitled_python_script_is_helper(self, builder: SkillBuilder, make_unit) -> None:
        """Test that an untitled py-tagged script becomes scripts/helper.py."""
        block = enrich_code(TWENTY_LINE_SCRIPT, language="py")
        assert block.language == "python"

        files = builder.assemble_files("demo", "desc", [make_unit(0, code_blocks=(block,))], JobType.SCRAPE_DOCS)

        assert "scripts/helper.py" in _paths(files)

    def test_core_files_order(self, builder: SkillBuilder, make_unit) -> None:
        """Test SKILL.md, reference.md and examples.md ordering."""
        unit = make_unit(0, code_blocks=(enrich_code("print('hello world')", language="python"),))

        files = builder.assemble_files("demo", "desc", [unit], JobType.SCRAPE_DOCS)

        assert _paths(files) == ["SKILL.md", "reference.md", "examples.md"]

    def test_examples_only_with_code(self, builder: SkillBuilder, make_unit) -> None:
        """Test that examples.md is omitted without code examples."""
        assert _paths(builder.assemble_files("demo", "desc", [make_unit(0)], JobType.SCRAPE_DOCS)) == [
            "SKILL.md",
            "reference.md",
        ]
        assert _paths(builder.assemble_files("demo", "desc", [], JobType.SCRAPE_DOCS)) == ["SKILL.md"]

    def test_script_names(self, builder: SkillBuilder, make_unit) -> None:
        """Test titled, positional and language-specific script names."""
        blocks = (
            enrich_code(TWENTY_LINE_SCRIPT, language="python"),
            enrich_code(TWENTY_LINE_SCRIPT, language="python"),
            enrich_code("#!/bin/bash\necho deploy", language="bash", title="Deploy Script"),
        )

        files = builder.assemble_files("demo", "desc", [make_unit(0, code_blocks=blocks)], JobType.SCRAPE_DOCS)
        scripts = [path for path in _paths(files) if path.startswith("scripts/")]

        assert scripts == ["scripts/helper.py", "scripts/helper_2.py", "scripts/deploy_script.sh"]

    def test_templates_win_over_scripts(self, builder: SkillBuilder, make_unit) -> None:
        """Test that template code goes to templates/ only."""
        template_script = TWENTY_LINE_SCRIPT + "\nname = '{{name}}'"
        blocks = (
            enrich_code(template_script, language="python"),
            enrich_code("Hello {{name}}, welcome!", title="Welcome Mail"),
        )

        files = builder.assemble_files("demo", "desc", [make_unit(0, code_blocks=blocks)], JobType.SCRAPE_DOCS)
        paths = _paths(files)

        assert [path for path in paths if path.startswith("scripts/")] == []
        assert [path for path in paths if path.startswith("templates/")] == [
            "templates/template.txt",
            "templates/welcome_mail.txt",
        ]

    def test_assembly_is_deterministic(self, builder: SkillBuilder, make_unit) -> None:
        """Test that the same units produce identical files."""
        units = [
            make_unit(0, category="guides", code_blocks=(enrich_code(TWENTY_LINE_SCRIPT, language="py"),)),
            make_unit(1, category="api"),
        ]

        first = builder.assemble_files("demo", "desc", units, JobType.SCRAPE_DOCS, "https://docs.example.com")
        second = builder.assemble_files("demo", "desc", units, JobType.SCRAPE_DOCS, "https://docs.example.com")

        assert first == second

    def test_sizes_are_utf8_bytes(self, builder: SkillBuilder, make_unit) -> None:
        """Test that file sizes count encoded bytes."""
        files = builder.assemble_files("démo ✓", "desc", [make_unit(0)], JobType.SCRAPE_DOCS)

        assert all(skill_file.size == len(skill_file.content.encode("utf-8")) for skill_file in files)


@pytest.mark.asyncio
class TestBuild:
    """Test cases for SkillBuilder.build."""

    async def test_build_stores_archive_and_metadata(self, builder: SkillBuilder, memory_store, make_unit) -> None:
        """Test that the zip and metadata records are written."""
        unit = make_unit(0, code_blocks=(enrich_code(TWENTY_LINE_SCRIPT, language="py"),))

        package = await builder.build("My Skill", "desc", [unit], JobType.SCRAPE_DOCS, "https://docs.example.com")

        assert re.fullmatch(r"skill-my-skill-[0-9a-f]{6}", package.id)
        assert package.download_url == f"blobstore://records/{package.id}"
        assert package.stats.total_pages == 1
        assert package.stats.code_examples == 1
        assert package.source.type is JobType.SCRAPE_DOCS
        assert memory_store.content_types[package.id] == "application/zip"

        with ZipFile(io.BytesIO(memory_store.records[package.id])) as archive:
            assert archive.namelist() == _paths(package.files)
            assert archive.read("scripts/helper.py").decode("utf-8") == TWENTY_LINE_SCRIPT

        meta = memory_store.records[meta_key(package.id)]
        assert meta["name"] == "My Skill"
        assert meta["source"] == {"type": "scrape_docs", "url": "https://docs.example.com"}
        assert all("content" not in entry for entry in meta["files"])

    async def test_rebuild_differs_only_in_identity(self, builder: SkillBuilder, make_unit) -> None:
        """Test that two builds share files but not ids."""
        units = [make_unit(0), make_unit(1, category="api")]

        first = await builder.build("demo", "desc", units, JobType.SCRAPE_DOCS)
        second = await builder.build("demo", "desc", units, JobType.SCRAPE_DOCS)

        assert first.id != second.id
        assert first.files == second.files
        assert first.stats == second.stats


def test_make_skill_id_replaces_each_character() -> None:
    """Test that every non-alphanumeric character becomes a hyphen."""
    assert re.fullmatch(r"skill-my-skill--[0-9a-f]{6}", make_skill_id("My Skill!"))
