"""Unit tests for code block extraction and enrichment."""

from skill_seekers.extraction.code_blocks import enrich_code, extract_markdown_code_blocks


class TestEnrichCode:
    """Test cases for enrich_code."""

    def test_language_tag_is_normalized(self) -> None:
        """Test that raw tags are canonicalized and drive the filename."""
        block = enrich_code("print('hello world')", language="py")

        assert block.language == "python"
        assert block.filename == "helper.py"
        assert block.is_script is False
        assert block.is_template is False

    def test_sniffing_only_when_requested(self) -> None:
        """Test that untagged code is sniffed only with sniff=True."""
        assert enrich_code("import os\nos.getcwd()").language is None
        assert enrich_code("import os\nos.getcwd()", sniff=True).language == "python"

    def test_explicit_filename_wins(self) -> None:
        """Test that a filename found in the source is kept."""
        block = enrich_code("x = 1", language="python", filename="settings.py", title="Settings")

        assert block.filename == "settings.py"
        assert block.title == "Settings"

    def test_template_flag(self) -> None:
        """Test that placeholders mark the block as a template."""
        assert enrich_code("Hello {{name}}", language="text").is_template is True


class TestExtractMarkdownCodeBlocks:
    """Test cases for extract_markdown_code_blocks."""

    def test_fenced_block_with_heading(self) -> None:
        """Test language tag and heading detection above a fence."""
        content = "# Tool\n\n## Install\n\n```bash\npip install tool\n```\n"

        examples, blocks = extract_markdown_code_blocks(content)

        assert examples == ["pip install tool"]
        assert blocks[0].language == "bash"
        assert blocks[0].title == "Install"

    def test_short_blocks_are_dropped(self) -> None:
        """Test that blocks under the minimum length are ignored."""
        examples, blocks = extract_markdown_code_blocks("```\nx=1\n```\n")

        assert examples == []
        assert blocks == []

    def test_untagged_block_has_no_language(self) -> None:
        """Test that untagged markdown fences are not sniffed."""
        _, blocks = extract_markdown_code_blocks("Text\n\n```\nimport os\nos.getcwd()\n```")

        assert blocks[0].language is None
        assert blocks[0].title is None

    def test_document_order(self) -> None:
        """Test that multiple blocks keep their order."""
        content = "```js\nconsole.log('first');\n```\n\n```py\nprint('second')\n```"

        examples, blocks = extract_markdown_code_blocks(content)

        assert examples == ["console.log('first');", "print('second')"]
        assert [block.language for block in blocks] == ["javascript", "python"]
