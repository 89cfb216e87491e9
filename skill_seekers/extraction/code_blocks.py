"""Code block extraction and enrichment for markdown and plain-text sources."""

import re

from skill_seekers.common.constants import MIN_CODE_LENGTH
from skill_seekers.extraction.classifiers import (
    infer_filename,
    is_complete_script,
    is_template_code,
    normalize_language,
    sniff_language,
)
from skill_seekers.extraction.models import CodeBlock

# ```language\ncode```
FENCED_BLOCK_PATTERN = re.compile(r"```(\w*)\n([\s\S]*?)```")
HEADING_PREFIX_PATTERN = re.compile(r"^#+\s*")

# How many lines above a fence are searched for a heading
TITLE_LOOKBEHIND_LINES = 3


def enrich_code(
    code: str,
    language: str | None = None,
    title: str | None = None,
    filename: str | None = None,
    sniff: bool = False,
) -> CodeBlock:
    """Build a CodeBlock with language, filename and script/template flags.

    Args:
        code: Trimmed code text
        language: Raw language tag, if the source provided one
        title: Heading associated with the code
        filename: Filename found in the source, overrides inference
        sniff: Guess the language from the code when no tag is given

    Returns:
        Enriched CodeBlock
    """
    canonical = normalize_language(language)
    if canonical is None and sniff:
        canonical = sniff_language(code)

    return CodeBlock(
        code=code,
        language=canonical,
        filename=filename or infer_filename(code, canonical),
        is_script=is_complete_script(code, canonical),
        is_template=is_template_code(code),
        title=title,
    )


def _find_heading_above(content: str, position: int) -> str | None:
    """Return the closest markdown heading in the lines just above position."""
    lines = content[:position].split("\n")
    for line in reversed(lines[-TITLE_LOOKBEHIND_LINES:]):
        stripped = line.strip()
        if stripped.startswith("#"):
            return HEADING_PREFIX_PATTERN.sub("", stripped)
    return None


def extract_markdown_code_blocks(content: str) -> tuple[list[str], list[CodeBlock]]:
    """Extract fenced code blocks from markdown text.

    Blocks shorter than the minimum code length are discarded.

    Args:
        content: Markdown text (README, issue body, changelog, ...)

    Returns:
        Tuple of (raw code strings, enriched code blocks) in document order
    """
    code_examples: list[str] = []
    code_blocks: list[CodeBlock] = []

    for match in FENCED_BLOCK_PATTERN.finditer(content):
        language = match.group(1) or None
        code = match.group(2).strip()

        if len(code) < MIN_CODE_LENGTH:
            continue

        code_examples.append(code)
        code_blocks.append(
            enrich_code(
                code,
                language=language,
                title=_find_heading_above(content, match.start()),
            )
        )

    return code_examples, code_blocks
