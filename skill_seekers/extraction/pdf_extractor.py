"""Section segmentation and unit extraction for decoded PDF text.

PDF text streams carry no structure, so headings and code listings are
recovered from line shapes alone. Page numbers are synthetic: lines are
spread evenly over the page count reported by the decoder.
"""

import math
import re
from collections.abc import Mapping

import structlog

from skill_seekers.common.constants import (
    INTRODUCTION_SECTION,
    MIN_CONTENT_LENGTH,
    PDF_TITLE_SCAN_LINES,
    UNTITLED_DOCUMENT,
    WHOLE_DOCUMENT_SECTION,
)
from skill_seekers.extraction.code_blocks import enrich_code
from skill_seekers.extraction.models import (
    DocumentationUnit,
    PdfDocument,
    PdfSection,
    UnitType,
    make_snippet,
    unit_id,
)

logger = structlog.get_logger(__name__)

# Heading rules, checked in order
NUMBERED_HEADING = re.compile(r"^\d+(\.\d+)*\.?\s+[A-Z]")
ALL_CAPS_HEADING = re.compile(r"^[A-Z\s]+$")
DIVISION_HEADING = re.compile(r"^(Chapter|Section|Part)\s+\d", re.IGNORECASE)
TITLE_CASE_HEADING = re.compile(r"^[A-Z][a-z]")

CODE_LABEL = re.compile(r"^(Example|Code|Listing)(\s+\d+)?:", re.IGNORECASE)
FENCES = ("```", "~~~")

HEADING_MIN_LENGTH = 3
HEADING_MAX_LENGTH = 80
ALL_CAPS_MIN_LENGTH = 5
TITLE_CASE_MAX_LENGTH = 50
TITLE_MAX_LENGTH = 100
SEARCHABLE_TEXT_LIMIT = 10000


def _ends_like_sentence(line: str) -> bool:
    return line.endswith(".") or line.endswith(",")


def extract_title(text: str, metadata: Mapping[str, str] | None = None) -> str:
    """Pick the document title from metadata or the first heading-like line.

    Args:
        text: Full decoded text
        metadata: Document information dictionary

    Returns:
        Title, or "Untitled Document" when nothing qualifies
    """
    if metadata and metadata.get("Title"):
        return metadata["Title"]

    lines = [line.strip() for line in text.split("\n") if line.strip()]
    for line in lines[:PDF_TITLE_SCAN_LINES]:
        if HEADING_MIN_LENGTH < len(line) < TITLE_MAX_LENGTH and not _ends_like_sentence(line):
            return line

    return UNTITLED_DOCUMENT


def is_section_heading(line: str) -> bool:
    """Return True if a line looks like a section heading."""
    trimmed = line.strip()

    if len(trimmed) < HEADING_MIN_LENGTH or len(trimmed) > HEADING_MAX_LENGTH:
        return False

    if NUMBERED_HEADING.match(trimmed):
        return True

    if ALL_CAPS_HEADING.match(trimmed) and len(trimmed) > ALL_CAPS_MIN_LENGTH:
        return True

    if DIVISION_HEADING.match(trimmed):
        return True

    return (
        not _ends_like_sentence(trimmed)
        and TITLE_CASE_HEADING.match(trimmed) is not None
        and len(trimmed) < TITLE_CASE_MAX_LENGTH
    )


def is_code_block_start(line: str) -> bool:
    """Return True if a line opens a code listing."""
    trimmed = line.strip()
    return trimmed.startswith(FENCES) or CODE_LABEL.match(trimmed) is not None


def is_code_block_end(line: str) -> bool:
    """Return True if a line closes a fenced listing."""
    return line.strip() in FENCES


def extract_sections(text: str, total_pages: int) -> list[PdfSection]:
    """Split decoded text into heading-delimited sections.

    Text before the first heading becomes an "Introduction" section. A
    document without any heading becomes a single "Document Content"
    section holding the full text.

    Args:
        text: Full decoded text
        total_pages: Page count reported by the decoder

    Returns:
        Sections in document order
    """
    sections: list[PdfSection] = []
    lines = text.split("\n")
    lines_per_page = max(1, math.ceil(len(lines) / max(1, total_pages)))

    current: PdfSection | None = None
    content_lines: list[str] = []
    code_blocks: list[str] = []
    code_lines: list[str] = []
    in_code_block = False

    def finalize() -> None:
        if current is not None:
            current.content = "\n".join(content_lines).strip()
            current.code_blocks = list(code_blocks)
            sections.append(current)

    for index, line in enumerate(lines):
        page_number = index // lines_per_page + 1

        if in_code_block:
            if is_code_block_end(line):
                in_code_block = False
                code_blocks.append("\n".join(code_lines))
            else:
                code_lines.append(line)
            continue

        if is_code_block_start(line):
            in_code_block = True
            code_lines = []
            continue

        if is_section_heading(line):
            finalize()
            current = PdfSection(title=line.strip(), content="", page_number=page_number)
            content_lines = []
            code_blocks = []
        elif current is not None:
            content_lines.append(line)
        elif line.strip():
            current = PdfSection(title=INTRODUCTION_SECTION, content="", page_number=1)
            content_lines = [line]

    finalize()

    if not sections:
        sections.append(PdfSection(title=WHOLE_DOCUMENT_SECTION, content=text, page_number=1))

    return sections


def format_overview(document: PdfDocument) -> str:
    """Render title, page count, metadata and table of contents."""
    lines = [f"# {document.title}", "", f"**Pages:** {document.pages}", ""]

    if document.metadata:
        lines.extend(["## Document Information", ""])
        lines.extend(f"- **{key}:** {value}" for key, value in document.metadata.items())
        lines.append("")

    if len(document.sections) > 1:
        lines.extend(["## Table of Contents", ""])
        lines.extend(f"- {section.title} (page {section.page_number})" for section in document.sections)

    return "\n".join(lines)


def format_section(section: PdfSection) -> str:
    """Render a section with its page marker and captured code."""
    lines = [f"# {section.title}", f"*Page {section.page_number}*", "", section.content]

    if section.code_blocks:
        lines.extend(["", "## Code Examples", ""])
        for code in section.code_blocks:
            lines.extend(["```", code, "```", ""])

    return "\n".join(lines)


class PdfExtractor:
    """Converts a segmented PDF document into documentation units."""

    def to_units(self, document: PdfDocument, source: str) -> list[DocumentationUnit]:
        """Build an overview unit followed by one unit per substantial section.

        Sections with fewer than MIN_CONTENT_LENGTH characters are dropped.

        Args:
            document: Segmented document
            source: Skill name the units belong to

        Returns:
            Units in document order
        """
        units = [
            DocumentationUnit(
                id=unit_id(0),
                source=source,
                title=document.title,
                content=format_overview(document),
                snippet=f"PDF document with {document.pages} pages",
                searchable_text=f"{document.title} {document.content}".lower()[:SEARCHABLE_TEXT_LIMIT],
                type=UnitType.GUIDE,
                category="overview",
            )
        ]

        for section in document.sections:
            if len(section.content) < MIN_CONTENT_LENGTH:
                logger.debug("pdf_section_skipped", title=section.title, length=len(section.content))
                continue

            code_examples = tuple(code.strip() for code in section.code_blocks if code.strip())
            units.append(
                DocumentationUnit(
                    id=unit_id(len(units)),
                    source=source,
                    title=section.title,
                    content=format_section(section),
                    snippet=make_snippet(section.content),
                    searchable_text=f"{section.title} {section.content}".lower(),
                    type=UnitType.EXAMPLE if code_examples else UnitType.GUIDE,
                    category="content",
                    code_examples=code_examples,
                    code_blocks=tuple(
                        enrich_code(code, title=section.title, sniff=True) for code in code_examples
                    ),
                )
            )

        return units
