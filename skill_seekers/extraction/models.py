"""Data models for extracted documentation content."""

from dataclasses import dataclass, field
from enum import Enum

from skill_seekers.common.constants import SNIPPET_LENGTH, SNIPPET_SUFFIX


class UnitType(str, Enum):
    """Mutually exclusive classification of a documentation unit."""

    API = "api"
    GUIDE = "guide"
    EXAMPLE = "example"


@dataclass(frozen=True)
class CodeBlock:
    """A code snippet enriched with detection results.

    Attributes:
        code: Raw code text (trimmed)
        language: Canonical language name, if known
        filename: Suggested filename, if one could be inferred
        is_script: Whether the code looks like a complete runnable script
        is_template: Whether the code contains placeholders
        title: Nearest heading above the code, if any
    """

    code: str
    language: str | None = None
    filename: str | None = None
    is_script: bool = False
    is_template: bool = False
    title: str | None = None


@dataclass(frozen=True)
class ApiReference:
    """Structured API information extracted from an API page."""

    signature: str | None = None
    parameters: tuple[str, ...] = ()
    returns: str | None = None
    example: str | None = None
    deprecated: bool = False


@dataclass(frozen=True)
class DocumentationUnit:
    """Normalized record for one logical page, section or document.

    Attributes:
        id: Sequential identifier within a build (docs-1, docs-2, ...)
        source: Name of the skill being built
        title: Unit title
        content: Full text or markdown content
        snippet: Content prefix used in summaries
        searchable_text: Lower-cased title and content
        type: Page type classification
        url: Source locator (empty for PDF sections)
        category: Grouping bucket, None means "general"
        code_examples: Raw code strings found in the content
        code_blocks: Enriched code records
        api_reference: Structured API info, only for API units
    """

    id: str
    source: str
    title: str
    content: str
    snippet: str
    searchable_text: str
    type: UnitType
    url: str = ""
    category: str | None = None
    code_examples: tuple[str, ...] = ()
    code_blocks: tuple[CodeBlock, ...] = ()
    api_reference: ApiReference | None = None


def make_snippet(content: str) -> str:
    """Build the fixed-length snippet stored on a unit."""
    return content[:SNIPPET_LENGTH] + SNIPPET_SUFFIX


def unit_id(position: int) -> str:
    """Return the identifier for the unit at a 0-based build position."""
    return f"docs-{position + 1}"


@dataclass
class FileTreeNode:
    """A file or directory in a repository tree."""

    name: str
    path: str
    is_directory: bool
    size: int | None = None
    children: list["FileTreeNode"] = field(default_factory=list)


@dataclass
class RepositoryIssue:
    """Issue fetched from a repository (pull requests excluded)."""

    number: int
    title: str
    body: str
    state: str
    labels: list[str]
    created_at: str
    updated_at: str


@dataclass
class RepositoryRelease:
    """Release fetched from a repository."""

    tag_name: str
    name: str
    body: str
    published_at: str
    prerelease: bool


@dataclass
class RepositoryData:
    """Everything fetched about a repository; failed fetches leave defaults.

    Attributes:
        name: Repository name (without owner)
        full_name: owner/repo
        description: Repository description
        stars: Stargazer count
        forks: Fork count
        language: Primary language
        languages: Bytes of code per language
        readme: Raw README text
        file_tree: Top-level tree nodes
        issues: Fetched issues, most recently updated first
        releases: Fetched releases, newest first
        changelog: First changelog file found, if any
    """

    name: str
    full_name: str
    description: str = ""
    stars: int = 0
    forks: int = 0
    language: str = ""
    languages: dict[str, int] = field(default_factory=dict)
    readme: str = ""
    file_tree: list[FileTreeNode] = field(default_factory=list)
    issues: list[RepositoryIssue] = field(default_factory=list)
    releases: list[RepositoryRelease] = field(default_factory=list)
    changelog: str | None = None


@dataclass
class PdfSection:
    """A heading-delimited section of PDF text."""

    title: str
    content: str
    page_number: int
    code_blocks: list[str] = field(default_factory=list)


@dataclass
class PdfDocument:
    """Decoded PDF text with detected title and sections."""

    title: str
    content: str
    pages: int
    metadata: dict[str, str]
    sections: list[PdfSection]
