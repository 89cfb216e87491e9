"""Documentation unit extraction from fetched repository metadata."""

from collections.abc import Iterable, Mapping

import structlog

from skill_seekers.common.constants import (
    FILE_TREE_MAX_DEPTH,
    FILE_TREE_MAX_SIBLINGS,
    GITHUB_WEB_URL,
    ISSUE_BODY_PREVIEW,
    MAX_CLOSED_ISSUES,
)
from skill_seekers.extraction.code_blocks import extract_markdown_code_blocks
from skill_seekers.extraction.models import (
    DocumentationUnit,
    FileTreeNode,
    RepositoryData,
    RepositoryIssue,
    RepositoryRelease,
    UnitType,
    make_snippet,
    unit_id,
)

logger = structlog.get_logger(__name__)

DIRECTORY_MARKER = "📁"
FILE_MARKER = "📄"


def build_file_tree(items: Iterable[Mapping]) -> list[FileTreeNode]:
    """Rebuild a nested tree from a flat recursive tree listing.

    Args:
        items: Entries with ``path``, ``type`` ("tree" for directories) and
            optional ``size``

    Returns:
        Top-level nodes; children are attached to their parent directories
    """
    roots: list[FileTreeNode] = []
    nodes: dict[str, FileTreeNode] = {}

    # Sorting by path guarantees parents are seen before their children
    for item in sorted((i for i in items if i.get("path")), key=lambda i: i["path"]):
        path = item["path"]
        parent_path, _, name = path.rpartition("/")

        node = FileTreeNode(
            name=name,
            path=path,
            is_directory=item.get("type") == "tree",
            size=item.get("size"),
        )
        nodes[path] = node

        if not parent_path:
            roots.append(node)
        else:
            parent = nodes.get(parent_path)
            if parent is not None and parent.is_directory:
                parent.children.append(node)

    return roots


def format_file_tree(nodes: list[FileTreeNode]) -> str:
    """Render the tree depth-first with directory/file markers."""
    lines = ["# File Structure", ""]

    def render(level_nodes: list[FileTreeNode], depth: int) -> None:
        for node in level_nodes[:FILE_TREE_MAX_SIBLINGS]:
            marker = DIRECTORY_MARKER if node.is_directory else FILE_MARKER
            lines.append(f"{'  ' * depth}{marker} {node.name}")
            if node.children and depth < FILE_TREE_MAX_DEPTH:
                render(node.children, depth + 1)

    render(nodes, 0)
    return "\n".join(lines)


def language_breakdown(languages: Mapping[str, int]) -> list[tuple[str, str]]:
    """Return (language, percentage) pairs with one decimal place."""
    total = sum(languages.values())
    if total <= 0:
        return []
    return [(name, f"{count / total * 100:.1f}") for name, count in languages.items()]


def format_overview(data: RepositoryData) -> str:
    """Render repository statistics and language percentages."""
    lines = [
        f"# {data.name}",
        "",
        data.description or "",
        "",
        "## Statistics",
        f"- **Stars:** {data.stars}",
        f"- **Forks:** {data.forks}",
        f"- **Primary Language:** {data.language}",
        "",
        "## Languages",
    ]
    lines.extend(f"- {name}: {percentage}%" for name, percentage in language_breakdown(data.languages))
    return "\n".join(lines)


def format_issues(issues: list[RepositoryIssue]) -> str:
    """Render issues with state, labels, dates and a body preview."""
    lines = ["# Issues", ""]

    for issue in issues:
        lines.append(f"## #{issue.number}: {issue.title}")
        lines.append(f"**State:** {issue.state} | **Labels:** {', '.join(issue.labels) or 'none'}")
        lines.append(f"**Created:** {issue.created_at} | **Updated:** {issue.updated_at}")
        lines.append("")
        if issue.body:
            preview = issue.body[:ISSUE_BODY_PREVIEW]
            if len(issue.body) > ISSUE_BODY_PREVIEW:
                preview += "..."
            lines.append(preview)
        lines.extend(["", "---", ""])

    return "\n".join(lines)


def format_releases(releases: list[RepositoryRelease]) -> str:
    """Render releases with tag, publish date and notes."""
    lines = ["# Releases", ""]

    for release in releases:
        tag = f"{release.tag_name} (pre-release)" if release.prerelease else release.tag_name
        lines.append(f"## {release.name or tag}")
        lines.append(f"**Tag:** {release.tag_name} | **Published:** {release.published_at}")
        lines.append("")
        if release.body:
            lines.append(release.body)
        lines.extend(["", "---", ""])

    return "\n".join(lines)


class RepositoryExtractor:
    """Converts RepositoryData into documentation units in a fixed order.

    README, overview, file structure, open issues, closed issues, releases,
    changelog. Sections whose source data is empty are left out, except the
    overview which is always present.
    """

    def __init__(self) -> None:
        self.source = ""
        self._units: list[DocumentationUnit] = []

    def to_units(self, data: RepositoryData, source: str) -> list[DocumentationUnit]:
        """Convert fetched repository data to documentation units.

        Args:
            data: Fetched repository data
            source: Skill name the units belong to

        Returns:
            Units in section order with sequential ids
        """
        self.source = source
        self._units = []
        repo_url = f"{GITHUB_WEB_URL}/{data.full_name}"

        if data.readme:
            self._add_markdown_unit(
                title=f"{data.name} - README",
                content=data.readme,
                code_source=data.readme,
                snippet=make_snippet(data.readme),
                url=repo_url,
                searchable=f"{data.name} readme {data.readme}",
                category="overview",
            )

        self._add(
            title=f"{data.name} - Repository Overview",
            content=format_overview(data),
            snippet=data.description or "Repository overview",
            url=repo_url,
            searchable=f"{data.name} overview {data.description}",
            category="overview",
        )

        if data.file_tree:
            self._add(
                title=f"{data.name} - File Structure",
                content=format_file_tree(data.file_tree),
                snippet="Repository file structure and organization",
                url=repo_url,
                searchable=f"{data.name} files structure tree",
                category="structure",
            )

        if data.issues:
            open_issues = [issue for issue in data.issues if issue.state == "open"]
            if open_issues:
                self._add_markdown_unit(
                    title=f"{data.name} - Open Issues",
                    content=format_issues(open_issues),
                    code_source="\n\n".join(issue.body for issue in open_issues),
                    snippet=f"{len(open_issues)} open issues",
                    url=f"{repo_url}/issues",
                    searchable=" ".join(issue.title for issue in open_issues),
                    category="issues",
                )

            closed_issues = [issue for issue in data.issues if issue.state == "closed"]
            closed_issues = closed_issues[:MAX_CLOSED_ISSUES]
            if closed_issues:
                self._add_markdown_unit(
                    title=f"{data.name} - Recently Closed Issues",
                    content=format_issues(closed_issues),
                    code_source="\n\n".join(issue.body for issue in closed_issues),
                    snippet=f"{len(closed_issues)} recently closed issues",
                    url=f"{repo_url}/issues?q=is%3Aclosed",
                    searchable=" ".join(issue.title for issue in closed_issues),
                    category="issues",
                )

        if data.releases:
            self._add_markdown_unit(
                title=f"{data.name} - Releases",
                content=format_releases(data.releases),
                code_source="\n\n".join(release.body for release in data.releases),
                snippet=f"{len(data.releases)} releases",
                url=f"{repo_url}/releases",
                searchable=" ".join(f"{r.name} {r.body}" for r in data.releases),
                category="releases",
            )

        if data.changelog:
            self._add_markdown_unit(
                title=f"{data.name} - Changelog",
                content=data.changelog,
                code_source=data.changelog,
                snippet="Project changelog and version history",
                url=f"{repo_url}/blob/main/CHANGELOG.md",
                searchable=f"{data.name} changelog history {data.changelog}",
                category="releases",
            )

        logger.debug("repository_units_built", repo=data.full_name, units=len(self._units))
        return self._units

    def _add_markdown_unit(self, code_source: str, **fields: str) -> None:
        code_examples, code_blocks = extract_markdown_code_blocks(code_source)
        self._add(
            unit_type=UnitType.EXAMPLE if code_examples else UnitType.GUIDE,
            code_examples=tuple(code_examples),
            code_blocks=tuple(code_blocks),
            **fields,
        )

    def _add(
        self,
        title: str,
        content: str,
        snippet: str,
        url: str,
        searchable: str,
        category: str,
        unit_type: UnitType = UnitType.GUIDE,
        code_examples: tuple[str, ...] = (),
        code_blocks: tuple = (),
    ) -> None:
        self._units.append(
            DocumentationUnit(
                id=unit_id(len(self._units)),
                source=self.source,
                title=title,
                content=content,
                snippet=snippet,
                searchable_text=searchable.lower(),
                type=unit_type,
                url=url,
                category=category,
                code_examples=code_examples,
                code_blocks=code_blocks,
            )
        )
