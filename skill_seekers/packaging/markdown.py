"""Markdown rendering of the SKILL.md, reference.md and examples.md documents."""

from collections.abc import Iterable, Sequence

import yaml

from skill_seekers.common.constants import (
    API_EXCERPT_LENGTH,
    DEFAULT_CATEGORY,
    GETTING_STARTED_MARKERS,
    KEY_TOPIC_SNIPPET_LENGTH,
    MAX_KEY_TOPICS,
    MAX_REFERENCE_EXAMPLES,
    SOURCE_DESCRIPTIONS,
)
from skill_seekers.extraction.models import DocumentationUnit, UnitType
from skill_seekers.models.job import JobType

FOOTER = "*Generated by Skill Seekers*"
FALLBACK_SOURCE_DESCRIPTION = "automated scraping"


def group_by_category(units: Iterable[DocumentationUnit]) -> dict[str, list[DocumentationUnit]]:
    """Group units by category in first-seen order.

    Units without a category land in the "general" bucket.
    """
    groups: dict[str, list[DocumentationUnit]] = {}
    for unit in units:
        groups.setdefault(unit.category or DEFAULT_CATEGORY, []).append(unit)
    return groups


def _code_fence(code: str) -> list[str]:
    return ["```", code, "```", ""]


def _front_matter(name: str, description: str) -> str:
    body = yaml.safe_dump(
        {"name": name, "description": description},
        default_flow_style=False,
        allow_unicode=True,
        sort_keys=False,
    )
    return f"---\n{body}---\n"


def find_getting_started(units: Sequence[DocumentationUnit]) -> DocumentationUnit | None:
    """Return the first unit whose title reads like an entry point."""
    for unit in units:
        title = unit.title.lower()
        if any(marker in title for marker in GETTING_STARTED_MARKERS):
            return unit
    return None


def render_skill_md(
    name: str,
    description: str,
    units: Sequence[DocumentationUnit],
    source_type: JobType,
    source_url: str | None = None,
) -> str:
    """Render the primary SKILL.md descriptor.

    Args:
        name: Skill name
        description: When to use the skill
        units: All units in build order
        source_type: Job type that produced the units
        source_url: Source locator, if any

    Returns:
        Markdown with YAML front matter
    """
    source_description = SOURCE_DESCRIPTIONS.get(source_type.value, FALLBACK_SOURCE_DESCRIPTION)
    type_counts = {unit_type: 0 for unit_type in UnitType}
    for unit in units:
        type_counts[unit.type] += 1

    lines = [
        f"# {name}",
        "",
        description,
        "",
        "## Overview",
        "",
        f"This skill contains documentation for {name}, automatically generated from {source_description}.",
        "",
        "## Statistics",
        "",
        f"- **Total Pages:** {len(units)}",
        f"- **API References:** {type_counts[UnitType.API]}",
        f"- **Guides:** {type_counts[UnitType.GUIDE]}",
        f"- **Examples:** {type_counts[UnitType.EXAMPLE]}",
        "",
    ]

    if source_url:
        lines.extend(["## Source", "", f"[{source_url}]({source_url})", ""])

    categories = group_by_category(units)
    if len(categories) > 1:
        lines.extend(["## Contents", ""])
        lines.extend(f"- **{category}** ({len(members)} pages)" for category, members in categories.items())
        lines.append("")

    getting_started = find_getting_started(units)
    if getting_started is not None:
        lines.extend(
            ["## Getting Started", "", getting_started.snippet, "", f"See: {getting_started.title}", ""]
        )

    guides = [unit for unit in units if unit.type is UnitType.GUIDE][:MAX_KEY_TOPICS]
    if guides:
        lines.extend(["## Key Topics", ""])
        lines.extend(
            f"- **{unit.title}**: {unit.snippet[:KEY_TOPIC_SNIPPET_LENGTH]}..." for unit in guides
        )
        lines.append("")

    lines.extend(["---", "", FOOTER])
    return _front_matter(name, description) + "\n" + "\n".join(lines)


def render_reference(units: Sequence[DocumentationUnit]) -> str | None:
    """Render the combined reference.md, or None when there are no units.

    Every category section lists each unit's full content and up to three
    code examples; an API Reference section follows for api units.
    """
    if not units:
        return None

    lines = ["# Reference Documentation", ""]

    for category, members in group_by_category(units).items():
        lines.extend([f"## {category[:1].upper()}{category[1:]}", ""])
        lines.extend([f"*{len(members)} pages in this section*", ""])

        for unit in members:
            lines.extend([f"### {unit.title}", ""])
            if unit.url:
                lines.extend([f"*Source: {unit.url}*", ""])
            lines.extend([unit.content, ""])

            if unit.code_examples:
                lines.extend(["#### Code Examples", ""])
                for example in unit.code_examples[:MAX_REFERENCE_EXAMPLES]:
                    lines.extend(_code_fence(example))

            lines.extend(["---", ""])

    api_units = [unit for unit in units if unit.type is UnitType.API]
    if api_units:
        lines.extend(["## API Reference", "", f"*{len(api_units)} API entries*", ""])

        for unit in api_units:
            lines.extend([f"### {unit.title}", ""])
            reference = unit.api_reference
            if reference is not None:
                if reference.signature:
                    lines.extend(_code_fence(reference.signature))
                if reference.parameters:
                    lines.extend(["#### Parameters", ""])
                    lines.extend(f"- {parameter}" for parameter in reference.parameters)
                    lines.append("")
                if reference.returns:
                    lines.extend([f"**Returns:** {reference.returns}", ""])
                if reference.example:
                    lines.extend(["#### Example", ""])
                    lines.extend(_code_fence(reference.example))

            lines.extend([unit.content[:API_EXCERPT_LENGTH], ""])
            if unit.url:
                lines.extend([f"*See: {unit.url}*", ""])
            lines.extend(["---", ""])

    return "\n".join(lines)


def render_examples(units: Sequence[DocumentationUnit]) -> str | None:
    """Render examples.md with every code example, or None if there are none."""
    with_examples = [unit for unit in units if unit.code_examples]
    if not with_examples:
        return None

    lines = ["# Code Examples", "", f"*{len(with_examples)} pages with examples*", ""]

    for unit in with_examples:
        lines.extend([f"## {unit.title}", ""])
        numbered = len(unit.code_examples) > 1
        for position, example in enumerate(unit.code_examples, start=1):
            if numbered:
                lines.extend([f"### Example {position}", ""])
            lines.extend(_code_fence(example))

        if unit.url:
            lines.extend([f"*Source: {unit.url}*", ""])
        lines.extend(["---", ""])

    return "\n".join(lines)
