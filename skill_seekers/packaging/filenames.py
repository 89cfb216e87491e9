"""Filename generation for packaged scripts and templates."""

import re
import unicodedata

from skill_seekers.common.constants import MAX_GENERATED_NAME_LENGTH

NON_ALPHANUMERIC = re.compile(r"[^a-z0-9]+")


def slugify_title(title: str | None, max_length: int = MAX_GENERATED_NAME_LENGTH) -> str:
    """Turn a code block title into a filename stem.

    Accented characters are folded to ASCII, every run of other characters
    becomes one underscore, and the result is cut to max_length.

    Args:
        title: Heading associated with a code block
        max_length: Maximum stem length

    Returns:
        Stem such as ``install_the_cli``, or an empty string when nothing
        usable remains
    """
    if not title:
        return ""

    normalized = unicodedata.normalize("NFKD", title)
    ascii_str = normalized.encode("ascii", "ignore").decode("ascii")
    slug = NON_ALPHANUMERIC.sub("_", ascii_str.lower())
    return slug[:max_length].strip("_")


def positional_name(prefix: str, index: int) -> str:
    """Default stem for the block at a 0-based index: helper, helper_2, ..."""
    return f"{prefix}_{index + 1}" if index > 0 else prefix


def unique_filename(stem: str, extension: str, used: set[str]) -> str:
    """Return ``stem + extension``, suffixed ``_1``, ``_2``, ... on collision.

    The chosen name is added to ``used``.
    """
    filename = f"{stem}{extension}"
    counter = 1
    while filename in used:
        filename = f"{stem}_{counter}{extension}"
        counter += 1
    used.add(filename)
    return filename
