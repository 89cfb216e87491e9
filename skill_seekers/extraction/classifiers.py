"""Heuristic classifiers shared by all content extractors.

Rule order in every classifier is part of its contract: the first matching
rule wins, and several patterns overlap on purpose (``import`` is both Python
and JavaScript, ``/api/`` pages often contain ``Example:``).
"""

import json
import re
from collections.abc import Mapping, Sequence

from skill_seekers.common.constants import (
    API_CONTENT_MARKERS,
    API_URL_MARKERS,
    EXAMPLE_CONTENT_MARKERS,
    EXAMPLE_URL_MARKERS,
    LANGUAGE_ALIASES,
    LANGUAGE_EXTENSIONS,
    SCRIPT_EXTENSIONS,
)
from skill_seekers.extraction.models import UnitType

# Script detection
SCRIPT_MIN_LINES = 20
BASH_MIN_COMMAND_LINES = 5
JS_ASYNC_MIN_LENGTH = 200
TOP_LEVEL_DEF_PATTERN = re.compile(r"^def \w+\(", re.MULTILINE)

# Template placeholders, checked in order
TEMPLATE_PATTERNS = (
    re.compile(r"\{\{[^}]+\}\}"),  # {{variable}}
    re.compile(r"\{%[^%]+%\}"),  # {% block %}
    re.compile(r"<[A-Z_]+>"),  # <YOUR_VALUE>
    re.compile(r"\[[A-Z_]+\]"),  # [YOUR_VALUE]
    re.compile(r"YOUR_[A-Z_]+"),  # YOUR_API_KEY
    re.compile(r"\$\{[^}]+\}"),  # ${variable}
    re.compile(r": <[^>]+>"),  # key: <value>
    re.compile(r'= "<[^>]+"'),  # var = "<value>"
)

# Language sniffing patterns for untagged code
PYTHON_PATTERN = re.compile(
    r"^\s*(?:def \w+\(|class \w+\s*[(:]|from [\w.]+ import |import [\w.]+(?:\s+as \w+)?\s*$"
    r"|if __name__ ==|print\()",
    re.MULTILINE,
)
JAVASCRIPT_PATTERN = re.compile(
    r"^\s*(?:const \w+\s*=|let \w+\s*=|var \w+\s*=|function\s*\w*\s*\(|export |"
    r"import .+ from ['\"]|module\.exports|console\.log\(|async function)",
    re.MULTILINE,
)
TYPESCRIPT_MARKERS = re.compile(
    r"^\s*(?:export\s+)?(?:interface|type)\s+\w+|:\s*(?:string|number|boolean|any|void)\b",
    re.MULTILINE,
)
BASH_PATTERN = re.compile(
    r"^\s*(?:\$ |sudo |apt(?:-get)? |brew |npm |npx |pip3? |yarn |echo |cd |curl |wget |"
    r"git |docker |export \w+=|mkdir |chmod )",
    re.MULTILINE,
)
YAML_PATTERN = re.compile(r"^[\w-]+:(?:\s+\S.*)?$", re.MULTILINE)
SQL_PATTERN = re.compile(
    r"^\s*(?:SELECT\s|INSERT\s+INTO|UPDATE\s+\w+\s+SET|DELETE\s+FROM|CREATE\s+(?:TABLE|INDEX|VIEW)"
    r"|ALTER\s+TABLE|DROP\s+TABLE)",
    re.IGNORECASE | re.MULTILINE,
)
GO_PATTERN = re.compile(r"^\s*(?:package \w+\s*$|func (?:\(\w+ \*?\w+\) )?\w+\(|import \()", re.MULTILINE)
RUST_PATTERN = re.compile(r"^\s*(?:pub )?(?:fn \w+|let mut |use \w+::|impl\b|struct \w+\s*\{)", re.MULTILINE)
JAVA_PATTERN = re.compile(
    r"^\s*(?:public |private |protected )(?:static )?(?:final )?(?:class|interface|void|\w+)\b"
    r"|System\.out\.print",
    re.MULTILINE,
)

SHEBANG_PREFIX = "#!/"


def classify_page_type(locator: str, content: str) -> UnitType:
    """Classify a page as api, example or guide.

    API markers are checked first, then example markers; everything else is
    a guide.

    Args:
        locator: Page URL or other source locator
        content: Extracted page text

    Returns:
        The page type
    """
    locator_lower = locator.lower()
    content_lower = content.lower()

    if any(marker in locator_lower for marker in API_URL_MARKERS) or any(
        marker in content_lower for marker in API_CONTENT_MARKERS
    ):
        return UnitType.API

    if any(marker in locator_lower for marker in EXAMPLE_URL_MARKERS) or any(
        marker in content_lower for marker in EXAMPLE_CONTENT_MARKERS
    ):
        return UnitType.EXAMPLE

    return UnitType.GUIDE


def classify_category(
    locator: str, categories: Mapping[str, Sequence[str]] | None
) -> str | None:
    """Return the first category whose patterns match the locator.

    Args:
        locator: Page URL
        categories: Ordered mapping of category name to substring patterns

    Returns:
        Matching category name, or None when nothing matches
    """
    if not categories:
        return None

    locator_lower = locator.lower()
    for category, patterns in categories.items():
        for pattern in patterns:
            if pattern.lower() in locator_lower:
                return category

    return None


def normalize_language(tag: str | None) -> str | None:
    """Map a raw language tag to its canonical lower-case name."""
    if not tag:
        return None
    lowered = tag.lower()
    return LANGUAGE_ALIASES.get(lowered, lowered)


def is_complete_script(code: str, language: str | None = None) -> bool:
    """Decide whether code looks like a complete runnable script.

    Any single rule qualifies: a shebang, language-specific structure
    markers, or sheer length.

    Args:
        code: Code text
        language: Raw or canonical language tag

    Returns:
        True if the code should be packaged as a script
    """
    if code.startswith(SHEBANG_PREFIX):
        return True

    lang = normalize_language(language)

    if lang == "python":
        if "if __name__" in code or "def main(" in code:
            return True
        if len(TOP_LEVEL_DEF_PATTERN.findall(code)) >= 2:
            return True

    if lang == "bash":
        commands = [
            line
            for line in code.split("\n")
            if line.strip() and not line.strip().startswith("#")
        ]
        if len(commands) >= BASH_MIN_COMMAND_LINES:
            return True

    if lang in ("javascript", "typescript"):
        if "export " in code or "module.exports" in code:
            return True
        if "async function" in code and len(code) > JS_ASYNC_MIN_LENGTH:
            return True

    return len(code.split("\n")) >= SCRIPT_MIN_LINES


def is_template_code(code: str) -> bool:
    """Return True if the code contains template placeholders."""
    return any(pattern.search(code) for pattern in TEMPLATE_PATTERNS)


def _looks_like_json(code: str) -> bool:
    stripped = code.strip()
    if not stripped or stripped[0] not in "{[":
        return False
    try:
        json.loads(stripped)
    except ValueError:
        return False
    return True


def sniff_language(code: str) -> str | None:
    """Guess the language of untagged code.

    Patterns are tried in a fixed order (python, javascript/typescript, bash, yaml,
    json, sql, go, rust, java) and the first hit wins.

    Args:
        code: Code text without a language tag

    Returns:
        Canonical language name, or None if no pattern matches
    """
    if code.startswith(SHEBANG_PREFIX):
        first_line = code.split("\n", 1)[0]
        if "python" in first_line:
            return "python"
        if "node" in first_line:
            return "javascript"
        if "sh" in first_line:
            return "bash"

    if PYTHON_PATTERN.search(code):
        return "python"
    if JAVASCRIPT_PATTERN.search(code):
        return "typescript" if TYPESCRIPT_MARKERS.search(code) else "javascript"
    if BASH_PATTERN.search(code):
        return "bash"
    if YAML_PATTERN.search(code) and "{" not in code and ";" not in code:
        return "yaml"
    if _looks_like_json(code):
        return "json"
    if SQL_PATTERN.search(code):
        return "sql"
    if GO_PATTERN.search(code):
        return "go"
    if RUST_PATTERN.search(code):
        return "rust"
    if JAVA_PATTERN.search(code):
        return "java"
    return None


def _shebang_extension(code: str) -> str | None:
    if not code.startswith(SHEBANG_PREFIX):
        return None
    if "/python" in code:
        return ".py"
    if "/bash" in code or "/sh" in code:
        return ".sh"
    if "/node" in code:
        return ".js"
    return None


def infer_filename(
    code: str,
    language: str | None = None,
    index: int | None = None,
    stem: str = "helper",
) -> str | None:
    """Infer a filename for a code block.

    A shebang wins over the language tag. For indices above zero a numeric
    suffix is added to the stem so names stay unique across blocks.

    Args:
        code: Code text
        language: Raw or canonical language tag
        index: 0-based position of the block among its siblings
        stem: Base name before any suffix and extension

    Returns:
        Filename such as ``helper.py`` or ``helper_2.sh``, or None when the
        language is unknown
    """
    extension = _shebang_extension(code)
    if extension is None:
        lang = normalize_language(language)
        if lang is None:
            return None
        extension = LANGUAGE_EXTENSIONS.get(lang)
        if extension is None:
            return None

    if not extension.startswith("."):
        # Bare filenames such as Dockerfile take no stem
        return extension if not index else f"{extension}_{index + 1}"

    name = f"{stem}_{index + 1}" if index else stem
    return f"{name}{extension}"


def extension_for_language(language: str | None, default: str = ".py") -> str:
    """Return the script extension for a language, or the default."""
    if not language:
        return default
    return SCRIPT_EXTENSIONS.get(language.lower(), default)
