"""Unit tests for the shared text classifiers."""

import pytest

from skill_seekers.extraction.classifiers import (
    classify_category,
    classify_page_type,
    extension_for_language,
    infer_filename,
    is_complete_script,
    is_template_code,
    normalize_language,
    sniff_language,
)
from skill_seekers.extraction.models import UnitType


class TestClassifyPageType:
    """Test cases for classify_page_type."""

    def test_api_url_wins_over_example_content(self) -> None:
        """Test that API markers take precedence over example markers."""
        result = classify_page_type("https://docs.example.com/api/foo", "Example: call foo()")

        assert result is UnitType.API

    def test_api_content_marker(self) -> None:
        """Test that 'Parameters:' in the content marks an API page."""
        assert classify_page_type("https://docs.example.com/guide", "Parameters: name") is UnitType.API

    def test_example_url_marker(self) -> None:
        """Test that tutorial URLs are examples."""
        assert classify_page_type("https://docs.example.com/tutorial/intro", "Welcome") is UnitType.EXAMPLE

    def test_example_content_marker(self) -> None:
        """Test that 'example:' in content marks an example page."""
        assert classify_page_type("https://docs.example.com/intro", "Example: run it") is UnitType.EXAMPLE

    def test_guide_fallback(self) -> None:
        """Test that pages without markers are guides."""
        assert classify_page_type("https://docs.example.com/intro", "Plain prose") is UnitType.GUIDE

    @pytest.mark.parametrize(
        "locator,content",
        [
            ("", ""),
            ("https://x.dev/REFERENCE/a", "anything"),
            ("file.pdf", "// Example usage"),
            ("https://x.dev/docs", "returns: nothing"),
        ],
    )
    def test_total_and_deterministic(self, locator: str, content: str) -> None:
        """Test that classification always yields one type, identically on repeat."""
        first = classify_page_type(locator, content)

        assert first in set(UnitType)
        assert classify_page_type(locator, content) is first


class TestClassifyCategory:
    """Test cases for classify_category."""

    def test_first_matching_category_wins(self) -> None:
        """Test that categories are checked in insertion order."""
        categories = {"api": ["/api/"], "reference": ["/api/", "/ref/"]}

        assert classify_category("https://x.dev/api/client", categories) == "api"

    def test_match_is_case_insensitive(self) -> None:
        """Test that patterns and URLs are compared lower-cased."""
        assert classify_category("https://x.dev/Guides/Start", {"guides": ["/GUIDES/"]}) == "guides"

    def test_no_match_returns_none(self) -> None:
        """Test that unmatched URLs have no category."""
        assert classify_category("https://x.dev/blog", {"api": ["/api/"]}) is None
        assert classify_category("https://x.dev/blog", None) is None


class TestLanguageDetection:
    """Test cases for language normalization and sniffing."""

    def test_normalize_aliases(self) -> None:
        """Test that short tags map to canonical names."""
        assert normalize_language("py") == "python"
        assert normalize_language("JS") == "javascript"
        assert normalize_language("shell") == "bash"
        assert normalize_language("Rust") == "rust"
        assert normalize_language(None) is None
        assert normalize_language("") is None

    def test_sniff_python(self) -> None:
        """Test that import statements are recognized as Python."""
        assert sniff_language("import os\nprint(os.getcwd())") == "python"

    def test_sniff_javascript_and_typescript(self) -> None:
        """Test that JS is upgraded to TypeScript on type annotations."""
        assert sniff_language("const answer = 42;") == "javascript"
        assert sniff_language("interface User {\n  name: string\n}\nexport const user = {}") == "typescript"

    def test_sniff_bash(self) -> None:
        """Test that prompt-prefixed commands are bash."""
        assert sniff_language("$ npm install left-pad") == "bash"

    def test_sniff_json_and_sql(self) -> None:
        """Test data and query languages."""
        assert sniff_language('{"name": "demo", "version": 1}') == "json"
        assert sniff_language("SELECT * FROM users WHERE id = 1") == "sql"

    def test_sniff_shebang(self) -> None:
        """Test that the shebang interpreter decides the language."""
        assert sniff_language("#!/usr/bin/env python3\nx = 1") == "python"
        assert sniff_language("#!/bin/sh\nls") == "bash"

    def test_sniff_unknown(self) -> None:
        """Test that prose yields no language."""
        assert sniff_language("just some words") is None


class TestIsCompleteScript:
    """Test cases for is_complete_script."""

    def test_twenty_lines_without_markers(self) -> None:
        """Test that 20 plain lines count as a script."""
        code = "\n".join(f"value_{i} = {i}" for i in range(20))

        assert is_complete_script(code) is True

    def test_three_line_snippet(self) -> None:
        """Test that a short snippet without markers is not a script."""
        assert is_complete_script("a = 1\nb = 2\nprint(a + b)", "python") is False

    def test_shebang(self) -> None:
        """Test that a shebang alone qualifies."""
        assert is_complete_script("#!/bin/bash\necho hi") is True

    def test_python_markers(self) -> None:
        """Test main guards and multiple top-level functions."""
        assert is_complete_script("if __name__ == '__main__':\n    run()", "py") is True
        assert is_complete_script("def a():\n    pass\ndef b():\n    pass", "python") is True

    def test_bash_command_count(self) -> None:
        """Test that five non-comment bash lines qualify."""
        code = "# setup\ncd app\nnpm ci\nnpm test\nnpm run build\nnpm publish"

        assert is_complete_script(code, "sh") is True
        assert is_complete_script("cd app\nnpm ci", "sh") is False

    def test_javascript_exports(self) -> None:
        """Test that module exports qualify JS."""
        assert is_complete_script("export function run() {}", "js") is True


class TestIsTemplateCode:
    """Test cases for is_template_code."""

    @pytest.mark.parametrize(
        "code",
        [
            "Hello {{name}}!",
            "prefix {{ name }} suffix\nmore lines",
            "{% block content %}{% endblock %}",
            "API_KEY=<YOUR_KEY>",
            "token = YOUR_API_TOKEN",
            "echo ${HOME}",
        ],
    )
    def test_placeholders_detected(self, code: str) -> None:
        """Test that every placeholder style is detected."""
        assert is_template_code(code) is True

    def test_plain_code(self) -> None:
        """Test that ordinary code is not a template."""
        assert is_template_code("print('hello world')") is False


class TestFilenames:
    """Test cases for infer_filename and extension_for_language."""

    def test_language_extension(self) -> None:
        """Test filename from the language tag."""
        assert infer_filename("print(1)", "py") == "helper.py"

    def test_index_suffix(self) -> None:
        """Test that later blocks get a numeric suffix."""
        assert infer_filename("print(1)", "python", index=2) == "helper_3.py"

    def test_shebang_wins_over_tag(self) -> None:
        """Test that the shebang decides the extension."""
        assert infer_filename("#!/bin/bash\necho hi", "python") == "helper.sh"

    def test_dockerfile(self) -> None:
        """Test bare filenames for docker."""
        assert infer_filename("FROM python:3.12", "dockerfile") == "Dockerfile"

    def test_unknown_language(self) -> None:
        """Test that unknown languages yield no filename."""
        assert infer_filename("???", "cobol") is None
        assert infer_filename("???") is None

    def test_extension_for_language(self) -> None:
        """Test script extensions with the .py fallback."""
        assert extension_for_language("Ruby") == ".rb"
        assert extension_for_language(None) == ".py"
        assert extension_for_language("cobol") == ".py"
