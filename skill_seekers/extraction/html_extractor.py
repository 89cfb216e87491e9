"""Documentation unit extraction from crawled HTML pages."""

import copy
import re
from collections.abc import Mapping, Sequence

import structlog
from lxml import html

from skill_seekers.common.constants import (
    CONTENT_SELECTORS,
    DEFAULT_CODE_SELECTOR,
    DEFAULT_EXCLUDE_SELECTORS,
    HEADING_TAGS,
    MAX_PARAMETER_LENGTH,
    MIN_CODE_LENGTH,
    MIN_CONTENT_LENGTH,
    PARAMETER_SELECTOR,
    SIGNATURE_SELECTOR,
    UNTITLED_PAGE,
)
from skill_seekers.extraction.classifiers import (
    classify_category,
    classify_page_type,
    normalize_language,
)
from skill_seekers.extraction.code_blocks import enrich_code
from skill_seekers.extraction.models import (
    ApiReference,
    CodeBlock,
    DocumentationUnit,
    UnitType,
    make_snippet,
    unit_id,
)
from skill_seekers.models.job import ContentSelectors

logger = structlog.get_logger(__name__)

PREFIXED_LANGUAGE_CLASS = re.compile(r"(?:language-|lang-|highlight-)(\w+)")
LANGUAGE_CLASS = re.compile(r"(?:language-|lang-|highlight-)?(\w+)")
FILENAME_PATTERN = re.compile(r"([a-zA-Z0-9_-]+\.[a-zA-Z0-9]+)")
RETURNS_PATTERN = re.compile(r"returns?:?\s*([^\n.]+)", re.IGNORECASE)
WHITESPACE_PATTERN = re.compile(r"\s+")
BLANK_LINES_PATTERN = re.compile(r"\n\s*\n")


def clean_content(content: str) -> str:
    """Collapse whitespace runs and repeated blank lines."""
    collapsed = WHITESPACE_PATTERN.sub(" ", content)
    return BLANK_LINES_PATTERN.sub("\n\n", collapsed).strip()


def _text(element: html.HtmlElement) -> str:
    return element.text_content().strip()


def _first_text(root: html.HtmlElement, selector: str) -> str:
    matches = root.cssselect(selector)
    return _text(matches[0]) if matches else ""


def _is_heading(element: html.HtmlElement) -> bool:
    return isinstance(element.tag, str) and element.tag.lower() in HEADING_TAGS


class WebPageExtractor:
    """Turns a parsed HTML page into a DocumentationUnit.

    Pages with no title or fewer than MIN_CONTENT_LENGTH characters of body
    text are rejected (extract returns None); that is a quality gate, not an
    error.
    """

    def __init__(
        self,
        selectors: ContentSelectors | None = None,
        categories: Mapping[str, Sequence[str]] | None = None,
    ) -> None:
        """Initialize extractor.

        Args:
            selectors: Optional CSS selector overrides
            categories: Ordered mapping of category name to URL patterns
        """
        self.selectors = selectors or ContentSelectors()
        self.categories = categories or {}

    def extract(
        self,
        url: str,
        document: html.HtmlElement,
        source: str,
        position: int,
    ) -> DocumentationUnit | None:
        """Extract a unit from a page.

        Args:
            url: Page URL
            document: Parsed page
            source: Skill name the unit belongs to
            position: 0-based position of the unit within the build

        Returns:
            The unit, or None if the page failed the quality gate
        """
        title = self.extract_title(document)
        content = self.extract_content(document)

        if not title or len(content) < MIN_CONTENT_LENGTH:
            logger.debug(
                "page_skipped_insufficient_content",
                url=url,
                title=title,
                content_length=len(content),
            )
            return None

        code_examples, code_blocks = self.extract_code_blocks(document)
        page_type = classify_page_type(url, content)

        return DocumentationUnit(
            id=unit_id(position),
            source=source,
            title=title,
            content=content,
            snippet=make_snippet(content),
            searchable_text=f"{title} {content}".lower(),
            type=page_type,
            url=url,
            category=classify_category(url, self.categories),
            code_examples=tuple(code_examples),
            code_blocks=tuple(code_blocks),
            api_reference=(
                self.extract_api_reference(document, content)
                if page_type is UnitType.API
                else None
            ),
        )

    def extract_title(self, document: html.HtmlElement) -> str:
        """Resolve the page title: custom selector, then h1, title, h2."""
        if self.selectors.title:
            custom = _first_text(document, self.selectors.title)
            if custom:
                return custom

        for selector in ("h1", "title", "h2"):
            title = _first_text(document, selector)
            if title:
                return title

        return UNTITLED_PAGE

    def extract_content(self, document: html.HtmlElement) -> str:
        """Extract normalized body text from a copy of the page.

        Boilerplate elements are removed, then the first content selector
        yielding more than MIN_CONTENT_LENGTH characters wins.
        """
        clone = copy.deepcopy(document)

        excludes = list(DEFAULT_EXCLUDE_SELECTORS)
        if self.selectors.navigation:
            excludes.append(self.selectors.navigation)
        excludes.extend(self.selectors.exclude)

        for selector in excludes:
            for element in clone.cssselect(selector):
                if element.getparent() is not None:
                    element.drop_tree()

        candidates = list(CONTENT_SELECTORS)
        if self.selectors.main_content:
            candidates.insert(0, self.selectors.main_content)

        for selector in candidates:
            text = "\n".join(element.text_content() for element in clone.cssselect(selector))
            if len(text.strip()) > MIN_CONTENT_LENGTH:
                return clean_content(text)

        return clean_content(clone.text_content())

    def extract_code_blocks(
        self, document: html.HtmlElement
    ) -> tuple[list[str], list[CodeBlock]]:
        """Extract code elements with language, filename and title detection."""
        code_examples: list[str] = []
        code_blocks: list[CodeBlock] = []

        matches = document.cssselect(self.selectors.code_blocks or DEFAULT_CODE_SELECTOR)
        matched = set(matches)

        for element in matches:
            # Keep the innermost match so <pre><code> yields one block
            if any(descendant in matched for descendant in element.iterdescendants()):
                continue

            code = _text(element)
            if len(code) < MIN_CODE_LENGTH:
                continue

            code_examples.append(code)
            language = self._detect_language(element)
            code_blocks.append(
                enrich_code(
                    code,
                    language=language,
                    title=self._find_code_title(element),
                    filename=self._detect_filename(element),
                )
            )

        return code_examples, code_blocks

    def extract_api_reference(self, document: html.HtmlElement, content: str) -> ApiReference:
        """Pull signature, parameters, return description and example."""
        signature = _first_text(document, SIGNATURE_SELECTOR) or None

        parameters = []
        for element in document.cssselect(PARAMETER_SELECTOR):
            parameter = _text(element)
            if parameter and len(parameter) < MAX_PARAMETER_LENGTH:
                parameters.append(parameter)

        returns_match = RETURNS_PATTERN.search(content)
        example = _first_text(document, "pre code")

        return ApiReference(
            signature=signature,
            parameters=tuple(parameters),
            returns=returns_match.group(1).strip() if returns_match else None,
            example=example if len(example) > MIN_CODE_LENGTH else None,
        )

    @staticmethod
    def _detect_language(element: html.HtmlElement) -> str | None:
        parent = element.getparent()
        class_attr = element.get("class") or (parent.get("class") if parent is not None else None)

        if class_attr:
            # A prefixed class anywhere in the list beats the leading bare word, so "hljs language-go" is go
            match = PREFIXED_LANGUAGE_CLASS.search(class_attr) or LANGUAGE_CLASS.search(class_attr)
            if match:
                return normalize_language(match.group(1))

        data_language = element.get("data-language") or element.get("data-lang")
        return normalize_language(data_language)

    @staticmethod
    def _detect_filename(element: html.HtmlElement) -> str | None:
        parent = element.getparent()
        if parent is None:
            return None
        previous = parent.getprevious()
        if previous is None or not isinstance(previous.tag, str):
            return None
        match = FILENAME_PATTERN.search(_text(previous))
        return match.group(1) if match else None

    @staticmethod
    def _find_code_title(element: html.HtmlElement) -> str | None:
        parent = element.getparent()
        ancestors = [parent, parent.getparent() if parent is not None else None]
        for ancestor in ancestors:
            if ancestor is None:
                continue
            for sibling in ancestor.itersiblings(preceding=True):
                if _is_heading(sibling):
                    return _text(sibling)
        return None
