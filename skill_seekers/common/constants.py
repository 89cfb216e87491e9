"""Constants for content extraction, classification and packaging."""

# Language tag aliases -> canonical language name
LANGUAGE_ALIASES = {
    "py": "python",
    "js": "javascript",
    "ts": "typescript",
    "sh": "bash",
    "shell": "bash",
    "zsh": "bash",
    "yml": "yaml",
    "dockerfile": "docker",
}

# Canonical language -> file extension (docker maps to a bare filename)
LANGUAGE_EXTENSIONS = {
    "python": ".py",
    "javascript": ".js",
    "typescript": ".ts",
    "bash": ".sh",
    "ruby": ".rb",
    "go": ".go",
    "rust": ".rs",
    "java": ".java",
    "yaml": ".yaml",
    "json": ".json",
    "docker": "Dockerfile",
}

# Extensions used for scripts/ entries; unknown languages fall back to .py
SCRIPT_EXTENSIONS = {
    "python": ".py",
    "javascript": ".js",
    "typescript": ".ts",
    "bash": ".sh",
    "shell": ".sh",
    "ruby": ".rb",
    "go": ".go",
    "rust": ".rs",
    "java": ".java",
}

# Page type markers (checked lower-cased, API markers take precedence)
API_URL_MARKERS = ("/api/", "/reference/", "/ref/")
API_CONTENT_MARKERS = ("parameters:", "returns:")
EXAMPLE_URL_MARKERS = ("/example", "/tutorial", "/sample")
EXAMPLE_CONTENT_MARKERS = ("example:", "// example")

# HTML extraction
DEFAULT_EXCLUDE_SELECTORS = (
    "nav",
    "header",
    "footer",
    ".sidebar",
    ".navigation",
    "script",
    "style",
)
CONTENT_SELECTORS = ("article", "main", ".content", ".documentation", "body")
DEFAULT_CODE_SELECTOR = "pre code, pre, .highlight code"
SIGNATURE_SELECTOR = "code.signature, .method-signature, .function-signature"
PARAMETER_SELECTOR = ".param, .parameter, dt"
HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
UNTITLED_PAGE = "Untitled"

# Quality gates and truncation
MIN_CONTENT_LENGTH = 50
MIN_CODE_LENGTH = 10
MAX_PARAMETER_LENGTH = 100
SNIPPET_LENGTH = 200
SNIPPET_SUFFIX = "..."

# Crawling
DEFAULT_MAX_PAGES = 100
DEFAULT_CRAWL_CONCURRENCY = 5
ESTIMATE_MAX_PAGES = 100
ESTIMATE_CONCURRENCY = 10
ESTIMATE_SAMPLE_SIZE = 10
DEFAULT_EXCLUDE_GLOBS = (
    "**/*.pdf",
    "**/*.zip",
    "**/*.png",
    "**/*.jpg",
    "**/*.gif",
    "**/*.svg",
    "**/login**",
    "**/signup**",
    "**/auth**",
)

# GitHub
GITHUB_API_URL = "https://api.github.com"
GITHUB_WEB_URL = "https://github.com"
CHANGELOG_FILENAMES = ("CHANGELOG.md", "CHANGELOG", "HISTORY.md", "CHANGES.md")
DEFAULT_MAX_ISSUES = 100
MAX_CLOSED_ISSUES = 20
MAX_RELEASES = 20
ISSUE_BODY_PREVIEW = 500
FILE_TREE_MAX_DEPTH = 3
FILE_TREE_MAX_SIBLINGS = 100

# PDF
PDF_TITLE_SCAN_LINES = 10
UNTITLED_DOCUMENT = "Untitled Document"
INTRODUCTION_SECTION = "Introduction"
WHOLE_DOCUMENT_SECTION = "Document Content"
PDF_METADATA_KEYS = ("Title", "Author", "Subject", "Creator")

# Packaging
DEFAULT_CATEGORY = "general"
MAX_KEY_TOPICS = 5
KEY_TOPIC_SNIPPET_LENGTH = 100
MAX_REFERENCE_EXAMPLES = 3
API_EXCERPT_LENGTH = 500
MAX_GENERATED_NAME_LENGTH = 20
GETTING_STARTED_MARKERS = ("getting started", "quick start", "introduction")

SOURCE_DESCRIPTIONS = {
    "scrape_docs": "documentation website scraping",
    "scrape_github": "GitHub repository analysis",
    "scrape_pdf": "PDF document extraction",
}

# Job retention
JOB_RETENTION_HOURS = 24
CLEANUP_INTERVAL_SECONDS = 60 * 60
