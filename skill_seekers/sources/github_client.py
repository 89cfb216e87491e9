"""Minimal GitHub REST client for repository documentation sources."""

import httpx
import structlog

from skill_seekers.common.constants import GITHUB_API_URL

logger = structlog.get_logger(__name__)

API_VERSION = "2022-11-28"
RAW_MEDIA_TYPE = "application/vnd.github.raw+json"
JSON_MEDIA_TYPE = "application/vnd.github+json"
MAX_PER_PAGE = 100
REQUEST_TIMEOUT_SECONDS = 30.0


class GitHubClient:
    """Async wrapper over the GitHub REST endpoints used for scraping.

    Every method raises ``httpx.HTTPError`` on transport or status failures;
    callers decide whether a failure is fatal.
    """

    def __init__(
        self,
        token: str | None = None,
        base_url: str = GITHUB_API_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize client.

        Args:
            token: Optional personal access token
            base_url: API root
            transport: Custom transport (tests use httpx.MockTransport)
        """
        headers = {"Accept": JSON_MEDIA_TYPE, "X-GitHub-Api-Version": API_VERSION}
        if token:
            headers["Authorization"] = f"Bearer {token}"

        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers=headers,
            timeout=httpx.Timeout(REQUEST_TIMEOUT_SECONDS),
            transport=transport,
            follow_redirects=True,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying connection pool."""
        await self._client.aclose()

    async def _get(self, path: str, raw: bool = False, **params) -> httpx.Response:
        headers = {"Accept": RAW_MEDIA_TYPE} if raw else None
        response = await self._client.get(path, params=params or None, headers=headers)
        response.raise_for_status()
        return response

    async def get_repository(self, owner: str, repo: str) -> dict:
        """Fetch repository metadata."""
        return (await self._get(f"/repos/{owner}/{repo}")).json()

    async def list_languages(self, owner: str, repo: str) -> dict[str, int]:
        """Fetch bytes of code per language."""
        return (await self._get(f"/repos/{owner}/{repo}/languages")).json()

    async def get_readme(self, owner: str, repo: str) -> str:
        """Fetch the raw README text."""
        return (await self._get(f"/repos/{owner}/{repo}/readme", raw=True)).text

    async def get_tree(self, owner: str, repo: str, ref: str = "HEAD") -> list[dict]:
        """Fetch the recursive git tree as a flat list of entries."""
        response = await self._get(f"/repos/{owner}/{repo}/git/trees/{ref}", recursive="true")
        return response.json().get("tree", [])

    async def list_issues(self, owner: str, repo: str, limit: int) -> list[dict]:
        """Fetch issues of any state, most recently updated first.

        The endpoint also returns pull requests; filtering is left to the
        caller.
        """
        response = await self._get(
            f"/repos/{owner}/{repo}/issues",
            state="all",
            sort="updated",
            direction="desc",
            per_page=min(limit, MAX_PER_PAGE),
        )
        return response.json()

    async def list_releases(self, owner: str, repo: str, limit: int) -> list[dict]:
        """Fetch the newest releases."""
        response = await self._get(f"/repos/{owner}/{repo}/releases", per_page=min(limit, MAX_PER_PAGE))
        return response.json()

    async def get_file(self, owner: str, repo: str, path: str) -> str:
        """Fetch a file's raw contents from the default branch."""
        return (await self._get(f"/repos/{owner}/{repo}/contents/{path}", raw=True)).text
