"""Async GitHub client: API requests with retry + caching, and raw file fetches."""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError

from blogcrm.config.models import GitHubSettings
from blogcrm.errors import ApiError, FetchError
from blogcrm.github.cache import CacheBackend, ResponseCache
from blogcrm.github.models import (
    CommitInfo,
    FileMetadata,
    RateLimit,
    RepositoryFileRef,
    RepositoryStats,
)
from blogcrm.github.retry import retry_async
from blogcrm.github.urls import raw_url

logger = logging.getLogger(__name__)

_ACCEPT = "application/vnd.github+json"


def _is_retryable(exc: Exception) -> bool:
    return isinstance(exc, ApiError) and exc.retryable


def _api_error(resp: httpx.Response, url: str) -> ApiError:
    """Build an ApiError from a failed response, keeping GitHub's message."""
    message = resp.reason_phrase or "GitHub API request failed"
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        message = str(body["message"])

    status = resp.status_code
    rate_limited = status == 403 and resp.headers.get("X-RateLimit-Remaining") == "0"
    retryable = status >= 500 or status == 429 or rate_limited
    return ApiError(message, status=status, url=url, retryable=retryable)


class GitHubClient:
    """Client for one repository on GitHub.

    API calls go through :meth:`request`, which caches decoded JSON and
    retries transient failures with linear backoff. Raw file downloads hit the
    raw-content host directly: they are neither authenticated, retried nor
    cached.

    Concurrent cache misses for the same request share a single HTTP call.
    """

    def __init__(
        self,
        settings: GitHubSettings,
        *,
        token: str | None = None,
        cache: CacheBackend | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self.settings = settings
        self._token = token
        self._cache: CacheBackend = (
            cache if cache is not None else ResponseCache(settings.cache_timeout_ms)
        )
        self._http = http_client
        self._owns_http = http_client is None
        self._inflight: dict[str, asyncio.Future[Any]] = {}

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    def _client(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                timeout=httpx.Timeout(self.settings.request_timeout),
                follow_redirects=True,
            )
            self._owns_http = True
        return self._http

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    @property
    def cache(self) -> CacheBackend:
        return self._cache

    def clear_cache(self) -> None:
        """Drop every cached response."""
        self._cache.clear()
        logger.debug("response cache cleared")

    @staticmethod
    def cache_key(
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> str:
        options = json.dumps({"params": params or {}, "headers": headers or {}}, sort_keys=True)
        return f"{url}-{options}"

    # ------------------------------------------------------------------
    # Request primitive
    # ------------------------------------------------------------------

    @property
    def headers(self) -> dict[str, str]:
        headers = {"Accept": _ACCEPT, "X-GitHub-Api-Version": "2022-11-28"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _url(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.settings.api_base.rstrip('/')}{endpoint}"

    async def request(
        self,
        endpoint: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """GET an API endpoint and return the decoded JSON body.

        Raises:
            ApiError: the request still failed after all retry attempts.
        """
        url = self._url(endpoint)
        key = self.cache_key(url, params, headers)

        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("cache hit: %s", url)
            return cached

        pending = self._inflight.get(key)
        if pending is None:
            pending = asyncio.ensure_future(self._load(key, url, params, headers))
            self._inflight[key] = pending
            pending.add_done_callback(lambda _f: self._inflight.pop(key, None))
        else:
            logger.debug("joining in-flight request: %s", url)
        return await asyncio.shield(pending)

    async def _load(
        self,
        key: str,
        url: str,
        params: dict[str, Any] | None,
        headers: dict[str, str] | None,
    ) -> Any:
        try:
            data = await retry_async(
                lambda: self._get_json(url, params, headers),
                max_attempts=self.settings.max_retries,
                delay=self.settings.retry_delay,
                should_retry=_is_retryable,
            )
        except ApiError as e:
            logger.debug("GitHub API request failed: %s (%s)", url, e)
            raise
        self._cache.set(key, data)
        return data

    async def _get_json(
        self,
        url: str,
        params: dict[str, Any] | None,
        headers: dict[str, str] | None,
    ) -> Any:
        try:
            resp = await self._client().get(
                url, params=params, headers={**self.headers, **(headers or {})}
            )
        except httpx.HTTPError as e:
            raise ApiError(f"GitHub API request failed: {e}", url=url, retryable=True) from e

        self._check_rate_limit(resp)
        if resp.is_error:
            raise _api_error(resp, url)
        try:
            return resp.json()
        except ValueError as e:
            raise ApiError(
                "GitHub API returned invalid JSON", status=resp.status_code, url=url
            ) from e

    def _check_rate_limit(self, resp: httpx.Response) -> None:
        remaining = resp.headers.get("X-RateLimit-Remaining")
        if remaining is None or not remaining.isdigit():
            return
        if int(remaining) < self.settings.rate_limit_buffer:
            logger.warning(
                "GitHub rate limit low: %s requests remaining (buffer %d)",
                remaining, self.settings.rate_limit_buffer,
            )

    # ------------------------------------------------------------------
    # Repository content
    # ------------------------------------------------------------------

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.settings.owner}/{self.settings.repo}"

    async def get_repository_tree(self, recursive: bool = True) -> dict[str, Any]:
        params = {"recursive": "1"} if recursive else None
        data = await self.request(
            f"{self._repo_path}/git/trees/{quote(self.settings.branch)}", params=params
        )
        if not isinstance(data, dict) or not isinstance(data.get("tree"), list):
            raise ApiError("Unexpected repository tree response")
        return data

    async def list_markdown_files(self) -> list[RepositoryFileRef]:
        """List every ``.md`` blob on the configured branch."""
        tree = await self.get_repository_tree()
        if tree.get("truncated"):
            logger.warning("Repository tree for %s was truncated by GitHub", self.settings.repo_id)

        refs: list[RepositoryFileRef] = []
        for item in tree["tree"]:
            try:
                path = item.get("path", "")
                if item.get("type", "blob") != "blob" or not path.endswith(".md"):
                    continue
                refs.append(
                    RepositoryFileRef(
                        path=path,
                        raw_url=self.raw_url(path),
                        content_id=item["sha"],
                    )
                )
            except (KeyError, TypeError, AttributeError, PydanticValidationError) as e:
                raise ApiError(f"Malformed repository tree entry: {item!r}") from e
        logger.debug("found %d markdown files in %s", len(refs), self.settings.repo_id)
        return refs

    def raw_url(self, path: str) -> str:
        s = self.settings
        return raw_url(s.owner, s.repo, s.branch, path, base=s.raw_base)

    async def fetch_raw_content(self, path: str) -> str:
        """Download a file from the raw-content host.

        Raises:
            FetchError: non-2xx response or transport failure.
        """
        url = self.raw_url(path)
        try:
            resp = await self._client().get(url)
        except httpx.HTTPError as e:
            raise FetchError(f"Failed to fetch raw content for {path}: {e}", url=url) from e
        if not resp.is_success:
            raise FetchError(
                f"Failed to fetch raw content for {path}: {resp.reason_phrase}",
                status=resp.status_code,
                url=url,
            )
        return resp.text

    async def get_repository_content(self, path: str = "") -> Any:
        return await self.request(
            f"{self._repo_path}/contents/{quote(path)}",
            params={"ref": self.settings.branch},
        )

    async def get_file_history(self, path: str) -> list[dict[str, Any]]:
        data = await self.request(
            f"{self._repo_path}/commits",
            params={"path": path, "sha": self.settings.branch},
        )
        if not isinstance(data, list):
            raise ApiError(f"Unexpected commit history response for {path}")
        return data

    async def fetch_file_metadata(self, path: str) -> FileMetadata:
        """Fetch contents metadata and commit history for ``path`` concurrently.

        Both calls must succeed; there is no partial result.
        """
        content_task = asyncio.ensure_future(self.get_repository_content(path))
        history_task = asyncio.ensure_future(self.get_file_history(path))
        try:
            content, history = await asyncio.gather(content_task, history_task)
        except BaseException:
            content_task.cancel()
            history_task.cancel()
            raise

        if not isinstance(content, dict):
            raise ApiError(f"Path {path!r} is a directory, not a file")

        try:
            commits = [
                CommitInfo(
                    sha=c["sha"],
                    message=c["commit"]["message"],
                    date=c["commit"]["committer"]["date"],
                    author=c["commit"]["author"]["name"],
                )
                for c in history
            ]
            last_committer = history[0]["commit"]["committer"] if history else None
        except (KeyError, TypeError) as e:
            raise ApiError(f"Malformed commit history for {path}: missing {e}") from e

        return FileMetadata(
            path=content.get("path", path),
            name=content.get("name", ""),
            sha=content.get("sha"),
            size=content.get("size", 0),
            download_url=content.get("download_url"),
            last_modified=last_committer["date"] if last_committer else None,
            last_modified_by=last_committer["name"] if last_committer else None,
            history=commits,
        )

    async def path_exists(self, path: str) -> bool:
        try:
            await self.get_repository_content(path)
        except ApiError as e:
            if e.status == 404:
                return False
            raise
        return True

    # ------------------------------------------------------------------
    # Repository info
    # ------------------------------------------------------------------

    async def get_repository_info(self) -> dict[str, Any]:
        return await self.request(self._repo_path)

    async def get_repository_stats(self) -> RepositoryStats:
        repo, tree = await asyncio.gather(
            self.get_repository_info(), self.get_repository_tree()
        )
        items = tree["tree"]
        return RepositoryStats(
            total_files=len(items),
            markdown_files=sum(1 for i in items if i.get("path", "").endswith(".md")),
            last_updated=repo.get("updated_at"),
            size=repo.get("size", 0),
            default_branch=repo.get("default_branch", "main"),
            is_private=repo.get("private", False),
            has_wiki=repo.get("has_wiki", False),
            has_pages=repo.get("has_pages", False),
            forks_count=repo.get("forks_count", 0),
            stargazers_count=repo.get("stargazers_count", 0),
            watchers_count=repo.get("watchers_count", 0),
        )

    async def get_branches(self) -> list[str]:
        data = await self.request(f"{self._repo_path}/branches")
        return [b["name"] for b in data]

    async def search_content(self, query: str) -> list[str]:
        """Code search restricted to this repository; returns matching paths."""
        data = await self.request(
            "/search/code", params={"q": f"{query} repo:{self.settings.repo_id}"}
        )
        return [item["path"] for item in data.get("items", [])]

    async def get_rate_limit(self) -> RateLimit:
        data = await self.request("/rate_limit")
        core = data.get("resources", {}).get("core") or data.get("rate", {})
        reset = core.get("reset")
        return RateLimit(
            limit=core.get("limit", 0),
            remaining=core.get("remaining", 0),
            used=core.get("used", 0),
            reset=datetime.fromtimestamp(reset, tz=timezone.utc) if reset else None,
        )
