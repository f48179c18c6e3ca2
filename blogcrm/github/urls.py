"""Helpers for building and recognising GitHub URLs."""

from __future__ import annotations

from urllib.parse import quote, urlparse

GITHUB_API_BASE = "https://api.github.com"
GITHUB_RAW_BASE = "https://raw.githubusercontent.com"


def raw_url(
    owner: str, repo: str, branch: str, path: str, *, base: str = GITHUB_RAW_BASE
) -> str:
    """Return the raw-content URL for a file on a branch."""
    return f"{base.rstrip('/')}/{owner}/{repo}/{branch}/{quote(path.lstrip('/'))}"


def parse_github_url(url: str) -> tuple[str, str] | None:
    """Split ``https://github.com/owner/repo[...]`` into ``(owner, repo)``.

    Returns None when the URL has no owner/repo path segments.
    """
    parsed = urlparse(url)
    if not parsed.scheme or not parsed.netloc:
        return None
    parts = [p for p in parsed.path.split("/") if p]
    if len(parts) < 2:
        return None
    owner, repo = parts[0], parts[1]
    if repo.endswith(".git"):
        repo = repo[: -len(".git")]
    return owner, repo


def is_github_url(url: str) -> bool:
    return urlparse(url).hostname == "github.com"
