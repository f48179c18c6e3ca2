"""GitHub content fetch client."""

import logging
import os

from blogcrm.config.models import GitHubSettings
from blogcrm.github.cache import CacheBackend, CacheEntry, NullCache, ResponseCache
from blogcrm.github.client import GitHubClient
from blogcrm.github.models import (
    CommitInfo,
    FileMetadata,
    RateLimit,
    RepositoryFileRef,
    RepositoryStats,
)
from blogcrm.github.retry import retry_async
from blogcrm.github.urls import is_github_url, parse_github_url

logger = logging.getLogger(__name__)


def create_client(settings: GitHubSettings, cache: CacheBackend | None = None) -> GitHubClient:
    """Create a GitHub client from config.

    Resolves the token from the environment variable named in settings.token_env.
    A missing token is allowed: public repositories work unauthenticated, at a
    lower rate limit.

    ``settings.repo`` may also be a full ``https://github.com/owner/repo`` URL.
    """
    if is_github_url(settings.repo):
        parsed = parse_github_url(settings.repo)
        if parsed is not None:
            owner, repo = parsed
            settings = settings.model_copy(update={"owner": owner, "repo": repo})
    if not settings.owner or not settings.repo:
        raise ValueError(
            "GitHub repository not configured. Set github.owner and github.repo in blogcrm.yaml."
        )
    token = os.environ.get(settings.token_env, "") or None
    if token is None:
        logger.info(
            "%s not set; using unauthenticated GitHub API access", settings.token_env
        )
    return GitHubClient(settings, token=token, cache=cache)


__all__ = [
    "CacheBackend",
    "CacheEntry",
    "CommitInfo",
    "FileMetadata",
    "GitHubClient",
    "NullCache",
    "RateLimit",
    "RepositoryFileRef",
    "RepositoryStats",
    "ResponseCache",
    "create_client",
    "retry_async",
]
