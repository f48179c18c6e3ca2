"""Shared test fixtures for blogcrm."""

import logging
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from blogcrm.config.models import BlogCRMConfig, GitHubSettings, MarkdownSettings
from blogcrm.github.client import GitHubClient
from blogcrm.github.models import CommitInfo, FileMetadata, RepositoryFileRef
from blogcrm.markdown.processor import MarkdownProcessor


@pytest.fixture(autouse=True)
def _reset_blogcrm_logger():
    """Undo CLI logging setup so caplog keeps seeing blogcrm records."""
    yield
    logger = logging.getLogger("blogcrm")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


FIXED_NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)

HELLO_POST = """\
---
title: Hello World
date: 2024-01-15
category: Engineering
tags: Python, Async, python
author: Ada
---
# Hello World

Intro paragraph with a [link](https://example.com) and an ![diagram](chart.png).

## Setup

```python
def main():
    return 1
```

## Usage

- [x] install
- [ ] configure
"""

DRAFT_POST = """\
---
title: Work in progress
date: 2024-03-01T09:30:00Z
category: Notes
tags: [ideas]
draft: true
---
Some unfinished thoughts.
"""


@pytest.fixture
def github_settings():
    return GitHubSettings(
        owner="acme",
        repo="blog",
        branch="main",
        retry_delay=0.0,
        cache_timeout_ms=300_000,
    )


@pytest.fixture
def sample_config(github_settings):
    return BlogCRMConfig(github=github_settings)


@pytest.fixture
def processor():
    return MarkdownProcessor(MarkdownSettings())


@pytest.fixture
def sample_refs():
    return [
        RepositoryFileRef(
            path="posts/hello.md",
            raw_url="https://raw.githubusercontent.com/acme/blog/main/posts/hello.md",
            content_id="sha-hello",
        ),
        RepositoryFileRef(
            path="posts/broken.md",
            raw_url="https://raw.githubusercontent.com/acme/blog/main/posts/broken.md",
            content_id="sha-broken",
        ),
        RepositoryFileRef(
            path="posts/draft.md",
            raw_url="https://raw.githubusercontent.com/acme/blog/main/posts/draft.md",
            content_id="sha-draft",
        ),
    ]


def make_file_metadata(path: str, committer: str = "Grace") -> FileMetadata:
    return FileMetadata(
        path=path,
        name=path.rsplit("/", 1)[-1],
        sha="blob-sha",
        size=120,
        last_modified=datetime(2024, 5, 20, tzinfo=timezone.utc),
        last_modified_by=committer,
        history=[
            CommitInfo(
                sha="c1",
                message="update post",
                date=datetime(2024, 5, 20, tzinfo=timezone.utc),
                author=committer,
            )
        ],
    )


@pytest.fixture
def mock_client(sample_refs):
    """GitHubClient double: hello and draft succeed, broken has bad frontmatter."""
    contents = {
        "posts/hello.md": HELLO_POST,
        "posts/broken.md": "---\ntitle: [unclosed\n---\nbody\n",
        "posts/draft.md": DRAFT_POST,
    }
    client = MagicMock(spec=GitHubClient)
    client.list_markdown_files = AsyncMock(return_value=sample_refs)
    client.fetch_raw_content = AsyncMock(side_effect=lambda path: contents[path])
    client.fetch_file_metadata = AsyncMock(side_effect=lambda path: make_file_metadata(path))
    return client


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def hello_post():
    return HELLO_POST


@pytest.fixture
def draft_post():
    return DRAFT_POST


@pytest.fixture
def file_metadata():
    """Factory for FileMetadata with a single commit."""
    return make_file_metadata
