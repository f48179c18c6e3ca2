"""Pydantic models for GitHub data."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class RepositoryFileRef(BaseModel):
    """A markdown file found in the repository tree."""

    model_config = ConfigDict(frozen=True)

    path: str
    raw_url: str
    content_id: str = Field(description="Git blob SHA of the file content")


class CommitInfo(BaseModel):
    """One entry of a file's commit history."""

    sha: str
    message: str
    date: datetime | None = None
    author: str | None = None


class FileMetadata(BaseModel):
    """Contents metadata plus commit history for a single file."""

    path: str
    name: str = ""
    sha: str | None = None
    size: int = 0
    download_url: str | None = None
    last_modified: datetime | None = None
    last_modified_by: str | None = None
    history: list[CommitInfo] = Field(default_factory=list)


class RepositoryStats(BaseModel):
    """Summary of a repository and its markdown content."""

    total_files: int
    markdown_files: int
    last_updated: datetime | None = None
    size: int = 0
    default_branch: str = "main"
    is_private: bool = False
    has_wiki: bool = False
    has_pages: bool = False
    forks_count: int = 0
    stargazers_count: int = 0
    watchers_count: int = 0


class RateLimit(BaseModel):
    """Core API rate-limit window."""

    limit: int
    remaining: int
    used: int = 0
    reset: datetime | None = None
