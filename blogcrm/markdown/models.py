"""Pydantic models for the markdown subsystem."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class RawDocument(BaseModel):
    """A markdown file split into frontmatter and body."""

    path: str | None = None
    frontmatter: dict[str, Any] = Field(default_factory=dict)
    body: str = ""


class TocEntry(BaseModel):
    """One heading in a table of contents, with nested sub-headings."""

    text: str
    level: int = Field(ge=1, le=6)
    slug: str
    children: list[TocEntry] = Field(default_factory=list)


class TaskItem(BaseModel):
    """A GFM task-list item (``- [ ]`` / ``- [x]``)."""

    completed: bool
    text: str
    position: int  # character offset in the body


class PostMetadata(BaseModel):
    """Normalized frontmatter of a post."""

    title: str
    date: datetime
    category: str = "Uncategorized"
    tags: tuple[str, ...] = ()
    author: str | None = None
    draft: bool = False
    views: int = Field(default=0, ge=0)
    extra: dict[str, Any] = Field(default_factory=dict)


class ProcessedDocument(BaseModel):
    """Everything derived from one markdown file without network access."""

    html: str
    metadata: PostMetadata
    toc: list[TocEntry] = Field(default_factory=list)
    excerpt: str = ""
    reading_time_minutes: int = Field(default=1, ge=1)
    tasks: list[TaskItem] = Field(default_factory=list)
