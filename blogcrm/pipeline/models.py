"""Pydantic models for pipeline output."""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field

from blogcrm.markdown.models import PostMetadata, TaskItem, TocEntry


class DocumentMetadata(PostMetadata):
    """Post metadata enriched with commit information."""

    model_config = ConfigDict(frozen=True)

    last_modified: datetime | None = None
    last_modified_by: str | None = None


class StructuredDocument(BaseModel):
    """A fully processed blog post."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    path: str
    html: str
    toc: list[TocEntry] = Field(default_factory=list)
    excerpt: str = ""
    reading_time_minutes: int = Field(default=1, ge=1)
    tasks: list[TaskItem] = Field(default_factory=list)
    metadata: DocumentMetadata


class SkippedFile(BaseModel):
    """A file left out of a run, and why."""

    model_config = ConfigDict(frozen=True)

    path: str
    error_type: str
    message: str


class PipelineStats(BaseModel):
    """Counts over a document collection."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    published: int = 0
    drafts: int = 0
    category_count: int = 0
    tag_count: int = 0
    by_category: dict[str, int] = Field(default_factory=dict)
    by_tag: dict[str, int] = Field(default_factory=dict)


class PipelineResult(BaseModel):
    """Immutable snapshot handed to consumers after a run."""

    model_config = ConfigDict(frozen=True)

    documents: tuple[StructuredDocument, ...] = ()
    stats: PipelineStats = Field(default_factory=PipelineStats)
    skipped: tuple[SkippedFile, ...] = ()
    fetched_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
