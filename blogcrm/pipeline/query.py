"""Filtering and sorting of documents for display."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime, timezone
from enum import Enum
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from blogcrm.pipeline.models import StructuredDocument


class SortOrder(str, Enum):
    DATE_DESC = "date-desc"
    DATE_ASC = "date-asc"
    TITLE_ASC = "title-asc"
    TITLE_DESC = "title-desc"
    VIEWS_DESC = "views-desc"
    VIEWS_ASC = "views-asc"


class PostQuery(BaseModel):
    """Filter criteria. Empty fields match everything."""

    search_term: str = ""
    categories: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    date_from: datetime | None = None
    date_to: datetime | None = None
    status: Literal["all", "published", "draft"] = "all"

    @field_validator("date_from", "date_to")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


def _matches_search(doc: StructuredDocument, term: str) -> bool:
    meta = doc.metadata
    return (
        term in meta.title.lower()
        or term in meta.category.lower()
        or any(term in tag for tag in meta.tags)
        or term in doc.excerpt.lower()
    )


def filter_documents(
    documents: Iterable[StructuredDocument], query: PostQuery
) -> list[StructuredDocument]:
    """Documents matching every criterion of ``query``.

    Tag filters match when a document carries any of the requested tags.
    """
    term = query.search_term.strip().lower()
    wanted_tags = {t.strip().lower() for t in query.tags if t.strip()}
    result: list[StructuredDocument] = []

    for doc in documents:
        meta = doc.metadata
        if term and not _matches_search(doc, term):
            continue
        if query.categories and meta.category not in query.categories:
            continue
        if wanted_tags and not wanted_tags.intersection(meta.tags):
            continue
        if query.date_from is not None and meta.date < query.date_from:
            continue
        if query.date_to is not None and meta.date > query.date_to:
            continue
        if query.status == "draft" and not meta.draft:
            continue
        if query.status == "published" and meta.draft:
            continue
        result.append(doc)
    return result


def sort_documents(
    documents: Iterable[StructuredDocument], order: SortOrder | str = SortOrder.DATE_DESC
) -> list[StructuredDocument]:
    """Stable sort; ties keep the incoming order."""
    order = SortOrder(order)
    docs = list(documents)
    if order in (SortOrder.DATE_DESC, SortOrder.DATE_ASC):
        return sorted(docs, key=lambda d: d.metadata.date, reverse=order is SortOrder.DATE_DESC)
    if order in (SortOrder.TITLE_ASC, SortOrder.TITLE_DESC):
        return sorted(
            docs, key=lambda d: d.metadata.title.casefold(), reverse=order is SortOrder.TITLE_DESC
        )
    return sorted(docs, key=lambda d: d.metadata.views, reverse=order is SortOrder.VIEWS_DESC)
