"""Summary statistics over a document collection."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable

from blogcrm.pipeline.models import PipelineStats, StructuredDocument


def compute_stats(documents: Iterable[StructuredDocument]) -> PipelineStats:
    """Fold documents into counts. Category/tag maps are sorted by key."""
    total = drafts = 0
    categories: Counter[str] = Counter()
    tags: Counter[str] = Counter()

    for doc in documents:
        total += 1
        if doc.metadata.draft:
            drafts += 1
        categories[doc.metadata.category] += 1
        tags.update(doc.metadata.tags)

    return PipelineStats(
        total=total,
        published=total - drafts,
        drafts=drafts,
        category_count=len(categories),
        tag_count=len(tags),
        by_category=dict(sorted(categories.items())),
        by_tag=dict(sorted(tags.items())),
    )
