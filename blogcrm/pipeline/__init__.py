"""Pipeline orchestration, stats and query helpers."""

from blogcrm.pipeline.models import (
    DocumentMetadata,
    PipelineResult,
    PipelineStats,
    SkippedFile,
    StructuredDocument,
)
from blogcrm.pipeline.orchestrator import BlogPipeline, load_posts, merge_document
from blogcrm.pipeline.query import PostQuery, SortOrder, filter_documents, sort_documents
from blogcrm.pipeline.stats import compute_stats

__all__ = [
    "BlogPipeline",
    "DocumentMetadata",
    "PipelineResult",
    "PipelineStats",
    "PostQuery",
    "SkippedFile",
    "SortOrder",
    "StructuredDocument",
    "compute_stats",
    "filter_documents",
    "load_posts",
    "merge_document",
    "sort_documents",
]
