"""Markdown transformer: frontmatter, HTML, TOC, excerpt and reading time."""

from blogcrm.markdown.frontmatter import split_frontmatter
from blogcrm.markdown.metadata import normalize_metadata, normalize_tags, parse_date
from blogcrm.markdown.models import (
    PostMetadata,
    ProcessedDocument,
    RawDocument,
    TaskItem,
    TocEntry,
)
from blogcrm.markdown.processor import MarkdownProcessor
from blogcrm.markdown.renderer import PostRenderer, create_parser
from blogcrm.markdown.text import calculate_reading_time, extract_tasks, generate_excerpt
from blogcrm.markdown.toc import build_toc, slugify

__all__ = [
    "MarkdownProcessor",
    "PostMetadata",
    "PostRenderer",
    "ProcessedDocument",
    "RawDocument",
    "TaskItem",
    "TocEntry",
    "build_toc",
    "calculate_reading_time",
    "create_parser",
    "extract_tasks",
    "generate_excerpt",
    "normalize_metadata",
    "normalize_tags",
    "parse_date",
    "slugify",
    "split_frontmatter",
]
