"""PostsIndexWriter: writes pipeline results to disk."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from blogcrm.config.models import OutputSettings
from blogcrm.pipeline.models import PipelineResult, StructuredDocument

logger = logging.getLogger(__name__)


def _sanitize_post_path(path: str) -> str:
    """Make a repository path safe for use as a relative output path.

    Drops the ``.md`` suffix, removes ``..`` segments, and strips characters
    that are problematic on common filesystems.
    """
    name = re.sub(r"\.md$", "", path)
    parts = [p for p in name.split("/") if p and p not in (".", "..")]
    parts = [re.sub(r"[^\w\-\.@]", "_", p) for p in parts]
    return "/".join(parts) or "_unnamed"


def build_index(result: PipelineResult) -> dict[str, Any]:
    """JSON-ready posts index, newest post first."""
    docs = sorted(result.documents, key=lambda d: d.metadata.date, reverse=True)
    posts = [
        {
            "id": d.id,
            "path": d.path,
            "title": d.metadata.title,
            "date": d.metadata.date.isoformat(),
            "last_modified": d.metadata.last_modified.isoformat() if d.metadata.last_modified else None,
            "category": d.metadata.category,
            "tags": list(d.metadata.tags),
            "author": d.metadata.author,
            "draft": d.metadata.draft,
            "excerpt": d.excerpt,
            "reading_time_minutes": d.reading_time_minutes,
        }
        for d in docs
    ]
    return {
        "metadata": {
            "total_posts": len(posts),
            "categories": sorted({d.metadata.category for d in docs}),
            "tags": sorted({t for d in docs for t in d.metadata.tags}),
            "authors": sorted({d.metadata.author for d in docs if d.metadata.author}),
            "last_updated": datetime.now(timezone.utc).isoformat(),
        },
        "posts": posts,
    }


class PostsIndexWriter:
    """Writes the posts index and rendered post HTML under ``base_dir``.

    Supports dry-run mode, in which nothing touches the filesystem.
    """

    def __init__(self, config: OutputSettings) -> None:
        self.config = config
        self.base_dir = Path(config.base_dir)

    def write(self, result: PipelineResult, *, dry_run: bool = False) -> Path:
        """Write the posts index. Returns the (would-be) index path."""
        dest = self.base_dir / self.config.index_file

        if dry_run:
            logger.debug("dry-run: would write %s", dest)
            return dest

        payload = json.dumps(build_index(result), indent=2, ensure_ascii=False)
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(payload, encoding="utf-8")
        logger.info("wrote %s (%d posts)", dest, len(result.documents))
        return dest

    def write_html(self, doc: StructuredDocument, *, dry_run: bool = False) -> Path:
        """Write one post's rendered HTML to ``base_dir/posts/<path>.html``."""
        dest = self.base_dir / "posts" / f"{_sanitize_post_path(doc.path)}.html"
        if not dest.resolve().is_relative_to(self.base_dir.resolve()):
            raise ValueError(f"Output path escapes base directory: {dest}")

        if dry_run:
            logger.debug("dry-run: would write %s", dest)
            return dest

        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_text(doc.html, encoding="utf-8")
        logger.debug("wrote %s (%d bytes)", dest, len(doc.html))
        return dest

    def write_batch(self, result: PipelineResult, *, dry_run: bool = False) -> list[Path]:
        """Write every post's HTML plus the index. Index path comes last."""
        paths = [self.write_html(doc, dry_run=dry_run) for doc in result.documents]
        paths.append(self.write(result, dry_run=dry_run))
        return paths
