"""Normalization of post frontmatter into :class:`PostMetadata`."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import date, datetime, time, timezone
from pathlib import PurePosixPath
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from blogcrm.errors import ValidationError
from blogcrm.markdown.models import PostMetadata

DEFAULT_CATEGORY = "Uncategorized"

_KNOWN_KEYS = frozenset({"title", "date", "category", "tags", "author", "draft", "views"})


def normalize_tags(raw: Any) -> tuple[str, ...]:
    """Trim, lower-case and de-duplicate tags, keeping first-seen order.

    Accepts a comma-separated string or a sequence of strings.
    """
    if raw is None:
        return ()
    if isinstance(raw, str):
        items = raw.split(",")
    elif isinstance(raw, (list, tuple, set, frozenset)):
        items = []
        # sets have no order of their own
        ordered = sorted(raw, key=str) if isinstance(raw, (set, frozenset)) else raw
        for tag in ordered:
            if not isinstance(tag, str):
                raise ValidationError(
                    f"tags must contain only strings, got {type(tag).__name__}",
                    field="tags",
                )
            items.append(tag)
    else:
        raise ValidationError(
            "tags must be a comma-separated string or a list of strings, "
            f"got {type(raw).__name__}",
            field="tags",
        )

    cleaned = (t.strip().lower() for t in items)
    return tuple(dict.fromkeys(t for t in cleaned if t))


def parse_date(raw: Any, now: datetime | None = None) -> datetime:
    """Parse a frontmatter date into a timezone-aware datetime.

    Naive values are taken as UTC. A missing date falls back to ``now``.
    """
    if raw is None or raw == "":
        return now or datetime.now(timezone.utc)
    if isinstance(raw, datetime):
        return raw if raw.tzinfo else raw.replace(tzinfo=timezone.utc)
    if isinstance(raw, date):
        return datetime.combine(raw, time(), tzinfo=timezone.utc)
    if isinstance(raw, bool):
        raise ValidationError("date must be a date or ISO-8601 string", field="date")
    if isinstance(raw, (int, float)):
        try:
            return datetime.fromtimestamp(raw, tz=timezone.utc)
        except (ValueError, OverflowError, OSError) as exc:
            raise ValidationError(f"Unparseable date: {raw!r}", field="date") from exc
    if isinstance(raw, str):
        value = raw.strip()
        if value.endswith("Z"):
            value = value[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(value)
        except ValueError as exc:
            raise ValidationError(f"Unparseable date: {raw!r}", field="date") from exc
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    raise ValidationError(
        f"date must be a date or ISO-8601 string, got {type(raw).__name__}", field="date"
    )


def _default_title(path: str | None) -> str:
    if not path:
        return "Untitled"
    return PurePosixPath(path).stem or "Untitled"


def normalize_metadata(
    frontmatter: Mapping[str, Any],
    *,
    path: str | None = None,
    now: datetime | None = None,
) -> PostMetadata:
    """Build :class:`PostMetadata` from a raw frontmatter mapping.

    Unknown keys are preserved under ``extra``.

    Raises:
        ValidationError: a field has an unsupported shape.
    """
    title = frontmatter.get("title")
    author = frontmatter.get("author")
    category = frontmatter.get("category")

    try:
        return PostMetadata(
            title=str(title) if title not in (None, "") else _default_title(path),
            date=parse_date(frontmatter.get("date"), now),
            category=str(category) if category else DEFAULT_CATEGORY,
            tags=normalize_tags(frontmatter.get("tags")),
            author=str(author) if author else None,
            draft=frontmatter.get("draft") or False,
            views=frontmatter.get("views") or 0,
            extra={k: v for k, v in frontmatter.items() if k not in _KNOWN_KEYS},
        )
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid metadata: {exc}") from exc
