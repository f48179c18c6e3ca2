"""Table-of-contents construction from a markdown-it token stream."""

from __future__ import annotations

import re
from collections.abc import Sequence

from markdown_it.token import Token

from blogcrm.markdown.models import TocEntry

_NON_WORD = re.compile(r"[^\w\s-]")
_SPACES = re.compile(r"\s+")
_DASHES = re.compile(r"-+")


def slugify(text: str) -> str:
    """Create a URL-friendly slug: ``"Hello, World!"`` -> ``"hello-world"``."""
    slug = _NON_WORD.sub("", text.lower().strip())
    slug = _SPACES.sub("-", slug)
    slug = _DASHES.sub("-", slug)
    return slug.strip("-")


class SlugRegistry:
    """Hands out unique slugs: repeats get ``-1``, ``-2``, ... suffixes."""

    def __init__(self) -> None:
        self._seen: dict[str, int] = {}

    def unique(self, text: str) -> str:
        base = slugify(text) or "section"
        count = self._seen.get(base)
        if count is None:
            self._seen[base] = 0
            return base
        while True:
            count += 1
            candidate = f"{base}-{count}"
            if candidate not in self._seen:
                self._seen[base] = count
                self._seen[candidate] = 0
                return candidate


def inline_text(token: Token) -> str:
    """Plain text of an inline token, without markup."""
    if not token.children:
        return token.content
    parts: list[str] = []
    for child in token.children:
        if child.type in ("text", "code_inline"):
            parts.append(child.content)
        elif child.type in ("softbreak", "hardbreak"):
            parts.append(" ")
        elif child.type == "image":
            parts.append(inline_text(child))
    return "".join(parts).strip()


def build_toc(tokens: Sequence[Token]) -> list[TocEntry]:
    """Collect headings in document order and nest them.

    A heading becomes a child of the nearest preceding heading with a
    strictly lower level, or a top-level entry when there is none. Skipped
    levels (h1 followed by h3) nest directly under that ancestor.

    Each ``heading_open`` token gets an ``id`` attribute equal to its slug, so
    the rendered HTML anchors match the TOC.
    """
    registry = SlugRegistry()
    roots: list[TocEntry] = []
    stack: list[TocEntry] = []

    for i, token in enumerate(tokens):
        if token.type != "heading_open":
            continue
        text = inline_text(tokens[i + 1]) if i + 1 < len(tokens) else ""
        slug = registry.unique(text)
        token.attrSet("id", slug)
        entry = TocEntry(text=text, level=int(token.tag[1]), slug=slug)

        while stack and stack[-1].level >= entry.level:
            stack.pop()
        if stack:
            stack[-1].children.append(entry)
        else:
            roots.append(entry)
        stack.append(entry)

    return roots


def flatten_toc(entries: Sequence[TocEntry]) -> list[TocEntry]:
    """Depth-first list of all entries, in document order."""
    flat: list[TocEntry] = []
    for entry in entries:
        flat.append(entry)
        flat.extend(flatten_toc(entry.children))
    return flat
