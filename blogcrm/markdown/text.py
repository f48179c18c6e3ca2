"""Plain-text derivations of a markdown body: excerpt, reading time, tasks."""

from __future__ import annotations

import math
import re

from blogcrm.markdown.frontmatter import split_block
from blogcrm.markdown.models import TaskItem

ELLIPSIS = "..."

_IMAGE_RE = re.compile(r"!\[([^\]]*)\]\([^)]*\)")
_LINK_RE = re.compile(r"\[([^\]]+)\]\([^)]+\)")
# Heading/emphasis/code/strikethrough markers; underscores only at word edges.
_MARKER_RE = re.compile(r"[#*`~]|(?<!\w)_+|_+(?!\w)")
_WHITESPACE_RE = re.compile(r"\s+")
_TASK_RE = re.compile(r"^[ \t]*[-*+] \[([ xX])\] (.+)$", re.MULTILINE)


def to_plain_text(markdown: str) -> str:
    text = _IMAGE_RE.sub(r"\1", markdown)
    text = _LINK_RE.sub(r"\1", text)
    text = _MARKER_RE.sub("", text)
    return _WHITESPACE_RE.sub(" ", text).strip()


def generate_excerpt(content: str, length: int = 160, *, strip_frontmatter: bool = True) -> str:
    """Plain-text summary of ``content``, at most ``length`` chars plus ``...``.

    Pass ``strip_frontmatter=False`` for a body that has already been split,
    so a leading ``---`` rule is not mistaken for a frontmatter block.
    """
    body = split_block(content)[1] if strip_frontmatter else content
    text = to_plain_text(body)
    if len(text) <= length:
        return text
    return f"{text[:length].rstrip()}{ELLIPSIS}"


def count_words(content: str) -> int:
    return len(content.split())


def calculate_reading_time(content: str, words_per_minute: int = 200) -> int:
    """Minutes to read ``content``, never less than one."""
    return max(1, math.ceil(count_words(content) / words_per_minute))


def extract_tasks(content: str) -> list[TaskItem]:
    return [
        TaskItem(
            completed=m.group(1).lower() == "x",
            text=m.group(2).strip(),
            position=m.start(),
        )
        for m in _TASK_RE.finditer(content)
    ]
