"""Split ``---`` fenced YAML frontmatter from a markdown body."""

from __future__ import annotations

import yaml

from blogcrm.errors import ParseError
from blogcrm.markdown.models import RawDocument

_OPEN = "---"
_CLOSE = ("---", "...")


def split_block(content: str) -> tuple[str | None, str]:
    """Split raw text into (yaml_str, body).

    yaml_str is None when the text does not open with a ``---`` line or the
    block is never closed; the whole text is then the body.
    """
    content = content.lstrip("\ufeff")
    lines = content.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != _OPEN:
        return None, content

    for i in range(1, len(lines)):
        if lines[i].rstrip() in _CLOSE:
            return "".join(lines[1:i]), "".join(lines[i + 1:])
    return None, content


def split_frontmatter(content: str, path: str | None = None) -> RawDocument:
    """Parse the frontmatter block of ``content`` into a mapping.

    Raises:
        ParseError: the block is not valid YAML or not a key/value mapping.
    """
    yaml_str, body = split_block(content)
    if yaml_str is None:
        return RawDocument(path=path, frontmatter={}, body=body)

    try:
        data = yaml.safe_load(yaml_str)
    except yaml.YAMLError as exc:
        raise ParseError(f"Invalid YAML frontmatter: {exc}", path=path) from exc

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ParseError(
            f"Frontmatter is not a mapping, got {type(data).__name__}", path=path
        )

    return RawDocument(
        path=path,
        frontmatter={str(k): v for k, v in data.items()},
        body=body,
    )
