"""Output subsystem: writes the posts index and rendered posts."""

from blogcrm.output.writer import PostsIndexWriter, build_index

__all__ = [
    "PostsIndexWriter",
    "build_index",
]
