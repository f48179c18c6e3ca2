"""MarkdownProcessor: raw markdown file -> ProcessedDocument."""

from __future__ import annotations

import logging
from datetime import datetime

from blogcrm.config.models import MarkdownSettings
from blogcrm.markdown.frontmatter import split_frontmatter
from blogcrm.markdown.metadata import normalize_metadata
from blogcrm.markdown.models import ProcessedDocument, TocEntry
from blogcrm.markdown.renderer import create_parser
from blogcrm.markdown.text import calculate_reading_time, extract_tasks, generate_excerpt
from blogcrm.markdown.toc import build_toc

logger = logging.getLogger(__name__)


class MarkdownProcessor:
    """Turns one markdown file (frontmatter + body) into a ProcessedDocument.

    Pipeline:
        raw text -> frontmatter split -> tokens -> TOC + HTML
                 -> excerpt, reading time, tasks, normalized metadata

    No network access. Output depends only on the input text, plus ``now``
    when the frontmatter has no date.
    """

    def __init__(self, settings: MarkdownSettings | None = None) -> None:
        self.settings = settings or MarkdownSettings()
        self._md = create_parser(self.settings)

    def render(self, body: str) -> tuple[str, list[TocEntry]]:
        """Render a markdown body to HTML and build its table of contents."""
        env: dict = {}
        tokens = self._md.parse(body, env)
        # build_toc stamps heading ids onto the tokens before rendering
        toc = build_toc(tokens)
        html = self._md.renderer.render(tokens, self._md.options, env)
        return html, toc

    def process(
        self,
        raw_text: str,
        *,
        path: str | None = None,
        now: datetime | None = None,
    ) -> ProcessedDocument:
        """Process a markdown file.

        Raises:
            ParseError: malformed frontmatter.
            ValidationError: a metadata field has an unsupported shape.
        """
        raw = split_frontmatter(raw_text, path=path)
        html, toc = self.render(raw.body)
        metadata = normalize_metadata(raw.frontmatter, path=path, now=now)

        doc = ProcessedDocument(
            html=html,
            metadata=metadata,
            toc=toc,
            excerpt=generate_excerpt(
                raw.body, self.settings.excerpt_length, strip_frontmatter=False
            ),
            reading_time_minutes=calculate_reading_time(
                raw.body, self.settings.words_per_minute
            ),
            tasks=extract_tasks(raw.body),
        )
        logger.debug(
            "processed %s: %d headings, %d min read",
            path or "<string>", len(toc), doc.reading_time_minutes,
        )
        return doc
