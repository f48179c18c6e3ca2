"""HTML renderer for blog posts built on markdown-it-py.

One method per node kind that needs post-specific output: headings get
anchor links, links are tagged internal/external, images are resolved and
lazy-loaded, fenced code is highlighted with Pygments, tables are wrapped
for horizontal scrolling.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from typing import Any

from markdown_it import MarkdownIt
from markdown_it.common.utils import escapeHtml, unescapeAll
from markdown_it.renderer import RendererHTML
from markdown_it.token import Token
from markdown_it.utils import EnvType, OptionsDict
from mdit_py_plugins.tasklists import tasklists_plugin
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from blogcrm.config.models import MarkdownSettings

# RFC 3986 scheme: "https:", "mailto:", ...
_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.\-]*:")


def is_external(href: str) -> bool:
    return bool(_SCHEME_RE.match(href)) or href.startswith("//")


class PostRenderer(RendererHTML):
    def __init__(self, parser: Any = None) -> None:
        super().__init__(parser)
        self.base_url = ""
        self.image_path = "/images"
        self.highlight_code = True
        self._formatter = HtmlFormatter(nowrap=True)

    # -- headings ----------------------------------------------------------

    def heading_open(
        self, tokens: Sequence[Token], idx: int, options: OptionsDict, env: EnvType
    ) -> str:
        tokens[idx].attrJoin("class", "group")
        return self.renderToken(tokens, idx, options, env)

    def heading_close(
        self, tokens: Sequence[Token], idx: int, options: OptionsDict, env: EnvType
    ) -> str:
        slug = None
        if idx >= 2 and tokens[idx - 2].type == "heading_open":
            slug = tokens[idx - 2].attrGet("id")
        anchor = ""
        if slug:
            anchor = f' <a href="#{escapeHtml(str(slug))}" class="anchor-link" aria-hidden="true">#</a>'
        return f"{anchor}</{tokens[idx].tag}>\n"

    # -- links & images ----------------------------------------------------

    def link_open(
        self, tokens: Sequence[Token], idx: int, options: OptionsDict, env: EnvType
    ) -> str:
        token = tokens[idx]
        href = str(token.attrGet("href") or "")
        if is_external(href):
            token.attrSet("target", "_blank")
            token.attrSet("rel", "noopener noreferrer")
            token.attrJoin("class", "external-link")
        else:
            token.attrJoin("class", "internal-link")
        return self.renderToken(tokens, idx, options, env)

    def image(
        self, tokens: Sequence[Token], idx: int, options: OptionsDict, env: EnvType
    ) -> str:
        token = tokens[idx]
        token.attrSet("src", self.resolve_image_path(str(token.attrGet("src") or "")))
        token.attrSet("loading", "lazy")
        return super().image(tokens, idx, options, env)

    def resolve_image_path(self, src: str) -> str:
        if not src or is_external(src):
            return src
        if src.startswith("/"):
            return f"{self.base_url.rstrip('/')}{src}"
        return f"{self.image_path.rstrip('/')}/{src}"

    # -- code --------------------------------------------------------------

    def fence(
        self, tokens: Sequence[Token], idx: int, options: OptionsDict, env: EnvType
    ) -> str:
        token = tokens[idx]
        info = unescapeAll(token.info).strip() if token.info else ""
        lang = info.split(maxsplit=1)[0] if info else ""
        code_html, language = self.highlight_block(token.content, lang)
        label = f'<div class="code-language">{escapeHtml(lang)}</div>' if lang else ""
        return (
            f'<div class="code-block">{label}'
            f'<pre><code class="hljs language-{escapeHtml(language)}">{code_html}</code></pre>'
            "</div>\n"
        )

    def code_block(
        self, tokens: Sequence[Token], idx: int, options: OptionsDict, env: EnvType
    ) -> str:
        code = escapeHtml(tokens[idx].content)
        return f'<pre><code class="hljs language-plaintext">{code}</code></pre>\n'

    def highlight_block(self, code: str, lang: str) -> tuple[str, str]:
        """Return (html, language); unknown languages render as escaped plaintext.

        With highlighting off the code is only escaped and keeps its language.
        """
        if not self.highlight_code:
            return escapeHtml(code), lang or "plaintext"
        if lang:
            try:
                lexer = get_lexer_by_name(lang)
            except ClassNotFound:
                lexer = None
            if lexer is not None:
                return highlight(code, lexer, self._formatter), lang
        return escapeHtml(code), "plaintext"

    # -- tables ------------------------------------------------------------

    def table_open(
        self, tokens: Sequence[Token], idx: int, options: OptionsDict, env: EnvType
    ) -> str:
        return '<div class="table-wrapper">' + self.renderToken(tokens, idx, options, env)

    def table_close(
        self, tokens: Sequence[Token], idx: int, options: OptionsDict, env: EnvType
    ) -> str:
        return self.renderToken(tokens, idx, options, env) + "</div>\n"


def create_parser(settings: MarkdownSettings | None = None) -> MarkdownIt:
    """GFM-flavoured parser (tables, strikethrough, autolinks, task lists)."""
    settings = settings or MarkdownSettings()
    md = MarkdownIt(
        "gfm-like",
        {"breaks": True, "html": settings.allow_html},
        renderer_cls=PostRenderer,
    )
    md.use(tasklists_plugin)

    renderer = md.renderer
    if not isinstance(renderer, PostRenderer):
        raise TypeError(f"expected PostRenderer, got {type(renderer).__name__}")
    renderer.base_url = settings.base_url
    renderer.image_path = settings.image_path
    renderer.highlight_code = settings.highlight
    return md
