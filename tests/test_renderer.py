"""Tests for blogcrm.markdown.renderer — HTML output of PostRenderer."""

import pytest

from blogcrm.config.models import MarkdownSettings
from blogcrm.markdown.processor import MarkdownProcessor
from blogcrm.markdown import renderer as renderer_module
from blogcrm.markdown.renderer import PostRenderer, create_parser, is_external


def _html(markdown: str, **settings) -> str:
    html, _toc = MarkdownProcessor(MarkdownSettings(**settings)).render(markdown)
    return html


class TestIsExternal:
    @pytest.mark.parametrize(
        "href", ["https://example.com", "http://x.org/a", "mailto:me@x.org", "//cdn.x.org/a.js"]
    )
    def test_external(self, href):
        assert is_external(href)

    @pytest.mark.parametrize("href", ["/about", "posts/other.md", "#section", "../up"])
    def test_internal(self, href):
        assert not is_external(href)


# ── headings ───────────────────────────────────────────────────────


class TestHeadings:
    def test_heading_gets_id_and_anchor(self):
        html = _html("## Getting Started\n")
        assert '<h2 id="getting-started" class="group">' in html
        assert '<a href="#getting-started" class="anchor-link" aria-hidden="true">#</a></h2>' in html

    def test_duplicate_heading_ids_match_toc(self):
        html, toc = MarkdownProcessor().render("# Notes\n\n# Notes\n")
        assert [e.slug for e in toc] == ["notes", "notes-1"]
        assert 'id="notes"' in html
        assert 'id="notes-1"' in html


# ── links & images ─────────────────────────────────────────────────


class TestLinks:
    def test_external_link_opens_in_new_tab(self):
        html = _html("[Docs](https://example.com/docs)")
        assert 'href="https://example.com/docs"' in html
        assert 'target="_blank"' in html
        assert 'rel="noopener noreferrer"' in html
        assert 'class="external-link"' in html

    def test_internal_link_left_relative(self):
        html = _html("[About](/about)")
        assert 'href="/about"' in html
        assert 'class="internal-link"' in html
        assert "target=" not in html

    def test_bare_urls_are_linkified(self):
        html = _html("See https://example.com for more.")
        assert '<a href="https://example.com"' in html
        assert 'class="external-link"' in html


class TestImages:
    def test_relative_image_resolved_against_image_path(self):
        html = _html("![Chart](chart.png)")
        assert 'src="/images/chart.png"' in html
        assert 'alt="Chart"' in html
        assert 'loading="lazy"' in html

    def test_absolute_path_uses_base_url(self):
        html = _html("![Logo](/static/logo.svg)", base_url="https://blog.example.com/")
        assert 'src="https://blog.example.com/static/logo.svg"' in html

    def test_external_image_untouched(self):
        html = _html("![x](https://cdn.example.com/x.png)")
        assert 'src="https://cdn.example.com/x.png"' in html


# ── code ───────────────────────────────────────────────────────────


class TestCode:
    def test_fenced_code_is_highlighted(self):
        html = _html("```python\ndef main():\n    return 1\n```\n")
        assert '<div class="code-block">' in html
        assert '<div class="code-language">python</div>' in html
        assert '<code class="hljs language-python">' in html
        assert "<span" in html

    def test_unknown_language_falls_back_to_escaped_plaintext(self):
        html = _html("```nosuchlang\n<b>hi</b>\n```\n")
        assert "language-plaintext" in html
        assert "&lt;b&gt;hi&lt;/b&gt;" in html

    def test_highlighting_can_be_disabled(self):
        html = _html("```python\nx = 1\n```\n", highlight=False)
        assert '<code class="hljs language-python">x = 1' in html
        assert "<span" not in html

    def test_fence_without_language(self):
        html = _html("```\nplain\n```\n")
        assert "code-language" not in html
        assert "language-plaintext" in html

    def test_indented_code_block(self):
        html = _html("    indented <code>\n")
        assert '<pre><code class="hljs language-plaintext">indented &lt;code&gt;' in html


# ── GFM extensions ─────────────────────────────────────────────────


class TestGfm:
    def test_table_is_wrapped(self):
        html = _html("| a | b |\n|---|---|\n| 1 | 2 |\n")
        assert '<div class="table-wrapper"><table>' in html
        assert "</table>\n</div>" in html

    def test_strikethrough(self):
        assert "<s>gone</s>" in _html("~~gone~~")

    def test_soft_breaks_become_br(self):
        assert "<br" in _html("line one\nline two")

    def test_task_list_checkboxes(self):
        html = _html("- [x] done\n- [ ] todo\n")
        assert html.count('type="checkbox"') == 2
        assert 'checked="checked"' in html


class TestRawHtml:
    def test_raw_html_escaped_by_default(self):
        html = _html("<script>alert(1)</script>\n")
        assert "<script>" not in html
        assert "&lt;script&gt;" in html

    def test_raw_html_allowed_when_enabled(self):
        html = _html('<div class="note">hi</div>\n', allow_html=True)
        assert '<div class="note">hi</div>' in html


# ── create_parser ──────────────────────────────────────────────────


class TestCreateParser:
    def test_installs_post_renderer_with_settings(self):
        md = create_parser(MarkdownSettings(base_url="https://blog.example", highlight=False))
        assert isinstance(md.renderer, PostRenderer)
        assert md.renderer.base_url == "https://blog.example"
        assert md.renderer.highlight_code is False

    def test_rejects_foreign_renderer(self, monkeypatch):
        real = renderer_module.MarkdownIt
        monkeypatch.setattr(
            renderer_module,
            "MarkdownIt",
            lambda config, options, renderer_cls=None: real(config, options),
        )
        with pytest.raises(TypeError, match="PostRenderer"):
            create_parser()
