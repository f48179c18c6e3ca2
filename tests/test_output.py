"""Tests for blogcrm.output — posts index and HTML writer."""

import json
from datetime import datetime, timezone

import pytest

from blogcrm.config.models import OutputSettings
from blogcrm.output.writer import PostsIndexWriter, _sanitize_post_path, build_index
from blogcrm.pipeline.models import DocumentMetadata, PipelineResult, StructuredDocument
from blogcrm.pipeline.stats import compute_stats


def _doc(path, *, day, author=None, tags=()):
    return StructuredDocument(
        id=f"id-{path}",
        path=path,
        html=f"<h1>{path}</h1>",
        excerpt="excerpt",
        metadata=DocumentMetadata(
            title=path,
            date=datetime(2024, 2, day, tzinfo=timezone.utc),
            category="Engineering",
            tags=tags,
            author=author,
        ),
    )


@pytest.fixture
def result():
    docs = (
        _doc("posts/old.md", day=1, author="Ada", tags=("python",)),
        _doc("posts/new.md", day=9, author="Grace", tags=("async", "python")),
    )
    return PipelineResult(documents=docs, stats=compute_stats(docs))


class TestSanitizePostPath:
    def test_drops_md_suffix(self):
        assert _sanitize_post_path("posts/hello.md") == "posts/hello"

    def test_removes_parent_segments(self):
        assert _sanitize_post_path("../../etc/passwd.md") == "etc/passwd"

    def test_replaces_unsafe_characters(self):
        assert _sanitize_post_path("posts/what? now.md") == "posts/what__now"

    def test_empty_path(self):
        assert _sanitize_post_path("..") == "_unnamed"


class TestBuildIndex:
    def test_posts_newest_first(self, result):
        index = build_index(result)
        assert [p["path"] for p in index["posts"]] == ["posts/new.md", "posts/old.md"]

    def test_metadata_summary(self, result):
        meta = build_index(result)["metadata"]
        assert meta["total_posts"] == 2
        assert meta["categories"] == ["Engineering"]
        assert meta["tags"] == ["async", "python"]
        assert meta["authors"] == ["Ada", "Grace"]
        assert "last_updated" in meta

    def test_index_is_json_serializable(self, result):
        json.dumps(build_index(result))


class TestPostsIndexWriter:
    def test_write(self, tmp_path, result):
        writer = PostsIndexWriter(OutputSettings(base_dir=str(tmp_path / "out")))
        dest = writer.write(result)
        assert dest == tmp_path / "out" / "posts.json"
        data = json.loads(dest.read_text())
        assert data["metadata"]["total_posts"] == 2

    def test_dry_run_writes_nothing(self, tmp_path, result):
        writer = PostsIndexWriter(OutputSettings(base_dir=str(tmp_path / "out")))
        dest = writer.write(result, dry_run=True)
        assert not dest.exists()
        assert not (tmp_path / "out").exists()

    def test_write_html(self, tmp_path, result):
        writer = PostsIndexWriter(OutputSettings(base_dir=str(tmp_path)))
        dest = writer.write_html(result.documents[0])
        assert dest == tmp_path / "posts" / "posts" / "old.html"
        assert dest.read_text() == "<h1>posts/old.md</h1>"

    def test_write_html_stays_inside_base_dir(self, tmp_path):
        writer = PostsIndexWriter(OutputSettings(base_dir=str(tmp_path)))
        dest = writer.write_html(_doc("../../escape.md", day=1))
        assert dest.resolve().is_relative_to(tmp_path.resolve())

    def test_write_batch_index_last(self, tmp_path, result):
        writer = PostsIndexWriter(OutputSettings(base_dir=str(tmp_path)))
        paths = writer.write_batch(result)
        assert len(paths) == 3
        assert paths[-1].name == "posts.json"
        assert all(p.exists() for p in paths)
