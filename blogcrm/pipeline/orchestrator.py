"""Pipeline orchestrator: repository -> collection of StructuredDocuments."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable

from blogcrm.config.models import BlogCRMConfig, PipelineSettings
from blogcrm.errors import BlogCRMError, PipelineError
from blogcrm.github import create_client
from blogcrm.github.client import GitHubClient
from blogcrm.github.models import FileMetadata, RepositoryFileRef
from blogcrm.markdown.models import ProcessedDocument
from blogcrm.markdown.processor import MarkdownProcessor
from blogcrm.pipeline.models import (
    DocumentMetadata,
    PipelineResult,
    SkippedFile,
    StructuredDocument,
)
from blogcrm.pipeline.stats import compute_stats

logger = logging.getLogger(__name__)


def merge_document(
    ref: RepositoryFileRef,
    processed: ProcessedDocument,
    file_meta: FileMetadata,
) -> StructuredDocument:
    """Combine transformer output with commit metadata.

    The frontmatter author wins; the last committer fills in when it is absent.
    """
    data = processed.metadata.model_dump()
    data["author"] = data["author"] or file_meta.last_modified_by
    return StructuredDocument(
        id=ref.content_id,
        path=ref.path,
        html=processed.html,
        toc=processed.toc,
        excerpt=processed.excerpt,
        reading_time_minutes=processed.reading_time_minutes,
        tasks=processed.tasks,
        metadata=DocumentMetadata(
            **data,
            last_modified=file_meta.last_modified,
            last_modified_by=file_meta.last_modified_by,
        ),
    )


def _ensure_unique_ids(documents: Iterable[StructuredDocument]) -> list[StructuredDocument]:
    """Identical blobs at different paths share a SHA; suffix later ones with the path."""
    seen: set[str] = set()
    unique: list[StructuredDocument] = []
    for doc in documents:
        if doc.id in seen:
            new_id = f"{doc.id}:{doc.path}"
            logger.debug("duplicate content id %s at %s; using %s", doc.id, doc.path, new_id)
            doc = doc.model_copy(update={"id": new_id})
        seen.add(doc.id)
        unique.append(doc)
    return unique


class BlogPipeline:
    """Fetches every markdown file of a repository and turns it into posts.

    Pipeline:
        list files -> per file, concurrently: raw fetch -> process ->
        metadata fetch -> merge -> aggregate + stats

    A failure in one file is logged and recorded as skipped; it never aborts
    its siblings. Only a failed file listing fails the run. Retries are the
    client's job, not this class's.
    """

    def __init__(
        self,
        client: GitHubClient,
        processor: MarkdownProcessor,
        settings: PipelineSettings | None = None,
    ) -> None:
        self.client = client
        self.processor = processor
        self.settings = settings or PipelineSettings()

    async def run(self) -> PipelineResult:
        """Run the pipeline once.

        Raises:
            PipelineError: the repository's markdown files could not be listed.
        """
        try:
            files = await self.client.list_markdown_files()
        except BlogCRMError as e:
            logger.error("Could not list markdown files: %s", e)
            raise PipelineError(f"Failed to list markdown files: {e}") from e

        semaphore = asyncio.Semaphore(self.settings.max_concurrency)
        outcomes = await asyncio.gather(
            *(self._process_file(ref, semaphore) for ref in files)
        )

        documents = [o for o in outcomes if isinstance(o, StructuredDocument)]
        skipped = [o for o in outcomes if isinstance(o, SkippedFile)]
        documents = _ensure_unique_ids(sorted(documents, key=lambda d: d.path))

        logger.info(
            "loaded %d of %d posts (%d skipped)", len(documents), len(files), len(skipped)
        )
        return PipelineResult(
            documents=tuple(documents),
            stats=compute_stats(documents),
            skipped=tuple(sorted(skipped, key=lambda s: s.path)),
        )

    async def refresh(self) -> PipelineResult:
        """Drop cached API responses and run again."""
        self.client.clear_cache()
        return await self.run()

    async def process_file(self, ref: RepositoryFileRef) -> StructuredDocument:
        """Fetch, transform and enrich a single file. Errors propagate."""
        raw = await self.client.fetch_raw_content(ref.path)
        processed = self.processor.process(raw, path=ref.path)
        file_meta = await self.client.fetch_file_metadata(ref.path)
        return merge_document(ref, processed, file_meta)

    async def _process_file(
        self, ref: RepositoryFileRef, semaphore: asyncio.Semaphore
    ) -> StructuredDocument | SkippedFile:
        async with semaphore:
            try:
                return await self.process_file(ref)
            except BlogCRMError as e:
                logger.warning("Skipping %s: %s", ref.path, e)
                return SkippedFile(path=ref.path, error_type=type(e).__name__, message=str(e))
            except Exception as e:
                logger.warning("Unexpected error processing %s", ref.path, exc_info=True)
                return SkippedFile(path=ref.path, error_type=type(e).__name__, message=str(e))


async def load_posts(config: BlogCRMConfig, *, refresh: bool = False) -> PipelineResult:
    """Build a client + processor from config, run the pipeline, close the client."""
    async with create_client(config.github) as client:
        pipeline = BlogPipeline(client, MarkdownProcessor(config.markdown), config.pipeline)
        if refresh:
            return await pipeline.refresh()
        return await pipeline.run()
