"""CLI entry point for blogcrm."""

from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.tree import Tree

from blogcrm.config import BlogCRMConfig, load_config
from blogcrm.config.loader import DEFAULT_CONFIG_TEMPLATE
from blogcrm.errors import BlogCRMError, PipelineError
from blogcrm.github import create_client
from blogcrm.logging import configure_logging
from blogcrm.markdown import MarkdownProcessor, TocEntry
from blogcrm.output import PostsIndexWriter
from blogcrm.pipeline import (
    BlogPipeline,
    PipelineResult,
    PostQuery,
    SortOrder,
    StructuredDocument,
    filter_documents,
    load_posts,
    sort_documents,
)

app = typer.Typer(
    name="blogcrm",
    help="Fetch markdown posts from a GitHub repository and render them as a blog.",
)

config_app = typer.Typer(help="Manage blogcrm configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: BlogCRMConfig | None = None


def _get_config() -> BlogCRMConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to blogcrm.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    configure_logging(_config)


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------


def _display_posts(docs: list[StructuredDocument]) -> None:
    table = Table(title=f"Posts ({len(docs)})")
    table.add_column("Title", style="cyan")
    table.add_column("Category", style="green")
    table.add_column("Tags", style="yellow")
    table.add_column("Date")
    table.add_column("Read", justify="right")
    table.add_column("Status", justify="center")
    for d in docs:
        m = d.metadata
        table.add_row(
            m.title,
            m.category,
            ", ".join(m.tags) if m.tags else "-",
            m.date.strftime("%Y-%m-%d"),
            f"{d.reading_time_minutes} min",
            "[yellow]draft[/yellow]" if m.draft else "[green]published[/green]",
        )
    rprint(table)


def _display_stats(result: PipelineResult) -> None:
    s = result.stats
    text = (
        f"[dim]Total:[/dim]      {s.total}\n"
        f"[dim]Published:[/dim]  {s.published}\n"
        f"[dim]Drafts:[/dim]     {s.drafts}\n"
        f"[dim]Categories:[/dim] {s.category_count}\n"
        f"[dim]Tags:[/dim]       {s.tag_count}"
    )
    if result.skipped:
        text += f"\n[dim]Skipped:[/dim]    [red]{len(result.skipped)}[/red]"
    rprint(Panel(text, title="Stats", border_style="blue"))


def _add_toc(parent: Tree, entries: list[TocEntry]) -> None:
    for entry in entries:
        node = parent.add(f"{entry.text} [dim]#{entry.slug}[/dim]")
        _add_toc(node, entry.children)


def _display_post(doc: StructuredDocument) -> None:
    m = doc.metadata
    panel_text = (
        f"[bold]{m.title}[/bold]\n"
        f"{doc.excerpt or '(no excerpt)'}\n\n"
        f"[dim]Path:[/dim]      {doc.path}\n"
        f"[dim]Date:[/dim]      {m.date.isoformat()}\n"
        f"[dim]Category:[/dim]  {m.category}\n"
        f"[dim]Tags:[/dim]      {', '.join(m.tags) or 'none'}\n"
        f"[dim]Author:[/dim]    {m.author or 'unknown'}\n"
        f"[dim]Reading:[/dim]   {doc.reading_time_minutes} min\n"
        f"[dim]Modified:[/dim]  {m.last_modified.isoformat() if m.last_modified else '-'}"
        f" by {m.last_modified_by or '-'}"
    )
    rprint(Panel(panel_text, title="Post", border_style="blue"))
    tree = Tree("[bold]Contents[/bold]")
    _add_toc(tree, doc.toc)
    rprint(tree)


def _load_with_retry(cfg: BlogCRMConfig, *, refresh: bool = False) -> PipelineResult:
    """Run the pipeline; on a top-level failure offer to try again."""
    while True:
        try:
            return asyncio.run(load_posts(cfg, refresh=refresh))
        except ValueError as e:
            rprint(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)
        except PipelineError as e:
            rprint(f"[red]Failed to fetch posts:[/red] {e}")
            if sys.stdin.isatty() and typer.confirm("Try again?", default=True):
                refresh = True
                continue
            rprint("[yellow]Run the command again to retry.[/yellow]")
            raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


@app.command()
def fetch(
    search: Annotated[str, typer.Option("--search", "-s", help="Search title, category, tags, excerpt")] = "",
    category: Annotated[list[str] | None, typer.Option("--category", help="Filter by category")] = None,
    tag: Annotated[list[str] | None, typer.Option("--tag", "-t", help="Filter by tag")] = None,
    status: Annotated[str, typer.Option("--status", help="all | published | draft")] = "all",
    sort: Annotated[SortOrder, typer.Option("--sort", help="Sort order")] = SortOrder.DATE_DESC,
    as_json: Annotated[bool, typer.Option("--json", help="Print documents as JSON")] = False,
    refresh: Annotated[bool, typer.Option("--refresh", help="Ignore cached API responses")] = False,
) -> None:
    """Fetch and render all posts, then list them."""
    cfg = _get_config()
    if status not in ("all", "published", "draft"):
        rprint(f"[red]Error:[/red] invalid status {status!r}")
        raise typer.Exit(1)

    result = _load_with_retry(cfg, refresh=refresh)
    query = PostQuery(search_term=search, categories=category or [], tags=tag or [], status=status)
    docs = sort_documents(filter_documents(result.documents, query), sort)

    if as_json:
        print(json.dumps([d.model_dump(mode="json") for d in docs], indent=2))
        return
    _display_posts(docs)
    _display_stats(result)
    for s in result.skipped:
        rprint(f"[dim]skipped {s.path}: {s.error_type}: {s.message}[/dim]")


@app.command()
def show(
    path: str = typer.Argument(..., help="Repository path of the markdown file"),
    html: bool = typer.Option(False, "--html", help="Print rendered HTML"),
) -> None:
    """Fetch a single post and show its metadata and table of contents."""
    cfg = _get_config()

    async def _run() -> StructuredDocument | None:
        async with create_client(cfg.github) as client:
            refs = await client.list_markdown_files()
            ref = next((r for r in refs if r.path == path), None)
            if ref is None:
                return None
            pipeline = BlogPipeline(client, MarkdownProcessor(cfg.markdown), cfg.pipeline)
            return await pipeline.process_file(ref)

    try:
        doc = asyncio.run(_run())
    except (ValueError, BlogCRMError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if doc is None:
        rprint(f"[red]Error:[/red] no markdown file at {path!r}")
        raise typer.Exit(1)
    if html:
        print(doc.html)
        return
    _display_post(doc)


@app.command()
def render(
    file: str = typer.Argument(..., help="Local markdown file"),
    output: str | None = typer.Option(None, "--output", "-o", help="Write HTML to file"),
) -> None:
    """Render a local markdown file without touching the network."""
    cfg = _get_config()
    src = Path(file)
    if not src.is_file():
        rprint(f"[red]Error:[/red] file not found: {file}")
        raise typer.Exit(1)

    processor = MarkdownProcessor(cfg.markdown)
    try:
        processed = processor.process(src.read_text(encoding="utf-8"), path=src.name)
    except BlogCRMError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if output:
        Path(output).write_text(processed.html, encoding="utf-8")
        rprint(f"[green]Written to[/green] {output}")
    else:
        rprint(Syntax(processed.html, "html", theme="monokai"))

    m = processed.metadata
    rprint(
        Panel(
            f"[dim]Title:[/dim]    {m.title}\n"
            f"[dim]Category:[/dim] {m.category}\n"
            f"[dim]Tags:[/dim]     {', '.join(m.tags) or 'none'}\n"
            f"[dim]Reading:[/dim]  {processed.reading_time_minutes} min\n"
            f"[dim]Headings:[/dim] {len(processed.toc)} top-level",
            title="Render Result",
            border_style="green",
        )
    )


@app.command()
def index(
    dry_run: bool = typer.Option(False, "--dry-run", help="Preview without writing"),
    html: bool = typer.Option(False, "--html", help="Also write rendered HTML per post"),
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Override output directory")
    ] = None,
) -> None:
    """Build posts.json (and optionally per-post HTML) from the repository."""
    cfg = _get_config()
    result = _load_with_retry(cfg)

    out_cfg = cfg.output
    if output:
        out_cfg = out_cfg.model_copy(update={"base_dir": output})
    writer = PostsIndexWriter(out_cfg)
    try:
        if html:
            dest = writer.write_batch(result, dry_run=dry_run)[-1]
        else:
            dest = writer.write(result, dry_run=dry_run)
    except (OSError, ValueError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    verb = "Would write" if dry_run else "Wrote"
    rprint(Panel(
        f"[dim]File:[/dim]     {dest}\n"
        f"[dim]Posts:[/dim]    {result.stats.total}\n"
        f"[dim]Skipped:[/dim]  {len(result.skipped)}",
        title=f"{verb} Index",
        border_style="green",
    ))


@app.command("repo-stats")
def repo_stats() -> None:
    """Show repository statistics."""
    cfg = _get_config()

    async def _run():
        async with create_client(cfg.github) as client:
            return client.settings.repo_id, await client.get_repository_stats()

    try:
        repo_id, stats = asyncio.run(_run())
    except (ValueError, BlogCRMError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title=repo_id)
    table.add_column("Field", style="cyan")
    table.add_column("Value", justify="right")
    for field, value in stats.model_dump().items():
        table.add_row(field.replace("_", " "), str(value))
    rprint(table)


@app.command("rate-limit")
def rate_limit() -> None:
    """Show the GitHub API rate-limit status."""
    cfg = _get_config()

    async def _run():
        async with create_client(cfg.github) as client:
            return await client.get_rate_limit()

    try:
        limit = asyncio.run(_run())
    except (ValueError, BlogCRMError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    reset = limit.reset.isoformat() if limit.reset else "-"
    rprint(f"[bold]{limit.remaining}[/bold]/{limit.limit} requests remaining (resets {reset})")


@config_app.command("init")
def config_init(
    path: str = typer.Argument("blogcrm.yaml", help="Where to write the config"),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing file"),
) -> None:
    """Write a default blogcrm.yaml."""
    dest = Path(path)
    if dest.exists() and not force:
        rprint(f"[yellow]{dest} already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    dest.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
    rprint(f"[green]Created[/green] {dest}")


@config_app.command("show")
def config_show() -> None:
    """Print the effective configuration."""
    cfg = _get_config()
    dumped = yaml.safe_dump(cfg.model_dump(mode="json"), sort_keys=False)
    rprint(Syntax(dumped, "yaml", theme="monokai"))


if __name__ == "__main__":
    app()
