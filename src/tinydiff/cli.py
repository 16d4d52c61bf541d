"""tinydiff CLI — Typer application for status, diffs, and line comments."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from tinydiff import __version__

app = typer.Typer(
    name="tinydiff",
    help="Inspect working-tree changes and keep line comments next to them.",
    add_completion=False,
    no_args_is_help=True,
)
comments_app = typer.Typer(help="List, add, resolve, and delete line comments.", no_args_is_help=True)
app.add_typer(comments_app, name="comments")

console = Console(stderr=True)


@dataclass
class _Options:
    repo: Optional[str] = None
    format: Optional[str] = None
    config: Optional[str] = None
    verbose: bool = False


@dataclass
class _Session:
    root: Path
    format: str


def _fail(label: str, exc: Exception) -> typer.Exit:
    console.print(f"[bold red]{label}:[/bold red] {exc}")
    return typer.Exit(code=2)


def _resolve_repo_root(options: _Options) -> Path:
    """Find the git repo root, exit 2 on failure."""
    from tinydiff.git.adapter import GitError, get_repo_root

    start = Path(options.repo) if options.repo else Path.cwd()
    try:
        return get_repo_root(start)
    except GitError as exc:
        raise _fail("Error", exc) from exc


def _session(ctx: typer.Context):
    """Load config for the target repository and set up logging."""
    from tinydiff.config.loader import ConfigError, load_config
    from tinydiff.config.schema import OUTPUT_FORMATS
    from tinydiff.git.adapter import GitError
    from tinydiff.git.repository import Repository
    from tinydiff.logging_config import setup_logging

    options: _Options = ctx.obj or _Options()
    root = _resolve_repo_root(options)

    try:
        cfg = load_config(root, options.config)
    except ConfigError as exc:
        raise _fail("Config error", exc) from exc

    if options.format:
        if options.format not in OUTPUT_FORMATS:
            console.print(f"[bold red]Invalid format:[/bold red] {options.format}")
            raise typer.Exit(code=2)
        cfg.output.format = options.format  # type: ignore[assignment]

    setup_logging(cfg.logging.level, verbose=options.verbose)

    if options.verbose:
        console.print(f"[dim]Repo root: {root}[/dim]")
        console.print(f"[dim]Context lines: {cfg.diff.context_lines}[/dim]")

    try:
        repo = Repository.open(root, **cfg.repository_options())
    except GitError as exc:
        raise _fail("Error", exc) from exc
    return repo, _Session(root=root, format=cfg.output.format)


def _working_text(root: Path, file_path: str) -> Optional[str]:
    """Working-tree text of *file_path*, or None when it is missing or binary."""
    from tinydiff.content import read_file
    from tinydiff.paths import resolve_within

    full_path = resolve_within(root, file_path)
    if not full_path.is_file():
        return None
    result = read_file(full_path)
    return None if result.is_binary else result.contents


# ── status ────────────────────────────────────────────────────────────────────


@app.command()
def status(ctx: typer.Context) -> None:
    """List staged, unstaged, and untracked files."""
    from tinydiff.errors import TinyDiffError
    from tinydiff.output import json_report, terminal

    repo, session = _session(ctx)
    try:
        result = repo.status()
    except TinyDiffError as exc:
        raise _fail("Git error", exc) from exc

    if session.format == "json":
        print(json_report.render(json_report.status_to_dict(result)))
    else:
        terminal.render_status(result)


# ── diff ──────────────────────────────────────────────────────────────────────


@app.command()
def diff(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Repository-relative file path"),
    staged: bool = typer.Option(False, "--staged", help="Compare HEAD with the index"),
) -> None:
    """Show the hunks of one file."""
    from tinydiff.errors import TinyDiffError
    from tinydiff.git.models import DiffTarget
    from tinydiff.output import json_report, terminal

    repo, session = _session(ctx)
    target = DiffTarget.STAGED if staged else DiffTarget.UNSTAGED
    try:
        result = repo.diff(path, target)
    except TinyDiffError as exc:
        raise _fail("Error", exc) from exc

    if session.format == "json":
        print(json_report.render(json_report.diff_to_dict(result)))
    else:
        terminal.render_diff(result)


# ── show ──────────────────────────────────────────────────────────────────────


@app.command()
def show(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Repository-relative file path"),
    staged: bool = typer.Option(False, "--staged", help="Compare HEAD with the index"),
) -> None:
    """Show both sides of a file for side-by-side viewing."""
    from tinydiff.errors import TinyDiffError
    from tinydiff.git.models import DiffTarget
    from tinydiff.output import json_report, terminal

    repo, session = _session(ctx)
    target = DiffTarget.STAGED if staged else DiffTarget.UNSTAGED
    try:
        result = repo.file_contents_for_diff(path, target)
    except TinyDiffError as exc:
        raise _fail("Error", exc) from exc

    if session.format == "json":
        print(json_report.render(json_report.contents_to_dict(result)))
    else:
        terminal.render_contents(result)


# ── comments ──────────────────────────────────────────────────────────────────


@comments_app.command("list")
def comments_list(
    ctx: typer.Context,
    path: Optional[str] = typer.Argument(None, help="Only comments on this file"),
) -> None:
    """List comments, re-anchored against the working tree when a file is given."""
    from tinydiff.comments.store import CommentStore
    from tinydiff.errors import TinyDiffError
    from tinydiff.output import json_report, terminal

    _, session = _session(ctx)
    store = CommentStore(session.root)
    try:
        if path is None:
            found = store.load().comments
        else:
            text = _working_text(session.root, path)
            if text is None:
                found = [c for c in store.load().comments if c.file_path == path]
            else:
                found = store.comments_for_file(path, text)
    except TinyDiffError as exc:
        raise _fail("Error", exc) from exc

    if session.format == "json":
        print(json_report.render(json_report.comments_to_list(found)))
    else:
        terminal.render_comments(found)


@comments_app.command("add")
def comments_add(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Repository-relative file path"),
    line: int = typer.Argument(..., min=1, help="1-based line number"),
    body: str = typer.Argument(..., help="Comment text"),
    comment_id: Optional[str] = typer.Option(None, "--id", help="Comment id (default: random)"),
) -> None:
    """Attach a comment to a line; it follows the line as the file changes."""
    from tinydiff.comments.models import Comment
    from tinydiff.comments.store import CommentStore
    from tinydiff.errors import TinyDiffError
    from tinydiff.output import json_report

    _, session = _session(ctx)
    store = CommentStore(session.root)
    try:
        existing = store.load().find(comment_id) if comment_id else None
        comment = Comment.create(comment_id or uuid.uuid4().hex, path, line, body)
        if existing is not None:
            comment.created_at = existing.created_at
            comment.resolved = existing.resolved
        saved = store.upsert(comment, _working_text(session.root, path))
    except TinyDiffError as exc:
        raise _fail("Error", exc) from exc

    if session.format == "json":
        print(json_report.render(json_report.comments_to_list([saved])))
    else:
        console.print(f"[green]✓[/green] Saved comment {saved.id} on {saved.file_path}:{saved.line}")


@comments_app.command("resolve")
def comments_resolve(
    ctx: typer.Context,
    comment_id: str = typer.Argument(..., help="Comment id"),
    reopen: bool = typer.Option(False, "--reopen", help="Mark unresolved instead"),
) -> None:
    """Mark a comment resolved."""
    from tinydiff.comments.store import CommentStore
    from tinydiff.errors import TinyDiffError

    _, session = _session(ctx)
    store = CommentStore(session.root)
    try:
        current = store.load().find(comment_id)
        if current is None:
            console.print(f"[red]✗[/red] No comment with id {comment_id}")
            raise typer.Exit(code=1)
        text = _working_text(session.root, current.file_path)
        updated = store.set_resolved(comment_id, not reopen, text)
    except TinyDiffError as exc:
        raise _fail("Error", exc) from exc

    if updated is None:
        console.print(f"[red]✗[/red] No comment with id {comment_id}")
        raise typer.Exit(code=1)
    state = "reopened" if reopen else "resolved"
    console.print(f"[green]✓[/green] Comment {comment_id} {state}")


@comments_app.command("delete")
def comments_delete(
    ctx: typer.Context,
    comment_id: str = typer.Argument(..., help="Comment id"),
) -> None:
    """Delete a comment."""
    from tinydiff.comments.store import CommentStore
    from tinydiff.errors import TinyDiffError

    _, session = _session(ctx)
    try:
        removed = CommentStore(session.root).delete(comment_id)
    except TinyDiffError as exc:
        raise _fail("Error", exc) from exc

    if not removed:
        console.print(f"[red]✗[/red] No comment with id {comment_id}")
        raise typer.Exit(code=1)
    console.print(f"[green]✓[/green] Deleted comment {comment_id}")


# ── init ──────────────────────────────────────────────────────────────────────


@app.command()
def init(ctx: typer.Context) -> None:
    """Generate a starter .tinydiff.toml in the repo root."""
    from tinydiff.config.defaults import DEFAULT_TOML
    from tinydiff.config.loader import CONFIG_FILE

    options: _Options = ctx.obj or _Options()
    repo_root = _resolve_repo_root(options)
    config_path = repo_root / CONFIG_FILE

    if config_path.exists():
        console.print(f"[yellow]⚠[/yellow]  {CONFIG_FILE} already exists at {config_path}")
        raise typer.Exit(code=1)

    config_path.write_text(DEFAULT_TOML, encoding="utf-8")
    console.print(f"[green]✓[/green] Created {config_path}")


# ── version ───────────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    if value:
        print(f"tinydiff {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    repo: Optional[str] = typer.Option(None, "--repo", "-r", help="Repository path (default: cwd)"),
    format: Optional[str] = typer.Option(None, "--format", "-f", help="Output format: terminal | json"),
    config: Optional[str] = typer.Option(None, "--config", "-c", help="Path to .tinydiff.toml"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    version: bool = typer.Option(
        False, "--version", "-V", callback=_version_callback,
        is_eager=True, help="Show version and exit",
    ),
) -> None:
    """tinydiff — working-tree diffs with content-anchored comments."""
    ctx.obj = _Options(repo=repo, format=format, config=config, verbose=verbose)
