"""Rich terminal rendering — status tables, coloured hunks, comment lists."""

from __future__ import annotations

from typing import List, Optional

from rich.console import Console
from rich.table import Table
from rich.text import Text

from tinydiff.comments.models import Comment, OrphanedAnchor, PinnedAnchor
from tinydiff.content import BinaryContent, FileContent
from tinydiff.git.models import FileContents, FileDiff, FileEntry, FileKind, LineKind, RepositoryStatus

_KIND_STYLE = {
    FileKind.ADDED: "green",
    FileKind.MODIFIED: "yellow",
    FileKind.DELETED: "red",
    FileKind.RENAMED: "cyan",
    FileKind.UNTRACKED: "bright_black",
    FileKind.TYPECHANGE: "magenta",
    FileKind.CONFLICTED: "bold red",
}

_KIND_LETTER = {
    FileKind.ADDED: "A",
    FileKind.MODIFIED: "M",
    FileKind.DELETED: "D",
    FileKind.RENAMED: "R",
    FileKind.UNTRACKED: "?",
    FileKind.TYPECHANGE: "T",
    FileKind.CONFLICTED: "U",
}

_LINE_STYLE = {
    LineKind.ADDITION: "green",
    LineKind.DELETION: "red",
    LineKind.CONTEXT: "",
}

_LINE_MARKER = {
    LineKind.ADDITION: "+",
    LineKind.DELETION: "-",
    LineKind.CONTEXT: " ",
}


def _entry_text(entry: FileEntry) -> Text:
    style = _KIND_STYLE.get(entry.kind, "")
    text = Text(f" {_KIND_LETTER[entry.kind]} ", style=f"bold {style}")
    if entry.old_path:
        text.append(f"{entry.old_path} → {entry.path}", style=style)
    else:
        text.append(entry.path, style=style)
    return text


def render_status(status: RepositoryStatus, console: Optional[Console] = None) -> None:
    """Print the three change lists."""
    console = console or Console()

    if status.is_clean:
        console.print("[bold green]Working tree clean.[/bold green]")
        return

    for title, entries in (
        ("Staged", status.staged),
        ("Unstaged", status.unstaged),
        ("Untracked", status.untracked),
    ):
        if not entries:
            continue
        console.print(f"[bold]{title}[/bold] [dim]({len(entries)})[/dim]")
        for entry in entries:
            console.print(_entry_text(entry))
        console.print()


def render_diff(diff: FileDiff, console: Optional[Console] = None) -> None:
    """Print a file diff with line numbers in two gutters."""
    console = console or Console()

    title = f"{diff.old_path} → {diff.path}" if diff.old_path else diff.path
    console.print(f"[bold]{title}[/bold]")

    if diff.is_binary:
        console.print("[dim]Binary file — no textual diff.[/dim]")
        return
    if not diff.hunks:
        console.print("[dim]No changes.[/dim]")
        return

    for hunk in diff.hunks:
        console.print(Text(hunk.header, style="cyan"))
        for line in hunk.lines:
            old_no = str(line.old_line_no) if line.old_line_no is not None else ""
            new_no = str(line.new_line_no) if line.new_line_no is not None else ""
            row = Text(f"{old_no:>5} {new_no:>5} ", style="dim")
            row.append(f"{_LINE_MARKER[line.kind]}{line.text}", style=_LINE_STYLE[line.kind])
            console.print(row)


def _describe(content: Optional[FileContent]) -> str:
    if content is None:
        return "absent"
    if isinstance(content, BinaryContent):
        return f"binary, {content.size} bytes"
    return f"text, {len(content.contents.splitlines())} lines"


def render_contents(contents: FileContents, console: Optional[Console] = None) -> None:
    """Summarise both sides of a comparison."""
    console = console or Console()
    table = Table(show_lines=False, title_style="bold", border_style="dim")
    table.add_column("Side", style="bold")
    table.add_column("File", style="magenta")
    table.add_column("Language", style="cyan")
    table.add_column("Content")
    for label, side in (("old", contents.old_file), ("new", contents.new_file)):
        table.add_row(label, side.name, side.lang or "-", _describe(side.content))
    console.print(table)


def _anchor_label(comment: Comment) -> Text:
    anchor = comment.anchor
    if isinstance(anchor, PinnedAnchor):
        return Text("pinned", style="dim")
    if isinstance(anchor, OrphanedAnchor):
        return Text("orphaned", style="bold yellow")
    return Text("tracked", style="green")


def render_comments(comments: List[Comment], console: Optional[Console] = None) -> None:
    """Print comments as a table, in stored order."""
    console = console or Console()

    if not comments:
        console.print("[dim]No comments.[/dim]")
        return

    table = Table(title="Comments", show_lines=True, title_style="bold", border_style="dim")
    table.add_column("ID", style="cyan")
    table.add_column("File", style="magenta")
    table.add_column("Line", justify="right", style="green")
    table.add_column("Anchor", justify="center")
    table.add_column("Resolved", justify="center")
    table.add_column("Body", min_width=20)

    for comment in comments:
        table.add_row(
            comment.id,
            comment.file_path,
            str(comment.line),
            _anchor_label(comment),
            "✓" if comment.resolved else "",
            comment.body,
        )
    console.print(table)
