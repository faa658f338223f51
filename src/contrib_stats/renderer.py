"""Rich-based terminal report renderer with JSON/CSV support."""

from __future__ import annotations

import csv
import io
import json
from dataclasses import asdict

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .models import AuthorsReport, ContributorStatistics, LightweightCommit

_SORT_LABELS = {
    "commits": "Commits",
    "additions": "Additions",
    "deletions": "Deletions",
    "lines": "Lines",
}


def _format_number(n: int) -> str:
    return f"{n:,}"


def _make_bar(percentage: float, width: int = 20) -> str:
    filled = round(percentage / 100 * width)
    return "█" * filled + "░" * (width - filled)


def _write_to_file(content: str, output_file: str) -> None:
    """Write content to a file and print confirmation."""
    with open(output_file, "w", encoding="utf-8") as f:
        f.write(content)
    Console(stderr=True).print(f"Saved to {output_file}")


def render_report(
    report: AuthorsReport,
    top_n: int = 10,
    sort_by: str = "commits",
    output_file: str | None = None,
) -> None:
    """Render an AuthorsReport to the terminal using rich."""
    if output_file:
        string_io = io.StringIO()
        console = Console(file=string_io, force_terminal=False, width=120)
    else:
        console = Console()

    # Header panel
    subtitle = ""
    if report.period_start or report.period_end:
        start = report.period_start or "..."
        end = report.period_end or "..."
        subtitle += f"\nPeriod: {start} ~ {end}"
    if report.file_match:
        subtitle += f"\nFiles matching: {report.file_match}"

    console.print(Panel(
        Text(f"contrib-stats: {report.org}{subtitle}", justify="center"),
        style="bold cyan",
    ))
    console.print()

    if report.failed_repos:
        console.print(
            f"[bold yellow]Warning:[/bold yellow] Failed to collect stats for "
            f"{len(report.failed_repos)} repo(s): {', '.join(report.failed_repos)}"
        )
        console.print()

    console.print("[bold]Summary[/bold]")
    summary = Table(show_header=False, box=None, padding=(0, 2))
    summary.add_column("label", style="dim")
    summary.add_column("value", style="bold")
    summary.add_row("Repositories", _format_number(report.total_repos))
    summary.add_row("Authors", _format_number(len(report.authors)))
    summary.add_row("Total Commits", _format_number(report.total_commits))
    summary.add_row("Additions", _format_number(report.total_additions))
    summary.add_row("Deletions", _format_number(report.total_deletions))
    console.print(summary)
    console.print()

    # Repository summary table (only when multiple repos)
    if len(report.repos) > 1:
        console.print("[bold]Repository Summary[/bold]")
        repo_table = Table(show_header=True, header_style="bold")
        repo_table.add_column("Repo")
        repo_table.add_column("Commits", justify="right")
        repo_table.add_column("Additions", justify="right")
        repo_table.add_column("Deletions", justify="right")
        repo_table.add_column("Top Author")
        repo_table.add_column("Authors", justify="right")

        for r in sorted(report.repos, key=lambda r: r.total_commits, reverse=True):
            repo_table.add_row(
                r.name,
                _format_number(r.total_commits),
                _format_number(sum(a.additions for a in r.authors)),
                _format_number(sum(a.deletions for a in r.authors)),
                r.authors[0].id if r.authors else "-",
                str(len(r.authors)),
            )
        console.print(repo_table)
        console.print()

    if report.authors:
        console.print(f"[bold]Top Authors (top {top_n})[/bold]")
        author_table = Table(show_header=True, header_style="bold")
        author_table.add_column("#", justify="right")
        author_table.add_column("Email")

        sort_label = _SORT_LABELS.get(sort_by, "Commits")
        for col in ["Commits", "Additions", "Deletions"]:
            label = f"{col} ▼" if col == sort_label else col
            author_table.add_column(label, justify="right")

        if sort_by == "lines":
            author_table.add_column("Lines ▼", justify="right")
        author_table.add_column("Share of Commits")

        for i, a in enumerate(report.authors[:top_n], 1):
            share = a.num_commits / report.total_commits * 100 if report.total_commits else 0.0
            row = [
                str(i),
                a.id,
                _format_number(a.num_commits),
                _format_number(a.additions),
                _format_number(a.deletions),
            ]
            if sort_by == "lines":
                row.append(_format_number(a.additions + a.deletions))
            row.append(f"{_make_bar(share, width=10)} {share:.1f}%")
            author_table.add_row(*row)
        console.print(author_table)
        console.print()

    if output_file:
        _write_to_file(string_io.getvalue(), output_file)


def render_json(report: AuthorsReport, output_file: str | None = None) -> None:
    """Render an AuthorsReport as JSON."""
    content = json.dumps(asdict(report), indent=2, ensure_ascii=False)
    if output_file:
        _write_to_file(content, output_file)
    else:
        print(content)


def render_csv(report: AuthorsReport, output_file: str | None = None) -> None:
    """Render per-repository author data as CSV."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(["repo", "email", "commits", "additions", "deletions"])
    for r in report.repos:
        for a in r.authors:
            writer.writerow([r.name, a.id, a.num_commits, a.additions, a.deletions])
    content = output.getvalue()
    if output_file:
        _write_to_file(content, output_file)
    else:
        print(content, end="")


def commits_to_csv(commits: list[LightweightCommit]) -> str:
    """Format commits as the ``SHA,ID,EMAIL`` export."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(["SHA", "ID", "EMAIL"])
    for c in commits:
        writer.writerow([c.sha, c.identity, c.author_email])
    return output.getvalue()


def render_activity(
    repo_name: str,
    stats: list[ContributorStatistics],
    output_format: str = "table",
) -> None:
    """Render precomputed weekly contributor activity."""
    if output_format == "json":
        print(json.dumps([asdict(s) for s in stats], indent=2, ensure_ascii=False))
        return

    console = Console()
    console.print(f"[bold]Weekly Activity: {repo_name}[/bold]")
    table = Table(show_header=True, header_style="bold")
    table.add_column("Contributor")
    table.add_column("Week")
    table.add_column("Commits", justify="right")
    table.add_column("Additions", justify="right")
    table.add_column("Deletions", justify="right")
    for s in sorted(stats, key=lambda s: s.num_commits, reverse=True):
        for week in s.history:
            if not week.commits:
                continue
            table.add_row(
                s.id,
                week.week_start_human,
                _format_number(week.commits),
                _format_number(week.additions),
                _format_number(week.deletions),
            )
    console.print(table)
