"""Rich console output and markdown export for fused trend reports."""

import logging
import re
from datetime import datetime
from pathlib import Path

from rich.console import Console
from rich.markdown import Markdown
from rich.panel import Panel
from rich.rule import Rule
from rich.table import Table
from rich.text import Text

from trendfusion.models import CompositeResponse, DetailLevel, GenerationOutcome, SavedReport

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

_DEPTH_LABELS = {
    DetailLevel.HIGH_LEVEL: "High-level summary",
    DetailLevel.IN_DEPTH: "In-depth analysis",
}


def _slug(text: str, max_len: int = 40) -> str:
    """Convert text to a filename-safe slug."""
    slug = re.sub(r"[^\w\s-]", "", text.lower())
    slug = re.sub(r"[\s_-]+", "-", slug).strip("-")
    return slug[:max_len]


def _preview(text: str, words: int = 50) -> str:
    """Return first N words of a text."""
    all_words = text.split()
    preview = " ".join(all_words[:words])
    if len(all_words) > words:
        preview += "..."
    return preview


def _status(outcome: GenerationOutcome) -> str:
    return "[green]OK[/green]" if outcome.success else "[red]unavailable[/red]"


def print_generations(result: CompositeResponse) -> None:
    """Print one panel per provider report."""
    console.print(Rule("[bold cyan]Provider Reports[/bold cyan]"))
    for name, outcome in result.generations.items():
        if outcome.success:
            body = Text(_preview(outcome.text))
        else:
            body = Text.assemble((outcome.text, "red"), "\n", (outcome.error_detail, "dim"))
        console.print(
            Panel(
                body,
                title=f"[bold]{name}[/bold] ({outcome.model})",
                subtitle=f"{outcome.latency_sec:.1f}s",
                border_style="dim" if outcome.success else "red",
            )
        )


def print_critique_matrix(result: CompositeResponse) -> None:
    """Print which (subject, critic) reviews came back."""
    names = list(result.generations)
    table = Table(title="Cross-validation", show_lines=False)
    table.add_column("Report \\ Critic", style="bold")
    for critic in names:
        table.add_column(critic, justify="center")
    for subject in names:
        cells = [
            "-" if subject == critic else _status(result.critiques[(subject, critic)])
            for critic in names
        ]
        table.add_row(subject, *cells)
    console.print(table)


def print_summary(result: CompositeResponse) -> None:
    """Print the fused summary using Rich markdown."""
    console.print(Rule("[bold green]Fused Trend Report[/bold green]"))
    console.print(
        Text(
            f"Topic: {result.topic} | "
            f"Depth: {_DEPTH_LABELS[result.detail_level]} | "
            f"Referee: {result.referee} | "
            f"Duration: {result.total_duration_sec:.1f}s",
            style="dim",
        )
    )
    if result.summary.success:
        console.print(Markdown(result.summary.text))
    else:
        console.print(Text.assemble((result.summary.text, "bold red"), " ", (result.summary.error_detail, "dim")))


def print_history(reports: list[SavedReport]) -> None:
    """Print saved reports, newest first."""
    if not reports:
        console.print("No saved reports.")
        return
    table = Table(title="Saved reports")
    table.add_column("#", justify="right")
    table.add_column("Topic")
    table.add_column("Depth")
    table.add_column("Last updated")
    labels_by_value = {level.value: label for level, label in _DEPTH_LABELS.items()}
    for index, report in enumerate(reversed(reports), start=1):
        depth = labels_by_value.get(report.detail_level, str(report.detail_level))
        table.add_row(str(index), Text(report.topic), depth, report.last_updated)
    console.print(table)


def save_to_file(result: CompositeResponse, output_dir: Path) -> Path:
    """Export the full report (summary, provider reports, critiques) as markdown.

    Args:
        result: The completed CompositeResponse.
        output_dir: Directory to save the file in.

    Returns:
        Path to the saved file.
    """
    output_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    filepath = output_dir / f"{timestamp}_{_slug(result.topic)}.md"

    panel_str = ", ".join(f"{name} ({g.model})" for name, g in result.generations.items())
    unavailable = (
        sum(1 for g in result.generations.values() if not g.success)
        + sum(1 for c in result.critiques.values() if not c.success)
        + (0 if result.summary.success else 1)
    )

    lines: list[str] = [
        f"# Trend Report: {result.topic}",
        "",
        f"**Date:** {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"**Depth:** {_DEPTH_LABELS[result.detail_level]}",
        f"**Panel:** {panel_str}",
        f"**Referee:** {result.referee}",
        f"**Duration:** {result.total_duration_sec:.1f}s",
        f"**Unavailable sections:** {unavailable}",
        "",
        "---",
        "",
        "## Fused Summary",
        "",
        result.summary.text,
        "",
        "## Provider Reports",
        "",
    ]

    for name, outcome in result.generations.items():
        lines.append(f"### {name} ({outcome.model})")
        lines.append("")
        lines.append(outcome.text)
        lines.append("")
        if outcome.success:
            lines.append(
                f"*Latency: {outcome.latency_sec:.2f}s"
                + (f" | Tokens: {outcome.token_count}" if outcome.token_count else "")
                + "*"
            )
            lines.append("")

    lines += ["## Cross-validations", ""]
    for (subject, critic), outcome in result.critiques.items():
        lines.append(f"### {subject} by {critic}")
        lines.append("")
        lines.append(outcome.text)
        lines.append("")

    filepath.write_text("\n".join(lines), encoding="utf-8")
    logger.info("Report saved to: %s", filepath)
    return filepath
