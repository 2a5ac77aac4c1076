"""Click CLI: loads config, builds providers, runs the fusion pipeline, prints and saves."""

import asyncio
import logging
import sys
from collections.abc import Sequence
from pathlib import Path

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from config.config_loader import AppConfig, ConfigError, load_config
from trendfusion.healthcheck import run_health_checks
from trendfusion.history import HistoryError, load_history, record_report
from trendfusion.models import CompositeResponse, GenerationOutcome
from trendfusion.orchestrator import FusionOrchestrator, InvalidRequestError
from trendfusion.output import print_critique_matrix, print_generations, print_history, print_summary, save_to_file
from trendfusion.prompts import parse_detail_level
from trendfusion.providers.base import AIProvider, ProviderError
from trendfusion.providers.registry import build_providers

logger = logging.getLogger(__name__)

console = Console(legacy_windows=False)

_STAGE_LABELS = {
    "generation": "Generation",
    "critique": "Cross-validation",
    "fusion": "Fusion",
}


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def _usable_panel(
    working: dict[str, AIProvider],
    referee: str,
) -> bool:
    """A panel can run if the referee survived and at least two providers remain."""
    return referee in working and len(working) >= 2


def _check_and_filter_providers(all_providers: dict[str, AIProvider], referee: str) -> dict[str, AIProvider]:
    """Run health checks, print results, and ask user what to do on failures.

    Returns the filtered dict of working providers. Exits if the user
    declines to continue or the remaining panel cannot run.
    """
    console.print("\n[bold]Checking providers...[/bold]")
    results: dict[str, tuple[bool, str]] = asyncio.run(run_health_checks(all_providers))

    failed_names: list[str] = []
    for name in all_providers:
        ok, err = results[name]
        if ok:
            console.print(f"  [green]OK  [/green] {name}")
        else:
            short_err = err.splitlines()[0][:120] if err else "unknown error"
            console.print(f"  [red]FAIL[/red] {name}: {escape(short_err)}")
            failed_names.append(name)

    if not failed_names:
        console.print()
        return all_providers

    working = {n: p for n, p in all_providers.items() if n not in failed_names}

    if not _usable_panel(working, referee):
        console.print(
            f"\n[bold red]Error:[/bold red] Need the referee ({referee}) and at least 2 working providers."
        )
        sys.exit(1)

    console.print(
        f"\n[yellow]{len(failed_names)} provider(s) failed:[/yellow] {', '.join(failed_names)}"
    )
    console.print(f"Working providers: {', '.join(working)}")

    if not click.confirm("Continue with working providers only?", default=True):
        sys.exit(0)

    console.print()
    return working


async def _run_report(
    topic: str,
    depth: str,
    config: AppConfig,
    providers: dict[str, AIProvider],
) -> CompositeResponse:
    orchestrator = FusionOrchestrator(
        providers=providers,
        referee=config.defaults.referee,
        prompts=config.prompts,
        max_topic_length=config.defaults.max_topic_length,
    )

    console.print(f"\n[bold cyan]Trend Fusion[/bold cyan] - {len(providers)} providers, referee: {orchestrator.referee}")
    console.print(f"Panel: {', '.join(orchestrator.provider_names)}")
    console.print(f"Topic: [italic]{escape(topic)}[/italic]\n")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Generating reports...", total=None)

        def on_stage_complete(stage: str, outcomes: Sequence[GenerationOutcome]) -> None:
            genuine = sum(1 for o in outcomes if o.success)
            progress.print(f"[green]OK[/green] {_STAGE_LABELS[stage]} complete ({genuine}/{len(outcomes)} genuine)")
            if stage == "generation":
                progress.update(task, description="Cross-validating...")
            elif stage == "critique":
                progress.update(task, description="Fusing...")

        return await orchestrator.run(topic, depth, on_stage_complete=on_stage_complete)


@click.command()
@click.argument("topic", required=False)
@click.option("--depth", type=click.Choice(["high-level", "in-depth"]), default=None,
              help="Research depth (default: from config)")
@click.option("--output", "output_path", default=None, help="Report export directory (default: from config)")
@click.option("--no-save", is_flag=True, default=False, help="Do not export the report as markdown")
@click.option("--no-history", is_flag=True, default=False, help="Do not record the report in local history")
@click.option("--history", "show_history", is_flag=True, default=False, help="List saved reports and exit")
@click.option("--verbose", is_flag=True, help="Enable DEBUG-level logging")
@click.option("--skip-health-check", is_flag=True, default=False,
              help="Skip the API connectivity check at startup")
def main(
    topic: str | None,
    depth: str | None,
    output_path: str | None,
    no_save: bool,
    no_history: bool,
    show_history: bool,
    verbose: bool,
    skip_health_check: bool,
) -> None:
    """Trend Fusion -- three-model trend research with cross-validation.

    \b
    Examples:
      trendfusion "electric vehicles"
      trendfusion "plant-based protein" --depth in-depth
      trendfusion "quantum computing" --no-save --skip-health-check
      trendfusion --history
    """
    if sys.platform == "win32":
        if hasattr(sys.stdout, "reconfigure"):
            sys.stdout.reconfigure(encoding="utf-8", errors="replace")
        if hasattr(sys.stderr, "reconfigure"):
            sys.stderr.reconfigure(encoding="utf-8", errors="replace")

    load_dotenv()
    _setup_logging(verbose)

    try:
        config = load_config()
    except (FileNotFoundError, ConfigError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {escape(str(exc))}")
        sys.exit(1)

    if show_history:
        try:
            print_history(load_history(config.defaults.history_file))
        except HistoryError as exc:
            console.print(f"[bold red]History error:[/bold red] {escape(str(exc))}")
            sys.exit(1)
        return

    if not topic:
        console.print("[bold red]Error:[/bold red] Provide a TOPIC argument or --history.")
        sys.exit(1)

    try:
        all_providers = build_providers(config)
    except (ConfigError, ProviderError) as exc:
        console.print(f"[bold red]Config error:[/bold red] {escape(str(exc))}")
        sys.exit(1)

    if not skip_health_check:
        all_providers = _check_and_filter_providers(all_providers, config.defaults.referee)

    effective_depth = depth if depth else config.defaults.detail_level
    try:
        parse_detail_level(effective_depth)
    except ValueError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        sys.exit(1)

    try:
        result = asyncio.run(_run_report(topic, effective_depth, config, all_providers))
    except InvalidRequestError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        sys.exit(1)

    print_generations(result)
    print_critique_matrix(result)
    print_summary(result)

    if not no_save:
        output_dir = Path(output_path) if output_path else config.defaults.output_dir
        saved_path = save_to_file(result, output_dir)
        console.print(f"\n[dim]Saved to: {saved_path}[/dim]")

    if not no_history:
        try:
            record_report(config.defaults.history_file, result)
        except HistoryError as exc:
            console.print(f"[yellow]Report not added to history:[/yellow] {escape(str(exc))}")


if __name__ == "__main__":
    main()
