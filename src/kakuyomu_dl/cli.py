"""CLI entry point for kakuyomu-dl."""

import asyncio
import sys
from datetime import date
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TaskID, TextColumn
from rich.table import Table

from kakuyomu_dl.config.logging import setup_logging
from kakuyomu_dl.config.manager import ConfigManager
from kakuyomu_dl.config.schema import GlobalConfig
from kakuyomu_dl.listfile import load_list
from kakuyomu_dl.pipeline import DownloadOptions, DownloadOrchestrator, parse_update_date
from kakuyomu_dl.utils.errors import DiscoveryError, FetchError, KakuyomuDLError

URL_PREFIX = "https://kakuyomu.jp"
WORKS_PREFIX = URL_PREFIX + "/works/"

app = typer.Typer(
    name="kakuyomu-dl",
    help="Download Kakuyomu web novels as Aozora Bunko formatted text",
    no_args_is_help=True,
)
config_app = typer.Typer(name="config", help="Show or change configuration")
app.add_typer(config_app)

console = Console()


class ProgressReporter:
    """Render pipeline progress events with a rich progress bar."""

    def __init__(self, progress: Progress) -> None:
        self.progress = progress
        self.task: TaskID | None = None

    def __call__(self, step_name: str, step_data: dict[str, Any]) -> None:
        if step_name == "target_start":
            self.progress.console.print(
                f"\n[bold]({step_data['index']}/{step_data['total']})[/bold] {escape(step_data['title'])}"
            )

        elif step_name == "discovery_start":
            self.progress.console.print(f"[dim]Resolving episodes: {escape(step_data['url'])}[/dim]")

        elif step_name == "discovery_complete":
            if self.task is not None:
                self.progress.remove_task(self.task)
            self.task = self.progress.add_task(
                "Downloading", total=step_data["episode_count"]
            )

        elif step_name == "episode_complete":
            if self.task is not None:
                self.progress.advance(self.task)

        elif step_name == "save_complete":
            self.progress.console.print(
                f"[green]✓[/green] Saved {step_data['chars']:,} characters to "
                f"[cyan]{escape(step_data['path'])}[/cyan]"
            )

        elif step_name == "save_skipped":
            self.progress.console.print(
                f"[yellow]Dry run:[/yellow] not writing {escape(step_data['path'])}"
            )


def _make_progress() -> Progress:
    return Progress(
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        console=console,
    )


def _parse_since(update: str | None) -> date | None:
    if update is None:
        return None
    try:
        return parse_update_date(update)
    except ValueError as e:
        raise typer.BadParameter(str(e), param_hint="--update") from e


def _load_config(save_dir: Path | None, dry_run: bool = False) -> GlobalConfig:
    config = ConfigManager().load_config(create_default=not dry_run)
    if save_dir is not None:
        config = config.model_copy(update={"save_dir": save_dir})
    return config


def _fail(message: str, code: int = 1) -> None:
    console.print(f"[red]✗[/red] {escape(message)}")
    sys.exit(code)


@app.callback()
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose (DEBUG) logging"
    ),
    log_file: Path | None = typer.Option(
        None, "--log-file", help="Write logs to file"
    ),
) -> None:
    """kakuyomu-dl - Download Kakuyomu novels in Aozora Bunko format."""
    level = "WARNING"
    try:
        level = ConfigManager().load_config(create_default=False).log_level
    except KakuyomuDLError:
        pass  # Reported by the command that needs the config

    setup_logging(verbose=verbose, log_file=log_file, level=level)


@app.command("version")
def show_version() -> None:
    """Show version information."""
    from kakuyomu_dl import __version__

    console.print(f"[bold cyan]kakuyomu-dl[/bold cyan] v{__version__}")


@app.command("download")
def download_command(
    url: str = typer.Argument(..., help="Table-of-contents URL of the work"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Output file (default: <savedir>/output.txt)"
    ),
    save_dir: Path | None = typer.Option(
        None, "--savedir", "-s", help="Directory to save into"
    ),
    update: str | None = typer.Option(
        None, "--update", "-u", help="Only download episodes published on/after YY-MM-DD"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Run without writing any files"
    ),
) -> None:
    """Download every episode of a work into one text file.

    Examples:
        kakuyomu-dl download https://kakuyomu.jp/works/1177354054881234567

        kakuyomu-dl download https://kakuyomu.jp/works/1177354054881234567 -o novel.txt
    """
    if not url.startswith(WORKS_PREFIX):
        _fail(f"URL must start with {WORKS_PREFIX}")

    since = _parse_since(update)

    async def run_download() -> None:
        config = _load_config(save_dir, dry_run)
        options = DownloadOptions(
            url=url,
            output_path=output or config.save_dir / "output.txt",
            dry_run=dry_run,
            since=since,
        )
        orchestrator = DownloadOrchestrator(config)

        with _make_progress() as progress:
            result = await orchestrator.run(options, progress_callback=ProgressReporter(progress))

        console.print(f"\n[bold green]✓ Complete![/bold green] {result.episode_count} episode(s)")

    try:
        asyncio.run(run_download())
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled by user[/yellow]")
        sys.exit(130)
    except DiscoveryError as e:
        _fail(f"Could not resolve episodes: {e}")
    except FetchError as e:
        _fail(f"Download failed: {e}")
    except KakuyomuDLError as e:
        _fail(f"Error: {e}")


@app.command("batch")
def batch_command(
    list_file: Path = typer.Argument(..., help="Crawl list file"),
    save_dir: Path | None = typer.Option(
        None, "--savedir", "-s", help="Directory to save into"
    ),
    update: str | None = typer.Option(
        None, "--update", "-u", help="Only download episodes published on/after YY-MM-DD"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Run without writing any files"
    ),
) -> None:
    """Download every work listed in a crawl list file.

    Each record gives a title, file_name and url; the work is written to
    <savedir>/<file_name>.txt. The first failure stops the run.
    """
    since = _parse_since(update)

    async def run_batch() -> None:
        config = _load_config(save_dir, dry_run)
        entries = load_list(list_file)

        if not entries:
            console.print(f"[yellow]No entries found in {list_file}[/yellow]")
            return

        orchestrator = DownloadOrchestrator(config)

        with _make_progress() as progress:
            results = await orchestrator.run_batch(
                entries,
                save_dir=config.save_dir,
                dry_run=dry_run,
                since=since,
                progress_callback=ProgressReporter(progress),
            )

        console.print(f"\n[bold green]✓ Complete![/bold green] {len(results)} work(s)")

    try:
        asyncio.run(run_batch())
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled by user[/yellow]")
        sys.exit(130)
    except DiscoveryError as e:
        _fail(f"Could not resolve episodes: {e}")
    except FetchError as e:
        _fail(f"Download failed: {e}")
    except KakuyomuDLError as e:
        _fail(f"Error: {e}")


@config_app.command("show")
def config_show() -> None:
    """Display current configuration."""
    try:
        manager = ConfigManager()
        config = manager.load_config()
    except KakuyomuDLError as e:
        _fail(f"Error: {e}")
        return

    console.print("\n[bold]kakuyomu-dl Configuration[/bold]\n")

    table = Table(show_header=False, box=None)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Config file", str(manager.config_file))
    table.add_row("", "")
    table.add_row("save_dir", str(config.save_dir))
    table.add_row("log_level", config.log_level)
    table.add_row("http.user_agent", config.http.user_agent)
    table.add_row("http.timeout_seconds", str(config.http.timeout_seconds))
    table.add_row("browser.headless", "✓" if config.browser.headless else "✗")
    table.add_row("browser.navigation_timeout_ms", str(config.browser.navigation_timeout_ms))
    table.add_row("browser.load_more_delay_ms", str(config.browser.load_more_delay_ms))
    table.add_row("browser.max_load_more_clicks", str(config.browser.max_load_more_clicks))

    console.print(table)


@config_app.command("set")
def config_set(
    key: str = typer.Argument(..., help="Config key, e.g. browser.headless"),
    value: str = typer.Argument(..., help="New value"),
) -> None:
    """Set a configuration value.

    Examples:
        kakuyomu-dl config set save_dir ~/novels

        kakuyomu-dl config set browser.load_more_delay_ms 800
    """
    try:
        ConfigManager().set_value(key, value)
    except KakuyomuDLError as e:
        _fail(str(e))
        return

    console.print(f"[green]✓[/green] Set [cyan]{key}[/cyan] = [yellow]{value}[/yellow]")


if __name__ == "__main__":
    app()
