"""
CLI interface for Session Statusline.

Invoked without a subcommand it reads a session snapshot from stdin and
prints the status lines; the subcommands inspect and manage the usage ledger.
"""

import json
import logging
import sys
from dataclasses import dataclass
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from session_statusline.config.loader import (
    CONFIG_ENV_VAR,
    DEFAULT_CONFIG_PATH,
    StatuslineConfig,
    load_or_default,
)
from session_statusline.core.snapshot import SessionSnapshot
from session_statusline.core.usage_store import (
    current_time_ms,
    prune_events,
    record_observation,
)
from session_statusline.core.window import compute_window_stats
from session_statusline.render import build_statusline, collect_git_info
from session_statusline.render.format import format_time_left
from session_statusline.storage.repository import UsageRepository

logger = logging.getLogger(__name__)

app = typer.Typer()
console = Console()
# Status lines always carry 256-color escapes; the host terminal renders them
status_console = Console(force_terminal=True, color_system="256", highlight=False, soft_wrap=True)

EXIT_CODE_PASS = 0
EXIT_CODE_FAIL = 1

EMPTY_INPUT_MARKER = "…"
FALLBACK_MESSAGE = "status unavailable"


@dataclass(frozen=True)
class CliOptions:
    """Options shared by every command."""
    config_path: str
    db_path: Optional[str] = None

    def load_config(self) -> StatuslineConfig:
        return load_or_default(self.config_path)

    def repository(self, config: StatuslineConfig) -> UsageRepository:
        return UsageRepository(self.db_path or config.database)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: str = typer.Option(
        DEFAULT_CONFIG_PATH,
        "--config",
        "-c",
        envvar=CONFIG_ENV_VAR,
        help="Path to YAML configuration file"
    ),
    db: Optional[str] = typer.Option(
        None,
        "--db",
        envvar="SESSION_STATUSLINE_DB",
        help="Override the usage database path"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log diagnostics to stderr"
    )
):
    """Session Statusline CLI."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s"
    )
    ctx.obj = CliOptions(config_path=config, db_path=db)
    if ctx.invoked_subcommand is None:
        _render_from_stdin(ctx.obj)


@app.command()
def render(ctx: typer.Context):
    """Read a session snapshot from stdin and print the status lines."""
    _render_from_stdin(ctx.obj)


def _render_from_stdin(options: CliOptions) -> None:
    try:
        raw = sys.stdin.read().strip()
        if not raw:
            status_console.print(EMPTY_INPUT_MARKER)
            return

        config = options.load_config()
        snapshot = SessionSnapshot.from_dict(json.loads(raw))
        now = current_time_ms()

        store = record_observation(
            options.repository(config),
            snapshot.session_id,
            snapshot.total_input_tokens,
            snapshot.total_output_tokens,
            now,
            config.retention_ms
        )
        windows = [
            (window, compute_window_stats(store.events, window.duration_ms, window.limit, now))
            for window in config.windows
        ]
        git = collect_git_info(snapshot.current_dir, config.git_timeout)
        lines = build_statusline(snapshot, windows, git, config.bar_width)
    except Exception:
        # Never break the host's status bar
        logger.debug("Status rendering failed", exc_info=True)
        status_console.print(Text(FALLBACK_MESSAGE, style="dim"))
        return

    for line in lines:
        status_console.print(line)


@app.command()
def usage(ctx: typer.Context):
    """Show estimated quota consumption for each tracked window.

    This is a read-only operation: nothing is recorded or pruned on disk.
    """
    options: CliOptions = ctx.obj
    try:
        config = options.load_config()
        now = current_time_ms()
        store = prune_events(options.repository(config).load(), now, config.retention_ms)

        table = Table(title="Estimated Quota Usage")
        table.add_column("Window")
        table.add_column("Tokens", justify="right")
        table.add_column("Limit", justify="right")
        table.add_column("Used", justify="right")
        table.add_column("Resets in", justify="right")

        for window in config.windows:
            stats = compute_window_stats(store.events, window.duration_ms, window.limit, now)
            table.add_row(
                f"{window.label} ({window.name})",
                f"{stats.total_tokens:,}",
                f"{window.limit:,}",
                f"{stats.percentage:.1f}%",
                format_time_left(stats.time_remaining_ms)
            )

        console.print(table)
        console.print(
            f"[dim]{len(store.events)} events from {len(store.session_ids)} sessions[/]"
        )
    except Exception as e:
        console.print(f"[red]Error:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command()
def reset(
    ctx: typer.Context,
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Skip the confirmation prompt"
    )
):
    """Delete all recorded usage and session watermarks."""
    options: CliOptions = ctx.obj
    if not yes:
        typer.confirm("Delete all recorded usage?", abort=True)
    try:
        options.repository(options.load_config()).reset()
        console.print("[green]✓[/] Usage history cleared")
    except Exception as e:
        console.print(f"[red]Error resetting usage:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


@app.command()
def init(ctx: typer.Context):
    """Initialize the usage database."""
    options: CliOptions = ctx.obj
    try:
        repository = options.repository(options.load_config())
        repository.initialize_schema()
        console.print(f"[green]✓[/] Database initialized at {repository.path}")
    except Exception as e:
        console.print(f"[red]Error initializing database:[/] {str(e)}")
        sys.exit(EXIT_CODE_FAIL)


if __name__ == "__main__":
    app()
