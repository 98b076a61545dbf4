"""
Three-line status layout.

Line 1: git branch • path • model
Line 2: session cost, tokens, context bar, duration, context breakdown
Line 3: one bar per tracked quota window
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from rich.text import Text

from session_statusline.config.loader import WindowConfig
from session_statusline.core.snapshot import SessionSnapshot
from session_statusline.core.window import WindowStats

from .format import (
    format_duration,
    format_time_left,
    model_version,
    progress_bar,
    round_half_up,
    shorten_path,
)
from .git import git_branch, git_dirty

GREEN = "color(70)"
YELLOW = "color(178)"
SEPARATOR = " • "
BRANCH_ICON = "⎇"


@dataclass(frozen=True)
class GitInfo:
    """Branch name and dirty flag; an empty branch means no repository."""
    branch: str = ""
    dirty: bool = False


def collect_git_info(cwd: str, timeout: float) -> GitInfo:
    """Look up git state for ``cwd``, skipping the dirty check outside a repo."""
    branch = git_branch(cwd, timeout)
    return GitInfo(branch=branch, dirty=git_dirty(cwd, timeout) if branch else False)


def _join(parts: Sequence[Text], separator: str = SEPARATOR) -> Text:
    return Text(separator, style="dim").join(parts)


def _location_line(snapshot: SessionSnapshot, git: GitInfo, home: Optional[str]) -> Text:
    parts = []
    if git.branch:
        segment = Text.assemble((BRANCH_ICON, GREEN), " ", (git.branch, "bold"))
        if git.dirty:
            segment.append("*", style=YELLOW)
        parts.append(segment)

    parts.append(Text(shorten_path(snapshot.current_dir, home=home), style="dim"))

    model = Text(snapshot.model_name)
    version = model_version(snapshot.model_id)
    if version:
        model.append(" ")
        model.append(f"v{version}", style="dim")
    parts.append(model)

    return _join(parts)


def _session_line(snapshot: SessionSnapshot, bar_width: int) -> Text:
    in_k = round_half_up(snapshot.total_input_tokens / 1000)
    out_k = round_half_up(snapshot.total_output_tokens / 1000)
    ctx_pct = snapshot.context_used_percentage
    ctx_used_k = round_half_up(ctx_pct / 100 * snapshot.context_window_size / 1000)
    ctx_total_k = round_half_up(snapshot.context_window_size / 1000)

    return Text.assemble(
        ("S:", "dim"), " ",
        (f"${snapshot.total_cost_usd:.2f}", YELLOW), " ",
        ("↑", "dim"), f"{in_k}k ",
        ("↓", "dim"), f"{out_k}k ",
        "[", progress_bar(ctx_pct, bar_width), "] ",
        f"{round_half_up(ctx_pct)}% ",
        (f"({format_duration(snapshot.total_duration_ms)})", "dim"),
        (SEPARATOR, "dim"),
        (f"{ctx_used_k}k/{ctx_total_k}k", "dim"),
    )


def _window_segment(window: WindowConfig, stats: WindowStats, bar_width: int) -> Text:
    return Text.assemble(
        (f"{window.label}:", "dim"), " ",
        "[", progress_bar(stats.percentage, bar_width), "] ",
        f"{round_half_up(stats.percentage)}% ",
        (f"({format_time_left(stats.time_remaining_ms)})", "dim"),
    )


def build_statusline(
    snapshot: SessionSnapshot,
    windows: Sequence[Tuple[WindowConfig, WindowStats]],
    git: GitInfo,
    bar_width: int = 10,
    home: Optional[str] = None
) -> List[Text]:
    """Lay out the three status lines.

    Args:
        snapshot: Parsed session metadata
        windows: Each tracked window with its computed stats
        git: Git state of the working directory
        bar_width: Cells per progress bar
        home: Home directory for path shortening (defaults to the user's)

    Returns:
        The three lines as styled rich Text
    """
    return [
        _location_line(snapshot, git, home),
        _session_line(snapshot, bar_width),
        _join([_window_segment(w, s, bar_width) for w, s in windows]),
    ]
