"""
Git working-tree lookups for the status line.

Each lookup runs ``git`` with a timeout; failures of any kind mean
"no git information" and are never raised.
"""

import logging
import subprocess
from typing import List, Optional

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 2.0


def _run_git(args: List[str], cwd: str, timeout: float) -> Optional[str]:
    try:
        result = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("git %s failed in %s: %s", " ".join(args), cwd, e)
        return None
    if result.returncode != 0:
        return None
    return result.stdout


def git_branch(cwd: str, timeout: float = DEFAULT_TIMEOUT) -> str:
    """Current branch name, or ``""`` outside a repository."""
    output = _run_git(["rev-parse", "--abbrev-ref", "HEAD"], cwd, timeout)
    return output.strip() if output else ""


def git_dirty(cwd: str, timeout: float = DEFAULT_TIMEOUT) -> bool:
    """Whether the working tree has uncommitted changes."""
    output = _run_git(["status", "--porcelain"], cwd, timeout)
    return bool(output and output.strip())
