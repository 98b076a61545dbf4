"""
Presentation layer for Session Statusline.

Turns a session snapshot and window stats into styled terminal lines.
"""

from .statusline import GitInfo, build_statusline, collect_git_info

__all__ = ["GitInfo", "build_statusline", "collect_git_info"]
