from __future__ import annotations

import shutil
from collections.abc import Callable, Iterable
from pathlib import Path

from loguru import logger as log

from mcpkit.config import McpkitError

CLAUDE_DOWNLOAD_URL = "https://claude.ai/download"


class PreflightError(McpkitError):
    """Raised when the host environment is not ready for setup"""


def check_host_app(host_app_dir: Path) -> None:
    if not host_app_dir.is_dir():
        raise PreflightError(
            "Claude desktop application is not installed.\n"
            f"Please download and install Claude desktop from {CLAUDE_DOWNLOAD_URL}",
            host_app_dir,
        )
    log.debug("Found host application directory at {}", host_app_dir)


def check_required_tools(
    tools: Iterable[str], *, which: Callable[[str], str | None] = shutil.which
) -> None:
    for tool in tools:
        location = which(tool)
        if location is None:
            raise PreflightError(
                f"{tool} is required but not installed.\nPlease install {tool} and try again."
            )
        log.debug("Found {} at {}", tool, location)


def run_preflight(
    host_app_dir: Path,
    tools: Iterable[str],
    *,
    which: Callable[[str], str | None] = shutil.which,
) -> None:
    """Fail fast before anything on disk is touched."""
    check_host_app(host_app_dir)
    check_required_tools(tools, which=which)
