from __future__ import annotations

import os
import shlex
import shutil
import subprocess as _subprocess
from pathlib import Path

from loguru import logger as log

from mcpkit.config import McpkitError
from mcpkit.paths import is_macos, is_windows


class EditorError(McpkitError):
    pass


def editor_command(path: Path, environ: dict[str, str] | None = None) -> list[str]:
    """Pick the command used to open ``path``: $VISUAL, $EDITOR, then the platform opener."""
    env = os.environ if environ is None else environ
    for var in ("VISUAL", "EDITOR"):
        value = env.get(var, "").strip()
        if value:
            return [*shlex.split(value), str(path)]
    if is_macos():
        return ["open", "-t", str(path)]
    if is_windows():
        return ["notepad", str(path)]
    opener = shutil.which("xdg-open")
    if opener is None:
        raise EditorError("No editor found. Set $EDITOR and try again.", path)
    return [opener, str(path)]


def open_in_editor(path: Path) -> int:
    if not path.exists():
        raise EditorError(f"Config file not found at {path}", path)

    command = editor_command(path)
    log.info("Opening {} with {}", path, command[0])
    try:
        return _subprocess.call(command)
    except FileNotFoundError as e:
        raise EditorError(f"Editor not found: {command[0]}", path) from e
