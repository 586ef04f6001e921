from __future__ import annotations

import json
import os
import shutil
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger as log

from mcpkit.config import ConfigError
from mcpkit.synthesizer import SERVERS_KEY, empty_document


def _timestamp() -> str:
    return datetime.now().strftime("%Y%m%d-%H%M%S")


def _ensure_parent_dir(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def dumps_document(data: dict[str, Any]) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    _ensure_parent_dir(path)
    tmp_fd, tmp_path = tempfile.mkstemp(prefix=path.name + ".", dir=str(path.parent))
    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8") as f:
            f.write(dumps_document(data))
        # Use replace to be atomic on POSIX
        Path(tmp_path).replace(path)
    finally:
        Path(tmp_path).unlink(missing_ok=True)


def load_document(path: Path) -> dict[str, Any]:
    """Read a desktop config document; a missing file yields an empty document."""
    if not path.exists():
        log.debug("No config at {}; starting from an empty document", path)
        return empty_document()
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigError(f"Malformed JSON at {path}: {e}", path) from e
    if not isinstance(data, dict):
        raise ConfigError(f"Expected top-level JSON object at {path}", path)
    servers = data.setdefault(SERVERS_KEY, {})
    if not isinstance(servers, dict):
        raise ConfigError(f"Expected '{SERVERS_KEY}' to be a JSON object at {path}", path)
    return data


def backup_file(path: Path) -> Path:
    """Copy ``path`` to a timestamped sibling and return the backup location."""
    backup_path = path.with_name(path.name + f".bak-{_timestamp()}")
    shutil.copy2(path, backup_path)
    log.info("Backed up {} -> {}", path, backup_path)
    return backup_path
