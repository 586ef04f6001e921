"""Where the desktop config document lives and how it gets written.

Two strategies share one interface:

- ``direct``: read and write the file at the path the desktop app expects.
- ``symlink``: keep the canonical file inside the project directory and point
  the app's path at it with a symbolic link.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol

from loguru import logger as log

from mcpkit.config import ConfigError, Settings
from mcpkit.document import atomic_write_json, backup_file

ConfirmOverwrite = Callable[[Path], bool]


@dataclass
class PersistResult:
    config_path: Path
    link_path: Path | None = None
    backup_paths: list[Path] = field(default_factory=list)
    wrote_changes: bool = False
    dry_run: bool = False
    cancelled: bool = False
    link_replaced: bool = False


class ConfigTarget(Protocol):
    config_path: Path

    def discover(self) -> Path | None: ...

    def persist(
        self,
        document: dict[str, Any],
        *,
        confirm_overwrite: ConfirmOverwrite,
        dry_run: bool = False,
    ) -> PersistResult: ...


def _always_yes(_: Path) -> bool:
    return True


class DirectTarget:
    """Write straight to the host-defined config path."""

    def __init__(self, host_path: Path):
        self.host_path = host_path

    @property
    def config_path(self) -> Path:
        # Writing through an existing link keeps it intact
        if self.host_path.is_symlink():
            return self.host_path.resolve()
        return self.host_path

    def discover(self) -> Path | None:
        return self.host_path if self.host_path.exists() else None

    def persist(
        self,
        document: dict[str, Any],
        *,
        confirm_overwrite: ConfirmOverwrite = _always_yes,
        dry_run: bool = False,
    ) -> PersistResult:
        target = self.config_path
        result = PersistResult(config_path=target, dry_run=dry_run)
        if dry_run:
            log.info("[dry-run] Would write config to {}", target)
            return result

        if target.exists():
            result.backup_paths.append(backup_file(target))
        atomic_write_json(target, document)
        log.info("Wrote config to {}", target)
        result.wrote_changes = True
        return result


class SymlinkTarget:
    """Keep the document in the project directory and link the host path to it."""

    def __init__(self, host_path: Path, config_path: Path):
        self.host_path = host_path
        self.config_path = config_path

    def discover(self) -> Path | None:
        for candidate in (self.host_path, self.config_path):
            if candidate.exists():
                return candidate
        return None

    def _links_to_config(self) -> bool:
        return self.host_path.is_symlink() and self.host_path.resolve() == self.config_path.resolve()

    def persist(
        self,
        document: dict[str, Any],
        *,
        confirm_overwrite: ConfirmOverwrite = _always_yes,
        dry_run: bool = False,
    ) -> PersistResult:
        result = PersistResult(
            config_path=self.config_path, link_path=self.host_path, dry_run=dry_run
        )
        log.debug("Config path: {}", self.config_path)
        log.debug("Symlink path: {}", self.host_path)

        replace_regular_file = False
        if self.host_path.is_symlink():
            if not self._links_to_config():
                log.info("Existing symlink found at {}", self.host_path)
                if not confirm_overwrite(self.host_path):
                    log.info("Existing configuration link kept; nothing written")
                    result.cancelled = True
                    return result
        elif self.host_path.is_dir():
            raise ConfigError(f"Expected a file or symlink at {self.host_path}", self.host_path)
        elif self.host_path.exists():
            replace_regular_file = True

        if dry_run:
            log.info(
                "[dry-run] Would write config to {} and link {} to it",
                self.config_path,
                self.host_path,
            )
            return result

        if self.config_path.exists():
            result.backup_paths.append(backup_file(self.config_path))
        if replace_regular_file:
            result.backup_paths.append(backup_file(self.host_path))

        atomic_write_json(self.config_path, document)
        log.info("Wrote config to {}", self.config_path)
        if not self._links_to_config():
            self._replace_link()
            log.info("Linked {} -> {}", self.host_path, self.config_path)
            result.link_replaced = True
        result.wrote_changes = True
        return result

    def _replace_link(self) -> None:
        self.host_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_link = self.host_path.with_name(f".{self.host_path.name}.{os.getpid()}.tmp")
        tmp_link.unlink(missing_ok=True)
        os.symlink(self.config_path, tmp_link)
        try:
            tmp_link.replace(self.host_path)
        finally:
            if tmp_link.is_symlink():
                tmp_link.unlink()


def make_target(settings: Settings, project_dir: Path) -> ConfigTarget:
    if settings.strategy == "direct":
        return DirectTarget(settings.host_config_path)
    return SymlinkTarget(settings.host_config_path, project_dir / settings.config_filename)
