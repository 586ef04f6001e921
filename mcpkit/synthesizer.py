"""Build the merged desktop configuration document.

The merge is additive: servers already present in the document and not
selected in this run are left untouched. Selected servers are written in
registry order after placeholder substitution.
"""

from __future__ import annotations

import copy
import re
from collections.abc import Iterable, Mapping
from enum import Enum
from pathlib import Path, PurePath
from typing import Any

from loguru import logger as log

from mcpkit.config import ConfigError
from mcpkit.registry import (
    PROJECT_DIR_PLACEHOLDER,
    REGISTRY,
    CapabilityServerSpec,
    UnknownServerId,
)

SERVERS_KEY = "mcpServers"


class MergePolicy(str, Enum):
    OVERWRITE = "overwrite"
    SKIP = "skip"

    def __str__(self) -> str:
        return self.value


class InvalidProjectDir(ValueError):
    def __init__(self, project_dir: object):
        self.project_dir = project_dir
        super().__init__(f"Project directory must be a non-empty absolute path, got {project_dir!r}")


def empty_document() -> dict[str, Any]:
    return {SERVERS_KEY: {}}


def validate_project_dir(project_dir: str | PurePath) -> str:
    raw = str(project_dir) if isinstance(project_dir, PurePath) else project_dir
    if not isinstance(raw, str) or not raw.strip():
        raise InvalidProjectDir(project_dir)
    if not Path(raw).is_absolute():
        raise InvalidProjectDir(project_dir)
    return raw


_PLACEHOLDER_RE = re.compile(re.escape(PROJECT_DIR_PLACEHOLDER) + r"(?![A-Za-z0-9_])")


def _substitute(value: str, project_dir: str) -> str:
    # A callable replacement keeps backslashes in the path literal
    return _PLACEHOLDER_RE.sub(lambda _: project_dir, value)


def resolve_launch(spec: CapabilityServerSpec, project_dir: str | PurePath) -> dict[str, Any]:
    """Return the launch JSON for ``spec`` with the placeholder replaced in every value."""
    target = validate_project_dir(project_dir)
    launch = spec.launch
    resolved: dict[str, Any] = {
        "command": _substitute(launch.command, target),
        "args": [_substitute(arg, target) for arg in launch.args],
    }
    if launch.env is not None:
        resolved["env"] = {key: _substitute(val, target) for key, val in launch.env.items()}
    return resolved


def synthesize(
    existing: Mapping[str, Any] | None,
    selected_ids: Iterable[str],
    project_dir: str | PurePath,
    *,
    registry: Mapping[str, CapabilityServerSpec] = REGISTRY,
    merge_policy: MergePolicy | str = MergePolicy.OVERWRITE,
) -> dict[str, Any]:
    """Merge the selected servers into a copy of ``existing``.

    Raises:
        InvalidProjectDir: ``project_dir`` is empty or relative.
        UnknownServerId: a selected id is not in ``registry``.
        ConfigError: ``existing`` has a non-object ``mcpServers`` entry.
    """
    target = validate_project_dir(project_dir)
    policy = MergePolicy(merge_policy)

    selected = set(selected_ids)
    unknown = sorted(selected.difference(registry))
    if unknown:
        raise UnknownServerId(unknown[0])

    document: dict[str, Any] = empty_document() if existing is None else copy.deepcopy(dict(existing))
    servers = document.setdefault(SERVERS_KEY, {})
    if not isinstance(servers, dict):
        raise ConfigError(f"Expected '{SERVERS_KEY}' to be a JSON object")

    for spec in registry.values():
        if spec.id not in selected:
            continue
        if spec.id in servers and policy is MergePolicy.SKIP:
            log.info("Server '{}' is already configured; skipping", spec.id)
            continue
        replaced = servers.pop(spec.id, None) is not None
        servers[spec.id] = resolve_launch(spec, target)
        log.debug("{} server '{}'", "Replaced" if replaced else "Added", spec.id)

    return document
