"""Clone and build capability servers that are distributed as source.

Failures here are isolated to the server being bootstrapped: callers get a
``BootstrapResult`` back instead of an exception and decide what to drop.
"""

from __future__ import annotations

import shutil
import subprocess as _subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from loguru import logger as log

from mcpkit.config import McpkitError
from mcpkit.registry import CapabilityServerSpec

CommandRunner = Callable[[Sequence[str], Path], None]


class BootstrapError(McpkitError):
    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] | None = None,
        returncode: int | None = None,
        path: Path | None = None,
    ):
        self.command = list(command) if command is not None else None
        self.returncode = returncode
        super().__init__(message, path)


@dataclass
class BootstrapResult:
    server_id: str
    install_dir: Path
    ok: bool
    error: BootstrapError | None = None


def run_command(command: Sequence[str], cwd: Path) -> None:
    """Run ``command`` in ``cwd`` with output streamed to the terminal."""
    log.debug("Running {} in {}", " ".join(command), cwd)
    try:
        _subprocess.run(list(command), cwd=str(cwd), check=True)
    except FileNotFoundError as e:
        raise BootstrapError(f"{command[0]} not found", command=command, path=cwd) from e
    except _subprocess.CalledProcessError as e:
        raise BootstrapError(
            f"Command failed with exit code {e.returncode}: {' '.join(command)}",
            command=command,
            returncode=e.returncode,
            path=cwd,
        ) from e


def bootstrap_server(
    spec: CapabilityServerSpec,
    project_dir: Path,
    *,
    runner: CommandRunner = run_command,
) -> BootstrapResult:
    recipe = spec.bootstrap
    if recipe is None:
        raise ValueError(f"Server {spec.id!r} has no bootstrap recipe")

    install_dir = project_dir / recipe.install_subdir
    try:
        install_dir.parent.mkdir(parents=True, exist_ok=True)
        if install_dir.exists():
            log.info("Removing previous checkout at {}", install_dir)
            shutil.rmtree(install_dir)

        print(f"Cloning {spec.id} repository...")
        runner(("git", "clone", recipe.repo_url, install_dir.name), install_dir.parent)

        for command in recipe.install_commands:
            print(f"Running {' '.join(command)}...")
            runner(command, install_dir)
    except BootstrapError as e:
        log.error("Error during {} setup: {}", spec.id, e.message)
        if e.command is not None:
            log.error("Failed command: {} (cwd={}, exit code={})", e.command, e.path, e.returncode)
        return BootstrapResult(server_id=spec.id, install_dir=install_dir, ok=False, error=e)
    except OSError as e:
        log.exception("Error during {} setup", spec.id)
        err = BootstrapError(str(e), path=install_dir)
        return BootstrapResult(server_id=spec.id, install_dir=install_dir, ok=False, error=err)

    log.info("{} setup completed successfully", spec.id)
    return BootstrapResult(server_id=spec.id, install_dir=install_dir, ok=True)
