"""
CLI entrypoint for mcpkit.

Provides the `mcpkit` executable when installed via pip/uvx/pipx.
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from loguru import logger as log

from mcpkit.config import MERGE_POLICIES, STRATEGIES, ConfigError, Settings
from mcpkit.editor import EditorError, open_in_editor
from mcpkit.paths import expand_user_path
from mcpkit.preflight import PreflightError
from mcpkit.wizard import run


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="mcpkit",
        description="Interactive setup of MCP servers for the Claude desktop app",
    )
    parser.add_argument(
        "-e",
        "--edit",
        action="store_true",
        help="Open the Claude desktop config file in your editor and exit",
    )
    parser.add_argument(
        "--skip-checks",
        action="store_true",
        help="Skip the Claude desktop and git/node/npm presence checks",
    )
    parser.add_argument("--dry-run", action="store_true", help="Preview actions without writing")
    parser.add_argument(
        "--strategy",
        choices=STRATEGIES,
        help="Write the config directly, or into the project directory behind a symlink "
        "(default: MCPKIT_STRATEGY or symlink)",
    )
    parser.add_argument(
        "--merge",
        choices=MERGE_POLICIES,
        help="Overwrite or keep servers that are already configured (default: overwrite)",
    )
    parser.add_argument(
        "--project-dir",
        type=str,
        help="Project directory to use instead of prompting for one",
    )
    parser.add_argument("--log-level", type=str, help="Log level (default: MCPKIT_LOG_LEVEL or INFO)")
    return parser.parse_args(argv)


def configure_logging(level: str) -> None:
    log.remove()
    log.add(sys.stderr, level=level.upper())


def _build_settings(args: argparse.Namespace) -> Settings:
    settings = Settings.from_env()
    if args.strategy:
        settings.strategy = args.strategy
    if args.merge:
        settings.merge_policy = args.merge
    if args.log_level:
        settings.log_level = args.log_level.upper()
    return settings


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    try:
        settings = _build_settings(args)
        configure_logging(settings.log_level)
    except ConfigError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.edit:
        try:
            return 0 if open_in_editor(settings.host_config_path) == 0 else 1
        except EditorError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1

    project_dir: Path | None = expand_user_path(args.project_dir) if args.project_dir else None

    try:
        return run(
            settings,
            skip_checks=args.skip_checks,
            dry_run=args.dry_run,
            project_dir=project_dir,
        )
    except PreflightError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except ConfigError as e:
        log.error(e.message)
        return 1
    except KeyboardInterrupt:
        print("\nSetup interrupted.", file=sys.stderr)
        return 1
    except Exception as exc:  # noqa: BLE001
        log.exception(f"Fatal error: {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
