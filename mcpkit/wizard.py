import shutil
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import questionary
from loguru import logger as log

from mcpkit.bootstrap import BootstrapResult, CommandRunner, bootstrap_server, run_command
from mcpkit.config import Settings
from mcpkit.document import dumps_document, load_document
from mcpkit.paths import expand_user_path
from mcpkit.preflight import run_preflight
from mcpkit.registry import CapabilityServerSpec, list_all
from mcpkit.synthesizer import SERVERS_KEY, synthesize, validate_project_dir
from mcpkit.targets import PersistResult, make_target


def show_welcome_screen() -> None:
    """Display the welcome screen for mcpkit setup."""
    welcome_text = """
    ╔══════════════════════════════════════════════════════════════╗
    ║                                                              ║
    ║              Welcome to the Claude MCP setup 🚀              ║
    ║                                                              ║
    ║     This wizard configures the MCP servers that Claude       ║
    ║     desktop launches for your projects.                      ║
    ║                                                              ║
    ╚══════════════════════════════════════════════════════════════╝
    """
    print(welcome_text)


def discover_existing_config(path: Path) -> dict[str, Any]:
    document = load_document(path)
    servers = document.get(SERVERS_KEY, {})
    if path.exists():
        print(f"Existing configuration found at {path} ({len(servers)} server(s) configured).")
    else:
        print(f"No existing configuration at {path}; a new one will be created.")
    return document


def prompt_project_dir(default_dir: Path) -> Path | None:
    use_default = questionary.confirm(
        f"Use default project directory ({default_dir})?", default=True
    ).ask()
    if use_default is None:
        return None
    if use_default:
        return default_dir

    custom_dir = questionary.text(
        "Enter your preferred directory path:",
        validate=lambda value: bool(value.strip()) or "Please enter a directory path",
    ).ask()
    if custom_dir is None:
        return None
    return expand_user_path(custom_dir)


def prompt_server_selection(specs: Sequence[CapabilityServerSpec]) -> list[str] | None:
    return questionary.checkbox(
        "Select which MCP servers to install:",
        choices=[questionary.Choice(spec.choice_label, value=spec.id, checked=True) for spec in specs],
    ).ask()


def confirm_overwrite_link(link_path: Path) -> bool:
    return bool(
        questionary.confirm(
            f"An existing configuration symlink was found at {link_path}. Do you want to overwrite it?",
            default=False,
        ).ask()
    )


def run_bootstraps(
    specs: Sequence[CapabilityServerSpec],
    project_dir: Path,
    *,
    runner: CommandRunner = run_command,
) -> list[BootstrapResult]:
    results: list[BootstrapResult] = []
    for spec in specs:
        print(f"\n🔧 Setting up {spec.id} server...")
        results.append(bootstrap_server(spec, project_dir, runner=runner))
    return results


def report_bootstrap_failures(bootstraps: Sequence[BootstrapResult]) -> None:
    for item in bootstraps:
        if not item.ok:
            questionary.print(
                f"⚠️  {item.server_id} could not be installed and was left out of the configuration.",
                style="bold fg:ansiyellow",
            )


def show_summary(
    result: PersistResult, configured: Sequence[str], bootstraps: Sequence[BootstrapResult]
) -> None:
    if result.dry_run:
        print("\n[dry-run] No changes were written.")
        return

    questionary.print(
        "\n✨ Claude desktop configuration has been set up successfully!", style="bold fg:ansigreen"
    )
    print(f"📁 Config file written at: {result.config_path}")
    if result.link_replaced:
        print(f"🔗 Symlink created at: {result.link_path}")
    elif result.link_path is not None:
        print(f"🔗 Symlink at {result.link_path} already points to the config file")
    for backup in result.backup_paths:
        print(f"💾 Previous file backed up to: {backup}")
    for item in bootstraps:
        if item.ok:
            print(f"🚀 {item.server_id} server installed at: {item.install_dir}")
    report_bootstrap_failures(bootstraps)
    if configured:
        print(f"Configured servers: {', '.join(configured)}")
    print("\nYou're all set! Restart Claude desktop to use your selected MCP servers.")


def run(
    settings: Settings,
    *,
    skip_checks: bool = False,
    dry_run: bool = False,
    project_dir: Path | None = None,
    runner: CommandRunner = run_command,
    which: Callable[[str], str | None] = shutil.which,
) -> int:
    """Run the complete setup process and return the exit code."""
    if not skip_checks:
        run_preflight(settings.host_app_dir, settings.required_tools, which=which)

    show_welcome_screen()
    existing = discover_existing_config(settings.host_config_path)

    if project_dir is None:
        project_dir = prompt_project_dir(settings.default_project_dir)
        if project_dir is None:
            print("Setup cancelled.")
            return 0
    validate_project_dir(project_dir)

    specs = list_all()
    selected = prompt_server_selection(specs)
    if not selected:
        print("No MCP servers selected. Nothing to do.")
        return 0

    target = make_target(settings, project_dir)
    found = target.discover()
    if found is not None and found != settings.host_config_path:
        log.info("Using existing configuration at {}", found)
        existing = load_document(found)

    if dry_run:
        print(f"\n[dry-run] Would create directory: {project_dir}")
    else:
        print(f"\n📁 Creating directory: {project_dir}")
        project_dir.mkdir(parents=True, exist_ok=True)

    to_bootstrap = [spec for spec in specs if spec.id in selected and spec.requires_bootstrap]
    bootstraps: list[BootstrapResult] = []
    if dry_run:
        for spec in to_bootstrap:
            print(f"[dry-run] Would clone and build {spec.id}")
    else:
        bootstraps = run_bootstraps(to_bootstrap, project_dir, runner=runner)
    failed = {item.server_id for item in bootstraps if not item.ok}
    configured = [server_id for server_id in selected if server_id not in failed]
    if not configured:
        report_bootstrap_failures(bootstraps)
        print("No servers could be configured. Existing configuration left unchanged.")
        return 0

    document = synthesize(
        existing, configured, project_dir, merge_policy=settings.merge_policy
    )
    if dry_run:
        questionary.print(dumps_document(document), style="bold fg:ansigreen")

    result = target.persist(document, confirm_overwrite=confirm_overwrite_link, dry_run=dry_run)
    if result.cancelled:
        print("Setup cancelled. Existing configuration maintained.")
        return 0

    show_summary(result, configured, bootstraps)
    return 0
