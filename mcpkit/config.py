"""
Configuration management for mcpkit

Runtime settings for the setup wizard. Defaults can be overridden through
MCPKIT_* environment variables and then by command-line flags.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

from loguru import logger as log

from mcpkit.paths import expand_user_path, user_app_support_dir

DEFAULT_CONFIG_FILENAME = "claude_desktop_config.json"
DEFAULT_REQUIRED_TOOLS = ("git", "node", "npm")

STRATEGIES = ("direct", "symlink")
MERGE_POLICIES = ("overwrite", "skip")


class McpkitError(Exception):
    """Base exception for mcpkit errors"""

    def __init__(self, message: str, path: Path | None = None):
        self.message = message
        self.path = path
        super().__init__(self.message)


class ConfigError(McpkitError):
    """Exception raised for configuration-related errors"""


def default_project_dir() -> Path:
    return Path.home() / "src" / "ai_projects"


@dataclass
class Settings:
    """Wizard settings"""

    host_app_dir: Path = field(default_factory=lambda: user_app_support_dir("Claude"))
    default_project_dir: Path = field(default_factory=default_project_dir)
    config_filename: str = DEFAULT_CONFIG_FILENAME
    strategy: str = "symlink"
    merge_policy: str = "overwrite"
    required_tools: tuple[str, ...] = DEFAULT_REQUIRED_TOOLS
    log_level: str = "INFO"

    def __post_init__(self):
        if self.strategy not in STRATEGIES:
            raise ConfigError(f"Unknown strategy {self.strategy!r}; expected one of {STRATEGIES}")
        if self.merge_policy not in MERGE_POLICIES:
            raise ConfigError(
                f"Unknown merge policy {self.merge_policy!r}; expected one of {MERGE_POLICIES}"
            )
        self.host_app_dir = Path(self.host_app_dir).expanduser()
        self.default_project_dir = expand_user_path(str(self.default_project_dir))

    @property
    def host_config_path(self) -> Path:
        """Path where the desktop application expects its config file"""
        return self.host_app_dir / self.config_filename

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "Settings":
        """Build settings from MCPKIT_* environment variables"""
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}
        if env.get("MCPKIT_HOST_APP_DIR"):
            kwargs["host_app_dir"] = Path(env["MCPKIT_HOST_APP_DIR"])
        if env.get("MCPKIT_PROJECT_DIR"):
            kwargs["default_project_dir"] = Path(env["MCPKIT_PROJECT_DIR"])
        if env.get("MCPKIT_STRATEGY"):
            kwargs["strategy"] = env["MCPKIT_STRATEGY"].strip().lower()
        if env.get("MCPKIT_MERGE_POLICY"):
            kwargs["merge_policy"] = env["MCPKIT_MERGE_POLICY"].strip().lower()
        if env.get("MCPKIT_LOG_LEVEL"):
            kwargs["log_level"] = env["MCPKIT_LOG_LEVEL"].strip().upper()

        settings = cls(**kwargs)  # type: ignore[arg-type]
        log.debug(f"Loaded settings: {settings}")
        return settings
