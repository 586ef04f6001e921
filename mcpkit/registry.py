"""Static catalogue of the capability servers mcpkit knows how to configure.

Each entry is plain data: a launch descriptor that may contain the
``$PROJECT_DIR`` placeholder, plus an optional bootstrap recipe for servers
that have to be cloned and built before first use.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

PROJECT_DIR_PLACEHOLDER = "$PROJECT_DIR"


class UnknownServerId(KeyError):
    """Raised when a server id is not present in the registry"""

    def __init__(self, server_id: str):
        self.server_id = server_id
        super().__init__(server_id)

    def __str__(self) -> str:
        return f"Unknown capability server id: {self.server_id!r}"


@dataclass(frozen=True)
class LaunchDescriptor:
    command: str
    args: tuple[str, ...] = ()
    env: Mapping[str, str] | None = None

    def to_json(self) -> dict[str, Any]:
        data: dict[str, Any] = {"command": self.command, "args": list(self.args)}
        if self.env is not None:
            data["env"] = dict(self.env)
        return data


@dataclass(frozen=True)
class BootstrapRecipe:
    repo_url: str
    install_subdir: str
    install_commands: tuple[tuple[str, ...], ...] = ()


@dataclass(frozen=True)
class CapabilityServerSpec:
    id: str
    display_name: str
    description: str
    launch: LaunchDescriptor
    requires_bootstrap: bool = False
    bootstrap: BootstrapRecipe | None = None

    @property
    def choice_label(self) -> str:
        return f"{self.display_name} - {self.description}"


def build_registry(*specs: CapabilityServerSpec) -> Mapping[str, CapabilityServerSpec]:
    """Build a read-only registry, preserving declaration order."""
    entries: dict[str, CapabilityServerSpec] = {}
    for spec in specs:
        if spec.id in entries:
            raise ValueError(f"Duplicate capability server id: {spec.id!r}")
        if spec.requires_bootstrap and spec.bootstrap is None:
            raise ValueError(f"Server {spec.id!r} requires bootstrap but has no recipe")
        entries[spec.id] = spec
    return MappingProxyType(entries)


REGISTRY: Mapping[str, CapabilityServerSpec] = build_registry(
    CapabilityServerSpec(
        id="memory",
        display_name="memory",
        description="Adds persistent memory capability to your LLM across sessions",
        launch=LaunchDescriptor(
            command="npx",
            args=("-y", "@modelcontextprotocol/server-memory"),
            env=MappingProxyType(
                {
                    "MEMORY_PERSIST": "true",
                    "MEMORY_PATH": f"{PROJECT_DIR_PLACEHOLDER}/memory/memory.json",
                }
            ),
        ),
    ),
    CapabilityServerSpec(
        id="terminal",
        display_name="terminal",
        description="Execute terminal commands (sandboxed)",
        launch=LaunchDescriptor(
            command="npx",
            args=("@dillip285/mcp-terminal", "--allowed-paths", PROJECT_DIR_PLACEHOLDER),
        ),
    ),
    CapabilityServerSpec(
        id="filesystem",
        display_name="filesystem",
        description="Read/write files to and from the filesystem",
        launch=LaunchDescriptor(
            command="npx",
            args=("-y", "@modelcontextprotocol/server-filesystem", PROJECT_DIR_PLACEHOLDER),
        ),
    ),
    CapabilityServerSpec(
        id="fetch",
        display_name="fetch",
        description="Fetch a URL from the web (requires local installation)",
        launch=LaunchDescriptor(
            command="node",
            args=(f"{PROJECT_DIR_PLACEHOLDER}/mcp_servers/fetch-mcp/dist/index.js",),
        ),
        requires_bootstrap=True,
        bootstrap=BootstrapRecipe(
            repo_url="https://github.com/zcaceres/fetch-mcp.git",
            install_subdir="mcp_servers/fetch-mcp",
            install_commands=(
                ("npm", "install", "shx", "typescript"),
                ("npm", "install"),
            ),
        ),
    ),
    CapabilityServerSpec(
        id="youtube-transcript",
        display_name="youtube-transcript",
        description="Get a transcript from a youtube video",
        launch=LaunchDescriptor(
            command="npx",
            args=("-y", "@kimtaeyoon83/mcp-server-youtube-transcript"),
        ),
    ),
)


def lookup(
    server_id: str, registry: Mapping[str, CapabilityServerSpec] = REGISTRY
) -> CapabilityServerSpec:
    try:
        return registry[server_id]
    except KeyError:
        raise UnknownServerId(server_id) from None


def list_all(
    registry: Mapping[str, CapabilityServerSpec] = REGISTRY,
) -> tuple[CapabilityServerSpec, ...]:
    return tuple(registry.values())
