"""mcpkit - interactive MCP server setup for the Claude desktop app."""

from .registry import REGISTRY, CapabilityServerSpec, UnknownServerId, list_all, lookup
from .synthesizer import InvalidProjectDir, MergePolicy, resolve_launch, synthesize

__all__ = [
    "REGISTRY",
    "CapabilityServerSpec",
    "InvalidProjectDir",
    "MergePolicy",
    "UnknownServerId",
    "list_all",
    "lookup",
    "resolve_launch",
    "synthesize",
]
