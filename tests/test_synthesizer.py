"""
Tests for configuration synthesis and merging
"""

import copy
import json
from types import MappingProxyType
from typing import Any

import pytest

from mcpkit.config import ConfigError
from mcpkit.registry import (
    PROJECT_DIR_PLACEHOLDER,
    REGISTRY,
    CapabilityServerSpec,
    LaunchDescriptor,
    UnknownServerId,
    build_registry,
    lookup,
)
from mcpkit.synthesizer import InvalidProjectDir, MergePolicy, resolve_launch, synthesize

PROJECT = "/home/u/proj"


def _existing() -> dict[str, Any]:
    return {
        "globalShortcut": "Cmd+Space",
        "mcpServers": {
            "custom": {"command": "uvx", "args": ["my-server"]},
            "memory": {"command": "npx", "args": ["old-memory"]},
        },
    }


def _strings(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, dict):
        return [s for v in value.values() for s in _strings(v)]
    if isinstance(value, list):
        return [s for v in value for s in _strings(v)]
    return []


class TestResolveLaunch:
    def test_memory_path_substituted(self):
        """The placeholder inside a longer path is replaced."""
        resolved = resolve_launch(lookup("memory"), PROJECT)
        assert resolved["env"]["MEMORY_PATH"] == "/home/u/proj/memory/memory.json"
        assert resolved["env"]["MEMORY_PERSIST"] == "true"
        assert resolved["args"] == ["-y", "@modelcontextprotocol/server-memory"]

    def test_placeholder_as_whole_argument(self):
        resolved = resolve_launch(lookup("filesystem"), PROJECT)
        assert resolved["args"][-1] == PROJECT

    def test_env_omitted_when_absent(self):
        resolved = resolve_launch(lookup("terminal"), PROJECT)
        assert "env" not in resolved
        assert resolved["args"] == ["@dillip285/mcp-terminal", "--allowed-paths", PROJECT]

    def test_keys_and_command_substituted_only_in_values(self):
        spec = CapabilityServerSpec(
            id="odd",
            display_name="odd",
            description="odd",
            launch=LaunchDescriptor(
                command=f"{PROJECT_DIR_PLACEHOLDER}/bin/run",
                args=(f"--a={PROJECT_DIR_PLACEHOLDER}:{PROJECT_DIR_PLACEHOLDER}",),
                env=MappingProxyType({PROJECT_DIR_PLACEHOLDER: PROJECT_DIR_PLACEHOLDER}),
            ),
        )
        resolved = resolve_launch(spec, PROJECT)
        assert resolved["command"] == "/home/u/proj/bin/run"
        assert resolved["args"] == ["--a=/home/u/proj:/home/u/proj"]
        assert resolved["env"] == {PROJECT_DIR_PLACEHOLDER: PROJECT}

    def test_path_with_template_characters_inserted_literally(self):
        odd_dir = "/tmp/$HOME/{x}/\\1"
        resolved = resolve_launch(lookup("memory"), odd_dir)
        assert resolved["env"]["MEMORY_PATH"] == odd_dir + "/memory/memory.json"

    def test_similar_tokens_left_alone(self):
        registry = build_registry(
            CapabilityServerSpec(
                id="similar",
                display_name="similar",
                description="similar",
                launch=LaunchDescriptor(
                    command="run",
                    args=(
                        "$PROJECT_DIRECTORY",
                        "$PROJECT_DIR_2",
                        PROJECT_DIR_PLACEHOLDER,
                        f"{PROJECT_DIR_PLACEHOLDER}-data",
                    ),
                    env=MappingProxyType({"OTHER": "$PROJECT_DIRS"}),
                ),
            )
        )
        doc = synthesize(None, {"similar"}, PROJECT, registry=registry)
        resolved = doc["mcpServers"]["similar"]
        assert resolved["args"] == ["$PROJECT_DIRECTORY", "$PROJECT_DIR_2", PROJECT, f"{PROJECT}-data"]
        assert resolved["env"] == {"OTHER": "$PROJECT_DIRS"}


class TestSynthesize:
    def test_absent_document_memory_only(self):
        doc = synthesize(None, {"memory"}, PROJECT)
        assert list(doc["mcpServers"]) == ["memory"]
        assert doc["mcpServers"]["memory"]["env"]["MEMORY_PATH"] == "/home/u/proj/memory/memory.json"

    def test_idempotent(self):
        existing = _existing()
        first = synthesize(existing, {"fetch", "memory", "terminal"}, PROJECT)
        second = synthesize(existing, {"fetch", "memory", "terminal"}, PROJECT)
        assert json.dumps(first) == json.dumps(second)

    def test_additive_merge_keeps_unselected(self):
        existing = _existing()
        doc = synthesize(existing, {"filesystem"}, PROJECT)
        assert doc["mcpServers"]["custom"] == existing["mcpServers"]["custom"]
        assert doc["mcpServers"]["memory"] == existing["mcpServers"]["memory"]
        assert doc["globalShortcut"] == "Cmd+Space"

    def test_no_placeholder_left(self):
        doc = synthesize(None, set(REGISTRY), PROJECT)
        for value in _strings(doc):
            assert PROJECT_DIR_PLACEHOLDER not in value

    def test_registry_order_not_input_order(self):
        doc = synthesize(None, ["youtube-transcript", "fetch", "memory"], PROJECT)
        assert list(doc["mcpServers"]) == ["memory", "fetch", "youtube-transcript"]

    def test_touched_keys_follow_untouched_ones(self):
        doc = synthesize(_existing(), {"memory", "terminal"}, PROJECT)
        assert list(doc["mcpServers"]) == ["custom", "memory", "terminal"]
        assert doc["mcpServers"]["memory"]["args"] == ["-y", "@modelcontextprotocol/server-memory"]

    def test_empty_selection_is_noop(self):
        existing = _existing()
        assert synthesize(existing, set(), PROJECT) == existing

    def test_input_not_mutated(self):
        existing = _existing()
        snapshot = copy.deepcopy(existing)
        synthesize(existing, set(REGISTRY), PROJECT)
        assert existing == snapshot

    def test_unknown_id_leaves_input_untouched(self):
        existing = _existing()
        snapshot = copy.deepcopy(existing)
        with pytest.raises(UnknownServerId) as exc_info:
            synthesize(existing, {"memory", "nope"}, PROJECT)
        assert exc_info.value.server_id == "nope"
        assert existing == snapshot

    @pytest.mark.parametrize("bad_dir", ["", "   ", "relative/dir"])
    def test_invalid_project_dir(self, bad_dir: str):
        with pytest.raises(InvalidProjectDir):
            synthesize(None, {"memory"}, bad_dir)

    def test_skip_policy_keeps_existing_entry(self):
        existing = _existing()
        doc = synthesize(existing, {"memory", "terminal"}, PROJECT, merge_policy=MergePolicy.SKIP)
        assert doc["mcpServers"]["memory"] == {"command": "npx", "args": ["old-memory"]}
        assert "terminal" in doc["mcpServers"]

    def test_merge_policy_accepts_string(self):
        doc = synthesize(_existing(), {"memory"}, PROJECT, merge_policy="skip")
        assert doc["mcpServers"]["memory"]["args"] == ["old-memory"]

    def test_missing_servers_key_added(self):
        doc = synthesize({"globalShortcut": "x"}, {"terminal"}, PROJECT)
        assert doc["globalShortcut"] == "x"
        assert list(doc["mcpServers"]) == ["terminal"]

    def test_non_object_servers_rejected(self):
        with pytest.raises(ConfigError):
            synthesize({"mcpServers": []}, {"memory"}, PROJECT)

    def test_custom_registry(self):
        registry = build_registry(
            CapabilityServerSpec(
                id="echo",
                display_name="echo",
                description="echo",
                launch=LaunchDescriptor(command="echo", args=(PROJECT_DIR_PLACEHOLDER,)),
            )
        )
        doc = synthesize(None, {"echo"}, PROJECT, registry=registry)
        assert doc == {"mcpServers": {"echo": {"command": "echo", "args": [PROJECT]}}}
        with pytest.raises(UnknownServerId):
            synthesize(None, {"memory"}, PROJECT, registry=registry)
