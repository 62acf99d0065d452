"""Tests for three-tier agent resolution."""
from __future__ import annotations

import pytest
from orchestra_agents.builtins import DEFAULT_BUILTIN_AGENTS, builtin_agents
from orchestra_agents.resolver import (
    AgentResolver,
    BuiltinResolver,
    DefinedResolver,
    TemporaryResolver,
    TierResolver,
)
from orchestra_agents.types import AgentSource, is_valid_agent_name
from orchestra_core.config import AgentsConfig
from orchestra_core.errors import UnknownAgentError


class TestTierOrder:
    def test_builtin(self, resolver: AgentResolver) -> None:
        descriptor = resolver.resolve("general-purpose")

        assert descriptor.source is AgentSource.BUILTIN
        assert descriptor.path is None

    def test_defined(self, resolver: AgentResolver, write_defined_agent) -> None:
        path = write_defined_agent("reviewer")

        descriptor = resolver.resolve("reviewer")

        assert descriptor.source is AgentSource.DEFINED
        assert descriptor.path == path

    def test_temporary(self, resolver: AgentResolver, write_temp_agent) -> None:
        path = write_temp_agent("scratch")

        descriptor = resolver.resolve("scratch")

        assert descriptor.source is AgentSource.TEMPORARY
        assert descriptor.path == path

    def test_defined_shadows_temporary(
        self, resolver: AgentResolver, write_defined_agent, write_temp_agent
    ) -> None:
        write_temp_agent("scanner")
        defined = write_defined_agent("scanner")

        descriptor = resolver.resolve("scanner")

        assert descriptor.source is AgentSource.DEFINED
        assert descriptor.path == defined

    def test_builtin_shadows_files(
        self, resolver: AgentResolver, write_defined_agent
    ) -> None:
        write_defined_agent("Plan")

        assert resolver.resolve("Plan").source is AgentSource.BUILTIN

    def test_resolution_is_repeatable(
        self, resolver: AgentResolver, write_temp_agent
    ) -> None:
        write_temp_agent("scratch")

        assert resolver.resolve("scratch") == resolver.resolve("scratch")

    def test_promotion_moves_agent_to_defined_tier(
        self, resolver: AgentResolver, store, write_temp_agent
    ) -> None:
        write_temp_agent("scanner")
        assert resolver.resolve("scanner").source is AgentSource.TEMPORARY

        store.promote("scanner")

        assert resolver.resolve("scanner").source is AgentSource.DEFINED


class TestUnknown:
    def test_unknown_name_raises(self, resolver: AgentResolver) -> None:
        with pytest.raises(UnknownAgentError, match="Unknown agent: ghost") as info:
            resolver.resolve("ghost")

        assert info.value.name == "ghost"
        assert resolver.try_resolve("ghost") is None
        assert resolver.exists("ghost") is False

    def test_names_are_case_sensitive(self, resolver: AgentResolver) -> None:
        assert resolver.exists("Explore")
        assert not resolver.exists("explore")

    @pytest.mark.parametrize("name", ["", "../agents/x", "has space", "a/b"])
    def test_invalid_names_never_touch_disk(
        self, resolver: AgentResolver, name: str
    ) -> None:
        assert resolver.try_resolve(name) is None

    def test_trailing_newline_is_not_a_valid_name(
        self, resolver: AgentResolver, store
    ) -> None:
        (store.temp_agents_dir / "scanner\n.md").write_text("---\n---\n", encoding="utf-8")

        assert resolver.try_resolve("scanner\n") is None
        with pytest.raises(UnknownAgentError):
            resolver.resolve("Plan\n")

    @pytest.mark.parametrize(
        ("name", "valid"),
        [("scanner", True), ("code-reviewer_2", True), ("scanner\n", False), ("", False)],
    )
    def test_is_valid_agent_name(self, name: str, valid: bool) -> None:
        assert is_valid_agent_name(name) is valid

    def test_directory_in_place_of_file_is_ignored(
        self, resolver: AgentResolver, store
    ) -> None:
        (store.temp_agents_dir / "odd.md").mkdir()

        assert resolver.try_resolve("odd") is None


class TestComposition:
    def test_standard_chain_order(self, resolver: AgentResolver) -> None:
        assert [tier.source for tier in resolver.tiers] == [
            AgentSource.BUILTIN,
            AgentSource.DEFINED,
            AgentSource.TEMPORARY,
        ]
        assert all(isinstance(tier, TierResolver) for tier in resolver.tiers)

    def test_custom_chain(self, tmp_path) -> None:
        (tmp_path / "only.md").write_text("---\n---\n", encoding="utf-8")
        resolver = AgentResolver([
            TemporaryResolver(tmp_path),
            DefinedResolver(tmp_path),
        ])

        assert resolver.resolve("only").source is AgentSource.TEMPORARY

    def test_builtin_resolver_names(self) -> None:
        tier = BuiltinResolver(["solo"])

        assert tier.try_resolve("solo").source is AgentSource.BUILTIN
        assert tier.try_resolve("general-purpose") is None


class TestBuiltinNames:
    def test_defaults(self) -> None:
        assert builtin_agents() == DEFAULT_BUILTIN_AGENTS
        assert builtin_agents(AgentsConfig()) == DEFAULT_BUILTIN_AGENTS

    def test_extra_builtins_are_appended_once(self) -> None:
        config = AgentsConfig(extra_builtins=["triage", "Plan", "triage"])

        names = builtin_agents(config)

        assert names[: len(DEFAULT_BUILTIN_AGENTS)] == DEFAULT_BUILTIN_AGENTS
        assert names[len(DEFAULT_BUILTIN_AGENTS) :] == ("triage",)

    def test_builtins_can_be_replaced(self) -> None:
        config = AgentsConfig(builtins=["alpha"], extra_builtins=["beta"])

        assert builtin_agents(config) == ("alpha", "beta")
