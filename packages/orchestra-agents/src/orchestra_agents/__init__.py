"""Agent provenance: built-in names, the defined-agent registry, temp agents."""
from __future__ import annotations

from orchestra_agents.builtins import DEFAULT_BUILTIN_AGENTS, builtin_agents
from orchestra_agents.definitions import extract_description, parse_agent_md
from orchestra_agents.registry import RegistryStore
from orchestra_agents.resolver import (
    AgentResolver,
    BuiltinResolver,
    DefinedResolver,
    TemporaryResolver,
    TierResolver,
)
from orchestra_agents.types import (
    AgentDefinition,
    AgentDescriptor,
    AgentSource,
    RegistryEntry,
    is_valid_agent_name,
)

__all__ = [
    "DEFAULT_BUILTIN_AGENTS",
    "AgentDefinition",
    "AgentDescriptor",
    "AgentResolver",
    "AgentSource",
    "BuiltinResolver",
    "DefinedResolver",
    "RegistryEntry",
    "RegistryStore",
    "TemporaryResolver",
    "TierResolver",
    "builtin_agents",
    "extract_description",
    "is_valid_agent_name",
    "parse_agent_md",
]
