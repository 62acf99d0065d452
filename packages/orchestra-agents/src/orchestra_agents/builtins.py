"""Agent names known in-process, with no definition file on disk."""
from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from orchestra_core.config import AgentsConfig

DEFAULT_BUILTIN_AGENTS: tuple[str, ...] = (
    "general-purpose",
    "Explore",
    "Plan",
    "code-reviewer",
    "expert-code-implementer",
    "implementation-architect",
    "code-optimizer",
    "react-native-component-reviewer",
    "jwt-keycloak-security-auditor",
    "statusline-setup",
)


def builtin_agents(config: AgentsConfig | None = None) -> tuple[str, ...]:
    """Return the configured built-in names, defaults first, without duplicates."""
    if config is None:
        return DEFAULT_BUILTIN_AGENTS
    base = DEFAULT_BUILTIN_AGENTS if config.builtins is None else tuple(config.builtins)
    return tuple(dict.fromkeys([*base, *config.extra_builtins]))
