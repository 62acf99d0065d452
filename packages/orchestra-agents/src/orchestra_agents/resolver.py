"""Agent resolution across the built-in, defined and temporary tiers.

Each tier is a :class:`TierResolver`; :class:`AgentResolver` tries them in a
fixed order and the first tier that claims a name wins.  A defined agent can
therefore never be shadowed by a temporary agent with the same name.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from orchestra_core.errors import UnknownAgentError
from orchestra_core.logging import get_logger

from orchestra_agents.builtins import DEFAULT_BUILTIN_AGENTS, builtin_agents
from orchestra_agents.registry import RegistryStore
from orchestra_agents.types import AgentDescriptor, AgentSource, is_valid_agent_name

if TYPE_CHECKING:
    from orchestra_core.config import OrchestraConfig

logger = get_logger("agents.resolver")


@runtime_checkable
class TierResolver(Protocol):
    """One provenance tier: claims a name or passes it on."""

    source: AgentSource

    def try_resolve(self, name: str) -> AgentDescriptor | None: ...


class BuiltinResolver:
    source = AgentSource.BUILTIN

    def __init__(self, names: Iterable[str] = DEFAULT_BUILTIN_AGENTS) -> None:
        self._names = frozenset(names)

    def try_resolve(self, name: str) -> AgentDescriptor | None:
        if name in self._names:
            return AgentDescriptor(name=name, source=self.source, path=None)
        return None


class _DirectoryResolver:
    """A tier backed by one ``<name>.md`` file per agent."""

    source: AgentSource

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def try_resolve(self, name: str) -> AgentDescriptor | None:
        path = self.directory / f"{name}.md"
        if path.is_file():
            return AgentDescriptor(name=name, source=self.source, path=path)
        return None


class DefinedResolver(_DirectoryResolver):
    source = AgentSource.DEFINED


class TemporaryResolver(_DirectoryResolver):
    source = AgentSource.TEMPORARY


class AgentResolver:
    """Resolves agent names through an ordered chain of tiers."""

    def __init__(self, tiers: Sequence[TierResolver]) -> None:
        self._tiers = tuple(tiers)

    @classmethod
    def from_store(
        cls,
        store: RegistryStore,
        builtins: Iterable[str] = DEFAULT_BUILTIN_AGENTS,
    ) -> AgentResolver:
        """Standard three-tier chain: built-in, then defined, then temporary."""
        return cls([
            BuiltinResolver(builtins),
            DefinedResolver(store.agents_dir),
            TemporaryResolver(store.temp_agents_dir),
        ])

    @classmethod
    def from_config(
        cls, config: OrchestraConfig, store: RegistryStore | None = None
    ) -> AgentResolver:
        store = store or RegistryStore.from_config(config)
        return cls.from_store(store, builtin_agents(config.agents))

    @property
    def tiers(self) -> tuple[TierResolver, ...]:
        return self._tiers

    def try_resolve(self, name: str) -> AgentDescriptor | None:
        """Return the descriptor from the first tier claiming *name*, or None."""
        if not is_valid_agent_name(name):
            return None
        for tier in self._tiers:
            descriptor = tier.try_resolve(name)
            if descriptor is not None:
                logger.debug("Resolved agent '%s' -> %s", name, descriptor.source.value)
                return descriptor
        return None

    def resolve(self, name: str) -> AgentDescriptor:
        """Resolve *name* to its owning tier.

        Raises:
            UnknownAgentError: If no tier claims the name.
        """
        descriptor = self.try_resolve(name)
        if descriptor is None:
            raise UnknownAgentError(name)
        return descriptor

    def exists(self, name: str) -> bool:
        return self.try_resolve(name) is not None
