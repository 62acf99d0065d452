"""Per-invocation CLI state shared by all sub-commands."""
from __future__ import annotations

from dataclasses import dataclass

import typer
from orchestra_agents.registry import RegistryStore
from orchestra_core.config import OrchestraConfig


@dataclass(frozen=True, slots=True)
class CliState:
    config: OrchestraConfig


def get_config(ctx: typer.Context) -> OrchestraConfig:
    """The configuration loaded by the root callback."""
    if isinstance(ctx.obj, CliState):
        return ctx.obj.config
    return OrchestraConfig.load()


def build_store(ctx: typer.Context) -> RegistryStore:
    """Open the registry store, finishing any interrupted promotion."""
    return RegistryStore.open(get_config(ctx))
