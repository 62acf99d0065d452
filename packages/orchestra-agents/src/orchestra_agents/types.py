"""Agent provenance, descriptor and registry types."""
from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path

AGENT_NAME_PATTERN = re.compile(r"[A-Za-z0-9_-]+")


def is_valid_agent_name(name: str) -> bool:
    """Return True if *name* is a legal agent identifier."""
    return AGENT_NAME_PATTERN.fullmatch(name) is not None


class AgentSource(enum.Enum):
    BUILTIN = "builtin"
    DEFINED = "defined"
    TEMPORARY = "temp"


@dataclass(frozen=True, slots=True)
class AgentDescriptor:
    """The resolution result for one agent name."""

    name: str
    source: AgentSource
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class RegistryEntry:
    """Persisted metadata for one defined (promoted) agent."""

    agent_name: str
    file: str
    description: str = ""
    created: str = ""
    usage_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "description": self.description,
            "created": self.created,
            "usageCount": self.usage_count,
        }

    @classmethod
    def from_dict(cls, agent_name: str, data: dict[str, Any]) -> RegistryEntry:
        return cls(
            agent_name=agent_name,
            file=str(data.get("file") or f"{agent_name}.md"),
            description=str(data.get("description") or ""),
            created=str(data.get("created") or ""),
            usage_count=int(data.get("usageCount") or 0),
        )


@dataclass(frozen=True, slots=True)
class AgentDefinition:
    """Metadata read from an agent markdown file.

    Only the frontmatter fields the workflow tooling displays are kept;
    the body is carried verbatim as ``instructions``.
    """

    name: str
    description: str
    model: str | None = None
    tools: list[str] = field(default_factory=list)
    instructions: str = ""
    source_path: Path | None = None
