"""Agent markdown reader: extracts YAML frontmatter and instruction body.

Defined and temporary agents are single ``<name>.md`` files.  The core only
reads their metadata; executing the instructions is the dispatcher's job.
"""
from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

import yaml
from orchestra_core.errors import AgentDefinitionError

from orchestra_agents.types import AgentDefinition

if TYPE_CHECKING:
    from pathlib import Path

_DESCRIPTION_LINE = re.compile(r"description:\s*(.+)")


def parse_agent_md(path: Path) -> AgentDefinition:
    """Parse an agent markdown file into an AgentDefinition.

    The file format is YAML frontmatter delimited by ``---`` lines, followed
    by a markdown body containing the agent instructions.  ``name`` falls
    back to the file stem.

    Args:
        path: Path to the ``<name>.md`` file.

    Returns:
        A fully populated AgentDefinition.

    Raises:
        AgentDefinitionError: If the frontmatter is missing or malformed.
        FileNotFoundError: If the file does not exist.
    """
    if not path.exists():
        msg = f"Agent definition not found: {path}"
        raise FileNotFoundError(msg)

    text = path.read_text(encoding="utf-8")
    frontmatter, body = _split_frontmatter(text, path)
    meta = _parse_yaml(frontmatter, path)

    return AgentDefinition(
        name=str(meta.get("name") or path.stem),
        description=str(meta.get("description") or ""),
        model=str(meta["model"]) if meta.get("model") else None,
        tools=_as_str_list(meta.get("tools")),
        instructions=body.strip(),
        source_path=path,
    )


def extract_description(text: str) -> str:
    """Best-effort description lookup used when registering an agent.

    Prefers the frontmatter ``description`` field; falls back to the first
    ``description:`` line anywhere in the text, then to an empty string.
    """
    try:
        frontmatter, _ = _split_frontmatter(text, None)
        meta = _parse_yaml(frontmatter, None)
    except AgentDefinitionError:
        meta = {}

    if meta.get("description"):
        return str(meta["description"]).strip()

    match = _DESCRIPTION_LINE.search(text)
    return match.group(1).strip() if match else ""


def _split_frontmatter(text: str, path: Path | None) -> tuple[str, str]:
    """Split text into YAML frontmatter and markdown body.

    Returns:
        A (frontmatter, body) tuple.
    """
    stripped = text.lstrip("\n")
    if not stripped.startswith("---"):
        msg = f"Agent file missing YAML frontmatter (no opening '---'): {path}"
        raise AgentDefinitionError(msg)

    first_newline = stripped.find("\n")
    if first_newline == -1:
        msg = f"Agent file missing closing '---' for frontmatter: {path}"
        raise AgentDefinitionError(msg)
    rest = stripped[first_newline + 1 :]
    if rest.startswith("---"):
        return "", rest[3:]
    closing_idx = rest.find("\n---")
    if closing_idx == -1:
        msg = f"Agent file missing closing '---' for frontmatter: {path}"
        raise AgentDefinitionError(msg)

    frontmatter = rest[:closing_idx]
    body = rest[closing_idx + 4 :]  # skip past "\n---"
    return frontmatter, body


def _parse_yaml(frontmatter: str, path: Path | None) -> dict[str, Any]:
    """Parse the YAML frontmatter string using safe_load.

    Raises:
        AgentDefinitionError: If the YAML is malformed.
    """
    try:
        result = yaml.safe_load(frontmatter)
    except yaml.YAMLError as exc:
        msg = f"Invalid YAML frontmatter in {path}: {exc}"
        raise AgentDefinitionError(msg) from exc

    if result is None:
        return {}
    if not isinstance(result, dict):
        msg = f"YAML frontmatter must be a mapping, got {type(result).__name__}: {path}"
        raise AgentDefinitionError(msg)

    return result


def _as_str_list(value: Any) -> list[str]:
    """Coerce a list or comma-separated string to a list of strings."""
    if value is None:
        return []
    if isinstance(value, list):
        return [str(item) for item in value]
    return [part.strip() for part in str(value).split(",") if part.strip()]
