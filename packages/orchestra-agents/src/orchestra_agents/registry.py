"""Registry store: persisted table of defined agents plus the temp-agent tier.

The registry file maps agent name to ``{file, description, created,
usageCount}``.  Defined agents live next to it as ``<name>.md``; temporary
agents live in a separate directory with no registry backing.

Promotion (temp -> defined) is the only operation touching both stores.  It
is journalled: the intent is written to ``<registry>.journal`` before the
file move and the registry write, and removed once both are committed.
:meth:`RegistryStore.recover` finishes a promotion interrupted between the
two steps.  The store assumes a single writer; concurrent writers in other
processes are not guarded against.
"""
from __future__ import annotations

import contextlib
import dataclasses
import errno
import json
import os
import tempfile
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Any

from orchestra_core.errors import RegistryIOError
from orchestra_core.logging import get_logger

from orchestra_agents.definitions import extract_description
from orchestra_agents.types import RegistryEntry, is_valid_agent_name

if TYPE_CHECKING:
    from orchestra_core.config import OrchestraConfig

logger = get_logger("agents.registry")

_AGENT_SUFFIX = ".md"


def atomic_write(path: Path, content: str) -> None:
    """Write *content* to *path* via a temp file and ``os.replace``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except BaseException:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(tmp_name)
        raise


def _move_file(source: Path, target: Path) -> None:
    """Atomically move *source* to *target*, copying across filesystems."""
    target.parent.mkdir(parents=True, exist_ok=True)
    try:
        os.replace(source, target)
    except OSError as exc:
        if exc.errno != errno.EXDEV:
            raise
        atomic_write(target, source.read_text(encoding="utf-8"))
        source.unlink()


class RegistryStore:
    """Loads and persists defined-agent metadata; manages the temp tier.

    Example usage::

        store = RegistryStore.open(config)
        if store.promote("scanner"):
            store.increment_usage("scanner")
    """

    def __init__(
        self,
        agents_dir: Path | str,
        temp_agents_dir: Path | str,
        registry_path: Path | str | None = None,
    ) -> None:
        self.agents_dir = Path(agents_dir)
        self.temp_agents_dir = Path(temp_agents_dir)
        self.registry_path = (
            Path(registry_path)
            if registry_path is not None
            else self.agents_dir / "registry.json"
        )

    @classmethod
    def from_config(cls, config: OrchestraConfig) -> RegistryStore:
        return cls(
            agents_dir=config.paths.agents_path,
            temp_agents_dir=config.paths.temp_agents_path,
            registry_path=config.paths.registry_path,
        )

    @classmethod
    def open(cls, config: OrchestraConfig) -> RegistryStore:
        """Build a store from *config* and finish any interrupted promotion."""
        store = cls.from_config(config)
        store.recover()
        return store

    @property
    def journal_path(self) -> Path:
        return self.registry_path.with_name(self.registry_path.name + ".journal")

    # ── Paths and listings ─────────────────────────────────────────

    def defined_path(self, name: str) -> Path:
        return self.agents_dir / f"{name}{_AGENT_SUFFIX}"

    def temporary_path(self, name: str) -> Path:
        return self.temp_agents_dir / f"{name}{_AGENT_SUFFIX}"

    def list_defined(self) -> list[str]:
        """Names of all registered (defined) agents."""
        return sorted(self.load())

    def list_temporary(self) -> list[str]:
        """Names of all temporary agents on disk."""
        if not self.temp_agents_dir.is_dir():
            return []
        return sorted(
            p.stem for p in self.temp_agents_dir.glob(f"*{_AGENT_SUFFIX}")
            if p.is_file()
        )

    # ── Table persistence ──────────────────────────────────────────

    def load(self) -> dict[str, RegistryEntry]:
        """Read the registry table; a missing file is an empty table.

        Raises:
            RegistryIOError: If the file cannot be read or is malformed.
        """
        path = self.registry_path
        if not path.exists():
            return {}
        try:
            raw = path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Failed to read agent registry {path}: {exc}"
            raise RegistryIOError(msg, path) from exc
        try:
            data = json.loads(raw) if raw.strip() else {}
        except json.JSONDecodeError as exc:
            msg = f"Agent registry {path} is not valid JSON: {exc}"
            raise RegistryIOError(msg, path) from exc
        if not isinstance(data, dict):
            msg = f"Agent registry {path} must be a JSON object"
            raise RegistryIOError(msg, path)

        table: dict[str, RegistryEntry] = {}
        for name, value in data.items():
            if not isinstance(value, dict):
                msg = f"Malformed registry entry '{name}' in {path}"
                raise RegistryIOError(msg, path)
            try:
                table[name] = RegistryEntry.from_dict(name, value)
            except (TypeError, ValueError) as exc:
                msg = f"Malformed registry entry '{name}' in {path}: {exc}"
                raise RegistryIOError(msg, path) from exc
        return table

    def save(self, table: dict[str, RegistryEntry]) -> None:
        """Atomically replace the registry file with *table*.

        Raises:
            RegistryIOError: If the file cannot be written.
        """
        payload = {name: entry.to_dict() for name, entry in table.items()}
        try:
            atomic_write(self.registry_path, json.dumps(payload, indent=2) + "\n")
        except OSError as exc:
            msg = f"Failed to write agent registry {self.registry_path}: {exc}"
            raise RegistryIOError(msg, self.registry_path) from exc

    def get(self, name: str) -> RegistryEntry | None:
        return self.load().get(name)

    # ── Mutations ──────────────────────────────────────────────────

    def promote(self, name: str, new_name: str | None = None) -> bool:
        """Move a temporary agent into the defined tier and register it.

        Args:
            name: The temporary agent to promote.
            new_name: Optional name for the defined agent (defaults to *name*).

        Returns:
            *False* if the temporary agent does not exist or the target
            name is already defined; *True* once the move and the registry
            entry are both committed.

        Raises:
            ValueError: If *new_name* is not a legal agent name.
            RegistryIOError: If the registry cannot be read or written.
        """
        target = new_name or name
        if not is_valid_agent_name(target):
            msg = f"Invalid agent name: {target!r}"
            raise ValueError(msg)

        temp_path = self.temporary_path(name)
        if not is_valid_agent_name(name) or not temp_path.is_file():
            logger.warning("Temp agent not found: %s", name)
            return False

        # A malformed registry must fail before anything moves.
        table = self.load()

        defined_path = self.defined_path(target)
        if defined_path.exists() or target in table:
            logger.warning(
                "Defined agent '%s' already exists (%s); not promoting '%s'",
                target,
                defined_path,
                name,
            )
            return False

        try:
            content = temp_path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Failed to read temp agent {temp_path}: {exc}"
            raise RegistryIOError(msg, temp_path) from exc

        entry = RegistryEntry(
            agent_name=target,
            file=defined_path.name,
            description=extract_description(content),
            created=date.today().isoformat(),
            usage_count=0,
        )

        self._write_journal(temp_path, defined_path, entry)
        self._apply_promotion(temp_path, defined_path, entry)
        self._clear_journal()

        logger.info("Promoted temp agent '%s' to defined agent '%s'", name, target)
        return True

    def delete_temporary(self, name: str) -> bool:
        """Delete a temporary agent definition; *False* if it does not exist."""
        path = self.temporary_path(name)
        if not is_valid_agent_name(name) or not path.is_file():
            return False
        path.unlink()
        logger.info("Deleted temp agent '%s'", name)
        return True

    def increment_usage(self, name: str) -> None:
        """Bump ``usageCount`` for a registered agent; unknown names are ignored."""
        table = self.load()
        entry = table.get(name)
        if entry is None:
            logger.debug("Not incrementing usage for unregistered agent '%s'", name)
            return
        table[name] = dataclasses.replace(entry, usage_count=entry.usage_count + 1)
        self.save(table)
        logger.debug("Usage count for '%s' is now %d", name, entry.usage_count + 1)

    def recover(self) -> bool:
        """Complete a promotion left behind by a crash.

        Returns:
            *True* if a journalled promotion was completed.
        """
        journal = self.journal_path
        if not journal.exists():
            return False

        try:
            data: dict[str, Any] = json.loads(journal.read_text(encoding="utf-8"))
            source = Path(data["source"])
            target = Path(data["target"])
            entry = RegistryEntry.from_dict(data["name"], data["entry"])
        except (OSError, ValueError, KeyError, TypeError) as exc:
            msg = f"Unreadable promotion journal {journal}: {exc}"
            raise RegistryIOError(msg, journal) from exc

        if not source.exists() and not target.exists():
            logger.warning(
                "Dropping promotion journal for '%s': definition file is gone",
                entry.agent_name,
            )
            self._clear_journal()
            return False

        self._apply_promotion(source, target, entry)
        self._clear_journal()
        logger.info("Recovered interrupted promotion of '%s'", entry.agent_name)
        return True

    # ── Internals ──────────────────────────────────────────────────

    def _apply_promotion(self, source: Path, target: Path, entry: RegistryEntry) -> None:
        """Move the definition (if not yet moved) and commit the entry.

        Both steps are idempotent so a journal replay can rerun them.
        """
        if source.exists():
            try:
                _move_file(source, target)
            except OSError as exc:
                msg = f"Failed to move {source} to {target}: {exc}"
                raise RegistryIOError(msg, target) from exc

        table = self.load()
        table[entry.agent_name] = entry
        self.save(table)

    def _write_journal(self, source: Path, target: Path, entry: RegistryEntry) -> None:
        payload = {
            "name": entry.agent_name,
            "source": str(source),
            "target": str(target),
            "entry": entry.to_dict(),
        }
        try:
            atomic_write(self.journal_path, json.dumps(payload, indent=2) + "\n")
        except OSError as exc:
            msg = f"Failed to write promotion journal {self.journal_path}: {exc}"
            raise RegistryIOError(msg, self.journal_path) from exc

    def _clear_journal(self) -> None:
        with contextlib.suppress(FileNotFoundError):
            self.journal_path.unlink()
