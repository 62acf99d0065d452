from __future__ import annotations

import dataclasses
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from orchestra_core.errors import ConfigError

DEFAULT_HOME = "~/.orchestra"


def _load_toml(path: Path) -> dict:
    """Load a TOML file, returning empty dict if missing."""
    if not path.exists():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        msg = f"Cannot read config file {path}: {exc}"
        raise ConfigError(msg) from exc


def _deep_merge(base: dict, override: dict) -> dict:
    """Merge override into base (1 level deep for TOML sections)."""
    merged = dict(base)
    for key, val in override.items():
        if (
            key in merged
            and isinstance(merged[key], dict)
            and isinstance(val, dict)
        ):
            merged[key] = {**merged[key], **val}
        else:
            merged[key] = val
    return merged


@dataclass(frozen=True, slots=True)
class PathsConfig:
    home: str = DEFAULT_HOME
    agents_dir: str = "agents"
    temp_agents_dir: str = "temp-agents"
    registry_file: str = "agents/registry.json"

    def _under_home(self, value: str) -> Path:
        path = Path(value).expanduser()
        if path.is_absolute():
            return path
        return Path(self.home).expanduser() / path

    @property
    def home_path(self) -> Path:
        return Path(self.home).expanduser()

    @property
    def agents_path(self) -> Path:
        return self._under_home(self.agents_dir)

    @property
    def temp_agents_path(self) -> Path:
        return self._under_home(self.temp_agents_dir)

    @property
    def registry_path(self) -> Path:
        return self._under_home(self.registry_file)


@dataclass(frozen=True, slots=True)
class AgentsConfig:
    builtins: list[str] | None = None  # None keeps the default list
    extra_builtins: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class MacroConfig:
    default_model: str = "sonnet"


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    level: str = "INFO"
    json: bool = False


@dataclass(frozen=True, slots=True)
class OrchestraConfig:
    """Top-level configuration, parsed from orchestra.toml."""
    paths: PathsConfig = field(default_factory=PathsConfig)
    agents: AgentsConfig = field(default_factory=AgentsConfig)
    macros: MacroConfig = field(default_factory=MacroConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_toml(
        cls, path: Path | str = "orchestra.toml"
    ) -> OrchestraConfig:
        path = Path(path)
        raw = _load_toml(path)
        return cls._from_raw(raw)

    @classmethod
    def load(
        cls,
        project_dir: Path | str | None = None,
        home: Path | str | None = None,
    ) -> OrchestraConfig:
        """Load config with global → project layering.

        Resolution order (later wins):
        1. Built-in defaults
        2. <home>/config.toml (global, ``~/.orchestra`` by default)
        3. .orchestra/config.toml or orchestra.toml (project)

        When *home* is given it also overrides ``paths.home`` so every
        agent directory is rooted there.
        """
        home_path = Path(home).expanduser() if home is not None else (
            Path(DEFAULT_HOME).expanduser()
        )
        global_path = home_path / "config.toml"

        project_dir = (
            Path.cwd() if project_dir is None else Path(project_dir)
        )

        # Project config: .orchestra/config.toml takes priority
        project_path = project_dir / ".orchestra" / "config.toml"
        if not project_path.exists():
            project_path = project_dir / "orchestra.toml"

        global_raw = _load_toml(global_path)
        project_raw = _load_toml(project_path)
        merged = _deep_merge(global_raw, project_raw)

        config = cls._from_raw(merged)
        if home is not None:
            config = config.with_home(home_path)
        return config

    def with_home(self, home: Path | str) -> OrchestraConfig:
        """Return a copy whose relative agent paths are rooted at *home*."""
        return dataclasses.replace(
            self, paths=dataclasses.replace(self.paths, home=str(home))
        )

    @classmethod
    def _from_raw(cls, raw: dict) -> OrchestraConfig:
        """Build OrchestraConfig from a raw TOML dict."""
        paths_raw = raw.get("paths", {})
        agents_raw = raw.get("agents", {})
        macros_raw = raw.get("macros", {})
        logging_raw = raw.get("logging", {})

        def _pick(section: dict, dc: type) -> dict:
            fields = dc.__dataclass_fields__
            return {
                k: v for k, v in section.items() if k in fields
            }

        try:
            return cls(
                paths=PathsConfig(**_pick(paths_raw, PathsConfig)),
                agents=AgentsConfig(**_pick(agents_raw, AgentsConfig)),
                macros=MacroConfig(**_pick(macros_raw, MacroConfig)),
                logging=LoggingConfig(
                    **_pick(logging_raw, LoggingConfig)
                ),
            )
        except TypeError as exc:
            msg = f"Invalid configuration: {exc}"
            raise ConfigError(msg) from exc
