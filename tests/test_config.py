from __future__ import annotations

from pathlib import Path

import pytest
from orchestra_core.config import OrchestraConfig
from orchestra_core.errors import ConfigError


class TestConfig:
    def test_default_config(self):
        config = OrchestraConfig()
        assert config.paths.home == "~/.orchestra"
        assert config.macros.default_model == "sonnet"
        assert config.logging.level == "INFO"
        assert config.agents.builtins is None

    def test_from_toml_missing_file(self):
        config = OrchestraConfig.from_toml("/nonexistent/path/orchestra.toml")
        assert config.macros.default_model == "sonnet"  # Returns defaults

    def test_from_toml(self, tmp_path: Path):
        path = tmp_path / "orchestra.toml"
        path.write_text('''
[paths]
home = "/srv/orchestra"
temp_agents_dir = "/tmp/scratch-agents"

[agents]
extra_builtins = ["triage"]

[macros]
default_model = "opus"

[logging]
level = "DEBUG"
json = true
unknown_key = "ignored"
''')
        config = OrchestraConfig.from_toml(path)

        assert config.paths.agents_path == Path("/srv/orchestra/agents")
        assert config.paths.temp_agents_path == Path("/tmp/scratch-agents")
        assert config.paths.registry_path == Path("/srv/orchestra/agents/registry.json")
        assert config.agents.extra_builtins == ["triage"]
        assert config.macros.default_model == "opus"
        assert config.logging.level == "DEBUG"
        assert config.logging.json is True

    def test_invalid_toml_raises(self, tmp_path: Path):
        path = tmp_path / "orchestra.toml"
        path.write_text("[paths\nhome = 1\n")

        with pytest.raises(ConfigError, match="Cannot read config file"):
            OrchestraConfig.from_toml(path)


class TestLayering:
    def test_project_overrides_global(self, tmp_path: Path):
        home = tmp_path / "home"
        home.mkdir()
        (home / "config.toml").write_text(
            '[macros]\ndefault_model = "haiku"\n[logging]\nlevel = "WARNING"\n'
        )
        project = tmp_path / "project"
        project.mkdir()
        (project / "orchestra.toml").write_text('[macros]\ndefault_model = "opus"\n')

        config = OrchestraConfig.load(project_dir=project, home=home)

        assert config.macros.default_model == "opus"
        assert config.logging.level == "WARNING"
        assert config.paths.home_path == home

    def test_dot_orchestra_takes_priority(self, tmp_path: Path):
        (tmp_path / ".orchestra").mkdir()
        (tmp_path / ".orchestra" / "config.toml").write_text(
            '[macros]\ndefault_model = "from-dir"\n'
        )
        (tmp_path / "orchestra.toml").write_text('[macros]\ndefault_model = "from-file"\n')

        config = OrchestraConfig.load(project_dir=tmp_path, home=tmp_path / "nohome")

        assert config.macros.default_model == "from-dir"

    def test_home_argument_roots_agent_paths(self, tmp_path: Path):
        config = OrchestraConfig.load(project_dir=tmp_path, home=tmp_path / "h")

        assert config.paths.agents_path == tmp_path / "h" / "agents"
        assert config.paths.temp_agents_path == tmp_path / "h" / "temp-agents"

    def test_with_home(self):
        config = OrchestraConfig().with_home("/opt/o")

        assert config.paths.registry_path == Path("/opt/o/agents/registry.json")
