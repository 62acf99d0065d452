from __future__ import annotations

import logging
import textwrap
from typing import TYPE_CHECKING

import pytest
from orchestra_agents.registry import RegistryStore
from orchestra_agents.resolver import AgentResolver
from orchestra_workflow.compiler import WorkflowCompiler

if TYPE_CHECKING:
    from pathlib import Path


def agent_markdown(name: str, description: str, body: str = "Do the work.") -> str:
    return textwrap.dedent(f"""\
        ---
        name: {name}
        description: {description}
        tools: Read, Grep
        model: sonnet
        ---

        {body}
    """)


@pytest.fixture(autouse=True)
def _reset_orchestra_logger():
    yield
    logger = logging.getLogger("orchestra")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def orchestra_home(tmp_path: Path) -> Path:
    home = tmp_path / "orchestra-home"
    (home / "agents").mkdir(parents=True)
    (home / "temp-agents").mkdir(parents=True)
    return home


@pytest.fixture
def store(orchestra_home: Path) -> RegistryStore:
    return RegistryStore(
        agents_dir=orchestra_home / "agents",
        temp_agents_dir=orchestra_home / "temp-agents",
    )


@pytest.fixture
def write_temp_agent(store: RegistryStore):
    def _write(name: str, description: str = "A temporary helper") -> Path:
        path = store.temporary_path(name)
        path.write_text(agent_markdown(name, description), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def write_defined_agent(store: RegistryStore):
    def _write(name: str, description: str = "A defined helper") -> Path:
        path = store.defined_path(name)
        path.write_text(agent_markdown(name, description), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def resolver(store: RegistryStore) -> AgentResolver:
    return AgentResolver.from_store(store)


@pytest.fixture
def compiler(resolver: AgentResolver) -> WorkflowCompiler:
    return WorkflowCompiler(resolver)
