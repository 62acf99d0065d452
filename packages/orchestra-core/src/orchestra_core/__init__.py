"""Orchestra Core: shared config, errors, and logging."""
from __future__ import annotations

from orchestra_core._version import __version__
from orchestra_core.config import (
    AgentsConfig,
    LoggingConfig,
    MacroConfig,
    OrchestraConfig,
    PathsConfig,
)
from orchestra_core.errors import (
    AgentDefinitionError,
    AgentError,
    CircularMacroReferenceError,
    ConfigError,
    DuplicateOutputVariableError,
    MacroError,
    OrchestraError,
    RegistryError,
    RegistryIOError,
    UndefinedMacroError,
    UndefinedVariableError,
    UnknownAgentError,
    VariableError,
    WorkflowError,
    WorkflowSyntaxError,
)
from orchestra_core.logging import get_logger, setup_logging

__all__ = [
    # Errors
    "AgentDefinitionError",
    "AgentError",
    # Config
    "AgentsConfig",
    "CircularMacroReferenceError",
    "ConfigError",
    "DuplicateOutputVariableError",
    "LoggingConfig",
    "MacroConfig",
    "MacroError",
    "OrchestraConfig",
    "OrchestraError",
    "PathsConfig",
    "RegistryError",
    "RegistryIOError",
    "UndefinedMacroError",
    "UndefinedVariableError",
    "UnknownAgentError",
    "VariableError",
    "WorkflowError",
    "WorkflowSyntaxError",
    # Version
    "__version__",
    # Logging
    "get_logger",
    "setup_logging",
]
