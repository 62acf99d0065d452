from __future__ import annotations


class OrchestraError(Exception):
    """Base exception for all Orchestra errors."""


class _NamedError(OrchestraError):
    """Error tied to a single identifier (agent, variable or macro name)."""

    def __init__(self, name: str, message: str) -> None:
        super().__init__(message)
        self.name = name


# ── Workflow Source Errors ───────────────────────────────────────────

class WorkflowError(OrchestraError):
    """Base for errors raised while reading workflow source."""


class WorkflowSyntaxError(WorkflowError):
    """Invocation or macro text does not match the grammar."""

    def __init__(self, message: str, text: str | None = None) -> None:
        super().__init__(message)
        self.text = text


# ── Agent Errors ─────────────────────────────────────────────────────

class AgentError(OrchestraError):
    """Base for agent-related errors."""


class UnknownAgentError(AgentError, _NamedError):
    """No tier (built-in, defined, temporary) claims the agent name."""

    def __init__(self, name: str, message: str | None = None) -> None:
        super().__init__(
            name,
            message
            or (
                f"Unknown agent: {name}. Agent not found in built-in, "
                f"defined, or temp agents."
            ),
        )


class AgentDefinitionError(AgentError):
    """Agent markdown definition is malformed."""


# ── Variable Errors ──────────────────────────────────────────────────

class VariableError(OrchestraError):
    """Base for variable binding errors."""


class UndefinedVariableError(VariableError, _NamedError):
    """A ``{name}`` placeholder references a name that is not bound."""

    def __init__(self, name: str, message: str | None = None) -> None:
        super().__init__(name, message or f"Variable not found: {name}")


class DuplicateOutputVariableError(VariableError, _NamedError):
    """An output variable was bound twice within one pass."""

    def __init__(self, name: str, message: str | None = None) -> None:
        super().__init__(
            name, message or f"Output variable already bound: {name}"
        )


# ── Macro Errors ─────────────────────────────────────────────────────

class MacroError(OrchestraError):
    """Base for macro expansion errors."""


class UndefinedMacroError(MacroError, _NamedError):
    """A ``$name`` call refers to a macro that was never defined."""

    def __init__(self, name: str, message: str | None = None) -> None:
        super().__init__(name, message or f"Undefined macro '${name}'")


class CircularMacroReferenceError(MacroError, _NamedError):
    """A macro's expansion would need to reference itself."""

    def __init__(self, name: str, message: str | None = None) -> None:
        super().__init__(
            name, message or f"Macro '${name}' references itself"
        )


# ── Registry Errors ──────────────────────────────────────────────────

class RegistryError(OrchestraError):
    """Base for registry store errors."""


class RegistryIOError(RegistryError):
    """The registry file could not be read or written."""

    def __init__(self, message: str, path: object | None = None) -> None:
        super().__init__(message)
        self.path = path


# ── Config Errors ────────────────────────────────────────────────────

class ConfigError(OrchestraError):
    """Invalid or missing configuration."""
