"""WorkflowCompiler: workflow source to resolved, typed invocation nodes.

Phases, in order:

1. macro expansion (:mod:`orchestra_workflow.macros`)
2. invocation parsing, one statement at a time
3. agent resolution through the three-tier chain
4. static variable checks: every ``{name}`` must be captured by an earlier
   statement, and no capture name may be used twice

The first error stops compilation.  Messages are prefixed with the source
location, mapped back to the macro definition for expanded statements.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from orchestra_agents.resolver import AgentResolver
from orchestra_core.errors import (
    DuplicateOutputVariableError,
    UndefinedVariableError,
    UnknownAgentError,
    WorkflowSyntaxError,
)
from orchestra_core.logging import get_logger

from orchestra_workflow.invocation import Invocation, parse
from orchestra_workflow.macros import DEFAULT_MODEL, MacroDefinition, expand
from orchestra_workflow.variables import extract_references

if TYPE_CHECKING:
    from orchestra_agents.registry import RegistryStore
    from orchestra_agents.types import AgentDescriptor, AgentSource
    from orchestra_core.config import OrchestraConfig

    from orchestra_workflow.statements import Statement

logger = get_logger("workflow.compiler")


@dataclass(frozen=True, slots=True)
class CompiledNode:
    """A parsed invocation together with its resolved agent."""

    invocation: Invocation
    descriptor: AgentDescriptor
    uses_variables: tuple[str, ...] = ()
    line_no: int = 0
    model: str | None = None
    macro_name: str | None = None

    @property
    def agent_name(self) -> str:
        return self.invocation.agent_name

    @property
    def output_variable(self) -> str | None:
        return self.invocation.output_variable

    @property
    def source(self) -> AgentSource:
        return self.descriptor.source


@dataclass(frozen=True, slots=True)
class CompiledWorkflow:
    nodes: tuple[CompiledNode, ...] = ()
    macros: dict[str, MacroDefinition] = field(default_factory=dict)

    @property
    def outputs(self) -> tuple[str, ...]:
        """Capture names in the order they are produced."""
        return tuple(
            n.output_variable for n in self.nodes if n.output_variable is not None
        )

    def __len__(self) -> int:
        return len(self.nodes)


class WorkflowCompiler:
    """Compiles workflow source against an :class:`AgentResolver`."""

    def __init__(
        self, resolver: AgentResolver, default_model: str = DEFAULT_MODEL
    ) -> None:
        self._resolver = resolver
        self.default_model = default_model

    @classmethod
    def from_config(
        cls, config: OrchestraConfig, store: RegistryStore | None = None
    ) -> WorkflowCompiler:
        return cls(
            AgentResolver.from_config(config, store),
            default_model=config.macros.default_model,
        )

    def compile(self, source: str) -> CompiledWorkflow:
        """Compile *source* into nodes in source order.

        Raises:
            WorkflowSyntaxError: Malformed invocation or macro text.
            UndefinedMacroError: A call to a macro that is not defined.
            CircularMacroReferenceError: A macro chain that loops.
            UnknownAgentError: No tier claims an agent name.
            UndefinedVariableError: A reference to a name not yet captured.
            DuplicateOutputVariableError: A capture name used twice.
        """
        expanded = expand(source, default_model=self.default_model)
        captured: dict[str, int] = {}
        nodes = tuple(
            self._compile_statement(statement, captured)
            for statement in expanded.statements
        )

        logger.info(
            "Compiled %d invocation(s), %d from macros, %d capture(s)",
            len(nodes),
            len(expanded.expansions),
            len(captured),
        )
        return CompiledWorkflow(nodes=nodes, macros=expanded.macros)

    def _compile_statement(
        self, statement: Statement, captured: dict[str, int]
    ) -> CompiledNode:
        origin = statement.origin

        try:
            invocation = parse(statement.text)
        except WorkflowSyntaxError as exc:
            raise WorkflowSyntaxError(f"{origin}: {exc}", statement.text) from exc

        try:
            descriptor = self._resolver.resolve(invocation.agent_name)
        except UnknownAgentError as exc:
            raise UnknownAgentError(exc.name, f"{origin}: {exc}") from exc

        uses = tuple(extract_references(invocation.instruction))
        for name in uses:
            if name not in captured:
                msg = (
                    f"{origin}: Variable not found: {name} "
                    f"(no earlier invocation captures it)"
                )
                raise UndefinedVariableError(name, msg)

        output = invocation.output_variable
        if output is not None:
            if output in captured:
                msg = (
                    f"{origin}: Output variable already bound: {output} "
                    f"(first captured on line {captured[output]})"
                )
                raise DuplicateOutputVariableError(output, msg)
            captured[output] = statement.line_no

        expansion = statement.expansion
        return CompiledNode(
            invocation=invocation,
            descriptor=descriptor,
            uses_variables=uses,
            line_no=statement.line_no,
            model=expansion.model if expansion is not None else None,
            macro_name=expansion.macro_name if expansion is not None else None,
        )
