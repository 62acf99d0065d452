"""WorkflowRunner: sequential execution of a compiled workflow.

The runner owns the binding contract: for each node, in source order, it
interpolates the instruction against the pass's :class:`VariableStore`,
hands it to the external :class:`Dispatcher`, binds the captured output,
and records usage of defined agents.  Nothing is retried or run
concurrently; the first error ends the run.
"""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from orchestra_agents.types import AgentSource
from orchestra_core.logging import get_logger

from orchestra_workflow.variables import VariableStore, interpolate

if TYPE_CHECKING:
    from orchestra_agents.registry import RegistryStore

    from orchestra_workflow.compiler import CompiledNode, CompiledWorkflow

logger = get_logger("workflow.runner")


@runtime_checkable
class Dispatcher(Protocol):
    """Runs one resolved invocation and returns its textual output."""

    def dispatch(self, node: CompiledNode, instruction: str) -> str: ...


@dataclass(frozen=True, slots=True)
class NodeOutcome:
    node: CompiledNode
    instruction: str
    output: str
    duration_ms: float = 0.0


@dataclass(slots=True)
class RunResult:
    variables: VariableStore
    outcomes: list[NodeOutcome] = field(default_factory=list)

    @property
    def last_output(self) -> str | None:
        return self.outcomes[-1].output if self.outcomes else None


class WorkflowRunner:
    """Drives a :class:`Dispatcher` through a compiled workflow."""

    def __init__(
        self, dispatcher: Dispatcher, registry: RegistryStore | None = None
    ) -> None:
        self._dispatcher = dispatcher
        self._registry = registry

    def run(
        self, workflow: CompiledWorkflow, store: VariableStore | None = None
    ) -> RunResult:
        """Execute every node in order.

        Args:
            workflow: The compiled workflow.
            store: Variable store for this pass; a fresh one when *None*.

        Returns:
            The outcomes and the store holding every capture.

        Raises:
            UndefinedVariableError: If an instruction references an unbound name.
            DuplicateOutputVariableError: If a capture name is already bound.
        """
        result = RunResult(variables=store if store is not None else VariableStore())

        for node in workflow.nodes:
            result.outcomes.append(self.run_node(node, result.variables))

        logger.info("Workflow run finished: %d node(s)", len(result.outcomes))
        return result

    def run_node(self, node: CompiledNode, store: VariableStore) -> NodeOutcome:
        instruction = interpolate(node.invocation.instruction, store)

        start = time.monotonic()
        output = self._dispatcher.dispatch(node, instruction)
        duration_ms = (time.monotonic() - start) * 1000

        if node.output_variable is not None:
            store.bind(node.output_variable, output)

        if self._registry is not None and node.source is AgentSource.DEFINED:
            self._registry.increment_usage(node.agent_name)

        logger.info(
            "Agent '%s' (%s) finished line %d (%.1fms)",
            node.agent_name,
            node.source.value,
            node.line_no,
            duration_ms,
        )
        return NodeOutcome(
            node=node, instruction=instruction, output=output, duration_ms=duration_ms
        )
