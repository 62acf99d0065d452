"""Orchestra Workflow: invocation parsing, macros, variables, compile and run."""
from __future__ import annotations

from orchestra_workflow.compiler import CompiledNode, CompiledWorkflow, WorkflowCompiler
from orchestra_workflow.invocation import Invocation, parse, serialize
from orchestra_workflow.macros import (
    DEFAULT_MODEL,
    ExpandedSource,
    MacroDefinition,
    MacroExpansion,
    expand,
)
from orchestra_workflow.runner import Dispatcher, NodeOutcome, RunResult, WorkflowRunner
from orchestra_workflow.statements import Statement, split_statements
from orchestra_workflow.variables import VariableStore, extract_references, interpolate

__all__ = [
    "DEFAULT_MODEL",
    "CompiledNode",
    "CompiledWorkflow",
    "Dispatcher",
    "ExpandedSource",
    "Invocation",
    "MacroDefinition",
    "MacroExpansion",
    "NodeOutcome",
    "RunResult",
    "Statement",
    "VariableStore",
    "WorkflowCompiler",
    "WorkflowRunner",
    "expand",
    "extract_references",
    "interpolate",
    "parse",
    "serialize",
    "split_statements",
]
