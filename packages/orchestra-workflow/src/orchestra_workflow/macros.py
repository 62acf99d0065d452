"""Macro expansion: the ``$name := {...}`` compilation phase.

Runs before invocation parsing.  Definitions::

    $sec := { base: "general-purpose", prompt: "You are security-focused." }

are removed from the source and every call ``$sec:"scan auth":findings`` is
rewritten into a plain invocation of the base agent whose instruction is the
macro preamble, a blank line, then the call-site instruction::

    general-purpose:"You are security-focused.\\n\\nscan auth":findings

A ``base`` of the form ``$other`` chains to another macro; the innermost
preamble comes first.  Preambles are plain text templates: ``{name}``
placeholders inside them are left for the variable binding pass.  The
macro's ``model`` and the call's output variable travel with the rewritten
statement as :class:`MacroExpansion` metadata.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field

from orchestra_core.errors import (
    CircularMacroReferenceError,
    UndefinedMacroError,
    WorkflowSyntaxError,
)
from orchestra_core.logging import get_logger

from orchestra_workflow.invocation import (
    IDENTIFIER,
    QUOTED_BODY,
    Invocation,
    is_identifier,
    serialize,
    unescape,
)
from orchestra_workflow.statements import Statement, split_statements

logger = get_logger("workflow.macros")

DEFAULT_MODEL = "sonnet"
PREAMBLE_SEPARATOR = "\n\n"

_MACRO_FIELDS = frozenset({"base", "prompt", "model"})

_DEFINITION_HEAD_RE = re.compile(rf"\$(?P<name>{IDENTIFIER})\s*:=")
_DEFINITION_RE = re.compile(
    rf"\$(?P<name>{IDENTIFIER})\s*:=\s*\{{(?P<body>.*)\}}", re.DOTALL
)
_FIELD_RE = re.compile(rf'\s*(?P<key>\w+)\s*:\s*"(?P<value>{QUOTED_BODY})"\s*')
_CALL_RE = re.compile(
    rf'\$(?P<name>{IDENTIFIER}):"(?P<text>{QUOTED_BODY})"(?::(?P<var>{IDENTIFIER}))?'
)


@dataclass(frozen=True, slots=True)
class MacroDefinition:
    name: str
    base: str
    prompt: str
    model: str = DEFAULT_MODEL
    line_no: int = 0


@dataclass(frozen=True, slots=True)
class MacroExpansion:
    """Side-channel metadata for one rewritten macro call."""

    macro_name: str
    base_agent: str
    output_variable: str | None
    model: str
    original_text: str
    line_no: int
    definition_line_no: int


@dataclass(frozen=True, slots=True)
class ExpandedSource:
    """Result of the macro phase: plain statements plus the macro table."""

    statements: list[Statement] = field(default_factory=list)
    macros: dict[str, MacroDefinition] = field(default_factory=dict)

    @property
    def text(self) -> str:
        return "\n".join(s.text for s in self.statements)

    @property
    def expansions(self) -> list[MacroExpansion]:
        return [s.expansion for s in self.statements if s.expansion is not None]


def is_definition(text: str) -> bool:
    return _DEFINITION_HEAD_RE.match(text) is not None


def is_call(text: str) -> bool:
    return text.startswith("$") and not is_definition(text)


def parse_definition(
    text: str, line_no: int = 0, default_model: str = DEFAULT_MODEL
) -> MacroDefinition:
    """Parse one ``$name := { field: "...", ... }`` statement.

    Raises:
        WorkflowSyntaxError: On malformed text, unknown or repeated fields,
            a missing ``base``/``prompt``, or an invalid ``base`` name.
    """
    match = _DEFINITION_RE.fullmatch(text.strip())
    if match is None:
        msg = f"Invalid macro definition syntax: {text.strip()}"
        raise WorkflowSyntaxError(msg, text)

    name = match.group("name")
    fields = _parse_fields(name, match.group("body"), text)

    for required in ("base", "prompt"):
        if not fields.get(required):
            msg = f"Macro '${name}' missing required field: {required}"
            raise WorkflowSyntaxError(msg, text)

    base = fields["base"]
    base_name = base[1:] if base.startswith("$") else base
    if not is_identifier(base_name):
        msg = f"Macro '${name}' has an invalid base agent: {base!r}"
        raise WorkflowSyntaxError(msg, text)

    return MacroDefinition(
        name=name,
        base=base,
        prompt=fields["prompt"],
        model=fields.get("model") or default_model,
        line_no=line_no,
    )


def _parse_fields(name: str, body: str, text: str) -> dict[str, str]:
    fields: dict[str, str] = {}
    pos = 0
    while True:
        match = _FIELD_RE.match(body, pos)
        if match is None:
            msg = f"Malformed field list in macro '${name}': {{{body.strip()}}}"
            raise WorkflowSyntaxError(msg, text)

        key = match.group("key")
        if key not in _MACRO_FIELDS:
            msg = f"Unknown field '{key}' in macro '${name}'"
            raise WorkflowSyntaxError(msg, text)
        if key in fields:
            msg = f"Field '{key}' repeated in macro '${name}'"
            raise WorkflowSyntaxError(msg, text)
        fields[key] = unescape(match.group("value"))

        pos = match.end()
        if pos == len(body):
            return fields
        if body[pos] != ",":
            msg = f"Expected ',' between fields in macro '${name}'"
            raise WorkflowSyntaxError(msg, text)
        pos += 1


def extract_definitions(
    statements: list[Statement], default_model: str = DEFAULT_MODEL
) -> tuple[dict[str, MacroDefinition], list[Statement]]:
    """Collect macro definitions and return the remaining statements."""
    macros: dict[str, MacroDefinition] = {}
    remaining: list[Statement] = []

    for statement in statements:
        if not is_definition(statement.text):
            remaining.append(statement)
            continue
        try:
            definition = parse_definition(
                statement.text, statement.line_no, default_model
            )
        except WorkflowSyntaxError as exc:
            msg = f"line {statement.line_no}: {exc}"
            raise WorkflowSyntaxError(msg, statement.text) from exc

        previous = macros.get(definition.name)
        if previous is not None:
            msg = (
                f"line {statement.line_no}: macro '${definition.name}' is "
                f"already defined on line {previous.line_no}"
            )
            raise WorkflowSyntaxError(msg, statement.text)
        macros[definition.name] = definition

    return macros, remaining


def resolve_chain(
    name: str, macros: dict[str, MacroDefinition]
) -> tuple[str, list[str]]:
    """Follow ``$other`` bases from macro *name*.

    Returns:
        The final base agent name and the preambles, innermost first.

    Raises:
        UndefinedMacroError: If *name* or a chained base is not defined.
        CircularMacroReferenceError: If the chain comes back to a macro
            already on it.
    """
    if name not in macros:
        raise UndefinedMacroError(name, _undefined_message(name, macros))

    chain = [name]
    macro = macros[name]
    preambles = [macro.prompt]
    base = macro.base
    while base.startswith("$"):
        ref = base[1:]
        if ref in chain:
            path = " -> ".join(f"${n}" for n in [*chain, ref])
            msg = f"Macro '${ref}' references itself: {path}"
            raise CircularMacroReferenceError(ref, msg)
        if ref not in macros:
            raise UndefinedMacroError(ref, _undefined_message(ref, macros))
        chain.append(ref)
        macro = macros[ref]
        preambles.insert(0, macro.prompt)
        base = macro.base
    return base, preambles


def _undefined_message(name: str, macros: dict[str, MacroDefinition]) -> str:
    available = ", ".join(f"${n}" for n in sorted(macros)) or "none"
    return f"Undefined macro '${name}'. Available macros: {available}"


def expand_call(statement: Statement, macros: dict[str, MacroDefinition]) -> Statement:
    """Rewrite one ``$name:"..."`` statement into a plain invocation."""
    text = statement.text
    match = _CALL_RE.fullmatch(text)
    if match is None:
        msg = f"line {statement.line_no}: Invalid macro invocation syntax: {text}"
        raise WorkflowSyntaxError(msg, text)

    name = match.group("name")
    instruction = unescape(match.group("text"))
    if not instruction:
        msg = f"line {statement.line_no}: Empty instruction for macro '${name}': {text}"
        raise WorkflowSyntaxError(msg, text)
    try:
        base_agent, preambles = resolve_chain(name, macros)
    except (UndefinedMacroError, CircularMacroReferenceError) as exc:
        raise type(exc)(exc.name, f"line {statement.line_no}: {exc}") from exc
    macro = macros[name]

    invocation = Invocation(
        agent_name=base_agent,
        instruction=PREAMBLE_SEPARATOR.join([*preambles, instruction]),
        output_variable=match.group("var"),
    )
    try:
        rewritten = serialize(invocation)
    except ValueError as exc:
        msg = f"line {statement.line_no}: cannot expand macro '${name}': {exc}"
        raise WorkflowSyntaxError(msg, text) from exc

    expansion = MacroExpansion(
        macro_name=name,
        base_agent=base_agent,
        output_variable=invocation.output_variable,
        model=macro.model,
        original_text=text,
        line_no=statement.line_no,
        definition_line_no=macro.line_no,
    )
    return Statement(rewritten, statement.line_no, expansion)


def expand(source: str, default_model: str = DEFAULT_MODEL) -> ExpandedSource:
    """Run the macro phase over workflow *source*.

    All definitions are collected first, so a call may appear before the
    definition it uses.  Statements that are neither definitions nor
    calls pass through untouched.
    """
    macros, remaining = extract_definitions(split_statements(source), default_model)

    statements = [
        expand_call(statement, macros) if is_call(statement.text) else statement
        for statement in remaining
    ]

    expanded = ExpandedSource(statements=statements, macros=macros)
    if macros:
        logger.debug(
            "Expanded %d macro call(s) using %d definition(s)",
            len(expanded.expansions),
            len(macros),
        )
    return expanded
