"""Splitting workflow source into logical statements.

A statement normally occupies one line.  It continues onto following lines
while a quoted string or a ``{...}`` block (macro definition) is still open.
Blank lines and lines starting with ``#`` between statements are skipped.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from orchestra_workflow.macros import MacroExpansion


@dataclass(frozen=True, slots=True)
class Statement:
    """One logical statement of workflow source, possibly macro-expanded."""

    text: str
    line_no: int
    expansion: MacroExpansion | None = None

    @property
    def origin(self) -> str:
        """Human-readable source location, mapped back through macros."""
        if self.expansion is None:
            return f"line {self.line_no}"
        return (
            f"line {self.line_no} (expanded from macro "
            f"'${self.expansion.macro_name}' defined on line "
            f"{self.expansion.definition_line_no})"
        )


def _scan(line: str, in_quote: bool, depth: int) -> tuple[bool, int]:
    """Advance quote/brace state across one physical line."""
    prev = ""
    for ch in line:
        if in_quote:
            if ch == '"' and prev != "\\":
                in_quote = False
        elif ch == '"':
            in_quote = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth = max(depth - 1, 0)
        prev = ch
    return in_quote, depth


def split_statements(source: str) -> list[Statement]:
    """Split *source* into statements with 1-based starting line numbers.

    An unterminated quote or block runs to the end of the source and is
    returned as one statement; the parser then rejects it.
    """
    statements: list[Statement] = []
    pending: list[str] = []
    start = 0
    in_quote = False
    depth = 0

    for line_no, line in enumerate(source.splitlines(), start=1):
        if not pending:
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            start = line_no
        pending.append(line)
        in_quote, depth = _scan(line, in_quote, depth)
        if not in_quote and depth == 0:
            statements.append(Statement("\n".join(pending).strip(), start))
            pending = []

    if pending:
        statements.append(Statement("\n".join(pending).strip(), start))

    return statements
