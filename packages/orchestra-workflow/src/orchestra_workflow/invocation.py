"""Invocation parser: ``agent:"instruction"(:var)?`` to an Invocation record.

Grammar::

    invocation   ::= agentName ":" quotedText (":" identifier)?
    agentName    ::= identifier
    identifier   ::= [A-Za-z0-9_-]+
    quotedText   ::= '"' ( '\\"' | [^"] )* '"'

A backslash directly before a quote is always an escape, so ``"foo\\"`` is
an unterminated string rather than the text ``foo\\``.  Anything that does
not match the grammar in full rejects the whole line.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from orchestra_core.errors import WorkflowSyntaxError

IDENTIFIER = r"[A-Za-z0-9_-]+"
QUOTED_BODY = r'(?:\\"|[^"\\]|\\(?!"))*'

IDENTIFIER_PATTERN = re.compile(IDENTIFIER)
_INVOCATION_RE = re.compile(
    rf'(?P<agent>{IDENTIFIER}):"(?P<text>{QUOTED_BODY})"(?::(?P<var>{IDENTIFIER}))?'
)


def is_identifier(value: str) -> bool:
    return IDENTIFIER_PATTERN.fullmatch(value) is not None


def unescape(text: str) -> str:
    """Turn quoted-text source into its value (``\\"`` -> ``"``)."""
    return text.replace('\\"', '"')


def escape(text: str) -> str:
    """Turn a value into quoted-text source.

    Raises:
        ValueError: If *text* ends with a backslash, which would read back
            as an escaped closing quote.
    """
    if text.endswith("\\"):
        msg = "Text ending with a backslash cannot be quoted"
        raise ValueError(msg)
    return text.replace('"', '\\"')


@dataclass(frozen=True, slots=True)
class Invocation:
    """One parsed line of workflow source."""

    agent_name: str
    instruction: str
    output_variable: str | None = None

    def __post_init__(self) -> None:
        if not is_identifier(self.agent_name):
            msg = f"Invalid agent name: {self.agent_name!r}"
            raise ValueError(msg)
        if not self.instruction:
            msg = f"Invocation of '{self.agent_name}' has an empty instruction"
            raise ValueError(msg)
        if self.output_variable is not None and not is_identifier(self.output_variable):
            msg = f"Invalid output variable: {self.output_variable!r}"
            raise ValueError(msg)


def parse(line: str) -> Invocation:
    """Parse one invocation.

    Surrounding whitespace is ignored; everything else must match the
    grammar exactly.

    Raises:
        WorkflowSyntaxError: If *line* is not a valid invocation.
    """
    text = line.strip()
    match = _INVOCATION_RE.fullmatch(text)
    if match is None:
        msg = f"Invalid agent invocation syntax: {text}"
        raise WorkflowSyntaxError(msg, text)

    instruction = unescape(match.group("text"))
    if not instruction:
        msg = f"Empty instruction for agent '{match.group('agent')}': {text}"
        raise WorkflowSyntaxError(msg, text)

    return Invocation(
        agent_name=match.group("agent"),
        instruction=instruction,
        output_variable=match.group("var"),
    )


def serialize(invocation: Invocation) -> str:
    """Render the canonical source text for *invocation*."""
    text = f'{invocation.agent_name}:"{escape(invocation.instruction)}"'
    if invocation.output_variable is not None:
        text += f":{invocation.output_variable}"
    return text
