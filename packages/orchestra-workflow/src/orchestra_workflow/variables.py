"""Variable binding: ``{name}`` placeholders and the per-pass symbol table."""
from __future__ import annotations

import re
from collections.abc import Iterator, Mapping

from orchestra_core.errors import DuplicateOutputVariableError, UndefinedVariableError

from orchestra_workflow.invocation import is_identifier

PLACEHOLDER_PATTERN = re.compile(r"\{([A-Za-z0-9_-]+)\}")


class VariableStore:
    """Capture name -> value table scoped to one workflow pass.

    Entries are appended in source order and never overwritten.  The store
    is an ordinary object passed to whoever needs it; there is no shared
    global instance, so separate passes never see each other's captures.
    """

    def __init__(self) -> None:
        self._values: dict[str, str] = {}

    def bind(self, name: str, value: str) -> None:
        """Record the output captured as *name*.

        Raises:
            DuplicateOutputVariableError: If *name* is already bound.
            ValueError: If *name* is not a legal identifier.
        """
        if not is_identifier(name):
            msg = f"Invalid variable name: {name!r}"
            raise ValueError(msg)
        if name in self._values:
            raise DuplicateOutputVariableError(name)
        self._values[name] = value

    def get(self, name: str, default: str | None = None) -> str | None:
        return self._values.get(name, default)

    def names(self) -> tuple[str, ...]:
        return tuple(self._values)

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)

    def __getitem__(self, name: str) -> str:
        try:
            return self._values[name]
        except KeyError:
            raise UndefinedVariableError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"VariableStore({list(self._values)!r})"


def extract_references(instruction: str) -> list[str]:
    """Distinct ``{name}`` references in first-occurrence order."""
    return list(dict.fromkeys(PLACEHOLDER_PATTERN.findall(instruction)))


def interpolate(instruction: str, store: VariableStore | Mapping[str, str]) -> str:
    """Replace every ``{name}`` with its bound value.

    Substitution is single-pass: placeholders appearing inside substituted
    values are not expanded again.

    Raises:
        UndefinedVariableError: For the first reference absent from *store*.
            Nothing is substituted in that case.
    """
    for name in extract_references(instruction):
        if name not in store:
            raise UndefinedVariableError(name)
    return PLACEHOLDER_PATTERN.sub(lambda m: store[m.group(1)], instruction)
