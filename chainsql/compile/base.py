"""Compiled statement value object."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

#: The only placeholder style emitted by the compiler.
PLACEHOLDER = "?"


@dataclass(frozen=True)
class CompiledSQL:
    """The output of a successful compilation.

    Attributes:
        sql: The compiled SQL string with qmark ``?`` placeholders.
        params: Values for the placeholders, in left-to-right order.
    """

    sql: str
    params: list[Any] = field(default_factory=list)

    @property
    def placeholder_count(self) -> int:
        """Number of ``?`` placeholders outside quoted string literals."""
        return len(placeholder_positions(self.sql))


def placeholders(count: int) -> str:
    """Return ``?, ?, …`` with ``count`` placeholders."""
    return ", ".join([PLACEHOLDER] * count)


def placeholder_positions(sql: str) -> list[int]:
    """Return the offsets of every ``?`` not inside a quoted literal.

    Single-quoted strings and double-quoted identifiers are skipped; a doubled
    quote inside either is treated as an escaped quote.
    """
    positions: list[int] = []
    quote: str | None = None
    for index, char in enumerate(sql):
        if quote is not None:
            if char == quote:
                quote = None
            continue
        if char in ("'", '"'):
            quote = char
        elif char == PLACEHOLDER:
            positions.append(index)
    return positions
