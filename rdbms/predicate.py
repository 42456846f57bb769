"""
Single-comparison WHERE predicates.
"""

from dataclasses import dataclass
from typing import Callable, Dict

from .types import Row, Value, loose_compare, loose_equals


def _ordered(*accepted: int) -> Callable[[Value, Value], bool]:
    def compare(left: Value, right: Value) -> bool:
        return loose_compare(left, right) in accepted
    return compare


# Two-character operators come first so that '>=' is never read as '>' or '='.
OPERATORS: Dict[str, Callable[[Value, Value], bool]] = {
    '>=': _ordered(0, 1),
    '<=': _ordered(-1, 0),
    '!=': lambda a, b: not loose_equals(a, b),
    '=': loose_equals,
    '>': _ordered(1),
    '<': _ordered(-1),
}


@dataclass(frozen=True)
class Predicate:
    """A `<column> <op> <literal>` comparison evaluated against a row."""
    column: str
    operator: str
    value: Value

    def __post_init__(self):
        if self.operator not in OPERATORS:
            raise ValueError(f"Unsupported operator: {self.operator}")

    def __call__(self, row: Row) -> bool:
        return OPERATORS[self.operator](row.get(self.column), self.value)

    def __str__(self) -> str:
        return f"{self.column} {self.operator} {self.value!r}"
