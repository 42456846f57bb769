"""
Core data types and value rules for the RDBMS.

Values are plain Python scalars: ``int``, ``float``, ``str`` or ``None``
(NULL). Comparisons are loose: a number compared with text that looks like
a number compares numerically, anything involving NULL is only ever equal
to another NULL, and values that cannot be compared (a number against
non-numeric text) are unequal and unordered.
"""

import logging
import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

logger = logging.getLogger(__name__)

Value = Union[int, float, str, None]
Row = Dict[str, Value]

INTEGER_PATTERN = re.compile(r'^[+-]?\d+$')
REAL_PATTERN = re.compile(r'^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$')

# Leading-prefix patterns used when casting text into a numeric column.
INTEGER_PREFIX = re.compile(r'^\s*([+-]?\d+)')
REAL_PREFIX = re.compile(r'^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)')


class DataType(Enum):
    """Column types the engine knows how to cast to."""
    INTEGER = "INTEGER"
    REAL = "REAL"
    TEXT = "TEXT"

    @classmethod
    def from_declared(cls, declared: Optional[str]) -> 'DataType':
        """Map a declared column type onto a DataType; unknown types are TEXT."""
        if declared:
            try:
                return cls(declared.strip().upper())
            except ValueError:
                pass
        return cls.TEXT


@dataclass
class Column:
    """Represents a table column definition."""
    name: str
    declared_type: str

    @property
    def dtype(self) -> DataType:
        return DataType.from_declared(self.declared_type)

    def cast(self, value: Value) -> Value:
        """Cast a parsed literal to this column's type."""
        return cast_value(value, self.dtype, self.name)

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'type': self.declared_type}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Column':
        return cls(name=data['name'], declared_type=data['type'])


def parse_number(text: str) -> Union[int, float, None]:
    """Parse text that is entirely a number; returns None otherwise."""
    text = text.strip()
    if INTEGER_PATTERN.match(text):
        return int(text)
    if REAL_PATTERN.match(text):
        return float(text)
    return None


def cast_value(value: Value, dtype: DataType, column: str = "?") -> Value:
    """
    Cast a value to a column type.

    INTEGER and REAL parse the leading numeric prefix of text ("12abc" -> 12);
    text with no numeric prefix casts to NULL. TEXT stringifies anything that
    is not NULL.
    """
    if value is None:
        return None

    if dtype == DataType.INTEGER:
        if isinstance(value, (int, float)):
            return int(value) if math.isfinite(value) else None
        match = INTEGER_PREFIX.match(value)
        if match:
            return int(match.group(1))
        logger.warning("Value %r is not an integer for column '%s', storing NULL", value, column)
        return None

    if dtype == DataType.REAL:
        if isinstance(value, (int, float)):
            return float(value)
        match = REAL_PREFIX.match(value)
        if match:
            return float(match.group(1))
        logger.warning("Value %r is not a real for column '%s', storing NULL", value, column)
        return None

    if isinstance(value, float) and value.is_integer():
        # Whole floats render without a fraction: 3.0 -> '3'.
        return str(int(value))
    return value if isinstance(value, str) else str(value)


def _coerce_pair(left: Value, right: Value) -> Optional[Tuple[Any, Any]]:
    """Bring two non-NULL values to a comparable pair, or None if they cannot be compared."""
    left_numeric = isinstance(left, (int, float))
    right_numeric = isinstance(right, (int, float))

    if left_numeric and right_numeric:
        return left, right
    if left_numeric:
        number = parse_number(right)
        return None if number is None else (left, number)
    if right_numeric:
        number = parse_number(left)
        return None if number is None else (number, right)
    return left, right


def loose_equals(left: Value, right: Value) -> bool:
    """Equality with number/text coercion; NULL equals only NULL."""
    if left is None or right is None:
        return left is None and right is None
    pair = _coerce_pair(left, right)
    return pair is not None and pair[0] == pair[1]


def loose_compare(left: Value, right: Value) -> Optional[int]:
    """
    Order two values.

    Returns -1, 0 or 1, or None when the values are not comparable
    (either side NULL, or a number against non-numeric text).
    """
    if left is None or right is None:
        return None
    pair = _coerce_pair(left, right)
    if pair is None:
        return None
    a, b = pair
    return (a > b) - (a < b)
