"""
In-memory table: schema, constraints, rows and the auto-increment counter.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from .errors import PrimaryKeyViolation, UniqueViolation
from .types import Column, Row, Value

RowFilter = Callable[[Row], bool]


@dataclass
class Constraints:
    """Primary key and UNIQUE columns of a table."""
    primary_key: Optional[str] = None
    unique: List[str] = field(default_factory=list)

    def key_marker(self, column_name: str) -> str:
        if column_name == self.primary_key:
            return 'PRI'
        if column_name in self.unique:
            return 'UNI'
        return ''


@dataclass
class Table:
    """A named table; owns all row mutation and constraint checks."""
    name: str
    columns: List[Column]
    constraints: Constraints = field(default_factory=Constraints)
    rows: List[Row] = field(default_factory=list)
    next_id: int = 1

    def column(self, name: str) -> Optional[Column]:
        return next((col for col in self.columns if col.name == name), None)

    def cast(self, column_name: str, value: Value) -> Value:
        """Cast a value to a column's declared type; undeclared columns store text."""
        col = self.column(column_name)
        if col is None:
            return None if value is None else str(value)
        return col.cast(value)

    def insert(self, columns: Sequence[str], values: Sequence[Value]) -> Row:
        """
        Build, validate and append a row.

        The primary key is assigned from ``next_id`` when it is not among
        ``columns``. The counter advances at assignment, so an insert that
        later fails a constraint still consumes its id.

        Raises:
            PrimaryKeyViolation: NULL or duplicate primary key value
            UniqueViolation: duplicate value in a UNIQUE column
        """
        row: Row = {}
        primary_key = self.constraints.primary_key

        if primary_key and primary_key not in columns:
            row[primary_key] = self.next_id
            self.next_id += 1

        for col_name, value in zip(columns, values):
            row[col_name] = self.cast(col_name, value)

        self._check_constraints(row)
        self.rows.append(row)
        return row

    def _check_constraints(self, row: Row) -> None:
        primary_key = self.constraints.primary_key
        if primary_key:
            value = row.get(primary_key)
            if value is None:
                raise PrimaryKeyViolation(primary_key, "primary key cannot be NULL")
            if self._contains(primary_key, value):
                raise PrimaryKeyViolation(primary_key)

        for col_name in self.constraints.unique:
            value = row.get(col_name)
            if value is not None and self._contains(col_name, value):
                raise UniqueViolation(col_name)

    def _contains(self, column_name: str, value: Value) -> bool:
        return any(
            existing.get(column_name) == value and type(existing.get(column_name)) is type(value)
            for existing in self.rows
        )

    def select(self, where: Optional[RowFilter] = None) -> List[Row]:
        """Return copies of the rows matching ``where`` (all rows if None)."""
        return [dict(row) for row in self.rows if where is None or where(row)]

    def update(self, assignments: Dict[str, Value], where: RowFilter) -> int:
        """Merge ``assignments`` into every matching row; returns the count."""
        count = 0
        for row in self.rows:
            if where(row):
                row.update(assignments)
                count += 1
        return count

    def delete(self, where: RowFilter) -> int:
        """Remove every matching row; returns the count."""
        kept = [row for row in self.rows if not where(row)]
        deleted = len(self.rows) - len(kept)
        self.rows[:] = kept
        return deleted

    def describe(self) -> List[Dict[str, str]]:
        return [
            {
                'column': col.name,
                'type': col.declared_type,
                'key': self.constraints.key_marker(col.name),
            }
            for col in self.columns
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'columns': [col.to_dict() for col in self.columns],
            'constraints': {
                'primary_key': self.constraints.primary_key,
                'unique': list(self.constraints.unique),
            },
            'rows': self.rows,
            'next_id': self.next_id,
        }

    @classmethod
    def from_dict(cls, name: str, data: Dict[str, Any]) -> 'Table':
        constraints = data['constraints']
        return cls(
            name=name,
            columns=[Column.from_dict(col) for col in data['columns']],
            constraints=Constraints(
                primary_key=constraints.get('primary_key'),
                unique=list(constraints.get('unique', [])),
            ),
            rows=[dict(row) for row in data['rows']],
            next_id=int(data['next_id']),
        )
