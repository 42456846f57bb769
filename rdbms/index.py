"""
Hash indexes over a single table column.

An index is a point-in-time cache: it is filled from the table's rows when
created and appended to on INSERT. UPDATE and DELETE do not touch it, so
entries can go stale until the index is created again.
"""

from typing import Any, Dict, Iterable, List

from .types import Row, Value


class Index:
    """Maps each distinct column value to the rows that held it when indexed."""

    def __init__(self, name: str, table_name: str, column_name: str):
        self.name = name
        self.table_name = table_name
        self.column_name = column_name
        self._entries: Dict[Value, List[Row]] = {}

    @staticmethod
    def make_key(table_name: str, column_name: str) -> str:
        return f"{table_name}.{column_name}"

    @property
    def key(self) -> str:
        return self.make_key(self.table_name, self.column_name)

    def add(self, row: Row) -> None:
        """Insert a row under its current value for the indexed column."""
        value = row.get(self.column_name)
        self._entries.setdefault(value, []).append(row)

    def build(self, rows: Iterable[Row]) -> None:
        """Replace the index contents with the given rows."""
        self._entries = {}
        for row in rows:
            self.add(row)

    def search(self, value: Value) -> List[Row]:
        """Return the rows recorded for a value."""
        return list(self._entries.get(value, []))

    def values(self) -> List[Value]:
        return list(self._entries)

    def __len__(self) -> int:
        return sum(len(rows) for rows in self._entries.values())

    def to_dict(self) -> Dict[str, Any]:
        """Serialize; entries are [value, rows] pairs so value types survive JSON."""
        return {
            'name': self.name,
            'table': self.table_name,
            'column': self.column_name,
            'entries': [[value, rows] for value, rows in self._entries.items()],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Index':
        index = cls(data['name'], data['table'], data['column'])
        for value, rows in data['entries']:
            index._entries[value] = [dict(row) for row in rows]
        return index
