"""
Query executor that runs parsed statements against the in-memory tables.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from .errors import InvalidSyntax, TableNotFound
from .index import Index
from .statements import (
    CreateIndex,
    CreateTable,
    Delete,
    Describe,
    Insert,
    JoinClause,
    QueryType,
    Select,
    ShowTables,
    Statement,
    Update,
)
from .table import Constraints, Table
from .types import Column, Row, loose_equals

logger = logging.getLogger(__name__)


def read_result(rows: List[Row]) -> Dict[str, Any]:
    return {'success': True, 'data': rows, 'row_count': len(rows)}


def write_result(message: str, rows_affected: Optional[int] = None) -> Dict[str, Any]:
    result: Dict[str, Any] = {'success': True, 'message': message}
    if rows_affected is not None:
        result['rows_affected'] = rows_affected
    return result


class QueryExecutor:
    """Executes statements against the tables and indexes it owns."""

    def __init__(self):
        self.tables: Dict[str, Table] = {}
        self.indexes: Dict[str, Index] = {}
        self._handlers: Dict[QueryType, Callable[[Any], Dict[str, Any]]] = {
            QueryType.CREATE_TABLE: self._execute_create_table,
            QueryType.INSERT: self._execute_insert,
            QueryType.SELECT: self._execute_select,
            QueryType.UPDATE: self._execute_update,
            QueryType.DELETE: self._execute_delete,
            QueryType.CREATE_INDEX: self._execute_create_index,
            QueryType.SHOW_TABLES: self._execute_show_tables,
            QueryType.DESCRIBE: self._execute_describe,
        }

    def execute(self, statement: Statement) -> Dict[str, Any]:
        """Execute a parsed statement."""
        return self._handlers[statement.type](statement)

    def get_table(self, table_name: str) -> Table:
        table = self.tables.get(table_name)
        if table is None:
            raise TableNotFound(table_name)
        return table

    # ---------------- snapshot ----------------

    def to_snapshot(self) -> Dict[str, Any]:
        return {
            'tables': {name: table.to_dict() for name, table in self.tables.items()},
            'indexes': {key: index.to_dict() for key, index in self.indexes.items()},
        }

    def load_snapshot(self, snapshot: Dict[str, Any]) -> None:
        """
        Replace the current state with a snapshot.

        Raises AttributeError, KeyError, TypeError or ValueError when the
        snapshot is malformed; the current state is left untouched then.
        """
        tables = {
            name: Table.from_dict(name, data)
            for name, data in snapshot.get('tables', {}).items()
        }
        indexes = {
            key: Index.from_dict(data)
            for key, data in snapshot.get('indexes', {}).items()
        }
        self.tables = tables
        self.indexes = indexes

    # ---------------- statements ----------------

    def _execute_create_table(self, query: CreateTable) -> Dict[str, Any]:
        table_name = query.table_name

        if table_name in self.tables:
            logger.warning("Replacing existing table '%s'", table_name)

        columns = [Column(name=col.name, declared_type=col.type_name) for col in query.columns]
        constraints = Constraints(
            primary_key=next((col.name for col in query.columns if col.primary_key), None),
            unique=[col.name for col in query.columns if col.unique],
        )

        self.tables[table_name] = Table(name=table_name, columns=columns, constraints=constraints)

        return write_result(f"Table {table_name} created")

    def _execute_insert(self, query: Insert) -> Dict[str, Any]:
        table = self.get_table(query.table_name)
        row = table.insert(query.columns, query.values)

        for index in self.indexes.values():
            if index.table_name == table.name:
                index.add(row)

        return write_result("Row inserted", 1)

    def _execute_select(self, query: Select) -> Dict[str, Any]:
        if query.join is not None:
            return self._execute_join(query, query.join)

        table = self.get_table(query.table_name)
        rows = table.select(query.where)

        if query.columns is not None:
            rows = [{col: row.get(col) for col in query.columns} for row in rows]

        return read_result(rows)

    def _execute_join(self, query: Select, join: JoinClause) -> Dict[str, Any]:
        """Nested-loop INNER JOIN; O(len(left) * len(right))."""
        left_table = self.get_table(query.table_name)
        right_table = self.get_table(join.table_name)

        # Match the ON operands to the tables by qualifier, in either order.
        if join.left.table == right_table.name and join.right.table == left_table.name:
            left_ref, right_ref = join.right, join.left
        else:
            left_ref, right_ref = join.left, join.right

        if {left_ref.table, right_ref.table} != {left_table.name, right_table.name}:
            raise InvalidSyntax(
                QueryType.SELECT.value,
                f"JOIN condition must reference {left_table.name} and {right_table.name}",
            )

        if query.where is not None:
            logger.warning("WHERE clause is not applied to JOIN queries: %s", query.where)

        results = []
        for left_row in left_table.rows:
            for right_row in right_table.rows:
                if loose_equals(left_row.get(left_ref.column), right_row.get(right_ref.column)):
                    joined = {f"{left_table.name}.{k}": v for k, v in left_row.items()}
                    joined.update({f"{right_table.name}.{k}": v for k, v in right_row.items()})
                    results.append(joined)

        if query.columns is not None:
            results = [{col: row.get(col) for col in query.columns} for row in results]

        return read_result(results)

    def _execute_update(self, query: Update) -> Dict[str, Any]:
        table = self.get_table(query.table_name)
        count = table.update(query.assignments, query.where)
        return write_result(f"Updated {count} row(s)", count)

    def _execute_delete(self, query: Delete) -> Dict[str, Any]:
        table = self.get_table(query.table_name)
        deleted = table.delete(query.where)
        return write_result(f"Deleted {deleted} row(s)", deleted)

    def _execute_create_index(self, query: CreateIndex) -> Dict[str, Any]:
        table = self.get_table(query.table_name)

        index = Index(query.index_name, table.name, query.column_name)
        index.build(table.rows)
        self.indexes[index.key] = index

        return write_result(
            f"Index {query.index_name} created on {table.name}({query.column_name})"
        )

    def _execute_show_tables(self, query: ShowTables) -> Dict[str, Any]:
        return read_result([{'table_name': name} for name in self.tables])

    def _execute_describe(self, query: Describe) -> Dict[str, Any]:
        return read_result(self.get_table(query.table_name).describe())
