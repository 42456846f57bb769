"""
Main database engine class.
"""

import logging
from typing import Any, Dict, List, Optional

from .config import EngineConfig
from .executor import QueryExecutor
from .parser import QueryParser
from .storage import DEFAULT_KEY, Storage

logger = logging.getLogger(__name__)


class DatabaseEngine:
    """
    Main database engine interface.

    Not thread-safe: callers sharing an engine between threads must serialize
    calls to ``execute`` themselves.
    """

    def __init__(self, data_dir: Optional[str] = "data", storage_key: str = DEFAULT_KEY):
        self.storage = Storage(data_dir, storage_key) if data_dir else None
        self.parser = QueryParser()
        self.executor = QueryExecutor()
        self._load()

    @classmethod
    def from_config(cls, config: EngineConfig) -> 'DatabaseEngine':
        return cls(data_dir=config.data_dir, storage_key=config.storage_key)

    def _load(self) -> None:
        if self.storage is None:
            return
        snapshot = self.storage.load()
        if snapshot is None:
            return
        try:
            self.executor.load_snapshot(snapshot)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning("Ignoring malformed snapshot %s: %r", self.storage.path, e)
            return
        logger.info("Loaded %d table(s) from %s", len(self.executor.tables), self.storage.path)

    def execute(self, query: str) -> Dict[str, Any]:
        """
        Execute a SQL-like command.

        Args:
            query: SQL-like command string

        Returns:
            Read statements: {'success', 'data', 'row_count'}.
            Write statements: {'success', 'message'} plus 'rows_affected'
            for INSERT, UPDATE and DELETE.

        Raises:
            DatabaseError: UnknownCommand, InvalidSyntax, TableNotFound,
                PrimaryKeyViolation or UniqueViolation
        """
        statement = self.parser.parse(query)
        logger.debug("Executing %s", statement)

        # A failed write can still advance a table's id counter, so writes
        # are saved whether or not they succeed.
        try:
            return self.executor.execute(statement)
        finally:
            if not statement.type.is_read:
                self.save()

    def save(self) -> None:
        """Write a snapshot of every table and index."""
        if self.storage is not None:
            self.storage.save(self.executor.to_snapshot())

    def list_tables(self) -> List[str]:
        """List all tables in the database."""
        return list(self.executor.tables)

    def get_table_info(self, table_name: str) -> Dict[str, Any]:
        """Get schema and row count of a table."""
        table = self.executor.get_table(table_name)
        return {
            'schema': table.describe(),
            'row_count': len(table.rows),
        }
