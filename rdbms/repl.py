"""
Interactive REPL for the database.
"""

import sys
from typing import Any, Dict, List, Optional, TextIO

from pydantic import ValidationError

from .config import EngineConfig
from .engine import DatabaseEngine
from .errors import DatabaseError


class DatabaseREPL:
    """Command-line REPL for interacting with the database."""

    def __init__(self, engine: DatabaseEngine, out: TextIO = sys.stdout):
        self.engine = engine
        self.out = out
        self.running = False

    def _print(self, text: str = "") -> None:
        print(text, file=self.out)

    def run(self):
        """Run the REPL."""
        self.running = True
        self._print("Simple RDBMS REPL")
        self._print("Type 'exit' or 'quit' to exit")
        self._print("Type 'help' for help\n")

        while self.running:
            try:
                line = input("db> ").strip()

                if line.lower() in ('exit', 'quit'):
                    break
                elif line.lower() == 'help':
                    self._print_help()
                    continue
                elif line.lower() in ('tables', '.tables'):
                    self._list_tables()
                    continue
                elif not line:
                    continue

                # Multi-line input ends with ';'
                query = line
                while not query.endswith(';'):
                    next_line = input("... ").strip()
                    if not next_line:
                        break
                    query += " " + next_line

                self.handle(query)

            except KeyboardInterrupt:
                self._print("\nInterrupted")
                break
            except EOFError:
                self._print()
                break
            except Exception as e:
                self._print(f"Unexpected error: {e}")

    def handle(self, query: str) -> Optional[Dict[str, Any]]:
        """Execute one command and print its result or error."""
        try:
            result = self.engine.execute(query)
        except DatabaseError as e:
            self._print(f"Error: {e}")
            return None
        self._display_result(result)
        return result

    def _print_help(self):
        """Print help information."""
        help_text = """
Available commands:
  exit, quit           - Exit the REPL
  help                 - Show this help
  tables, .tables      - List all tables

SQL-like statements (end with ';' to run):
  CREATE TABLE         - Create a new table
  INSERT INTO          - Insert a row into a table
  SELECT               - Query data, optionally with one JOIN
  UPDATE               - Update rows (WHERE required)
  DELETE FROM          - Delete rows (WHERE required)
  CREATE INDEX         - Index a column
  SHOW TABLES          - List tables
  DESCRIBE             - Show a table's columns

Examples:
  CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT, email TEXT UNIQUE);
  INSERT INTO users (name, email) VALUES ('Alice', 'alice@example.com');
  SELECT name FROM users WHERE id >= 1;
  SELECT * FROM users JOIN orders ON users.id = orders.user_id;
  UPDATE users SET name = 'Alicia' WHERE id = 1;
  DELETE FROM users WHERE id = 1;
        """
        self._print(help_text)

    def _list_tables(self):
        """List all tables."""
        tables = self.engine.list_tables()
        if not tables:
            self._print("No tables in database.")
            return

        self._print("Tables:")
        for table in tables:
            info = self.engine.get_table_info(table)
            self._print(f"  {table} ({info['row_count']} rows)")
            for col in info['schema']:
                key = f" ({col['key']})" if col['key'] else ""
                self._print(f"    {col['column']} {col['type']}{key}")

    def _display_result(self, result: Dict[str, Any]):
        """Display query result in a readable format."""
        if 'message' in result:
            self._print(result['message'])

        if 'data' not in result:
            return

        rows = result['data']
        if not rows:
            self._print("No rows returned")
            return

        columns: List[str] = []
        for row in rows:
            columns.extend(col for col in row if col not in columns)

        # Calculate column widths
        col_widths = {col: len(col) for col in columns}
        for row in rows:
            for col in columns:
                col_widths[col] = max(col_widths[col], len(self._format(row.get(col))))

        header = " | ".join(f"{col:<{col_widths[col]}}" for col in columns)
        self._print(header)
        self._print("-" * len(header))

        for row in rows:
            self._print(" | ".join(f"{self._format(row.get(col)):<{col_widths[col]}}" for col in columns))

        self._print(f"\n{result['row_count']} row(s) returned")

    @staticmethod
    def _format(value: Any) -> str:
        return 'NULL' if value is None else str(value)


def main(argv: Optional[List[str]] = None):
    """Main entry point for the REPL."""
    import argparse

    parser = argparse.ArgumentParser(description="Simple RDBMS REPL")

    try:
        config = EngineConfig.from_env()
    except ValidationError as e:
        parser.error(f"invalid environment configuration: {e}")

    parser.add_argument("--data-dir", default=config.data_dir,
                        help="Directory for the database snapshot ('' keeps everything in memory)")
    parser.add_argument("--log-level", default=config.log_level, help="Logging level")

    args = parser.parse_args(argv)
    try:
        config = EngineConfig(data_dir=args.data_dir, storage_key=config.storage_key, log_level=args.log_level)
    except ValidationError as e:
        parser.error(str(e))
    config.configure_logging()

    repl = DatabaseREPL(DatabaseEngine.from_config(config))
    repl.run()


if __name__ == "__main__":
    main()
