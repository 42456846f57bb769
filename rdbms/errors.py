"""
Exception types raised by the database engine.
"""

from typing import Optional


class DatabaseError(Exception):
    """Base class for every error raised while executing a statement."""


class UnknownCommand(DatabaseError):
    """The leading keyword of a command is not recognized."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"Unknown command: {command}")


class InvalidSyntax(DatabaseError):
    """A statement does not match its grammar."""

    def __init__(self, statement: str, detail: Optional[str] = None):
        self.statement = statement
        self.detail = detail
        message = f"Invalid {statement} syntax"
        if detail:
            message = f"{message} - {detail}"
        super().__init__(message)


class TableNotFound(DatabaseError):
    """A statement references a table that does not exist."""

    def __init__(self, table_name: str):
        self.table_name = table_name
        super().__init__(f"Table {table_name} does not exist")


class PrimaryKeyViolation(DatabaseError):
    """An INSERT would duplicate (or omit) a primary key value."""

    def __init__(self, column: str, reason: str = "duplicate key value"):
        self.column = column
        super().__init__(f"Primary key violation: {reason}")


class UniqueViolation(DatabaseError):
    """An INSERT would duplicate a value in a UNIQUE column."""

    def __init__(self, column: str):
        self.column = column
        super().__init__(f"Unique constraint violation on column: {column}")
