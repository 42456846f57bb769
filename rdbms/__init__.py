"""
Simple RDBMS Database Module
"""

from .engine import DatabaseEngine
from .errors import (
    DatabaseError,
    InvalidSyntax,
    PrimaryKeyViolation,
    TableNotFound,
    UniqueViolation,
    UnknownCommand,
)
from .repl import DatabaseREPL

__all__ = [
    'DatabaseEngine',
    'DatabaseREPL',
    'DatabaseError',
    'InvalidSyntax',
    'PrimaryKeyViolation',
    'TableNotFound',
    'UniqueViolation',
    'UnknownCommand',
]
