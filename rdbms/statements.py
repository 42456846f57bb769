"""
Typed statements produced by the parser.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, Optional, Tuple

from .predicate import Predicate
from .types import Value


class QueryType(Enum):
    """Types of statements we support."""
    CREATE_TABLE = "CREATE TABLE"
    INSERT = "INSERT"
    SELECT = "SELECT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    CREATE_INDEX = "CREATE INDEX"
    SHOW_TABLES = "SHOW TABLES"
    DESCRIBE = "DESCRIBE"

    @property
    def is_read(self) -> bool:
        """Read statements never change state and are not persisted."""
        return self in (QueryType.SELECT, QueryType.SHOW_TABLES, QueryType.DESCRIBE)


@dataclass(frozen=True)
class ColumnDef:
    name: str
    type_name: str
    primary_key: bool = False
    unique: bool = False


@dataclass(frozen=True)
class ColumnRef:
    """A possibly table-qualified column name, e.g. ``users.id``."""
    column: str
    table: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.table}.{self.column}" if self.table else self.column


@dataclass(frozen=True)
class JoinClause:
    table_name: str
    left: ColumnRef
    right: ColumnRef


@dataclass(frozen=True)
class Statement:
    type: ClassVar[QueryType]


@dataclass(frozen=True)
class CreateTable(Statement):
    type = QueryType.CREATE_TABLE
    table_name: str
    columns: Tuple[ColumnDef, ...]


@dataclass(frozen=True)
class Insert(Statement):
    type = QueryType.INSERT
    table_name: str
    columns: Tuple[str, ...]
    values: Tuple[Value, ...]


@dataclass(frozen=True)
class Select(Statement):
    """SELECT; ``columns`` is None for ``*``."""
    type = QueryType.SELECT
    table_name: str
    columns: Optional[Tuple[str, ...]] = None
    where: Optional[Predicate] = None
    join: Optional[JoinClause] = None


@dataclass(frozen=True)
class Update(Statement):
    type = QueryType.UPDATE
    table_name: str
    assignments: Dict[str, Value] = field(default_factory=dict)
    where: Optional[Predicate] = None


@dataclass(frozen=True)
class Delete(Statement):
    type = QueryType.DELETE
    table_name: str
    where: Optional[Predicate] = None


@dataclass(frozen=True)
class CreateIndex(Statement):
    type = QueryType.CREATE_INDEX
    index_name: str
    table_name: str
    column_name: str


@dataclass(frozen=True)
class ShowTables(Statement):
    type = QueryType.SHOW_TABLES


@dataclass(frozen=True)
class Describe(Statement):
    type = QueryType.DESCRIBE
    table_name: str
