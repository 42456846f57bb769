"""
Statement classifier and parser for the SQL-like command language.

A command is classified by its leading keywords, tokenized, and parsed by a
small recursive-descent parser into one of the statement types in
``rdbms.statements``.
"""

import re
from typing import Callable, Dict, List, Optional, Tuple

from .errors import InvalidSyntax, UnknownCommand
from .lexer import LexError, Token, TokenType, tokenize
from .predicate import OPERATORS, Predicate
from .statements import (
    ColumnDef,
    ColumnRef,
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
from .types import Value

# Checked in order; CREATE TABLE must come before any looser CREATE match.
COMMAND_PATTERNS: List[Tuple[QueryType, re.Pattern]] = [
    (QueryType.CREATE_TABLE, re.compile(r'CREATE\s+TABLE\b', re.IGNORECASE)),
    (QueryType.INSERT, re.compile(r'INSERT\s+INTO\b', re.IGNORECASE)),
    (QueryType.SELECT, re.compile(r'SELECT\b', re.IGNORECASE)),
    (QueryType.UPDATE, re.compile(r'UPDATE\b', re.IGNORECASE)),
    (QueryType.DELETE, re.compile(r'DELETE\b', re.IGNORECASE)),
    (QueryType.CREATE_INDEX, re.compile(r'CREATE\s+INDEX\b', re.IGNORECASE)),
    (QueryType.SHOW_TABLES, re.compile(r'SHOW\s+TABLES\b', re.IGNORECASE)),
    (QueryType.DESCRIBE, re.compile(r'DESCRIBE\b', re.IGNORECASE)),
]


class TokenStream:
    """Cursor over a token list; every failure is reported as InvalidSyntax."""

    def __init__(self, tokens: List[Token], statement: str):
        self.tokens = tokens
        self.statement = statement
        self.i = 0

    def error(self, detail: str) -> InvalidSyntax:
        return InvalidSyntax(self.statement, detail)

    def peek(self, offset: int = 0) -> Token:
        j = min(self.i + offset, len(self.tokens) - 1)
        return self.tokens[j]

    def advance(self) -> Token:
        token = self.peek()
        if token.type != TokenType.EOF:
            self.i += 1
        return token

    def at_keyword(self, keyword: str) -> bool:
        return self.peek().is_keyword(keyword)

    def at_symbol(self, symbol: str) -> bool:
        return self.peek().is_symbol(symbol)

    def accept_keyword(self, keyword: str) -> bool:
        if self.at_keyword(keyword):
            self.advance()
            return True
        return False

    def accept_symbol(self, symbol: str) -> bool:
        if self.at_symbol(symbol):
            self.advance()
            return True
        return False

    def expect_keyword(self, keyword: str, detail: Optional[str] = None) -> Token:
        if not self.at_keyword(keyword):
            raise self.error(detail or f"expected {keyword}")
        return self.advance()

    def expect_symbol(self, symbol: str) -> Token:
        if not self.at_symbol(symbol):
            raise self.error(f"expected '{symbol}'")
        return self.advance()

    def expect_name(self, what: str = "name") -> str:
        token = self.peek()
        if token.type != TokenType.WORD:
            raise self.error(f"expected {what}")
        self.advance()
        return token.text

    def expect_end(self) -> None:
        """Allow one trailing semicolon, then require the end of input."""
        self.accept_symbol(';')
        if self.peek().type != TokenType.EOF:
            raise self.error(f"unexpected '{self.peek().text}'")


class QueryParser:
    """Parses SQL-like commands into typed statements."""

    def __init__(self):
        self._parsers: Dict[QueryType, Callable[[TokenStream], Statement]] = {
            QueryType.CREATE_TABLE: self._parse_create_table,
            QueryType.INSERT: self._parse_insert,
            QueryType.SELECT: self._parse_select,
            QueryType.UPDATE: self._parse_update,
            QueryType.DELETE: self._parse_delete,
            QueryType.CREATE_INDEX: self._parse_create_index,
            QueryType.SHOW_TABLES: self._parse_show_tables,
            QueryType.DESCRIBE: self._parse_describe,
        }

    def classify(self, query: str) -> QueryType:
        """Return the statement kind of a command by its leading keywords."""
        trimmed = query.strip()
        for query_type, pattern in COMMAND_PATTERNS:
            if pattern.match(trimmed):
                return query_type
        raise UnknownCommand(trimmed)

    def parse(self, query: str) -> Statement:
        """Parse a command into a typed statement."""
        query_type = self.classify(query)
        try:
            tokens = tokenize(query.strip())
        except LexError as e:
            raise InvalidSyntax(query_type.value, str(e)) from e

        stream = TokenStream(tokens, query_type.value)
        statement = self._parsers[query_type](stream)
        stream.expect_end()
        return statement

    # ---------------- shared pieces ----------------

    def _parse_literal(self, stream: TokenStream) -> Value:
        """Quoted text, a number, NULL, or a bare word kept as text."""
        token = stream.peek()
        if token.type in (TokenType.STRING, TokenType.NUMBER):
            stream.advance()
            return token.value
        if token.type == TokenType.WORD:
            stream.advance()
            return None if token.text.upper() == 'NULL' else token.text
        raise stream.error("expected a value")

    def _parse_column_ref(self, stream: TokenStream) -> ColumnRef:
        first = stream.expect_name("column name")
        if stream.accept_symbol('.'):
            return ColumnRef(column=stream.expect_name("column name"), table=first)
        return ColumnRef(column=first)

    def _parse_name_list(self, stream: TokenStream) -> Tuple[str, ...]:
        names = [stream.expect_name("column name")]
        while stream.accept_symbol(','):
            names.append(stream.expect_name("column name"))
        return tuple(names)

    def _parse_value_list(self, stream: TokenStream) -> Tuple[Value, ...]:
        values = [self._parse_literal(stream)]
        while stream.accept_symbol(','):
            values.append(self._parse_literal(stream))
        return tuple(values)

    def _parse_where(self, stream: TokenStream) -> Predicate:
        """Parse `<column> <op> <literal>` after a WHERE keyword."""
        column = self._parse_column_ref(stream)
        token = stream.peek()
        if token.type != TokenType.SYMBOL or token.text not in OPERATORS:
            raise stream.error("expected a comparison operator")
        stream.advance()
        value = self._parse_literal(stream)
        return Predicate(column=str(column), operator=token.text, value=value)

    # ---------------- statements ----------------

    def _parse_create_table(self, stream: TokenStream) -> CreateTable:
        """CREATE TABLE name (col type [PRIMARY KEY] [UNIQUE], ...)"""
        stream.expect_keyword('CREATE')
        stream.expect_keyword('TABLE')
        table_name = stream.expect_name("table name")
        stream.expect_symbol('(')

        columns = [self._parse_column_def(stream)]
        while stream.accept_symbol(','):
            columns.append(self._parse_column_def(stream))
        stream.expect_symbol(')')

        if sum(col.primary_key for col in columns) > 1:
            raise stream.error("only one PRIMARY KEY is allowed")

        return CreateTable(table_name=table_name, columns=tuple(columns))

    def _parse_column_def(self, stream: TokenStream) -> ColumnDef:
        name = stream.expect_name("column name")

        # The type is optional: `id PRIMARY KEY` and `id` declare untyped columns.
        type_name = ''
        if not (stream.at_keyword('PRIMARY') or stream.at_keyword('UNIQUE')
                or stream.at_symbol(',') or stream.at_symbol(')')):
            type_name = stream.expect_name("column type")
            if stream.at_symbol('('):
                type_name += self._read_parenthesized(stream)

        # Modifiers run to the next top-level ',' or ')'.
        words = []
        while not (stream.at_symbol(',') or stream.at_symbol(')')):
            token = stream.peek()
            if token.type == TokenType.EOF:
                raise stream.error("expected ')'")
            if token.is_symbol('('):
                self._read_parenthesized(stream)
                continue
            words.append(stream.advance().text.upper())

        primary_key = any(
            words[i] == 'PRIMARY' and words[i + 1] == 'KEY'
            for i in range(len(words) - 1)
        )
        return ColumnDef(
            name=name,
            type_name=type_name,
            primary_key=primary_key,
            unique='UNIQUE' in words,
        )

    def _read_parenthesized(self, stream: TokenStream) -> str:
        """Consume a balanced parenthesized group and return its text."""
        parts = [stream.expect_symbol('(').text]
        depth = 1
        while depth:
            token = stream.advance()
            if token.type == TokenType.EOF:
                raise stream.error("unbalanced parentheses")
            if token.is_symbol('('):
                depth += 1
            elif token.is_symbol(')'):
                depth -= 1
            parts.append(token.text)
        return ''.join(parts)

    def _parse_insert(self, stream: TokenStream) -> Insert:
        """INSERT INTO name (col, ...) VALUES (val, ...)"""
        stream.expect_keyword('INSERT')
        stream.expect_keyword('INTO')
        table_name = stream.expect_name("table name")

        stream.expect_symbol('(')
        columns = self._parse_name_list(stream)
        stream.expect_symbol(')')

        stream.expect_keyword('VALUES')
        stream.expect_symbol('(')
        values = self._parse_value_list(stream)
        stream.expect_symbol(')')

        if len(columns) != len(values):
            raise stream.error(
                f"column count ({len(columns)}) doesn't match value count ({len(values)})"
            )

        return Insert(table_name=table_name, columns=columns, values=values)

    def _parse_select(self, stream: TokenStream) -> Select:
        """SELECT cols FROM t [[INNER] JOIN t2 ON a.x = b.y] [WHERE predicate]"""
        stream.expect_keyword('SELECT')

        if stream.accept_symbol('*'):
            columns = None
        else:
            refs = [self._parse_column_ref(stream)]
            while stream.accept_symbol(','):
                refs.append(self._parse_column_ref(stream))
            columns = tuple(str(ref) for ref in refs)

        stream.expect_keyword('FROM')
        table_name = stream.expect_name("table name")

        join = None
        if stream.accept_keyword('INNER'):
            stream.expect_keyword('JOIN')
            join = self._parse_join(stream)
        elif stream.accept_keyword('JOIN'):
            join = self._parse_join(stream)

        where = self._parse_where(stream) if stream.accept_keyword('WHERE') else None

        return Select(table_name=table_name, columns=columns, where=where, join=join)

    def _parse_join(self, stream: TokenStream) -> JoinClause:
        table_name = stream.expect_name("table name")
        stream.expect_keyword('ON')
        left = self._parse_column_ref(stream)
        stream.expect_symbol('=')
        right = self._parse_column_ref(stream)
        if left.table is None or right.table is None:
            raise stream.error("JOIN condition must use table.column on both sides")
        return JoinClause(table_name=table_name, left=left, right=right)

    def _parse_update(self, stream: TokenStream) -> Update:
        """UPDATE name SET col = val, ... WHERE predicate"""
        stream.expect_keyword('UPDATE')
        table_name = stream.expect_name("table name")
        stream.expect_keyword('SET')

        assignments = {}
        while True:
            column = stream.expect_name("column name")
            stream.expect_symbol('=')
            assignments[column] = self._parse_literal(stream)
            if not stream.accept_symbol(','):
                break

        stream.expect_keyword('WHERE', "must include WHERE clause")
        where = self._parse_where(stream)

        return Update(table_name=table_name, assignments=assignments, where=where)

    def _parse_delete(self, stream: TokenStream) -> Delete:
        """DELETE FROM name WHERE predicate"""
        stream.expect_keyword('DELETE')
        stream.expect_keyword('FROM')
        table_name = stream.expect_name("table name")
        stream.expect_keyword('WHERE', "must include WHERE clause")
        where = self._parse_where(stream)

        return Delete(table_name=table_name, where=where)

    def _parse_create_index(self, stream: TokenStream) -> CreateIndex:
        """CREATE INDEX name ON table (column)"""
        stream.expect_keyword('CREATE')
        stream.expect_keyword('INDEX')
        index_name = stream.expect_name("index name")
        stream.expect_keyword('ON')
        table_name = stream.expect_name("table name")
        stream.expect_symbol('(')
        column_name = stream.expect_name("column name")
        stream.expect_symbol(')')

        return CreateIndex(index_name=index_name, table_name=table_name, column_name=column_name)

    def _parse_show_tables(self, stream: TokenStream) -> ShowTables:
        stream.expect_keyword('SHOW')
        stream.expect_keyword('TABLES')
        return ShowTables()

    def _parse_describe(self, stream: TokenStream) -> Describe:
        stream.expect_keyword('DESCRIBE')
        return Describe(table_name=stream.expect_name("table name"))
