"""
Tokenizer for the SQL-like command language.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .types import Value, parse_number


class TokenType(Enum):
    """Token categories produced by the tokenizer."""
    WORD = "WORD"
    NUMBER = "NUMBER"
    STRING = "STRING"
    SYMBOL = "SYMBOL"
    EOF = "EOF"


TOKEN_PATTERN = re.compile(r"""
    (?P<space>\s+)
  | (?P<number>[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<word>[A-Za-z_]\w*)
  | (?P<string>'(?:[^']|'')*'|"(?:[^"]|"")*")
  | (?P<symbol>>=|<=|!=|[(),*=<>.;])
""", re.VERBOSE)


class LexError(ValueError):
    """Raised for characters the tokenizer cannot read."""

    def __init__(self, message: str, position: int):
        self.position = position
        super().__init__(f"{message} at position {position}")


@dataclass(frozen=True)
class Token:
    """A lexical token with its source offset."""
    type: TokenType
    text: str
    value: Value
    position: int

    def is_keyword(self, keyword: str) -> bool:
        return self.type == TokenType.WORD and self.text.upper() == keyword

    def is_symbol(self, symbol: str) -> bool:
        return self.type == TokenType.SYMBOL and self.text == symbol


def _unquote(text: str) -> str:
    quote = text[0]
    return text[1:-1].replace(quote * 2, quote)


def tokenize(text: str) -> List[Token]:
    """Split a command into tokens, always terminated by an EOF token."""
    tokens = []
    pos = 0

    while pos < len(text):
        match = TOKEN_PATTERN.match(text, pos)
        if not match:
            if text[pos] in "'\"":
                raise LexError("Unterminated string literal", pos)
            raise LexError(f"Unexpected character {text[pos]!r}", pos)

        kind = match.lastgroup
        lexeme = match.group()
        value: Optional[Value] = None

        if kind == 'number':
            value = parse_number(lexeme)
            tokens.append(Token(TokenType.NUMBER, lexeme, value, pos))
        elif kind == 'word':
            tokens.append(Token(TokenType.WORD, lexeme, lexeme, pos))
        elif kind == 'string':
            tokens.append(Token(TokenType.STRING, lexeme, _unquote(lexeme), pos))
        elif kind == 'symbol':
            tokens.append(Token(TokenType.SYMBOL, lexeme, lexeme, pos))

        pos = match.end()

    tokens.append(Token(TokenType.EOF, "", None, len(text)))
    return tokens
