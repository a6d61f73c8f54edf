#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass
from enum import Enum
from typing import List


# ==========================
# Tokens and lexer
# ==========================

class TokenKind(Enum):
    # Special
    EOF = "EOF"
    ILLEGAL = "ILLEGAL"  # character the lexer cannot classify

    IDENT = "IDENT"  # attribute name, #name, :value, number or quoted string

    # Keywords
    AND = "AND"
    OR = "OR"
    NOT = "NOT"
    BETWEEN = "BETWEEN"

    # Punctuation / operators
    EQ = "="
    NOT_EQ = "<>"
    LT = "<"
    GT = ">"
    LTE = "<="
    GTE = ">="
    LPAREN = "("
    RPAREN = ")"
    COMMA = ","


KEYWORDS = {
    "AND": TokenKind.AND,
    "OR": TokenKind.OR,
    "NOT": TokenKind.NOT,
    "BETWEEN": TokenKind.BETWEEN,
}


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    line: int
    column: int

    def __repr__(self) -> str:
        return f"{self.text!r}" if self.kind != TokenKind.EOF else "end-of-input"


@dataclass
class LexerError(Exception):
    message: str
    line: int
    column: int


# Characters allowed after the first one of a name or document path (a.b[0])
NAME_CHARS = "_.[]"
PLACEHOLDER_SIGILS = "#:"
QUOTES = "\"'"


class Lexer:
    def __init__(self, source: str) -> None:
        self.source = source
        self.length = len(source)
        self.index = 0
        self.line = 1
        self.column = 1

    @classmethod
    def from_source(cls, source: str) -> "Lexer":
        return cls(source)

    # --- low-level char utilities ---

    def _at_end(self) -> bool:
        return self.index >= self.length

    def _peek(self) -> str:
        if self._at_end():
            return "\0"
        return self.source[self.index]

    def _peek_next(self) -> str:
        if self.index + 1 >= self.length:
            return "\0"
        return self.source[self.index + 1]

    def _advance(self) -> str:
        c = self._peek()
        if not self._at_end():
            self.index += 1
            if c == "\n":
                self.line += 1
                self.column = 1
            else:
                self.column += 1
        return c

    # --- main API ---

    def tokenize(self) -> List[Token]:
        tokens: List[Token] = []
        while True:
            tok = self.next_token()
            tokens.append(tok)
            if tok.kind is TokenKind.EOF:
                break
        return tokens

    def next_token(self) -> Token:
        """Return the next token; after the end of input, every call returns EOF."""
        self._skip_ws()
        start_line, start_col = self.line, self.column

        if self._at_end():
            return Token(TokenKind.EOF, "", start_line, start_col)

        c = self._advance()

        # names, document paths and keywords
        if c.isalpha() or c == "_":
            text = self._read_name(c)
            kind = KEYWORDS.get(text.upper(), TokenKind.IDENT)
            return Token(kind, text, start_line, start_col)

        # #name and :value placeholders
        if c in PLACEHOLDER_SIGILS and self._is_name_char(self._peek()):
            text = self._read_name(c)
            return Token(TokenKind.IDENT, text, start_line, start_col)

        if c.isdigit() or (c == "-" and self._peek().isdigit()):
            text = self._read_number(c)
            return Token(TokenKind.IDENT, text, start_line, start_col)

        if c in QUOTES:
            text = self._read_string_literal(c, start_line, start_col)
            return Token(TokenKind.IDENT, text, start_line, start_col)

        if c == "(":
            return Token(TokenKind.LPAREN, c, start_line, start_col)
        if c == ")":
            return Token(TokenKind.RPAREN, c, start_line, start_col)
        if c == ",":
            return Token(TokenKind.COMMA, c, start_line, start_col)
        if c == "=":
            return Token(TokenKind.EQ, c, start_line, start_col)

        if c == "<":
            if self._peek() == ">":
                self._advance()
                return Token(TokenKind.NOT_EQ, "<>", start_line, start_col)
            if self._peek() == "=":
                self._advance()
                return Token(TokenKind.LTE, "<=", start_line, start_col)
            return Token(TokenKind.LT, c, start_line, start_col)

        if c == ">":
            if self._peek() == "=":
                self._advance()
                return Token(TokenKind.GTE, ">=", start_line, start_col)
            return Token(TokenKind.GT, c, start_line, start_col)

        return Token(TokenKind.ILLEGAL, c, start_line, start_col)

    @staticmethod
    def _is_name_char(c: str) -> bool:
        return c.isalnum() or c in NAME_CHARS

    def _read_name(self, first: str) -> str:
        chars = [first]
        while self._is_name_char(self._peek()):
            chars.append(self._advance())
        return "".join(chars)

    def _read_number(self, first: str) -> str:
        digits = [first]
        while self._peek().isdigit():
            digits.append(self._advance())
        if self._peek() == "." and self._peek_next().isdigit():
            digits.append(self._advance())
            while self._peek().isdigit():
                digits.append(self._advance())
        return "".join(digits)

    def _read_string_literal(self, quote: str, start_line: int, start_col: int) -> str:
        # token text keeps the quotes and escapes as written
        chars: List[str] = [quote]
        while True:
            if self._at_end():
                raise LexerError("[LEX-0010] unterminated string literal", start_line, start_col)
            ch = self._advance()
            chars.append(ch)
            if ch == "\\":
                if self._at_end():
                    raise LexerError("[LEX-0010] unterminated string literal", start_line, start_col)
                chars.append(self._advance())
                continue
            if ch == quote:
                break
        return "".join(chars)

    def _skip_ws(self) -> None:
        while self._peek() in (" ", "\t", "\r", "\n"):
            self._advance()
