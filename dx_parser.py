#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Protocol, Union

from dx_ast import (
    Span, Node, Expression, Identifier, PrefixExpression, InfixExpression, BetweenExpression, CallExpression,
    ExpressionStatement, DynamoExpression)
from dx_context import ParseContext
from dx_diagnostics import Diagnostic, diag_from_token
from dx_lexer import TokenKind, Token, Lexer, LexerError
from dx_logger import log_debug, log_info, log_stage


# ==========================
# Precedence table
# ==========================

class Precedence(IntEnum):
    LOWEST = 1
    OR = 2          # OR
    AND = 3         # AND
    NOT = 4         # NOT
    EQUALS = 5      # = <>
    BETWEEN = 6     # BETWEEN
    COMPARE = 7     # < <= > >=
    CALL = 8        # size(attr)


PRECEDENCES: Dict[TokenKind, Precedence] = {
    TokenKind.EQ: Precedence.EQUALS,
    TokenKind.NOT_EQ: Precedence.EQUALS,
    TokenKind.BETWEEN: Precedence.BETWEEN,
    TokenKind.LT: Precedence.COMPARE,
    TokenKind.GT: Precedence.COMPARE,
    TokenKind.LTE: Precedence.COMPARE,
    TokenKind.GTE: Precedence.COMPARE,
    TokenKind.AND: Precedence.AND,
    TokenKind.OR: Precedence.OR,
    TokenKind.LPAREN: Precedence.CALL,
}

BINARY_OPERATORS = (
    TokenKind.EQ, TokenKind.NOT_EQ,
    TokenKind.LT, TokenKind.GT, TokenKind.LTE, TokenKind.GTE,
    TokenKind.AND, TokenKind.OR,
)


class TokenSource(Protocol):
    """Anything that hands out tokens one at a time, repeating EOF once exhausted."""

    def next_token(self) -> Token: ...


PrefixParseFn = Callable[[], Optional[Expression]]
InfixParseFn = Callable[[Optional[Expression]], Optional[Expression]]


# ==========================
# Parse result
# ==========================

@dataclass
class ParseResult:
    """
    Outcome of one parse: the root node and every diagnostic recorded on the way.

    A root returned alongside errors may hold `None` subtrees and must not be evaluated.
    """
    root: DynamoExpression = field(default_factory=DynamoExpression)
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def expression(self) -> Optional[Expression]:
        if self.root.statement is None:
            return None
        return self.root.statement.expression

    def errors(self) -> List[str]:
        return [d.message for d in self.diagnostics if d.kind == "error"]

    def has_errors(self) -> bool:
        return any(d.kind == "error" for d in self.diagnostics)


# ==========================
# Token sources
# ==========================

class TokenStream:
    """Adapts an iterable of tokens to the `next_token()` interface, repeating EOF once drained."""

    def __init__(self, tokens: Iterable[Token]) -> None:
        self._tokens: Iterator[Token] = iter(tokens)
        self._eof: Optional[Token] = None
        self._last: Optional[Token] = None

    def next_token(self) -> Token:
        if self._eof is not None:
            return self._eof
        tok = next(self._tokens, None)
        if tok is None:
            # stream ended without an explicit EOF token
            line, column = 1, 1
            if self._last is not None:
                line, column = self._last.line, self._last.column + len(self._last.text)
            tok = Token(TokenKind.EOF, "", line, column)
        if tok.kind is TokenKind.EOF:
            self._eof = tok
        self._last = tok
        return tok


# ==========================
# Parser
# ==========================

class Parser:
    def __init__(self, source: Union[TokenSource, Iterable[Token]], context: Optional[ParseContext] = None) -> None:
        """
        Bind a parser to one token source.

        `source` is either an object with a `next_token()` method (such as `Lexer`)
        or an iterable of `Token`. A parser instance handles exactly one input.
        """
        if not hasattr(source, "next_token"):
            source = TokenStream(source)
        self.source = source
        self.context = context or ParseContext.default()
        self.result = ParseResult()

        self.current: Optional[Token] = None
        self.lookahead: Optional[Token] = None

        self._prefix_fns: Dict[TokenKind, PrefixParseFn] = {}
        self.register_prefix(TokenKind.IDENT, self._parse_identifier)
        self.register_prefix(TokenKind.NOT, self._parse_prefix_expression)
        self.register_prefix(TokenKind.LPAREN, self._parse_grouped_expression)

        # copied so registering a new infix kind never leaks into other parsers
        self._precedences: Dict[TokenKind, Precedence] = dict(PRECEDENCES)
        self._infix_fns: Dict[TokenKind, InfixParseFn] = {}
        for kind in BINARY_OPERATORS:
            self.register_infix(kind, self._parse_infix_expression)
        self.register_infix(TokenKind.BETWEEN, self._parse_between_expression)
        self.register_infix(TokenKind.LPAREN, self._parse_call_expression)

        # Read two tokens, so current and lookahead are both set
        self._advance()
        self._advance()

    @classmethod
    def from_source(cls, source: str, context: Optional[ParseContext] = None) -> "Parser":
        tokens = Lexer.from_source(source).tokenize()
        return cls(tokens, context)

    def register_prefix(self, kind: TokenKind, fn: PrefixParseFn) -> None:
        self._prefix_fns[kind] = fn

    def register_infix(self, kind: TokenKind, fn: InfixParseFn, precedence: Optional[Precedence] = None) -> None:
        self._infix_fns[kind] = fn
        if precedence is not None:
            self._precedences[kind] = precedence

    def precedence_of(self, kind: TokenKind) -> Precedence:
        return self._precedences.get(kind, Precedence.LOWEST)

    def errors(self) -> List[str]:
        return self.result.errors()

    def diagnostics(self) -> List[Diagnostic]:
        return self.result.diagnostics

    # --- token utilities ---

    def _advance(self) -> None:
        self.current = self.lookahead
        self.lookahead = self.source.next_token()

    def _current_is(self, kind: TokenKind) -> bool:
        return self.current is not None and self.current.kind is kind

    def _lookahead_is(self, kind: TokenKind) -> bool:
        return self.lookahead.kind is kind

    def _lookahead_precedence(self) -> Precedence:
        return self.precedence_of(self.lookahead.kind)

    def _expect_lookahead(self, kind: TokenKind) -> bool:
        if not self._lookahead_is(kind):
            self._lookahead_error(kind)
            return False
        self._advance()
        return True

    def _span_from(self, start: Optional[Node], fallback: Token) -> Span:
        here = self.current
        if start is not None and start.span is not None:
            start_line, start_column = start.span.start_line, start.span.start_column
        else:
            start_line, start_column = fallback.line, fallback.column
        return Span(start_line, start_column, here.line, here.column + len(here.text))

    # --- errors ---

    def _record(self, diag: Diagnostic) -> None:
        self.result.diagnostics.append(diag)
        log_debug(self.context, f"recorded {diag.format()}")

    def _lookahead_error(self, kind: TokenKind) -> None:
        msg = f"[PAR-0020] expected next token to be {kind.value}, got {self.lookahead.kind.value} instead"
        self._record(diag_from_token("error", msg, filename=self.context.filename, token=self.lookahead))

    def _no_prefix_parse_fn_error(self, tok: Token) -> None:
        msg = f"[PAR-0010] no prefix parse function for {tok.kind.value} found"
        self._record(diag_from_token("error", msg, filename=self.context.filename, token=tok))

    # --- entry point ---

    def parse_dynamo_expression(self) -> DynamoExpression:
        """
        Parse the single top-level expression of the input.

        Exactly one expression is accepted: trailing tokens after a cleanly parsed
        expression are reported as an unexpected-token error. Once any error has
        been recorded, parsing stops without trying to resynchronize.
        """
        log_stage(self.context, "Parsing", self.context.filename)
        root = self.result.root
        if self._current_is(TokenKind.EOF):
            return root

        root.statement = self._parse_expression_statement()
        root.span = root.statement.span

        if not self.result.diagnostics and not self._lookahead_is(TokenKind.EOF):
            self._lookahead_error(TokenKind.EOF)

        log_info(self.context, f"Parsed expression with {len(self.result.diagnostics)} diagnostic(s)")
        return root

    def _parse_expression_statement(self) -> ExpressionStatement:
        start = self.current
        expression = self.parse_expression(Precedence.LOWEST)
        return ExpressionStatement(expression, span=self._span_from(expression, start))

    # --- expressions with precedence ---

    def parse_expression(self, precedence: Precedence) -> Optional[Expression]:
        prefix = self._prefix_fns.get(self.current.kind)
        if prefix is None:
            self._no_prefix_parse_fn_error(self.current)
            return None

        left = prefix()

        while not self._lookahead_is(TokenKind.EOF) and precedence < self._lookahead_precedence():
            infix = self._infix_fns.get(self.lookahead.kind)
            if infix is None:
                return left

            self._advance()
            left = infix(left)

        return left

    def _parse_identifier(self) -> Identifier:
        tok = self.current
        return Identifier(tok.text, span=self._span_from(None, tok))

    def _parse_prefix_expression(self) -> PrefixExpression:
        op_tok = self.current
        self._advance()
        operand = self.parse_expression(Precedence.NOT)
        return PrefixExpression(op_tok.text.upper(), operand, span=self._span_from(None, op_tok))

    def _parse_grouped_expression(self) -> Optional[Expression]:
        self._advance()
        expression = self.parse_expression(Precedence.LOWEST)

        if not self._expect_lookahead(TokenKind.RPAREN):
            return None

        return expression

    def _parse_infix_expression(self, left: Optional[Expression]) -> InfixExpression:
        op_tok = self.current
        precedence = self.precedence_of(op_tok.kind)

        self._advance()
        right = self.parse_expression(precedence)

        operator = op_tok.text.upper() if op_tok.kind in (TokenKind.AND, TokenKind.OR) else op_tok.text
        return InfixExpression(operator, left, right, span=self._span_from(left, op_tok))

    def _parse_between_expression(self, subject: Optional[Expression]) -> Optional[BetweenExpression]:
        # subject BETWEEN low AND high; both bounds are plain identifiers
        between_tok = self.current

        if not self._expect_lookahead(TokenKind.IDENT):
            return None
        low = self._parse_identifier()

        if not self._expect_lookahead(TokenKind.AND):
            return None

        if not self._expect_lookahead(TokenKind.IDENT):
            return None
        high = self._parse_identifier()

        return BetweenExpression(subject, low, high, span=self._span_from(subject, between_tok))

    def _parse_call_expression(self, callee: Optional[Expression]) -> CallExpression:
        paren_tok = self.current
        arguments = self._parse_call_arguments()
        return CallExpression(callee, arguments, span=self._span_from(callee, paren_tok))

    def _parse_call_arguments(self) -> Optional[List[Optional[Expression]]]:
        args: List[Optional[Expression]] = []

        if self._lookahead_is(TokenKind.RPAREN):
            self._advance()
            return args

        self._advance()
        args.append(self.parse_expression(Precedence.LOWEST))

        while self._lookahead_is(TokenKind.COMMA):
            self._advance()
            self._advance()
            args.append(self.parse_expression(Precedence.LOWEST))

        if not self._expect_lookahead(TokenKind.RPAREN):
            return None

        return args


# ==========================
# Public entry points
# ==========================

def parse_expression(
        source: Union[TokenSource, Iterable[Token]],
        context: Optional[ParseContext] = None,
) -> ParseResult:
    """
    Parse one expression from a token source (a `Lexer`, or an iterable of tokens).

    A fresh parser is built for every call; the returned result owns the tree.
    """
    parser = Parser(source, context)
    parser.parse_dynamo_expression()
    return parser.result


def parse_source(source: str, context: Optional[ParseContext] = None) -> ParseResult:
    """Lex and parse expression text; lexical failures become diagnostics on the result."""
    context = context or ParseContext.default()
    log_stage(context, "Lexing", context.filename)
    try:
        tokens = Lexer.from_source(source).tokenize()
    except LexerError as e:
        result = ParseResult()
        result.diagnostics.append(
            Diagnostic(kind="error", message=e.message, filename=context.filename, line=e.line, column=e.column)
        )
        return result
    log_debug(context, f"Lexed {len(tokens)} token(s)")
    return parse_expression(tokens, context)
