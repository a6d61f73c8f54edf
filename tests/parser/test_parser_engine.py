#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from dx_ast import Identifier, InfixExpression, PrefixExpression
from dx_context import ParseContext, LogLevel
from dx_lexer import Lexer, Token, TokenKind
from dx_parser import PRECEDENCES, Parser, Precedence, TokenStream, parse_expression


QUIET = ParseContext(log_level=LogLevel.SILENT)


def tok(kind: TokenKind, text: str, column: int = 1) -> Token:
    return Token(kind, text, 1, column)


class CountingLexer:
    """Token source that records how often it is pulled."""

    def __init__(self, src: str) -> None:
        self.lexer = Lexer.from_source(src)
        self.calls = 0

    def next_token(self) -> Token:
        self.calls += 1
        return self.lexer.next_token()


def test_precedence_levels_ascend_in_grammar_order():
    order = [
        Precedence.LOWEST,
        Precedence.OR,
        Precedence.AND,
        Precedence.NOT,
        Precedence.EQUALS,
        Precedence.BETWEEN,
        Precedence.COMPARE,
        Precedence.CALL,
    ]
    assert order == sorted(order)
    assert len(set(order)) == len(order)


def test_precedence_table_entries():
    assert PRECEDENCES[TokenKind.EQ] == PRECEDENCES[TokenKind.NOT_EQ] == Precedence.EQUALS
    for kind in (TokenKind.LT, TokenKind.LTE, TokenKind.GT, TokenKind.GTE):
        assert PRECEDENCES[kind] == Precedence.COMPARE
    assert PRECEDENCES[TokenKind.BETWEEN] == Precedence.BETWEEN
    assert PRECEDENCES[TokenKind.LPAREN] == Precedence.CALL
    parser = Parser.from_source("a", QUIET)
    assert parser.precedence_of(TokenKind.IDENT) == Precedence.LOWEST
    assert parser.precedence_of(TokenKind.NOT) == Precedence.LOWEST


def test_construction_primes_two_tokens():
    source = CountingLexer("a = b")
    parser = Parser(source, QUIET)

    assert source.calls == 2
    assert parser.current.text == "a"
    assert parser.lookahead.text == "="


def test_parse_expression_accepts_lexer_directly():
    result = parse_expression(Lexer.from_source("a <> :v"), QUIET)

    assert result.expression == InfixExpression("<>", Identifier("a"), Identifier(":v"))


def test_parse_expression_accepts_token_list_without_eof():
    tokens = [tok(TokenKind.NOT, "NOT"), tok(TokenKind.IDENT, "flag", 5)]
    result = parse_expression(tokens, QUIET)

    assert result.errors() == []
    assert result.expression == PrefixExpression("NOT", Identifier("flag"))


def test_token_stream_repeats_eof():
    stream = TokenStream([tok(TokenKind.IDENT, "abc")])

    assert stream.next_token().kind is TokenKind.IDENT
    first_eof = stream.next_token()
    assert first_eof.kind is TokenKind.EOF
    assert first_eof.column == 4
    assert stream.next_token() is first_eof


def test_each_call_uses_a_fresh_parser():
    first = parse_expression(Lexer.from_source(","), QUIET)
    second = parse_expression(Lexer.from_source("a = b"), QUIET)

    assert first.has_errors()
    assert not second.has_errors()


def test_parser_errors_mirror_result():
    parser = Parser.from_source("(a", QUIET)
    parser.parse_dynamo_expression()

    assert parser.errors() == parser.result.errors()
    assert parser.diagnostics() is parser.result.diagnostics
    assert len(parser.errors()) == 1


def test_registry_accepts_new_infix_routine():
    # treat ILLEGAL "~" as a custom comparison operator at relational strength
    parser = Parser.from_source("a ~ b", QUIET)

    def parse_contains(left):
        op_tok = parser.current
        parser._advance()
        return InfixExpression(op_tok.text, left, parser.parse_expression(Precedence.COMPARE))

    parser.register_infix(TokenKind.ILLEGAL, parse_contains, Precedence.COMPARE)
    root = parser.parse_dynamo_expression()

    assert parser.errors() == []
    assert root.statement.expression == InfixExpression("~", Identifier("a"), Identifier("b"))


def test_unregistered_infix_ends_expression():
    parser = Parser.from_source("a ~ b", QUIET)
    # binding strength without a routine: the loop stops instead of failing
    parser._precedences[TokenKind.ILLEGAL] = Precedence.COMPARE
    expr = parser.parse_expression(Precedence.LOWEST)

    assert expr == Identifier("a")
    assert parser.errors() == []
    assert parser.lookahead.kind is TokenKind.ILLEGAL


def test_nodes_carry_spans():
    result = parse_expression(Lexer.from_source("size(a) >= 10"), QUIET)
    expr = result.expression

    assert (expr.span.start_line, expr.span.start_column, expr.span.end_column) == (1, 1, 14)
    assert (expr.left.span.start_column, expr.left.span.end_column) == (1, 8)
    assert (expr.right.span.start_column, expr.right.span.end_column) == (12, 14)


def test_registered_precedence_stays_with_its_parser():
    custom = Parser.from_source("a ~ b", QUIET)
    custom.register_infix(TokenKind.ILLEGAL, custom._parse_infix_expression, Precedence.COMPARE)
    custom.parse_dynamo_expression()

    assert custom.errors() == []
    assert TokenKind.ILLEGAL not in PRECEDENCES

    plain = Parser.from_source("a ~ b", QUIET)
    assert plain.precedence_of(TokenKind.ILLEGAL) == Precedence.LOWEST
    plain.parse_dynamo_expression()
    assert plain.errors() == ["[PAR-0020] expected next token to be EOF, got ILLEGAL instead"]
