#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from dx_ast import DynamoExpression
from dx_ast_printer import format_expression, format_node, format_tree


def test_ast_printer_includes_spans_in_header_lines(parse):
    result = parse("NOT size(a) > :n")
    printed = format_tree(result.root)

    assert printed.splitlines()[0] == "DynamoExpression @1:1-1:17"
    assert "PrefixExpression(operator='NOT') @1:1-1:17" in printed
    assert "InfixExpression(operator='>') @1:5-1:17" in printed
    assert "CallExpression @1:5-1:12" in printed
    assert "Identifier(name='size') @1:5-1:9" in printed
    assert "Identifier(name=':n') @1:15-1:17" in printed


def test_ast_printer_indents_children_under_field_names(parse):
    result = parse("a BETWEEN lo AND hi")
    lines = format_node(result.expression)

    assert lines == [
        "BetweenExpression @1:1-1:20",
        "  subject:",
        "    Identifier(name='a') @1:1-1:2",
        "  low:",
        "    Identifier(name='lo') @1:11-1:13",
        "  high:",
        "    Identifier(name='hi') @1:18-1:20",
    ]


def test_ast_printer_marks_missing_children(parse):
    result = parse("a =")
    printed = format_tree(result.root)

    assert "  right:\n" in printed
    assert printed.rstrip().endswith("<missing>")


def test_ast_printer_omits_empty_argument_list(parse):
    lines = format_node(parse("now()").expression)

    assert lines[0].startswith("CallExpression")
    assert "  arguments:" not in lines


def test_format_expression_is_fully_parenthesized(parse):
    result = parse("a = :x AND NOT (b < 3 OR c BETWEEN :lo AND :hi) AND contains(tags, :t)")

    assert format_expression(result.root) == (
        "(((a = :x) AND (NOT ((b < 3) OR (c BETWEEN :lo AND :hi)))) AND contains(tags, :t))"
    )


def test_format_expression_of_failed_parse_shows_missing(parse):
    assert format_expression(parse("a = ").root) == "(a = <missing>)"
    assert format_expression(parse("f(a").root) == "f(<missing>)"


def test_format_expression_of_empty_root():
    assert format_expression(DynamoExpression()) == ""


def test_format_tree_of_empty_root_is_bare_header(parse):
    assert format_tree(DynamoExpression()) == "DynamoExpression"
    assert format_tree(parse("").root) == "DynamoExpression"
