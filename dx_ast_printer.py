#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

from dataclasses import is_dataclass, fields
from typing import List, Any

from dx_ast import Span, Node, DynamoExpression, MISSING


def _format_span(span: Span | None) -> str:
    if span is None:
        return ""
    return f" @{span.start_line}:{span.start_column}-{span.end_line}:{span.end_column}"


def _is_child_field(value: Any) -> bool:
    # scalar fields are never None, so None marks a child a failed parse left empty
    return value is None or isinstance(value, (Node, list))


def format_node(node: Any, indent: int = 0) -> List[str]:
    """
    Generic, reflection-based AST pretty-printer.

    - Shows the node class name.
    - Prints simple scalar fields inline (excluding `span`).
    - Recursively prints child Node / list-of-Node fields on new indented lines,
      and marks children that a failed parse left absent as `<missing>`.
    - Appends a concise span annotation like `@1:1-1:7` when available.
    """
    ind = "  " * indent

    if node is None:
        return [ind + MISSING]

    # Lists: print each element at same indentation
    if isinstance(node, list):
        lines: List[str] = []
        for elem in node:
            lines.extend(format_node(elem, indent))
        return lines

    # AST nodes (dataclasses derived from Node)
    if isinstance(node, Node) and is_dataclass(node):
        data_fields = [f for f in fields(node) if f.name != "span"]
        simple_parts = []
        child_fields = []

        for f in data_fields:
            value = getattr(node, f.name)
            if _is_child_field(value):
                child_fields.append((f.name, value))
            else:
                simple_parts.append((f.name, value))

        # Header: ClassName(field1=..., field2=...) @line:col-line:col
        header = node.__class__.__name__
        if simple_parts:
            inner = ", ".join(f"{name}={value!r}" for name, value in simple_parts)
            header = f"{header}({inner})"
        header += _format_span(node.span)

        lines = [ind + header]

        for name, value in child_fields:
            if isinstance(value, list) and not value:
                continue
            # empty input leaves the root without a statement; that is not a failed parse
            if value is None and isinstance(node, DynamoExpression):
                continue
            lines.append(ind + "  " + f"{name}:")
            lines.extend(format_node(value, indent + 2))

        return lines

    # Fallback for unexpected values
    return [ind + repr(node)]


def format_tree(root: DynamoExpression) -> str:
    """
    Convenience: pretty-print a whole parse root as a string.
    """
    return "\n".join(format_node(root, indent=0))


def format_expression(root: Node) -> str:
    """Compact single-line form, fully parenthesized: `((a = b) AND (NOT c))`."""
    return str(root)
