#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from dx_ast_printer import format_tree, format_expression
from dx_context import ParseContext, LogLevel, log_level_from_env
from dx_diagnostics import Diagnostic
from dx_lexer import TokenKind, Lexer, LexerError
from dx_logger import log_error, log_info
from dx_parser import ParseResult, parse_source


class InputError(Exception):
    """Raised when the expression text cannot be read."""
    pass


def print_diagnostics(result: ParseResult, source: str, context: ParseContext) -> None:
    lines = source.splitlines()
    for diag in result.diagnostics:
        print_diagnostic_with_snippet(diag, lines, context)


def print_diagnostic_with_snippet(diag: Diagnostic, lines: List[str], context: ParseContext) -> None:
    # First line: header
    log_error(context, diag.format())

    if diag.line is None:
        return

    line_idx = diag.line - 1
    if not (0 <= line_idx < len(lines)):
        return

    src_line = lines[line_idx]

    # Pretty "N | ..." formatting (calculate width so multi-digit line numbers align)
    width = max(5, len(str(diag.line)))
    gutter = f"{diag.line:>{width}} | "

    log_error(context, gutter + src_line)

    if diag.column is None:
        return

    # Determine caret span (simple case: same line)
    start_col = max(1, diag.column)
    if diag.end_line is None or diag.end_column is None:
        end_col = start_col
    elif diag.end_line == diag.line:
        end_col = max(start_col, diag.end_column)
    else:
        end_col = len(src_line) + 1

    caret_width = max(1, end_col - start_col)
    caret_prefix = " " * width + " | " + " " * (start_col - 1)
    log_error(context, caret_prefix + "^" * caret_width)


def build_parse_context(args: argparse.Namespace) -> ParseContext:
    """Build a ParseContext from command-line arguments."""
    log_rich_format = getattr(args, 'log', False)

    # Convert verbosity count to LogLevel; without -v, honour DX_LOG_LEVEL
    verbosity = getattr(args, 'verbosity', 0)
    if verbosity >= 3:
        log_level = LogLevel.DEBUG
    elif verbosity >= 1:
        log_level = LogLevel.INFO
    else:
        log_level = max(log_level_from_env(LogLevel.ERROR), LogLevel.ERROR)

    filename = getattr(args, 'file', None)
    return ParseContext(
        log_rich_format=log_rich_format,
        log_level=log_level,
        filename=None if filename in (None, "-") else filename,
    )


def read_input(args: argparse.Namespace) -> str:
    """Return the expression text from the positional argument, a file, or stdin."""
    if args.file is not None:
        if args.file == "-":
            return sys.stdin.read()
        try:
            return Path(args.file).read_text(encoding="utf-8")
        except OSError as e:
            raise InputError(f"cannot read '{args.file}': {e.strerror}") from e
    if args.expression is None:
        raise InputError("no expression given (pass it as an argument or use -f FILE)")
    return args.expression


def _load(args: argparse.Namespace):
    """Read the input, returning (source, context) or (None, context) after reporting a failure."""
    context = build_parse_context(args)
    try:
        source = read_input(args)
    except InputError as e:
        log_error(context, f"error: [DXC-0010] {e}")
        return None, context
    log_info(context, f"Read {len(source)} character(s) of input")
    return source, context


def _run_parse(args: argparse.Namespace):
    """Run the parser, returning (result, context, exit_code)."""
    source, context = _load(args)
    if source is None:
        return None, context, 1
    result = parse_source(source, context)
    print_diagnostics(result, source, context)
    exit_code = 1 if result.has_errors() else 0
    return result, context, exit_code


def cmd_tok(args: argparse.Namespace) -> int:
    """Dump lexer tokens, one per line."""
    source, context = _load(args)
    if source is None:
        return 1
    try:
        tokens = Lexer.from_source(source).tokenize()
    except LexerError as e:
        log_error(context, Diagnostic(kind="error", message=e.message, filename=context.filename,
                                      line=e.line, column=e.column).format())
        return 1
    exit_code = 0
    for tok in tokens:
        if tok.kind is TokenKind.EOF and not args.include_eof:
            continue
        if tok.kind is TokenKind.ILLEGAL:
            exit_code = 1
        print(f"{tok.line}:{tok.column}  {tok.kind.name:<8} {tok.text!r}")
    return exit_code


def cmd_ast(args: argparse.Namespace) -> int:
    """Pretty-print the parsed AST, even when the parse recorded errors."""
    result, _, exit_code = _run_parse(args)
    if result is not None:
        print(format_tree(result.root))
    return exit_code


def cmd_check(args: argparse.Namespace) -> int:
    _, _, exit_code = _run_parse(args)
    return exit_code


def cmd_fmt(args: argparse.Namespace) -> int:
    """Print the canonical, fully parenthesized form of the expression."""
    result, _, exit_code = _run_parse(args)
    if exit_code != 0:
        return exit_code
    print(format_expression(result.root))
    return 0


def _add_input_args(parser: argparse.ArgumentParser) -> None:
    """Add the expression argument and the -f/--file alternative."""
    parser.add_argument("expression", nargs="?", help="Expression text, e.g. 'size(a) > :n'")
    parser.add_argument("-f", "--file", help="Read the expression from a file ('-' for stdin)")


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="dxc", description="DynamoDB-style condition expression parser")
    subparsers = parser.add_subparsers(dest="command", required=True, help="Command to run")

    parser.add_argument("-v", "--verbose",
                        action='count',
                        default=0,
                        dest='verbosity',
                        help="Increase verbosity: -v=INFO, -vvv=DEBUG (default: $DX_LOG_LEVEL)")
    parser.add_argument("-l", "--log",
                        action='store_true',
                        default=False,
                        help="Enable rich log formatting (timestamps, levels)")

    p_tok = subparsers.add_parser("tok", help="Dump lexer tokens", aliases=["tokens"])
    p_tok.add_argument("--include-eof", action="store_true",
                       help="Include the EOF token in the output")
    _add_input_args(p_tok)
    p_tok.set_defaults(func=cmd_tok)

    p_ast = subparsers.add_parser("ast", help="Pretty-print the parsed AST")
    _add_input_args(p_ast)
    p_ast.set_defaults(func=cmd_ast)

    p_check = subparsers.add_parser("check", help="Parse and report diagnostics")
    _add_input_args(p_check)
    p_check.set_defaults(func=cmd_check)

    p_fmt = subparsers.add_parser("fmt", help="Print the fully parenthesized expression", aliases=["format"])
    _add_input_args(p_fmt)
    p_fmt.set_defaults(func=cmd_fmt)

    args = parser.parse_args(argv)

    rc = args.func(args)
    raise SystemExit(rc)


if __name__ == "__main__":
    main()
