#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2026 gwz

from __future__ import annotations

import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from dx_context import ParseContext, LogLevel
from dx_parser import parse_source


@pytest.fixture
def quiet_context() -> ParseContext:
    return ParseContext(log_level=LogLevel.SILENT)


@pytest.fixture
def parse(quiet_context: ParseContext):
    """Parse expression text with logging silenced.

    Usage:
        def test_something(parse):
            result = parse("a = :v")
            assert not result.has_errors()
    """

    def _parse(src: str):
        return parse_source(src, quiet_context)

    return _parse


@pytest.fixture
def parse_ok(parse):
    """Parse expression text, assert it is clean, and return the top-level expression."""

    def _parse_ok(src: str):
        result = parse(src)
        assert result.errors() == []
        assert result.expression is not None
        return result.expression

    return _parse_ok


def has_error_code(diagnostics, code: str) -> bool:
    """Check if any diagnostic contains the given error code.

    Args:
        diagnostics: List of Diagnostic objects
        code: Error code string like "PAR-0010" or "[PAR-0010]"

    Returns:
        True if any diagnostic message contains the error code
    """
    if not code.startswith("["):
        code = f"[{code}]"
    return any(code in d.message for d in diagnostics)
