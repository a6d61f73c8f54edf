"""
Parse context for cross-cutting parser options.

This module defines the ParseContext dataclass which holds options that
affect more than one stage (lexing, parsing, diagnostics output).
"""

#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

import os
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class LogLevel(IntEnum):
    """Hierarchical logging levels for the expression parser."""
    SILENT = 0      # No logging
    ERROR = 3       # Error messages only
    WARNING = 6     # Warning messages (default)
    INFO = 10       # Stage progress messages (-v)
    DEBUG = 30      # Every recorded diagnostic, token dumps (-vvv)


LOG_LEVEL_ENV = "DX_LOG_LEVEL"


def log_level_from_env(default: LogLevel = LogLevel.WARNING) -> LogLevel:
    """Read `DX_LOG_LEVEL` (a level name, case-insensitive); unknown names fall back to `default`."""
    raw = os.getenv(LOG_LEVEL_ENV)
    if not raw:
        return default
    try:
        return LogLevel[raw.strip().upper()]
    except KeyError:
        return default


@dataclass
class ParseContext:
    """
    Holds options shared by the lexer, the parser and the `dxc` driver.

    Attributes:
        log_rich_format:    If True, emit logs in rich format: timestamps and level tags.
        log_level:          Current logging level.
        filename:           Name reported in diagnostics, if the input came from a file.
    """
    log_rich_format: bool = False
    log_level: LogLevel = LogLevel.WARNING
    filename: Optional[str] = None

    @staticmethod
    def default() -> 'ParseContext':
        """Create a ParseContext with default settings, honouring `DX_LOG_LEVEL`."""
        return ParseContext(log_level=log_level_from_env())
