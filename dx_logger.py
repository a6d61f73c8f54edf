#  SPDX-License-Identifier: MIT OR Apache-2.0
#  Copyright (c) 2025-2026 gwz

"""Stderr logging gated by the ParseContext level."""

import sys
import time
from typing import Optional

from dx_context import ParseContext, LogLevel

_LEVEL_TAGS = {
    LogLevel.ERROR: "ERROR",
    LogLevel.WARNING: "WARNING",
    LogLevel.INFO: "INFO",
    LogLevel.DEBUG: "DEBUG",
}


def log(context: ParseContext, log_level: LogLevel, message: str) -> None:
    if context.log_level < log_level:
        return
    prefix = ""
    if context.log_rich_format and log_level in _LEVEL_TAGS:
        timestamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime())
        prefix = f"{timestamp} [{_LEVEL_TAGS[log_level]}] "
    print(f"{prefix}{message}", file=sys.stderr)


def log_error(context: ParseContext, message: str) -> None:
    log(context, LogLevel.ERROR, message)


def log_warning(context: ParseContext, message: str) -> None:
    log(context, LogLevel.WARNING, message)


def log_info(context: ParseContext, message: str) -> None:
    log(context, LogLevel.INFO, message)


def log_debug(context: ParseContext, message: str) -> None:
    log(context, LogLevel.DEBUG, message)


def log_stage(context: ParseContext, stage: str, source: Optional[str] = None) -> None:
    """Announce a stage at INFO, naming the input when there is one."""
    if source:
        log_info(context, f"{stage} '{source}'")
    else:
        log_info(context, f"{stage}...")
