"""Utility modules for genstatem."""

from genstatem.utils.atomic import AtomicWriteError, atomic_write, atomic_write_text
from genstatem.utils.logging import (
    configure_logging,
    get_logger,
    get_run_id,
    log_stage_timing,
    set_run_context,
    set_stage,
)
from genstatem.utils.result import Err, ExitCode, Ok, Result, ResultError

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    "get_run_id",
    "set_run_context",
    "set_stage",
    "log_stage_timing",
    # Atomic writes
    "AtomicWriteError",
    "atomic_write",
    "atomic_write_text",
    # Result
    "Ok",
    "Err",
    "Result",
    "ResultError",
    "ExitCode",
]
