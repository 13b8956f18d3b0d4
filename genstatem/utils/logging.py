"""Structured logging utility with compile-run context support."""

from __future__ import annotations

import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any

import structlog

# Context variables propagated into every log event
run_id_var: ContextVar[str] = ContextVar("run_id", default="")
stage_var: ContextVar[str] = ContextVar("stage", default="")
machine_var: ContextVar[str] = ContextVar("machine", default="")


def get_run_id() -> str:
    """Get the current compile run ID, generating one if not set."""
    rid = run_id_var.get()
    if not rid:
        rid = str(uuid.uuid4())[:8]
        run_id_var.set(rid)
    return rid


def set_run_context(machine: str, stage: str = "") -> None:
    """Set the machine being compiled and, optionally, the stage."""
    machine_var.set(machine)
    if stage:
        stage_var.set(stage)


def set_stage(stage: str) -> None:
    """Set the current compilation stage."""
    stage_var.set(stage)


def add_context_info(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add run ID, machine and stage to log events."""
    run_id = run_id_var.get()
    if run_id:
        event_dict["run_id"] = run_id

    machine = machine_var.get()
    if machine:
        event_dict["machine"] = machine

    stage = stage_var.get()
    if stage:
        event_dict["stage"] = stage

    return event_dict


def add_timestamp(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Add ISO format timestamp to log events."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def configure_logging(
    level: str = "info",
    format_type: str = "json",
    stream: Any = None,
) -> None:
    """
    Configure structured logging for the compiler.

    Logs go to stderr by default so that ``--dry-run`` output and JSON
    reports on stdout stay clean.

    Args:
        level: Log level (debug, info, warn, error)
        format_type: Output format ('json' or 'text')
        stream: Output stream (default: sys.stderr)
    """
    if stream is None:
        stream = sys.stderr

    level_map = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "warn": logging.WARNING,
        "warning": logging.WARNING,
        "error": logging.ERROR,
    }
    log_level = level_map.get(level.lower(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=log_level,
    )

    processors: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        add_timestamp,
        add_context_info,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if format_type == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(stream),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Optional logger name for context

    Returns:
        Configured structlog logger
    """
    # A lazy proxy resolves the configuration on every call, so module-level
    # loggers follow a later configure_logging() from the CLI
    if name:
        return structlog.get_logger(logger_name=name)
    return structlog.get_logger()


def log_stage_timing(stage: str, duration_seconds: float) -> None:
    """Log timing information for a compilation stage."""
    logger = get_logger("timing")
    logger.debug(
        "stage_completed",
        stage=stage,
        duration_seconds=round(duration_seconds, 6),
    )


# Initialize with defaults on import
configure_logging()
