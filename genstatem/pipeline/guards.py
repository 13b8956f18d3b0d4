"""Compile guards - precondition checks that fail fast on unusable paths.

These guards run before a description is read, so that a missing input or an
unwritable destination is reported with a clear message and exit code instead
of surfacing halfway through a compile.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from genstatem.utils.logging import get_logger
from genstatem.utils.result import Err, ExitCode, GuardError, Ok, Result

logger = get_logger("pipeline.guards")


@dataclass
class GuardContext:
    """Context for guard checks."""

    input_path: Path
    output_path: Optional[Path] = None


class CompileGuards:
    """
    Precondition checks that stop a compile immediately.

    Each guard returns Ok if the check passes and Err(GuardError) if it
    fails.
    """

    def __init__(self, context: GuardContext) -> None:
        """
        Initialize guards with context.

        Args:
            context: Paths to check
        """
        self.context = context

    def check_all(self) -> Result[None, GuardError]:
        """
        Run all precondition checks.

        Returns:
            Result indicating success or first failure
        """
        logger.debug("running_guards")

        result = self.check_input_file(self.context.input_path)
        if result.is_err():
            return result

        if self.context.output_path is not None:
            result = self.check_output_writable(self.context.output_path)
            if result.is_err():
                return result

        logger.debug("guards_passed")
        return Ok(None)

    def check_input_file(self, path: Path) -> Result[Path, GuardError]:
        """
        Check that the description file exists and is readable.

        Args:
            path: Path to the description

        Returns:
            Ok(Path) with resolved path if valid, Err(GuardError) otherwise
        """
        path = Path(path)

        if not path.exists():
            error = GuardError(
                code=ExitCode.GUARD_INPUT_FILE,
                message=f"Description file not found: {path}",
                details="Pass the description with --in.",
            )
            logger.error("guard_failed", guard="input_file", code=error.code, path=str(path))
            return Err(error)

        if not path.is_file():
            error = GuardError(
                code=ExitCode.GUARD_INPUT_FILE,
                message=f"Description path is not a file: {path}",
            )
            logger.error("guard_failed", guard="input_file", code=error.code, path=str(path))
            return Err(error)

        if not os.access(path, os.R_OK):
            error = GuardError(
                code=ExitCode.GUARD_INPUT_FILE,
                message=f"Description file is not readable: {path}",
            )
            logger.error("guard_failed", guard="input_file", code=error.code, path=str(path))
            return Err(error)

        logger.debug("guard_passed", guard="input_file", path=str(path))
        return Ok(path.resolve())

    def check_output_writable(self, path: Path) -> Result[None, GuardError]:
        """
        Check that the generated module can be written.

        Creates the parent directory if needed.

        Args:
            path: Path of the module to write

        Returns:
            Ok(None) if the location is writable, Err(GuardError) otherwise
        """
        path = Path(path)

        if path.is_dir():
            error = GuardError(
                code=ExitCode.GUARD_OUTPUT_PATH,
                message=f"Output path is a directory: {path}",
                details="Pass the file to generate with --out.",
            )
            logger.error("guard_failed", guard="output_path", code=error.code, path=str(path))
            return Err(error)

        parent = path.parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            error = GuardError(
                code=ExitCode.GUARD_OUTPUT_PATH,
                message=f"Cannot create output directory: {parent}",
                details=f"OS error: {e}",
            )
            logger.error("guard_failed", guard="output_path", code=error.code, path=str(parent))
            return Err(error)

        if not os.access(parent, os.W_OK):
            error = GuardError(
                code=ExitCode.GUARD_OUTPUT_PATH,
                message=f"Output directory is not writable: {parent}",
            )
            logger.error("guard_failed", guard="output_path", code=error.code, path=str(parent))
            return Err(error)

        logger.debug("guard_passed", guard="output_path", path=str(path))
        return Ok(None)


def run_guards(
    input_path: Path,
    output_path: Optional[Path] = None,
) -> Result[None, GuardError]:
    """
    Convenience function to run all guards.

    Args:
        input_path: Description file
        output_path: Module to write, or None when nothing is written

    Returns:
        Result indicating success or first guard failure
    """
    context = GuardContext(input_path=Path(input_path), output_path=output_path)
    return CompileGuards(context).check_all()
