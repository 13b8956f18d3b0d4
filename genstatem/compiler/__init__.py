"""State machine compiler: validate, generate, check."""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from genstatem.compiler.checker import CheckResult, OutputChecker
from genstatem.compiler.generator import CodeGenerator
from genstatem.compiler.identifiers import (
    EVENT_PREFIX,
    STATE_PREFIX,
    derive_constant_name,
    is_identifier,
)
from genstatem.compiler.validator import validate
from genstatem.config.settings import CompilerConfig
from genstatem.loader import load_description
from genstatem.models import Description, ValidatedDescription
from genstatem.utils.atomic import AtomicWriteError, atomic_write_text
from genstatem.utils.logging import get_logger, log_stage_timing, set_run_context, set_stage
from genstatem.utils.result import CompileError, Err, ExitCode, GenerationError, Ok, Result

logger = get_logger("compiler")


@dataclass(frozen=True)
class CompileOutput:
    """Result of compiling one description."""

    source: str
    validated: ValidatedDescription
    package: str
    output_path: Optional[Path] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "machine": self.validated.name,
            "package": self.package,
            "states": len(self.validated.state_constants),
            "events": len(self.validated.event_constants),
            "callbacks": len(self.validated.callbacks),
            "lines": self.source.count("\n"),
            "output_path": str(self.output_path) if self.output_path else None,
        }


def compile_description(
    description: Description,
    config: Optional[CompilerConfig] = None,
    package: Optional[str] = None,
    filename: str = "<generated>",
) -> Result[CompileOutput, CompileError]:
    """
    Compile a description into Python source.

    Nothing is produced unless every stage succeeds.

    Args:
        description: Description to compile
        config: Compiler configuration (defaults apply if omitted)
        package: Package target; falls back to the description, then the config
        filename: Name used in syntax-check messages

    Returns:
        Result with CompileOutput or the CompileError of the failing stage
    """
    config = config or CompilerConfig()
    package = package or description.package or config.output.default_package

    set_run_context(machine=description.name, stage="validate")
    logger.info("compile_started", states=len(description.states), package=package)

    started = time.perf_counter()
    validation = validate(description)
    log_stage_timing("validate", time.perf_counter() - started)

    if validation.is_err():
        diagnostics = validation.unwrap_err()
        logger.error("compile_failed", errors=len(diagnostics))
        return Err(CompileError(
            stage="validate",
            code=ExitCode.VALIDATION_FAILED,
            message=f"Description `{description.name}` is invalid",
            diagnostics=tuple(diagnostics),
        ))
    validated = validation.unwrap()

    set_stage("generate")
    started = time.perf_counter()
    generation = CodeGenerator(config.generator).generate(validated, package)
    log_stage_timing("generate", time.perf_counter() - started)

    if generation.is_err():
        error = generation.unwrap_err()
        logger.error("compile_failed", error=str(error))
        return Err(CompileError(
            stage="generate",
            code=ExitCode.GENERATION_FAILED,
            message=str(error),
        ))
    source = generation.unwrap()

    if config.generator.check_output:
        set_stage("check")
        check: CheckResult = OutputChecker().check(source, filename)
        if check.has_errors:
            error = GenerationError(phase="check", message="; ".join(check.syntax_errors))
            logger.error("compile_failed", error=str(error))
            return Err(CompileError(
                stage="check",
                code=ExitCode.CHECK_FAILED,
                message=str(error),
            ))

    logger.info(
        "compile_completed",
        states=len(validated.state_constants),
        events=len(validated.event_constants),
    )
    return Ok(CompileOutput(source=source, validated=validated, package=package))


def compile_file(
    input_path: Path,
    output_path: Optional[Path],
    config: Optional[CompilerConfig] = None,
    package: Optional[str] = None,
    callbacks: Optional[str] = None,
) -> Result[CompileOutput, CompileError]:
    """
    Load, compile and write a description file.

    Args:
        input_path: Description file
        output_path: Module to write; None compiles without writing
        config: Compiler configuration
        package: Package target override
        callbacks: Callback module override

    Returns:
        Result with CompileOutput or the CompileError of the failing stage
    """
    config = config or CompilerConfig()

    set_stage("load")
    loaded = load_description(Path(input_path))
    if loaded.is_err():
        return Err(CompileError(
            stage="load",
            code=ExitCode.INPUT_INVALID,
            message=str(loaded.unwrap_err()),
        ))
    description = loaded.unwrap()

    if callbacks is not None:
        description = replace(description, callbacks=callbacks)

    filename = str(output_path) if output_path else "<generated>"
    result = compile_description(description, config, package, filename)
    if result.is_err() or output_path is None:
        return result
    output = result.unwrap()

    set_stage("write")
    try:
        atomic_write_text(Path(output_path), output.source, encoding=config.output.encoding)
    except AtomicWriteError as e:
        return Err(CompileError(stage="write", code=ExitCode.WRITE_FAILED, message=str(e)))

    logger.info("module_written", path=str(output_path))
    return Ok(replace(output, output_path=Path(output_path)))


__all__ = [
    # Main functions
    "compile_description",
    "compile_file",
    "CompileOutput",
    # Stages
    "validate",
    "CodeGenerator",
    "OutputChecker",
    "CheckResult",
    # Identifiers
    "derive_constant_name",
    "is_identifier",
    "STATE_PREFIX",
    "EVENT_PREFIX",
]
