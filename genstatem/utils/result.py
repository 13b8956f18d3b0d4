"""Result type for explicit error handling.

Compilation stages return ``Ok`` or ``Err`` instead of raising, so that a
failed description never produces partial output and every caller has to
decide what to do with the failure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Generic, NoReturn, TypeVar, Union

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type
U = TypeVar("U")  # Mapped type


class ResultError(Exception):
    """Raised when unwrapping a Result fails."""

    pass


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Represents a successful result."""

    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        """Get the success value. Safe to call since this is Ok."""
        return self.value

    def unwrap_err(self) -> NoReturn:
        """Get the error value. Raises since this is Ok."""
        raise ResultError(f"Called unwrap_err on Ok value: {self.value}")

    def map(self, fn: Callable[[T], U]) -> "Ok[U]":
        """Transform the success value."""
        return Ok(fn(self.value))

    def and_then(self, fn: Callable[[T], "Result[U, E]"]) -> "Result[U, E]":
        """Chain another Result-returning operation."""
        return fn(self.value)

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True)
class Err(Generic[E]):
    """Represents an error result."""

    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        """Get the success value. Raises since this is Err."""
        raise ResultError(f"Called unwrap on Err value: {self.error}")

    def unwrap_err(self) -> E:
        """Get the error value. Safe to call since this is Err."""
        return self.error

    def map(self, fn: Callable[[T], U]) -> "Err[E]":
        """Transform the success value. No-op for Err."""
        return self

    def and_then(self, fn: Callable[[T], "Result[U, E]"]) -> "Err[E]":
        """Chain another Result-returning operation. No-op for Err."""
        return self

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


# Type alias for Result
Result = Union[Ok[T], Err[E]]


# Exit codes
class ExitCode:
    """Exit codes for CLI."""

    CLI_CRASH = 2

    # Guard errors (10-19)
    GUARD_INPUT_FILE = 10
    GUARD_OUTPUT_PATH = 11
    CONFIG_INVALID = 12

    # Stage errors (20-29)
    INPUT_INVALID = 20
    VALIDATION_FAILED = 21
    GENERATION_FAILED = 22
    CHECK_FAILED = 23
    WRITE_FAILED = 24


# Error types for the compiler
@dataclass(frozen=True)
class GuardError:
    """Error from a pre-flight guard check."""

    code: int
    message: str
    details: str = ""

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


@dataclass(frozen=True)
class ConfigError:
    """Error in configuration."""

    field: str
    message: str

    def __str__(self) -> str:
        return f"Config error in '{self.field}': {self.message}"


@dataclass(frozen=True)
class InputError:
    """Error reading or parsing a description."""

    path: str
    message: str
    cause: Exception | None = None

    def __str__(self) -> str:
        where = self.path or "<description>"
        if self.cause:
            return f"{where}: {self.message} ({self.cause})"
        return f"{where}: {self.message}"


@dataclass(frozen=True)
class GenerationError:
    """Error while rendering or checking generated source."""

    phase: str
    message: str
    cause: Exception | None = None

    def __str__(self) -> str:
        if self.cause:
            return f"Generation {self.phase} failed: {self.message} ({self.cause})"
        return f"Generation {self.phase} failed: {self.message}"


@dataclass(frozen=True)
class CompileError:
    """Error from a compilation stage.

    ``diagnostics`` is only populated by the ``validate`` stage and holds
    every problem found in the description.
    """

    stage: str
    code: int
    message: str
    diagnostics: tuple[Any, ...] = field(default_factory=tuple)

    def __str__(self) -> str:
        if self.diagnostics:
            lines = "\n".join(f"  - {d}" for d in self.diagnostics)
            return f"[{self.stage}] {self.message}:\n{lines}"
        return f"[{self.stage}] {self.message}"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "stage": self.stage,
            "code": self.code,
            "message": self.message,
            "diagnostics": [
                d.to_dict() if hasattr(d, "to_dict") else str(d)
                for d in self.diagnostics
            ],
        }


def collect_results(results: list[Result[T, E]]) -> Result[list[T], list[E]]:
    """
    Collect a list of Results into a single Result.

    Returns Ok with all values if all are Ok, or Err with all errors if any are Err.
    """
    values = []
    errors = []

    for result in results:
        if result.is_ok():
            values.append(result.unwrap())
        else:
            errors.append(result.unwrap_err())

    if errors:
        return Err(errors)
    return Ok(values)
