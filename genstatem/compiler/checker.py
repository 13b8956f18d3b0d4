"""Syntax check for generated modules."""

from __future__ import annotations

import ast
from dataclasses import dataclass, field

from genstatem.utils.logging import get_logger

logger = get_logger("compiler.checker")


@dataclass
class CheckResult:
    """Result of checking generated code."""

    valid: bool = True
    syntax_errors: list[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        """Check if there are any errors."""
        return len(self.syntax_errors) > 0


class OutputChecker:
    """
    Checks generated Python code before it is written.

    Performs:
    - AST parsing
    - Byte-compilation
    """

    def check(self, source: str, filename: str = "<generated>") -> CheckResult:
        """
        Check a generated module.

        Args:
            source: Python source code
            filename: File name used in error messages

        Returns:
            CheckResult with any errors found
        """
        result = CheckResult()

        try:
            tree = ast.parse(source, filename=filename)
        except SyntaxError as e:
            result.valid = False
            result.syntax_errors.append(f"{filename}:{e.lineno}: {e.msg}")
            logger.warning("check_failed", filename=filename, error=e.msg, line=e.lineno)
            return result

        # compile() catches what the parser accepts but the compiler does not,
        # such as a misplaced return
        try:
            compile(tree, filename, "exec")
        except SyntaxError as e:
            result.valid = False
            result.syntax_errors.append(f"{filename}:{e.lineno}: {e.msg}")
            logger.warning("check_failed", filename=filename, error=e.msg, line=e.lineno)
            return result

        logger.debug("check_passed", filename=filename)
        return result
