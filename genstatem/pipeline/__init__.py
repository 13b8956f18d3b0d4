"""Pipeline module for genstatem."""

from genstatem.pipeline.guards import CompileGuards, run_guards

__all__ = ["CompileGuards", "run_guards"]
