"""Configuration module for genstatem."""

from genstatem.config.settings import (
    CompilerConfig,
    GeneratorConfig,
    LoggingConfig,
    OutputConfig,
    load_config,
)

__all__ = [
    "CompilerConfig",
    "GeneratorConfig",
    "OutputConfig",
    "LoggingConfig",
    "load_config",
]
