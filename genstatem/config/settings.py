"""Centralized configuration for the compiler.

Configuration is loaded from an optional YAML file and validated before any
description is read. Command-line flags override file values.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from genstatem.utils.result import ConfigError, Err, Ok, Result

DEFAULT_CONFIG_FILE = "genstatem.yaml"
DEFAULT_HEADER = "Code generated by genstatem; DO NOT EDIT."

ORDERS = ("name", "input")


@dataclass
class GeneratorConfig:
    """Code generation settings."""

    # "name" sorts states and events by name, "input" keeps description order
    order: str = "name"
    check_output: bool = True
    header: str = DEFAULT_HEADER


@dataclass
class OutputConfig:
    """Output file settings."""

    encoding: str = "utf-8"
    default_package: str = "main"


@dataclass
class LoggingConfig:
    """Logging settings."""

    level: str = "info"
    format: str = "json"


@dataclass
class CompilerConfig:
    """
    Complete compiler configuration.

    The defaults reproduce the behavior of a plain ``genstatem compile`` with
    no configuration file.
    """

    generator: GeneratorConfig = field(default_factory=GeneratorConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Set when loaded from a file
    config_path: Optional[Path] = None

    @classmethod
    def from_yaml(cls, path: Path) -> Result["CompilerConfig", ConfigError]:
        """
        Load configuration from a YAML file.

        Args:
            path: Path to YAML configuration file

        Returns:
            Result with loaded config or error
        """
        path = Path(path)

        if not path.exists():
            return Err(ConfigError(
                field="path",
                message=f"Configuration file not found: {path}",
            ))

        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            return Err(ConfigError(
                field="yaml",
                message=f"Failed to parse YAML: {e}",
            ))
        except OSError as e:
            return Err(ConfigError(
                field="file",
                message=f"Failed to read config file: {e}",
            ))

        if not isinstance(data, dict):
            return Err(ConfigError(
                field="yaml",
                message="Configuration file must contain a mapping",
            ))

        return cls.from_dict(data).map(lambda config: replace(config, config_path=path))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Result["CompilerConfig", ConfigError]:
        """
        Create configuration from a dictionary.

        Args:
            data: Configuration dictionary

        Returns:
            Result with loaded config or error
        """
        sections = {}
        for section in ("generator", "output", "logging"):
            value = data.get(section) or {}
            if not isinstance(value, dict):
                return Err(ConfigError(
                    field=section,
                    message=f"Must be a mapping, got {type(value).__name__}",
                ))
            sections[section] = value

        generator_data = sections["generator"]
        generator = GeneratorConfig(
            order=str(generator_data.get("order", "name")),
            check_output=bool(generator_data.get("check_output", True)),
            header=str(generator_data.get("header", DEFAULT_HEADER)),
        )

        output_data = sections["output"]
        output = OutputConfig(
            encoding=str(output_data.get("encoding", "utf-8")),
            default_package=str(output_data.get("default_package", "main")),
        )

        logging_data = sections["logging"]
        logging_config = LoggingConfig(
            level=str(logging_data.get("level", "info")),
            format=str(logging_data.get("format", "json")),
        )

        config = cls(generator=generator, output=output, logging=logging_config)

        validation_result = config.validate()
        if validation_result.is_err():
            return Err(validation_result.unwrap_err())

        return Ok(config)

    def validate(self) -> Result[None, ConfigError]:
        """
        Validate configuration values.

        Returns:
            Result indicating success or validation error
        """
        if self.generator.order not in ORDERS:
            return Err(ConfigError(
                field="generator.order",
                message=f"Must be one of {', '.join(ORDERS)}, got {self.generator.order!r}",
            ))

        if "\n" in self.generator.header or "\r" in self.generator.header:
            return Err(ConfigError(
                field="generator.header",
                message="Must be a single line",
            ))

        try:
            "".encode(self.output.encoding)
        except LookupError:
            return Err(ConfigError(
                field="output.encoding",
                message=f"Unknown encoding {self.output.encoding!r}",
            ))

        if self.logging.level.lower() not in ("debug", "info", "warn", "warning", "error"):
            return Err(ConfigError(
                field="logging.level",
                message=f"Unknown level {self.logging.level!r}",
            ))

        if self.logging.format not in ("json", "text"):
            return Err(ConfigError(
                field="logging.format",
                message=f"Must be 'json' or 'text', got {self.logging.format!r}",
            ))

        return Ok(None)

    def with_overrides(
        self,
        order: Optional[str] = None,
        check_output: Optional[bool] = None,
        log_level: Optional[str] = None,
        log_format: Optional[str] = None,
    ) -> "CompilerConfig":
        """
        Return a new config with command-line overrides applied.

        Args:
            order: Emission order
            check_output: Whether to syntax-check generated code
            log_level: Logging level
            log_format: Logging format

        Returns:
            New CompilerConfig; None arguments keep the current value
        """
        generator = replace(
            self.generator,
            order=order if order is not None else self.generator.order,
            check_output=(
                check_output if check_output is not None else self.generator.check_output
            ),
        )
        logging_config = replace(
            self.logging,
            level=log_level if log_level is not None else self.logging.level,
            format=log_format if log_format is not None else self.logging.format,
        )
        return replace(self, generator=generator, logging=logging_config)


def load_config(config_path: Optional[Path] = None) -> Result[CompilerConfig, ConfigError]:
    """
    Load configuration from the standard location.

    An explicit path must exist. Without one, ``./genstatem.yaml`` is used if
    present, otherwise the defaults apply.

    Args:
        config_path: Configuration file

    Returns:
        Result with loaded config or error
    """
    if config_path is not None:
        return CompilerConfig.from_yaml(Path(config_path))

    default_path = Path(DEFAULT_CONFIG_FILE)
    if default_path.exists():
        return CompilerConfig.from_yaml(default_path)

    return Ok(CompilerConfig())
