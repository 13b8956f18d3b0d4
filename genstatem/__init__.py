"""genstatem - compile state machine descriptions into thread-safe Python modules."""

__version__ = "0.1.0"

from genstatem.compiler import (  # noqa: E402
    CompileOutput,
    compile_description,
    compile_file,
    derive_constant_name,
    validate,
)
from genstatem.config import CompilerConfig, load_config  # noqa: E402
from genstatem.loader import load_description, parse_description  # noqa: E402
from genstatem.models import (  # noqa: E402
    Description,
    Diagnostic,
    DiagnosticKind,
    State,
    Transition,
    ValidatedDescription,
)

__all__ = [
    "__version__",
    # Compiler
    "compile_description",
    "compile_file",
    "CompileOutput",
    "validate",
    "derive_constant_name",
    # Input
    "load_description",
    "parse_description",
    # Config
    "CompilerConfig",
    "load_config",
    # Models
    "Description",
    "State",
    "Transition",
    "ValidatedDescription",
    "Diagnostic",
    "DiagnosticKind",
]
