"""Derivation of Python identifiers from user-supplied names."""

from __future__ import annotations

import builtins
import keyword
import unicodedata

STATE_PREFIX = "STATE"
EVENT_PREFIX = "EVENT"

# Names the generated module binds itself; user names must not shadow them.
RESERVED_NAMES = frozenset({
    "State",
    "Event",
    "NO_EVENT",
    "InvalidEventError",
    "_RWLock",
    "threading",
    "contextmanager",
    "Iterator",
    "NewType",
    "Protocol",
    "annotations",
})

# Parameter names inside the generated methods; a free-function callback
# with one of these names would be shadowed at its call site.
LOCAL_NAMES = frozenset({"self", "event", "state", "iface", "invoke_entry_action"})

# The generated module looks these up as globals (property, super, Exception,
# str ...); a free-function callback with such a name would replace them.
BUILTIN_NAMES = frozenset(name for name in dir(builtins) if not name.startswith("_"))


def _normalize(name: str) -> str:
    # Upper-casing can leave characters that NFKC folds further, and the
    # Python parser NFKC-normalizes identifiers, so normalize on both sides.
    return unicodedata.normalize(
        "NFKC", unicodedata.normalize("NFKC", name).upper()
    )


def derive_constant_name(raw_name: str, prefix: str) -> str:
    """
    Derive the module-level constant name for a state or event.

    ``idle`` becomes ``STATE_IDLE`` with the state prefix, ``start`` becomes
    ``EVENT_START`` with the event prefix. Works on code points, so
    ``état`` becomes ``STATE_ÉTAT``. Every character that cannot continue a
    Python identifier is replaced with ``_``. The empty name derives the bare
    ``STATE_``.

    Derivation never fails, but it is lossy: distinct names may derive the
    same constant. The validator reports that as a collision.

    Args:
        raw_name: Name as written in the description
        prefix: STATE_PREFIX or EVENT_PREFIX

    Returns:
        A valid Python identifier
    """
    body = "".join(
        ch if f"_{ch}".isidentifier() else "_" for ch in _normalize(raw_name)
    )
    return f"{prefix}_{body}"


def is_identifier(name: str) -> bool:
    """Check if a name can be emitted verbatim as a Python identifier."""
    return name.isidentifier() and not keyword.iskeyword(name)


def is_module_path(path: str) -> bool:
    """Check if a string is a dotted Python module path."""
    return bool(path) and all(is_identifier(part) for part in path.split("."))
