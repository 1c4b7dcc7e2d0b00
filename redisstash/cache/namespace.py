"""
redisstash - Key Namespace and TTL Resolution

Computes fully-qualified storage keys and remembers the last one used, so
parameterless calls can keep operating on the active entry.

Also home to the two rules shared by reads and writes:
- TTL precedence: explicit > last lifetime > codec default
- Store-native values: finite numbers are stored unencoded
"""

from __future__ import annotations

import math
import re
from typing import Any

from ..errors import NoActiveKeyError

_NUMERIC_RE = re.compile(r"^[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?$")


class KeyNamespace:
    """
    Prefixes logical key names and tracks the active key.

    Only writes record the active key (save, start and the counters go
    through resolve()). Reads, deletes and existence checks use qualify()
    or peek(), so a delete() never re-targets a later parameterless save().
    """

    def __init__(self, prefix: str = "") -> None:
        self.prefix = prefix
        self.last_key: str | None = None

    def qualify(self, key_name: str) -> str:
        """Return ``prefix + key_name`` without touching the active key."""
        return f"{self.prefix}{key_name}"

    def resolve(self, key_name: str | None = None, operation: str = "resolve") -> str:
        """
        Resolve the storage key for an operation.

        Args:
            key_name: Logical key name; recorded as the active key when given
            operation: Name of the calling operation, for the error message

        Returns:
            Fully-qualified key

        Raises:
            NoActiveKeyError: No key given and none recorded
        """
        if key_name is not None:
            self.last_key = self.qualify(key_name)
            return self.last_key

        if self.last_key is None:
            raise NoActiveKeyError(operation)
        return self.last_key

    def peek(self, key_name: str | None = None) -> str | None:
        """Qualified key for ``key_name``, else the active key; never records or raises."""
        if key_name is not None:
            return self.qualify(key_name)
        return self.last_key


def resolve_ttl(explicit: int | None, last_lifetime: int | None, default: int | None) -> int | None:
    """
    Pick the TTL for a write.

    Returns:
        Seconds to expiry, or None for no expiry (any result <= 0)
    """
    for candidate in (explicit, last_lifetime, default):
        if candidate is not None:
            ttl = int(candidate)
            return ttl if ttl > 0 else None
    return None


def is_store_native(value: Any) -> bool:
    """True for values stored verbatim instead of going through the codec."""
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and math.isfinite(value)


def parse_store_native(raw: Any) -> int | float | None:
    """Turn raw numeric content back into a number, or None when it is not numeric."""
    if isinstance(raw, bytes):
        try:
            raw = raw.decode("ascii")
        except UnicodeDecodeError:
            return None
    if not isinstance(raw, str) or not _NUMERIC_RE.match(raw):
        return None
    try:
        return int(raw)
    except ValueError:
        return float(raw)


def as_text(raw: Any) -> Any:
    """Decode a bytes reply (from a client built without decode_responses) to str."""
    if isinstance(raw, bytes):
        return raw.decode("utf-8")
    return raw
