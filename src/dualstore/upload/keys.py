"""Storage key generation."""

import re
from dataclasses import dataclass
from uuid import uuid4

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


@dataclass(frozen=True)
class StorageKey:
    """Object-store key split into its parts."""

    prefix: str
    unique_suffix: str
    sanitized_filename: str

    def __str__(self) -> str:
        return f"{self.prefix}/{self.unique_suffix}_{self.sanitized_filename}"


def sanitize_filename(filename: str) -> str:
    """Replace every character outside ``[A-Za-z0-9._-]`` with ``_``.

    The mapping is one-for-one, so the result has the same length as the
    input. Path separators become ``_`` which leaves ``..`` harmless.
    """
    return _UNSAFE_CHARS.sub("_", filename)


def build_storage_key(filename: str, prefix: str) -> StorageKey:
    """Derive a fresh storage key for ``filename`` under ``prefix``."""
    return StorageKey(
        prefix=prefix,
        unique_suffix=uuid4().hex,
        sanitized_filename=sanitize_filename(filename),
    )


def generate_key(filename: str, prefix: str) -> str:
    """Return ``"{prefix}/{random}_{sanitized filename}"``.

    Two calls with the same arguments never return the same key.
    """
    return str(build_storage_key(filename, prefix))
