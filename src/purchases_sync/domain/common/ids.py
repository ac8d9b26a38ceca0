from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RequestFingerprint:
    """Identifies "the same logical request" for in-flight coalescing."""

    value: str

    @classmethod
    def from_parts(cls, *parts: object) -> "RequestFingerprint":
        return cls("-".join("" if part is None else str(part) for part in parts))
