"""Security policy violations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any, Protocol, runtime_checkable


class ViolationType(IntEnum):
    """The kind of a security policy violation."""

    UNQUALIFIED_IMAGE = 0
    FIX_UNAVAILABLE = 1
    SEVERITY = 2


@runtime_checkable
class Violation(Protocol):
    """A security policy violation."""

    type: ViolationType
    reason: str
    details: Any


@dataclass(frozen=True)
class SimpleViolation:
    """A plain violation record."""

    type: ViolationType
    reason: str
    details: Any = None