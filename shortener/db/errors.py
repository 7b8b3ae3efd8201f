"""
Store-agnostic error shape.

Database adapters translate driver exceptions into StoreError so that the
service layer never inspects driver-specific payloads.
"""

from enum import Enum
from typing import Optional


class StoreErrorKind(str, Enum):
    """Coarse classification of a failed store statement."""
    UNIQUE_VIOLATION = "unique_violation"
    UNAVAILABLE = "unavailable"
    OTHER = "other"


class StoreError(Exception):
    """
    A failed store operation.

    Attributes:
        kind: What went wrong
        constraint: Column whose uniqueness was violated ("code", "url"),
            or None when unknown or not a constraint failure
        detail: Driver message, for logging only
    """

    def __init__(
        self,
        kind: StoreErrorKind,
        constraint: Optional[str] = None,
        detail: str = ""
    ):
        self.kind = kind
        self.constraint = constraint
        self.detail = detail
        super().__init__(f"{kind.value}({constraint or '-'}): {detail}")

    def is_unique_violation(self, column: str) -> bool:
        return self.kind is StoreErrorKind.UNIQUE_VIOLATION and self.constraint == column
