"""
Shared value objects.

Immutable, validated domain primitives.
"""

from __future__ import annotations

import re

from pydantic import BaseModel, ConfigDict, Field

from nutrilink.domain.shared.errors import ValidationError

_NON_DIGIT = re.compile(r"\D")


def clean_barcode(raw: str) -> str:
    """Strip every non-digit character.

    Example:
        >>> clean_barcode("301-762-042-2003")
        '3017620422003'
    """
    return _NON_DIGIT.sub("", raw or "")


class Barcode(BaseModel):
    """
    Product barcode value object.

    Holds digits only. Build it from user input with ``Barcode.parse``,
    which cleans separators before validating.

    Example:
        >>> barcode = Barcode.parse(" 3017620422003 ")
        >>> assert barcode.value == "3017620422003"
    """

    model_config = ConfigDict(frozen=True)

    value: str = Field(..., pattern=r"^\d+$", description="Barcode digits")

    @classmethod
    def parse(cls, raw: str) -> Barcode:
        """
        Clean and validate raw barcode input.

        Raises:
            ValidationError: If no digits remain after cleaning
        """
        cleaned = clean_barcode(raw)
        if not cleaned:
            raise ValidationError("Barcode is required")
        return cls(value=cleaned)

    def __str__(self) -> str:
        """String representation."""
        return self.value

    def __repr__(self) -> str:
        """Debug representation."""
        return f"Barcode('{self.value}')"

    def __hash__(self) -> int:
        """Allow use as dict key."""
        return hash(self.value)
