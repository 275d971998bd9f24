"""Variables-reference encoding for scope listings.

A scope handle is ``category base + frame depth``. Each category owns one
contiguous range of :data:`RANGE_WIDTH` values, so a reference decodes back to
its ``(category, depth)`` pair by range membership alone and no table of issued
references has to be kept between requests.
"""

from __future__ import annotations

from enum import Enum

from tracedap.errors import IntrospectionError

RANGE_WIDTH = 1_000_000


class ScopeCategory(Enum):
    """Scope categories with their reference base and display name."""

    LOCALS = (1_000_000, "Locals")
    UP_VALUES = (2_000_000, "Up Values")
    GLOBALS = (3_000_000, "Globals")

    def __init__(self, base: int, label: str) -> None:
        self.base = base
        self.label = label

    @property
    def expensive(self) -> bool:
        # Listing globals walks the whole module namespace
        return self is ScopeCategory.GLOBALS


def encode_reference(category: ScopeCategory, depth: int) -> int:
    if not 0 <= depth < RANGE_WIDTH:
        msg = f"Frame depth {depth} cannot be encoded in a variables reference"
        raise IntrospectionError(msg, frame_depth=depth)
    return category.base + depth


def decode_reference(reference: int) -> tuple[ScopeCategory, int]:
    for category in ScopeCategory:
        if category.base <= reference < category.base + RANGE_WIDTH:
            return category, reference - category.base
    msg = f"Invalid variables reference {reference}"
    raise IntrospectionError(msg, reference=reference)


__all__ = ["RANGE_WIDTH", "ScopeCategory", "decode_reference", "encode_reference"]
