"""
Snapshot Merge Resolver

Combines the authoritative external-record snapshot with the inferred
(estimated) snapshot. Priority is per field, not per object: the
authoritative value wins whenever it is present, the inferred value
fills the gaps, and a field absent from both stays None.

No validation, clamping or unit conversion happens here.
"""

from __future__ import annotations

from typing import Optional, TypeVar

from .models import PropertySnapshot


T = TypeVar("T")


def merge_field(authoritative: Optional[T], inferred: Optional[T]) -> Optional[T]:
    """
    Resolve one field.

    Only None counts as missing: 0, "" and negative values from the
    authoritative source are kept as-is.
    """
    if authoritative is not None:
        return authoritative
    return inferred


def merge_snapshots(
    authoritative: Optional[PropertySnapshot],
    inferred: Optional[PropertySnapshot],
) -> Optional[PropertySnapshot]:
    """
    Merge two partially populated snapshots.

    Args:
        authoritative: Snapshot mapped from the external property record
        inferred: Snapshot estimated upstream from listing text

    Returns:
        Merged snapshot, or None when both inputs are None
    """
    if authoritative is None and inferred is None:
        return None

    primary = authoritative or PropertySnapshot.empty()
    fallback = inferred or PropertySnapshot.empty()

    return PropertySnapshot(**{
        name: merge_field(getattr(primary, name), getattr(fallback, name))
        for name in PropertySnapshot.field_names()
    })
