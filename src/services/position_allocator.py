"""Position math for ordered siblings (lists within a board, cards within a list).

Positions are 1-based and dense: a parent with N children holds exactly the
positions 1..N. Every function here is pure and works on in-memory sequences,
services load the current order, ask for the target order and persist only
the rows whose position changed.
"""
from typing import Dict, Hashable, Iterable, List, Mapping, Sequence, TypeVar

from src.core.exceptions import ValidationError

T = TypeVar("T", bound=Hashable)


def next_position(existing_positions: Iterable[int]) -> int:
    """Position for appending at the end: max + 1, or 1 for an empty parent"""
    return max(existing_positions, default=0) + 1


def reindex(ordered_ids: Sequence[T]) -> Dict[T, int]:
    """Assign positions 1..N following the given order"""
    if len(set(ordered_ids)) != len(ordered_ids):
        raise ValidationError("Order contains duplicate ids")
    return {item_id: index for index, item_id in enumerate(ordered_ids, start=1)}


def validate_position(position: int) -> int:
    """Reject positions below 1"""
    if position is None or position < 1:
        raise ValidationError(f"Position must be a positive integer, got {position}")
    return position


def clamp_position(requested: int, size: int) -> int:
    """Clamp a 1-based position into [1, size]"""
    validate_position(requested)
    return max(1, min(requested, max(size, 1)))


def insert_at(ordered_ids: Sequence[T], item_id: T, position: int) -> Dict[T, int]:
    """
    Place item_id at position, shifting the siblings after it.

    The item is removed from the sequence first when it is already there, so
    the same call covers insertion of a new item and reposition of an
    existing one. Positions past the end are clamped to the last slot.
    """
    remaining = [sibling for sibling in ordered_ids if sibling != item_id]
    target = clamp_position(position, len(remaining) + 1)
    remaining.insert(target - 1, item_id)
    return reindex(remaining)


def remove(ordered_ids: Sequence[T], item_id: T) -> Dict[T, int]:
    """Dense positions for the siblings once item_id has left the parent"""
    return reindex([sibling for sibling in ordered_ids if sibling != item_id])


def validate_permutation(current_ids: Iterable[T], requested_ids: Sequence[T]) -> None:
    """A full reorder must name every current sibling exactly once"""
    current = list(current_ids)
    if len(requested_ids) != len(current) or set(requested_ids) != set(current):
        raise ValidationError(
            "Order must contain every sibling exactly once "
            f"(expected {sorted(current)}, got {list(requested_ids)})"
        )


def changed_positions(current: Mapping[T, int], target: Mapping[T, int]) -> Dict[T, int]:
    """Subset of target whose position differs from current"""
    return {
        item_id: position
        for item_id, position in target.items()
        if current.get(item_id) != position
    }


def is_dense(positions: Iterable[int]) -> bool:
    """True when positions are exactly 1..N without duplicates"""
    ordered: List[int] = sorted(positions)
    return ordered == list(range(1, len(ordered) + 1))
