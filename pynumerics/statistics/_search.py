"""Binary search over items ordered relative to a target value."""

from __future__ import annotations

from typing import Any, Callable, Sequence


def binary_map_search(
    sorted_items: Sequence[Any],
    value: Any,
    compare: Callable[[Any, Any], int] | None = None,
) -> int:
    """
    Locate the item matching value in a sorted sequence.

    Each item is compared against value rather than against another
    item: ``compare(item, value)`` (by default ``item.compare_value(value)``)
    returns a negative number if the item lies before value, positive if it
    lies after, and zero on a match.

    Returns:
        Index of a matching item, or ``~insertion_point`` (negative) if there
        is none
    """
    if compare is None:
        compare = _compare_value

    first = 0
    last = len(sorted_items) - 1
    while first <= last:
        mid = first + ((last - first) >> 1)
        result = compare(sorted_items[mid], value)
        if result == 0:
            return mid
        if result < 0:
            first = mid + 1
        else:
            last = mid - 1
    return ~first


def _compare_value(item: Any, value: Any) -> int:
    return item.compare_value(value)
