"""
Colour bucket mapping for numeric attributes.

A colour configuration carries four ascending bounds and four colours. A value
is classified into the highest bucket whose bound is <= value:

    value < bounds[0]              -> bucket 0
    bounds[i] <= value < bounds[i+1] -> bucket i
    value >= bounds[3]             -> bucket 3
"""

import re
from typing import Optional, Sequence

NUMBER_OF_BUCKETS = 4
U64_MAX = 2**64 - 1

_UNSIGNED_PATTERN = re.compile(r"\+?[0-9]+")


def bucket_index(bounds: Sequence[int], value: int) -> int:
    """
    Classify value into one of the four buckets described by bounds.

    Finds the left insertion point of value with a binary search, then steps
    down one bucket when value sits strictly between two bounds.

    Args:
        bounds: Four ascending bounds. Ascending order is not checked.
        value: Unsigned value to classify.

    Returns:
        Bucket index in [0, 3].
    """
    max_index = NUMBER_OF_BUCKETS - 1
    left = 0
    right = max_index

    while left <= right:
        middle = left + (right - left) // 2
        if bounds[middle] >= value:
            right = middle - 1
        else:
            left = middle + 1

    # Past the last bound still means the last bucket
    index = max(min(left, max_index), 0)

    if index > 0 and bounds[index] > value:
        return index - 1
    return index


def parse_unsigned(raw_value: str) -> Optional[int]:
    """Parse an attribute value as an unsigned 64-bit integer, or None."""
    if not _UNSIGNED_PATTERN.fullmatch(raw_value):
        return None

    value = int(raw_value)
    if value > U64_MAX:
        return None
    return value


def attribute_colour(
    bounds: Sequence[int], colours: Sequence[str], raw_value: str
) -> Optional[str]:
    """
    Colour for a raw attribute value.

    Returns:
        The colour of the value's bucket, or None when raw_value is not an
        unsigned integer.
    """
    value = parse_unsigned(raw_value)
    if value is None:
        return None
    return colours[bucket_index(bounds, value)]
