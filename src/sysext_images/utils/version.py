"""Version string ordering."""

import re
from typing import Optional, Tuple, Union

_SEGMENT_SPLIT = re.compile(r"[.\-_+~]")

Segment = Tuple[int, Union[int, str]]


def _segment_key(segment: str) -> Segment:
    # Numeric segments sort before textual ones so the key stays totally ordered.
    if segment.isdigit():
        return (0, int(segment))
    return (1, segment)


def version_key(version: str) -> Tuple[Segment, ...]:
    """Build a sort key comparing dotted versions segment by segment.

    Examples:
        version_key("9") < version_key("10")
        version_key("1.2") < version_key("1.2.1")
    """
    return tuple(_segment_key(part) for part in _SEGMENT_SPLIT.split(version))


def compare_versions(v1: Optional[str], v2: Optional[str]) -> int:
    """Compare two version strings.

    Numeric segments compare as numbers, everything else lexicographically.
    Versions with equal keys but different spelling ("1.0" vs "1.00") fall
    back to plain string comparison, which keeps the ordering total. A
    missing version sorts before any present one.

    Returns:
        Negative if v1 < v2, zero if equal, positive if v1 > v2
    """
    if v1 is None or v2 is None:
        return (v1 is not None) - (v2 is not None)

    k1, k2 = version_key(v1), version_key(v2)
    if k1 != k2:
        return -1 if k1 < k2 else 1
    return (v1 > v2) - (v1 < v2)


def is_newer(candidate: Optional[str], reference: Optional[str]) -> bool:
    """Check if candidate is strictly newer than reference."""
    if candidate is None:
        return False
    return compare_versions(candidate, reference) > 0
