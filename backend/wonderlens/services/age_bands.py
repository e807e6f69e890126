from __future__ import annotations

from typing import Optional, Tuple


AGE_BANDS = ("6-7", "8-9", "10")

MIN_SUPPORTED_AGE = 6
MAX_COMMUNITY_AGE = 12
COMMUNITY_AGE_SPREAD = 2


def age_band_for(age: Optional[int]) -> Optional[str]:
    """
    Map a child's age onto the content age-band.

    6-7 -> "6-7", 8-9 -> "8-9", 10 -> "10"; anything else (including None) -> None.
    """
    if age is None:
        return None
    if 6 <= age <= 7:
        return "6-7"
    if 8 <= age <= 9:
        return "8-9"
    if age == 10:
        return "10"
    return None


def community_age_window(viewer_age: int) -> Tuple[int, int]:
    """Inclusive (low, high) child_age range shown to a viewer of the given age."""
    low = max(MIN_SUPPORTED_AGE, viewer_age - COMMUNITY_AGE_SPREAD)
    high = min(MAX_COMMUNITY_AGE, viewer_age + COMMUNITY_AGE_SPREAD)
    return low, high
