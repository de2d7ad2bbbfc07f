"""Pure view computations over a snapshot of the entry list."""

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Sequence

from schemas import FALLBACK_EMOJI, MOOD_EMOJIS, MoodEntry
from timeconv import utc_to_local

ALL = "All"


def visible_entries(entries: Sequence[MoodEntry], filter_category: str = ALL) -> List[MoodEntry]:
    if filter_category == ALL:
        return list(entries)
    return [e for e in entries if e.category == filter_category]


def monthly_counts(entries: Iterable[MoodEntry], reference_now: Optional[datetime] = None) -> Dict[str, int]:
    """Count entries per category that fall in the calendar month of `reference_now`.

    The month is judged in the timezone carried by `reference_now` (naive means
    host-local). Categories without entries are left out.
    """
    if reference_now is None:
        reference_now = datetime.now().astimezone()
    elif reference_now.tzinfo is None:
        reference_now = reference_now.astimezone()
    tz = reference_now.tzinfo

    counts: Dict[str, int] = {}
    for entry in entries:
        local = utc_to_local(entry.time, tz)
        if local.year == reference_now.year and local.month == reference_now.month:
            counts[entry.category] = counts.get(entry.category, 0) + 1
    return counts


def available_categories(entries: Iterable[MoodEntry]) -> List[str]:
    seen: List[str] = []
    for entry in entries:
        if entry.category not in seen:
            seen.append(entry.category)
    return seen


def emoji_for(category: str) -> str:
    return MOOD_EMOJIS.get(category, FALLBACK_EMOJI)
