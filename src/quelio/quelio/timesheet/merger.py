from __future__ import annotations

from typing import Dict, Iterable, Optional

from .model import DayPunches, RawFragment

# Upstream HTML pads cells with &nbsp;, which decodes to U+00A0
_PUNCH_NOISE = " \t\n\r\x00\x0b\xa0"


class HourMerger:
    """Combine paginated portal fragments into one sorted punch list per day.

    The portal paginates by record offset, so the same date can appear in
    several fragments with different subsets of its punches. Concatenating
    then sorting makes the result independent of fragment order. Identical
    punches coming from overlapping pages are kept as separate entries.
    """

    def merge(self, fragments: Iterable[Optional[RawFragment]]) -> Dict[str, DayPunches]:
        merged: Dict[str, DayPunches] = {}

        for fragment in fragments:
            if not fragment:
                continue

            for raw_date, punches in fragment.items():
                day = raw_date.strip().replace("/", "-")
                bucket = merged.setdefault(day, [])
                bucket.extend(punch.strip(_PUNCH_NOISE) for punch in punches)
                # Fixed-width HH:MM strings sort chronologically
                bucket.sort()

        return merged
