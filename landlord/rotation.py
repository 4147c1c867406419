"""Who bids first in each round of a match."""

from __future__ import annotations

from typing import List, Sequence

from .models import SEAT_COUNT, RoundRecord


def first_bidder(round_index: int, match_starter: int) -> int:
    """Seat that bids first in ``round_index`` (0-based) of a match started by ``match_starter``."""
    return (round_index + match_starter) % SEAT_COUNT


def recorded_first_bidder(record: RoundRecord, match_starter: int) -> int:
    """Stored first bidder, falling back to the rotation for records that lack one."""
    if record.first_bidder is not None:
        return record.first_bidder
    return first_bidder(record.round_index, match_starter)


def rotation_mismatches(records: Sequence[RoundRecord], match_starter: int) -> List[int]:
    """Round indexes whose stored first bidder differs from the rotation.

    Stored values are kept as they are; this only reports where history was
    recorded out of the normal rotation (e.g. after a mid-match starter change).
    """
    return [
        record.round_index
        for record in records
        if record.first_bidder is not None
        and record.first_bidder != first_bidder(record.round_index, match_starter)
    ]
