"""Bid validation and landlord resolution."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple, Union

from .models import SEAT_COUNT, Bid

logger = logging.getLogger(__name__)

STAKE_PER_LEVEL = 100

BidInput = Union[Bid, int, None]


class BiddingError(ValueError):
    """Base class for bid validation errors shown to the player entering the round."""


class InvalidBid(BiddingError):
    """Raised when the bids are not three values in the 0..3 range."""


class AmbiguousBid(BiddingError):
    """Raised when two or more seats share the highest bid that was made."""

    def __init__(self, level: Bid, seats: Sequence[int] = ()) -> None:
        self.level = Bid(level)
        self.seats: Tuple[int, ...] = tuple(seats)
        super().__init__(f"Multiple seats bid {int(self.level)}.")


class NoBid(BiddingError):
    """Raised when every seat declined to bid."""

    def __init__(self) -> None:
        super().__init__("Nobody bid.")


@dataclass(frozen=True)
class BidResolution:
    landlord_seat: int
    level: Bid

    @property
    def base_stake(self) -> int:
        return STAKE_PER_LEVEL * int(self.level)


def normalize_bids(bids: Iterable[BidInput]) -> Tuple[Bid, ...]:
    values: List[Bid] = []
    for bid in bids:
        try:
            values.append(Bid.coerce(bid))
        except ValueError as exc:
            raise InvalidBid(f"Bid {bid!r} is not one of 0, 1, 2 or 3.") from exc
    if len(values) != SEAT_COUNT:
        raise InvalidBid(f"Exactly {SEAT_COUNT} bids are required, got {len(values)}.")
    return tuple(values)


def resolve_bids(bids: Iterable[BidInput]) -> BidResolution:
    """Pick the landlord and base stake from three bids.

    Levels are scanned from THREE down to ONE. The first level that any seat
    bid decides the round: a single seat becomes landlord, several seats tie
    and the entry is rejected. Ties below that level do not matter.

    Raises:
        InvalidBid: wrong number of bids or a value outside the bid range.
        AmbiguousBid: the highest bid made was made by more than one seat.
        NoBid: every seat declined.
    """
    values = normalize_bids(bids)
    for level in (Bid.THREE, Bid.TWO, Bid.ONE):
        seats = [seat for seat, bid in enumerate(values) if bid is level]
        if not seats:
            continue
        if len(seats) > 1:
            raise AmbiguousBid(level, seats)
        resolution = BidResolution(landlord_seat=seats[0], level=level)
        logger.debug("bids %s resolved to seat %d at level %d", values, seats[0], int(level))
        return resolution
    raise NoBid()
