"""Stake multipliers and signed per-seat deltas for one round."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from .models import SEAT_COUNT

DEFAULT_MAX_BOMBS = 10


class InvalidModifier(AssertionError):
    """Raised when a caller passes modifiers outside their domain.

    Callers validate user input before scoring; this signals a caller bug.
    """


@dataclass(frozen=True)
class RoundModifiers:
    landlord_seat: int
    doubled: Tuple[bool, ...]
    bombs: int = 0
    spring: bool = False
    landlord_result: bool = True

    @property
    def landlord_doubled(self) -> bool:
        return self.doubled[self.landlord_seat]

    def farmer_seats(self) -> Tuple[int, int]:
        first, second = (seat for seat in range(SEAT_COUNT) if seat != self.landlord_seat)
        return first, second


def check_modifiers(modifiers: RoundModifiers, *, max_bombs: int = DEFAULT_MAX_BOMBS) -> None:
    if not 0 <= modifiers.landlord_seat < SEAT_COUNT:
        raise InvalidModifier(f"Landlord seat {modifiers.landlord_seat} is out of range.")
    if len(modifiers.doubled) != SEAT_COUNT:
        raise InvalidModifier(f"Expected {SEAT_COUNT} doubled flags, got {len(modifiers.doubled)}.")
    if isinstance(modifiers.bombs, bool) or not isinstance(modifiers.bombs, int):
        raise InvalidModifier(f"Bomb count must be an integer, got {modifiers.bombs!r}.")
    if modifiers.bombs < 0:
        raise InvalidModifier(f"Bomb count cannot be negative ({modifiers.bombs}).")
    if modifiers.bombs > max_bombs:
        raise InvalidModifier(f"Bomb count {modifiers.bombs} exceeds the cap of {max_bombs}.")


def round_stake(base_stake: int, modifiers: RoundModifiers) -> int:
    """Stake each undoubled farmer pays after bombs, spring and the landlord's double."""
    stake = base_stake * (2 ** modifiers.bombs)
    if modifiers.spring:
        stake *= 2
    if modifiers.landlord_doubled:
        stake *= 2
    return stake


def apply_multipliers(
    base_stake: int,
    modifiers: RoundModifiers,
    *,
    max_bombs: int = DEFAULT_MAX_BOMBS,
) -> Tuple[int, int, int]:
    """Return the signed delta for each seat.

    The landlord's double is folded into the stake before farmer payments, so
    it raises both farmers' payments. A farmer's own double only raises that
    farmer's payment. The landlord collects or pays the sum of both payments.
    """
    check_modifiers(modifiers, max_bombs=max_bombs)
    stake = round_stake(base_stake, modifiers)

    deltas: List[int] = [0] * SEAT_COUNT
    landlord_total = 0
    for farmer in modifiers.farmer_seats():
        payment = stake * 2 if modifiers.doubled[farmer] else stake
        landlord_total += payment
        deltas[farmer] = -payment if modifiers.landlord_result else payment

    deltas[modifiers.landlord_seat] = landlord_total if modifiers.landlord_result else -landlord_total
    return deltas[0], deltas[1], deltas[2]
