"""Data shapes shared by the scoring, match and statistics modules."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum, IntEnum, auto
from typing import Any, Dict, NamedTuple, Optional, Sequence, Tuple

SEAT_COUNT = 3
SEAT_LABELS: Tuple[str, str, str] = ("A", "B", "C")


class Bid(IntEnum):
    """Bid levels in ascending order. NONE means the seat declined."""

    NONE = 0
    ONE = 1
    TWO = 2
    THREE = 3

    def __str__(self) -> str:
        return "pass" if self is Bid.NONE else str(int(self))

    @classmethod
    def coerce(cls, value: Optional[int]) -> "Bid":
        """Accept a Bid, its integer value, or ``None`` for a declined bid."""
        if value is None:
            return cls.NONE
        return cls(value)


class Outcome(Enum):
    WIN = auto()
    LOSS = auto()
    NEUTRAL = auto()

    @classmethod
    def from_delta(cls, delta: int) -> "Outcome":
        if delta > 0:
            return cls.WIN
        if delta < 0:
            return cls.LOSS
        return cls.NEUTRAL

    def __str__(self) -> str:
        return self.name.lower()


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


def seat_label(seat: int) -> str:
    return SEAT_LABELS[seat]


def position_for_seat(seat: int) -> int:
    """Persisted landlord positions are 1-based (1=A, 2=B, 3=C)."""
    return seat + 1


def seat_for_position(position: int) -> int:
    return position - 1


def percentage(numerator: int, denominator: int) -> float:
    """Return ``numerator / denominator`` as a percentage, 0.0 for an empty denominator."""
    if denominator <= 0:
        return 0.0
    return numerator / denominator * 100.0


class ScoreTriple(NamedTuple):
    """One value per seat, in seat order."""

    a: int = 0
    b: int = 0
    c: int = 0

    @classmethod
    def of(cls, values: Sequence[int]) -> "ScoreTriple":
        if len(values) != SEAT_COUNT:
            raise ValueError(f"Expected {SEAT_COUNT} values, got {len(values)}.")
        return cls(int(values[0]), int(values[1]), int(values[2]))

    def plus(self, deltas: Sequence[int]) -> "ScoreTriple":
        return ScoreTriple(self.a + deltas[0], self.b + deltas[1], self.c + deltas[2])


@dataclass(frozen=True)
class RoundInput:
    """Raw entry for one round, before bids are resolved."""

    bids: Tuple[Bid, ...]
    doubled: Tuple[bool, ...] = (False, False, False)
    bombs: int = 0
    spring: bool = False
    landlord_result: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "bids", tuple(Bid.coerce(bid) for bid in self.bids))
        object.__setattr__(self, "doubled", tuple(bool(flag) for flag in self.doubled))


@dataclass(frozen=True)
class RoundRecord:
    """Resolved outcome of one round as it is persisted.

    ``landlord`` keeps the persisted 1/2/3 position encoding; use
    ``landlord_seat`` for the 0-based seat. ``spring`` and ``first_bidder``
    may be ``None`` on records written before those fields existed.
    """

    landlord: int
    bids: Tuple[Bid, ...]
    doubled: Tuple[bool, ...]
    bombs: int
    spring: Optional[bool]
    landlord_result: bool
    deltas: Tuple[int, ...]
    first_bidder: Optional[int]
    match_id: str = ""
    round_index: int = 0
    played_at: datetime = field(default_factory=utcnow)
    player_ids: Tuple[str, ...] = ("", "", "")

    def __post_init__(self) -> None:
        object.__setattr__(self, "bids", tuple(Bid.coerce(bid) for bid in self.bids))
        object.__setattr__(self, "doubled", tuple(bool(flag) for flag in self.doubled))
        object.__setattr__(self, "deltas", tuple(int(delta) for delta in self.deltas))
        object.__setattr__(self, "player_ids", tuple(self.player_ids))

    @property
    def landlord_seat(self) -> int:
        return seat_for_position(self.landlord)

    @property
    def is_spring(self) -> bool:
        return bool(self.spring)

    @property
    def first_bidder_index(self) -> int:
        return self.first_bidder if self.first_bidder is not None else 0

    @property
    def outcomes(self) -> Tuple[Outcome, ...]:
        return tuple(Outcome.from_delta(delta) for delta in self.deltas)

    def seat_of(self, player_id: str) -> Optional[int]:
        for seat, seated in enumerate(self.player_ids):
            if seated == player_id:
                return seat
        return None

    def to_input(self) -> RoundInput:
        return RoundInput(
            bids=self.bids,
            doubled=self.doubled,
            bombs=self.bombs,
            spring=self.is_spring,
            landlord_result=self.landlord_result,
        )


@dataclass(frozen=True)
class MatchSummary:
    """Aggregate of one match. Live matches are stored with ``ended_at`` unset."""

    match_id: str
    player_ids: Tuple[str, ...]
    final_scores: ScoreTriple
    total_games: int
    max_snapshots: ScoreTriple
    min_snapshots: ScoreTriple
    initial_starter: int
    started_at: datetime = field(default_factory=utcnow)
    ended_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "player_ids", tuple(self.player_ids))

    @property
    def is_live(self) -> bool:
        """A match still being played has no end time."""
        return self.ended_at is None

    def seat_of(self, player_id: str) -> Optional[int]:
        for seat, seated in enumerate(self.player_ids):
            if seated == player_id:
                return seat
        return None


@dataclass(frozen=True)
class PlayerStatistics:
    """Aggregate statistics for one player, always recomputed from history."""

    player_id: str

    total_rounds: int = 0
    rounds_won: int = 0
    rounds_lost: int = 0

    rounds_as_landlord: int = 0
    rounds_as_farmer: int = 0
    landlord_wins: int = 0
    landlord_losses: int = 0
    farmer_wins: int = 0
    farmer_losses: int = 0

    # Counts indexed by Bid value, only for rounds where the player bid first.
    first_bidder_rounds: int = 0
    first_bid_counts: Tuple[int, int, int, int] = (0, 0, 0, 0)

    spring_count: int = 0
    sprung_against_count: int = 0

    doubled_rounds: int = 0
    doubled_wins: int = 0
    doubled_losses: int = 0

    current_win_streak: int = 0
    current_loss_streak: int = 0
    max_win_streak: int = 0
    max_loss_streak: int = 0

    total_matches: int = 0
    matches_won: int = 0
    matches_lost: int = 0
    matches_tied: int = 0
    current_match_win_streak: int = 0
    current_match_loss_streak: int = 0
    max_match_win_streak: int = 0
    max_match_loss_streak: int = 0

    total_score: int = 0
    best_round_score: int = 0
    worst_round_score: int = 0
    best_match_score: int = 0
    worst_match_score: int = 0
    best_snapshot: int = 0
    worst_snapshot: int = 0

    running_peak: int = 0
    running_peak_index: Optional[int] = None
    running_trough: int = 0
    running_trough_index: Optional[int] = None

    @property
    def win_rate(self) -> float:
        return percentage(self.rounds_won, self.total_rounds)

    @property
    def landlord_win_rate(self) -> float:
        return percentage(self.landlord_wins, self.rounds_as_landlord)

    @property
    def farmer_win_rate(self) -> float:
        return percentage(self.farmer_wins, self.rounds_as_farmer)

    @property
    def doubled_win_rate(self) -> float:
        return percentage(self.doubled_wins, self.doubled_rounds)

    @property
    def match_win_rate(self) -> float:
        return percentage(self.matches_won, self.total_matches)

    @property
    def average_score_per_round(self) -> float:
        if self.total_rounds == 0:
            return 0.0
        return self.total_score / self.total_rounds

    def first_bid_count(self, bid: Bid) -> int:
        return self.first_bid_counts[int(bid)]

    def as_dict(self) -> Dict[str, Any]:
        payload = asdict(self)
        payload["first_bid_counts"] = {
            str(bid): self.first_bid_counts[int(bid)] for bid in Bid
        }
        payload.update(
            win_rate=self.win_rate,
            landlord_win_rate=self.landlord_win_rate,
            farmer_win_rate=self.farmer_win_rate,
            doubled_win_rate=self.doubled_win_rate,
            match_win_rate=self.match_win_rate,
            average_score_per_round=self.average_score_per_round,
        )
        return payload


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    created_at: datetime = field(default_factory=utcnow)
