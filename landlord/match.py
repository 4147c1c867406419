"""Match aggregation: running totals, snapshot extremes and the live match session."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import SEAT_COUNT, MatchSummary, RoundInput, RoundRecord, ScoreTriple, utcnow
from .multipliers import DEFAULT_MAX_BOMBS
from .rotation import first_bidder, recorded_first_bidder, rotation_mismatches
from .scoring import rescore_round, score_round

logger = logging.getLogger(__name__)


class MatchError(RuntimeError):
    """Raised when a match session is used out of order."""


@dataclass(frozen=True)
class MatchFold:
    scores: Tuple[ScoreTriple, ...]
    summary: MatchSummary

    @property
    def totals(self) -> ScoreTriple:
        return self.scores[-1] if self.scores else ScoreTriple()


def running_totals(rounds: Iterable[RoundRecord]) -> List[ScoreTriple]:
    """Prefix sums of the round deltas, one ScoreTriple per round."""
    totals: List[ScoreTriple] = []
    current = ScoreTriple()
    for record in rounds:
        current = current.plus(record.deltas)
        totals.append(current)
    return totals


def snapshot_extremes(scores: Iterable[ScoreTriple]) -> Tuple[ScoreTriple, ScoreTriple]:
    """Per-seat maximum and minimum of the running totals, counting the zero start."""
    highs = [0] * SEAT_COUNT
    lows = [0] * SEAT_COUNT
    for triple in scores:
        for seat, value in enumerate(triple):
            highs[seat] = max(highs[seat], value)
            lows[seat] = min(lows[seat], value)
    return ScoreTriple.of(highs), ScoreTriple.of(lows)


def fold_match(
    rounds: Sequence[RoundRecord],
    *,
    match_id: Optional[str] = None,
    player_ids: Optional[Sequence[str]] = None,
    initial_starter: int = 0,
    started_at: Optional[datetime] = None,
    ended_at: Optional[datetime] = None,
) -> MatchFold:
    """Fold an ordered round list into its running totals and match summary.

    Identity fields default to the ones carried by the first round.
    """
    scores = tuple(running_totals(rounds))
    highs, lows = snapshot_extremes(scores)
    first = rounds[0] if rounds else None
    if match_id is None:
        match_id = first.match_id if first is not None else ""
    if player_ids is None:
        player_ids = first.player_ids if first is not None else ("", "", "")
    if started_at is None:
        started_at = first.played_at if first is not None else utcnow()
    summary = MatchSummary(
        match_id=match_id,
        player_ids=tuple(player_ids),
        final_scores=scores[-1] if scores else ScoreTriple(),
        total_games=len(rounds),
        max_snapshots=highs,
        min_snapshots=lows,
        initial_starter=initial_starter,
        started_at=started_at,
        ended_at=ended_at,
    )
    return MatchFold(scores=scores, summary=summary)


@dataclass
class MatchSession:
    """Rounds of one match between three seated players.

    Every change to the round list is followed by a full refold; cached
    totals are never patched in place.
    """

    player_ids: Tuple[str, ...]
    initial_starter: int = 0
    match_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    started_at: datetime = field(default_factory=utcnow)
    max_bombs: int = DEFAULT_MAX_BOMBS
    rounds: List[RoundRecord] = field(default_factory=list)
    ended_at: Optional[datetime] = field(default=None, init=False)
    _next_override: Optional[int] = field(default=None, init=False, repr=False)
    _fold: MatchFold = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.player_ids = tuple(self.player_ids)
        if len(self.player_ids) != SEAT_COUNT:
            raise MatchError(f"A match needs exactly {SEAT_COUNT} players.")
        if len(set(self.player_ids)) != SEAT_COUNT:
            raise MatchError("The same player cannot take two seats.")
        if not 0 <= self.initial_starter < SEAT_COUNT:
            raise MatchError(f"Starter seat {self.initial_starter} is out of range.")
        self.rounds = list(self.rounds)
        self._refold()

    @classmethod
    def from_history(
        cls,
        summary: MatchSummary,
        rounds: Sequence[RoundRecord],
        *,
        max_bombs: int = DEFAULT_MAX_BOMBS,
    ) -> "MatchSession":
        """Reopen a finished match so its rounds can be corrected."""
        ordered = sorted(rounds, key=lambda record: record.round_index)
        mismatched = rotation_mismatches(ordered, summary.initial_starter)
        if mismatched:
            logger.info(
                "match %s: stored first bidders differ from rotation at rounds %s",
                summary.match_id,
                mismatched,
            )
        session = cls(
            player_ids=summary.player_ids,
            initial_starter=summary.initial_starter,
            match_id=summary.match_id,
            started_at=summary.started_at,
            max_bombs=max_bombs,
            rounds=ordered,
        )
        session.ended_at = summary.ended_at
        session._refold()
        return session

    # Queries -----------------------------------------------------------

    @property
    def next_bidder(self) -> int:
        """Seat to bid first in the next round.

        Rotation continues from the last recorded round, so a mid-match
        override carries forward without touching ``initial_starter``.
        """
        if self._next_override is not None:
            return self._next_override
        if not self.rounds:
            return first_bidder(0, self.initial_starter)
        return first_bidder(1, recorded_first_bidder(self.rounds[-1], self.initial_starter))

    @property
    def scores(self) -> Tuple[ScoreTriple, ...]:
        return self._fold.scores

    @property
    def totals(self) -> ScoreTriple:
        return self._fold.totals

    @property
    def is_finished(self) -> bool:
        return self.ended_at is not None

    def summary(self) -> MatchSummary:
        return self._fold.summary

    # Mutations ---------------------------------------------------------

    def set_next_bidder(self, seat: int) -> None:
        """Make ``seat`` bid first in the next round.

        Before the first round this picks the match starter. Later it only
        overrides the next round; ``initial_starter`` keeps naming the seat
        that opened round one.
        """
        self._ensure_open()
        if not 0 <= seat < SEAT_COUNT:
            raise MatchError(f"Seat {seat} is out of range.")
        if self.rounds:
            self._next_override = seat
            return
        self.initial_starter = seat
        self._refold()

    def record_round(self, round_input: RoundInput, *, played_at: Optional[datetime] = None) -> RoundRecord:
        self._ensure_open()
        record = score_round(
            round_input,
            first_bidder=self.next_bidder,
            match_id=self.match_id,
            round_index=len(self.rounds),
            player_ids=self.player_ids,
            played_at=played_at,
            max_bombs=self.max_bombs,
        )
        self.rounds.append(record)
        self._next_override = None
        self._refold()
        return record

    def edit_round(self, index: int, round_input: RoundInput) -> RoundRecord:
        record = self._round_at(index)
        updated = rescore_round(record, round_input, max_bombs=self.max_bombs)
        self.rounds[index] = updated
        self._refold()
        return updated

    def delete_round(self, index: int) -> RoundRecord:
        removed = self._round_at(index)
        del self.rounds[index]
        self.rounds = [replace(record, round_index=position) for position, record in enumerate(self.rounds)]
        self._refold()
        return removed

    def finish(self, *, ended_at: Optional[datetime] = None) -> Optional[MatchSummary]:
        """Close the match. Returns ``None`` when no round was played."""
        self._ensure_open()
        self.ended_at = ended_at or utcnow()
        self._refold()
        if not self.rounds:
            logger.info("match %s ended without rounds; discarded", self.match_id)
            return None
        return self._fold.summary

    # Helpers -----------------------------------------------------------

    def _refold(self) -> None:
        self._fold = fold_match(
            self.rounds,
            match_id=self.match_id,
            player_ids=self.player_ids,
            initial_starter=self.initial_starter,
            started_at=self.started_at,
            ended_at=self.ended_at,
        )

    def _round_at(self, index: int) -> RoundRecord:
        if not 0 <= index < len(self.rounds):
            raise MatchError(f"Round {index} does not exist in match {self.match_id}.")
        return self.rounds[index]

    def _ensure_open(self) -> None:
        if self.is_finished:
            raise MatchError(f"Match {self.match_id} has already finished.")
