"""Per-player statistics replayed from round and match history.

``compute_statistics`` is a set of independent scans over the same inputs.
Each scan returns the ``PlayerStatistics`` fields it owns, so any scan can be
checked on its own against a hand-written expectation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .models import SEAT_COUNT, Bid, MatchSummary, PlayerStatistics, RoundRecord

logger = logging.getLogger(__name__)

StatFields = Dict[str, object]


@dataclass(frozen=True)
class SeatedRound:
    """A round seen from one player's seat."""

    record: RoundRecord
    seat: int

    @property
    def delta(self) -> int:
        return self.record.deltas[self.seat]

    @property
    def is_landlord(self) -> bool:
        return self.record.landlord_seat == self.seat

    @property
    def doubled(self) -> bool:
        return self.record.doubled[self.seat]

    @property
    def bid(self) -> Bid:
        return self.record.bids[self.seat]

    @property
    def bid_first(self) -> bool:
        return self.record.first_bidder_index == self.seat


@dataclass(frozen=True)
class SeatedMatch:
    summary: MatchSummary
    seat: int

    @property
    def final_score(self) -> int:
        return self.summary.final_scores[self.seat]

    @property
    def max_snapshot(self) -> int:
        return self.summary.max_snapshots[self.seat]

    @property
    def min_snapshot(self) -> int:
        return self.summary.min_snapshots[self.seat]


@dataclass
class StreakCounter:
    """Consecutive wins and losses over a signed result sequence.

    A zero result (tie) resets both counters.
    """

    current_wins: int = 0
    current_losses: int = 0
    max_wins: int = 0
    max_losses: int = 0

    def push(self, result: int) -> None:
        if result > 0:
            self.current_wins += 1
            self.current_losses = 0
            self.max_wins = max(self.max_wins, self.current_wins)
        elif result < 0:
            self.current_losses += 1
            self.current_wins = 0
            self.max_losses = max(self.max_losses, self.current_losses)
        else:
            self.current_wins = 0
            self.current_losses = 0

    @classmethod
    def over(cls, results: Iterable[int]) -> "StreakCounter":
        counter = cls()
        for result in results:
            counter.push(result)
        return counter


def _well_formed(record: RoundRecord) -> bool:
    return (
        len(record.deltas) == SEAT_COUNT
        and len(record.bids) == SEAT_COUNT
        and len(record.doubled) == SEAT_COUNT
        and 1 <= record.landlord <= SEAT_COUNT
    )


def seat_rounds(player_id: str, rounds: Iterable[RoundRecord]) -> List[SeatedRound]:
    """Attach the player's seat to each round, skipping rounds that cannot be read."""
    seated: List[SeatedRound] = []
    for record in rounds:
        seat = record.seat_of(player_id)
        if seat is None:
            logger.warning("round %s#%d has no seat for player %s; skipped", record.match_id, record.round_index, player_id)
            continue
        if not _well_formed(record):
            logger.warning("round %s#%d is malformed; skipped", record.match_id, record.round_index)
            continue
        seated.append(SeatedRound(record=record, seat=seat))
    return seated


def seat_matches(player_id: str, matches: Iterable[MatchSummary]) -> List[SeatedMatch]:
    seated: List[SeatedMatch] = []
    for summary in matches:
        seat = summary.seat_of(player_id)
        if seat is None:
            logger.warning("match %s has no seat for player %s; skipped", summary.match_id, player_id)
            continue
        seated.append(SeatedMatch(summary=summary, seat=seat))
    return seated


# Round scans ---------------------------------------------------------------


def round_totals(rounds: Sequence[SeatedRound]) -> StatFields:
    return {
        "total_rounds": len(rounds),
        "rounds_won": sum(1 for item in rounds if item.delta > 0),
        "rounds_lost": sum(1 for item in rounds if item.delta < 0),
        "total_score": sum(item.delta for item in rounds),
    }


def role_split(rounds: Sequence[SeatedRound]) -> StatFields:
    landlord = [item for item in rounds if item.is_landlord]
    farmer = [item for item in rounds if not item.is_landlord]
    return {
        "rounds_as_landlord": len(landlord),
        "rounds_as_farmer": len(farmer),
        "landlord_wins": sum(1 for item in landlord if item.delta > 0),
        "landlord_losses": sum(1 for item in landlord if item.delta < 0),
        "farmer_wins": sum(1 for item in farmer if item.delta > 0),
        "farmer_losses": sum(1 for item in farmer if item.delta < 0),
    }


def first_bid_distribution(rounds: Sequence[SeatedRound]) -> StatFields:
    counts = [0] * len(Bid)
    first_rounds = [item for item in rounds if item.bid_first]
    for item in first_rounds:
        counts[int(item.bid)] += 1
    return {
        "first_bidder_rounds": len(first_rounds),
        "first_bid_counts": tuple(counts),
    }


def spring_counts(rounds: Sequence[SeatedRound]) -> StatFields:
    landlord_springs = [item for item in rounds if item.record.is_spring and item.record.landlord_result]
    return {
        "spring_count": sum(1 for item in landlord_springs if item.is_landlord),
        "sprung_against_count": sum(1 for item in landlord_springs if not item.is_landlord),
    }


def doubled_stats(rounds: Sequence[SeatedRound]) -> StatFields:
    doubled = [item for item in rounds if item.doubled]
    return {
        "doubled_rounds": len(doubled),
        "doubled_wins": sum(1 for item in doubled if item.delta > 0),
        "doubled_losses": sum(1 for item in doubled if item.delta < 0),
    }


def round_streaks(rounds: Sequence[SeatedRound]) -> StatFields:
    counter = StreakCounter.over(item.delta for item in rounds)
    return {
        "current_win_streak": counter.current_wins,
        "current_loss_streak": counter.current_losses,
        "max_win_streak": counter.max_wins,
        "max_loss_streak": counter.max_losses,
    }


def round_milestones(rounds: Sequence[SeatedRound]) -> StatFields:
    deltas = [item.delta for item in rounds]
    return {
        "best_round_score": max(deltas, default=0),
        "worst_round_score": min(deltas, default=0),
    }


def running_milestone(rounds: Sequence[SeatedRound]) -> StatFields:
    """Highest and lowest point of one running total across every round.

    Match boundaries are ignored. Indexes are 0-based positions in the
    player's round sequence; the earliest position wins a tie.
    """
    peak: Optional[Tuple[int, int]] = None
    trough: Optional[Tuple[int, int]] = None
    running = 0
    for index, item in enumerate(rounds):
        running += item.delta
        if peak is None or running > peak[0]:
            peak = (running, index)
        if trough is None or running < trough[0]:
            trough = (running, index)
    return {
        "running_peak": peak[0] if peak else 0,
        "running_peak_index": peak[1] if peak else None,
        "running_trough": trough[0] if trough else 0,
        "running_trough_index": trough[1] if trough else None,
    }


# Match scans ---------------------------------------------------------------


def match_totals(matches: Sequence[SeatedMatch]) -> StatFields:
    return {
        "total_matches": len(matches),
        "matches_won": sum(1 for item in matches if item.final_score > 0),
        "matches_lost": sum(1 for item in matches if item.final_score < 0),
        "matches_tied": sum(1 for item in matches if item.final_score == 0),
    }


def match_streaks(matches: Sequence[SeatedMatch]) -> StatFields:
    counter = StreakCounter.over(item.final_score for item in matches)
    return {
        "current_match_win_streak": counter.current_wins,
        "current_match_loss_streak": counter.current_losses,
        "max_match_win_streak": counter.max_wins,
        "max_match_loss_streak": counter.max_losses,
    }


def match_milestones(matches: Sequence[SeatedMatch]) -> StatFields:
    finals = [item.final_score for item in matches]
    return {
        "best_match_score": max(finals, default=0),
        "worst_match_score": min(finals, default=0),
        "best_snapshot": max((item.max_snapshot for item in matches), default=0),
        "worst_snapshot": min((item.min_snapshot for item in matches), default=0),
    }


ROUND_SCANS = (
    round_totals,
    role_split,
    first_bid_distribution,
    spring_counts,
    doubled_stats,
    round_streaks,
    round_milestones,
    running_milestone,
)

MATCH_SCANS = (
    match_totals,
    match_streaks,
    match_milestones,
)


def compute_statistics(
    player_id: str,
    rounds: Iterable[RoundRecord],
    matches: Iterable[MatchSummary],
) -> PlayerStatistics:
    """Replay a player's history into a fresh ``PlayerStatistics``.

    ``rounds`` must be ordered by time played and ``matches`` by start time;
    streaks and the running milestone depend on that order. Rounds or matches
    the player is not seated in, and rounds missing per-seat values, are
    skipped rather than failing the whole aggregate.
    """
    seated_rounds = seat_rounds(player_id, rounds)
    seated_matches = seat_matches(player_id, matches)

    fields: StatFields = {}
    for scan in ROUND_SCANS:
        fields.update(scan(seated_rounds))
    for scan in MATCH_SCANS:
        fields.update(scan(seated_matches))
    return PlayerStatistics(player_id=player_id, **fields)


@dataclass(frozen=True)
class MatchReport:
    summary: MatchSummary
    spring_rounds: int
    players: Dict[str, PlayerStatistics] = field(default_factory=dict)


def match_report(summary: MatchSummary, rounds: Sequence[RoundRecord]) -> MatchReport:
    """Statistics for each seat, restricted to one match."""
    in_match = [record for record in rounds if record.match_id == summary.match_id]
    players = {
        player_id: compute_statistics(player_id, in_match, [summary])
        for player_id in summary.player_ids
    }
    return MatchReport(
        summary=summary,
        spring_rounds=sum(1 for record in in_match if record.is_spring),
        players=players,
    )
