"""Convenience service layer over match sessions and the record store."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .match import MatchError, MatchSession
from .models import MatchSummary, Player, PlayerStatistics, RoundInput, RoundRecord, ScoreTriple
from .multipliers import DEFAULT_MAX_BOMBS
from .statistics import MatchReport, compute_statistics, match_report
from .store import InMemoryRecordStore, RecordStore

logger = logging.getLogger(__name__)


@dataclass
class MatchView:
    match_id: str
    player_ids: List[str]
    rounds: List[RoundRecord]
    scores: List[ScoreTriple]
    totals: ScoreTriple
    next_bidder: int
    finished: bool


class LedgerService:
    """Facade used by the HTTP service and scripts.

    A match is stored from the moment it starts: its summary is saved with no
    end time and rewritten after every change, and each round is saved when
    recorded. Live matches are rebuilt from the store when they are not in
    memory, so a restart loses nothing. Player statistics only read finished
    matches.
    """

    def __init__(self, store: Optional[RecordStore] = None, *, max_bombs: int = DEFAULT_MAX_BOMBS) -> None:
        self.store = store if store is not None else InMemoryRecordStore()
        self.max_bombs = max_bombs
        self.active: Dict[str, MatchSession] = {}
        self._lock = threading.RLock()

    # Players -----------------------------------------------------------

    def add_player(self, name: str) -> Player:
        return self.store.add_player(name)

    def players(self) -> List[Player]:
        return self.store.players()

    # Match lifecycle ---------------------------------------------------

    def start_match(self, player_ids: Sequence[str], initial_starter: int = 0) -> MatchView:
        for player_id in player_ids:
            self.store.get_player(player_id)
        session = MatchSession(
            player_ids=tuple(player_ids),
            initial_starter=initial_starter,
            max_bombs=self.max_bombs,
        )
        with self._lock:
            self.store.save_match_summary(session.summary())
            self.active[session.match_id] = session
        logger.info("match %s started with %s", session.match_id, ", ".join(session.player_ids))
        return self._view(session)

    def finish_match(self, match_id: str) -> Optional[MatchSummary]:
        """Finalize a live match. Empty matches are dropped and return ``None``."""
        with self._lock:
            session = self._require_active(match_id)
            summary = session.finish()
            del self.active[match_id]
            if summary is None:
                self.store.delete_match(match_id)
                return None
            self.store.update_match_summary(summary)
        logger.info("match %s finished after %d rounds: %s", match_id, summary.total_games, tuple(summary.final_scores))
        return summary

    # Rounds ------------------------------------------------------------

    def record_round(self, match_id: str, round_input: RoundInput) -> RoundRecord:
        with self._lock:
            session = self._require_active(match_id)
            record = session.record_round(round_input)
            self.store.save_round_record(record)
            self.store.update_match_summary(session.summary())
        logger.info("match %s round %d recorded: %s", match_id, record.round_index, record.deltas)
        return record

    def edit_round(self, match_id: str, index: int, round_input: RoundInput) -> RoundRecord:
        with self._lock:
            session = self._open_session(match_id)
            record = session.edit_round(index, round_input)
            self.store.update_round_record(record)
            self.store.update_match_summary(session.summary())
        logger.info("match %s round %d edited: %s", match_id, index, record.deltas)
        return record

    def delete_round(self, match_id: str, index: int) -> RoundRecord:
        with self._lock:
            session = self._open_session(match_id)
            removed = session.delete_round(index)
            self.store.replace_match_rounds(match_id, session.rounds)
            if session.is_finished and not session.rounds:
                self.store.delete_match(match_id)
                logger.info("match %s lost its last round; discarded", match_id)
            else:
                self.store.update_match_summary(session.summary())
        logger.info("match %s round %d deleted", match_id, index)
        return removed

    def set_next_bidder(self, match_id: str, seat: int) -> MatchView:
        with self._lock:
            session = self._require_active(match_id)
            session.set_next_bidder(seat)
            self.store.update_match_summary(session.summary())
            return self._view(session)

    # Views -------------------------------------------------------------

    def match_view(self, match_id: str) -> MatchView:
        with self._lock:
            return self._view(self._open_session(match_id))

    def player_statistics(self, player_id: str) -> PlayerStatistics:
        self.store.get_player(player_id)
        return compute_statistics(
            player_id,
            self.store.load_round_records_for_player(player_id),
            self.store.load_match_summaries(player_id),
        )

    def match_report(self, match_id: str) -> MatchReport:
        with self._lock:
            session = self._open_session(match_id)
            return match_report(session.summary(), session.rounds)

    # Helpers -----------------------------------------------------------

    def _view(self, session: MatchSession) -> MatchView:
        return MatchView(
            match_id=session.match_id,
            player_ids=list(session.player_ids),
            rounds=list(session.rounds),
            scores=list(session.scores),
            totals=session.totals,
            next_bidder=session.next_bidder,
            finished=session.is_finished,
        )

    def _require_active(self, match_id: str) -> MatchSession:
        session = self._open_session(match_id)
        if session.is_finished:
            raise MatchError(f"Match {match_id} has already finished.")
        return session

    def _open_session(self, match_id: str) -> MatchSession:
        """Session in memory, or one rebuilt from the stored match history.

        Rebuilt live matches are kept in memory for the following calls.
        """
        session = self.active.get(match_id)
        if session is not None:
            return session
        summary = self.store.load_match_summary(match_id)
        rounds = self.store.load_round_records_for_match(match_id)
        if len(rounds) != summary.total_games:
            logger.warning(
                "match %s lists %d rounds but %d are stored; refolding from rounds",
                match_id,
                summary.total_games,
                len(rounds),
            )
        session = MatchSession.from_history(summary, rounds, max_bombs=self.max_bombs)
        if summary.is_live:
            self.active[match_id] = session
            logger.info("match %s resumed from storage at round %d", match_id, len(rounds))
        return session
