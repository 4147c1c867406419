"""Persistence collaborators for rounds, match summaries and players."""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
import threading
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .models import MatchSummary, Player, RoundRecord
from .schema import LedgerDocument, MatchSummaryDocument, PlayerDocument, RoundRecordDocument

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """Raised when a write conflicts with what is already stored."""


class RecordNotFound(StoreError):
    """Raised when a player, match or round is not in the store."""


class DuplicatePlayer(ValueError):
    """Raised when a player name is already taken."""


class RecordStore(ABC):
    """What the ledger needs from storage.

    Loads return copies ordered as callers expect: a player's rounds by time
    played, a match's rounds by position, a player's matches by start time.
    Player-level loads only see finished matches; a live match is reachable
    by its id alone.
    """

    @abstractmethod
    def players(self) -> List[Player]: ...

    @abstractmethod
    def add_player(self, name: str) -> Player: ...

    @abstractmethod
    def get_player(self, player_id: str) -> Player: ...

    @abstractmethod
    def load_round_records_for_player(self, player_id: str) -> List[RoundRecord]: ...

    @abstractmethod
    def load_round_records_for_match(self, match_id: str) -> List[RoundRecord]: ...

    @abstractmethod
    def load_match_summaries(self, player_id: str) -> List[MatchSummary]: ...

    @abstractmethod
    def load_match_summary(self, match_id: str) -> MatchSummary: ...

    @abstractmethod
    def save_round_record(self, record: RoundRecord) -> None: ...

    @abstractmethod
    def update_round_record(self, record: RoundRecord) -> None: ...

    @abstractmethod
    def replace_match_rounds(self, match_id: str, records: Sequence[RoundRecord]) -> None: ...

    @abstractmethod
    def save_match_summary(self, summary: MatchSummary) -> None: ...

    @abstractmethod
    def update_match_summary(self, summary: MatchSummary) -> None: ...

    @abstractmethod
    def delete_match(self, match_id: str) -> None: ...


class InMemoryRecordStore(RecordStore):
    """Dict-backed store. One reentrant lock serializes every read and write."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._players: Dict[str, Player] = {}
        self._rounds: Dict[str, List[RoundRecord]] = {}
        self._matches: Dict[str, MatchSummary] = {}

    # Players -----------------------------------------------------------

    def players(self) -> List[Player]:
        with self._lock:
            return sorted(self._players.values(), key=lambda player: player.name)

    def add_player(self, name: str) -> Player:
        name = name.strip()
        if not name:
            raise ValueError("Player name must not be empty.")
        with self._lock:
            if any(player.name == name for player in self._players.values()):
                raise DuplicatePlayer(f"Player name {name!r} already exists.")
            player = Player(id=uuid.uuid4().hex, name=name)
            self._players[player.id] = player
        logger.info("player %s added as %s", name, player.id)
        return player

    def get_player(self, player_id: str) -> Player:
        with self._lock:
            try:
                return self._players[player_id]
            except KeyError as exc:
                raise RecordNotFound(f"Player {player_id} not found.") from exc

    # Rounds ------------------------------------------------------------

    def load_round_records_for_player(self, player_id: str) -> List[RoundRecord]:
        with self._lock:
            seated = [
                record
                for match_id, records in self._rounds.items()
                if not self._is_live(match_id)
                for record in records
                if player_id in record.player_ids
            ]
        return sorted(seated, key=_played_order)

    def load_round_records_for_match(self, match_id: str) -> List[RoundRecord]:
        with self._lock:
            records = list(self._rounds.get(match_id, []))
        return sorted(records, key=lambda record: record.round_index)

    def save_round_record(self, record: RoundRecord) -> None:
        with self._lock:
            records = self._rounds.setdefault(record.match_id, [])
            if any(stored.round_index == record.round_index for stored in records):
                raise StoreError(f"Round {record.match_id}#{record.round_index} already saved.")
            records.append(record)

    def update_round_record(self, record: RoundRecord) -> None:
        with self._lock:
            records = self._rounds.get(record.match_id, [])
            for position, stored in enumerate(records):
                if stored.round_index == record.round_index:
                    records[position] = record
                    return
        raise RecordNotFound(f"Round {record.match_id}#{record.round_index} not found.")

    def replace_match_rounds(self, match_id: str, records: Sequence[RoundRecord]) -> None:
        with self._lock:
            self._rounds[match_id] = list(records)

    # Matches -----------------------------------------------------------

    def load_match_summaries(self, player_id: str) -> List[MatchSummary]:
        with self._lock:
            seated = [
                summary
                for summary in self._matches.values()
                if not summary.is_live and player_id in summary.player_ids
            ]
        return sorted(seated, key=lambda summary: summary.started_at.timestamp())

    def load_match_summary(self, match_id: str) -> MatchSummary:
        with self._lock:
            try:
                return self._matches[match_id]
            except KeyError as exc:
                raise RecordNotFound(f"Match {match_id} not found.") from exc

    def save_match_summary(self, summary: MatchSummary) -> None:
        with self._lock:
            if summary.match_id in self._matches:
                raise StoreError(f"Match {summary.match_id} already saved.")
            self._matches[summary.match_id] = summary

    def update_match_summary(self, summary: MatchSummary) -> None:
        with self._lock:
            if summary.match_id not in self._matches:
                raise RecordNotFound(f"Match {summary.match_id} not found.")
            self._matches[summary.match_id] = summary

    def delete_match(self, match_id: str) -> None:
        with self._lock:
            self._matches.pop(match_id, None)
            self._rounds.pop(match_id, None)

    def _is_live(self, match_id: str) -> bool:
        summary = self._matches.get(match_id)
        return summary is not None and summary.is_live

    # Documents ---------------------------------------------------------

    def to_document(self) -> LedgerDocument:
        with self._lock:
            return LedgerDocument(
                players=[PlayerDocument.from_player(player) for player in self._players.values()],
                matches=[MatchSummaryDocument.from_summary(summary) for summary in self._matches.values()],
                rounds=[
                    RoundRecordDocument.from_record(record)
                    for records in self._rounds.values()
                    for record in records
                ],
            )

    def load_document(self, document: LedgerDocument) -> None:
        with self._lock:
            self._players = {doc.id: doc.to_player() for doc in document.players}
            self._matches = {doc.match_id: doc.to_summary() for doc in document.matches}
            self._rounds = {}
            for doc in document.rounds:
                self._rounds.setdefault(doc.match_id, []).append(doc.to_record())


class JsonFileStore(InMemoryRecordStore):
    """In-memory store mirrored to a single JSON ledger file after every write.

    Each write and its flush run under the store lock, so concurrent
    requests never interleave file replacements.
    """

    def __init__(self, path: Union[Path, str]) -> None:
        super().__init__()
        self.path = Path(path)
        if self.path.exists():
            self.load_document(LedgerDocument.model_validate_json(self.path.read_text(encoding="utf-8")))
            logger.info("loaded ledger %s", self.path)

    def flush(self) -> None:
        """Write the ledger to a private temp file, then rename it into place."""
        with self._lock:
            content = self.to_document().model_dump_json(indent=2)
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.stem}_", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(content)
                Path(tmp_name).replace(self.path)
            except BaseException:
                with contextlib.suppress(OSError):
                    Path(tmp_name).unlink()
                raise

    def add_player(self, name: str) -> Player:
        with self._lock:
            player = super().add_player(name)
            self.flush()
        return player

    def save_round_record(self, record: RoundRecord) -> None:
        with self._lock:
            super().save_round_record(record)
            self.flush()

    def update_round_record(self, record: RoundRecord) -> None:
        with self._lock:
            super().update_round_record(record)
            self.flush()

    def replace_match_rounds(self, match_id: str, records: Sequence[RoundRecord]) -> None:
        with self._lock:
            super().replace_match_rounds(match_id, records)
            self.flush()

    def save_match_summary(self, summary: MatchSummary) -> None:
        with self._lock:
            super().save_match_summary(summary)
            self.flush()

    def update_match_summary(self, summary: MatchSummary) -> None:
        with self._lock:
            super().update_match_summary(summary)
            self.flush()

    def delete_match(self, match_id: str) -> None:
        with self._lock:
            super().delete_match(match_id)
            self.flush()


def _played_order(record: RoundRecord) -> Tuple[float, int]:
    return record.played_at.timestamp(), record.round_index


def find_player(store: RecordStore, key: str) -> Optional[Player]:
    """Look a player up by id, then by exact name."""
    for player in store.players():
        if player.id == key:
            return player
    for player in store.players():
        if player.name == key:
            return player
    return None
