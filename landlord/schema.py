"""Validation schema for persisted ledger documents."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from .models import (
    SEAT_COUNT,
    Bid,
    MatchSummary,
    Player,
    RoundRecord,
    ScoreTriple,
    utcnow,
)


def _require_three(value: list, what: str) -> list:
    if len(value) != SEAT_COUNT:
        raise ValueError(f"{what} must hold exactly {SEAT_COUNT} values, got {len(value)}.")
    return value


class PlayerDocument(BaseModel):
    id: str
    name: str
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Player name must not be empty.")
        return value

    def to_player(self) -> Player:
        return Player(id=self.id, name=self.name, created_at=self.created_at)

    @classmethod
    def from_player(cls, player: Player) -> "PlayerDocument":
        return cls(id=player.id, name=player.name, created_at=player.created_at)


class RoundRecordDocument(BaseModel):
    """Stored form of a RoundRecord.

    ``spring`` and ``first_bidder`` are optional so that records written
    before those fields existed still load.
    """

    model_config = ConfigDict(extra="ignore")

    match_id: str
    round_index: int = Field(0, ge=0)
    played_at: datetime
    player_ids: List[str]
    landlord: int = Field(..., ge=1, le=SEAT_COUNT, description="Landlord position, 1=A, 2=B, 3=C.")
    bids: List[int]
    doubled: List[bool]
    bombs: int = Field(0, ge=0)
    spring: Optional[bool] = None
    landlord_result: bool
    deltas: List[int]
    first_bidder: Optional[int] = Field(None, ge=0, lt=SEAT_COUNT)

    @field_validator("bids")
    @classmethod
    def validate_bids(cls, value: List[int]) -> List[int]:
        _require_three(value, "bids")
        for bid in value:
            if bid not in {int(level) for level in Bid}:
                raise ValueError(f"Bid {bid} is not one of 0, 1, 2 or 3.")
        return value

    @field_validator("player_ids", "doubled", "deltas")
    @classmethod
    def validate_per_seat(cls, value: list, info: ValidationInfo) -> list:
        return _require_three(value, info.field_name)

    def to_record(self) -> RoundRecord:
        return RoundRecord(
            landlord=self.landlord,
            bids=tuple(Bid(bid) for bid in self.bids),
            doubled=tuple(self.doubled),
            bombs=self.bombs,
            spring=self.spring,
            landlord_result=self.landlord_result,
            deltas=tuple(self.deltas),
            first_bidder=self.first_bidder,
            match_id=self.match_id,
            round_index=self.round_index,
            played_at=self.played_at,
            player_ids=tuple(self.player_ids),
        )

    @classmethod
    def from_record(cls, record: RoundRecord) -> "RoundRecordDocument":
        return cls(
            match_id=record.match_id,
            round_index=record.round_index,
            played_at=record.played_at,
            player_ids=list(record.player_ids),
            landlord=record.landlord,
            bids=[int(bid) for bid in record.bids],
            doubled=list(record.doubled),
            bombs=record.bombs,
            spring=record.spring,
            landlord_result=record.landlord_result,
            deltas=list(record.deltas),
            first_bidder=record.first_bidder,
        )


class MatchSummaryDocument(BaseModel):
    model_config = ConfigDict(extra="ignore")

    match_id: str
    player_ids: List[str]
    started_at: datetime
    ended_at: Optional[datetime] = None
    final_scores: List[int]
    total_games: int = Field(0, ge=0)
    max_snapshots: List[int]
    min_snapshots: List[int]
    initial_starter: int = Field(0, ge=0, lt=SEAT_COUNT)

    @field_validator("player_ids", "final_scores", "max_snapshots", "min_snapshots")
    @classmethod
    def validate_per_seat(cls, value: list, info: ValidationInfo) -> list:
        return _require_three(value, info.field_name)

    def to_summary(self) -> MatchSummary:
        return MatchSummary(
            match_id=self.match_id,
            player_ids=tuple(self.player_ids),
            final_scores=ScoreTriple.of(self.final_scores),
            total_games=self.total_games,
            max_snapshots=ScoreTriple.of(self.max_snapshots),
            min_snapshots=ScoreTriple.of(self.min_snapshots),
            initial_starter=self.initial_starter,
            started_at=self.started_at,
            ended_at=self.ended_at,
        )

    @classmethod
    def from_summary(cls, summary: MatchSummary) -> "MatchSummaryDocument":
        return cls(
            match_id=summary.match_id,
            player_ids=list(summary.player_ids),
            started_at=summary.started_at,
            ended_at=summary.ended_at,
            final_scores=list(summary.final_scores),
            total_games=summary.total_games,
            max_snapshots=list(summary.max_snapshots),
            min_snapshots=list(summary.min_snapshots),
            initial_starter=summary.initial_starter,
        )


class LedgerDocument(BaseModel):
    """Everything a JSON ledger file holds."""

    players: List[PlayerDocument] = Field(default_factory=list)
    matches: List[MatchSummaryDocument] = Field(default_factory=list)
    rounds: List[RoundRecordDocument] = Field(default_factory=list)
