"""REST service for recording Fight the Landlord matches and reading statistics."""

from __future__ import annotations

from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from landlord.bidding import normalize_bids
from landlord.logging import configure_logging
from landlord.match import MatchError
from landlord.models import SEAT_COUNT, RoundInput
from landlord.schema import MatchSummaryDocument, PlayerDocument, RoundRecordDocument
from landlord.scoring import score_round
from landlord.service import LedgerService, MatchView
from landlord.settings import LedgerSettings, get_settings
from landlord.statistics import MatchReport
from landlord.store import JsonFileStore, RecordNotFound, StoreError


class PlayerRequest(BaseModel):
    name: str


class StartMatchRequest(BaseModel):
    player_ids: List[str] = Field(..., min_length=SEAT_COUNT, max_length=SEAT_COUNT)
    initial_starter: int = Field(0, ge=0, lt=SEAT_COUNT)


class RoundPayload(BaseModel):
    bids: List[Optional[int]]
    doubled: List[bool] = Field(default_factory=lambda: [False] * SEAT_COUNT, min_length=SEAT_COUNT, max_length=SEAT_COUNT)
    bombs: int = Field(0, ge=0)
    spring: bool = False
    landlord_result: bool = True

    def to_input(self) -> RoundInput:
        return RoundInput(
            bids=normalize_bids(self.bids),
            doubled=tuple(self.doubled),
            bombs=self.bombs,
            spring=self.spring,
            landlord_result=self.landlord_result,
        )


class PreviewRequest(RoundPayload):
    first_bidder: int = Field(0, ge=0, lt=SEAT_COUNT)


class NextBidderRequest(BaseModel):
    seat: int = Field(..., ge=0, lt=SEAT_COUNT)


def serialize_view(view: MatchView) -> Dict[str, object]:
    return {
        "match_id": view.match_id,
        "player_ids": view.player_ids,
        "rounds": [RoundRecordDocument.from_record(record).model_dump(mode="json") for record in view.rounds],
        "scores": [list(triple) for triple in view.scores],
        "totals": list(view.totals),
        "next_bidder": view.next_bidder,
        "finished": view.finished,
    }


def serialize_report(report: MatchReport) -> Dict[str, object]:
    return {
        "summary": MatchSummaryDocument.from_summary(report.summary).model_dump(mode="json"),
        "spring_rounds": report.spring_rounds,
        "players": {player_id: stats.as_dict() for player_id, stats in report.players.items()},
    }


def error_response(status_code: int):
    def handler(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=status_code, content={"detail": str(exc)})

    return handler


def create_app(service: Optional[LedgerService] = None, settings: Optional[LedgerSettings] = None) -> FastAPI:
    settings = settings or get_settings()
    if service is None:
        service = LedgerService(JsonFileStore(settings.data_file), max_bombs=settings.max_bombs)

    app = FastAPI(title="Landlord Ledger Service")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    # Bid errors and duplicate names are ValueErrors; their messages go to the client as-is.
    app.add_exception_handler(ValueError, error_response(400))
    app.add_exception_handler(RecordNotFound, error_response(404))
    app.add_exception_handler(StoreError, error_response(409))
    app.add_exception_handler(MatchError, error_response(409))
    app.state.service = service
    app.state.settings = settings

    def round_input(payload: RoundPayload) -> RoundInput:
        if payload.bombs > settings.max_bombs:
            raise HTTPException(status_code=422, detail=f"At most {settings.max_bombs} bombs per round.")
        return payload.to_input()

    # Players -------------------------------------------------------------

    @app.post("/players")
    def add_player(request: PlayerRequest) -> Dict[str, object]:
        player = service.add_player(request.name)
        return PlayerDocument.from_player(player).model_dump(mode="json")

    @app.get("/players")
    def list_players() -> List[Dict[str, object]]:
        return [PlayerDocument.from_player(player).model_dump(mode="json") for player in service.players()]

    @app.get("/players/{player_id}/statistics")
    def player_statistics(player_id: str) -> Dict[str, object]:
        return service.player_statistics(player_id).as_dict()

    # Matches -------------------------------------------------------------

    @app.post("/matches")
    def start_match(request: StartMatchRequest) -> Dict[str, object]:
        return serialize_view(service.start_match(request.player_ids, request.initial_starter))

    @app.get("/matches/{match_id}")
    def get_match(match_id: str) -> Dict[str, object]:
        return serialize_view(service.match_view(match_id))

    @app.post("/matches/{match_id}/rounds")
    def record_round(match_id: str, payload: RoundPayload) -> Dict[str, object]:
        service.record_round(match_id, round_input(payload))
        return serialize_view(service.match_view(match_id))

    @app.put("/matches/{match_id}/rounds/{index}")
    def edit_round(match_id: str, index: int, payload: RoundPayload) -> Dict[str, object]:
        service.edit_round(match_id, index, round_input(payload))
        return serialize_view(service.match_view(match_id))

    @app.delete("/matches/{match_id}/rounds/{index}")
    def delete_round(match_id: str, index: int) -> Dict[str, object]:
        removed = service.delete_round(match_id, index)
        return {"removed": RoundRecordDocument.from_record(removed).model_dump(mode="json")}

    @app.post("/matches/{match_id}/next-bidder")
    def set_next_bidder(match_id: str, request: NextBidderRequest) -> Dict[str, object]:
        return serialize_view(service.set_next_bidder(match_id, request.seat))

    @app.post("/matches/{match_id}/finish")
    def finish_match(match_id: str) -> Dict[str, object]:
        summary = service.finish_match(match_id)
        if summary is None:
            return {"discarded": True, "summary": None}
        return {"discarded": False, "summary": MatchSummaryDocument.from_summary(summary).model_dump(mode="json")}

    @app.get("/matches/{match_id}/report")
    def get_report(match_id: str) -> Dict[str, object]:
        return serialize_report(service.match_report(match_id))

    # Scoring -------------------------------------------------------------

    @app.post("/rounds/preview")
    def preview_round(request: PreviewRequest) -> Dict[str, object]:
        record = score_round(round_input(request), first_bidder=request.first_bidder, max_bombs=settings.max_bombs)
        return {
            "landlord_seat": record.landlord_seat,
            "deltas": list(record.deltas),
        }

    return app


_settings = get_settings()
configure_logging(_settings)
app = create_app(settings=_settings)
