"""Record and summary builders shared by the test modules."""

from datetime import datetime, timedelta, timezone

from landlord.models import Bid, MatchSummary, RoundRecord, ScoreTriple

PLAYERS = ("p1", "p2", "p3")
EPOCH = datetime(2024, 1, 1, tzinfo=timezone.utc)


def make_record(
    deltas,
    *,
    landlord=1,
    bids=(Bid.ONE, Bid.NONE, Bid.NONE),
    doubled=(False, False, False),
    spring=False,
    landlord_result=True,
    first_bidder=0,
    match_id="m1",
    round_index=0,
    player_ids=PLAYERS,
    minutes=None,
):
    offset = round_index if minutes is None else minutes
    return RoundRecord(
        landlord=landlord,
        bids=bids,
        doubled=doubled,
        bombs=0,
        spring=spring,
        landlord_result=landlord_result,
        deltas=deltas,
        first_bidder=first_bidder,
        match_id=match_id,
        round_index=round_index,
        played_at=EPOCH + timedelta(minutes=offset),
        player_ids=player_ids,
    )


def make_summary(final, *, match_id="m1", highs=None, lows=None, player_ids=PLAYERS, hours=0, total_games=1):
    return MatchSummary(
        match_id=match_id,
        player_ids=player_ids,
        final_scores=ScoreTriple.of(final),
        total_games=total_games,
        max_snapshots=ScoreTriple.of(highs or [max(value, 0) for value in final]),
        min_snapshots=ScoreTriple.of(lows or [min(value, 0) for value in final]),
        initial_starter=0,
        started_at=EPOCH + timedelta(hours=hours),
        ended_at=EPOCH + timedelta(hours=hours, minutes=30),
    )
