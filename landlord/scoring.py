"""Round scoring: bid resolution followed by the multiplier engine."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

from .bidding import resolve_bids
from .models import RoundInput, RoundRecord, position_for_seat, utcnow
from .multipliers import DEFAULT_MAX_BOMBS, RoundModifiers, apply_multipliers

logger = logging.getLogger(__name__)


def score_round(
    round_input: RoundInput,
    *,
    first_bidder: int,
    match_id: str = "",
    round_index: int = 0,
    player_ids: Sequence[str] = ("", "", ""),
    played_at: Optional[datetime] = None,
    max_bombs: int = DEFAULT_MAX_BOMBS,
) -> RoundRecord:
    """Resolve the bids of ``round_input`` and build the persisted record.

    Raises:
        BiddingError: the bids do not name a single landlord.
        InvalidModifier: bomb count or doubled flags are out of domain.
    """
    resolution = resolve_bids(round_input.bids)
    modifiers = RoundModifiers(
        landlord_seat=resolution.landlord_seat,
        doubled=round_input.doubled,
        bombs=round_input.bombs,
        spring=round_input.spring,
        landlord_result=round_input.landlord_result,
    )
    deltas = apply_multipliers(resolution.base_stake, modifiers, max_bombs=max_bombs)
    logger.debug("round %s#%d scored %s", match_id, round_index, deltas)
    return RoundRecord(
        landlord=position_for_seat(resolution.landlord_seat),
        bids=round_input.bids,
        doubled=round_input.doubled,
        bombs=round_input.bombs,
        spring=round_input.spring,
        landlord_result=round_input.landlord_result,
        deltas=deltas,
        first_bidder=first_bidder,
        match_id=match_id,
        round_index=round_index,
        played_at=played_at or utcnow(),
        player_ids=tuple(player_ids),
    )


def rescore_round(
    record: RoundRecord,
    round_input: RoundInput,
    *,
    max_bombs: int = DEFAULT_MAX_BOMBS,
) -> RoundRecord:
    """Score corrected input for an existing round.

    Identity, timestamp and the stored first bidder carry over from ``record``.
    """
    rescored = score_round(
        round_input,
        first_bidder=record.first_bidder_index,
        match_id=record.match_id,
        round_index=record.round_index,
        player_ids=record.player_ids,
        played_at=record.played_at,
        max_bombs=max_bombs,
    )
    return replace(rescored, first_bidder=record.first_bidder)
