from landlord.models import Bid, Outcome, RoundInput
from landlord.scoring import rescore_round, score_round

from tests.helpers import EPOCH, make_record


def test_score_round_builds_a_record():
    record = score_round(
        RoundInput(bids=(None, 2, 1)),
        first_bidder=2,
        match_id="m9",
        round_index=4,
        player_ids=("a", "b", "c"),
        played_at=EPOCH,
    )

    assert record.landlord == 2
    assert record.landlord_seat == 1
    assert record.bids == (Bid.NONE, Bid.TWO, Bid.ONE)
    assert record.deltas == (-200, 400, -200)
    assert record.first_bidder == 2
    assert record.round_index == 4
    assert record.played_at == EPOCH
    assert record.outcomes == (Outcome.LOSS, Outcome.WIN, Outcome.LOSS)


def test_rescore_keeps_identity_and_first_bidder():
    original = make_record((200, -100, -100), first_bidder=None, round_index=3, match_id="old")

    updated = rescore_round(original, RoundInput(bids=(0, 0, 3), bombs=1, landlord_result=False))

    assert updated.first_bidder is None
    assert updated.match_id == "old"
    assert updated.round_index == 3
    assert updated.played_at == original.played_at
    assert updated.landlord == 3
    assert updated.deltas == (600, 600, -1200)


def test_record_to_input_round_trips_modifiers():
    record = score_round(RoundInput(bids=(3, 0, 0), doubled=(True, False, False), bombs=2, spring=True), first_bidder=0)

    assert record.to_input() == RoundInput(bids=(3, 0, 0), doubled=(True, False, False), bombs=2, spring=True)
