import pytest
from pydantic import ValidationError

from landlord.models import Bid
from landlord.schema import LedgerDocument, MatchSummaryDocument, PlayerDocument, RoundRecordDocument

from tests.helpers import make_record, make_summary


def legacy_round():
    return {
        "match_id": "m1",
        "round_index": 0,
        "played_at": "2024-01-01T00:00:00Z",
        "player_ids": ["a", "b", "c"],
        "landlord": 1,
        "bids": [1, 0, 0],
        "doubled": [False, False, False],
        "landlord_result": True,
        "deltas": [200, -100, -100],
        "device": "tablet",
    }


def test_legacy_round_without_spring_or_first_bidder_loads():
    record = RoundRecordDocument.model_validate(legacy_round()).to_record()

    assert record.spring is None
    assert record.is_spring is False
    assert record.first_bidder is None
    assert record.first_bidder_index == 0
    assert record.bids == (Bid.ONE, Bid.NONE, Bid.NONE)


@pytest.mark.parametrize(
    "field, value",
    [
        ("landlord", 0),
        ("landlord", 4),
        ("bids", [1, 0]),
        ("bids", [5, 0, 0]),
        ("deltas", [200, -200]),
        ("doubled", [True]),
        ("player_ids", ["a", "b"]),
        ("first_bidder", 3),
    ],
)
def test_malformed_rounds_are_rejected(field, value):
    payload = legacy_round()
    payload[field] = value

    with pytest.raises(ValidationError):
        RoundRecordDocument.model_validate(payload)


def test_round_document_preserves_record():
    record = make_record((200, -100, -100), doubled=(True, False, False), spring=True, first_bidder=2)

    assert RoundRecordDocument.from_record(record).to_record() == record


def test_summary_document_preserves_summary():
    summary = make_summary((300, -100, -200), highs=(400, 50, 0))

    assert MatchSummaryDocument.from_summary(summary).to_summary() == summary


def test_player_name_is_stripped_and_required():
    assert PlayerDocument(id="1", name="  Lin ").name == "Lin"
    with pytest.raises(ValidationError):
        PlayerDocument(id="1", name="   ")


def test_empty_ledger_document():
    document = LedgerDocument.model_validate_json("{}")

    assert document.players == []
    assert document.matches == []
    assert document.rounds == []
