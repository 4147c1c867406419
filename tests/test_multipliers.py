import pytest

from landlord.bidding import BiddingError
from landlord.multipliers import InvalidModifier, RoundModifiers, apply_multipliers, round_stake


def test_all_multipliers_stack():
    modifiers = RoundModifiers(
        landlord_seat=0,
        doubled=(True, False, True),
        bombs=1,
        spring=True,
        landlord_result=True,
    )

    assert round_stake(100, modifiers) == 800
    assert apply_multipliers(100, modifiers) == (2400, -800, -1600)


def test_landlord_loss_flips_signs():
    modifiers = RoundModifiers(
        landlord_seat=0,
        doubled=(True, False, True),
        bombs=1,
        spring=True,
        landlord_result=False,
    )

    assert apply_multipliers(100, modifiers) == (-2400, 800, 1600)


def test_plain_round_pays_base_stake():
    modifiers = RoundModifiers(landlord_seat=1, doubled=(False, False, False))

    assert apply_multipliers(200, modifiers) == (-200, 400, -200)


def test_each_bomb_doubles_the_stake():
    modifiers = RoundModifiers(landlord_seat=2, doubled=(False, False, False), bombs=3, landlord_result=False)

    assert apply_multipliers(100, modifiers) == (800, 800, -1600)


def test_farmer_double_only_affects_that_farmer():
    modifiers = RoundModifiers(landlord_seat=1, doubled=(True, False, False))

    assert apply_multipliers(300, modifiers) == (-600, 900, -300)


@pytest.mark.parametrize("bombs", [0, 2, 5])
@pytest.mark.parametrize("landlord_result", [True, False])
def test_deltas_sum_to_zero(bombs, landlord_result):
    modifiers = RoundModifiers(
        landlord_seat=2,
        doubled=(True, True, False),
        bombs=bombs,
        spring=True,
        landlord_result=landlord_result,
    )

    assert sum(apply_multipliers(200, modifiers)) == 0


def test_negative_bombs_are_a_contract_violation():
    modifiers = RoundModifiers(landlord_seat=0, doubled=(False, False, False), bombs=-1)

    with pytest.raises(InvalidModifier) as excinfo:
        apply_multipliers(100, modifiers)

    assert not isinstance(excinfo.value, BiddingError)


def test_bombs_above_cap_are_rejected():
    modifiers = RoundModifiers(landlord_seat=0, doubled=(False, False, False), bombs=11)

    with pytest.raises(InvalidModifier):
        apply_multipliers(100, modifiers)

    assert apply_multipliers(100, modifiers, max_bombs=12) == (2 * 100 * 2 ** 11, -100 * 2 ** 11, -100 * 2 ** 11)


def test_bad_modifier_shapes_are_rejected():
    with pytest.raises(InvalidModifier):
        apply_multipliers(100, RoundModifiers(landlord_seat=3, doubled=(False, False, False)))
    with pytest.raises(InvalidModifier):
        apply_multipliers(100, RoundModifiers(landlord_seat=0, doubled=(False, False)))
    with pytest.raises(InvalidModifier):
        apply_multipliers(100, RoundModifiers(landlord_seat=0, doubled=(False, False, False), bombs=True))
