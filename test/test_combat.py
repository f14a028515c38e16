"""
Attack exchanges: one die each, ties to the defender, conquest moves one troop in.
"""

import random

from hypothesis import given
from hypothesis import strategies as st

from conftest import ScriptedDice, build_state, engine_for
from conquest.engine.combat import resolve_exchange, roll_exchange
from conquest.engine.queries import FailureReason
from conquest.engine.state import ATTACK, TerritoryState


def attack_board(source_troops=6, target_troops=1):
    return build_state(
        {
            "a": ("A", 3),
            "b": ("A", source_troops),
            "c": ("B", target_troops),
            "d": ("B", 3),
            "e": ("B", 3),
            "f": ("A", 3),
        },
        ["A", "B"],
        phase=ATTACK,
    )


class TestAttackScenarios:
    def test_six_against_one_conquers(self):
        engine = engine_for(attack_board(source_troops=6, target_troops=1), rng=ScriptedDice([6, 1]))

        result = engine.attack("A", "b", "c")

        assert result.success
        assert result.conquered
        assert (result.attacker_die, result.defender_die) == (6, 1)
        state = engine.state
        assert state.territories["c"].owner == "A"
        assert state.territories["c"].troops == 1
        assert state.territories["b"].troops == 5
        assert state.conquered_this_turn

    def test_two_against_five_loses(self):
        engine = engine_for(attack_board(source_troops=6, target_troops=3), rng=ScriptedDice([2, 5]))

        result = engine.attack("A", "b", "c")

        assert result.success
        assert not result.conquered
        state = engine.state
        assert state.territories["b"].troops == 5
        assert state.territories["c"].troops == 3
        assert state.territories["c"].owner == "B"
        assert not state.conquered_this_turn

    def test_tie_goes_to_defender(self):
        engine = engine_for(attack_board(source_troops=4, target_troops=2), rng=ScriptedDice([4, 4]))
        engine.attack("A", "b", "c")
        state = engine.state
        assert state.territories["b"].troops == 3
        assert state.territories["c"].troops == 2

    def test_win_without_conquest(self):
        engine = engine_for(attack_board(source_troops=4, target_troops=2), rng=ScriptedDice([5, 2]))
        result = engine.attack("A", "b", "c")
        assert not result.conquered
        state = engine.state
        assert state.territories["b"].troops == 4
        assert state.territories["c"].troops == 1

    def test_attack_result_carries_dice(self):
        engine = engine_for(attack_board(), rng=ScriptedDice([3, 2]))
        payload = engine.attack("A", "b", "c").to_dict()
        assert payload["dice_results"] == {"attacker": [3], "defender": [2]}


class TestAttackValidation:
    def test_single_troop_source_rejected(self):
        engine = engine_for(attack_board(source_troops=1))
        result = engine.attack("A", "b", "c")
        assert not result
        assert result.reason == FailureReason.INSUFFICIENT_TROOPS

    def test_not_adjacent(self):
        engine = engine_for(attack_board())
        result = engine.attack("A", "b", "d")
        assert result.reason == FailureReason.NOT_ADJACENT

    def test_own_territory(self):
        engine = engine_for(attack_board())
        assert engine.attack("A", "b", "a").reason == FailureReason.OWN_TERRITORY

    def test_source_not_owned(self):
        engine = engine_for(attack_board())
        assert engine.attack("A", "c", "b").reason == FailureReason.NOT_OWNER

    def test_unknown_territory(self):
        engine = engine_for(attack_board())
        assert engine.attack("A", "b", "zz").reason == FailureReason.UNKNOWN_TERRITORY

    def test_malformed_territory_ids(self):
        engine = engine_for(attack_board())
        assert engine.attack("A", ["b"], "c").reason == FailureReason.UNKNOWN_TERRITORY
        assert engine.attack("A", "b", None).reason == FailureReason.UNKNOWN_TERRITORY

    def test_rejected_attack_does_not_roll(self):
        rng = ScriptedDice([6, 1])
        engine = engine_for(attack_board(), rng=rng)
        engine.attack("A", "b", "d")
        assert rng.rolls == [6, 1]

    def test_rejected_attack_leaves_state_alone(self):
        engine = engine_for(attack_board())
        before = engine.state.to_dict()
        engine.attack("B", "c", "b")
        assert engine.state.to_dict() == before


@given(
    source_troops=st.integers(min_value=2, max_value=50),
    target_troops=st.integers(min_value=1, max_value=50),
    attacker_die=st.integers(min_value=1, max_value=6),
    defender_die=st.integers(min_value=1, max_value=6),
)
def test_exactly_one_side_loses_one_troop(source_troops, target_troops, attacker_die, defender_die):
    source = TerritoryState("A", source_troops)
    target = TerritoryState("B", target_troops)

    result = resolve_exchange(source, target, "A", {"attacker": attacker_die, "defender": defender_die})

    if result.conquered:
        assert target_troops == 1
        assert target.owner == "A"
        assert target.troops == 1
        assert source.troops == source_troops - 1
    else:
        source_loss = source_troops - source.troops
        target_loss = target_troops - target.troops
        assert sorted([source_loss, target_loss]) == [0, 1]
        assert target.owner == "B"
    assert source.troops >= 1
    assert target.troops >= 1
    assert result.attacker_won == (attacker_die > defender_die)


@given(seed=st.integers(min_value=0, max_value=2**32 - 1))
def test_dice_stay_in_range(seed):
    rolls = roll_exchange(random.Random(seed))
    assert 1 <= rolls["attacker"] <= 6
    assert 1 <= rolls["defender"] <= 6
