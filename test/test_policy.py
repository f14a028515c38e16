"""
Scripted automated player and the step scheduler that drives it.
"""

import random

from conftest import ScriptedDice, build_state, card, engine_for
from conquest.engine.game import GameEngine
from conquest.engine.policy import ScriptedPolicy
from conquest.engine.scheduler import TurnScheduler
from conquest.engine.state import ATTACK, FORTIFY, REINFORCE
from conquest.engine.utils import generate_ai_id, is_ai_id


class TestScriptedPolicy:
    def test_places_whole_pool_on_one_territory(self):
        state = build_state(
            {"a": ("AI_0", 3), "b": ("B", 3), "c": ("AI_0", 3), "d": ("B", 3), "e": ("AI_0", 3), "f": ("B", 3)},
            ["AI_0", "B"],
            unplaced=3,
            ai=("AI_0",),
        )
        engine = engine_for(state)

        ScriptedPolicy().take_step(engine, "AI_0")

        after = engine.state
        assert after.phase == ATTACK
        assert after.unplaced_troops == 0
        assert sorted(ts.troops for tid, ts in after.territories.items() if ts.owner == "AI_0") == [3, 3, 6]

    def test_trades_before_placing(self):
        hand = [card("i1", "INFANTRY"), card("i2", "INFANTRY"), card("i3", "INFANTRY")]
        state = build_state(
            {"a": ("AI_0", 3), "b": ("B", 3), "c": ("AI_0", 3), "d": ("B", 3), "e": ("AI_0", 3), "f": ("B", 3)},
            ["AI_0", "B"],
            unplaced=3,
            hands={"AI_0": hand},
            ai=("AI_0",),
        )
        engine = engine_for(state)

        ScriptedPolicy().take_step(engine, "AI_0")

        after = engine.state
        assert after.players["AI_0"].cards == []
        assert after.trade_count == 1
        assert sum(ts.troops for ts in after.territories.values() if ts.owner == "AI_0") == 9 + 8

    def test_no_targets_ends_attack_immediately(self):
        # Every AI territory has a single troop, so no attack is legal
        state = build_state(
            {"a": ("AI_0", 1), "b": ("AI_0", 1), "c": ("B", 3), "d": ("B", 3), "e": ("B", 3), "f": ("B", 3)},
            ["AI_0", "B"],
            phase=ATTACK,
            ai=("AI_0",),
        )
        rng = ScriptedDice([6, 1])
        engine = engine_for(state, rng=rng)

        results = ScriptedPolicy().take_step(engine, "AI_0")

        assert len(results) == 1
        assert results[0]
        assert engine.phase == FORTIFY
        assert rng.rolls == [6, 1]

    def test_attack_attempts_are_bounded(self):
        state = build_state(
            {"a": ("AI_0", 3), "b": ("AI_0", 40), "c": ("B", 40), "d": ("B", 3), "e": ("B", 3), "f": ("B", 3)},
            ["AI_0", "B"],
            phase=ATTACK,
            ai=("AI_0",),
        )
        engine = engine_for(state, rng=ScriptedDice([1, 6] * 20))

        results = ScriptedPolicy(max_attack_attempts=10).take_step(engine, "AI_0")

        attacks = [r for r in results if hasattr(r, "attacker_die")]
        assert len(attacks) == 10
        assert engine.phase == FORTIFY
        assert engine.state.territories["b"].troops == 30

    def test_skips_fortify(self):
        state = build_state(
            {"a": ("AI_0", 5), "b": ("AI_0", 1), "c": ("B", 3), "d": ("B", 3), "e": ("B", 3), "f": ("B", 3)},
            ["AI_0", "B"],
            phase=FORTIFY,
            ai=("AI_0",),
        )
        engine = engine_for(state)
        ScriptedPolicy().take_step(engine, "AI_0")
        assert engine.current_player_id == "B"
        assert engine.state.territories["a"].troops == 5

    def test_take_turn_hands_over(self):
        # Defenders are too deep to fall within ten exchanges
        state = build_state(
            {"a": ("AI_0", 3), "b": ("AI_0", 3), "c": ("AI_0", 3), "d": ("B", 40), "e": ("B", 40), "f": ("B", 40)},
            ["AI_0", "B"],
            unplaced=3,
            ai=("AI_0",),
        )
        engine = engine_for(state, rng=ScriptedDice([6, 1] * 20))

        ScriptedPolicy().take_turn(engine, "AI_0")

        assert engine.winner is None
        assert engine.current_player_id == "B"
        assert engine.phase == REINFORCE

    def test_does_nothing_out_of_turn(self):
        engine = GameEngine(["B", "AI_0"], rng=random.Random(3), ai_player_ids={"AI_0"})
        assert ScriptedPolicy().take_step(engine, "AI_0") == []


class TestScheduler:
    def test_only_automated_players_are_scheduled(self):
        engine = GameEngine(["H", "AI_1"], rng=random.Random(1), ai_player_ids={"AI_1"})
        scheduler = TurnScheduler(engine)
        assert not scheduler.schedule()
        assert not scheduler.pending

    def test_at_most_one_pending_step(self):
        engine = GameEngine(["AI_1", "H"], rng=random.Random(1), ai_player_ids={"AI_1"})
        scheduler = TurnScheduler(engine)
        assert scheduler.schedule()
        assert not scheduler.schedule()

    def test_runs_until_human(self):
        engine = GameEngine(["AI_1", "AI_2", "H"], rng=random.Random(5), ai_player_ids={"AI_1", "AI_2"})
        scheduler = TurnScheduler(engine)

        scheduler.run_until_human()

        assert engine.winner is not None or engine.current_player_id == "H"
        assert not scheduler.pending

    def test_stale_step_is_dropped(self):
        engine = GameEngine(["AI_1", "H"], rng=random.Random(1), ai_player_ids={"AI_1"})
        scheduler = TurnScheduler(engine)
        scheduler.schedule()
        ScriptedPolicy().take_turn(engine, "AI_1")

        assert scheduler.run_next() == []
        assert scheduler.steps_run == 0

    def test_all_bot_match_ends_in_victory(self):
        # Hub "h" borders every enemy territory and the attacker wins every roll
        state = build_state(
            {"h": ("AI_1", 20), "x": ("AI_2", 1), "y": ("AI_2", 1), "z": ("AI_2", 1)},
            ["AI_1", "AI_2"],
            unplaced=3,
            ai=("AI_1", "AI_2"),
        )
        star = {"h": ["x", "y", "z"], "x": ["h"], "y": ["h"], "z": ["h"]}
        engine = engine_for(state, adjacency=star, rng=ScriptedDice([6, 1] * 10))
        scheduler = TurnScheduler(engine)

        scheduler.run_until_human()

        assert engine.winner == "AI_1"
        assert not engine.is_alive("AI_2")
        assert scheduler.steps_run == 2
        assert not scheduler.pending

    def test_all_bot_match_keeps_invariants(self):
        engine = GameEngine(
            ["AI_1", "AI_2"],
            rng=random.Random(11),
            ai_player_ids={"AI_1", "AI_2"},
        )
        scheduler = TurnScheduler(engine, max_steps=300)

        scheduler.run_until_human()

        assert scheduler.steps_run > 0
        state = engine.state
        for ts in state.territories.values():
            assert ts.troops >= 1
        cards = len(state.deck) + sum(len(p.cards) for p in state.players.values())
        assert cards == len(state.territories) + 2

    def test_step_cap(self):
        # The defender wins every roll, so nobody can be eliminated
        engine = GameEngine(
            ["AI_1", "AI_2"],
            rng=ScriptedDice([1, 6] * 200),
            ai_player_ids={"AI_1", "AI_2"},
        )
        scheduler = TurnScheduler(engine, max_steps=4)

        scheduler.run_until_human()

        assert scheduler.steps_run == 4
        assert scheduler.exhausted
        assert engine.winner is None
        assert not scheduler.pending


def test_generated_ai_ids():
    rng = random.Random(0)
    player_id = generate_ai_id(2, rng)
    assert player_id.startswith("AI_2_")
    assert is_ai_id(player_id)
    assert not is_ai_id("player_1")
