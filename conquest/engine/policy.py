"""
Scripted policy for automated seats.

The policy only talks to the engine through the same operations a human
caller uses, so it can never bypass validation.
"""

import logging
import random

from conquest.engine import AI_MAX_ATTACK_ATTEMPTS
from conquest.engine.cards import best_set
from conquest.engine.definitions import MapDefinition
from conquest.engine.game import ActionResult, GameEngine
from conquest.engine.state import ATTACK, FORTIFY, REINFORCE, GameState

logger = logging.getLogger(__name__)


def _attack_pairs(state: GameState, player_id: str, map_def: MapDefinition) -> dict[str, list[str]]:
    """Owned territories with spare troops mapped to their enemy neighbours."""
    pairs: dict[str, list[str]] = {}
    for tid in state.territories_owned_by(player_id):
        if state.territories[tid].troops <= 1:
            continue
        targets = [
            n for n in map_def.neighbors(tid)
            if n in state.territories and state.territories[n].owner != player_id
        ]
        if targets:
            pairs[tid] = targets
    return pairs


class ScriptedPolicy:
    """
    Trade any set, dump the whole pool on a random territory, make a bounded
    number of random attacks, never fortify.
    """

    def __init__(self, rng: random.Random | None = None, max_attack_attempts: int = AI_MAX_ATTACK_ATTEMPTS):
        self.rng = rng
        self.max_attack_attempts = max_attack_attempts

    def _rng(self, engine: GameEngine) -> random.Random:
        return self.rng if self.rng is not None else engine.rng

    def take_turn(self, engine: GameEngine, player_id: str) -> list[ActionResult]:
        """Play player_id's whole turn, phase by phase, until control passes on."""
        results: list[ActionResult] = []
        while engine.winner is None and engine.current_player_id == player_id:
            step = self.take_step(engine, player_id)
            results.extend(step)
            if not any(step):
                # No progress possible (e.g. REINFORCE with an empty pool)
                logger.warning("automated player %s is stuck in %s", player_id, engine.phase)
                break
        return results

    def take_step(self, engine: GameEngine, player_id: str) -> list[ActionResult]:
        """Play only the current phase of player_id's turn."""
        if engine.winner is not None or engine.current_player_id != player_id:
            return []

        phase = engine.phase
        if phase == REINFORCE:
            return self._reinforce(engine, player_id)
        if phase == ATTACK:
            return self._attack(engine, player_id)
        if phase == FORTIFY:
            logger.info("%s skips fortify", player_id)
            return [engine.skip_fortify(player_id)]
        return []

    def _reinforce(self, engine: GameEngine, player_id: str) -> list[ActionResult]:
        results: list[ActionResult] = []

        while True:
            state = engine.state
            owned = set(state.territories_owned_by(player_id))
            combo = best_set(state.players[player_id].cards, owned)
            if combo is None:
                break
            result = engine.trade_cards(player_id, [c.id for c in combo])
            results.append(result)
            if not result:
                break
            logger.info("%s traded %s", player_id, [c.id for c in combo])

        state = engine.state
        owned = state.territories_owned_by(player_id)
        if owned and state.unplaced_troops > 0:
            territory_id = self._rng(engine).choice(owned)
            amount = state.unplaced_troops
            logger.info("%s places %d troops on %s", player_id, amount, territory_id)
            results.append(engine.reinforce(player_id, territory_id, amount))
        return results

    def _attack(self, engine: GameEngine, player_id: str) -> list[ActionResult]:
        results: list[ActionResult] = []
        rng = self._rng(engine)

        for _ in range(self.max_attack_attempts):
            if engine.winner is not None:
                return results
            pairs = _attack_pairs(engine.state, player_id, engine.map_def)
            if not pairs:
                break
            from_id = rng.choice(sorted(pairs))
            to_id = rng.choice(pairs[from_id])
            result = engine.attack(player_id, from_id, to_id)
            results.append(result)
            logger.info(
                "%s attacks %s -> %s: %s vs %s%s",
                player_id, from_id, to_id, result.attacker_die, result.defender_die,
                " (conquered)" if result.conquered else "",
            )

        if engine.winner is None:
            results.append(engine.end_attack_phase(player_id))
        return results
