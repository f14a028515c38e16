"""
GameEngine: the authoritative operation surface for one match.

Each engine owns its own state, territory graph and random source; there are
no module-level globals, so concurrent matches are independent instances.
Operations are serialized with a lock and are atomic: the reducer works on a
copy that replaces the current state only when the action is legal.
Illegal requests never raise; they return a failed result with a FailureReason.
"""

import logging
import random
import threading
from dataclasses import dataclass, field
from typing import Any

from conquest.config import CONTINENT_BONUSES_ENABLED
from conquest.engine import actions
from conquest.engine.actions import Action
from conquest.engine.combat import roll_exchange
from conquest.engine.definitions import MapDefinition, load_map
from conquest.engine.events import PLAYER_ELIMINATED, TERRITORY_CAPTURED, VICTORY, GameEvent
from conquest.engine.queries import (
    FailureReason,
    get_attack_sources,
    get_available_action_types,
    get_player_stats,
    get_tradeable_sets,
    validate_action,
)
from conquest.engine.reducer import apply_action
from conquest.engine.state import GameState
from conquest.engine.utils import initialize_game_state

logger = logging.getLogger(__name__)


@dataclass
class ActionResult:
    """Outcome of one engine operation. Truthy when the action was applied."""
    success: bool
    reason: FailureReason | None = None
    message: str | None = None
    events: list[GameEvent] = field(default_factory=list)

    def __bool__(self) -> bool:
        return self.success

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "reason": self.reason.value if self.reason else None,
            "message": self.message,
            "events": [e.to_dict() for e in self.events],
        }


@dataclass
class AttackResult(ActionResult):
    """ActionResult plus the dice of the exchange."""
    attacker_die: int | None = None
    defender_die: int | None = None
    conquered: bool = False

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["conquered"] = self.conquered
        if self.success:
            out["dice_results"] = {
                "attacker": [self.attacker_die],
                "defender": [self.defender_die],
            }
        return out


class GameEngine:
    """One match: state, territory graph, random source and the six player operations."""

    def __init__(
        self,
        player_ids: list[str],
        map_def: MapDefinition | None = None,
        rng: random.Random | None = None,
        *,
        names: dict[str, str] | None = None,
        ai_player_ids: set[str] | None = None,
        shuffle_territories: bool = False,
        continent_bonuses: bool | None = None,
        state: GameState | None = None,
    ) -> None:
        self.map_def = map_def if map_def is not None else load_map()
        self.rng = rng if rng is not None else random.Random()
        self.continent_bonuses = (
            CONTINENT_BONUSES_ENABLED if continent_bonuses is None else continent_bonuses
        )
        self._lock = threading.Lock()
        if state is not None:
            self._state = state.copy()
        else:
            self._state = initialize_game_state(
                player_ids,
                self.map_def,
                rng=self.rng,
                names=names,
                ai_player_ids=ai_player_ids,
                shuffle_territories=shuffle_territories,
                continent_bonuses=self.continent_bonuses,
            )
        # Incremented on every applied action; lets observers drop stale snapshots
        self.version = 0
        logger.info(
            "match created on map %s with players %s",
            self.map_def.id,
            ", ".join(self._state.player_order),
        )

    # ===== Read-only views =====

    @property
    def state(self) -> GameState:
        """Deep copy of the current state; mutating it has no effect on the match."""
        with self._lock:
            return self._state.copy()

    @property
    def current_player_id(self) -> str:
        with self._lock:
            return self._state.current_player_id

    @property
    def phase(self) -> str:
        with self._lock:
            return self._state.phase

    @property
    def winner(self) -> str | None:
        with self._lock:
            return self._state.winner

    def is_automated(self, player_id: str) -> bool:
        with self._lock:
            player = self._state.players.get(player_id)
            return bool(player and player.is_ai)

    def is_alive(self, player_id: str) -> bool:
        with self._lock:
            player = self._state.players.get(player_id)
            return bool(player and player.is_alive)

    def snapshot(self, viewer_id: str | None = None) -> dict[str, Any]:
        """Public state for broadcasting; only viewer_id's hand is revealed."""
        with self._lock:
            out = self._state.to_public_dict(viewer_id)
            out["version"] = self.version
            out["map_id"] = self.map_def.id
            out["player_stats"] = get_player_stats(self._state)
            return out

    def available_actions(self, player_id: str) -> dict[str, Any]:
        with self._lock:
            state = self._state
            return {
                "player": player_id,
                "phase": state.phase,
                "action_types": get_available_action_types(state, player_id),
                "unplaced_troops": state.unplaced_troops if player_id == state.current_player_id else 0,
                "attack_sources": get_attack_sources(state, player_id, self.map_def),
                "tradeable_sets": get_tradeable_sets(state, player_id),
            }

    # ===== Operations =====

    def reinforce(self, player_id: str, territory_id: str, amount: int) -> ActionResult:
        return self.submit(actions.reinforce(player_id, territory_id, amount))

    def trade_cards(self, player_id: str, card_ids: list[str]) -> ActionResult:
        return self.submit(actions.trade_cards(player_id, card_ids))

    def attack(self, player_id: str, from_id: str, to_id: str) -> AttackResult:
        """
        One attack exchange. Dice are only rolled once the move itself is legal,
        so rejected attacks do not consume randomness.
        """
        with self._lock:
            candidate = actions.attack(player_id, from_id, to_id, {"attacker": 1, "defender": 1})
            validation = validate_action(self._state, candidate, self.map_def)
            if not validation.valid:
                logger.debug("rejected attack by %s: %s", player_id, validation.error)
                return AttackResult(False, validation.reason, validation.error)

            dice_rolls = roll_exchange(self.rng)
            result = self._apply_locked(actions.attack(player_id, from_id, to_id, dice_rolls))
            return AttackResult(
                success=result.success,
                reason=result.reason,
                message=result.message,
                events=result.events,
                attacker_die=dice_rolls["attacker"],
                defender_die=dice_rolls["defender"],
                conquered=any(e.type == TERRITORY_CAPTURED for e in result.events),
            )

    def end_attack_phase(self, player_id: str) -> ActionResult:
        return self.submit(actions.end_attack_phase(player_id))

    def fortify(self, player_id: str, from_id: str, to_id: str, amount: int) -> ActionResult:
        return self.submit(actions.fortify(player_id, from_id, to_id, amount))

    def skip_fortify(self, player_id: str) -> ActionResult:
        return self.submit(actions.skip_fortify(player_id))

    def submit(self, action: Action) -> ActionResult:
        """Validate and apply any prepared action."""
        with self._lock:
            return self._apply_locked(action)

    def _apply_locked(self, action: Action) -> ActionResult:
        validation = validate_action(self._state, action, self.map_def)
        if not validation.valid:
            logger.debug("rejected %s by %s: %s", action.type, action.player, validation.error)
            return ActionResult(False, validation.reason, validation.error)

        new_state, events = apply_action(
            self._state, action, self.map_def, self.rng, self.continent_bonuses
        )
        self._state = new_state
        self.version += 1

        logger.info("%s applied %s %s", action.player, action.type, action.payload)
        for event in events:
            if event.type in (TERRITORY_CAPTURED, PLAYER_ELIMINATED, VICTORY):
                logger.info("%s: %s", event.type, event.payload)
        return ActionResult(True, events=events)
