"""
Query functions for UI and automated-player integration.
These functions answer what is legal right now without mutating game state.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from conquest.engine import DICE_SIDES
from conquest.engine import actions as act
from conquest.engine.actions import Action
from conquest.engine.cards import find_valid_sets, is_valid_set
from conquest.engine.definitions import MapDefinition
from conquest.engine.movement import get_connected_territories
from conquest.engine.state import ATTACK, FORTIFY, REINFORCE, GameState, TerritoryState


# Phase rules: which action types are allowed in which phases
PHASE_ALLOWED_ACTIONS = {
    REINFORCE: [act.REINFORCE, act.TRADE_CARDS],
    ATTACK: [act.ATTACK, act.END_ATTACK_PHASE],
    FORTIFY: [act.FORTIFY, act.SKIP_FORTIFY],
}

KNOWN_ACTIONS = {t for types in PHASE_ALLOWED_ACTIONS.values() for t in types}


class FailureReason(str, Enum):
    """Why an action was rejected. Rejected actions never change state."""
    GAME_OVER = "GAME_OVER"
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    WRONG_PHASE = "WRONG_PHASE"
    UNKNOWN_ACTION = "UNKNOWN_ACTION"
    UNKNOWN_TERRITORY = "UNKNOWN_TERRITORY"
    NOT_OWNER = "NOT_OWNER"
    OWN_TERRITORY = "OWN_TERRITORY"
    NOT_ADJACENT = "NOT_ADJACENT"
    NOT_CONNECTED = "NOT_CONNECTED"
    INSUFFICIENT_TROOPS = "INSUFFICIENT_TROOPS"
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_DICE = "INVALID_DICE"
    INVALID_CARD_SET = "INVALID_CARD_SET"
    CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"


@dataclass
class ValidationResult:
    """Result of action validation."""
    valid: bool
    reason: FailureReason | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "reason": self.reason.value if self.reason else None,
            "error": self.error,
        }


def _fail(reason: FailureReason, error: str) -> ValidationResult:
    return ValidationResult(False, reason, error)


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _lookup(state: GameState, territory_id: Any) -> TerritoryState | None:
    if not isinstance(territory_id, str):
        return None
    return state.territories.get(territory_id)


# ===== Action Validation =====

def validate_action(state: GameState, action: Action, map_def: MapDefinition) -> ValidationResult:
    """
    Validate an action without applying it.
    Returns ValidationResult with valid=True, or valid=False with a reason and message.
    """
    if state.winner is not None:
        return _fail(FailureReason.GAME_OVER, f"Game is over. {state.winner} has won.")

    if action.player != state.current_player_id:
        return _fail(
            FailureReason.NOT_YOUR_TURN,
            f"Not {action.player}'s turn. Current player: {state.current_player_id}",
        )

    if action.type not in KNOWN_ACTIONS:
        return _fail(FailureReason.UNKNOWN_ACTION, f"Unknown action type: {action.type}")

    allowed = PHASE_ALLOWED_ACTIONS.get(state.phase, [])
    if action.type not in allowed:
        return _fail(
            FailureReason.WRONG_PHASE,
            f"Cannot {action.type} during {state.phase} phase. Allowed: {allowed}",
        )

    if action.type == act.REINFORCE:
        return _validate_reinforce(state, action)
    elif action.type == act.TRADE_CARDS:
        return _validate_trade(state, action)
    elif action.type == act.ATTACK:
        return _validate_attack(state, action, map_def)
    elif action.type == act.FORTIFY:
        return _validate_fortify(state, action, map_def)
    return ValidationResult(True)


def _validate_reinforce(state: GameState, action: Action) -> ValidationResult:
    territory_id = action.payload.get("territory_id")
    amount = action.payload.get("amount")

    territory = _lookup(state, territory_id)
    if territory is None:
        return _fail(FailureReason.UNKNOWN_TERRITORY, f"Invalid territory: {territory_id}")
    if not _is_count(amount) or amount < 1:
        return _fail(FailureReason.INVALID_AMOUNT, f"Amount must be a positive integer, got {amount!r}")
    if amount > state.unplaced_troops:
        return _fail(
            FailureReason.INSUFFICIENT_TROOPS,
            f"Only {state.unplaced_troops} troops left to place, requested {amount}",
        )
    if territory.owner != action.player:
        return _fail(FailureReason.NOT_OWNER, f"{territory_id} is not owned by {action.player}")
    return ValidationResult(True)


def _validate_trade(state: GameState, action: Action) -> ValidationResult:
    card_ids = action.payload.get("card_ids")
    if not isinstance(card_ids, list) or not all(isinstance(c, str) for c in card_ids):
        return _fail(FailureReason.INVALID_CARD_SET, f"Card ids must be a list of strings, got {card_ids!r}")
    if len(card_ids) != 3 or len(set(card_ids)) != 3:
        return _fail(FailureReason.INVALID_CARD_SET, "Exactly 3 distinct cards must be traded")

    cards = []
    for card_id in card_ids:
        card = state.find_card(action.player, card_id)
        if card is None:
            return _fail(FailureReason.CARD_NOT_IN_HAND, f"Card {card_id} is not in {action.player}'s hand")
        cards.append(card)

    if not is_valid_set(cards):
        return _fail(
            FailureReason.INVALID_CARD_SET,
            f"Cards {card_ids} do not form a valid set ({[c.type for c in cards]})",
        )
    return ValidationResult(True)


def _validate_attack(state: GameState, action: Action, map_def: MapDefinition) -> ValidationResult:
    from_id = action.payload.get("from")
    to_id = action.payload.get("to")

    source = _lookup(state, from_id)
    target = _lookup(state, to_id)
    if source is None or target is None:
        return _fail(FailureReason.UNKNOWN_TERRITORY, f"Invalid territory: {from_id} or {to_id}")
    if source.owner != action.player:
        return _fail(FailureReason.NOT_OWNER, f"{from_id} is not owned by {action.player}")
    if target.owner == action.player:
        return _fail(FailureReason.OWN_TERRITORY, f"Cannot attack own territory {to_id}")
    if not map_def.are_adjacent(from_id, to_id):
        return _fail(FailureReason.NOT_ADJACENT, f"{from_id} does not border {to_id}")
    if source.troops < 2:
        return _fail(
            FailureReason.INSUFFICIENT_TROOPS,
            f"{from_id} needs at least 2 troops to attack (has {source.troops})",
        )

    dice_rolls = action.payload.get("dice_rolls") or {}
    for side in ("attacker", "defender"):
        value = dice_rolls.get(side)
        if not _is_count(value) or not 1 <= value <= DICE_SIDES:
            return _fail(FailureReason.INVALID_DICE, f"Invalid {side} die: {value!r}")
    return ValidationResult(True)


def _validate_fortify(state: GameState, action: Action, map_def: MapDefinition) -> ValidationResult:
    from_id = action.payload.get("from")
    to_id = action.payload.get("to")
    amount = action.payload.get("amount")

    source = _lookup(state, from_id)
    target = _lookup(state, to_id)
    if source is None or target is None:
        return _fail(FailureReason.UNKNOWN_TERRITORY, f"Invalid territory: {from_id} or {to_id}")
    if source.owner != action.player or target.owner != action.player:
        return _fail(FailureReason.NOT_OWNER, f"Both {from_id} and {to_id} must be owned by {action.player}")
    if not _is_count(amount) or amount < 1:
        return _fail(FailureReason.INVALID_AMOUNT, f"Amount must be a positive integer, got {amount!r}")
    if amount >= source.troops:
        return _fail(
            FailureReason.INSUFFICIENT_TROOPS,
            f"{from_id} must keep at least 1 troop (has {source.troops}, moving {amount})",
        )
    if from_id == to_id or to_id not in get_connected_territories(from_id, action.player, state, map_def):
        return _fail(
            FailureReason.NOT_CONNECTED,
            f"{to_id} is not connected to {from_id} through {action.player}'s territory",
        )
    return ValidationResult(True)


# ===== UI / Policy Queries =====

def get_available_action_types(state: GameState, player_id: str | None = None) -> list[str]:
    """Action types the given player (default: current player) may submit now."""
    if state.winner is not None:
        return []
    if player_id is not None and player_id != state.current_player_id:
        return []
    return list(PHASE_ALLOWED_ACTIONS.get(state.phase, []))


def get_attack_sources(state: GameState, player_id: str, map_def: MapDefinition) -> list[str]:
    """Owned territories with more than one troop and at least one enemy neighbour."""
    return [
        tid for tid in state.territories_owned_by(player_id)
        if state.territories[tid].troops > 1 and get_attack_targets(state, player_id, tid, map_def)
    ]


def get_attack_targets(
    state: GameState,
    player_id: str,
    from_id: str,
    map_def: MapDefinition,
) -> list[str]:
    """Neighbours of from_id not owned by player_id."""
    return [
        adjacent_id for adjacent_id in map_def.neighbors(from_id)
        if adjacent_id in state.territories and state.territories[adjacent_id].owner != player_id
    ]


def get_fortify_targets(
    state: GameState,
    player_id: str,
    from_id: str,
    map_def: MapDefinition,
) -> list[str]:
    """Owned territories that troops from from_id may be moved to."""
    source = state.territories.get(from_id)
    if source is None or source.owner != player_id or source.troops < 2:
        return []
    return sorted(get_connected_territories(from_id, player_id, state, map_def))


def get_tradeable_sets(state: GameState, player_id: str) -> list[list[str]]:
    """Card id triples the player could trade right now (ignoring phase)."""
    player = state.players.get(player_id)
    if not player:
        return []
    return [[c.id for c in combo] for combo in find_valid_sets(player.cards)]


def get_player_stats(state: GameState) -> dict[str, dict[str, Any]]:
    """Per-player territory, troop and card counts for the UI."""
    stats: dict[str, dict[str, Any]] = {
        pid: {"territories": 0, "troops": 0, "cards": len(p.cards), "is_alive": p.is_alive}
        for pid, p in state.players.items()
    }
    for territory in state.territories.values():
        if territory.owner in stats:
            stats[territory.owner]["territories"] += 1
            stats[territory.owner]["troops"] += territory.troops
    return stats
