"""
Game events for UI hooks and logging.
Events describe what happened during action processing.
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class GameEvent:
    """Base event class. All events have a type and payload."""
    type: str
    payload: dict[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "payload": self.payload}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameEvent":
        return cls(type=data["type"], payload=data["payload"])


# ===== Event Type Constants =====

# Phase/Turn events
PHASE_CHANGED = "phase_changed"
TURN_STARTED = "turn_started"
TURN_ENDED = "turn_ended"

# Reinforcement events
REINFORCEMENTS_CALCULATED = "reinforcements_calculated"
TROOPS_PLACED = "troops_placed"

# Card events
CARDS_TRADED = "cards_traded"
CARD_AWARDED = "card_awarded"
CARDS_TRANSFERRED = "cards_transferred"

# Combat events
ATTACK_RESOLVED = "attack_resolved"
TERRITORY_CAPTURED = "territory_captured"
PLAYER_ELIMINATED = "player_eliminated"

# Movement events
TROOPS_FORTIFIED = "troops_fortified"

# Victory events
VICTORY = "victory"


# ===== Event Factory Functions =====

def phase_changed(old_phase: str, new_phase: str, player: str) -> GameEvent:
    return GameEvent(PHASE_CHANGED, {
        "old_phase": old_phase,
        "new_phase": new_phase,
        "player": player,
    })


def turn_started(turn_number: int, player: str) -> GameEvent:
    return GameEvent(TURN_STARTED, {
        "turn_number": turn_number,
        "player": player,
    })


def turn_ended(turn_number: int, player: str) -> GameEvent:
    return GameEvent(TURN_ENDED, {
        "turn_number": turn_number,
        "player": player,
    })


def reinforcements_calculated(
    player: str,
    territory_count: int,
    amount: int,
    continents: list[str],
) -> GameEvent:
    """Emitted at the start of a turn when the unplaced-troop pool is computed."""
    return GameEvent(REINFORCEMENTS_CALCULATED, {
        "player": player,
        "territory_count": territory_count,
        "amount": amount,
        "continents": continents,  # continent_ids that added a bonus
    })


def troops_placed(player: str, territory: str, amount: int, remaining: int) -> GameEvent:
    return GameEvent(TROOPS_PLACED, {
        "player": player,
        "territory": territory,
        "amount": amount,
        "remaining": remaining,
    })


def cards_traded(
    player: str,
    card_ids: list[str],
    bonus: int,
    territory_bonuses: dict[str, int],
) -> GameEvent:
    return GameEvent(CARDS_TRADED, {
        "player": player,
        "card_ids": card_ids,
        "bonus": bonus,
        "territory_bonuses": territory_bonuses,  # territory_id -> troops added
    })


def card_awarded(player: str, card_id: str, deck_size: int) -> GameEvent:
    return GameEvent(CARD_AWARDED, {
        "player": player,
        "card_id": card_id,
        "deck_size": deck_size,
    })


def cards_transferred(from_player: str, to_player: str, card_ids: list[str]) -> GameEvent:
    return GameEvent(CARDS_TRANSFERRED, {
        "from_player": from_player,
        "to_player": to_player,
        "card_ids": card_ids,
    })


def attack_resolved(
    player: str,
    from_territory: str,
    to_territory: str,
    attacker_die: int,
    defender_die: int,
    attacker_losses: int,
    defender_losses: int,
    conquered: bool,
) -> GameEvent:
    return GameEvent(ATTACK_RESOLVED, {
        "player": player,
        "from_territory": from_territory,
        "to_territory": to_territory,
        "attacker_die": attacker_die,
        "defender_die": defender_die,
        "attacker_losses": attacker_losses,
        "defender_losses": defender_losses,
        "conquered": conquered,
    })


def territory_captured(territory: str, old_owner: str | None, new_owner: str) -> GameEvent:
    return GameEvent(TERRITORY_CAPTURED, {
        "territory": territory,
        "old_owner": old_owner,
        "new_owner": new_owner,
    })


def player_eliminated(player: str, eliminated_by: str) -> GameEvent:
    return GameEvent(PLAYER_ELIMINATED, {
        "player": player,
        "eliminated_by": eliminated_by,
    })


def troops_fortified(player: str, from_territory: str, to_territory: str, amount: int) -> GameEvent:
    return GameEvent(TROOPS_FORTIFIED, {
        "player": player,
        "from_territory": from_territory,
        "to_territory": to_territory,
        "amount": amount,
    })


def victory(winner: str, territory_count: int) -> GameEvent:
    """Emitted when a single live player remains."""
    return GameEvent(VICTORY, {
        "winner": winner,
        "territory_count": territory_count,
    })
