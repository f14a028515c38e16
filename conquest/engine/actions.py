"""
Action definitions for the game.
Actions are immutable, deterministic instructions: any randomness (dice) is
rolled by the caller and carried in the payload, so the reducer stays pure.
"""

from dataclasses import dataclass

REINFORCE = "reinforce"
TRADE_CARDS = "trade_cards"
ATTACK = "attack"
END_ATTACK_PHASE = "end_attack_phase"
FORTIFY = "fortify"
SKIP_FORTIFY = "skip_fortify"


@dataclass
class Action:
    """Base action class. All actions have a type, the acting player, and a payload."""
    type: str
    player: str  # player_id performing the action
    payload: dict  # Action-specific data


def reinforce(player: str, territory_id: str, amount: int) -> Action:
    """
    Place unplaced troops onto an owned territory.
    Placing the last unplaced troop moves the player into the attack phase.
    """
    return Action(
        type=REINFORCE,
        player=player,
        payload={"territory_id": territory_id, "amount": amount},
    )


def trade_cards(player: str, card_ids: list[str]) -> Action:
    """
    Trade exactly three cards from hand for bonus troops.
    Example: trade_cards("p1", ["card_t1", "card_t4", "wild_1"])
    """
    return Action(
        type=TRADE_CARDS,
        player=player,
        payload={"card_ids": list(card_ids) if isinstance(card_ids, (list, tuple)) else card_ids},
    )


def attack(
    player: str,
    territory_from: str,
    territory_to: str,
    dice_rolls: dict[str, int],  # {"attacker": 1-6, "defender": 1-6}
) -> Action:
    """
    One attack exchange from an owned territory into an adjacent enemy territory.
    dice_rolls must be provided (deterministic, no RNG in reducer).

    Example: attack("p1", "t3", "t4", {"attacker": 6, "defender": 1})
    """
    return Action(
        type=ATTACK,
        player=player,
        payload={
            "from": territory_from,
            "to": territory_to,
            "dice_rolls": dict(dice_rolls),
        },
    )


def end_attack_phase(player: str) -> Action:
    """Stop attacking and move to the fortify phase."""
    return Action(type=END_ATTACK_PHASE, player=player, payload={})


def fortify(player: str, territory_from: str, territory_to: str, amount: int) -> Action:
    """
    Move troops between two owned territories connected through owned territory.
    Ends the turn.
    """
    return Action(
        type=FORTIFY,
        player=player,
        payload={"from": territory_from, "to": territory_to, "amount": amount},
    )


def skip_fortify(player: str) -> Action:
    """End the turn without moving troops."""
    return Action(type=SKIP_FORTIFY, player=player, payload={})
