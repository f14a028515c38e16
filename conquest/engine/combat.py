"""
Combat resolution: one attacker die against one defender die per exchange.
"""

import random
from dataclasses import dataclass

from conquest.engine import DICE_SIDES
from conquest.engine.state import TerritoryState


@dataclass
class ExchangeResult:
    """Result of a single attack exchange."""
    attacker_die: int
    defender_die: int
    attacker_losses: int  # troops killed on the source territory
    defender_losses: int  # troops killed on the target territory
    conquered: bool
    attacker_won: bool


def roll_die(rng: random.Random) -> int:
    """Uniform integer in [1, DICE_SIDES]."""
    return rng.randint(1, DICE_SIDES)


def roll_exchange(rng: random.Random) -> dict[str, int]:
    """Independent draws for attacker then defender."""
    attacker = roll_die(rng)
    defender = roll_die(rng)
    return {"attacker": attacker, "defender": defender}


def resolve_exchange(
    source: TerritoryState,
    target: TerritoryState,
    attacker_id: str,
    dice_rolls: dict[str, int],
) -> ExchangeResult:
    """
    Resolve one exchange and apply its troop/ownership effects.

    Combat rules:
    - Higher die wins, a tie favors the defender
    - Attacker win: target loses one troop; at zero the territory is conquered,
      ownership passes to the attacker, the target is set to exactly 1 troop and
      that occupying troop is taken from the source
    - Attacker loss: source loses one troop

    Note: This function MODIFIES source and target in place.
    Caller is responsible for checking the source has at least 2 troops.
    """
    attacker_die = int(dice_rolls["attacker"])
    defender_die = int(dice_rolls["defender"])

    if attacker_die > defender_die:
        target.troops -= 1
        if target.troops <= 0:
            target.owner = attacker_id
            target.troops = 1
            source.troops -= 1
            return ExchangeResult(attacker_die, defender_die, 0, 1, conquered=True, attacker_won=True)
        return ExchangeResult(attacker_die, defender_die, 0, 1, conquered=False, attacker_won=True)

    source.troops -= 1
    return ExchangeResult(attacker_die, defender_die, 1, 0, conquered=False, attacker_won=False)
