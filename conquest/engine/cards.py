"""
Card deck construction and trade-in set rules.
"""

import random
from itertools import combinations

from conquest.engine import CARD_TYPES, WILD, WILDCARD_COUNT
from conquest.engine.state import Card


def build_deck(territory_ids: list[str], rng: random.Random | None = None) -> list[Card]:
    """
    One card per territory (types cycle through CARD_TYPES over the sorted ids),
    plus WILDCARD_COUNT unbound wildcards. Shuffled once when rng is given.
    """
    deck = [
        Card(
            id=f"card_{territory_id}",
            type=CARD_TYPES[i % len(CARD_TYPES)],
            territory_id=territory_id,
        )
        for i, territory_id in enumerate(sorted(territory_ids))
    ]
    deck.extend(Card(id=f"wild_{n}", type=WILD) for n in range(1, WILDCARD_COUNT + 1))
    if rng is not None:
        rng.shuffle(deck)
    return deck


def is_valid_set(cards: list[Card]) -> bool:
    """
    A set is three cards that are all one type, or one of each tradeable type.
    Any wildcard makes the set valid.
    """
    if len(cards) != 3:
        return False
    types = [c.type for c in cards]
    if WILD in types:
        return True
    if len(set(types)) == 1:
        return True
    return set(types) == set(CARD_TYPES)


def find_valid_sets(hand: list[Card]) -> list[list[Card]]:
    """Every valid three-card combination in a hand, in hand order."""
    if len(hand) < 3:
        return []
    return [list(combo) for combo in combinations(hand, 3) if is_valid_set(list(combo))]


def best_set(hand: list[Card], owned_territories: set[str]) -> list[Card] | None:
    """
    Pick the set that spends the fewest wildcards and earns the most territory bonuses.
    Used by the automated policy.
    """
    sets = find_valid_sets(hand)
    if not sets:
        return None

    def score(combo: list[Card]) -> tuple[int, int]:
        wilds = sum(1 for c in combo if c.type == WILD)
        bonuses = sum(1 for c in combo if c.territory_id in owned_territories)
        return (-wilds, bonuses)

    return max(sets, key=score)
