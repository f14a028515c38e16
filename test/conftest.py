"""
Shared helpers for engine tests: scripted dice and hand-built boards.
"""

import random

import pytest

from conquest.engine.definitions import load_map, map_from_adjacency
from conquest.engine.game import GameEngine
from conquest.engine.state import REINFORCE, Card, GameState, PlayerState, TerritoryState


class ScriptedDice(random.Random):
    """
    random.Random whose randint() returns queued values first.
    Shuffles and choices still come from the seeded generator.
    """

    def __init__(self, rolls=(), seed=0):
        super().__init__(seed)
        self.rolls = list(rolls)

    def randint(self, a, b):
        if self.rolls:
            return self.rolls.pop(0)
        return super().randint(a, b)


# a - b - c - d - e - f, a straight line
LINE_ADJACENCY = {
    "a": ["b"],
    "b": ["a", "c"],
    "c": ["b", "d"],
    "d": ["c", "e"],
    "e": ["d", "f"],
    "f": ["e"],
}


def build_state(
    board: dict[str, tuple[str, int]],
    player_ids: list[str],
    *,
    phase: str = REINFORCE,
    unplaced: int = 0,
    current: int = 0,
    hands: dict[str, list[Card]] | None = None,
    deck: list[Card] | None = None,
    ai: tuple[str, ...] = (),
) -> GameState:
    """board maps territory id -> (owner, troops)."""
    hands = hands or {}
    return GameState(
        territories={tid: TerritoryState(owner=o, troops=t) for tid, (o, t) in board.items()},
        players={
            pid: PlayerState(
                id=pid,
                name=pid,
                color="#000000",
                cards=list(hands.get(pid, [])),
                is_ai=pid in ai,
            )
            for pid in player_ids
        },
        player_order=list(player_ids),
        current_player_index=current,
        phase=phase,
        unplaced_troops=unplaced,
        deck=list(deck or []),
    )


def engine_for(state: GameState, adjacency=None, rng=None, map_def=None) -> GameEngine:
    if map_def is None:
        map_def = map_from_adjacency(adjacency or LINE_ADJACENCY)
    return GameEngine(list(state.player_order), map_def, rng or ScriptedDice(), state=state)


def card(card_id: str, card_type: str, territory_id: str | None = None) -> Card:
    return Card(id=card_id, type=card_type, territory_id=territory_id)


@pytest.fixture
def line_map():
    return map_from_adjacency(LINE_ADJACENCY)


@pytest.fixture
def default_map():
    return load_map("default")
