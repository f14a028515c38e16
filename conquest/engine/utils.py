"""
Utility functions for the game engine.
"""

import random

from conquest.engine import STARTING_TROOPS
from conquest.engine.cards import build_deck
from conquest.engine.definitions import MapDefinition
from conquest.engine.reinforcements import calculate_reinforcements
from conquest.engine.state import REINFORCE, GameState, PlayerState, TerritoryState

AI_PREFIX = "AI_"
PLAYER_COLORS = ["#ff4444", "#4444ff", "#44ff44", "#ffff44", "#ff44ff", "#44ffff"]


def is_ai_id(player_id: str) -> bool:
    return player_id.startswith(AI_PREFIX)


def generate_ai_id(seat: int, rng: random.Random | None = None) -> str:
    """Automated seats get ids like AI_2_3f9a so the transport can tell them apart."""
    rng = rng or random.Random()
    return f"{AI_PREFIX}{seat}_{rng.getrandbits(16):04x}"


def initialize_game_state(
    player_ids: list[str],
    map_def: MapDefinition,
    rng: random.Random | None = None,
    names: dict[str, str] | None = None,
    ai_player_ids: set[str] | None = None,
    shuffle_territories: bool = False,
    continent_bonuses: bool = False,
) -> GameState:
    """
    Create the initial state of a match.

    Args:
        player_ids: Seating order (humans and automated players)
        map_def: Territory graph
        rng: Random source for the deck shuffle and optional territory shuffle
        names: Optional display names by player_id
        ai_player_ids: Seats driven by the automated policy (default: ids starting with AI_)
        shuffle_territories: Deal territories in random order instead of map order
        continent_bonuses: Include continent bonuses in the first player's allotment

    Territories are dealt round-robin in seating order with STARTING_TROOPS each.
    A seat left without territory starts eliminated.
    """
    if not player_ids:
        raise ValueError("At least one player is required")
    if len(set(player_ids)) != len(player_ids):
        raise ValueError("Player ids must be unique")

    rng = rng or random.Random()
    names = names or {}

    players: dict[str, PlayerState] = {}
    for index, player_id in enumerate(player_ids):
        is_ai = player_id in ai_player_ids if ai_player_ids is not None else is_ai_id(player_id)
        default_name = f"AI Bot {index}" if is_ai else f"Player {index + 1}"
        players[player_id] = PlayerState(
            id=player_id,
            name=names.get(player_id) or default_name,
            color=PLAYER_COLORS[index % len(PLAYER_COLORS)],
            is_ai=is_ai,
        )

    territory_ids = sorted(map_def.territories.keys())
    if shuffle_territories:
        rng.shuffle(territory_ids)

    territories: dict[str, TerritoryState] = {}
    for i, territory_id in enumerate(territory_ids):
        territories[territory_id] = TerritoryState(
            owner=player_ids[i % len(player_ids)],
            troops=STARTING_TROOPS,
        )

    state = GameState(
        territories=territories,
        players=players,
        player_order=list(player_ids),
        current_player_index=0,
        phase=REINFORCE,
        deck=build_deck(list(map_def.territories.keys()), rng),
    )

    for player_id in player_ids:
        if not state.territories_owned_by(player_id):
            players[player_id].is_alive = False

    state.unplaced_troops, _ = calculate_reinforcements(
        state, state.current_player_id, map_def, continent_bonuses
    )
    return state


def print_game_state(state: GameState, map_def: MapDefinition) -> None:
    """Pretty-print the current game state."""
    print(f"\n{'='*60}")
    print(
        f"Turn {state.turn_number} | Player: {state.current_player.name} "
        f"({state.current_player_id}) | Phase: {state.phase} | Unplaced: {state.unplaced_troops}")
    print(f"{'='*60}")

    for territory_id in sorted(state.territories.keys()):
        territory_state = state.territories[territory_id]
        territory_def = map_def.territories.get(territory_id)
        display_name = territory_def.display_name if territory_def else territory_id
        owner = state.players.get(territory_state.owner) if territory_state.owner else None
        owner_str = owner.name if owner else "neutral"
        print(f"  {display_name:<20} {owner_str:<14} troops: {territory_state.troops}")

    print(f"\n{'Players':.<40}")
    for player_id in state.player_order:
        player = state.players[player_id]
        status = "alive" if player.is_alive else "eliminated"
        print(f"  {player.name}: {len(state.territories_owned_by(player_id))} territories, "
              f"{len(player.cards)} cards, {status}")
    print(f"  Deck: {len(state.deck)} cards")
    print()
