"""
Reinforcement allotment at the start of a player's turn.
"""

from conquest.engine import MIN_REINFORCEMENTS, TERRITORIES_PER_REINFORCEMENT
from conquest.engine.definitions import MapDefinition
from conquest.engine.state import GameState


def base_reinforcements(territory_count: int) -> int:
    return max(MIN_REINFORCEMENTS, territory_count // TERRITORIES_PER_REINFORCEMENT)


def controlled_continents(state: GameState, player_id: str, map_def: MapDefinition) -> list[str]:
    """Continent ids whose every territory is owned by player_id."""
    controlled = []
    for continent_id, continent in map_def.continents.items():
        if not continent.territories:
            continue
        if all(
            state.territories.get(tid) is not None and state.territories[tid].owner == player_id
            for tid in continent.territories
        ):
            controlled.append(continent_id)
    return controlled


def calculate_reinforcements(
    state: GameState,
    player_id: str,
    map_def: MapDefinition,
    continent_bonuses: bool = False,
) -> tuple[int, list[str]]:
    """
    Troops a player receives at the start of their REINFORCE phase.

    Base allotment is max(3, owned territories // 3). With continent_bonuses,
    each fully owned continent adds its bonus on top.

    Returns:
        (total, [continent_ids that contributed a bonus])
    """
    territory_count = len(state.territories_owned_by(player_id))
    total = base_reinforcements(territory_count)

    continents: list[str] = []
    if continent_bonuses:
        continents = controlled_continents(state, player_id, map_def)
        total += sum(map_def.continents[cid].bonus for cid in continents)

    return total, continents
