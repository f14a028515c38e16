"""
Fortify pathfinding: reachability through a player's contiguous territory.
"""

from collections import deque

from conquest.engine.definitions import MapDefinition
from conquest.engine.state import GameState


def get_connected_territories(
    start: str,
    player_id: str,
    state: GameState,
    map_def: MapDefinition,
) -> set[str]:
    """
    All territories reachable from start by walking only through territories
    owned by player_id (BFS). The start territory itself is not included.
    """
    start_state = state.territories.get(start)
    if not start_state or start_state.owner != player_id:
        return set()

    visited = {start}
    queue = deque([start])

    while queue:
        territory_id = queue.popleft()
        for adjacent_id in map_def.neighbors(territory_id):
            if adjacent_id in visited:
                continue
            adjacent_state = state.territories.get(adjacent_id)
            if adjacent_state is None or adjacent_state.owner != player_id:
                continue
            visited.add(adjacent_id)
            queue.append(adjacent_id)

    visited.discard(start)
    return visited
