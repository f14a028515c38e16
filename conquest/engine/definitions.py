"""
Static map definitions: territories, adjacency and continents.
Maps live under data/maps/<map_id>.json with "territories" and "continents" objects.
The engine treats a loaded MapDefinition as read-only for the lifetime of a match.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path

DATA_DIR = Path(__file__).parent.parent / "data"
MAPS_DIR = DATA_DIR / "maps"


def _default_map_id() -> str:
    """Single place for default: conquest.config.DEFAULT_MAP_ID."""
    from conquest.config import DEFAULT_MAP_ID
    return DEFAULT_MAP_ID


def _map_path(map_id: str) -> Path:
    """Resolve a map id to its file; ids are bare file stems under data/maps/."""
    if not isinstance(map_id, str) or Path(map_id).name != map_id or map_id in (".", ".."):
        raise FileNotFoundError(f"Map not found: {map_id}")
    path = (MAPS_DIR / f"{map_id}.json").resolve()
    if path.parent != MAPS_DIR.resolve():
        raise FileNotFoundError(f"Map not found: {map_id}")
    return path


def list_maps() -> list[dict]:
    """Return [{ id, display_name }, ...] for every map file under data/maps/."""
    out = []
    if not MAPS_DIR.exists():
        return out
    for path in sorted(MAPS_DIR.glob("*.json")):
        try:
            with open(path, "r") as f:
                m = json.load(f)
            out.append({"id": m.get("id", path.stem), "display_name": m.get("display_name", path.stem)})
        except (json.JSONDecodeError, OSError):
            out.append({"id": path.stem, "display_name": path.stem})
    return out


@dataclass(frozen=True)
class TerritoryDefinition:
    """Defines immutable properties of a territory."""
    id: str
    display_name: str
    continent: str | None  # continent_id
    adjacent: tuple[str, ...]  # IDs of adjacent territories


@dataclass(frozen=True)
class ContinentDefinition:
    """A continent groups territories; owning all of them may grant a reinforcement bonus."""
    id: str
    display_name: str
    bonus: int
    territories: tuple[str, ...]
    color: str | None = None


@dataclass(frozen=True)
class MapDefinition:
    """The territory graph plus continent grouping."""
    id: str
    display_name: str
    territories: dict[str, TerritoryDefinition]
    continents: dict[str, ContinentDefinition] = field(default_factory=dict)

    def neighbors(self, territory_id: str) -> tuple[str, ...]:
        territory_def = self.territories.get(territory_id)
        return territory_def.adjacent if territory_def else ()

    def are_adjacent(self, a: str, b: str) -> bool:
        return b in self.neighbors(a)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "territories": {
                tid: {
                    "id": t.id,
                    "display_name": t.display_name,
                    "continent": t.continent,
                    "adjacent": list(t.adjacent),
                }
                for tid, t in self.territories.items()
            },
            "continents": {
                cid: {
                    "id": c.id,
                    "display_name": c.display_name,
                    "bonus": c.bonus,
                    "color": c.color,
                }
                for cid, c in self.continents.items()
            },
        }


def map_from_dict(data: dict, map_id: str | None = None) -> MapDefinition:
    """
    Build a MapDefinition from its JSON shape and check the graph is well formed.
    Raises ValueError if a neighbour is unknown or an edge is not symmetric.
    """
    territories_data = data.get("territories") or {}
    continents_data = data.get("continents") or {}

    territories: dict[str, TerritoryDefinition] = {}
    for territory_id, t in territories_data.items():
        territories[territory_id] = TerritoryDefinition(
            id=t.get("id", territory_id),
            display_name=t.get("display_name", territory_id),
            continent=t.get("continent"),
            adjacent=tuple(t.get("adjacent", [])),
        )

    for territory_id, territory_def in territories.items():
        for adjacent_id in territory_def.adjacent:
            if adjacent_id not in territories:
                raise ValueError(f"Territory {territory_id} borders unknown territory {adjacent_id}")
            if territory_id not in territories[adjacent_id].adjacent:
                raise ValueError(f"Adjacency {territory_id} -> {adjacent_id} is not symmetric")
            if adjacent_id == territory_id:
                raise ValueError(f"Territory {territory_id} borders itself")

    continents: dict[str, ContinentDefinition] = {}
    for continent_id, c in continents_data.items():
        members = tuple(sorted(
            tid for tid, t in territories.items() if t.continent == continent_id
        ))
        continents[continent_id] = ContinentDefinition(
            id=c.get("id", continent_id),
            display_name=c.get("display_name", continent_id),
            bonus=int(c.get("bonus", 0)),
            territories=members,
            color=c.get("color"),
        )

    for territory_id, territory_def in territories.items():
        if territory_def.continent and territory_def.continent not in continents:
            raise ValueError(f"Territory {territory_id} is in unknown continent {territory_def.continent}")

    resolved_id = map_id or data.get("id") or "custom"
    return MapDefinition(
        id=resolved_id,
        display_name=data.get("display_name", resolved_id),
        territories=territories,
        continents=continents,
    )


def load_map(map_id: str | None = None, path: Path | str | None = None) -> MapDefinition:
    """
    Load a map by id from data/maps/, or from an explicit JSON file path.
    Raises FileNotFoundError for an unknown map id.
    """
    if path is not None:
        map_path = Path(path)
    else:
        map_path = _map_path(map_id or _default_map_id())
    if not map_path.exists():
        raise FileNotFoundError(f"Map not found: {map_id or map_path}")
    with open(map_path, "r") as f:
        data = json.load(f)
    return map_from_dict(data, map_id=data.get("id", map_path.stem))


def map_from_adjacency(adjacency: dict[str, list[str]], map_id: str = "custom") -> MapDefinition:
    """Build a continent-less map from a plain adjacency mapping (tests, ad hoc boards)."""
    return map_from_dict(
        {
            "id": map_id,
            "territories": {
                tid: {"id": tid, "adjacent": list(neighbors)}
                for tid, neighbors in adjacency.items()
            },
        },
        map_id=map_id,
    )
