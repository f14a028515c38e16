"""
Game state representation.
The reducer mutates a copy of the state and the engine swaps it in on success.
Includes JSON serialization for broadcasting snapshots to observers.
"""

import json
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any

# Phases. SETUP is a placeholder: matches start directly in REINFORCE.
SETUP = "SETUP"
REINFORCE = "REINFORCE"
ATTACK = "ATTACK"
FORTIFY = "FORTIFY"
PHASES = (SETUP, REINFORCE, ATTACK, FORTIFY)


def _int(v: Any, default: int) -> int:
    try:
        return int(v) if v is not None else default
    except (TypeError, ValueError):
        return default


@dataclass
class Card:
    """A tradeable card. Wildcards have no bound territory."""
    id: str
    type: str  # "INFANTRY", "CAVALRY", "ARTILLERY" or "WILD"
    territory_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": self.type, "territory_id": self.territory_id}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Card":
        if not isinstance(data, dict):
            data = {}
        return cls(
            id=str(data.get("id") or ""),
            type=str(data.get("type") or ""),
            territory_id=data.get("territory_id"),
        )


@dataclass
class TerritoryState:
    """State of a single territory."""
    owner: str | None  # player_id or None if unowned
    troops: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"owner": self.owner, "troops": self.troops}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TerritoryState":
        if not isinstance(data, dict):
            data = {}
        return cls(owner=data.get("owner"), troops=_int(data.get("troops"), 0))


@dataclass
class PlayerState:
    """A seated player. Identity is stable for the whole match."""
    id: str
    name: str
    color: str
    cards: list[Card] = field(default_factory=list)
    is_alive: bool = True
    is_ai: bool = False

    def card_ids(self) -> list[str]:
        return [c.id for c in self.cards]

    def to_dict(self, reveal_cards: bool = True) -> dict[str, Any]:
        out: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "color": self.color,
            "card_count": len(self.cards),
            "is_alive": self.is_alive,
            "is_ai": self.is_ai,
        }
        if reveal_cards:
            out["cards"] = [c.to_dict() for c in self.cards]
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlayerState":
        if not isinstance(data, dict):
            data = {}
        cards_raw = data.get("cards") or []
        if not isinstance(cards_raw, list):
            cards_raw = []
        return cls(
            id=str(data.get("id") or ""),
            name=str(data.get("name") or ""),
            color=str(data.get("color") or ""),
            cards=[Card.from_dict(c) for c in cards_raw if isinstance(c, dict)],
            is_alive=bool(data.get("is_alive", True)),
            is_ai=bool(data.get("is_ai", False)),
        )


@dataclass
class GameState:
    """Complete state of one match."""
    territories: dict[str, TerritoryState]  # territory_id -> TerritoryState
    players: dict[str, PlayerState]  # player_id -> PlayerState
    player_order: list[str]  # seating order, fixed once the match starts
    current_player_index: int = 0
    phase: str = REINFORCE
    # Troops the acting player still has to place this REINFORCE phase
    unplaced_troops: int = 0
    # Set by any conquest; decides the card award when the turn ends
    conquered_this_turn: bool = False
    # Undrawn cards, top of the deck is index 0
    deck: list[Card] = field(default_factory=list)
    turn_number: int = 1
    # Number of trade-ins performed in this match (informational)
    trade_count: int = 0
    # Player id of the last player standing, None while the match is running
    winner: str | None = None

    def copy(self) -> "GameState":
        """Return a deep copy of this game state."""
        return deepcopy(self)

    @property
    def current_player_id(self) -> str:
        return self.player_order[self.current_player_index]

    @property
    def current_player(self) -> PlayerState:
        return self.players[self.current_player_id]

    def territories_owned_by(self, player_id: str) -> list[str]:
        return [tid for tid, ts in self.territories.items() if ts.owner == player_id]

    def total_troops(self) -> int:
        return sum(ts.troops for ts in self.territories.values() if ts.owner is not None)

    def find_card(self, player_id: str, card_id: str) -> Card | None:
        player = self.players.get(player_id)
        if not player:
            return None
        for card in player.cards:
            if card.id == card_id:
                return card
        return None

    # ===== Serialization Methods =====

    def to_dict(self) -> dict[str, Any]:
        """Full state, including every hand and the deck order."""
        return {
            "territories": {tid: ts.to_dict() for tid, ts in self.territories.items()},
            "players": {pid: p.to_dict() for pid, p in self.players.items()},
            "player_order": list(self.player_order),
            "current_player_index": self.current_player_index,
            "current_player": self.current_player_id,
            "phase": self.phase,
            "unplaced_troops": self.unplaced_troops,
            "conquered_this_turn": self.conquered_this_turn,
            "deck": [c.to_dict() for c in self.deck],
            "deck_size": len(self.deck),
            "turn_number": self.turn_number,
            "trade_count": self.trade_count,
            "winner": self.winner,
        }

    def to_public_dict(self, viewer_id: str | None = None) -> dict[str, Any]:
        """
        Snapshot for broadcasting. Only the viewer's own hand is revealed;
        other hands are reported as card counts and the deck as its size.
        """
        out = self.to_dict()
        out["players"] = {
            pid: p.to_dict(reveal_cards=(pid == viewer_id))
            for pid, p in self.players.items()
        }
        del out["deck"]
        return out

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GameState":
        """Create GameState from a dictionary produced by to_dict."""
        territories_data = data.get("territories") or {}
        if not isinstance(territories_data, dict):
            territories_data = {}
        players_data = data.get("players") or {}
        if not isinstance(players_data, dict):
            players_data = {}
        order = data.get("player_order") or list(players_data.keys())
        deck_raw = data.get("deck") or []
        if not isinstance(deck_raw, list):
            deck_raw = []
        phase = str(data.get("phase") or REINFORCE)
        if phase not in PHASES:
            phase = REINFORCE
        return cls(
            territories={
                tid: TerritoryState.from_dict(ts)
                for tid, ts in territories_data.items()
                if isinstance(ts, dict)
            },
            players={
                pid: PlayerState.from_dict(p)
                for pid, p in players_data.items()
                if isinstance(p, dict)
            },
            player_order=[str(pid) for pid in order],
            current_player_index=_int(data.get("current_player_index"), 0),
            phase=phase,
            unplaced_troops=_int(data.get("unplaced_troops"), 0),
            conquered_this_turn=bool(data.get("conquered_this_turn", False)),
            deck=[Card.from_dict(c) for c in deck_raw if isinstance(c, dict)],
            turn_number=_int(data.get("turn_number"), 1),
            trade_count=_int(data.get("trade_count"), 0),
            winner=data.get("winner"),
        )

    def to_json(self, indent: int = 2) -> str:
        """Serialize GameState to a JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_json(cls, json_str: str) -> "GameState":
        """Deserialize GameState from a JSON string."""
        return cls.from_dict(json.loads(json_str))
