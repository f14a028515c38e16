"""
State snapshots: copies are isolated, public views hide hands and deck order.
"""

import threading

from conftest import build_state, card, engine_for
from conquest.engine.state import REINFORCE, GameState


def sample_state():
    return build_state(
        {"a": ("A", 3), "b": ("B", 2), "c": ("A", 1), "d": ("B", 4), "e": ("A", 3), "f": ("B", 3)},
        ["A", "B"],
        unplaced=3,
        hands={"A": [card("card_a", "INFANTRY", "a")], "B": [card("wild_1", "WILD")]},
        deck=[card("card_b", "CAVALRY", "b")],
    )


def test_json_round_trip():
    state = sample_state()
    restored = GameState.from_json(state.to_json())
    assert restored.to_dict() == state.to_dict()


def test_public_view_reveals_only_viewer_hand():
    public = sample_state().to_public_dict("A")
    assert public["players"]["A"]["cards"] == [{"id": "card_a", "type": "INFANTRY", "territory_id": "a"}]
    assert "cards" not in public["players"]["B"]
    assert public["players"]["B"]["card_count"] == 1
    assert "deck" not in public
    assert public["deck_size"] == 1


def test_engine_state_is_a_copy():
    engine = engine_for(sample_state())
    snapshot = engine.state
    snapshot.territories["a"].troops = 99
    snapshot.players["A"].cards.clear()
    assert engine.state.territories["a"].troops == 3
    assert len(engine.state.players["A"].cards) == 1


def test_snapshot_carries_version_and_stats():
    engine = engine_for(sample_state())
    engine.reinforce("A", "a", 1)
    snap = engine.snapshot()
    assert snap["version"] == 1
    assert snap["player_stats"]["A"] == {"territories": 3, "troops": 8, "cards": 1, "is_alive": True}
    assert snap["phase"] == "REINFORCE"


def test_views_wait_for_running_operation():
    engine = engine_for(sample_state())
    seen = []
    reader = threading.Thread(target=lambda: seen.append((engine.current_player_id, engine.phase, engine.winner)))

    with engine._lock:
        reader.start()
        reader.join(0.1)
        assert seen == []

    reader.join(5)
    assert seen == [("A", REINFORCE, None)]
