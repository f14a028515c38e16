"""
Main entry point for the Territory Conquest Game Engine.
Plays an all-automated match on a map and prints the board after every turn.
"""

import argparse
import logging
import random

from conquest.config import LOG_LEVEL, MAX_AUTOMATED_STEPS
from conquest.engine.definitions import load_map
from conquest.engine.game import GameEngine
from conquest.engine.policy import ScriptedPolicy
from conquest.engine.scheduler import TurnScheduler
from conquest.engine.utils import generate_ai_id, print_game_state


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Play an automated conquest match")
    parser.add_argument("--bots", type=int, default=2, help="number of automated players (default: 2)")
    parser.add_argument("--seed", type=int, default=None, help="seed for dice, deck and policy")
    parser.add_argument("--map", dest="map_id", default=None, help="map id under conquest/data/maps")
    parser.add_argument("--max-steps", type=int, default=MAX_AUTOMATED_STEPS)
    parser.add_argument("--verbose", action="store_true", help="log every engine action")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else LOG_LEVEL,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.bots < 2:
        print("At least 2 bots are needed for a match")
        return 1

    print("Territory Conquest Game Engine - automated match")
    print("=" * 60)

    map_def = load_map(args.map_id)
    rng = random.Random(args.seed)
    player_ids = [generate_ai_id(seat, rng) for seat in range(args.bots)]
    engine = GameEngine(player_ids, map_def, rng)
    scheduler = TurnScheduler(engine, ScriptedPolicy(), max_steps=args.max_steps)

    print(f"Map: {map_def.display_name} ({len(map_def.territories)} territories)")
    print("\n[INITIAL STATE]")
    print_game_state(engine.state, map_def)

    last_turn = engine.state.turn_number
    last_player = engine.current_player_id
    scheduler.schedule()
    while scheduler.pending:
        scheduler.run_next()
        if engine.current_player_id != last_player or engine.winner is not None:
            state = engine.state
            if state.turn_number != last_turn or engine.winner is not None:
                print(f"\n[END OF ROUND {last_turn}]")
                print_game_state(state, map_def)
                last_turn = state.turn_number
            last_player = engine.current_player_id

    state = engine.state
    if state.winner:
        print(f"✓ {state.players[state.winner].name} ({state.winner}) conquered the map "
              f"in {state.turn_number} rounds")
    else:
        print(f"✗ No winner after {scheduler.steps_run} automated steps")
        print_game_state(state, map_def)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
