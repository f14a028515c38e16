"""
Main game reducer.
Applies actions to state, enforcing rules and producing new state.
Returns (new_state, events) where events describe what happened.
"""

import random

from conquest.engine import TERRITORY_CARD_BONUS, TRADE_IN_BONUS
from conquest.engine import actions as act
from conquest.engine.actions import Action
from conquest.engine.combat import resolve_exchange
from conquest.engine.definitions import MapDefinition
from conquest.engine.events import (
    GameEvent,
    attack_resolved,
    card_awarded,
    cards_traded,
    cards_transferred,
    phase_changed,
    player_eliminated,
    reinforcements_calculated,
    territory_captured,
    troops_fortified,
    troops_placed,
    turn_ended,
    turn_started,
    victory,
)
from conquest.engine.queries import validate_action
from conquest.engine.reinforcements import calculate_reinforcements
from conquest.engine.state import ATTACK, FORTIFY, REINFORCE, GameState


def apply_action(
    state: GameState,
    action: Action,
    map_def: MapDefinition,
    rng: random.Random | None = None,
    continent_bonuses: bool = False,
) -> tuple[GameState, list[GameEvent]]:
    """
    Apply a single action to a copy of the state, returning new state and events.

    Validates turn, phase and action-specific rules first and raises ValueError
    if the action is illegal; the input state is never modified.

    Args:
        state: Current game state
        action: Action to apply (attack dice already rolled into the payload)
        map_def: Territory graph
        rng: Random source for deck reshuffles after a trade-in
        continent_bonuses: Add continent bonuses when computing the next player's reinforcements

    Returns:
        Tuple of (new_state, events) where events describe what happened
    """
    validation = validate_action(state, action, map_def)
    if not validation.valid:
        raise ValueError(validation.error)

    if rng is None:
        rng = random.Random()

    new_state = state.copy()
    events: list[GameEvent] = []

    if action.type == act.REINFORCE:
        new_state, evts = _handle_reinforce(new_state, action)
        events.extend(evts)

    elif action.type == act.TRADE_CARDS:
        new_state, evts = _handle_trade_cards(new_state, action, rng)
        events.extend(evts)

    elif action.type == act.ATTACK:
        new_state, evts = _handle_attack(new_state, action)
        events.extend(evts)

    elif action.type == act.END_ATTACK_PHASE:
        new_state.phase = FORTIFY
        events.append(phase_changed(ATTACK, FORTIFY, action.player))

    elif action.type == act.FORTIFY:
        new_state, evts = _handle_fortify(new_state, action)
        events.extend(evts)
        new_state, evts = _end_turn(new_state, map_def, continent_bonuses)
        events.extend(evts)

    elif action.type == act.SKIP_FORTIFY:
        new_state, evts = _end_turn(new_state, map_def, continent_bonuses)
        events.extend(evts)

    else:
        raise ValueError(f"Unknown action type: {action.type}")

    return new_state, events


def _handle_reinforce(state: GameState, action: Action) -> tuple[GameState, list[GameEvent]]:
    """
    Place troops from the unplaced pool.
    Emptying the pool moves the player straight into the attack phase.
    """
    events: list[GameEvent] = []
    territory_id = action.payload["territory_id"]
    amount = action.payload["amount"]

    state.territories[territory_id].troops += amount
    state.unplaced_troops -= amount
    events.append(troops_placed(action.player, territory_id, amount, state.unplaced_troops))

    if state.unplaced_troops == 0:
        state.phase = ATTACK
        events.append(phase_changed(REINFORCE, ATTACK, action.player))

    return state, events


def _handle_trade_cards(
    state: GameState,
    action: Action,
    rng: random.Random,
) -> tuple[GameState, list[GameEvent]]:
    """
    Return three cards to the deck, reshuffle, and grant the trade-in bonus.
    Every traded card bound to a territory the player owns adds troops there.
    """
    card_ids = list(action.payload["card_ids"])
    player = state.players[action.player]

    traded = [c for c in player.cards if c.id in card_ids]
    player.cards = [c for c in player.cards if c.id not in card_ids]
    state.deck.extend(traded)
    rng.shuffle(state.deck)

    state.unplaced_troops += TRADE_IN_BONUS
    state.trade_count += 1

    territory_bonuses: dict[str, int] = {}
    for card in traded:
        if not card.territory_id:
            continue
        territory = state.territories.get(card.territory_id)
        if territory is not None and territory.owner == action.player:
            territory.troops += TERRITORY_CARD_BONUS
            territory_bonuses[card.territory_id] = territory_bonuses.get(card.territory_id, 0) + TERRITORY_CARD_BONUS

    return state, [cards_traded(action.player, card_ids, TRADE_IN_BONUS, territory_bonuses)]


def _handle_attack(state: GameState, action: Action) -> tuple[GameState, list[GameEvent]]:
    """
    Resolve one exchange. A conquest may eliminate the defender (their cards go
    to the attacker) and may end the game.
    """
    events: list[GameEvent] = []
    from_id = action.payload["from"]
    to_id = action.payload["to"]
    source = state.territories[from_id]
    target = state.territories[to_id]
    old_owner = target.owner

    result = resolve_exchange(source, target, action.player, action.payload["dice_rolls"])
    events.append(attack_resolved(
        action.player,
        from_id,
        to_id,
        result.attacker_die,
        result.defender_die,
        result.attacker_losses,
        result.defender_losses,
        result.conquered,
    ))

    if not result.conquered:
        return state, events

    state.conquered_this_turn = True
    events.append(territory_captured(to_id, old_owner, action.player))

    if old_owner is not None and old_owner in state.players and not state.territories_owned_by(old_owner):
        defeated = state.players[old_owner]
        defeated.is_alive = False
        events.append(player_eliminated(old_owner, action.player))
        if defeated.cards:
            moved = [c.id for c in defeated.cards]
            state.players[action.player].cards.extend(defeated.cards)
            defeated.cards = []
            events.append(cards_transferred(old_owner, action.player, moved))

    owners = {ts.owner for ts in state.territories.values() if ts.owner is not None}
    if owners == {action.player}:
        state.winner = action.player
        events.append(victory(action.player, len(state.territories_owned_by(action.player))))

    return state, events


def _handle_fortify(state: GameState, action: Action) -> tuple[GameState, list[GameEvent]]:
    from_id = action.payload["from"]
    to_id = action.payload["to"]
    amount = action.payload["amount"]

    state.territories[from_id].troops -= amount
    state.territories[to_id].troops += amount

    return state, [troops_fortified(action.player, from_id, to_id, amount)]


def _next_live_index(state: GameState) -> int:
    """Next seat after the current one whose player is still alive."""
    count = len(state.player_order)
    idx = state.current_player_index
    for _ in range(count):
        idx = (idx + 1) % count
        if state.players[state.player_order[idx]].is_alive:
            return idx
    return state.current_player_index


def _end_turn(
    state: GameState,
    map_def: MapDefinition,
    continent_bonuses: bool,
) -> tuple[GameState, list[GameEvent]]:
    """
    End the current turn and advance to the next live player.

    At end of turn:
    - A player who conquered at least once draws the top card, if any remain

    At start of next player's turn:
    - Phase resets to REINFORCE and the unplaced pool is recalculated
    """
    events: list[GameEvent] = []
    old_player = state.current_player_id
    old_index = state.current_player_index

    events.append(turn_ended(state.turn_number, old_player))

    if state.conquered_this_turn and state.deck:
        card = state.deck.pop(0)
        state.players[old_player].cards.append(card)
        events.append(card_awarded(old_player, card.id, len(state.deck)))

    state.current_player_index = _next_live_index(state)
    if state.current_player_index <= old_index:
        state.turn_number += 1

    old_phase = state.phase
    state.phase = REINFORCE
    state.conquered_this_turn = False
    new_player = state.current_player_id
    events.append(phase_changed(old_phase, REINFORCE, new_player))
    events.append(turn_started(state.turn_number, new_player))

    amount, continents = calculate_reinforcements(state, new_player, map_def, continent_bonuses)
    state.unplaced_troops = amount
    events.append(reinforcements_calculated(
        new_player,
        len(state.territories_owned_by(new_player)),
        amount,
        continents,
    ))

    return state, events
