"""Turn and phase sequencing.

The phase machine never untaps anything on its own and never ends the
game: callers watch for UNTAP and call ``untap_all``, and consult
``zones.check_game_end`` for the end of the game.
"""

from __future__ import annotations

import logging

from .state import PHASE_ORDER, GameState, Phase, Zone

logger = logging.getLogger(__name__)


def next_phase(phase: Phase) -> Phase:
    return PHASE_ORDER[(PHASE_ORDER.index(phase) + 1) % len(PHASE_ORDER)]


def advance_phase(state: GameState) -> GameState:
    """Step to the next phase, starting a new turn after CLEANUP."""
    phase = next_phase(state.phase)
    if phase != Phase.UNTAP:
        return state.model_copy(update={"phase": phase})

    player_count = len(state.players)
    index = (state.resolved_active_index + 1) % player_count if player_count else 0
    new_state = state.model_copy(update={
        "phase": phase,
        "active_player_index": index,
        "turn_number": state.turn_number + 1,
    })
    active = new_state.active_player
    logger.info(f"Turn {new_state.turn_number}: {active.name if active else 'nobody'} is active")
    return new_state


def pass_turn(state: GameState) -> GameState:
    """Skip the rest of the current turn, stopping at the next player's UNTAP."""
    state = advance_phase(state)
    while state.phase != Phase.UNTAP:
        state = advance_phase(state)
    return state


def untap_all(state: GameState, player_id: str) -> GameState:
    """Untap every permanent a player controls, except those that don't untap."""
    return state.with_instances(
        c.model_copy(update={"tapped": False})
        if c.controller_id == player_id and c.zone == Zone.BATTLEFIELD and c.tapped and not c.doesnt_untap
        else c
        for c in state.instances
    )
