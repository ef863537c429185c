"""Game setup: seating players, loading decks, opening hands."""

from __future__ import annotations

import logging
import random

from ..cards.decks import Deck
from ..settings import settings
from .state import CardInstance, GameState, Player, Zone
from .zones import InvalidActionError, draw_cards, move_cards, shuffle_library

logger = logging.getLogger(__name__)


def new_game(player_names: list[str], game_id: str | None = None) -> GameState:
    """Seat the players; the first name is the first active player."""
    if not player_names:
        raise InvalidActionError("A game needs at least one player")
    if len(player_names) > settings.max_players:
        raise InvalidActionError(
            f"At most {settings.max_players} players can sit at the table, got {len(player_names)}"
        )
    players = tuple(Player(name=name, life=settings.starting_life) for name in player_names)
    state = GameState(players=players) if game_id is None else GameState(game_id=game_id, players=players)
    logger.info(f"New game {state.game_id} with {', '.join(player_names)}")
    return state


def load_deck(state: GameState, player_id: str, deck: Deck, rng: random.Random | None = None) -> GameState:
    """Give a player a fresh copy of a deck: commander out, library shuffled.

    Any cards the player already owned are removed, so reloading a deck
    never duplicates it.
    """
    if state.find_player(player_id) is None:
        logger.debug(f"load_deck: no player {player_id}")
        return state

    commander = CardInstance(card=deck.commander, owner_id=player_id, zone=Zone.COMMAND_ZONE)
    library = [CardInstance(card=card, owner_id=player_id, zone=Zone.LIBRARY) for card in deck.cards]
    kept = tuple(c for c in state.instances if c.owner_id != player_id)
    state = state.with_instances(kept + (commander,) + tuple(library))
    logger.info(f"Loaded {deck.name!r} for {player_id}")
    return shuffle_library(state, player_id, rng)


def draw_opening_hand(state: GameState, player_id: str, count: int | None = None) -> GameState:
    return draw_cards(state, player_id, settings.starting_hand_size if count is None else count)


def mulligan(state: GameState, player_id: str, rng: random.Random | None = None) -> GameState:
    """Shuffle the hand back and draw a new opening hand."""
    hand = [c.id for c in state.cards_in_zone(player_id, Zone.HAND)]
    state = move_cards(state, hand, Zone.LIBRARY)
    state = shuffle_library(state, player_id, rng)
    return draw_opening_hand(state, player_id)
