"""Token creation utility for the game engine."""

from __future__ import annotations

import logging
from typing import Optional

from ..cards.models import Card, Color
from .state import CardInstance, GameState, Zone
from .zones import InvalidActionError

logger = logging.getLogger(__name__)


def make_token_card(
    name: str,
    type_line: str = "Token Creature",
    power: Optional[str] = None,
    toughness: Optional[str] = None,
    colors: list[Color] | None = None,
    image_uri: Optional[str] = None,
    oracle_text: Optional[str] = None,
) -> Card:
    """Synthesize the Card behind a token; tokens have no catalog id."""
    return Card(
        name=name,
        type_line=type_line,
        power=power,
        toughness=toughness,
        colors=colors or [],
        image_uri=image_uri,
        oracle_text=oracle_text,
    )


def create_tokens(
    state: GameState,
    player_id: str,
    name: str,
    type_line: str = "Token Creature",
    power: Optional[str] = None,
    toughness: Optional[str] = None,
    colors: list[Color] | None = None,
    image_uri: Optional[str] = None,
    quantity: int = 1,
) -> GameState:
    """Put ``quantity`` copies of a token onto a player's battlefield."""
    if not name or not name.strip():
        raise InvalidActionError("Token name cannot be blank")
    if quantity <= 0:
        raise InvalidActionError(f"Token quantity must be positive, got {quantity}")
    if state.find_player(player_id) is None:
        logger.debug(f"create_tokens: no player {player_id}")
        return state

    card = make_token_card(name, type_line, power, toughness, colors, image_uri)
    tokens = [CardInstance(card=card, owner_id=player_id, zone=Zone.BATTLEFIELD) for _ in range(quantity)]
    logger.debug(f"Created {quantity}x {name} for {player_id}")
    return state.with_instances(state.instances + tuple(tokens))
