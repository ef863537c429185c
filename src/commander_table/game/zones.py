"""Zone transition engine: the only code that moves cards and changes life totals.

Every function takes a GameState and returns a new one. Ids that no longer
resolve are tolerated and return the state unchanged, because a client may
act on a card that another path has already moved. Malformed arguments
raise InvalidActionError before anything changes.
"""

from __future__ import annotations

import logging
import random
from typing import Iterable

from .state import CONTROL_ZONES, CardInstance, GameState, Player, Zone, derive_has_lost

logger = logging.getLogger(__name__)


class InvalidActionError(ValueError):
    """An action was rejected because its arguments are malformed."""


# ── Helpers ──────────────────────────────────────────────────────────

def relocate(card: CardInstance, zone: Zone) -> CardInstance:
    """Return the instance in a new zone, shedding state that can't follow it there."""
    update: dict = {"zone": zone}
    if zone not in CONTROL_ZONES:
        update["controller_id"] = card.owner_id
    if zone != Zone.BATTLEFIELD:
        update.update(grid_x=None, grid_y=None, attached_to=None)
    return card.model_copy(update=update)


def _split_library(state: GameState, player_id: str) -> tuple[list[CardInstance], list[CardInstance]]:
    """(everything else, the player's library bottom-to-top), both in current order."""
    others, library = [], []
    for c in state.instances:
        if c.owner_id == player_id and c.zone == Zone.LIBRARY:
            library.append(c)
        else:
            others.append(c)
    return others, library


def _mark_lost(state: GameState, player_id: str, reason: str) -> GameState:
    logger.info(f"Player {player_id} loses: {reason}")
    return state.update_player(player_id, lambda p: p.model_copy(update={"has_lost": True}))


def _require_counter_args(counter_type: str, amount: int) -> None:
    if not counter_type or not counter_type.strip():
        raise InvalidActionError("Counter type cannot be blank")
    if amount <= 0:
        raise InvalidActionError(f"Counter amount must be positive, got {amount}")


def _require_count(count: int) -> None:
    if count < 0:
        raise InvalidActionError(f"Card count cannot be negative, got {count}")


# ── Moving cards ─────────────────────────────────────────────────────

def move_card(state: GameState, instance_id: str, zone: Zone) -> GameState:
    """Move one instance to a zone. Unknown ids are ignored.

    A card entering the library from elsewhere goes on top.
    """
    card = state.find_card(instance_id)
    if card is None:
        logger.debug(f"move_card: no instance {instance_id}")
        return state
    if zone == Zone.LIBRARY and card.zone != Zone.LIBRARY:
        return move_to_library_top(state, instance_id)
    return state.update_instance(instance_id, lambda c: relocate(c, zone))


def move_cards(state: GameState, instance_ids: Iterable[str], zone: Zone) -> GameState:
    for instance_id in instance_ids:
        state = move_card(state, instance_id, zone)
    return state


def give_control(state: GameState, instance_id: str, new_controller_id: str) -> GameState:
    """Hand a card to another player; it lands on their battlefield."""
    if state.find_card(instance_id) is None:
        logger.debug(f"give_control: no instance {instance_id}")
        return state
    return state.update_instance(
        instance_id,
        lambda c: relocate(c, Zone.BATTLEFIELD).model_copy(update={"controller_id": new_controller_id}),
    )


# ── Library ──────────────────────────────────────────────────────────

def draw_card(state: GameState, player_id: str) -> GameState:
    """Move the top of the library to hand, or lose if the library is empty."""
    if state.find_player(player_id) is None:
        logger.debug(f"draw_card: no player {player_id}")
        return state
    library = state.library_of(player_id)
    if not library:
        return _mark_lost(state, player_id, "drew from an empty library")
    return move_card(state, library[-1].id, Zone.HAND)


def draw_cards(state: GameState, player_id: str, count: int) -> GameState:
    _require_count(count)
    for _ in range(count):
        state = draw_card(state, player_id)
    return state


def shuffle_library(state: GameState, player_id: str, rng: random.Random | None = None) -> GameState:
    """Randomly reorder one player's library; nothing else moves relative to itself."""
    others, library = _split_library(state, player_id)
    (rng or random).shuffle(library)
    return state.with_instances(others + library)


def shuffle_subset(
    state: GameState,
    player_id: str,
    count: int,
    from_top: bool = True,
    rng: random.Random | None = None,
) -> GameState:
    """Shuffle only the top (or bottom) ``count`` cards of a library."""
    others, library = _split_library(state, player_id)
    count = min(count, len(library))
    if count <= 1:
        return state

    if from_top:
        rest, chunk = library[:-count], library[-count:]
        (rng or random).shuffle(chunk)
        library = rest + chunk
    else:
        chunk, rest = library[:count], library[count:]
        (rng or random).shuffle(chunk)
        library = chunk + rest
    return state.with_instances(others + library)


def move_to_library_position(
    state: GameState,
    instance_id: str,
    position: int,
    from_bottom: bool = False,
) -> GameState:
    """Put a card into its owner's library at a position counted from the top or bottom.

    Position 1 from the top is the top card; position N from the top leaves
    N-1 cards above it. From the bottom, N leaves N-1 cards below it.
    """
    card = state.find_card(instance_id)
    if card is None:
        logger.debug(f"move_to_library_position: no instance {instance_id}")
        return state

    remaining = state.with_instances(c for c in state.instances if c.id != instance_id)
    others, library = _split_library(remaining, card.owner_id)
    if from_bottom:
        index = position - 1
    else:
        index = len(library) - position + 1
    index = min(max(index, 0), len(library))
    library.insert(index, relocate(card, Zone.LIBRARY))
    return state.with_instances(others + library)


def move_to_library_top(state: GameState, instance_id: str) -> GameState:
    return move_to_library_position(state, instance_id, 1)


def move_to_library_bottom(state: GameState, instance_id: str) -> GameState:
    return move_to_library_position(state, instance_id, 1, from_bottom=True)


def top_cards(state: GameState, player_id: str, count: int) -> list[CardInstance]:
    """The top ``count`` cards of a library, bottom-most first."""
    _require_count(count)
    library = state.library_of(player_id)
    return library[len(library) - min(count, len(library)):]


def bottom_cards(state: GameState, player_id: str, count: int) -> list[CardInstance]:
    _require_count(count)
    return state.library_of(player_id)[:count]


def move_top_cards_to_zone(state: GameState, player_id: str, count: int, zone: Zone) -> GameState:
    return move_cards(state, [c.id for c in top_cards(state, player_id, count)], zone)


def move_bottom_cards_to_zone(state: GameState, player_id: str, count: int, zone: Zone) -> GameState:
    return move_cards(state, [c.id for c in bottom_cards(state, player_id, count)], zone)


def mill(state: GameState, player_id: str, count: int) -> GameState:
    """Put the top ``count`` cards into the graveyard.

    Milling more cards than a non-empty library holds empties it and the
    player loses, the same as drawing from an empty library.
    """
    _require_count(count)
    if state.find_player(player_id) is None:
        logger.debug(f"mill: no player {player_id}")
        return state
    library_size = state.card_count(player_id, Zone.LIBRARY)
    state = move_top_cards_to_zone(state, player_id, count, Zone.GRAVEYARD)
    if count > library_size > 0:
        state = _mark_lost(state, player_id, f"milled {count} from a library of {library_size}")
    return state


# ── Card status ──────────────────────────────────────────────────────

def add_counter(state: GameState, instance_id: str, counter_type: str, amount: int = 1) -> GameState:
    _require_counter_args(counter_type, amount)

    def add(c: CardInstance) -> CardInstance:
        counters = dict(c.counters)
        counters[counter_type] = counters.get(counter_type, 0) + amount
        return c.model_copy(update={"counters": counters})

    return state.update_instance(instance_id, add)


def remove_counter(state: GameState, instance_id: str, counter_type: str, amount: int = 1) -> GameState:
    """Remove counters, flooring at zero; an emptied counter type disappears."""
    _require_counter_args(counter_type, amount)

    def remove(c: CardInstance) -> CardInstance:
        counters = dict(c.counters)
        remaining = max(counters.get(counter_type, 0) - amount, 0)
        if remaining:
            counters[counter_type] = remaining
        else:
            counters.pop(counter_type, None)
        return c.model_copy(update={"counters": counters})

    return state.update_instance(instance_id, remove)


def _set_fields(state: GameState, instance_id: str, **fields) -> GameState:
    return state.update_instance(instance_id, lambda c: c.model_copy(update=fields))


def tap(state: GameState, instance_id: str) -> GameState:
    return _set_fields(state, instance_id, tapped=True)


def untap(state: GameState, instance_id: str) -> GameState:
    return _set_fields(state, instance_id, tapped=False)


def toggle_tap(state: GameState, instance_id: str) -> GameState:
    return state.update_instance(instance_id, lambda c: c.model_copy(update={"tapped": not c.tapped}))


def flip(state: GameState, instance_id: str) -> GameState:
    return state.update_instance(instance_id, lambda c: c.model_copy(update={"flipped": not c.flipped}))


def set_face_down(state: GameState, instance_id: str, face_down: bool) -> GameState:
    return _set_fields(state, instance_id, face_down=face_down)


def set_doesnt_untap(state: GameState, instance_id: str, doesnt_untap: bool) -> GameState:
    return _set_fields(state, instance_id, doesnt_untap=doesnt_untap)


def set_annotation(state: GameState, instance_id: str, annotation: str | None) -> GameState:
    if annotation is not None and not annotation.strip():
        annotation = None  # blank notes clear the annotation
    return _set_fields(state, instance_id, annotation=annotation)


def set_modifiers(state: GameState, instance_id: str, power: int, toughness: int) -> GameState:
    return _set_fields(state, instance_id, power_modifier=power, toughness_modifier=toughness)


def attach(state: GameState, source_id: str, target_id: str) -> GameState:
    """Attach an aura or equipment to another instance."""
    if source_id == target_id:
        raise InvalidActionError("A card cannot be attached to itself")
    if state.find_card(target_id) is None:
        logger.debug(f"attach: no target {target_id}")
        return state
    return _set_fields(state, source_id, attached_to=target_id)


def detach(state: GameState, instance_id: str) -> GameState:
    return _set_fields(state, instance_id, attached_to=None)


# ── Players ──────────────────────────────────────────────────────────

def _update_player_totals(
    state: GameState, player_id: str, life: int | None = None, commander_damage: dict[str, int] | None = None
) -> GameState:
    def update(p: Player) -> Player:
        new_life = p.life if life is None else life
        new_damage = p.commander_damage if commander_damage is None else commander_damage
        has_lost = derive_has_lost(p, new_life, new_damage)
        if has_lost and not p.has_lost:
            logger.info(f"Player {p.name} loses (life {new_life})")
        return p.model_copy(update={"life": new_life, "commander_damage": new_damage, "has_lost": has_lost})

    return state.update_player(player_id, update)


def update_life(state: GameState, player_id: str, life: int) -> GameState:
    """Set a life total. Reaching 0 or less is a permanent loss."""
    return _update_player_totals(state, player_id, life=life)


def update_commander_damage(state: GameState, player_id: str, source_id: str, damage: int) -> GameState:
    """Set the damage one commander has dealt a player."""
    if damage < 0:
        raise InvalidActionError(f"Commander damage cannot be negative, got {damage}")
    player = state.find_player(player_id)
    if player is None:
        logger.debug(f"update_commander_damage: no player {player_id}")
        return state
    return _update_player_totals(
        state, player_id, commander_damage={**player.commander_damage, source_id: damage}
    )


def mark_player_lost(state: GameState, player_id: str) -> GameState:
    """A player concedes or leaves the game."""
    if state.find_player(player_id) is None:
        return state
    return _mark_lost(state, player_id, "conceded")


def check_game_end(state: GameState) -> bool:
    """The game is over once fewer than two players are still in it."""
    return len(state.active_players()) < 2
