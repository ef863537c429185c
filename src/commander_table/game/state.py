"""Core game state models.

Every model here is frozen. Operations in ``zones``, ``turns``, ``tokens``
and ``setup`` take a GameState and return a new one; nothing is mutated in
place, so a caller can keep any earlier snapshot around.

Library order lives in ``GameState.instances`` itself: the relative order
of one player's LIBRARY instances is their deck order, and the last of them
is the top of the library. The positions of all other instances carry no
meaning.
"""

from __future__ import annotations

import itertools
import uuid
from enum import Enum
from typing import Callable, Iterable, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..cards.models import Card
from ..settings import settings


class Zone(str, Enum):
    LIBRARY = "library"
    HAND = "hand"
    BATTLEFIELD = "battlefield"
    GRAVEYARD = "graveyard"
    EXILE = "exile"
    COMMAND_ZONE = "command_zone"
    STACK = "stack"


# Zones where a card may be controlled by someone other than its owner
CONTROL_ZONES = frozenset({Zone.BATTLEFIELD, Zone.STACK})


class Phase(str, Enum):
    UNTAP = "untap"
    UPKEEP = "upkeep"
    DRAW = "draw"
    MAIN_1 = "main_1"
    COMBAT_BEGIN = "combat_begin"
    COMBAT_DECLARE_ATTACKERS = "combat_declare_attackers"
    COMBAT_DECLARE_BLOCKERS = "combat_declare_blockers"
    COMBAT_DAMAGE = "combat_damage"
    COMBAT_END = "combat_end"
    MAIN_2 = "main_2"
    END = "end"
    CLEANUP = "cleanup"


PHASE_ORDER = list(Phase)

_placement_sequence = itertools.count(1)


def next_placement() -> int:
    """Strictly increasing stamp for ordering placements.

    The sequence is process-local. Operations that re-stamp a card already in
    a state use ``GameState.next_placed_timestamp`` so a restored state still
    orders new placements above old ones.
    """
    return next(_placement_sequence)


def _short_id() -> str:
    return str(uuid.uuid4())[:8]


class CardInstance(BaseModel):
    """A specific physical card in a game."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_short_id)
    card: Card
    owner_id: str
    controller_id: str = ""  # defaults to owner_id
    zone: Zone = Zone.LIBRARY
    tapped: bool = False
    flipped: bool = False
    face_down: bool = False
    doesnt_untap: bool = False
    counters: dict[str, int] = Field(default_factory=dict)  # e.g. "+1/+1" -> 3
    attached_to: Optional[str] = None  # id of the instance this is attached to
    grid_x: Optional[int] = None  # None = auto-arrange
    grid_y: Optional[int] = None
    power_modifier: int = 0
    toughness_modifier: int = 0
    annotation: Optional[str] = None
    placed_timestamp: int = Field(default_factory=next_placement)

    @model_validator(mode="before")
    @classmethod
    def _default_controller(cls, data):
        if isinstance(data, dict) and not data.get("controller_id"):
            data = {**data, "controller_id": data.get("owner_id", "")}
        return data

    @property
    def name(self) -> str:
        return self.card.name

    @property
    def has_grid_position(self) -> bool:
        return self.grid_x is not None and self.grid_y is not None

    @property
    def power(self) -> Optional[str]:
        return self._display_stat(self.card.power, self.power_modifier)

    @property
    def toughness(self) -> Optional[str]:
        return self._display_stat(self.card.toughness, self.toughness_modifier)

    def _display_stat(self, printed: Optional[str], modifier: int) -> Optional[str]:
        if printed is None:
            return None
        try:
            base = int(printed)
        except ValueError:
            # "*", "1+*" and friends are shown as printed
            return printed
        counters = self.counters.get("+1/+1", 0) - self.counters.get("-1/-1", 0)
        return str(base + modifier + counters)


class Player(BaseModel):
    """A seat at the table."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_short_id)
    name: str
    life: int = Field(default_factory=lambda: settings.starting_life)
    commander_damage: dict[str, int] = Field(default_factory=dict)  # source instance id -> damage
    has_lost: bool = False


def derive_has_lost(player: Player, life: int, commander_damage: Mapping[str, int]) -> bool:
    """Loss is permanent: a player who has lost stays lost."""
    return (
        player.has_lost
        or life <= 0
        or any(d >= settings.commander_damage_threshold for d in commander_damage.values())
    )


class GameState(BaseModel):
    """Complete snapshot of a game in progress."""

    model_config = ConfigDict(frozen=True)

    game_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    players: tuple[Player, ...] = ()
    instances: tuple[CardInstance, ...] = ()
    active_player_index: int = 0
    turn_number: int = 1
    phase: Phase = Phase.UNTAP

    @property
    def resolved_active_index(self) -> int:
        """The stored index clamped onto the seats; 0 when nobody is seated."""
        # Players may leave mid-game, so never trust the stored index
        if not self.players:
            return 0
        return min(max(self.active_player_index, 0), len(self.players) - 1)

    @property
    def active_player(self) -> Player | None:
        if not self.players:
            return None
        return self.players[self.resolved_active_index]

    def find_card(self, instance_id: str) -> CardInstance | None:
        for c in self.instances:
            if c.id == instance_id:
                return c
        return None

    def find_player(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def cards_in_zone(self, player_id: str, zone: Zone) -> list[CardInstance]:
        """Cards in a player's zone: by controller on the battlefield, by owner elsewhere."""
        if zone == Zone.BATTLEFIELD:
            return self.battlefield_of(player_id)
        return [c for c in self.instances if c.owner_id == player_id and c.zone == zone]

    def card_count(self, player_id: str, zone: Zone) -> int:
        return len(self.cards_in_zone(player_id, zone))

    def battlefield_of(self, player_id: str) -> list[CardInstance]:
        return [c for c in self.instances if c.controller_id == player_id and c.zone == Zone.BATTLEFIELD]

    def library_of(self, player_id: str) -> list[CardInstance]:
        """A player's library, bottom first, top last."""
        return self.cards_in_zone(player_id, Zone.LIBRARY)

    def battlefield_cards(self) -> list[CardInstance]:
        return [c for c in self.instances if c.zone == Zone.BATTLEFIELD]

    def all_commanders(self) -> list[CardInstance]:
        return [
            c for c in self.instances
            if c.zone == Zone.COMMAND_ZONE
            or (c.zone == Zone.BATTLEFIELD and "legendary creature" in (c.card.type_line or "").lower())
        ]

    def active_players(self) -> list[Player]:
        return [p for p in self.players if not p.has_lost]

    def next_placed_timestamp(self) -> int:
        """A stamp above every placement already in this state."""
        return max([next_placement()] + [c.placed_timestamp + 1 for c in self.instances])

    # -- copy helpers used by the transition modules --

    def with_instances(self, instances: Iterable[CardInstance]) -> GameState:
        return self.model_copy(update={"instances": tuple(instances)})

    def update_instance(self, instance_id: str, update: Callable[[CardInstance], CardInstance]) -> GameState:
        return self.with_instances(update(c) if c.id == instance_id else c for c in self.instances)

    def update_player(self, player_id: str, update: Callable[[Player], Player]) -> GameState:
        return self.model_copy(
            update={"players": tuple(update(p) if p.id == player_id else p for p in self.players)}
        )
