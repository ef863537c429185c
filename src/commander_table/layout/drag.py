"""Selection and drag coordination.

This is client-side state: it remembers what is being dragged and where,
so the view can follow the pointer without touching the GameState. Only
``DragSession.end`` commits anything, and it commits through the same
transition functions as every other intent.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from pydantic import BaseModel, ConfigDict

from ..game.state import GameState, Zone
from ..game.zones import move_cards
from .grid import GridSettings, cell_at, reposition

logger = logging.getLogger(__name__)


class Point(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0

    def __add__(self, other: Point) -> Point:
        return Point(x=self.x + other.x, y=self.y + other.y)


class Rect(BaseModel):
    model_config = ConfigDict(frozen=True)

    left: float
    top: float
    right: float
    bottom: float

    def contains(self, point: Point) -> bool:
        # Half-open, like the view toolkit's hit testing
        return self.left <= point.x < self.right and self.top <= point.y < self.bottom


class DropOutcome(str, Enum):
    NONE = "none"  # nothing was being dragged
    ZONE = "zone"  # moved to another zone
    BATTLEFIELD = "battlefield"  # repositioned on the grid
    SKIPPED = "skipped"  # a zone target already took the drop


class Selection:
    """Ordered set of selected card ids for multi-card actions."""

    def __init__(self) -> None:
        self._ids: dict[str, None] = {}

    @property
    def ids(self) -> list[str]:
        return list(self._ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __contains__(self, instance_id: str) -> bool:
        return instance_id in self._ids

    def select(self, instance_id: str) -> None:
        self._ids.setdefault(instance_id, None)

    def deselect(self, instance_id: str) -> None:
        self._ids.pop(instance_id, None)

    def toggle(self, instance_id: str) -> None:
        if instance_id in self._ids:
            self.deselect(instance_id)
        else:
            self.select(instance_id)

    def clear(self) -> None:
        self._ids.clear()

    def select_all(self, instance_ids: list[str]) -> None:
        self._ids = dict.fromkeys(instance_ids)

    def drag_set(self, primary_id: str) -> list[str]:
        """Cards that move with ``primary_id``: the whole selection if it is part of one."""
        if primary_id in self._ids and len(self._ids) > 1:
            return self.ids
        return [primary_id]


CardAction = Callable[[GameState, str], GameState]


def acting_player_id(state: GameState, local_player_id: str | None = None) -> str | None:
    """Who may act on cards: the local seat, or the active player at a shared screen."""
    if local_player_id is not None:
        return local_player_id
    active = state.active_player
    return active.id if active else None


def apply_to_selection(
    state: GameState,
    selection: Selection,
    primary_id: str,
    player_id: str | None,
    action: CardAction,
) -> tuple[GameState, int]:
    """Run one card action over everything that moves with ``primary_id``.

    Only cards owned by ``player_id`` are touched. Returns the new state and
    the number of cards acted on.
    """
    if player_id is None:
        return state, 0
    acted = 0
    for instance_id in selection.drag_set(primary_id):
        card = state.find_card(instance_id)
        if card is None or card.owner_id != player_id:
            continue
        state = action(state, instance_id)
        acted += 1
    logger.debug(f"Applied action to {acted} card(s) for {player_id}")
    return state, acted


class DragSession:
    """Tracks one drag gesture from start to drop or cancel."""

    def __init__(self, grid: GridSettings | None = None) -> None:
        self.grid = grid or GridSettings()
        self._zone_bounds: dict[Zone, Rect] = {}
        self._reset()

    def _reset(self) -> None:
        self.dragged_ids: list[str] = []
        self.origin = Point()
        self.offset = Point()
        self.hovered_zone: Zone | None = None
        self.handled_by_zone = False

    @property
    def is_dragging(self) -> bool:
        return bool(self.dragged_ids)

    def register_zone(self, zone: Zone, bounds: Rect) -> None:
        self._zone_bounds[zone] = bounds

    def zone_at(self, point: Point) -> Zone | None:
        for zone, bounds in self._zone_bounds.items():
            if bounds.contains(point):
                return zone
        return None

    def start(self, instance_ids: list[str], origin: Point | None = None) -> None:
        """Begin dragging; ``origin`` is the primary card's top-left on the grid."""
        self._reset()
        self.dragged_ids = list(dict.fromkeys(instance_ids))
        self.origin = origin or Point()

    def update(self, offset: Point) -> None:
        """Record the accumulated pointer offset since the drag started."""
        self.offset = offset

    def hover(self, zone: Zone | None) -> None:
        self.hovered_zone = zone

    def claim_for_zone(self) -> None:
        """A zone target has committed this drop; the battlefield must not."""
        self.handled_by_zone = True

    def cancel(self) -> None:
        self._reset()

    def drop_cell(self, columns: int) -> tuple[int, int]:
        """Grid cell under the centre of the dragged card."""
        center = self.origin + self.offset + Point(x=self.grid.card_width / 2, y=self.grid.card_height / 2)
        return cell_at(center.x, center.y, columns, self.grid)

    def end(
        self,
        state: GameState,
        player_id: str,
        columns: int,
        pointer: Point | None = None,
    ) -> tuple[GameState, DropOutcome]:
        """Finish the drag and commit it. The session is clean afterwards.

        A zone under ``pointer`` (or the last hovered zone) wins over the
        grid. Dropping on the battlefield zone itself also brings cards in
        from other zones before placing them. A drop already claimed by a
        zone commits nothing here.
        """
        try:
            if not self.dragged_ids:
                return state, DropOutcome.NONE
            if self.handled_by_zone:
                return state, DropOutcome.SKIPPED

            zone = self.zone_at(pointer) if pointer is not None else None
            zone = zone or self.hovered_zone
            if zone is not None and zone != Zone.BATTLEFIELD:
                logger.debug(f"Dropped {len(self.dragged_ids)} card(s) on {zone.value}")
                return move_cards(state, self.dragged_ids, zone), DropOutcome.ZONE

            if zone == Zone.BATTLEFIELD:
                # Cards dragged in from other zones enter play first
                already_there = {c.id for c in state.battlefield_cards()}
                arriving = [i for i in self.dragged_ids if i not in already_there]
                state = move_cards(state, arriving, Zone.BATTLEFIELD)

            # Cards that are not on this battlefield are left alone
            on_field = {c.id for c in state.battlefield_of(player_id)}
            movers = [i for i in self.dragged_ids if i in on_field]
            target = self.drop_cell(columns)
            return reposition(state, player_id, movers, target, columns, self.grid), DropOutcome.BATTLEFIELD
        finally:
            self._reset()
