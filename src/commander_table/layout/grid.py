"""Battlefield grid layout.

A player's battlefield is a grid of cells, each holding a small stack of up
to ``capacity`` cards drawn with a diagonal offset. Cards with both grid
coordinates set stay where the user put them; everything else is packed
into the first cell with room, scanning row by row.

Nothing here fails for lack of space. A full grid degrades to stacking
cards past capacity, since the grid is a visual aid and not a rule.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field

from ..game.state import CardInstance, GameState
from ..settings import settings

logger = logging.getLogger(__name__)

Cell = tuple[int, int]  # (column, row)


class GridSettings(BaseModel):
    """Grid geometry, in the same units as container widths and drop points."""

    model_config = ConfigDict(frozen=True)

    capacity: int = Field(default_factory=lambda: settings.grid_cell_capacity, ge=1)
    max_rows: int = Field(default_factory=lambda: settings.grid_max_rows, ge=1)
    card_width: float = Field(default_factory=lambda: settings.grid_card_width, gt=0)
    card_height: float = Field(default_factory=lambda: settings.grid_card_height, gt=0)
    spacing: float = Field(default_factory=lambda: settings.grid_spacing, ge=0)
    stack_offset_ratio: float = Field(default_factory=lambda: settings.grid_stack_offset_ratio, ge=0)

    @property
    def cell_width(self) -> float:
        return self.card_width + self.spacing

    @property
    def cell_height(self) -> float:
        return self.card_height + self.spacing


class GridSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    column: int
    row: int
    stack_index: int = 0  # 0 = bottom of the stack

    @property
    def cell(self) -> Cell:
        return (self.column, self.row)


class BattlefieldLayout(BaseModel):
    """Where every card of one battlefield is drawn."""

    model_config = ConfigDict(frozen=True)

    columns: int
    slots: dict[str, GridSlot] = Field(default_factory=dict)
    grid: GridSettings = Field(default_factory=GridSettings)

    @property
    def rows(self) -> int:
        last_row = max((s.row for s in self.slots.values()), default=0)
        return min(last_row + 1, self.grid.max_rows)

    def slot_for(self, instance_id: str) -> GridSlot | None:
        return self.slots.get(instance_id)

    def pixel_position(self, instance_id: str) -> tuple[float, float] | None:
        """Top-left corner of a card, including its stack offset."""
        slot = self.slots.get(instance_id)
        if slot is None:
            return None
        g = self.grid
        x = slot.column * g.cell_width + slot.stack_index * g.card_width * g.stack_offset_ratio
        y = slot.row * g.cell_height + slot.stack_index * g.card_height * g.stack_offset_ratio
        return (x, y)

    def draw_order(self) -> list[str]:
        """Ids in painting order: row by row, then column, then up each stack."""
        return sorted(self.slots, key=lambda i: (self.slots[i].row, self.slots[i].column, self.slots[i].stack_index))

    def occupancy(self, exclude: Iterable[str] = ()) -> Counter[Cell]:
        skip = set(exclude)
        return Counter(s.cell for i, s in self.slots.items() if i not in skip)


def column_count(container_width: float, grid: GridSettings | None = None) -> int:
    grid = grid or GridSettings()
    return max(1, int(container_width // grid.cell_width))


def arrange(cards: Iterable[CardInstance], columns: int, grid: GridSettings | None = None) -> BattlefieldLayout:
    """Lay out a battlefield.

    Explicit positions are trusted as-is, even past capacity. Auto cards
    take the first cell, row by row from (0, 0), that holds fewer than
    ``capacity`` cards within ``columns * max_rows`` cells; if none does
    they are stacked on (0, 0). Stack indexes follow placement order and
    stop at ``capacity - 1``.
    """
    grid = grid or GridSettings()
    columns = max(1, columns)
    cards = list(cards)

    positions: dict[str, Cell] = {}
    occupied: Counter[Cell] = Counter()
    for card in cards:
        if card.has_grid_position:
            cell = (card.grid_x, card.grid_y)
            positions[card.id] = cell
            occupied[cell] += 1

    search_limit = columns * grid.max_rows
    cursor = 0  # cells before the cursor are known to be full
    for card in cards:
        if card.has_grid_position:
            continue
        while cursor < search_limit and occupied[(cursor % columns, cursor // columns)] >= grid.capacity:
            cursor += 1
        if cursor < search_limit:
            cell = (cursor % columns, cursor // columns)
        else:
            logger.warning(f"Battlefield full, stacking {card.name} on (0, 0)")
            cell = (0, 0)
        positions[card.id] = cell
        occupied[cell] += 1

    # Within a cell, the most recently placed card sits on top
    stack_heights: Counter[Cell] = Counter()
    slots = {}
    for card in sorted(cards, key=lambda c: c.placed_timestamp):
        column, row = positions[card.id]
        index = min(stack_heights[(column, row)], grid.capacity - 1)
        stack_heights[(column, row)] += 1
        slots[card.id] = GridSlot(column=column, row=row, stack_index=index)

    return BattlefieldLayout(columns=columns, slots=slots, grid=grid)


def cell_at(x: float, y: float, columns: int, grid: GridSettings | None = None) -> Cell:
    """The grid cell under a point, clamped onto the grid."""
    grid = grid or GridSettings()
    column = min(max(int(x // grid.cell_width), 0), max(columns, 1) - 1)
    row = min(max(int(y // grid.cell_height), 0), grid.max_rows - 1)
    return (column, row)


def plan_drop(
    cards: Iterable[CardInstance],
    moving_ids: Iterable[str],
    target: Cell,
    columns: int,
    grid: GridSettings | None = None,
) -> list[tuple[str, Cell]]:
    """Decide where each dragged card lands when dropped on ``target``.

    Cards are placed one at a time in the order given. Each placement counts
    the cards already drawn in a cell (other than the ones being moved) plus
    the dragged cards placed so far; a full cell sends the card forward row
    by row to the next cell with room. When the search runs off the last
    row the card goes to the last cell examined.
    """
    grid = grid or GridSettings()
    columns = max(1, columns)
    cards = list(cards)
    on_field = {c.id for c in cards}
    moving = [i for i in dict.fromkeys(moving_ids) if i in on_field]

    occupied = arrange(cards, columns, grid).occupancy(exclude=moving)
    plan = []
    for instance_id in moving:
        column, row = target
        while occupied[(column, row)] >= grid.capacity:
            next_column, next_row = column + 1, row
            if next_column >= columns:
                next_column, next_row = 0, row + 1
            if next_row >= grid.max_rows:
                logger.warning(f"No room left on the grid, stacking {instance_id} on {(column, row)}")
                break
            column, row = next_column, next_row
        occupied[(column, row)] += 1
        plan.append((instance_id, (column, row)))
    return plan


def set_grid_position(state: GameState, instance_id: str, x: int, y: int) -> GameState:
    """Pin a card to a cell; re-stamps it so later placements sort above it."""
    if state.find_card(instance_id) is None:
        logger.debug(f"set_grid_position: no instance {instance_id}")
        return state
    stamp = state.next_placed_timestamp()
    return state.update_instance(
        instance_id,
        lambda c: c.model_copy(update={"grid_x": x, "grid_y": y, "placed_timestamp": stamp}),
    )


def clear_grid_position(state: GameState, instance_id: str) -> GameState:
    """Hand a card back to auto-arrangement."""
    return state.update_instance(instance_id, lambda c: c.model_copy(update={"grid_x": None, "grid_y": None}))


def reposition(
    state: GameState,
    player_id: str,
    instance_ids: Iterable[str],
    target: Cell,
    columns: int,
    grid: GridSettings | None = None,
) -> GameState:
    """Drop cards onto a player's battlefield grid at ``target``."""
    battlefield = state.battlefield_of(player_id)
    for instance_id, (column, row) in plan_drop(battlefield, instance_ids, target, columns, grid):
        state = set_grid_position(state, instance_id, column, row)
    return state


def layout_for(state: GameState, player_id: str, container_width: float, grid: GridSettings | None = None) -> BattlefieldLayout:
    """Layout of one player's battlefield for a container of the given width."""
    grid = grid or GridSettings()
    return arrange(state.battlefield_of(player_id), column_count(container_width, grid), grid)

