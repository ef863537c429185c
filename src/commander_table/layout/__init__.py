"""Layout package: battlefield grid and drag coordination.

    from commander_table.layout import arrange, reposition, DragSession
"""

from .drag import (
    CardAction,
    DragSession,
    DropOutcome,
    Point,
    Rect,
    Selection,
    acting_player_id,
    apply_to_selection,
)
from .grid import (
    BattlefieldLayout,
    GridSettings,
    GridSlot,
    arrange,
    cell_at,
    clear_grid_position,
    column_count,
    layout_for,
    plan_drop,
    reposition,
    set_grid_position,
)

__all__ = [
    "BattlefieldLayout",
    "CardAction",
    "DragSession",
    "DropOutcome",
    "GridSettings",
    "GridSlot",
    "Point",
    "Rect",
    "Selection",
    "acting_player_id",
    "apply_to_selection",
    "arrange",
    "cell_at",
    "clear_grid_position",
    "column_count",
    "layout_for",
    "plan_drop",
    "reposition",
    "set_grid_position",
]
