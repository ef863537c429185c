"""Rich terminal view of a game snapshot."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from .cards.models import Color
from .game.state import CardInstance, GameState, Phase, Player, Zone
from .layout.grid import GridSettings, arrange


# ── Phase display names ──────────────────────────────────────────────

PHASE_DISPLAY = {
    Phase.UNTAP: "Untap",
    Phase.UPKEEP: "Upkeep",
    Phase.DRAW: "Draw",
    Phase.MAIN_1: "Main 1",
    Phase.COMBAT_BEGIN: "Combat",
    Phase.COMBAT_DECLARE_ATTACKERS: "Attackers",
    Phase.COMBAT_DECLARE_BLOCKERS: "Blockers",
    Phase.COMBAT_DAMAGE: "Damage",
    Phase.COMBAT_END: "End Combat",
    Phase.MAIN_2: "Main 2",
    Phase.END: "End Step",
    Phase.CLEANUP: "Cleanup",
}

# Simplified phase bar; combat steps light up the Combat entry
PHASE_BAR_PHASES = [
    Phase.UNTAP, Phase.UPKEEP, Phase.DRAW, Phase.MAIN_1,
    Phase.COMBAT_BEGIN, Phase.MAIN_2, Phase.END,
]

_COMBAT_PHASES = {
    Phase.COMBAT_BEGIN, Phase.COMBAT_DECLARE_ATTACKERS,
    Phase.COMBAT_DECLARE_BLOCKERS, Phase.COMBAT_DAMAGE, Phase.COMBAT_END,
}

_COLOR_STYLE = {
    Color.BLACK: "magenta",
    Color.RED: "red",
    Color.WHITE: "bright_white",
    Color.BLUE: "blue",
    Color.GREEN: "green",
}

CELL_WIDTH = 20  # characters per grid cell


# ── Card helpers ─────────────────────────────────────────────────────

def _get_card_color(card: CardInstance) -> str:
    """Return a Rich style string for the card's MTG color."""
    colors = card.card.colors
    if "land" in (card.card.type_line or "").lower():
        return "yellow"
    if len(colors) > 1:
        return "cyan"
    if len(colors) == 1:
        return _COLOR_STYLE.get(colors[0], "bright_black")
    return "bright_black"


def _truncate(name: str, width: int) -> str:
    if len(name) <= width:
        return name.ljust(width)
    return name[: width - 1] + "…"


def card_label(card: CardInstance, width: int = CELL_WIDTH - 2) -> str:
    """One-line card summary: name, P/T, counters, tapped marker."""
    if card.face_down:
        return "(face down)".ljust(width)
    parts = [card.name]
    if card.power is not None and card.toughness is not None:
        parts.append(f"{card.power}/{card.toughness}")
    for kind, n in card.counters.items():
        parts.append(f"{kind}x{n}")
    if card.tapped:
        parts.append("⟳")
    return escape(_truncate(" ".join(parts), width))


# ── Phase bar ────────────────────────────────────────────────────────

def render_phase_bar(phase: Phase) -> str:
    """Return a Rich-markup phase tracker string."""
    parts = []
    for p in PHASE_BAR_PHASES:
        name = PHASE_DISPLAY[p]
        is_active = phase == p or (p == Phase.COMBAT_BEGIN and phase in _COMBAT_PHASES)
        if is_active:
            parts.append(f"[bold bright_white]●{name}[/bold bright_white]")
        else:
            parts.append(f"[dim]{name}[/dim]")
    return " ─ ".join(parts)


# ── Info bar ─────────────────────────────────────────────────────────

def _life_color(life: int) -> str:
    if life <= 10:
        return "red"
    if life <= 20:
        return "yellow"
    return "green"


def render_info_bar(state: GameState, player: Player) -> str:
    """Return Rich markup for a player's stat line."""
    if player.has_lost:
        return f"[bold red]✗ {escape(player.name)} has lost[/bold red]"

    lc = _life_color(player.life)
    parts = [f"[{lc} bold]♥ {player.life}[/{lc} bold]"]
    for zone, label in [(Zone.LIBRARY, "Lib"), (Zone.HAND, "Hand"), (Zone.GRAVEYARD, "GY"), (Zone.EXILE, "Exile")]:
        parts.append(f"[bright_black]{label} {state.card_count(player.id, zone)}[/bright_black]")

    names = {c.id: c.name for c in state.instances}
    for source_id, damage in player.commander_damage.items():
        if damage:
            parts.append(f"[bright_red]⚔ {escape(names.get(source_id, source_id))} {damage}[/bright_red]")
    return "   ".join(parts)


# ── Battlefield grid ─────────────────────────────────────────────────

def render_battlefield(
    state: GameState, player_id: str, columns: int, grid: GridSettings | None = None
) -> list[str]:
    """Render a player's battlefield grid; each cell lists its stack bottom to top."""
    cards = {c.id: c for c in state.battlefield_of(player_id)}
    if not cards:
        return ["[dim](no permanents)[/dim]"]

    layout = arrange(cards.values(), columns, grid)
    cells: dict[tuple[int, int], list[CardInstance]] = {}
    for instance_id in layout.draw_order():
        slot = layout.slots[instance_id]
        cells.setdefault(slot.cell, []).append(cards[instance_id])

    lines = []
    for row in range(layout.rows):
        depth = max((len(cells.get((col, row), [])) for col in range(layout.columns)), default=0)
        for level in range(max(depth, 1)):
            line = ""
            for col in range(layout.columns):
                stack = cells.get((col, row), [])
                if level < len(stack):
                    card = stack[level]
                    color = _get_card_color(card)
                    line += f"[{color}]│{card_label(card)}[/{color}]"
                else:
                    line += "│" + " " * (CELL_WIDTH - 2)
                line += " "
            lines.append(line.rstrip())
    return lines


# ── Full table render ────────────────────────────────────────────────

def render_table(state: GameState, columns: int = 4, grid: GridSettings | None = None) -> str:
    """Render every seat at the table as a string with Rich markup."""
    active = state.active_player
    lines = [f"[bold]Turn {state.turn_number}[/bold]  {render_phase_bar(state.phase)}", ""]

    for player in state.players:
        is_active = active is not None and player.id == active.id
        arrow = "[bold bright_yellow]▶ [/bold bright_yellow]" if is_active else "  "
        name_style = "bold bright_white" if is_active else "bold cyan"
        lines.append(f"{arrow}[{name_style}]{escape(player.name)}[/{name_style}]      {render_info_bar(state, player)}")

        commanders = state.cards_in_zone(player.id, Zone.COMMAND_ZONE)
        if commanders:
            lines.append("  [bright_black]Command:[/bright_black] " + ", ".join(escape(c.name) for c in commanders))
        hand = state.cards_in_zone(player.id, Zone.HAND)
        if hand:
            lines.append("  [bright_black]Hand:[/bright_black] " + ", ".join(escape(c.name) for c in hand))
        for line in render_battlefield(state, player.id, columns, grid):
            lines.append(f"  {line}")
        lines.append("")

    return "\n".join(lines)


class TableDisplay:
    """Prints snapshots to the terminal."""

    def __init__(self, console: Console | None = None, columns: int = 4):
        self.columns = columns
        self._console = console or Console()

    def show(self, state: GameState) -> None:
        self._console.print(render_table(state, self.columns))

    def show_result(self, state: GameState) -> None:
        remaining = state.active_players()
        if len(remaining) == 1:
            self._console.print(f"  [bold green]{escape(remaining[0].name)} WINS![/bold green]")
        elif not remaining:
            self._console.print("  [bold yellow]DRAW[/bold yellow]")
        self._console.print(f"  Turns: {state.turn_number}")
