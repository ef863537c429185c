"""CLI entry point using typer."""

from __future__ import annotations

import logging
import random
from pathlib import Path
from typing import Optional

import typer

from .settings import settings

app = typer.Typer(name="commander-table", help="Commander Table: game state engine for Commander tabletop play")

DEFAULT_DECK = settings.decks_dir / "atraxa.yaml"


def _configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@app.command()
def validate(deck_path: Path = typer.Argument(DEFAULT_DECK, help="YAML or text decklist")):
    """Check a decklist against Commander construction rules."""
    from pydantic import ValidationError

    from .cards.decks import DeckFormatError, load_deck

    _configure_logging()
    try:
        deck = load_deck(deck_path)
    except (DeckFormatError, ValidationError) as e:
        typer.echo(f"Cannot load {deck_path}: {e}", err=True)
        raise typer.Exit(2)

    errors = deck.validation_errors()
    if errors:
        for error in errors:
            typer.echo(f"  - {error}")
        typer.echo(f"{deck.name}: INVALID")
        raise typer.Exit(1)
    typer.echo(f"{deck.name}: valid ({deck.total_cards} cards, commander {deck.commander.name})")


@app.command()
def demo(
    deck_path: Path = typer.Option(DEFAULT_DECK, "--deck", "-d", help="Deck every player uses"),
    players: int = typer.Option(2, "--players", "-p", min=1, help="Number of players"),
    turns: int = typer.Option(1, "--turns", "-t", min=0, help="Turns to pass after opening hands"),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for shuffles"),
    columns: int = typer.Option(4, "--columns", "-c", min=1, help="Battlefield grid columns"),
):
    """Seat players, load decks, draw opening hands and play out a few draw steps."""
    from .cards.decks import load_deck
    from .display import TableDisplay
    from .game.setup import draw_opening_hand, new_game
    from .game.setup import load_deck as load_deck_for
    from .game.state import Phase
    from .game.turns import advance_phase, untap_all
    from .game.zones import check_game_end, draw_card

    _configure_logging()
    rng = random.Random(seed)
    deck = load_deck(deck_path)

    state = new_game([f"Player {i + 1}" for i in range(players)])
    for player in state.players:
        state = load_deck_for(state, player.id, deck, rng)
        state = draw_opening_hand(state, player.id)

    # Walk whole turns, doing the bookkeeping a table would do by hand
    for _ in range(turns * 12):
        state = advance_phase(state)
        active = state.active_player
        if state.phase == Phase.UNTAP:
            state = untap_all(state, active.id)
        elif state.phase == Phase.DRAW:
            state = draw_card(state, active.id)
        if check_game_end(state) and len(state.players) > 1:
            break

    display = TableDisplay(columns=columns)
    display.show(state)
    if check_game_end(state) and len(state.players) > 1:
        display.show_result(state)


if __name__ == "__main__":
    app()
