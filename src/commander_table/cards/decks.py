"""Commander decks and decklist loading.

Two decklist formats are understood:

Text, as exported by most deck builders::

    // Commander
    1 Atraxa, Praetors' Voice
    // Lands
    30 Forest

YAML, the format kept under ``config/decks``::

    name: Atraxa Superfriends
    commander:
      name: Atraxa, Praetors' Voice
      type_line: Legendary Creature — Phyrexian Angel Horror
    mainboard:
      - name: Forest
        quantity: 30
        type_line: Basic Land — Forest
"""

from __future__ import annotations

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, field_validator

from ..settings import settings
from .models import Card

logger = logging.getLogger(__name__)


class DeckFormatError(ValueError):
    """A decklist could not be read."""


class Deck(BaseModel):
    """A commander plus exactly ``settings.deck_size`` other cards."""

    model_config = ConfigDict(frozen=True)

    name: str
    commander: Card
    cards: list[Card]

    @field_validator("cards")
    @classmethod
    def _check_size(cls, cards: list[Card]) -> list[Card]:
        if len(cards) != settings.deck_size:
            raise ValueError(
                f"Commander deck must have exactly {settings.deck_size} cards "
                f"(excluding commander), found {len(cards)}"
            )
        return cards

    @property
    def total_cards(self) -> int:
        return len(self.cards) + 1

    def validation_errors(self) -> list[str]:
        """Reasons this deck breaks Commander construction rules, if any."""
        errors = []
        seen: set[str] = set()
        for card in self.cards:
            if card.is_basic_land:
                continue
            if card.name in seen:
                errors.append(f"Duplicate non-basic card: {card.name}")
            seen.add(card.name)
        # Text decklists carry names only, so an unknown type line is not judged
        if self.commander.type_line is not None and not self.commander.is_legendary:
            errors.append(f"Commander is not legendary: {self.commander.name}")
        return errors

    def is_valid(self) -> bool:
        return not self.validation_errors()


def parse_decklist(content: str, name: str = "Imported Deck") -> Deck:
    """Parse the text decklist format into a Deck."""
    if not content.strip():
        raise DeckFormatError("Deck file content cannot be empty")

    commander: Card | None = None
    cards: list[Card] = []
    category = ""

    for line_number, line in enumerate(content.splitlines(), start=1):
        trimmed = line.strip()
        if not trimmed:
            continue
        if trimmed.startswith("//"):
            category = trimmed[2:].strip()
            continue

        parts = trimmed.split(" ", 1)
        if len(parts) != 2:
            # Headers and stray words carry no quantity
            continue
        try:
            quantity = int(parts[0])
        except ValueError:
            raise DeckFormatError(
                f"Invalid quantity on line {line_number}: '{parts[0]}' must be a positive number"
            ) from None
        if quantity <= 0:
            raise DeckFormatError(
                f"Invalid quantity on line {line_number}: '{parts[0]}' must be a positive number"
            )
        card_name = parts[1].strip()
        if not card_name:
            raise DeckFormatError(f"Card name cannot be empty on line {line_number}")

        card = Card(name=card_name)
        if category.lower() == "commander" and commander is None:
            if quantity != 1:
                raise DeckFormatError(
                    f"Commander must have quantity of 1, found {quantity} on line {line_number}"
                )
            commander = card
        else:
            cards.extend([card] * quantity)

    if commander is None:
        raise DeckFormatError(
            "No commander found in deck. Ensure there is a '// Commander' section with exactly one card."
        )
    return Deck(name=name, commander=commander, cards=cards)


def deck_from_config(data: dict) -> Deck:
    """Build a Deck from a parsed YAML decklist."""
    if not isinstance(data, dict) or "commander" not in data:
        raise DeckFormatError("Decklist must define a commander")

    commander_entry = data["commander"]
    if isinstance(commander_entry, str):
        commander_entry = {"name": commander_entry}
    commander = Card.from_entry(commander_entry)

    cards: list[Card] = []
    for entry in data.get("mainboard", []):
        if isinstance(entry, str):
            entry = {"name": entry}
        quantity = entry.get("quantity", 1)
        if not isinstance(quantity, int) or quantity <= 0:
            raise DeckFormatError(f"Invalid quantity for {entry.get('name')}: {quantity}")
        cards.extend([Card.from_entry(entry)] * quantity)

    return Deck(name=data.get("name", commander.name), commander=commander, cards=cards)


def load_deck(path: Path) -> Deck:
    """Load a YAML or text decklist from disk."""
    if not path.is_file():
        raise DeckFormatError(f"Deck file does not exist: {path}")

    content = path.read_text(encoding="utf-8")
    if path.suffix.lower() in (".yaml", ".yml"):
        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise DeckFormatError(f"Failed to parse {path}: {e}") from e
        deck = deck_from_config(data)
    else:
        deck = parse_decklist(content, name=path.stem)

    logger.info(f"Loaded deck {deck.name!r} ({deck.total_cards} cards) from {path}")
    return deck
