"""Card definition models."""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Color(str, Enum):
    WHITE = "W"
    BLUE = "U"
    BLACK = "B"
    RED = "R"
    GREEN = "G"
    COLORLESS = "C"


BASIC_LAND_NAMES = frozenset({
    "Plains", "Island", "Swamp", "Mountain", "Forest", "Wastes",
    "Snow-Covered Plains", "Snow-Covered Island", "Snow-Covered Swamp",
    "Snow-Covered Mountain", "Snow-Covered Forest",
})


class Card(BaseModel):
    """Static card metadata, supplied pre-populated by the deck or catalog."""

    model_config = ConfigDict(frozen=True)

    name: str
    mana_cost: Optional[str] = None
    cmc: Optional[float] = None
    type_line: Optional[str] = None
    oracle_text: Optional[str] = None
    power: Optional[str] = None  # may be "*"
    toughness: Optional[str] = None
    colors: list[Color] = Field(default_factory=list)
    image_uri: Optional[str] = None
    scryfall_id: Optional[str] = None

    @property
    def is_legendary(self) -> bool:
        return "legendary" in (self.type_line or "").lower()

    @property
    def is_creature(self) -> bool:
        return "creature" in (self.type_line or "").lower()

    @property
    def is_basic_land(self) -> bool:
        return self.name in BASIC_LAND_NAMES

    @classmethod
    def from_entry(cls, data: dict) -> Card:
        """Build a Card from a decklist entry.

        Entries use the same keys as the model; Scryfall's ``type`` and
        ``oracle`` spellings are accepted as aliases and unknown keys
        (such as ``quantity``) are ignored.
        """
        return cls(
            name=data["name"],
            mana_cost=data.get("mana_cost"),
            cmc=data.get("cmc"),
            type_line=data.get("type_line", data.get("type")),
            oracle_text=data.get("oracle_text", data.get("oracle")),
            power=_optional_str(data.get("power")),
            toughness=_optional_str(data.get("toughness")),
            colors=[Color(c) for c in data.get("colors", [])],
            image_uri=data.get("image_uri"),
            scryfall_id=data.get("scryfall_id", data.get("id")),
        )


def _optional_str(value) -> str | None:
    # YAML reads "2" as an int
    return None if value is None else str(value)
