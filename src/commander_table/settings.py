"""Application settings via pydantic-settings."""

from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "COMMANDER_TABLE_"}

    # Paths
    config_dir: Path = Path("./config")

    # Game settings
    starting_life: int = 40
    starting_hand_size: int = 7
    commander_damage_threshold: int = 21
    deck_size: int = 99  # excluding the commander
    max_players: int = 4

    # Battlefield grid
    grid_cell_capacity: int = 3
    grid_max_rows: int = 10
    grid_card_width: float = 168.0  # tapped footprint, so rotated cards fit
    grid_card_height: float = 168.0
    grid_spacing: float = 8.0
    grid_stack_offset_ratio: float = 0.25

    # Logging
    log_level: str = "INFO"

    @property
    def decks_dir(self) -> Path:
        return self.config_dir / "decks"


settings = Settings()
