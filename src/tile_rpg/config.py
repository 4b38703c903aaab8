"""Game configuration loaded from config.toml."""
from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from tile_rpg.mechanics.combat_math import DEFEND_AC_BONUS, FLEE_DC

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent.parent / "config.toml"


class CombatConfig(BaseModel):
    log_size: int = Field(default=10, ge=1)
    flee_dc: int = FLEE_DC
    defend_ac_bonus: int = DEFEND_AC_BONUS
    critical_hits: bool = True
    monster_abilities: bool = False
    enemy_delay: float = Field(default=0.6, ge=0.0)


class LoggingConfig(BaseModel):
    level: str = "WARNING"


class GameConfig(BaseModel):
    combat: CombatConfig = Field(default_factory=CombatConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _read_toml(path: Path) -> dict[str, Any]:
    with open(path, "rb") as f:
        return tomllib.load(f)


def load_config(path: Path | str | None = None) -> GameConfig:
    """Load config.toml, falling back to defaults when the file is absent."""
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    if not config_path.exists():
        logger.debug("No config at %s, using defaults", config_path)
        return GameConfig()
    return GameConfig.model_validate(_read_toml(config_path))
