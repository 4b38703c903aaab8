from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SpellKind(str, Enum):
    DAMAGE = "damage"
    HEAL = "heal"


class Spell(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    kind: SpellKind = SpellKind.DAMAGE
    dice: str = "1d4"
    modifier_key: Optional[str] = None
    level_required: int = 1
    mp_cost: int = Field(default=0, ge=0)
    description: str = ""
