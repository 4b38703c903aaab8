from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ItemKind(str, Enum):
    HEAL = "heal"
    DAMAGE = "damage"
    ESCAPE = "escape"


class Item(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    kind: ItemKind
    dice: str = ""
    value: int = 0
    description: str = ""


class ItemStack(BaseModel):
    item_id: str
    quantity: int = Field(default=1, ge=0)
