from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class AbilityKind(str, Enum):
    DAMAGE = "damage"
    HEAL = "heal"


class MonsterAbility(BaseModel):
    """A special move used instead of the basic attack, ``chance`` of the time."""

    name: str
    chance: float = Field(default=0.0, ge=0.0, le=1.0)
    kind: AbilityKind = AbilityKind.DAMAGE
    dice: str = "1d4"
    # Damage abilities with self_heal also restore the monster by the damage dealt.
    self_heal: bool = False


class MonsterDrop(BaseModel):
    item_id: str
    chance: float = Field(default=1.0, ge=0.0, le=1.0)


class MonsterTemplate(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    hp: int = Field(gt=0)
    ac: int = 10
    attack_bonus: int = 0
    damage: str = "1d4"
    initiative_bonus: int = 0
    speed: int = 10
    xp_reward: int = Field(default=0, ge=0)
    gold_reward: int = Field(default=0, ge=0)
    is_boss: bool = False
    drops: list[MonsterDrop] = Field(default_factory=list)
    abilities: list[MonsterAbility] = Field(default_factory=list)


class Biome(BaseModel):
    id: str
    name: str
    monsters: list[str] = Field(default_factory=list)
    pack_size: int = Field(default=1, ge=1)
