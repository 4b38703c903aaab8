from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field

from tile_rpg.models.item import ItemStack


class AbilityScores(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    strength: int = 10
    dexterity: int = 10
    constitution: int = 10
    intelligence: int = 10
    wisdom: int = 10
    charisma: int = 10


class HitPoints(BaseModel):
    """Current and maximum HP. Every mutation keeps ``0 <= current <= max``."""

    model_config = ConfigDict(from_attributes=True)

    current: int = 0
    max: int = 0

    def lose(self, amount: int) -> int:
        """Subtract up to ``amount`` HP. Returns the HP actually lost."""
        lost = min(max(amount, 0), self.current)
        self.current -= lost
        return lost

    def restore(self, amount: int) -> int:
        """Add up to ``amount`` HP without passing max. Returns the HP actually gained."""
        gained = min(max(amount, 0), max(self.max - self.current, 0))
        self.current += gained
        return gained

    def grow(self, amount: int) -> None:
        """Raise max HP and heal by the same amount."""
        self.max += amount
        self.current = min(self.current + amount, self.max)


class ManaPoints(HitPoints):
    """Current and maximum MP, clamped the same way as HP."""

    def spend(self, amount: int) -> bool:
        """Pay ``amount`` MP. Returns False and spends nothing when short."""
        if amount > self.current:
            return False
        self.current -= max(amount, 0)
        return True


class LevelEntry(BaseModel):
    level: int = Field(ge=2)
    xp: int = Field(ge=0)
    hp_gain: int = 0
    attack_bonus_gain: int = 0
    armor_class_gain: int = 0
    mp_gain: int = 0


class PartyMember(BaseModel):
    """Persistent hero record. Owned by the game session, mutated in place by combat."""

    model_config = ConfigDict(from_attributes=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    level: int = 1
    xp: int = 0
    gold: int = 0
    hp: HitPoints = Field(default_factory=lambda: HitPoints(current=20, max=20))
    mp: ManaPoints = Field(default_factory=lambda: ManaPoints(current=10, max=10))
    attack_bonus: int = 2
    armor_class: int = 10
    ability_scores: AbilityScores = Field(default_factory=AbilityScores)
    damage_dice: str = "1d6"
    damage_bonus: int = 0
    speed: int = 10
    known_spells: list[str] = Field(default_factory=list)
    inventory: list[ItemStack] = Field(default_factory=list)

    @property
    def is_alive(self) -> bool:
        return self.hp.current > 0
