from __future__ import annotations

from enum import Enum
from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field

from tile_rpg.mechanics.ability_scores import modifier, modifiers_for
from tile_rpg.models.item import ItemStack
from tile_rpg.models.monster import MonsterAbility, MonsterTemplate
from tile_rpg.models.party import HitPoints, ManaPoints, PartyMember
from tile_rpg.models.spell import Spell


class Side(str, Enum):
    PARTY = "party"
    ENEMY = "enemy"


class Combatant(BaseModel):
    """One battle participant, whatever its source data looked like.

    Party combatants share ``hp``, ``mp``, ``items`` and ``known_spells`` with
    their ``PartyMember`` so damage, healing, spell costs and item use write
    straight back to the persistent record. Enemy combatants are independent copies of a template.
    """

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    side: Side
    is_boss: bool = False
    level: int = 1
    template_id: Optional[str] = None
    hp: HitPoints = Field(default_factory=HitPoints)
    mp: ManaPoints = Field(default_factory=ManaPoints)
    attack_bonus: int = 0
    armor_class: int = 10
    damage_dice: str = "1d4"
    damage_modifier: int = 0
    initiative_modifier: int = 0
    speed: int = 10
    evasion_modifier: int = 0
    stat_modifiers: dict[str, int] = Field(default_factory=dict)
    known_spells: list[str] = Field(default_factory=list)
    spells: list[Spell] = Field(default_factory=list)
    items: list[ItemStack] = Field(default_factory=list)
    abilities: list[MonsterAbility] = Field(default_factory=list)
    defending: bool = False

    @property
    def is_defeated(self) -> bool:
        return self.hp.current <= 0

    @property
    def is_alive(self) -> bool:
        return not self.is_defeated

    def take_damage(self, amount: int) -> int:
        return self.hp.lose(amount)

    def heal(self, amount: int) -> int:
        return self.hp.restore(amount)

    def effective_ac(self, defend_bonus: int = 0) -> int:
        return self.armor_class + (defend_bonus if self.defending else 0)

    def stat_modifier(self, key: str | None) -> int:
        if not key:
            return 0
        return self.stat_modifiers.get(key.lower(), 0)

    def spell(self, spell_id: str) -> Spell | None:
        for s in self.spells:
            if s.id == spell_id:
                return s
        return None

    def can_cast(self, spell: Spell) -> bool:
        return (
            spell.id in self.known_spells
            and self.level >= spell.level_required
            and self.mp.current >= spell.mp_cost
        )

    @classmethod
    def from_party_member(cls, member: PartyMember, spellbook: Iterable[Spell] = ()) -> Combatant:
        scores = member.ability_scores.model_dump()
        dex = modifier(member.ability_scores.dexterity)
        known = set(member.known_spells)
        combatant = cls(
            id=member.id,
            name=member.name,
            side=Side.PARTY,
            level=member.level,
            attack_bonus=member.attack_bonus,
            armor_class=member.armor_class,
            damage_dice=member.damage_dice,
            damage_modifier=modifier(member.ability_scores.strength) + member.damage_bonus,
            initiative_modifier=dex,
            speed=member.speed,
            evasion_modifier=dex,
            stat_modifiers=modifiers_for(scores),
            spells=[s for s in spellbook if s.id in known],
        )
        # Shared, not copied: the battle writes back to the persistent record.
        combatant.hp = member.hp
        combatant.mp = member.mp
        combatant.items = member.inventory
        combatant.known_spells = member.known_spells
        return combatant

    @classmethod
    def from_template(cls, template: MonsterTemplate, instance_id: str | None = None) -> Combatant:
        return cls(
            id=instance_id or template.id,
            name=template.name,
            side=Side.ENEMY,
            is_boss=template.is_boss,
            template_id=template.id,
            hp=HitPoints(current=template.hp, max=template.hp),
            attack_bonus=template.attack_bonus,
            armor_class=template.ac,
            damage_dice=template.damage,
            initiative_modifier=template.initiative_bonus,
            speed=template.speed,
            abilities=[a.model_copy(deep=True) for a in template.abilities],
        )
