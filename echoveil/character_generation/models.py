"""Data models for characters, point-buy ability scores and builder drafts."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from ..core.serialization import format_timestamp, utcnow


class AbilityStat(Enum):
    """The six ability scores."""

    STRENGTH = "STR"
    DEXTERITY = "DEX"
    CONSTITUTION = "CON"
    INTELLIGENCE = "INT"
    WISDOM = "WIS"
    CHARISMA = "CHA"

    @property
    def full_name(self) -> str:
        return self.name.capitalize()


# Point-buy cost table: base 8, max 15 before species bonuses
POINT_BUY_COSTS: Dict[int, int] = {8: 0, 9: 1, 10: 2, 11: 3, 12: 4, 13: 5, 14: 7, 15: 9}
POINT_BUY_BUDGET = 27
MIN_POINT_BUY_SCORE = 8
MAX_POINT_BUY_SCORE = 15


def ability_modifier(score: int) -> int:
    """Ability modifier, floored: a score of 7 gives -2."""
    return (score - 10) // 2


@dataclass
class AbilityScores:
    """Six ability scores bought from a fixed point budget."""

    strength: int = MIN_POINT_BUY_SCORE
    dexterity: int = MIN_POINT_BUY_SCORE
    constitution: int = MIN_POINT_BUY_SCORE
    intelligence: int = MIN_POINT_BUY_SCORE
    wisdom: int = MIN_POINT_BUY_SCORE
    charisma: int = MIN_POINT_BUY_SCORE

    def value(self, stat: AbilityStat) -> int:
        return getattr(self, stat.name.lower())

    def _set_value(self, stat: AbilityStat, value: int) -> None:
        setattr(self, stat.name.lower(), value)

    @property
    def points_spent(self) -> int:
        return sum(POINT_BUY_COSTS.get(self.value(stat), 0) for stat in AbilityStat)

    @property
    def points_remaining(self) -> int:
        return POINT_BUY_BUDGET - self.points_spent

    def can_increase(self, stat: AbilityStat) -> bool:
        current = self.value(stat)
        if current >= MAX_POINT_BUY_SCORE or current not in POINT_BUY_COSTS:
            return False
        step = POINT_BUY_COSTS[current + 1] - POINT_BUY_COSTS[current]
        return step <= self.points_remaining

    def can_decrease(self, stat: AbilityStat) -> bool:
        return self.value(stat) > MIN_POINT_BUY_SCORE

    def increase(self, stat: AbilityStat) -> bool:
        """Raise ``stat`` by one if the budget allows; returns whether it changed."""
        if not self.can_increase(stat):
            return False
        self._set_value(stat, self.value(stat) + 1)
        return True

    def decrease(self, stat: AbilityStat) -> bool:
        if not self.can_decrease(stat):
            return False
        self._set_value(stat, self.value(stat) - 1)
        return True

    def modifier(self, stat: AbilityStat) -> int:
        return ability_modifier(self.value(stat))

    def to_dict(self) -> Dict[str, int]:
        return {stat.name.lower(): self.value(stat) for stat in AbilityStat}


FORCE_CLASSES = ("Jedi", "Sith", "Dark Jedi", "Force Acolyte", "Jedi Knight", "Jedi Master")


@dataclass
class Character:
    """
    A persisted player character.

    ``current_hp`` is clamped to ``[0, max_hp]`` on every assignment,
    including construction and changes to ``max_hp``. Level never drops
    below 1; experience and force points never drop below 0.
    """

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = "New Character"
    species: str = "Human"
    char_class: str = "Guardian"
    level: int = 1
    experience_points: int = 0
    current_hp: int = 10
    max_hp: int = 10
    ac: int = 10
    force_points: int = 0
    last_modified: datetime = field(default_factory=utcnow)
    notes: str = ""
    backstory: str = ""

    def __setattr__(self, name: str, value: Any) -> None:
        if name == "max_hp":
            value = max(0, value)
            super().__setattr__(name, value)
            if "current_hp" in self.__dict__:
                super().__setattr__("current_hp", min(self.current_hp, value))
            return
        if name == "current_hp":
            value = max(0, value)
            if "max_hp" in self.__dict__:
                value = min(value, self.max_hp)
        elif name == "level":
            value = max(1, value)
        elif name in ("experience_points", "force_points"):
            value = max(0, value)
        super().__setattr__(name, value)

    def __post_init__(self) -> None:
        # current_hp is assigned before max_hp exists
        self.current_hp = self.current_hp

    def set_current_hp(self, value: int) -> int:
        self.current_hp = value
        self.touch()
        return self.current_hp

    def apply_damage(self, amount: int) -> int:
        return self.set_current_hp(self.current_hp - max(0, amount))

    def heal(self, amount: int) -> int:
        return self.set_current_hp(self.current_hp + max(0, amount))

    def level_up(self, hp_gain: int) -> None:
        """Advance one level; max HP grows by ``hp_gain`` and current HP with it."""
        gain = max(0, hp_gain)
        self.level += 1
        self.max_hp += gain
        self.current_hp += gain
        self.touch()

    def award_experience(self, amount: int) -> None:
        self.experience_points += max(0, amount)
        self.touch()

    def touch(self) -> None:
        self.last_modified = utcnow()

    @property
    def hp_percentage(self) -> float:
        if self.max_hp <= 0:
            return 1.0
        return self.current_hp / self.max_hp

    @property
    def is_new(self) -> bool:
        return self.level == 1 and self.experience_points < 300

    @property
    def is_force_user(self) -> bool:
        if self.char_class in FORCE_CLASSES:
            return True
        has_points = self.force_points > 0
        return has_points and ("Guardian" in self.char_class or "Sentinel" in self.char_class)

    @property
    def initiative_bonus(self) -> int:
        base = 4 if self.char_class in ("Rogue", "Smuggler") else 2
        return base + 1 if self.is_force_user else base

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation for the character endpoints."""
        return {
            "id": self.id,
            "name": self.name,
            "species": self.species,
            "class": self.char_class,
            "level": self.level,
            "experience_points": self.experience_points,
            "current_hp": self.current_hp,
            "max_hp": self.max_hp,
            "ac": self.ac,
            "force_points": self.force_points,
            "last_modified": format_timestamp(self.last_modified),
        }


@dataclass(frozen=True)
class SpeciesOption:
    id: str
    name: str
    traits: List[str] = field(default_factory=list)
    ability_bonuses: Dict[str, int] = field(default_factory=dict)
    description: str = ""


@dataclass(frozen=True)
class ClassOption:
    id: str
    name: str
    hit_die: int
    primary_stat: AbilityStat = AbilityStat.STRENGTH
    role_description: str = ""
    is_force_user: bool = False
    is_tech_user: bool = False


@dataclass(frozen=True)
class BackgroundOption:
    id: str
    name: str
    skill_grants: List[str] = field(default_factory=list)
    feature_description: str = ""


@dataclass(frozen=True)
class PowerOption:
    id: str
    name: str
    level: int = 0  # 0 = at-will
    type: str = "force"  # "force" or "tech"
    duration: str = ""
    description: str = ""
    cost: str = ""

    @property
    def is_cantrip(self) -> bool:
        return self.level == 0


@dataclass
class EquipmentOption:
    id: str
    name: str
    type: str  # weapon, armor, gear, consumable
    weight: float = 0.0
    is_default: bool = False
    description: str = ""
    is_selected: bool = True


@dataclass
class CharacterDraft:
    """In-progress builder session. Never persisted until ready to save."""

    species: Optional[SpeciesOption] = None
    char_class: Optional[ClassOption] = None
    background: Optional[BackgroundOption] = None
    ability_scores: AbilityScores = field(default_factory=AbilityScores)
    selected_powers: List[PowerOption] = field(default_factory=list)
    selected_equipment: List[EquipmentOption] = field(default_factory=list)
    name: str = ""
    age: str = ""
    appearance: str = ""
    backstory: str = ""

    @property
    def is_ready_to_save(self) -> bool:
        return (
            bool(self.name.strip())
            and self.species is not None
            and self.char_class is not None
            and self.background is not None
        )

    @property
    def missing_fields(self) -> List[str]:
        missing = []
        if not self.name.strip():
            missing.append("name")
        if self.species is None:
            missing.append("species")
        if self.char_class is None:
            missing.append("class")
        if self.background is None:
            missing.append("background")
        return missing

    @property
    def total_weight(self) -> float:
        return sum(item.weight for item in self.selected_equipment if item.is_selected)

    def to_payload(self) -> Dict[str, Any]:
        """Body for the create-character endpoint."""
        payload: Dict[str, Any] = {
            "name": self.name.strip(),
            "species": self.species.name if self.species else "",
            "class": self.char_class.name if self.char_class else "",
            "background": self.background.name if self.background else "",
        }
        payload.update(self.ability_scores.to_dict())
        payload.update(
            {
                "powers": [power.id for power in self.selected_powers],
                "equipment": [item.id for item in self.selected_equipment if item.is_selected],
                "age": self.age,
                "appearance": self.appearance,
                "backstory": self.backstory,
            }
        )
        return payload
