"""Character models, point-buy scores and the character builder."""

from .character_builder import CharacterBuilder
from .models import (
    AbilityScores,
    AbilityStat,
    BackgroundOption,
    Character,
    CharacterDraft,
    ClassOption,
    EquipmentOption,
    PowerOption,
    SpeciesOption,
    ability_modifier,
)
from .notes_autosave import NotesAutosaver
from .validators import CharacterValidator

__all__ = [
    "CharacterBuilder",
    "NotesAutosaver",
    "CharacterValidator",
    "Character",
    "CharacterDraft",
    "AbilityScores",
    "AbilityStat",
    "ability_modifier",
    "SpeciesOption",
    "ClassOption",
    "BackgroundOption",
    "PowerOption",
    "EquipmentOption",
]
