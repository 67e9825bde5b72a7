"""Validation utilities for character generation."""

import logging
from typing import List

from .models import (
    MAX_POINT_BUY_SCORE,
    MIN_POINT_BUY_SCORE,
    AbilityScores,
    AbilityStat,
    Character,
    CharacterDraft,
)

logger = logging.getLogger(__name__)


class CharacterValidator:
    """Validates characters and builder drafts for consistency and correctness."""

    MIN_LEVEL = 1
    MAX_LEVEL = 20
    MAX_NAME_LENGTH = 100

    # Valid HP ranges by level (approximate)
    MIN_HP_PER_LEVEL = 4
    MAX_HP_PER_LEVEL = 15

    @classmethod
    def validate_ability_scores(cls, scores: AbilityScores) -> List[str]:
        """
        Validate point-buy scores.

        Args:
            scores: AbilityScores to validate

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []
        for stat in AbilityStat:
            value = scores.value(stat)
            if not MIN_POINT_BUY_SCORE <= value <= MAX_POINT_BUY_SCORE:
                errors.append(
                    f"{stat.full_name} must be between {MIN_POINT_BUY_SCORE} and "
                    f"{MAX_POINT_BUY_SCORE}, got {value}"
                )
        if scores.points_remaining < 0:
            errors.append(f"Point-buy budget exceeded by {-scores.points_remaining}")
        return errors

    @classmethod
    def validate_draft(cls, draft: CharacterDraft) -> List[str]:
        errors = [f"Missing {name}" for name in draft.missing_fields]
        if len(draft.name.strip()) > cls.MAX_NAME_LENGTH:
            errors.append(f"Character name too long (max {cls.MAX_NAME_LENGTH} characters)")
        errors.extend(cls.validate_ability_scores(draft.ability_scores))
        return errors

    @classmethod
    def validate_character(cls, character: Character) -> List[str]:
        """
        Validate a persisted character.

        HP and AC outside the usual ranges are logged, not rejected.
        """
        errors = []
        if not character.name.strip():
            errors.append("Character must have a name")
        elif len(character.name) > cls.MAX_NAME_LENGTH:
            errors.append(f"Character name too long (max {cls.MAX_NAME_LENGTH} characters)")

        if not cls.MIN_LEVEL <= character.level <= cls.MAX_LEVEL:
            errors.append(
                f"Level must be between {cls.MIN_LEVEL} and {cls.MAX_LEVEL}, got {character.level}"
            )

        min_hp = cls.MIN_HP_PER_LEVEL * character.level
        max_hp = cls.MAX_HP_PER_LEVEL * character.level
        if not min_hp <= character.max_hp <= max_hp:
            logger.warning(
                f"Max HP {character.max_hp} outside typical range "
                f"[{min_hp}, {max_hp}] for level {character.level}"
            )

        if not 8 <= character.ac <= 25:
            logger.warning(f"AC {character.ac} outside typical range [8, 25]")

        return errors
