"""Dice engine."""

from .roller import DiceResult, DiceRoller, roll

__all__ = ["DiceResult", "DiceRoller", "roll"]
