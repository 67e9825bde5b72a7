"""Dice rolling for checks, attacks and damage."""

import random
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import structlog

logger = structlog.get_logger(__name__)

CRIT_SIDES = 20


@dataclass(frozen=True)
class DiceResult:
    """Outcome of a single roll request."""

    rolls: List[int] = field(default_factory=list)
    total: int = 0
    modifier: int = 0
    is_crit: bool = False
    is_fail: bool = False

    @property
    def breakdown(self) -> str:
        """Human readable arithmetic, e.g. ``12 + 3 = 15``."""
        sign = "-" if self.modifier < 0 else "+"
        if len(self.rolls) == 1:
            return f"{self.rolls[0]} {sign} {abs(self.modifier)} = {self.total}"
        return f"{sum(self.rolls)} ({sign}{abs(self.modifier)}) = {self.total}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class DiceRoller:
    """
    Stateless dice engine.

    The only state is the random source, which can be injected for
    deterministic tests. Separate calls share nothing else.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def _draw(self, sides: int) -> int:
        return self._rng.randint(1, sides)

    def roll(
        self,
        count: int = 1,
        sides: int = 20,
        modifier: int = 0,
        advantage: bool = False,
        disadvantage: bool = False,
    ) -> DiceResult:
        """
        Roll ``count`` dice with ``sides`` faces and add ``modifier``.

        Advantage takes the better of two draws per die, disadvantage the
        worse. When both are set advantage is applied.

        Args:
            count: Number of dice, at least 1
            sides: Faces per die, at least 1
            modifier: Flat bonus added to the sum, may be negative
            advantage: Roll twice per die and keep the higher draw
            disadvantage: Roll twice per die and keep the lower draw

        Returns:
            DiceResult; crit/fail flags are only ever set for d20 rolls
        """
        if count < 1:
            raise ValueError(f"count must be at least 1, got {count}")
        if sides < 1:
            raise ValueError(f"sides must be at least 1, got {sides}")
        if advantage and disadvantage:
            logger.debug("Both advantage and disadvantage set; applying advantage")

        rolls = []
        for _ in range(count):
            if advantage:
                rolls.append(max(self._draw(sides), self._draw(sides)))
            elif disadvantage:
                rolls.append(min(self._draw(sides), self._draw(sides)))
            else:
                rolls.append(self._draw(sides))

        return DiceResult(
            rolls=rolls,
            total=sum(rolls) + modifier,
            modifier=modifier,
            is_crit=sides == CRIT_SIDES and CRIT_SIDES in rolls,
            is_fail=sides == CRIT_SIDES and 1 in rolls,
        )

    def roll_d20(
        self, modifier: int = 0, advantage: bool = False, disadvantage: bool = False
    ) -> DiceResult:
        return self.roll(1, CRIT_SIDES, modifier, advantage, disadvantage)

    def roll_damage(
        self, dice: Sequence[Tuple[int, int]], modifier: int = 0
    ) -> DiceResult:
        """Roll a damage expression such as ``[(2, 6), (1, 4)]``; damage never crits."""
        rolls = [self._draw(sides) for count, sides in dice for _ in range(count)]
        return DiceResult(rolls=rolls, total=sum(rolls) + modifier, modifier=modifier)


_default_roller = DiceRoller()


def roll(
    count: int = 1,
    sides: int = 20,
    modifier: int = 0,
    advantage: bool = False,
    disadvantage: bool = False,
) -> DiceResult:
    """Module-level convenience wrapper around a shared ``DiceRoller``."""
    return _default_roller.roll(count, sides, modifier, advantage, disadvantage)
