"""Tests for the dice engine."""

import random
from unittest.mock import Mock

import pytest

from echoveil.dice import DiceResult, DiceRoller, roll


def scripted_rng(*values):
    """Random source returning ``values`` in order from ``randint``."""
    rng = Mock()
    rng.randint.side_effect = list(values)
    return rng


class TestRoll:
    """Test the basic roll contract."""

    def test_sum_plus_modifier(self):
        """Test total equals the dice plus the modifier on every roll."""
        roller = DiceRoller(random.Random(42))
        for _ in range(200):
            result = roller.roll(count=2, sides=6, modifier=3)
            assert len(result.rolls) == 2
            assert all(1 <= r <= 6 for r in result.rolls)
            assert result.total == result.rolls[0] + result.rolls[1] + 3
            assert result.modifier == 3

    def test_negative_total_allowed(self):
        """Test totals are not clamped."""
        result = DiceRoller(scripted_rng(1)).roll(count=1, sides=4, modifier=-5)
        assert result.total == -4

    def test_invalid_arguments(self):
        """Test zero dice or zero sides are rejected."""
        roller = DiceRoller()
        with pytest.raises(ValueError):
            roller.roll(count=0, sides=6)
        with pytest.raises(ValueError):
            roller.roll(count=1, sides=0)

    def test_module_level_roll(self):
        """Test the convenience function."""
        result = roll(count=3, sides=8, modifier=1)
        assert isinstance(result, DiceResult)
        assert len(result.rolls) == 3
        assert result.total == sum(result.rolls) + 1


class TestCriticals:
    """Test crit and fail detection."""

    def test_natural_twenty_is_crit(self):
        """Test a d20 showing 20 is a crit whatever the modifier."""
        result = DiceRoller(scripted_rng(20)).roll(count=1, sides=20, modifier=-10)
        assert result.is_crit is True
        assert result.is_fail is False
        assert result.total == 10

    def test_other_d20_values_are_not_crits(self):
        """Test only a 20 counts as a crit."""
        for value in range(1, 20):
            result = DiceRoller(scripted_rng(value)).roll(count=1, sides=20, modifier=5)
            assert result.is_crit is False

    def test_natural_one_is_fail(self):
        """Test a d20 showing 1 is a fail."""
        result = DiceRoller(scripted_rng(1)).roll(count=1, sides=20, modifier=30)
        assert result.is_fail is True
        assert result.is_crit is False

    def test_twenty_on_d100_is_not_crit(self):
        """Test crit detection is limited to d20s."""
        result = DiceRoller(scripted_rng(20)).roll(count=1, sides=100)
        assert result.is_crit is False
        assert result.is_fail is False

    def test_one_on_d6_is_not_fail(self):
        """Test fail detection is limited to d20s."""
        result = DiceRoller(scripted_rng(1)).roll(count=1, sides=6)
        assert result.is_fail is False


class TestAdvantage:
    """Test advantage and disadvantage."""

    def test_advantage_keeps_higher(self):
        """Test advantage keeps the better draw."""
        result = DiceRoller(scripted_rng(5, 17)).roll(count=1, sides=20, advantage=True)
        assert result.rolls == [17]

    def test_disadvantage_keeps_lower(self):
        """Test disadvantage keeps the worse draw."""
        result = DiceRoller(scripted_rng(5, 17)).roll(count=1, sides=20, disadvantage=True)
        assert result.rolls == [5]

    def test_both_flags_apply_advantage(self):
        """Test advantage wins when both flags are set."""
        result = DiceRoller(scripted_rng(5, 17)).roll(count=1, sides=20, advantage=True, disadvantage=True)
        assert result.rolls == [17]

    def test_advantage_applies_per_die(self):
        """Test each die gets its own pair of draws."""
        rng = scripted_rng(2, 6, 4, 1)
        result = DiceRoller(rng).roll(count=2, sides=6, advantage=True)
        assert result.rolls == [6, 4]
        assert rng.randint.call_count == 4


class TestHelpers:
    """Test d20 and damage helpers."""

    def test_roll_d20(self):
        """Test the d20 helper."""
        result = DiceRoller(scripted_rng(20)).roll_d20(modifier=4)
        assert result.total == 24
        assert result.is_crit is True

    def test_damage_never_crits(self):
        """Test damage rolls never set crit or fail flags."""
        result = DiceRoller(scripted_rng(20, 1)).roll_damage([(1, 20), (1, 20)], modifier=2)
        assert result.rolls == [20, 1]
        assert result.total == 23
        assert result.is_crit is False
        assert result.is_fail is False

    def test_damage_expression(self):
        """Test multiple dice groups are rolled in order."""
        result = DiceRoller(scripted_rng(3, 5, 2)).roll_damage([(2, 6), (1, 4)])
        assert result.rolls == [3, 5, 2]
        assert result.total == 10

    def test_breakdown(self):
        """Test the human readable arithmetic."""
        assert DiceResult(rolls=[12], total=15, modifier=3).breakdown == "12 + 3 = 15"
        assert DiceResult(rolls=[4, 5], total=12, modifier=3).breakdown == "9 (+3) = 12"
        assert DiceResult(rolls=[12], total=10, modifier=-2).breakdown == "12 - 2 = 10"

    def test_to_dict(self):
        """Test serialization."""
        data = DiceResult(rolls=[7], total=9, modifier=2).to_dict()
        assert data == {"rolls": [7], "total": 9, "modifier": 2, "is_crit": False, "is_fail": False}
