"""Tests for campaign state, history reconciliation, demo data and templates."""

from datetime import datetime, timedelta, timezone

from echoveil.campaign import (
    BUILTIN_TEMPLATES,
    Combatant,
    CombatState,
    Difficulty,
    GMStyle,
    HistoryEntryType,
    HistoryLog,
)
from echoveil.campaign.demo import (
    DEMO_CAMPAIGN_TITLE,
    DEMO_LOCATION,
    demo_campaign,
    demo_summaries,
    offline_narration,
)
from echoveil.campaign.templates import TemplateDifficulty, get_template
from echoveil.core.serialization import format_timestamp, parse_timestamp


def roster(count):
    return [Combatant(id=f"c{i}", name=f"Combatant {i}", hp=10, max_hp=10) for i in range(count)]


class TestCombatState:
    """Test the turn pointer."""

    def test_advance_wraps(self):
        """Test advancing n times from k lands on (k + n) mod m."""
        for size in range(1, 6):
            for start in range(size):
                state = CombatState(active=True, current_turn_index=start, participants=roster(size))
                for steps in range(1, 12):
                    state.advance_turn()
                    assert state.current_turn_index == (start + steps) % size

    def test_empty_roster_stays_at_zero(self):
        """Test an empty roster keeps the pointer at zero."""
        state = CombatState(current_turn_index=4)
        assert state.current_turn_index == 0
        assert state.advance_turn() == 0
        assert state.current_combatant is None
        assert state.is_player_turn is False

    def test_out_of_range_index_normalized(self):
        """Test a stale index is brought back inside the roster."""
        state = CombatState(active=True, current_turn_index=7, participants=roster(3))
        assert state.current_turn_index == 1

    def test_replace_roster(self):
        """Test replacing the roster re-normalizes the pointer."""
        state = CombatState(active=True, current_turn_index=2, participants=roster(3))
        state.replace_roster(roster(2))
        assert state.current_turn_index == 0
        state.replace_roster(roster(4), turn_index=3)
        assert state.current_turn_index == 3
        assert len(state.participants) == 4

    def test_player_turn(self):
        """Test player turn detection."""
        participants = roster(2)
        participants[1].is_player = True
        state = CombatState(active=True, current_turn_index=1, participants=participants)
        assert state.is_player_turn is True
        state.advance_turn()
        assert state.is_player_turn is False

    def test_find_and_to_dict(self):
        """Test lookup by id and wire serialization."""
        state = CombatState(active=True, current_turn_index=1, participants=roster(2))
        assert state.find("c1").name == "Combatant 1"
        assert state.find("missing") is None
        data = state.to_dict()
        assert data["currentTurn"] == 1
        assert data["initiative"][0]["maxHp"] == 10

    def test_combatant_down(self):
        """Test downed detection."""
        assert Combatant(hp=0).is_down is True
        assert Combatant(hp=1).is_down is False


class TestHistoryLog:
    """Test append-only history and optimistic reconciliation."""

    def test_append(self):
        """Test appending records entries in order."""
        log = HistoryLog()
        log.append(HistoryEntryType.GM_NARRATION, "One")
        log.append(HistoryEntryType.PLAYER_ACTION, "Two")
        assert [entry.content for entry in log] == ["One", "Two"]
        assert len(log) == 2
        assert log[1].type is HistoryEntryType.PLAYER_ACTION

    def test_confirm_keeps_position(self):
        """Test confirming a pending entry keeps its id and position."""
        log = HistoryLog()
        log.append(HistoryEntryType.GM_NARRATION, "Before")
        correlation_id = log.append_pending(HistoryEntryType.PLAYER_ACTION, "I attack")
        pending = log[1]
        assert pending.pending is True
        assert log.confirm(correlation_id) is True
        assert log[1].pending is False
        assert log[1].id == pending.id
        assert log.pending_entries == []

    def test_rollback_removes_only_pending(self):
        """Test rollback removes the pending entry and nothing else."""
        log = HistoryLog()
        log.append(HistoryEntryType.GM_NARRATION, "Before")
        correlation_id = log.append_pending(HistoryEntryType.PLAYER_ACTION, "I attack")
        assert log.rollback(correlation_id) is True
        assert [entry.content for entry in log] == ["Before"]

    def test_confirmed_entries_cannot_be_rolled_back(self):
        """Test confirmed entries are immutable."""
        log = HistoryLog()
        correlation_id = log.append_pending(HistoryEntryType.PLAYER_ACTION, "I attack")
        log.confirm(correlation_id)
        assert log.rollback(correlation_id) is False
        assert log.confirm(correlation_id) is False
        assert len(log) == 1

    def test_unknown_correlation_id(self):
        """Test unknown ids are ignored."""
        log = HistoryLog()
        assert log.confirm("nope") is False
        assert log.rollback("nope") is False

    def test_to_list_skips_pending(self):
        """Test serialization only includes confirmed entries."""
        log = HistoryLog()
        log.append(HistoryEntryType.GM_NARRATION, "Scene")
        log.append_pending(HistoryEntryType.PLAYER_ACTION, "Unsent")
        data = log.to_list()
        assert len(data) == 1
        assert data[0]["type"] == "narration"
        assert data[0]["text"] == "Scene"

    def test_entries_is_a_copy(self):
        """Test callers cannot mutate the log through ``entries``."""
        log = HistoryLog()
        log.append(HistoryEntryType.GM_NARRATION, "Scene")
        log.entries.clear()
        assert len(log) == 1


class TestEnums:
    """Test lenient enum parsing."""

    def test_difficulty(self):
        """Test known and unknown difficulties."""
        assert Difficulty.parse("heroic") is Difficulty.HEROIC
        assert Difficulty.parse("nightmare") is Difficulty.NORMAL
        assert Difficulty.parse(None) is Difficulty.NORMAL
        assert Difficulty.STORY.display_name == "Story"

    def test_gm_style(self):
        """Test known and unknown styles."""
        assert GMStyle.parse("comedic") is GMStyle.COMEDIC
        assert GMStyle.parse("noir") is GMStyle.CINEMATIC

    def test_history_type(self):
        """Test unknown entry types fall back to narration."""
        assert HistoryEntryType.parse("combat") is HistoryEntryType.COMBAT_RESULT
        assert HistoryEntryType.parse("weird") is HistoryEntryType.GM_NARRATION


class TestDemoData:
    """Test offline stand-ins."""

    def test_demo_campaign_keeps_id(self):
        """Test the demo campaign carries the requested id."""
        campaign = demo_campaign("camp-42")
        assert campaign.id == "camp-42"
        assert campaign.title == DEMO_CAMPAIGN_TITLE
        assert campaign.current_location == DEMO_LOCATION
        assert len(campaign.game_state.history) == 2
        assert len(campaign.game_state.suggested_choices) == 4
        assert campaign.game_state.combat_state.active is False

    def test_demo_campaign_history_in_order(self):
        """Test demo history timestamps ascend."""
        history = demo_campaign("x").game_state.history
        assert history[0].timestamp < history[1].timestamp

    def test_demo_summaries(self):
        """Test the demo campaign list."""
        summaries = demo_summaries()
        assert len(summaries) == 1
        assert summaries[0].character_name == "Kael Voss"

    def test_offline_narration_rotates(self):
        """Test canned replies rotate with the log length."""
        replies = [offline_narration(n) for n in range(3)]
        assert len(set(replies)) == 3
        assert offline_narration(3) == replies[0]
        assert all("Offline mode" in reply for reply in replies)


class TestTemplates:
    """Test the built-in templates."""

    def test_lookup(self):
        """Test lookup by id."""
        assert get_template("sandbox").difficulty is TemplateDifficulty.EASY
        assert get_template("jedi-academy").title == "Tidecaller Academy"
        assert get_template("missing") is None

    def test_ids_unique(self):
        """Test template ids are unique."""
        ids = [template.id for template in BUILTIN_TEMPLATES]
        assert len(ids) == len(set(ids)) == 4

    def test_stars(self):
        """Test star ratings."""
        assert TemplateDifficulty.EASY.stars == 1
        assert TemplateDifficulty.BRUTAL.stars == 4


class TestTimestamps:
    """Test the wire timestamp format."""

    def test_format_has_milliseconds_and_z(self):
        """Test UTC encoding with millisecond precision."""
        value = datetime(2024, 5, 1, 10, 0, 0, 123456, tzinfo=timezone.utc)
        assert format_timestamp(value) == "2024-05-01T10:00:00.123Z"

    def test_format_converts_offsets(self):
        """Test non-UTC datetimes are converted."""
        value = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone(timedelta(hours=2)))
        assert format_timestamp(value) == "2024-05-01T10:00:00.000Z"

    def test_naive_is_utc(self):
        """Test naive datetimes are taken as UTC."""
        assert format_timestamp(datetime(2024, 1, 1)) == "2024-01-01T00:00:00.000Z"

    def test_parse_variants(self):
        """Test fractional and whole-second inputs decode to the same instant."""
        expected = datetime(2024, 5, 1, 10, 0, tzinfo=timezone.utc)
        assert parse_timestamp("2024-05-01T10:00:00Z") == expected
        assert parse_timestamp("2024-05-01T10:00:00.000Z") == expected
        assert parse_timestamp("2024-05-01T12:00:00+02:00") == expected
        assert parse_timestamp("2024-05-01T10:00:00.5Z").microsecond == 500000

    def test_history_entry_timestamp(self):
        """Test history serialization uses the wire format."""
        log = HistoryLog()
        entry = log.append(HistoryEntryType.GM_NARRATION, "Scene")
        assert entry.to_dict()["timestamp"] == format_timestamp(entry.timestamp)
