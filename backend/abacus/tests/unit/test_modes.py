import pytest
from pydantic import ValidationError

from abacus.logic.enums import GameMode, MatchMode
from abacus.logic.modes import MODE_RULES, ModeRules, get_mode_rules


class TestModeRulesTable:
    def test_every_game_mode_has_rules(self):
        assert set(MODE_RULES) == set(GameMode)

    def test_mode_365_rules(self):
        rules = get_mode_rules(GameMode.MODE_365)
        assert rules.multipliers == (5, 10, 100)
        assert rules.max_score == 1150

    def test_mode_101_rules(self):
        rules = get_mode_rules(GameMode.MODE_101)
        assert rules.multipliers == (1, 10, 100)
        assert rules.max_score == 1110

    def test_365_threshold_is_exclusive(self):
        rules = get_mode_rules(GameMode.MODE_365)
        assert rules.is_winning(365) is False
        assert rules.is_winning(366) is True

    def test_101_threshold_is_inclusive(self):
        rules = get_mode_rules(GameMode.MODE_101)
        assert rules.is_winning(100) is False
        assert rules.is_winning(101) is True


class TestModeRulesValidation:
    def test_rejects_wrong_multiplier_count(self):
        with pytest.raises(ValidationError, match="expected 3 multipliers"):
            ModeRules(multipliers=(1, 10), threshold=10, inclusive=True)

    def test_rejects_non_positive_multiplier(self):
        with pytest.raises(ValidationError, match="must be positive"):
            ModeRules(multipliers=(1, 0, 100), threshold=10, inclusive=True)

    def test_rejects_unreachable_threshold(self):
        with pytest.raises(ValidationError, match="cannot be reached"):
            ModeRules(multipliers=(1, 1, 1), threshold=30, inclusive=False)

    def test_threshold_at_full_rods_is_reachable_when_inclusive(self):
        rules = ModeRules(multipliers=(1, 1, 1), threshold=30, inclusive=True)
        assert rules.is_winning(rules.max_score)

    def test_rules_are_frozen(self):
        rules = get_mode_rules(GameMode.MODE_365)
        with pytest.raises(ValidationError):
            rules.threshold = 1


class TestEnums:
    def test_persisted_tags(self):
        assert MatchMode.PAIRS_2 == "pairs2"
        assert MatchMode.FREE_FOR_ALL_4 == "freeForAll4"
        assert GameMode.MODE_365 == "365"
        assert GameMode.MODE_101 == "101"

    def test_players_count(self):
        assert MatchMode.PAIRS_2.players_count == 2
        assert MatchMode.FREE_FOR_ALL_4.players_count == 4

    def test_toggled(self):
        assert GameMode.MODE_365.toggled() == GameMode.MODE_101
        assert GameMode.MODE_101.toggled() == GameMode.MODE_365
