import logging

import pytest

from abacus.logic.enums import ScoreDisplayMode
from abacus.logic.exceptions import SharedBoardRequiredError
from abacus.tests.helpers.builders import FIXED_NOW


class TestRodOperations:
    def test_set_rod_and_carry(self, pairs_controller):
        pairs_controller.set_rod(0, 0, 10)
        assert pairs_controller.state.rods[0].values == (0, 5, 0)

    def test_drag_bead(self, pairs_controller):
        pairs_controller.drag_bead(1, 2, 3, to_counted=True)
        assert pairs_controller.state.rods[1].values == (0, 0, 4)
        pairs_controller.drag_bead(1, 2, 1, to_counted=False)
        assert pairs_controller.state.rods[1].values == (0, 0, 1)

    def test_reset_focused_entrant(self, pairs_controller):
        pairs_controller.set_rod(0, 0, 3)
        pairs_controller.set_rod(1, 0, 4)
        pairs_controller.focus_entrant(1)
        pairs_controller.reset_focused_entrant()
        assert pairs_controller.state.rods[0].values == (3, 0, 0)
        assert pairs_controller.state.rods[1].is_empty

    def test_focus_out_of_range_clamps(self, pairs_controller):
        pairs_controller.focus_entrant(1)
        pairs_controller.focus_entrant(9)
        assert pairs_controller.board().focused_entrant == 0

    def test_reset_all(self, pairs_controller):
        pairs_controller.set_rod(0, 0, 3)
        pairs_controller.set_rod(1, 2, 1)
        pairs_controller.reset_all()
        assert all(r.is_empty for r in pairs_controller.state.rods)


class TestShakeReset:
    def test_shared_board_increments_winner(self, pairs_controller):
        pairs_controller.set_score_display(ScoreDisplayMode.SHARED_BOARD)
        pairs_controller.set_rod(1, 2, 4)
        record = pairs_controller.reset_by_shake()
        assert record is not None
        assert record.winner == 1
        assert record.date == FIXED_NOW
        assert pairs_controller.state.win_counters == (0, 1)
        assert all(r.is_empty for r in pairs_controller.state.rods)

    def test_wins_accumulate_across_games(self, pairs_controller):
        pairs_controller.set_score_display(ScoreDisplayMode.SHARED_BOARD)
        for _ in range(2):
            pairs_controller.set_rod(0, 2, 4)
            pairs_controller.reset_by_shake()
        assert pairs_controller.board().entrants[0].wins == 2

    def test_per_team_display_keeps_counters(self, pairs_controller):
        pairs_controller.set_rod(0, 2, 4)
        pairs_controller.reset_by_shake()
        assert pairs_controller.state.win_counters == (0, 0)
        assert len(pairs_controller.state.session_records) == 1

    def test_shake_never_writes_history(self, pairs_controller):
        pairs_controller.set_rod(0, 2, 4)
        pairs_controller.reset_by_shake()
        assert pairs_controller.history() == []

    def test_shake_logs_outcome(self, pairs_controller, caplog):
        pairs_controller.set_rod(0, 2, 4)
        with caplog.at_level(logging.INFO):
            pairs_controller.reset_by_shake()
        records = [
            r for r in caplog.records if isinstance(r.msg, dict) and r.msg.get("event") == "game closed by shake"
        ]
        assert len(records) == 1
        assert records[0].msg["winner"] == 0
        assert records[0].msg["scores"] == [400, 0]


class TestWinCounterCorrection:
    def test_shared_board_win_counter_can_be_corrected(self, pairs_controller):
        pairs_controller.set_score_display(ScoreDisplayMode.SHARED_BOARD)
        pairs_controller.set_rod(0, 2, 4)
        pairs_controller.reset_by_shake()
        pairs_controller.set_win_counter(0, 0)
        pairs_controller.set_win_counter(1, 3)
        assert [e.wins for e in pairs_controller.board().entrants] == [0, 3]

    def test_corrected_counts_reach_history(self, pairs_controller):
        pairs_controller.set_score_display(ScoreDisplayMode.SHARED_BOARD)
        pairs_controller.set_win_counter(1, 2)
        pairs_controller.request_end_game()
        entry = pairs_controller.confirm_end_game()
        assert entry.total_wins == (0, 2)

    def test_per_team_display_refuses(self, pairs_controller):
        with pytest.raises(SharedBoardRequiredError):
            pairs_controller.set_win_counter(0, 1)
        assert pairs_controller.state.win_counters == (0, 0)
