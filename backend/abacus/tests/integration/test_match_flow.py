"""End-to-end match flows through the event router over file-backed storage."""

import json

import pytest

from abacus.app import create_app
from abacus.logic.enums import ControllerPhase, GameMode
from abacus.messaging.types import BoardSnapshot
from abacus.settings import AbacusSettings


@pytest.fixture
def settings(tmp_path):
    return AbacusSettings(
        storage_path=str(tmp_path / "abacus.json"),
        log_dir=str(tmp_path / "logs"),
        mode_switch_cooldown_seconds=0.05,
        persist_in_memory=False,
    )


async def _send(app, event_type, **fields):
    result = await app.router.handle_event({"type": event_type, **fields})
    assert isinstance(result, BoardSnapshot), result
    return result


class TestSharedBoardSession:
    async def test_two_games_then_end_of_match(self, settings, tmp_path):
        app = create_app(settings)
        await _send(app, "select_match_mode", match_mode="pairs2")
        await _send(app, "set_score_display", score_display="sharedBoard")
        await _send(app, "rename_entrant", entrant=0, name="Reds")

        # game 1: two full first rods cascade all the way to the top rod
        for _ in range(2):
            board = await _send(app, "set_rod", entrant=1, rod=0, value=10)
        assert board.entrants[1].rods == (0, 0, 1)
        assert board.entrants[1].score == 100
        board = await _send(app, "set_rod", entrant=1, rod=2, value=4)
        assert board.entrants[1].is_highlighted is True
        board = await _send(app, "shake")
        assert [e.wins for e in board.entrants] == [0, 1]

        # game 2: team 1 wins in 101 after a mode switch
        board = await _send(app, "switch_game_mode", direction="left")
        assert board.game_mode == GameMode.MODE_101
        await app.controller.cooldown.wait_released()
        await _send(app, "set_rod", entrant=0, rod=1, value=10)
        await _send(app, "set_rod", entrant=0, rod=0, value=1)
        board = await _send(app, "shake")
        assert [e.wins for e in board.entrants] == [1, 1]

        # game 3 is in progress when the match ends
        await _send(app, "set_rod", entrant=0, rod=2, value=2)
        await _send(app, "request_end_game")
        board = await _send(app, "confirm_end_game")
        assert board.phase == ControllerPhase.ACTIVE
        assert [e.wins for e in board.entrants] == [0, 0]

        stored = json.loads((tmp_path / "abacus.json").read_text(encoding="utf-8"))
        history = json.loads(stored["gameHistory"])
        assert len(history) == 1
        entry = history[0]
        assert entry["id"] == board.history_entry_id
        assert entry["matchMode"] == "pairs2"
        assert entry["gameMode"] == "101"
        assert entry["scoreDisplayMode"] == "sharedBoard"
        assert entry["scores"] == [200, 0]
        assert entry["winner"] == 0
        assert entry["names"] == ["Reds", ""]
        assert entry["totalWins"] == [1, 1]
        assert [s["winner"] for s in entry["gameSessions"]] == [1, 0]
        assert stored["matchMode"] == "pairs2"
        assert stored["scoreDisplayMode"] == "sharedBoard"

    async def test_restart_restores_preferences_and_history(self, settings):
        app = create_app(settings)
        await _send(app, "select_match_mode", match_mode="freeForAll4")
        await _send(app, "set_rod", entrant=3, rod=2, value=4)
        await _send(app, "request_end_game")
        await _send(app, "confirm_end_game")

        restarted = create_app(settings)
        board = restarted.controller.board()
        assert board.phase == ControllerPhase.ACTIVE
        assert len(board.entrants) == 4
        history = restarted.controller.history()
        assert len(history) == 1
        assert history[0].winner == 3
        assert history[0].names is None

    async def test_cancelled_end_game_keeps_playing(self, settings):
        app = create_app(settings)
        await _send(app, "select_match_mode", match_mode="pairs2")
        await _send(app, "set_rod", entrant=0, rod=1, value=7)
        await _send(app, "request_end_game")
        board = await _send(app, "cancel_end_game")
        assert board.phase == ControllerPhase.ACTIVE
        assert board.entrants[0].score == 70
        assert app.controller.history() == []
