"""
Tests for event logging.
"""
import json
import pytest
import numpy as np
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from blockdoku.board import Board
from blockdoku.engine import GameSession
from blockdoku.shapes import get_shape_by_id
from blockdoku.state import GameState, GameStatus, PowerUpKind, PowerUps
from utils.logger import Logger, MetricsTracker, convert_to_serializable


def row_almost_full_state(**kwargs) -> GameState:
    board = Board()
    board.grid[0, 0:6] = 1
    tray = tuple(get_shape_by_id(s).with_uid(i + 1) for i, s in enumerate(("line-3-0", "dot-0", "dot-0")))
    return GameState(board=board, tray=tray, **kwargs)


class TestSerialization:
    """Test JSON conversion."""

    def test_numpy(self):
        data = convert_to_serializable({'a': np.int64(3), 'b': np.float32(0.5), 'c': np.arange(3)})
        assert data == {'a': 3, 'b': 0.5, 'c': [0, 1, 2]}
        json.dumps(data)

    def test_enum_and_sets(self):
        data = convert_to_serializable({'status': GameStatus.PAUSED, 'cells': frozenset({(1, 2), (0, 1)})})
        assert data == {'status': 'paused', 'cells': [[0, 1], [1, 2]]}

    def test_bool(self):
        assert convert_to_serializable(np.bool_(True)) is True


class TestLogger:
    """Test the JSONL logger."""

    def test_log_and_read(self, tmp_path):
        logger = Logger(str(tmp_path), name="test")
        logger.log({'event': 'placement', 'points': np.int64(5)})
        logger.log({'event': 'undo'})
        records = logger.read()
        assert [r['event'] for r in records] == ['placement', 'undo']
        assert records[0]['points'] == 5
        assert records[1]['step'] == 2
        assert logger.read('undo')[0]['event'] == 'undo'

    def test_explicit_step(self, tmp_path):
        logger = Logger(str(tmp_path))
        logger.log({'event': 'x'}, step=10)
        assert logger.read()[0]['step'] == 10

    def test_summary(self, tmp_path):
        logger = Logger(str(tmp_path), name="test")
        logger.log({'event': 'placement'})
        logger.log({'event': 'placement'})
        path = logger.save_summary({'games': 1})
        summary = json.loads(path.read_text())
        assert summary['events'] == {'placement': 2}
        assert summary['games'] == 1

    def test_session_events(self, tmp_path):
        logger = Logger(str(tmp_path))
        session = GameSession(
            seed=0,
            logger=logger,
            state=row_almost_full_state(score=795, power_ups=PowerUps(hammer=1)),
        )
        session.place(0, 0, 6)
        session.select_power_up(PowerUpKind.HAMMER)
        session.use_hammer(0, 0)
        session.undo()
        session.reset()

        placement = logger.read('placement')[0]
        assert placement['shape'] == 'line-3-0'
        assert placement['points'] == 15
        assert placement['cells_cleared'] == 9
        assert logger.read('tier_up')[0]['tier'] == 'Medium'
        assert logger.event_counts['undo'] == 1
        assert logger.event_counts['reset'] == 1

    def test_game_over_event(self, tmp_path):
        logger = Logger(str(tmp_path))
        board = Board(np.fromfunction(lambda r, c: (r + c) % 2 == 0, (9, 9)).astype(np.int8))
        board.grid[0, 1] = 0
        board.grid[0, 2] = 0
        tray = (get_shape_by_id("line-2-0").with_uid(1), get_shape_by_id("line-2-1").with_uid(2))
        session = GameSession(seed=0, logger=logger, state=GameState(board=board, tray=tray, score=40))
        assert session.place(0, 0, 1)
        assert session.is_game_over()
        assert logger.read('game_over')[0]['high_score'] >= 40


class TestMetricsTracker:
    """Test rolling statistics."""

    def test_summary(self):
        tracker = MetricsTracker(window_size=3)
        for value in (1, 2, 3, 4):
            tracker.add('score', value)
        summary = tracker.get_summary('score')
        assert summary['mean'] == 3.0
        assert summary['min'] == 2.0
        assert summary['last'] == 4.0

    def test_add_all_skips_non_numeric(self):
        tracker = MetricsTracker()
        tracker.add_all({'score': 10, 'tier': 'Easy', 'flag': True})
        assert set(tracker.metrics) == {'score'}

    def test_empty(self):
        assert MetricsTracker().get_summary('missing')['mean'] == 0.0
