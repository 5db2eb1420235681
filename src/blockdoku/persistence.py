"""
Save-state encoding.

A session is saved as a JSON-compatible dictionary holding the board, tray,
score, streak, power-ups, undo history and high score. Restoring validates
the structure strictly; ``restore_or_new`` falls back to a fresh game when
the data is missing or malformed. Reading and writing the bytes is left to
the caller.
"""
from dataclasses import replace
from typing import Any, Dict, Optional
import numpy as np

from .board import Board, GRID_SIZE
from .config import GameConfig, DEFAULT_CONFIG
from .engine import new_game, settle
from .shapes import BASE_SHAPES, Shape
from .state import GameState, HistorySnapshot, PowerUps

SAVE_VERSION = 1


class SnapshotError(ValueError):
    """Raised when saved data does not have the expected structure."""


# =============================================================================
# ENCODING
# =============================================================================

def shape_to_dict(shape: Shape) -> Dict[str, Any]:
    return {
        "id": shape.id,
        "base": shape.base,
        "matrix": [list(row) for row in shape.matrix],
        "uid": shape.uid,
    }


def _snapshot_to_dict(snapshot: HistorySnapshot) -> Dict[str, Any]:
    return {
        "board": snapshot.board.to_list(),
        "tray": [shape_to_dict(s) for s in snapshot.tray],
        "score": snapshot.score,
        "streak": snapshot.streak,
        "power_ups": {"hammer": snapshot.power_ups.hammer, "refresh": snapshot.power_ups.refresh},
    }


def to_save_dict(state: GameState) -> Dict[str, Any]:
    """Convert a state to a dictionary for serialization."""
    data = _snapshot_to_dict(state.snapshot())
    data.update({
        "version": SAVE_VERSION,
        "history": [_snapshot_to_dict(s) for s in state.history],
        "high_score": state.high_score,
        "game_over": state.game_over,
        "sound_enabled": state.sound_enabled,
        "announced_level": state.announced_level,
    })
    return data


# =============================================================================
# DECODING
# =============================================================================

def _require(data: Dict[str, Any], key: str, kind, where: str) -> Any:
    if not isinstance(data, dict):
        raise SnapshotError(f"{where}: expected an object, got {type(data).__name__}")
    if key not in data:
        raise SnapshotError(f"{where}: missing '{key}'")
    value = data[key]
    # bool is an int subclass; never accept it where a number is expected
    if kind is int and isinstance(value, bool):
        raise SnapshotError(f"{where}: '{key}' must be an integer")
    if not isinstance(value, kind):
        raise SnapshotError(f"{where}: '{key}' has type {type(value).__name__}")
    return value


def _non_negative(data: Dict[str, Any], key: str, where: str) -> int:
    value = _require(data, key, int, where)
    if value < 0:
        raise SnapshotError(f"{where}: '{key}' must be non-negative, got {value}")
    return value


def _board_from(rows: Any, where: str) -> Board:
    if (
        not isinstance(rows, list)
        or len(rows) != GRID_SIZE
        or any(not isinstance(row, list) or len(row) != GRID_SIZE for row in rows)
    ):
        raise SnapshotError(f"{where}: board must be {GRID_SIZE}x{GRID_SIZE}")
    if any(type(cell) is not int or cell not in (0, 1) for row in rows for cell in row):
        raise SnapshotError(f"{where}: board cells must be 0 or 1")
    return Board(np.array(rows, dtype=np.int8))


def shape_from_dict(data: Dict[str, Any], where: str = "shape") -> Shape:
    """Rebuild a tray shape, checking its matrix and uid."""
    shape_id = _require(data, "id", str, where)
    base = _require(data, "base", str, where)
    matrix = _require(data, "matrix", list, where)
    uid = _require(data, "uid", int, where)
    if base not in BASE_SHAPES:
        raise SnapshotError(f"{where}: unknown base shape '{base}'")
    if not matrix or any(not isinstance(row, list) for row in matrix):
        raise SnapshotError(f"{where}: matrix must be a non-empty list of rows")
    if any(type(cell) is not int or cell not in (0, 1) for row in matrix for cell in row):
        raise SnapshotError(f"{where}: matrix cells must be 0 or 1")
    if not any(cell for row in matrix for cell in row):
        raise SnapshotError(f"{where}: matrix has no occupied cell")
    try:
        return Shape(shape_id, base, tuple(tuple(row) for row in matrix), uid)
    except ValueError as e:
        raise SnapshotError(f"{where}: {e}") from e


def _tray_from(items: Any, where: str, config: GameConfig) -> tuple:
    if not isinstance(items, list):
        raise SnapshotError(f"{where}: tray must be a list")
    if len(items) > config.tray_size:
        raise SnapshotError(f"{where}: tray holds {len(items)} shapes, limit is {config.tray_size}")
    tray = tuple(shape_from_dict(item, f"{where}.tray[{i}]") for i, item in enumerate(items))
    uids = [shape.uid for shape in tray]
    if len(set(uids)) != len(uids):
        raise SnapshotError(f"{where}: duplicate tray uids")
    return tray


def _snapshot_from(data: Any, where: str, config: GameConfig) -> HistorySnapshot:
    power_ups = _require(data, "power_ups", dict, where)
    return HistorySnapshot(
        board=_board_from(_require(data, "board", list, where), where),
        tray=_tray_from(_require(data, "tray", list, where), where, config),
        score=_non_negative(data, "score", where),
        streak=_non_negative(data, "streak", where),
        power_ups=PowerUps(
            hammer=_non_negative(power_ups, "hammer", f"{where}.power_ups"),
            refresh=_non_negative(power_ups, "refresh", f"{where}.power_ups"),
        ),
    )


def from_save_dict(data: Any, config: GameConfig = DEFAULT_CONFIG) -> GameState:
    """
    Create a state from a saved dictionary.

    Raises:
        SnapshotError: if any field is missing, mistyped or out of range
    """
    version = _require(data, "version", int, "save")
    if version != SAVE_VERSION:
        raise SnapshotError(f"save: unsupported version {version}")

    current = _snapshot_from(data, "save", config)
    history_items = _require(data, "history", list, "save")
    if len(history_items) > config.history_limit:
        raise SnapshotError(
            f"save: history holds {len(history_items)} entries, limit is {config.history_limit}"
        )
    history = tuple(
        _snapshot_from(item, f"save.history[{i}]", config) for i, item in enumerate(history_items)
    )

    return GameState(
        board=current.board,
        tray=current.tray,
        score=current.score,
        streak=current.streak,
        power_ups=current.power_ups,
        history=history,
        high_score=_non_negative(data, "high_score", "save"),
        game_over=_require(data, "game_over", bool, "save"),
        sound_enabled=_require(data, "sound_enabled", bool, "save"),
        announced_level=_non_negative(data, "announced_level", "save"),
    )


def restore_or_new(
    data: Optional[Dict[str, Any]],
    rng: np.random.Generator,
    config: GameConfig = DEFAULT_CONFIG,
    high_score: int = 0,
) -> GameState:
    """
    Restore a saved session, or start a fresh one.

    Args:
        data: Saved dictionary, or None when nothing was saved
        rng: Random generator for dealing
        config: Game configuration
        high_score: High score to carry into a fresh session

    Returns:
        The restored (and settled) state, or a new game when ``data`` is
        missing or fails validation
    """
    if data is None:
        return new_game(rng, config, high_score=high_score)
    try:
        state = from_save_dict(data, config)
    except SnapshotError:
        return new_game(rng, config, high_score=high_score)
    state = replace(state, high_score=max(state.high_score, high_score))
    return settle(state, rng, config)

