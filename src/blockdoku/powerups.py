"""
Power-up effects.

- Hammer: smash the 3x3 neighbourhood around a cell
- Refresh: throw away the tray so the dealer deals a new one

Both require the power-up to be selected and in stock, push a history
snapshot before changing anything, and deselect the power-up afterwards.
"""
from dataclasses import replace
from typing import List

from .board import Board, Cell
from .config import GameConfig, DEFAULT_CONFIG
from .sound import SoundCue
from .state import GameState, PowerUpKind

NO_POWER_UPS_LEFT = "NO POWER-UPS LEFT!"
NO_BLOCKS_TO_CLEAR = "NO BLOCKS TO CLEAR!"
HAMMER_SMASH = "HAMMER SMASH!"
FRESH_START = "FRESH START!"


def hammer_targets(board: Board, row: int, col: int) -> List[Cell]:
    """Occupied cells of the 3x3 neighbourhood centred on (row, col), clipped to the board."""
    targets = []
    for r in range(row - 1, row + 2):
        for c in range(col - 1, col + 2):
            if board.is_filled(r, c):
                targets.append((r, c))
    return targets


def _is_ready(state: GameState, kind: PowerUpKind) -> bool:
    return state.active_power_up is kind and state.power_ups.count(kind) > 0


def apply_hammer(state: GameState, row: int, col: int, config: GameConfig = DEFAULT_CONFIG) -> GameState:
    """
    Use the hammer on (row, col).

    Returns the same state object when the hammer is not ready or the target
    lies off the board. An empty neighbourhood only deselects the hammer.
    """
    if not _is_ready(state, PowerUpKind.HAMMER) or not state.board.in_bounds(row, col):
        return state

    targets = hammer_targets(state.board, row, col)
    if not targets:
        return replace(
            state,
            active_power_up=None,
            notice=NO_BLOCKS_TO_CLEAR,
            sound_cue=SoundCue.DROP,
        )

    state = state.with_snapshot(config.history_limit)
    board = state.board.copy()
    cleared = board.clear_cells(targets)

    return replace(
        state,
        board=board,
        score=state.score + cleared * config.scoring.hammer_clear_points,
        power_ups=state.power_ups.add(PowerUpKind.HAMMER, -1),
        active_power_up=None,
        preview=None,
        combo_label=None,
        notice=HAMMER_SMASH,
        sound_cue=SoundCue.CLEAR,
    )


def apply_refresh(state: GameState, config: GameConfig = DEFAULT_CONFIG) -> GameState:
    """Discard the tray and spend one refresh charge; the caller re-deals."""
    if not _is_ready(state, PowerUpKind.REFRESH):
        return state

    state = state.with_snapshot(config.history_limit)
    return replace(
        state,
        tray=(),
        power_ups=state.power_ups.add(PowerUpKind.REFRESH, -1),
        active_power_up=None,
        dragging_uid=None,
        preview=None,
        combo_label=None,
        notice=FRESH_START,
        sound_cue=SoundCue.DROP,
    )
