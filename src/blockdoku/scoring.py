"""
Scoring engine.

Turns a hypothetical or real placement into points, a combo label and a
hammer bonus. The same function drives the ghost preview and the commit, so
it must not touch its inputs and must be deterministic.

Formula:
    points = blocks_placed * BLOCK_PLACED
           + floor(LINE_CLEAR_BASE * clears^2 * multiplier)          (if clears > 0)
    multiplier = min(MAX_COMBO_MULTIPLIER,
                     1 + (clears - 1) * COMBO_MULTIPLIER_BASE + (streak + 1) * STREAK_MULTIPLIER)
"""
from dataclasses import dataclass, field
from enum import Enum
import math
from typing import FrozenSet, Optional, Sequence, Tuple

from .board import Board, Cell
from .config import GameConfig, DEFAULT_CONFIG


class ComboLabel(Enum):
    """Text shown for multi-region clears."""
    DOUBLE = "DOUBLE CLEAR!"
    TRIPLE = "TRIPLE COMBO!"
    ULTRA = "ULTRA COMBO!"


@dataclass(frozen=True)
class PlacementOutcome:
    """Result of evaluating a placement, before cleared cells are removed."""
    board: Board
    points: int
    cleared_cells: FrozenSet[Cell] = field(default_factory=frozenset)
    clear_count: int = 0
    combo_label: Optional[ComboLabel] = None
    bonus_hammers: int = 0
    blocks_placed: int = 0
    combo_multiplier: float = 1.0


def combo_multiplier(clear_count: int, current_streak: int, config: GameConfig = DEFAULT_CONFIG) -> float:
    """Multiplier applied to the line-clear score of a clearing placement."""
    scoring = config.scoring
    potential_streak = current_streak + 1
    return min(
        scoring.max_combo_multiplier,
        1 + (clear_count - 1) * scoring.combo_multiplier_base
        + potential_streak * scoring.streak_multiplier,
    )


def label_for(clear_count: int, config: GameConfig = DEFAULT_CONFIG) -> Tuple[Optional[ComboLabel], int]:
    """
    Combo label and hammer bonus for a number of simultaneous clears.

    Single clears get neither a label nor a bonus.
    """
    rewards = config.powerup_rewards
    if clear_count >= 4:
        return ComboLabel.ULTRA, rewards.ultra_clear
    if clear_count == 3:
        return ComboLabel.TRIPLE, rewards.triple_clear
    if clear_count == 2:
        return ComboLabel.DOUBLE, rewards.double_clear
    return None, 0


def evaluate_placement(
    board: Board,
    row: int,
    col: int,
    matrix: Sequence[Sequence[int]],
    current_streak: int,
    config: GameConfig = DEFAULT_CONFIG,
) -> PlacementOutcome:
    """
    Score a placement without modifying ``board``.

    The placement must be legal: every occupied matrix cell has to land on
    an empty cell inside the board.

    Args:
        board: Board before the placement
        row: Row of the shape's top-left corner
        col: Column of the shape's top-left corner
        matrix: Shape matrix (1 = occupied)
        current_streak: Consecutive clearing placements so far
        config: Scoring constants

    Returns:
        PlacementOutcome whose board holds the shape but not yet the clears

    Raises:
        ValueError: if the shape would leave the board or overlap a block
    """
    new_board = board.copy()
    blocks_placed = 0
    for i, matrix_row in enumerate(matrix):
        for j, cell in enumerate(matrix_row):
            if cell:
                r, c = row + i, col + j
                if not new_board.in_bounds(r, c) or new_board.grid[r, c] != 0:
                    raise ValueError(f"Illegal placement at ({row}, {col})")
                new_board.grid[r, c] = 1
                blocks_placed += 1

    points = blocks_placed * config.scoring.block_placed
    clears = new_board.detect_clears()
    if clears.count == 0:
        return PlacementOutcome(new_board, points, blocks_placed=blocks_placed)

    multiplier = combo_multiplier(clears.count, current_streak, config)
    points += math.floor(config.scoring.line_clear_base * clears.count ** 2 * multiplier)
    label, bonus = label_for(clears.count, config)

    return PlacementOutcome(
        board=new_board,
        points=points,
        cleared_cells=clears.cleared_cells,
        clear_count=clears.count,
        combo_label=label,
        bonus_hammers=bonus,
        blocks_placed=blocks_placed,
        combo_multiplier=multiplier,
    )
