"""
Difficulty tiers and the shape dealer.

The dealer draws a batch of shapes from the pool unlocked by the current
score and retries until at least one shape of the batch fits somewhere on
the board. When no batch fits it falls back to a single dot, and when even
that does not fit the board is full and the game is over.
"""
from typing import List, Optional, Sequence
import numpy as np

from .board import Board, has_any_placement
from .config import DifficultyTier, GameConfig, DEFAULT_CONFIG
from .shapes import Shape, get_pool, get_shape_by_id

FALLBACK_SHAPE_ID = "dot-0"
MAX_UID = 2 ** 62


def tier_for_score(score: int, config: GameConfig = DEFAULT_CONFIG) -> DifficultyTier:
    """Return the highest tier whose threshold the score meets."""
    active = config.tiers[0]
    for tier in config.tiers:
        if score >= tier.score:
            active = tier
    return active


def pool_for_score(score: int, config: GameConfig = DEFAULT_CONFIG) -> Sequence[Shape]:
    """Get the shape pool unlocked at the given score."""
    return get_pool(tier_for_score(score, config).level)


def new_uid(rng: np.random.Generator, taken: Sequence[int] = ()) -> int:
    """Draw a uid that does not collide with any uid in ``taken``."""
    while True:
        uid = int(rng.integers(1, MAX_UID))
        if uid not in taken:
            return uid


def is_tray_playable(tray: Sequence[Shape], board: Board) -> bool:
    """Check if any shape in the tray can be placed anywhere on the board."""
    return has_any_placement(tray, board)


def deal_shapes(
    board: Board,
    score: int,
    rng: np.random.Generator,
    config: GameConfig = DEFAULT_CONFIG,
    taken_uids: Sequence[int] = (),
) -> List[Shape]:
    """
    Deal a new tray.

    Args:
        board: Current board
        score: Current score, selects the difficulty tier
        rng: Random generator used for shape choice and uids
        config: Tray size and retry budget
        taken_uids: uids that must not be reused

    Returns:
        ``tray_size`` shapes with at least one playable, a single fallback
        dot, or an empty list when nothing fits (game over)
    """
    pool = pool_for_score(score, config)
    taken = list(taken_uids)

    for _ in range(config.deal_attempts):
        indices = rng.integers(0, len(pool), size=config.tray_size)
        batch = []
        for index in indices:
            uid = new_uid(rng, taken + [s.uid for s in batch])
            batch.append(pool[int(index)].with_uid(uid))
        if is_tray_playable(batch, board):
            return batch

    fallback = get_shape_by_id(FALLBACK_SHAPE_ID)
    if board.has_valid_placement(fallback):
        return [fallback.with_uid(new_uid(rng, taken))]
    return []


def find_shape(tray: Sequence[Shape], uid: int) -> Optional[Shape]:
    """Look up a tray shape by uid."""
    for shape in tray:
        if shape.uid == uid:
            return shape
    return None
