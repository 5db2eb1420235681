"""Rules engine for Block Sudoku."""
from .shapes import Shape, ALL_SHAPES, SHAPE_POOLS, get_shape_by_id, rotate_matrix
from .board import Board, ClearResult, can_place, snap_position
from .config import GameConfig, DifficultyTier
from .scoring import ComboLabel, PlacementOutcome, evaluate_placement
from .dealer import deal_shapes, tier_for_score
from .state import GameState, GameStatus, PowerUpKind, PowerUps, Preview
from .engine import GameSession, SessionView, new_game, transition
from .persistence import SnapshotError, from_save_dict, restore_or_new, to_save_dict

__all__ = [
    "Shape",
    "ALL_SHAPES",
    "SHAPE_POOLS",
    "get_shape_by_id",
    "rotate_matrix",
    "Board",
    "ClearResult",
    "can_place",
    "snap_position",
    "GameConfig",
    "DifficultyTier",
    "ComboLabel",
    "PlacementOutcome",
    "evaluate_placement",
    "deal_shapes",
    "tier_for_score",
    "GameState",
    "GameStatus",
    "PowerUpKind",
    "PowerUps",
    "Preview",
    "GameSession",
    "SessionView",
    "new_game",
    "transition",
    "SnapshotError",
    "from_save_dict",
    "restore_or_new",
    "to_save_dict",
]
