"""Gymnasium environment for Block Sudoku."""
from .block_sudoku_env import BlockSudokuEnv

__all__ = [
    "BlockSudokuEnv",
]
