"""
Block Sudoku Gymnasium Environment.

This module exposes a ``GameSession`` as a Gymnasium environment so that
agents can act as the input layer: every action is a (tray slot, row, col)
placement decoded into drag, preview and commit intents.
"""
from typing import Dict, Tuple, Any, Optional, List
import numpy as np
import gymnasium as gym
from gymnasium import spaces

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from blockdoku.board import GRID_SIZE
from blockdoku.config import GameConfig
from blockdoku.engine import GameSession


class BlockSudokuEnv(gym.Env):
    """
    Gymnasium environment for Block Sudoku.

    Observation Space:
        Dictionary with:
        - 'board': (9, 9) float32 array, 0=empty, 1=filled
        - 'pieces': (3, 9, 9) float32 array, tray shape masks (zeros for empty slots)
        - 'action_mask': (243,) int8 array, legal actions

    Action Space:
        Discrete(243) - (slot, row, col) as a flat index
        Action = slot * 81 + row * 9 + col
    """

    metadata = {"render_modes": ["human", "ansi"]}

    BOARD_SIZE = GRID_SIZE
    NUM_PIECES_PER_TURN = 3
    ACTION_SPACE_SIZE = NUM_PIECES_PER_TURN * BOARD_SIZE * BOARD_SIZE  # 3 * 9 * 9 = 243

    def __init__(
        self,
        render_mode: Optional[str] = None,
        reward_config: Optional[Dict[str, float]] = None,
        seed: Optional[int] = None,
        config: Optional[GameConfig] = None,
    ):
        """
        Initialize the environment.

        Args:
            render_mode: 'human' for console output, 'ansi' for string return
            reward_config: Overrides for the reward terms
            seed: Random seed for reproducible deals
            config: Game configuration; its tray size must be 3
        """
        super().__init__()

        self.render_mode = render_mode
        self.seed_value = seed
        self.config = config or GameConfig()
        if self.config.tray_size != self.NUM_PIECES_PER_TURN:
            raise ValueError(f"BlockSudokuEnv needs a tray of {self.NUM_PIECES_PER_TURN} shapes")

        self.reward_config = {
            'reward_scale': 0.01,
            'game_over_penalty': -1.0,
            'invalid_action_penalty': -1.0,
        }
        if reward_config:
            self.reward_config.update(reward_config)

        self.session = GameSession(config=self.config, seed=seed)

        self.observation_space = spaces.Dict({
            'board': spaces.Box(
                low=0.0, high=1.0,
                shape=(self.BOARD_SIZE, self.BOARD_SIZE),
                dtype=np.float32
            ),
            'pieces': spaces.Box(
                low=0.0, high=1.0,
                shape=(self.NUM_PIECES_PER_TURN, self.BOARD_SIZE, self.BOARD_SIZE),
                dtype=np.float32
            ),
            'action_mask': spaces.Box(
                low=0, high=1,
                shape=(self.ACTION_SPACE_SIZE,),
                dtype=np.int8
            ),
        })
        self.action_space = spaces.Discrete(self.ACTION_SPACE_SIZE)

    def _action_to_move(self, action: int) -> Tuple[int, int, int]:
        """Convert a flat action index to (slot, row, col)."""
        cells = self.BOARD_SIZE * self.BOARD_SIZE
        slot, remainder = divmod(int(action), cells)
        row, col = divmod(remainder, self.BOARD_SIZE)
        return slot, row, col

    def _move_to_action(self, slot: int, row: int, col: int) -> int:
        """Convert (slot, row, col) to a flat action index."""
        return slot * self.BOARD_SIZE * self.BOARD_SIZE + row * self.BOARD_SIZE + col

    def _get_observation(self) -> Dict[str, np.ndarray]:
        state = self.session.state
        pieces = np.zeros(
            (self.NUM_PIECES_PER_TURN, self.BOARD_SIZE, self.BOARD_SIZE), dtype=np.float32
        )
        for slot, shape in enumerate(state.tray):
            pieces[slot] = shape.to_mask(self.BOARD_SIZE)

        return {
            'board': state.board.to_tensor(),
            'pieces': pieces,
            'action_mask': self.session.get_action_mask().flatten().astype(np.int8),
        }

    def _get_info(self, points: int = 0) -> Dict[str, Any]:
        stats = self.session.get_statistics()
        return {
            'score': stats['score'],
            'moves': stats['moves_made'],
            'clearing_moves': stats['clearing_moves'],
            'max_streak': stats['max_streak'],
            'board_fill': stats['board_fill_ratio'],
            'tier': stats['tier'],
            'points': points,
            'invalid_action': False,
        }

    def reset(
        self,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None,
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Start a new game.

        Args:
            seed: Random seed
            options: Additional options (unused)

        Returns:
            Tuple of (observation, info)
        """
        super().reset(seed=seed)

        if seed is not None:
            self.seed_value = seed
        self.session = GameSession(config=self.config, seed=self.seed_value)

        return self._get_observation(), self._get_info()

    def step(
        self, action: int
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Place a tray shape.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info)
        """
        slot, row, col = self._action_to_move(action)
        score_before = self.session.state.score

        if not self.session.place(slot, row, col):
            info = self._get_info()
            info['invalid_action'] = True
            return (
                self._get_observation(),
                self.reward_config['invalid_action_penalty'],
                False,
                False,
                info,
            )

        points = self.session.state.score - score_before
        reward = points * self.reward_config['reward_scale']
        terminated = self.session.is_game_over()
        if terminated:
            reward += self.reward_config['game_over_penalty']

        if self.render_mode == "human":
            self.render()

        return self._get_observation(), reward, terminated, False, self._get_info(points)

    def get_action_mask(self) -> np.ndarray:
        """Boolean array of shape (243,) where True = legal action."""
        return self.session.get_action_mask().flatten()

    def get_valid_actions(self) -> List[int]:
        """Get list of legal action indices."""
        return [self._move_to_action(*move) for move in self.session.get_valid_moves()]

    def sample_valid_action(self) -> int:
        """Sample a random legal action (0 when there is none)."""
        valid_actions = self.get_valid_actions()
        if not valid_actions:
            return 0
        return int(self.np_random.choice(valid_actions))

    def render(self) -> Optional[str]:
        """Render the current game state."""
        if self.render_mode == "ansi":
            return str(self.session)
        elif self.render_mode == "human":
            print("\033[2J\033[H")
            print(self.session)
        return None

    def close(self) -> None:
        pass


gym.register(
    id='BlockSudoku-v0',
    entry_point='environment.block_sudoku_env:BlockSudokuEnv',
    max_episode_steps=10000,
)
