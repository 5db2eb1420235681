"""
Block Sudoku Game Engine.

This module implements the session state machine:
- A pure ``transition(state, intent, rng, config)`` reducer
- Dealing a new tray whenever the tray runs empty
- Game over detection after every tray or board change
- Bounded undo history
- ``GameSession``, a thin stateful wrapper that plays sound cues, logs
  events and exposes a read-only view for the presentation layer
"""
from dataclasses import dataclass, replace
import math
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple
import numpy as np

from .board import Board, Cell
from .config import GameConfig, DEFAULT_CONFIG
from .dealer import deal_shapes, find_shape, is_tray_playable, tier_for_score
from .intents import (
    BeginDrag, CancelDrag, ClearPreview, CommitDrag, Intent, Reset, RotateInTray,
    SelectPowerUp, TogglePause, ToggleSound, Undo, UpdatePreview, UseHammer, UseRefresh,
)
from .powerups import NO_POWER_UPS_LEFT, apply_hammer, apply_refresh
from .scoring import evaluate_placement
from .shapes import Shape
from .sound import NullSoundSink, SoundCue, SoundSink
from .state import GameState, GameStatus, PowerUpKind, PowerUps, Preview

Handler = Callable[[GameState, Any, np.random.Generator, GameConfig], GameState]


# =============================================================================
# STATE HELPERS
# =============================================================================

def new_game(
    rng: np.random.Generator,
    config: GameConfig = DEFAULT_CONFIG,
    high_score: int = 0,
    sound_enabled: bool = True,
) -> GameState:
    """Create a fresh session with an empty board and a dealt tray."""
    state = GameState(
        board=Board(),
        power_ups=PowerUps(
            hammer=config.initial_powerups.hammer,
            refresh=config.initial_powerups.refresh,
        ),
        high_score=high_score,
        sound_enabled=sound_enabled,
    )
    return settle(state, rng, config)


def end_game(state: GameState) -> GameState:
    """Enter game over, raising the high score if it was beaten."""
    return replace(
        state,
        game_over=True,
        high_score=max(state.high_score, state.score),
        dragging_uid=None,
        preview=None,
        active_power_up=None,
    )


def settle(state: GameState, rng: np.random.Generator, config: GameConfig = DEFAULT_CONFIG) -> GameState:
    """
    Run the turn check after a tray or board change.

    An empty tray is refilled by the dealer; a dealer that cannot find
    anything playable, or a tray with no placeable shape, ends the game.
    """
    if state.game_over:
        return state
    if not state.tray:
        tray = deal_shapes(state.board, state.score, rng, config)
        if not tray:
            return end_game(state)
        return replace(state, tray=tuple(tray))
    if not is_tray_playable(state.tray, state.board):
        return end_game(state)
    return state


def _blocked(state: GameState) -> bool:
    """Intents that change the game are ignored while paused or over."""
    return state.paused or state.game_over


# =============================================================================
# INTENT HANDLERS
# =============================================================================

def _reset(state, intent, rng, config):
    return new_game(rng, config, high_score=state.high_score, sound_enabled=state.sound_enabled)


def _toggle_pause(state, intent, rng, config):
    if state.game_over:
        return state
    return replace(state, paused=not state.paused, dragging_uid=None, preview=None)


def _toggle_sound(state, intent, rng, config):
    return replace(state, sound_enabled=not state.sound_enabled)


def _select_power_up(state, intent, rng, config):
    if state.paused:
        return state
    kind = intent.kind
    if state.power_ups.count(kind) == 0:
        return replace(state, notice=NO_POWER_UPS_LEFT, sound_cue=SoundCue.DROP)
    if state.active_power_up is kind or state.game_over:
        if state.active_power_up is None:
            return state
        return replace(state, active_power_up=None)
    return replace(
        state,
        active_power_up=kind,
        dragging_uid=None,
        preview=None,
        sound_cue=SoundCue.PICKUP,
    )


def _begin_drag(state, intent, rng, config):
    if _blocked(state) or find_shape(state.tray, intent.uid) is None:
        return state
    return replace(
        state,
        dragging_uid=intent.uid,
        active_power_up=None,
        preview=None,
        sound_cue=SoundCue.PICKUP,
    )


def _update_preview(state, intent, rng, config):
    shape = state.dragging_shape
    if _blocked(state) or shape is None:
        return state
    if not state.board.can_place(shape, intent.row, intent.col):
        return _clear_preview(state, intent, rng, config)

    outcome = evaluate_placement(
        state.board, intent.row, intent.col, shape.matrix, state.streak, config
    )
    preview = Preview(intent.row, intent.col, outcome.cleared_cells, outcome.points)
    if preview == state.preview:
        return state
    return replace(state, preview=preview)


def _clear_preview(state, intent, rng, config):
    if state.preview is None:
        return state
    return replace(state, preview=None)


def _cancel_drag(state, intent, rng, config):
    if state.dragging_uid is None and state.preview is None:
        return state
    return replace(state, dragging_uid=None, preview=None)


def _commit_drag(state, intent, rng, config):
    shape = state.dragging_shape
    preview = state.preview
    if _blocked(state) or shape is None or preview is None:
        return state
    if not state.board.can_place(shape, preview.row, preview.col):
        return state

    outcome = evaluate_placement(
        state.board, preview.row, preview.col, shape.matrix, state.streak, config
    )
    board = outcome.board.copy()
    board.clear_cells(outcome.cleared_cells)

    state = state.with_snapshot(config.history_limit)
    state = replace(
        state,
        board=board,
        score=int(math.floor(state.score + outcome.points)),
        streak=state.streak + 1 if outcome.clear_count > 0 else 0,
        power_ups=state.power_ups.add(PowerUpKind.HAMMER, outcome.bonus_hammers),
        tray=tuple(s for s in state.tray if s.uid != shape.uid),
        dragging_uid=None,
        preview=None,
        combo_label=outcome.combo_label,
        notice=None,
        sound_cue=SoundCue.CLEAR if outcome.clear_count > 0 else SoundCue.DROP,
    )
    return settle(state, rng, config)


def _rotate_in_tray(state, intent, rng, config):
    if _blocked(state) or not 0 <= intent.index < len(state.tray):
        return state
    tray = list(state.tray)
    rotated = tray[intent.index].rotated()
    tray[intent.index] = rotated
    preview = None if rotated.uid == state.dragging_uid else state.preview
    state = replace(state, tray=tuple(tray), preview=preview, sound_cue=SoundCue.ROTATE)
    return settle(state, rng, config)


def _use_hammer(state, intent, rng, config):
    if _blocked(state):
        return state
    new_state = apply_hammer(state, intent.row, intent.col, config)
    if new_state is state:
        return state
    return settle(new_state, rng, config)


def _use_refresh(state, intent, rng, config):
    if _blocked(state):
        return state
    new_state = apply_refresh(state, config)
    if new_state is state:
        return state
    return settle(new_state, rng, config)


def _undo(state, intent, rng, config):
    if state.paused or not state.history:
        return state
    previous = state.history[-1]
    state = replace(
        state,
        board=previous.board,
        tray=previous.tray,
        score=previous.score,
        streak=previous.streak,
        power_ups=previous.power_ups,
        history=state.history[:-1],
        game_over=False,
        active_power_up=None,
        dragging_uid=None,
        preview=None,
        combo_label=None,
        notice=None,
    )
    return settle(state, rng, config)


_HANDLERS: Dict[type, Handler] = {
    Reset: _reset,
    TogglePause: _toggle_pause,
    ToggleSound: _toggle_sound,
    SelectPowerUp: _select_power_up,
    BeginDrag: _begin_drag,
    UpdatePreview: _update_preview,
    ClearPreview: _clear_preview,
    CancelDrag: _cancel_drag,
    CommitDrag: _commit_drag,
    RotateInTray: _rotate_in_tray,
    UseHammer: _use_hammer,
    UseRefresh: _use_refresh,
    Undo: _undo,
}


def transition(
    state: GameState,
    intent: Intent,
    rng: np.random.Generator,
    config: GameConfig = DEFAULT_CONFIG,
) -> GameState:
    """
    Apply one intent to a state.

    Args:
        state: Current state (never modified)
        intent: One of the intents from ``blockdoku.intents``
        rng: Random generator, consumed only when a tray is dealt
        config: Game configuration

    Returns:
        The new state, or ``state`` itself when the intent was rejected
    """
    handler = _HANDLERS.get(type(intent))
    if handler is None:
        raise ValueError(f"Unknown intent: {intent!r}")

    # A cue belongs to the transition that set it
    base = replace(state, sound_cue=None) if state.sound_cue is not None else state
    new_state = handler(base, intent, rng, config)
    if new_state is base:
        return state
    if isinstance(intent, Reset):
        return new_state

    # Each level is announced once, even if undo drops the score below it again
    new_tier = tier_for_score(new_state.score, config)
    if new_tier.level > new_state.announced_level and not new_state.game_over:
        new_state = replace(
            new_state,
            announced_level=new_tier.level,
            notice=f"DIFFICULTY: {new_tier.name.upper()}!",
            sound_cue=SoundCue.CLEAR,
        )
    return new_state


# =============================================================================
# SESSION
# =============================================================================

@dataclass(frozen=True)
class SessionView:
    """Read-only snapshot handed to the presentation layer."""
    board: np.ndarray
    tray: Tuple[Shape, ...]
    score: int
    high_score: int
    streak: int
    hammers: int
    refreshes: int
    status: GameStatus
    game_over: bool
    paused: bool
    active_power_up: Optional[PowerUpKind]
    dragging_uid: Optional[int]
    preview_position: Optional[Cell]
    preview_cells: FrozenSet[Cell]
    preview_points: int
    combo_label: Optional[str]
    notice: Optional[str]
    tier_name: str
    tier_level: int
    can_undo: bool
    sound_enabled: bool


class GameSession:
    """
    Block Sudoku game session.

    Holds the current state and the random generator, and feeds intents
    through :func:`transition`. Side effects live here: sound cues go to the
    injected sink and notable events go to the optional logger.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        sound: Optional[SoundSink] = None,
        logger: Optional[Any] = None,
        state: Optional[GameState] = None,
    ):
        """
        Initialize a session.

        Args:
            config: Game configuration (defaults to the shipped rules)
            seed: Random seed for reproducible deals
            sound: Sink receiving sound cues
            logger: Object with a ``log(dict)`` method, e.g. ``utils.logger.Logger``
            state: Restored state to continue from instead of a new game
        """
        self.config = config or DEFAULT_CONFIG
        self.rng = np.random.default_rng(seed)
        self.sound = sound or NullSoundSink()
        self.logger = logger

        # Activity counters, not rolled back by undo
        self.moves_made = 0
        self.clearing_moves = 0
        self.max_streak = 0

        self.state = state if state is not None else new_game(self.rng, self.config)

    def dispatch(self, intent: Intent) -> GameState:
        """Apply an intent and return the resulting state."""
        old = self.state
        new = transition(old, intent, self.rng, self.config)
        if new is old:
            return old

        if new.sound_cue is not None:
            if new.sound_enabled:
                self.sound.play(new.sound_cue)
            new = replace(new, sound_cue=None)
        self.state = new
        self._record(old, new, intent)
        return new

    def _record(self, old: GameState, new: GameState, intent: Intent) -> None:
        """Update counters and log notable events."""
        events: List[Dict[str, Any]] = []

        if isinstance(intent, CommitDrag):
            self.moves_made += 1
            cleared = new.streak > 0
            if cleared:
                self.clearing_moves += 1
            self.max_streak = max(self.max_streak, new.streak)
            events.append({
                "event": "placement",
                "row": old.preview.row,
                "col": old.preview.col,
                "shape": old.dragging_shape.id,
                "points": new.score - old.score,
                "cells_cleared": len(old.preview.cleared_cells),
                "combo": new.combo_label.value if new.combo_label else None,
                "streak": new.streak,
            })
        elif isinstance(intent, UseHammer) and new.board != old.board:
            events.append({"event": "hammer", "row": intent.row, "col": intent.col,
                           "points": new.score - old.score})
        elif isinstance(intent, UseRefresh) and new.power_ups != old.power_ups:
            events.append({"event": "refresh"})
        elif isinstance(intent, Undo):
            events.append({"event": "undo", "score": new.score})
        elif isinstance(intent, Reset):
            events.append({"event": "reset", "high_score": new.high_score})

        if new.announced_level > old.announced_level:
            tier = tier_for_score(new.score, self.config)
            events.append({"event": "tier_up", "tier": tier.name, "score": new.score})
        if new.game_over and not old.game_over:
            events.append({"event": "game_over", "score": new.score, "high_score": new.high_score})

        if self.logger is not None:
            for event in events:
                self.logger.log(event)

    # -------------------------------------------------------------------------
    # Intent shortcuts
    # -------------------------------------------------------------------------

    def select_power_up(self, kind: PowerUpKind) -> GameState:
        return self.dispatch(SelectPowerUp(kind))

    def begin_drag(self, uid: int) -> GameState:
        return self.dispatch(BeginDrag(uid))

    def update_preview(self, row: Optional[int], col: Optional[int] = None) -> GameState:
        """Move the ghost; ``None`` means the pointer left the board."""
        if row is None or col is None:
            return self.dispatch(ClearPreview())
        return self.dispatch(UpdatePreview(row, col))

    def commit_drag(self) -> GameState:
        return self.dispatch(CommitDrag())

    def cancel_drag(self) -> GameState:
        return self.dispatch(CancelDrag())

    def rotate_in_tray(self, index: int) -> GameState:
        return self.dispatch(RotateInTray(index))

    def use_hammer(self, row: int, col: int) -> GameState:
        return self.dispatch(UseHammer(row, col))

    def use_refresh(self) -> GameState:
        return self.dispatch(UseRefresh())

    def undo(self) -> GameState:
        return self.dispatch(Undo())

    def toggle_pause(self) -> GameState:
        return self.dispatch(TogglePause())

    def toggle_sound(self) -> GameState:
        return self.dispatch(ToggleSound())

    def reset(self) -> GameState:
        self.moves_made = 0
        self.clearing_moves = 0
        self.max_streak = 0
        return self.dispatch(Reset())

    def place(self, slot: int, row: int, col: int) -> bool:
        """
        Drag the tray shape in ``slot`` to (row, col) and drop it.

        Returns:
            True if the shape was placed; on failure the drag is cancelled
        """
        if not 0 <= slot < len(self.state.tray):
            return False
        moves_before = self.moves_made
        self.begin_drag(self.state.tray[slot].uid)
        self.update_preview(row, col)
        self.commit_drag()
        if self.moves_made > moves_before:
            return True
        self.cancel_drag()
        return False

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_valid_moves(self) -> List[Tuple[int, int, int]]:
        """Get all legal placements as (slot, row, col) tuples."""
        if self.state.game_over:
            return []
        board = self.state.board
        return [
            (slot, row, col)
            for slot, shape in enumerate(self.state.tray)
            for row, col in board.get_valid_placements(shape)
        ]

    def get_action_mask(self) -> np.ndarray:
        """
        Boolean mask of legal placements.

        Returns:
            Array of shape (tray_size, 9, 9) where True = legal
        """
        size = self.state.board.size
        mask = np.zeros((self.config.tray_size, size, size), dtype=bool)
        for slot, row, col in self.get_valid_moves():
            mask[slot, row, col] = True
        return mask

    def is_game_over(self) -> bool:
        return self.state.game_over

    def view(self) -> SessionView:
        """Build the read-only snapshot for the presentation layer."""
        state = self.state
        tier = tier_for_score(state.score, self.config)
        preview = state.preview
        return SessionView(
            board=state.board.get_state(),
            tray=state.tray,
            score=state.score,
            high_score=max(state.high_score, state.score),
            streak=state.streak,
            hammers=state.power_ups.hammer,
            refreshes=state.power_ups.refresh,
            status=state.status,
            game_over=state.game_over,
            paused=state.paused,
            active_power_up=state.active_power_up,
            dragging_uid=state.dragging_uid,
            preview_position=(preview.row, preview.col) if preview else None,
            preview_cells=preview.cleared_cells if preview else frozenset(),
            preview_points=preview.points if preview else 0,
            combo_label=state.combo_label.value if state.combo_label else None,
            notice=state.notice,
            tier_name=tier.name,
            tier_level=tier.level,
            can_undo=bool(state.history),
            sound_enabled=state.sound_enabled,
        )

    def get_statistics(self) -> Dict[str, Any]:
        """Get game statistics."""
        return {
            "score": self.state.score,
            "high_score": max(self.state.high_score, self.state.score),
            "moves_made": self.moves_made,
            "clearing_moves": self.clearing_moves,
            "max_streak": self.max_streak,
            "board_fill_ratio": self.state.board.total_blocks / (self.state.board.size ** 2),
            "tier": tier_for_score(self.state.score, self.config).name,
        }

    def __str__(self) -> str:
        """String representation of the session."""
        state = self.state
        lines = [str(state.board)]
        lines.append(
            f"\nScore: {state.score} | Best: {max(state.high_score, state.score)} | "
            f"Streak: {state.streak} | Tier: {tier_for_score(state.score, self.config).name} | "
            f"Status: {state.status.value}"
        )
        lines.append(
            f"Hammers: {state.power_ups.hammer} | Refreshes: {state.power_ups.refresh}"
            + (f" | Active: {state.active_power_up.value}" if state.active_power_up else "")
        )
        lines.append("\nTray:")
        for i, shape in enumerate(state.tray):
            lines.append(f"  [{i}] {shape.id}")
            for row in shape.matrix:
                lines.append("      " + "".join("□" if cell else " " for cell in row))
        return "\n".join(lines)


def play_random_game(
    seed: Optional[int] = None,
    config: Optional[GameConfig] = None,
    logger: Optional[Any] = None,
    max_moves: int = 10000,
) -> Dict[str, Any]:
    """
    Play a complete game with random legal placements.

    Args:
        seed: Random seed for both the deals and the move choice
        config: Game configuration
        logger: Optional event logger
        max_moves: Safety cap on the number of placements

    Returns:
        Dictionary with game statistics
    """
    session = GameSession(config=config, seed=seed, logger=logger)
    chooser = np.random.default_rng(seed)

    while not session.is_game_over() and session.moves_made < max_moves:
        valid_moves = session.get_valid_moves()
        if not valid_moves:
            break
        move = valid_moves[int(chooser.integers(len(valid_moves)))]
        session.place(*move)

    return session.get_statistics()


if __name__ == "__main__":
    stats = play_random_game(seed=42)
    print(f"Final statistics: {stats}")
