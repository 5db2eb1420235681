"""
Session data model.

All values here are immutable. A transition builds a new ``GameState`` with
``dataclasses.replace`` and never mutates the board of an existing state.
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import FrozenSet, Optional, Tuple

from .board import Board, Cell
from .scoring import ComboLabel
from .shapes import Shape
from .sound import SoundCue


class GameStatus(Enum):
    """Game status enumeration."""
    ACTIVE = "active"
    PAUSED = "paused"
    GAME_OVER = "game_over"


class PowerUpKind(Enum):
    HAMMER = "hammer"
    REFRESH = "refresh"


@dataclass(frozen=True)
class PowerUps:
    """Power-up inventory; both counters are independent and never negative."""
    hammer: int = 0
    refresh: int = 0

    def count(self, kind: PowerUpKind) -> int:
        return self.hammer if kind is PowerUpKind.HAMMER else self.refresh

    def add(self, kind: PowerUpKind, amount: int) -> "PowerUps":
        """Return a new inventory with ``amount`` added to one counter."""
        if kind is PowerUpKind.HAMMER:
            return replace(self, hammer=max(0, self.hammer + amount))
        return replace(self, refresh=max(0, self.refresh + amount))


@dataclass(frozen=True)
class Preview:
    """Ghost of the shape being dragged: where it would land and what it would do."""
    row: int
    col: int
    cleared_cells: FrozenSet[Cell] = field(default_factory=frozenset)
    points: int = 0


@dataclass(frozen=True)
class HistorySnapshot:
    """Everything undo restores."""
    board: Board
    tray: Tuple[Shape, ...]
    score: int
    streak: int
    power_ups: PowerUps


@dataclass(frozen=True)
class GameState:
    """Complete session state."""
    board: Board = field(default_factory=Board)
    tray: Tuple[Shape, ...] = ()
    score: int = 0
    streak: int = 0
    power_ups: PowerUps = field(default_factory=PowerUps)
    active_power_up: Optional[PowerUpKind] = None
    dragging_uid: Optional[int] = None
    preview: Optional[Preview] = None
    game_over: bool = False
    paused: bool = False
    history: Tuple[HistorySnapshot, ...] = ()
    high_score: int = 0
    sound_enabled: bool = True
    combo_label: Optional[ComboLabel] = None
    notice: Optional[str] = None
    # Highest difficulty level already announced; undo does not roll it back
    announced_level: int = 1
    # Consumed by the session right after the transition that set it
    sound_cue: Optional[SoundCue] = None

    @property
    def status(self) -> GameStatus:
        if self.game_over:
            return GameStatus.GAME_OVER
        if self.paused:
            return GameStatus.PAUSED
        return GameStatus.ACTIVE

    @property
    def dragging_shape(self) -> Optional[Shape]:
        if self.dragging_uid is None:
            return None
        for shape in self.tray:
            if shape.uid == self.dragging_uid:
                return shape
        return None

    def snapshot(self) -> HistorySnapshot:
        """Capture the undoable part of the state."""
        return HistorySnapshot(
            board=self.board,
            tray=self.tray,
            score=self.score,
            streak=self.streak,
            power_ups=self.power_ups,
        )

    def with_snapshot(self, limit: int) -> "GameState":
        """Return this state with its current snapshot pushed onto the history."""
        history = (self.history + (self.snapshot(),))[-limit:]
        return replace(self, history=history)
