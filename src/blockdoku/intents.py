"""
Intents accepted by the session.

The input layer (mouse, touch, terminal, agent) decodes its raw events into
these values. The set is closed: ``engine.transition`` rejects any other type.
"""
from dataclasses import dataclass
from typing import Union

from .state import PowerUpKind


@dataclass(frozen=True)
class SelectPowerUp:
    kind: PowerUpKind


@dataclass(frozen=True)
class BeginDrag:
    uid: int


@dataclass(frozen=True)
class UpdatePreview:
    """Hover the dragged shape with its top-left corner at (row, col)."""
    row: int
    col: int


@dataclass(frozen=True)
class ClearPreview:
    pass


@dataclass(frozen=True)
class CommitDrag:
    pass


@dataclass(frozen=True)
class CancelDrag:
    pass


@dataclass(frozen=True)
class RotateInTray:
    index: int


@dataclass(frozen=True)
class UseHammer:
    row: int
    col: int


@dataclass(frozen=True)
class UseRefresh:
    pass


@dataclass(frozen=True)
class Undo:
    pass


@dataclass(frozen=True)
class TogglePause:
    pass


@dataclass(frozen=True)
class ToggleSound:
    pass


@dataclass(frozen=True)
class Reset:
    pass


Intent = Union[
    SelectPowerUp,
    BeginDrag,
    UpdatePreview,
    ClearPreview,
    CommitDrag,
    CancelDrag,
    RotateInTray,
    UseHammer,
    UseRefresh,
    Undo,
    TogglePause,
    ToggleSound,
    Reset,
]
