"""
Sound cues.

The engine never produces audio itself. Transitions record which cue the
presentation should play, and a sink object handed to the session at
construction time receives it.
"""
from enum import Enum
from typing import List


class SoundCue(Enum):
    PICKUP = "pickup"
    DROP = "drop"
    CLEAR = "clear"
    ROTATE = "rotate"


class SoundSink:
    """Interface for whatever owns the output device."""

    def play(self, cue: SoundCue) -> None:
        raise NotImplementedError


class NullSoundSink(SoundSink):
    """Discards every cue."""

    def play(self, cue: SoundCue) -> None:
        pass


class RecordingSoundSink(SoundSink):
    """Keeps played cues in order; useful for headless runs and tests."""

    def __init__(self):
        self.played: List[SoundCue] = []

    def play(self, cue: SoundCue) -> None:
        self.played.append(cue)

    def clear(self) -> None:
        self.played.clear()
