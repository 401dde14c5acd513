"""Type definitions for the Tonal Tuner project."""

from enum import Enum
from typing import Optional
from dataclasses import dataclass


class TuningStatus(Enum):
    """How a reading sits relative to its nearest note."""

    IN_TUNE = "In Tune"
    SHARP = "Sharp"
    FLAT = "Flat"


@dataclass(frozen=True)
class NoteResult:
    """The nearest equal-tempered note to a frequency."""

    name: str  # Pitch class (e.g., 'A', 'C#')
    octave: int  # SPN octave, C4 is middle C
    ideal_frequency: float  # Frequency of the note in Hz (A4 = 440Hz)
    midi_number: int  # MIDI note number, A4 = 69

    def __str__(self):
        return f"{self.name}{self.octave}"


@dataclass(frozen=True)
class FrameResult:
    """Outcome of analysing one audio frame, ready for any presentation layer."""

    has_signal: bool  # Whether the frame passed the RMS gate
    note: Optional[NoteResult] = None  # Nearest note to the smoothed frequency
    frequency_hz: Optional[float] = None  # Smoothed frequency in Hz
    cents: Optional[int] = None  # Deviation from note.ideal_frequency
    raw_frequency_hz: Optional[float] = None  # Estimate before smoothing
    status: Optional[TuningStatus] = None

    @property
    def has_pitch(self) -> bool:
        return self.note is not None

    def describe(self) -> str:
        """Render the frame the way a tuner display reads it."""
        if not self.has_signal:
            return "No signal"
        if not self.has_pitch:
            return "Detecting..."

        if self.status is TuningStatus.IN_TUNE:
            tuning = "In Tune"
        elif self.status is TuningStatus.SHARP:
            tuning = f"+{self.cents} cents (Sharp)"
        else:
            tuning = f"{self.cents} cents (Flat)"
        return f"{self.note}  {self.frequency_hz:.2f} Hz  {tuning}"
