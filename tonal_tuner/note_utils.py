"""Utility functions for working with musical notes and frequencies."""

import math
from typing import Dict, List

import numpy as np

from .logger import get_logger
from .note_types import NoteResult, TuningStatus

logger = get_logger(__name__)

# Standard reference: A4 = 440Hz, MIDI note 69
A4_FREQ: float = 440.0
A4_MIDI: int = 69

# Pitch classes starting at C, MIDI 0 is C-1
SHARP_NOTES: List[str] = [
    "C",
    "C#",
    "D",
    "D#",
    "E",
    "F",
    "F#",
    "G",
    "G#",
    "A",
    "A#",
    "B",
]

# Mapping between sharp and flat note names
SHARP_TO_FLAT: Dict[str, str] = {
    "C#": "Db",
    "D#": "Eb",
    "F#": "Gb",
    "G#": "Ab",
    "A#": "Bb",
}
FLAT_TO_SHARP: Dict[str, str] = {v: k for k, v in SHARP_TO_FLAT.items()}

DEFAULT_IN_TUNE_CENTS: int = 5
DISPLAY_CENTS_LIMIT: int = 50


def _require_positive(freq: float, what: str) -> None:
    if not np.isfinite(freq) or freq <= 0:
        raise ValueError(f"{what} must be a positive finite frequency, got {freq}")


def map_to_note(freq: float) -> NoteResult:
    """Find the nearest equal-tempered note to a frequency.

    Args:
        freq: Frequency in Hz, must be positive

    Returns:
        NoteResult with pitch class, SPN octave, ideal frequency and MIDI number

    Raises:
        ValueError: If freq is not a positive finite number

    Note:
        Half steps are rounded half-up, so a reading exactly between two notes
        resolves to the higher one.
    """
    _require_positive(freq, "Note mapping")

    note_number = 12 * math.log2(freq / A4_FREQ)
    midi_number = math.floor(note_number + 0.5) + A4_MIDI

    # SPN octave calculation (C4 is middle C)
    octave = (midi_number // 12) - 1
    name = SHARP_NOTES[midi_number % 12]
    ideal_frequency = A4_FREQ * 2.0 ** ((midi_number - A4_MIDI) / 12)

    return NoteResult(
        name=name,
        octave=octave,
        ideal_frequency=ideal_frequency,
        midi_number=midi_number,
    )


def cents(freq: float, ideal_frequency: float) -> int:
    """Signed deviation of freq from ideal_frequency in cents.

    The value is floored rather than rounded: a ratio worth -4.9 cents
    reports -5.

    Raises:
        ValueError: If either frequency is not positive
    """
    _require_positive(freq, "Cents calculation")
    _require_positive(ideal_frequency, "Cents reference")
    return math.floor(1200 * math.log2(freq / ideal_frequency))


def tuning_status(
    deviation: int, tolerance: int = DEFAULT_IN_TUNE_CENTS
) -> TuningStatus:
    """Classify a cents deviation as in tune, sharp or flat."""
    if abs(deviation) < tolerance:
        return TuningStatus.IN_TUNE
    if deviation > 0:
        return TuningStatus.SHARP
    return TuningStatus.FLAT


def clamp_cents(deviation: int, limit: int = DISPLAY_CENTS_LIMIT) -> int:
    """Clamp a deviation to the +/- limit range of a tuning gauge."""
    return max(-limit, min(limit, deviation))


def convert_note_notation(note_name: str, to_flats: bool = False) -> str:
    """Convert a note name between sharp and flat notation.

    Args:
        note_name: The note name to convert (e.g., 'F#2' or 'Gb2')
        to_flats: If True, convert to flats (e.g., 'Gb2'), otherwise to sharps (e.g., 'F#2')

    Returns:
        str: The converted note name, or original if no conversion needed

    Examples:
        >>> convert_note_notation('F#2', to_flats=True)
        'Gb2'
        >>> convert_note_notation('Gb2', to_flats=False)
        'F#2'
    """
    if not note_name:
        return ""

    # Split pitch class from octave, octave may be negative (C-1)
    note_part = "".join(c for c in note_name if not c.isdigit() and c != "-")
    octave_part = note_name[len(note_part) :]

    if to_flats and note_part in SHARP_TO_FLAT:
        return f"{SHARP_TO_FLAT[note_part]}{octave_part}"
    if not to_flats and note_part in FLAT_TO_SHARP:
        return f"{FLAT_TO_SHARP[note_part]}{octave_part}"
    return note_name


def get_note_name(freq: float, use_flats: bool = False) -> str:
    """Convert frequency to note name using Scientific Pitch Notation (SPN).

    Args:
        freq: Frequency in Hz
        use_flats: If True, use flat notes (e.g., 'Bb') instead of sharps (e.g., 'A#')

    Returns:
        Note name with octave in SPN (e.g., 'A4', 'C#4', 'Bb3'), or '---' for
        a non-positive frequency

    Note:
        - Middle C is C4 (261.63 Hz)
        - A4 is 440 Hz
        - Octave numbers change between B and C (e.g., B3 -> C4)
    """
    if freq <= 0:
        return "---"
    return convert_note_notation(str(map_to_note(freq)), to_flats=use_flats)
