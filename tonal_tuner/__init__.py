"""Tonal Tuner: real-time pitch estimation and note/cents mapping."""

from .core.config import TunerConfig
from .detection import estimate_pitch, gate, smooth, SmootherState
from .note_types import FrameResult, NoteResult, TuningStatus
from .note_utils import cents, map_to_note
from .tuner import TunerPipeline

__all__ = [
    "TunerConfig",
    "TunerPipeline",
    "FrameResult",
    "NoteResult",
    "TuningStatus",
    "SmootherState",
    "gate",
    "estimate_pitch",
    "smooth",
    "map_to_note",
    "cents",
]
