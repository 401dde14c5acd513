"""Audio collaborators feeding the tuner pipeline.

The live input provider is imported on demand since it needs PortAudio.
"""

from .interfaces import IAudioProvider
from .file_provider import WavFileAudioProvider
from .tuner_service import TunerService, analyze_file

__all__ = ["IAudioProvider", "WavFileAudioProvider", "TunerService", "analyze_file"]
