"""Murmur: local speech-to-text through ffmpeg and whisper.cpp."""

from .core.models import TranscriptionRequest, TranscriptionResult
from .exceptions import (
    EngineExecutionError,
    EngineNotInstalledError,
    EngineStartError,
    EngineTimeoutError,
    InputValidationError,
    ModelNotFoundError,
    MurmurError,
    NormalizationError,
)
from .pipeline import TranscriptionPipeline

__version__ = "0.1.0"
