"""Custom exceptions for the transcription pipeline."""

from pathlib import Path
from typing import Optional


class MurmurError(Exception):
    """Base class for every error raised by the pipeline."""


class ProcessStartError(MurmurError):
    """Raised by a process runner when the executable cannot be spawned."""

    def __init__(self, executable: str, cause: Optional[Exception] = None):
        self.executable = executable
        self.cause = cause
        super().__init__(f"Failed to start '{executable}': {cause}")


class ProcessTimeoutError(MurmurError):
    """Raised by a process runner when the process outlives its timeout."""

    def __init__(self, executable: str, timeout: float, stderr: str = ""):
        self.executable = executable
        self.timeout = timeout
        self.stderr = stderr
        super().__init__(f"'{executable}' did not finish within {timeout:g}s")


class InputValidationError(MurmurError):
    """Raised when a file cannot be accepted for transcription."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(reason)


class NormalizationError(MurmurError):
    """Raised when the transcoder cannot produce the normalized audio file."""

    def __init__(
        self,
        input_path: Path,
        exit_code: Optional[int] = None,
        stderr: str = "",
        cause: Optional[Exception] = None,
        reason: Optional[str] = None,
    ):
        self.input_path = input_path
        self.exit_code = exit_code
        self.stderr = stderr
        self.cause = cause
        if reason is None:
            if cause is not None:
                reason = str(cause)
            else:
                reason = f"FFmpeg process exited with code {exit_code}"
        super().__init__(f"Failed to normalize '{Path(input_path).name}': {reason}")


class EngineNotInstalledError(MurmurError):
    """Raised when the whisper.cpp executable is missing."""

    def __init__(self, executable_path: Path):
        self.executable_path = executable_path
        super().__init__(f"Whisper.cpp not found at {executable_path}. Run setup first.")


class ModelNotFoundError(MurmurError):
    """Raised when the whisper model file is missing."""

    def __init__(self, model_path: Path):
        self.model_path = model_path
        super().__init__(f"Whisper model not found at {model_path}. Run setup first.")


class EngineStartError(MurmurError):
    """Raised when the engine exists but the OS refuses to start it."""

    def __init__(self, executable_path: Path, cause: Optional[Exception] = None):
        self.executable_path = executable_path
        self.cause = cause
        super().__init__(f"Failed to start Whisper: {cause}")


class EngineExecutionError(MurmurError):
    """Raised when the engine ran but exited with a non-zero status."""

    def __init__(self, exit_code: Optional[int], stderr: str = "", reason: Optional[str] = None):
        self.exit_code = exit_code
        self.stderr = stderr
        detail = reason or stderr.strip() or "Unknown error"
        super().__init__(f"Whisper process failed: {detail}")


class EngineTimeoutError(EngineExecutionError):
    """Raised when the engine was killed after exceeding its timeout."""

    def __init__(self, timeout: float, stderr: str = ""):
        self.timeout = timeout
        super().__init__(None, stderr, reason=f"timed out after {timeout:g}s")
