import uuid
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from ..constants import (
    AUTO_LANGUAGE,
    DEFAULT_AUDIO_CODEC,
    DEFAULT_CHANNELS,
    DEFAULT_SAMPLE_RATE,
    ENGINE_BANNER,
    ENGINE_DEFAULT_LANGUAGE,
    MAX_UPLOAD_BYTES,
)

# --- Configuration ---

class TranscoderConfig(BaseModel):
    executable: str = "ffmpeg"
    timeout_seconds: Optional[float] = None

class EngineConfig(BaseModel):
    executable_path: str = "./whisper.cpp/main"
    model_path: str = "./models/ggml-base.en.bin"
    default_language: str = ENGINE_DEFAULT_LANGUAGE
    banner: str = ENGINE_BANNER
    timeout_seconds: Optional[float] = None

class PathsConfig(BaseModel):
    work: str = "./murmur-work"
    logs: Optional[str] = None

class BatchConfig(BaseModel):
    max_workers: int = Field(default=2, ge=1)

class ServiceConfig(BaseModel):
    transcoder: TranscoderConfig = Field(default_factory=TranscoderConfig)
    engine: EngineConfig = Field(default_factory=EngineConfig)
    paths: PathsConfig = Field(default_factory=PathsConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    debug: bool = False
    output_mode: str = "standard"

# --- Pipeline records ---

class TranscriptionRequest(BaseModel, frozen=True):
    """A single transcription call.

    ``owns_source`` marks the source file as a temporary upload that the
    pipeline must delete once the request completes.
    """
    source_audio_path: Path
    language_hint: str = AUTO_LANGUAGE
    request_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    owns_source: bool = False

    @field_validator("language_hint", mode="before")
    @classmethod
    def normalize_language_hint(cls, value: Optional[str]) -> str:
        if value is None:
            return AUTO_LANGUAGE
        value = str(value).strip().lower()
        return value or AUTO_LANGUAGE

class NormalizedAudio(BaseModel, frozen=True):
    path: Path
    sample_rate: int = DEFAULT_SAMPLE_RATE
    channels: int = DEFAULT_CHANNELS
    encoding: str = DEFAULT_AUDIO_CODEC

class ProcessResult(BaseModel):
    args: List[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""

class EngineInvocation(BaseModel):
    executable_path: Path
    model_path: Path
    args: List[str] = Field(default_factory=list)
    stdout: str = ""
    stderr: str = ""
    exit_code: Optional[int] = None

class TranscriptionResult(BaseModel, frozen=True):
    text: str
    language: str
    request_id: str
    created_at: datetime = Field(default_factory=datetime.now)

class EngineStatus(BaseModel):
    """Environment preconditions of the recognition engine."""
    engine_installed: bool
    model_downloaded: bool
    engine_path: str
    model_path: str
    setup_instructions: Dict[str, str] = Field(default_factory=dict)

    @property
    def ready(self) -> bool:
        return self.engine_installed and self.model_downloaded
