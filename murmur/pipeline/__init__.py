from .base import TranscriptionPipeline
from .normalize import AudioNormalizer
from .engine import TranscriptionEngine
from .extract import ConsoleTranscriptParser, ResultExtractor, artifact_path_for
