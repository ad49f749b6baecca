import logging
from pathlib import Path
from typing import Optional

from ..constants import (
    AUTO_LANGUAGE,
    DETECTED_LANGUAGE,
    NORMALIZED_EXTENSION,
    ROLE_ARTIFACT,
    ROLE_NORMALIZED,
    ROLE_UPLOADED,
)
from ..core.janitor import ResourceJanitor
from ..core.models import EngineStatus, ServiceConfig, TranscriptionRequest, TranscriptionResult
from ..core.process import ProcessRunner, SubprocessRunner
from ..exceptions import NormalizationError
from .engine import TranscriptionEngine
from .extract import ConsoleTranscriptParser, ResultExtractor, artifact_path_for
from .normalize import AudioNormalizer

logger = logging.getLogger("Murmur.Pipeline")

class TranscriptionPipeline:
    """
    Orchestrates normalize -> transcribe -> extract for one request at a time.

    The pipeline object itself holds no per-request state, so a single
    instance can serve concurrent requests. Every temporary path is derived
    from the request id and owned by that request's janitor.
    """

    def __init__(
        self,
        config: Optional[ServiceConfig] = None,
        runner: Optional[ProcessRunner] = None,
        normalizer: Optional[AudioNormalizer] = None,
        engine: Optional[TranscriptionEngine] = None,
        extractor: Optional[ResultExtractor] = None,
    ):
        self.config = config or ServiceConfig()
        runner = runner or SubprocessRunner()
        self.normalizer = normalizer or AudioNormalizer(self.config.transcoder, runner)
        self.engine = engine or TranscriptionEngine(self.config.engine, runner)
        self.extractor = extractor or ResultExtractor(ConsoleTranscriptParser(self.config.engine.banner))

    @property
    def work_dir(self) -> Path:
        return Path(self.config.paths.work)

    def normalized_path_for(self, request: TranscriptionRequest) -> Path:
        return self.work_dir / f"{request.request_id}{NORMALIZED_EXTENSION}"

    def status(self) -> EngineStatus:
        return self.engine.status()

    def run(self, request: TranscriptionRequest) -> TranscriptionResult:
        """
        Transcribe request.source_audio_path.

        All temporary files are removed before this returns or raises.
        An empty transcript is a valid result meaning no speech was found.
        """
        self.work_dir.mkdir(parents=True, exist_ok=True)
        request_id = request.request_id
        logger.info(f"[{request_id}] Processing STT for file: {request.source_audio_path.name}")

        with ResourceJanitor(request_id) as janitor:
            if request.owns_source:
                janitor.track(request.source_audio_path, ROLE_UPLOADED)
            normalized_path = janitor.track(self.normalized_path_for(request), ROLE_NORMALIZED)
            janitor.track(artifact_path_for(normalized_path), ROLE_ARTIFACT)

            audio = self.normalizer.normalize(request.source_audio_path, normalized_path)
            if not audio.path.exists():
                raise NormalizationError(
                    request.source_audio_path,
                    reason=f"normalized audio missing at {audio.path}",
                )
            logger.info(f"[{request_id}] Converted to WAV: {audio.path}")

            invocation = self.engine.transcribe(audio.path, request.language_hint)
            text = self.extractor.extract(audio.path, invocation.stdout)

            if not text:
                # Indistinguishable from an engine that failed silently with exit 0
                stderr_tail = invocation.stderr.strip().splitlines()[-3:]
                logger.warning(
                    f"[{request_id}] No speech detected in {request.source_audio_path.name}"
                    + (f" (engine stderr: {' | '.join(stderr_tail)})" if stderr_tail else "")
                )

        language = DETECTED_LANGUAGE if request.language_hint == AUTO_LANGUAGE else request.language_hint
        logger.info(f"[{request_id}] Transcription: \"{text}\"")
        return TranscriptionResult(text=text, language=language, request_id=request_id)
