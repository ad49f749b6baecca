import logging
from pathlib import Path
from typing import List, Optional

from ..constants import AUTO_LANGUAGE, SETUP_INSTRUCTIONS
from ..core.models import EngineConfig, EngineInvocation, EngineStatus
from ..core.process import ProcessRunner, SubprocessRunner
from ..exceptions import (
    EngineExecutionError,
    EngineNotInstalledError,
    EngineStartError,
    EngineTimeoutError,
    ModelNotFoundError,
    ProcessStartError,
    ProcessTimeoutError,
)
from .extract import artifact_path_for

logger = logging.getLogger("Murmur.Engine")

class TranscriptionEngine:
    """Runs the whisper.cpp executable against normalized audio."""

    def __init__(self, config: Optional[EngineConfig] = None, runner: Optional[ProcessRunner] = None):
        self.config = config or EngineConfig()
        self.runner = runner or SubprocessRunner()

    @property
    def executable_path(self) -> Path:
        return Path(self.config.executable_path)

    @property
    def model_path(self) -> Path:
        return Path(self.config.model_path)

    def status(self) -> EngineStatus:
        return EngineStatus(
            engine_installed=self.executable_path.exists(),
            model_downloaded=self.model_path.exists(),
            engine_path=str(self.executable_path),
            model_path=str(self.model_path),
            setup_instructions=dict(SETUP_INSTRUCTIONS),
        )

    def wants_language_flag(self, language: str) -> bool:
        # 'auto' is not a valid -l value; the default language is implied
        return language not in (AUTO_LANGUAGE, self.config.default_language)

    def build_args(self, audio_path: Path, language: str = AUTO_LANGUAGE) -> List[str]:
        """Arguments for the engine, excluding the executable itself."""
        audio_path = Path(audio_path)
        output_stem = artifact_path_for(audio_path).with_suffix("")
        args = [
            "-m", str(self.model_path),
            "-f", str(audio_path),
            "--output-txt",
            "-of", str(output_stem),
        ]
        if self.wants_language_flag(language):
            args.extend(["-l", language])
        return args

    def transcribe(self, audio_path: Path, language: str = AUTO_LANGUAGE) -> EngineInvocation:
        """
        Run whisper.cpp on a normalized WAV file.

        Preconditions are checked before anything is spawned. A zero exit
        code is success even when stdout is empty, since the transcript may
        only exist in the output artifact.

        Raises:
            EngineNotInstalledError: The executable is missing.
            ModelNotFoundError: The model file is missing.
            EngineStartError: The executable could not be started.
            EngineExecutionError: The engine exited non-zero or timed out.
        """
        if not self.executable_path.exists():
            raise EngineNotInstalledError(self.executable_path)

        if not self.model_path.exists():
            raise ModelNotFoundError(self.model_path)

        invocation = EngineInvocation(
            executable_path=self.executable_path,
            model_path=self.model_path,
            args=self.build_args(audio_path, language),
        )
        cmd = [str(self.executable_path)] + invocation.args
        logger.info(f"Running Whisper: {' '.join(cmd)}")

        try:
            result = self.runner.run(cmd, timeout=self.config.timeout_seconds)
        except ProcessStartError as e:
            logger.error(f"Failed to start Whisper: {e.cause}")
            raise EngineStartError(self.executable_path, e.cause or e) from e
        except ProcessTimeoutError as e:
            logger.error(f"Whisper timed out after {e.timeout}s")
            raise EngineTimeoutError(e.timeout, e.stderr) from e

        invocation.stdout = result.stdout
        invocation.stderr = result.stderr
        invocation.exit_code = result.returncode

        if result.returncode != 0:
            logger.error(f"Whisper exited with code {result.returncode}")
            raise EngineExecutionError(result.returncode, result.stderr)

        logger.debug(f"Whisper finished ({len(result.stdout)} chars of console output)")
        return invocation
