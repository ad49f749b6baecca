import logging
from pathlib import Path
from typing import List, Optional

from ..constants import DEFAULT_AUDIO_CODEC, DEFAULT_CHANNELS, DEFAULT_SAMPLE_RATE
from ..core.models import NormalizedAudio, TranscoderConfig
from ..core.process import ProcessRunner, SubprocessRunner
from ..exceptions import NormalizationError, ProcessStartError, ProcessTimeoutError

logger = logging.getLogger("Murmur.Normalize")

class AudioNormalizer:
    """Converts any input audio into 16 kHz mono PCM16 WAV using ffmpeg."""

    def __init__(self, config: Optional[TranscoderConfig] = None, runner: Optional[ProcessRunner] = None):
        self.config = config or TranscoderConfig()
        self.runner = runner or SubprocessRunner()

    def build_command(self, input_path: Path, output_path: Path) -> List[str]:
        return [
            self.config.executable,
            '-y', '-v', 'error',
            '-i', str(input_path),
            '-vn', '-ac', str(DEFAULT_CHANNELS),
            '-ar', str(DEFAULT_SAMPLE_RATE),
            '-c:a', DEFAULT_AUDIO_CODEC,
            str(output_path),
        ]

    def normalize(self, input_path: Path, output_path: Path) -> NormalizedAudio:
        """
        Convert input_path into the engine's PCM format at output_path.

        The input file is never modified or deleted. An existing file at
        output_path is overwritten.

        Raises:
            NormalizationError: If ffmpeg cannot be started, exits non-zero,
                times out, or leaves no output behind.
        """
        input_path = Path(input_path)
        output_path = Path(output_path)
        cmd = self.build_command(input_path, output_path)

        logger.info(f"Normalizing {input_path.name} -> {output_path.name}")
        try:
            result = self.runner.run(cmd, timeout=self.config.timeout_seconds)
        except ProcessStartError as e:
            logger.error(f"Could not start transcoder '{self.config.executable}': {e.cause}")
            raise NormalizationError(input_path, cause=e.cause or e) from e
        except ProcessTimeoutError as e:
            logger.error(f"Transcoder timed out after {e.timeout}s")
            raise NormalizationError(input_path, stderr=e.stderr, cause=e) from e

        if result.returncode != 0:
            logger.error(f"FFmpeg exited with code {result.returncode}: {result.stderr.strip()}")
            raise NormalizationError(input_path, exit_code=result.returncode, stderr=result.stderr)

        if not output_path.exists() or output_path.stat().st_size == 0:
            raise NormalizationError(
                input_path,
                exit_code=result.returncode,
                stderr=result.stderr,
                reason=f"no audio written to {output_path}",
            )

        return NormalizedAudio(path=output_path)
