import logging
from pathlib import Path
from typing import Optional

from ..constants import ARTIFACT_EXTENSION, ENGINE_BANNER

logger = logging.getLogger("Murmur.Extract")

def artifact_path_for(audio_path: Path) -> Path:
    """Where whisper.cpp writes the plain-text transcript for audio_path."""
    return Path(audio_path).with_suffix(ARTIFACT_EXTENSION)

class ConsoleTranscriptParser:
    """
    Recovers a transcript from whisper.cpp console output.

    Segment lines look like ``[00:00:00.000 --> 00:00:02.000]  good morning``.
    The first line carrying both brackets and not the engine banner wins, and
    the text after its last closing bracket is returned.
    """

    def __init__(self, banner: str = ENGINE_BANNER):
        self.banner = banner

    def is_segment_line(self, line: str) -> bool:
        return "[" in line and "]" in line and self.banner not in line

    def parse(self, stdout: str) -> str:
        for line in (stdout or "").splitlines():
            if self.is_segment_line(line):
                return line.rpartition("]")[2].strip()
        return ""

class ResultExtractor:
    """Derives transcript text from the output artifact or the console output."""

    def __init__(self, parser: Optional[ConsoleTranscriptParser] = None):
        self.parser = parser or ConsoleTranscriptParser()

    def extract(self, audio_path: Path, stdout: str = "") -> str:
        """
        Return the transcript for audio_path. Never raises.

        The artifact, if present, is authoritative and is deleted after it
        is read. Otherwise the console output is parsed; no match yields "".
        """
        artifact = artifact_path_for(audio_path)
        text = self._read_artifact(artifact)
        if text is not None:
            logger.debug(f"Transcript read from {artifact.name}")
            return text

        logger.debug("No transcript artifact, parsing console output")
        return self.parser.parse(stdout)

    def _read_artifact(self, artifact: Path) -> Optional[str]:
        if not artifact.is_file():
            return None

        try:
            text = artifact.read_text(encoding="utf-8", errors="replace").strip()
        except OSError as e:
            logger.warning(f"Could not read transcript artifact {artifact}: {e}")
            return None

        try:
            artifact.unlink()
        except OSError as e:
            logger.warning(f"Could not remove transcript artifact {artifact}: {e}")
        return text
