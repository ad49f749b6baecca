"""Process runner seam for the external transcoder and engine."""

import logging
import subprocess
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from .models import ProcessResult
from ..exceptions import ProcessStartError, ProcessTimeoutError

logger = logging.getLogger("Murmur.Process")


class ProcessRunner(ABC):
    """Abstract base class for running an external executable to completion."""

    @abstractmethod
    def run(self, args: Sequence[str], timeout: Optional[float] = None) -> ProcessResult:
        """
        Run a process and wait for it to exit.

        Args:
            args: Executable followed by its arguments.
            timeout: Seconds to wait before killing the process, or None.

        Returns:
            ProcessResult with the exit code and the full stdout/stderr text.

        Raises:
            ProcessStartError: If the executable could not be spawned.
            ProcessTimeoutError: If the process was killed after the timeout.
        """
        pass


class SubprocessRunner(ProcessRunner):
    """Runs processes with ``subprocess.run``, capturing both streams in full."""

    def run(self, args: Sequence[str], timeout: Optional[float] = None) -> ProcessResult:
        cmd = [str(a) for a in args]
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            proc = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=timeout,
            )
        except subprocess.TimeoutExpired as e:
            stderr = e.stderr or ""
            if isinstance(stderr, bytes):
                stderr = stderr.decode(errors="replace")
            raise ProcessTimeoutError(cmd[0], timeout, stderr) from e
        except OSError as e:
            raise ProcessStartError(cmd[0], e) from e

        return ProcessResult(
            args=cmd,
            returncode=proc.returncode,
            stdout=proc.stdout or "",
            stderr=proc.stderr or "",
        )
