"""Per-request tracking and cleanup of temporary files."""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

logger = logging.getLogger("Murmur.Janitor")


class ResourceJanitor:
    """
    Tracks the temporary files of one transcription request and removes them.

    Use it as a context manager so ``release_all`` runs on every exit path::

        with ResourceJanitor(request_id) as janitor:
            janitor.track(wav_path, "normalized")
            ...

    Deletion errors are logged and never propagated, so a failed cleanup
    cannot mask the outcome of the request.
    """

    def __init__(self, request_id: str = ""):
        self.request_id = request_id
        self._tracked: Dict[str, Path] = {}
        self._released = False

    def __enter__(self) -> "ResourceJanitor":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.release_all()

    @property
    def tracked(self) -> Dict[str, Path]:
        """Role -> path mapping in registration order."""
        return dict(self._tracked)

    @property
    def released(self) -> bool:
        return self._released

    def track(self, path: Union[str, Path], role: Optional[str] = None) -> Path:
        """Register a path for cleanup under a logical role."""
        path = Path(path)
        role = role or str(path)

        existing = self._tracked.get(role)
        if existing is not None and existing != path:
            raise ValueError(f"Role '{role}' is already tracking {existing}")

        self._tracked[role] = path
        logger.debug(f"[{self.request_id}] Tracking {role}: {path}")
        return path

    def release_all(self) -> List[Path]:
        """
        Delete every tracked path that still exists, in registration order.

        Returns:
            The paths actually removed by this call.
        """
        if self._released:
            logger.debug(f"[{self.request_id}] Temporary files already released")
            return []
        self._released = True

        removed = []
        for role, path in self._tracked.items():
            try:
                path.unlink()
                removed.append(path)
                logger.debug(f"[{self.request_id}] Removed {role}: {path}")
            except FileNotFoundError:
                continue
            except OSError as e:
                logger.warning(f"[{self.request_id}] Could not remove {role} file {path}: {e}")
        return removed
