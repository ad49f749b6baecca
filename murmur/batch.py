"""Bounded worker pool for transcribing several files at once."""

import logging
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .core.models import TranscriptionRequest, TranscriptionResult
from .exceptions import MurmurError
from .pipeline.base import TranscriptionPipeline

logger = logging.getLogger("Murmur.Batch")


@dataclass
class BatchOutcome:
    """Result or error of one request in a batch."""
    request: TranscriptionRequest
    result: Optional[TranscriptionResult] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class BatchTranscriber:
    """
    Runs pipeline requests on a thread pool.

    ``max_workers`` caps the number of engine processes alive at the same
    time. A failing request never affects the others.
    """

    def __init__(self, pipeline: TranscriptionPipeline, max_workers: Optional[int] = None):
        self.pipeline = pipeline
        self.max_workers = max(1, max_workers or pipeline.config.batch.max_workers)

    def run(self, requests: Sequence[TranscriptionRequest]) -> List[BatchOutcome]:
        """Process all requests; outcomes are returned in input order."""
        outcomes: Dict[int, BatchOutcome] = {}
        if not requests:
            return []

        logger.info(f"Transcribing {len(requests)} file(s) with {self.max_workers} worker(s)")
        with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="MurmurWorker") as executor:
            futures: Dict[Future, int] = {
                executor.submit(self.pipeline.run, request): index
                for index, request in enumerate(requests)
            }
            for future in as_completed(futures):
                index = futures[future]
                request = requests[index]
                try:
                    outcomes[index] = BatchOutcome(request=request, result=future.result())
                except MurmurError as e:
                    logger.error(f"[{request.request_id}] {request.source_audio_path.name} failed: {e}")
                    outcomes[index] = BatchOutcome(request=request, error=e)
                except Exception as e:
                    logger.exception(f"[{request.request_id}] Unexpected error for {request.source_audio_path.name}")
                    outcomes[index] = BatchOutcome(request=request, error=e)

        return [outcomes[i] for i in range(len(requests))]
