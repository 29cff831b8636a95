"""Group encoded documents into numbered, size-bounded batches."""

import logging
from typing import List, Optional

from .errors import ConfigurationError
from .models import Batch, EncodedDocument

logger = logging.getLogger(__name__)


class Batcher:
    """Accumulates documents and seals a Batch every ``batch_size`` documents.

    Documents come out in the order they went in, each in exactly one batch.
    Batch numbers start at 1 and increase by one per sealed batch.
    """

    def __init__(self, batch_size: int = 1000) -> None:
        if batch_size < 1:
            raise ConfigurationError(f"Batch size must be at least 1, got {batch_size}")
        self.batch_size = batch_size
        self._buffer: List[EncodedDocument] = []
        self._rejected: List[str] = []
        self._sealed = 0

    @property
    def pending(self) -> int:
        return len(self._buffer)

    @property
    def sealed_count(self) -> int:
        return self._sealed

    def add(self, document: EncodedDocument) -> Optional[Batch]:
        self._buffer.append(document)
        if len(self._buffer) >= self.batch_size:
            return self._seal()
        return None

    def reject(self, detail: str) -> None:
        """Record a line that could not become a document.

        The batch being filled is reported as failed once sealed.
        """
        self._rejected.append(detail)

    def flush(self) -> Optional[Batch]:
        if not self._buffer and not self._rejected:
            return None
        return self._seal()

    def _seal(self) -> Batch:
        self._sealed += 1
        batch = Batch(
            number=self._sealed,
            documents=tuple(self._buffer),
            rejected=tuple(self._rejected),
        )
        # the lists are reused for the next batch
        self._buffer.clear()
        self._rejected.clear()
        logger.debug("Sealed batch %d with %d documents", batch.number, len(batch))
        return batch
