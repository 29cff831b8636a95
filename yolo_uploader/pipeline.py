"""Stream input lines through encoding, batching and upload."""

import logging
from enum import Enum
from typing import BinaryIO, Callable, Iterable, List, Optional, Protocol, Tuple

from .batcher import Batcher
from .config import UploaderConfig
from .encoding import DEFAULT_FIELD, check_policy, encode_line
from .errors import ConfigurationError, LineEncodingError
from .models import Batch, BatchResult, UploadSummary
from .uploader import BulkUploader

logger = logging.getLogger(__name__)

LabeledStream = Tuple[str, BinaryIO]
ResultCallback = Callable[[BatchResult], None]


class CancelToken(Protocol):
    def is_set(self) -> bool: ...


class RunState(str, Enum):
    IDLE = "idle"
    READING = "reading"
    BATCH_READY = "batch_ready"
    UPLOADING = "uploading"
    FLUSHING = "flushing"
    DONE = "done"
    CANCELLED = "cancelled"


class _Cancelled(Exception):
    pass


class Pipeline:
    """Reads every input in order and uploads each batch as soon as it is sealed.

    One Batcher is shared by all inputs, so a batch can hold lines from the
    end of one file and the start of the next. Uploads are synchronous: no
    more input is read while a batch is in flight.
    """

    def __init__(
        self,
        uploader: BulkUploader,
        batch_size: int = 1000,
        field_name: str = DEFAULT_FIELD,
        encoding_errors: str = "replace",
    ) -> None:
        if not field_name:
            raise ConfigurationError("Document field name must not be empty")
        self.uploader = uploader
        self.batch_size = batch_size
        self.field_name = field_name
        self.encoding_errors = check_policy(encoding_errors)
        self.state = RunState.IDLE

    def run(
        self,
        inputs: Iterable[LabeledStream],
        cancel: Optional[CancelToken] = None,
        on_result: Optional[ResultCallback] = None,
    ) -> UploadSummary:
        batcher = Batcher(self.batch_size)
        results: List[BatchResult] = []
        sources = 0
        lines = 0

        def check_cancel() -> None:
            if cancel is not None and cancel.is_set():
                raise _Cancelled()

        def dispatch(batch: Optional[Batch]) -> None:
            if batch is None:
                return
            self.state = RunState.BATCH_READY
            check_cancel()
            self.state = RunState.UPLOADING
            result = self.uploader.upload(batch)
            results.append(result)
            if on_result is not None:
                on_result(result)

        try:
            for label, stream in inputs:
                check_cancel()
                sources += 1
                self.state = RunState.READING
                logger.info("Reading %s", label)
                for number, raw in enumerate(stream, start=1):
                    check_cancel()
                    lines += 1
                    if raw.endswith(b"\n"):
                        raw = raw[:-1]
                    try:
                        document = encode_line(raw, self.field_name, self.encoding_errors)
                    except LineEncodingError as e:
                        logger.warning("%s line %d: %s", label, number, e)
                        batcher.reject(f"{label}:{number}: {e}")
                        continue
                    dispatch(batcher.add(document))
                    self.state = RunState.READING
            if not sources:
                raise ConfigurationError("No inputs to upload")
            self.state = RunState.FLUSHING
            dispatch(batcher.flush())
        except _Cancelled:
            logger.warning("Cancelled after %d lines", lines)
            self.state = RunState.CANCELLED
            return self._summarize(results, lines, cancelled=True)

        self.state = RunState.DONE
        return self._summarize(results, lines)

    def _summarize(
        self, results: List[BatchResult], lines: int, cancelled: bool = False
    ) -> UploadSummary:
        summary = UploadSummary(results=tuple(results), total_lines=lines, cancelled=cancelled)
        logger.info(
            "Processed %d batches, %d documents, %d failed%s",
            summary.total_batches,
            summary.total_documents,
            len(summary.failed_batches),
            " (cancelled)" if cancelled else "",
        )
        return summary


def run_pipeline(
    inputs: Iterable[LabeledStream],
    config: UploaderConfig,
    cancel: Optional[CancelToken] = None,
    on_result: Optional[ResultCallback] = None,
    uploader: Optional[BulkUploader] = None,
) -> UploadSummary:
    """Validate ``config``, then upload ``inputs`` to the configured cluster.

    Configuration problems raise before any request is made. When no
    ``uploader`` is given one is built from ``config`` and closed afterwards.
    """
    config.validate()

    owned = uploader is None
    if owned:
        uploader = BulkUploader.from_config(config)
    try:
        pipeline = Pipeline(
            uploader,
            batch_size=config.batch_size,
            field_name=config.field_name,
            encoding_errors=config.encoding_errors,
        )
        return pipeline.run(inputs, cancel=cancel, on_result=on_result)
    finally:
        if owned:
            uploader.close()
