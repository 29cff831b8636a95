"""Stream log lines into an OpenSearch/Elasticsearch ``_bulk`` endpoint in batches."""

from .batcher import Batcher
from .config import UploaderConfig
from .encoding import encode_document, encode_line, escape_line
from .errors import (
    ConfigurationError,
    LineEncodingError,
    UploaderConnectionError,
    UploaderError,
)
from .models import Batch, BatchResult, EncodedDocument, ErrorKind, UploadSummary
from .pipeline import Pipeline, RunState, run_pipeline
from .uploader import BulkUploader

__version__ = "0.1.0"

__all__ = [
    "Batch",
    "BatchResult",
    "Batcher",
    "BulkUploader",
    "ConfigurationError",
    "EncodedDocument",
    "ErrorKind",
    "LineEncodingError",
    "Pipeline",
    "RunState",
    "UploadSummary",
    "UploaderConfig",
    "UploaderConnectionError",
    "UploaderError",
    "encode_document",
    "encode_line",
    "escape_line",
    "run_pipeline",
]
