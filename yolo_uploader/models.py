"""Value types that flow through one upload run."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    ENCODING = "encoding"


@dataclass(frozen=True)
class EncodedDocument:
    """A bulk action line and its source line, both JSON text."""

    action: str
    source: str

    def to_ndjson(self) -> str:
        return f"{self.action}\n{self.source}\n"


@dataclass(frozen=True)
class Batch:
    """A sealed group of documents uploaded in one request."""

    number: int
    documents: Tuple[EncodedDocument, ...]
    rejected: Tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.documents)

    def payload(self) -> bytes:
        # every pair ends with a newline, so the last line is terminated too
        return "".join(doc.to_ndjson() for doc in self.documents).encode("utf-8")


@dataclass(frozen=True)
class BatchResult:
    batch_number: int
    success: bool
    document_count: int = 0
    error_kind: Optional[ErrorKind] = None
    error_detail: Optional[str] = None
    status_code: Optional[int] = None
    took: Optional[int] = None


@dataclass(frozen=True)
class UploadSummary:
    """Aggregate over every batch result of a run."""

    results: Tuple[BatchResult, ...] = field(default_factory=tuple)
    total_lines: int = 0
    cancelled: bool = False

    @property
    def total_batches(self) -> int:
        return len(self.results)

    @property
    def total_documents(self) -> int:
        return sum(r.document_count for r in self.results)

    @property
    def overall_success(self) -> bool:
        return all(r.success for r in self.results)

    @property
    def failed_batches(self) -> Tuple[BatchResult, ...]:
        return tuple(r for r in self.results if not r.success)
