"""Resolve file patterns into readable inputs without going through a shell."""

import glob
import logging
import math
import os
from contextlib import contextmanager
from dataclasses import dataclass
from typing import BinaryIO, Iterator, List, Sequence, Tuple

from .encoding import DEFAULT_FIELD, encode_line
from .errors import LineEncodingError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InputSource:
    path: str
    label: str

    def open(self) -> BinaryIO:
        return open(self.path, "rb")

    def count_lines(self) -> int:
        with self.open() as f:
            return sum(1 for _ in f)


def resolve_inputs(patterns: Sequence[str]) -> List[InputSource]:
    """Expand glob patterns into regular files, in pattern order, without duplicates."""
    sources: List[InputSource] = []
    seen = set()
    for pattern in patterns:
        if glob.has_magic(pattern):
            matches = sorted(glob.glob(pattern, recursive=True))
        else:
            matches = [pattern]
        for path in matches:
            if not os.path.isfile(path):
                logger.debug("Skipping %s: not a regular file", path)
                continue
            key = os.path.realpath(path)
            if key in seen:
                continue
            seen.add(key)
            sources.append(InputSource(path=path, label=path))
    return sources


def _open_each(sources: Sequence[InputSource]) -> Iterator[Tuple[str, BinaryIO]]:
    for source in sources:
        with source.open() as f:
            yield source.label, f


@contextmanager
def open_inputs(sources: Sequence[InputSource]) -> Iterator[Iterator[Tuple[str, BinaryIO]]]:
    """Yield the (label, stream) pairs, opening one file at a time.

    Each file is closed once the next one is requested; whichever file is
    still open is closed when the block exits.
    """
    streams = _open_each(sources)
    try:
        yield streams
    finally:
        streams.close()


def preview(
    sources: Sequence[InputSource],
    limit: int = 3,
    field_name: str = DEFAULT_FIELD,
    errors: str = "replace",
) -> List[str]:
    """Return the NDJSON lines the first ``limit`` input lines turn into."""
    lines: List[str] = []
    remaining = limit
    for source in sources:
        if remaining <= 0:
            break
        with source.open() as f:
            for raw in f:
                if remaining <= 0:
                    break
                remaining -= 1
                if raw.endswith(b"\n"):
                    raw = raw[:-1]
                try:
                    doc = encode_line(raw, field_name, errors)
                except LineEncodingError as e:
                    lines.append(f"# {source.label}: {e}")
                    continue
                lines.extend((doc.action, doc.source))
    return lines


def estimate_batches(total_lines: int, batch_size: int) -> int:
    return math.ceil(total_lines / batch_size) if total_lines > 0 else 0
