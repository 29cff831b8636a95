"""Test doubles shared across test modules."""

import io
from typing import Any, Dict, List, Optional

OK = {"took": 3, "errors": False}


class FakeClient:
    """Replays scripted bulk responses and records every call.

    Each scripted item is either a response dict or an exception to raise.
    Once the script runs out every further call succeeds.
    """

    def __init__(self, responses: Optional[List[Any]] = None, info: Any = None) -> None:
        self.responses = list(responses or [])
        self.info_response = info if info is not None else {"cluster_name": "test"}
        self.calls: List[Dict[str, Any]] = []
        self.closed = False

    def bulk(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(kwargs)
        if not self.responses:
            return dict(OK)
        outcome = self.responses.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def info(self, **kwargs: Any) -> Dict[str, Any]:
        if isinstance(self.info_response, Exception):
            raise self.info_response
        return self.info_response

    def close(self) -> None:
        self.closed = True

    @property
    def payloads(self) -> List[bytes]:
        return [call["body"] for call in self.calls]


def stream(*lines: str) -> io.BytesIO:
    return io.BytesIO("".join(line + "\n" for line in lines).encode("utf-8"))


def numbered(count: int, prefix: str = "line") -> io.BytesIO:
    return stream(*(f"{prefix} {i}" for i in range(count)))
