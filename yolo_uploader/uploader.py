"""Send sealed batches to the cluster's ``_bulk`` endpoint, one request each."""

import json
import logging
from typing import Any, Optional

from opensearchpy import OpenSearch
from opensearchpy.exceptions import (
    AuthenticationException,
    ConnectionError,
    SerializationError,
    TransportError,
)

from .config import FILTER_PATH, UploaderConfig
from .errors import UploaderConnectionError
from .models import Batch, BatchResult, ErrorKind

logger = logging.getLogger(__name__)

NDJSON_HEADERS = {"Content-Type": "application/x-ndjson"}


def _raw_body(body: Any) -> str:
    if isinstance(body, (dict, list)):
        return json.dumps(body, ensure_ascii=False, separators=(",", ":"))
    return str(body)


def _status(exc: TransportError) -> Optional[int]:
    # ConnectionError reports "N/A" here
    return exc.status_code if isinstance(exc.status_code, int) else None


def response_failed(response: dict) -> bool:
    """True when a 2xx bulk response still reports a failure."""
    return response.get("errors") is True or isinstance(response.get("error"), dict)


def build_client(config: UploaderConfig) -> OpenSearch:
    # credentials embedded in the URL are picked up by the client itself
    http_auth = None
    if config.username and config.password:
        http_auth = (config.username, config.password)
    return OpenSearch(
        hosts=[config.cluster_url],
        http_auth=http_auth,
        verify_certs=config.verify_certs,
        ssl_show_warn=config.verify_certs,
        timeout=config.timeout,
        max_retries=0,
        retry_on_timeout=False,
    )


class BulkUploader:
    """Performs one blocking ``POST /<index>/_bulk`` per batch.

    Every outcome becomes a BatchResult; nothing raised by the transport
    escapes ``upload``. There are no retries.
    """

    def __init__(
        self,
        client: OpenSearch,
        index: str = "logs",
        timeout: float = 30.0,
        filter_response: bool = True,
    ) -> None:
        self.client = client
        self.index = index
        self.timeout = timeout
        self.filter_path = FILTER_PATH if filter_response else None

    @classmethod
    def from_config(cls, config: UploaderConfig) -> "BulkUploader":
        return cls(
            build_client(config),
            index=config.index,
            timeout=config.timeout,
            filter_response=config.filter_response,
        )

    def check_connection(self) -> dict:
        try:
            info = self.client.info(request_timeout=self.timeout)
        except AuthenticationException as e:
            raise UploaderConnectionError(
                "Failed to authenticate to the cluster.",
                hint="Check the credentials embedded in the cluster URL "
                "or OPENSEARCH_USERNAME / OPENSEARCH_PASSWORD.",
            ) from e
        except TransportError as e:
            raise UploaderConnectionError(f"Cluster is not reachable: {e}") from e
        logger.info("Connected to cluster %s", info.get("cluster_name", "?"))
        return info

    def upload(self, batch: Batch) -> BatchResult:
        if batch.rejected:
            logger.warning(
                "Batch %d has %d undecodable lines, not sending it",
                batch.number, len(batch.rejected),
            )
            return BatchResult(
                batch_number=batch.number,
                success=False,
                document_count=len(batch),
                error_kind=ErrorKind.ENCODING,
                error_detail="\n".join(batch.rejected),
            )

        logger.info("Uploading batch %d (%d documents)", batch.number, len(batch))
        try:
            response = self.client.bulk(
                body=batch.payload(),
                index=self.index,
                headers=NDJSON_HEADERS,
                filter_path=self.filter_path,
                request_timeout=self.timeout,
            )
        except ConnectionError as e:
            return self._failure(batch, ErrorKind.TRANSPORT, str(e))
        except SerializationError as e:
            return self._failure(batch, ErrorKind.TRANSPORT, f"Unreadable response: {e}")
        except TransportError as e:
            # a non-2xx answer with a JSON body is the server talking, not the network
            if isinstance(e.info, dict):
                return self._failure(batch, ErrorKind.PROTOCOL, _raw_body(e.info), _status(e))
            return self._failure(batch, ErrorKind.TRANSPORT, str(e), _status(e))

        if not isinstance(response, dict):
            # text/plain and text/html bodies come back undecoded
            return self._failure(batch, ErrorKind.TRANSPORT, f"Unreadable response: {response}")
        if response_failed(response):
            return self._failure(batch, ErrorKind.PROTOCOL, _raw_body(response))

        logger.info("Batch %d completed successfully", batch.number)
        return BatchResult(
            batch_number=batch.number,
            success=True,
            document_count=len(batch),
            took=response.get("took"),
        )

    def _failure(
        self,
        batch: Batch,
        kind: ErrorKind,
        detail: str,
        status_code: Optional[int] = None,
    ) -> BatchResult:
        logger.warning("Batch %d failed (%s): %s", batch.number, kind.value, detail)
        return BatchResult(
            batch_number=batch.number,
            success=False,
            document_count=len(batch),
            error_kind=kind,
            error_detail=detail,
            status_code=status_code,
        )

    def close(self) -> None:
        self.client.close()
