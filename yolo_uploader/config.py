"""Upload settings, read from the environment like the OpenSearch scripts do."""

import os
from dataclasses import dataclass, replace
from typing import Optional
from urllib.parse import urlsplit, urlunsplit

from .encoding import DEFAULT_FIELD, check_policy
from .errors import ConfigurationError

DEFAULT_INDEX = "logs"
DEFAULT_BATCH_SIZE = 1000
DEFAULT_TIMEOUT = 30.0
FILTER_PATH = "took,errors,items.*.error"

_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off")


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from None


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    if value.lower() in _TRUE:
        return True
    if value.lower() in _FALSE:
        return False
    raise ConfigurationError(f"{name} must be true or false, got {value!r}")


@dataclass(frozen=True)
class UploaderConfig:
    cluster_url: str = ""
    index: str = DEFAULT_INDEX
    batch_size: int = DEFAULT_BATCH_SIZE
    field_name: str = DEFAULT_FIELD
    timeout: float = DEFAULT_TIMEOUT
    verify_certs: bool = True
    encoding_errors: str = "replace"
    filter_response: bool = True
    username: Optional[str] = None
    password: Optional[str] = None

    @classmethod
    def from_env(cls) -> "UploaderConfig":
        return cls(
            cluster_url=os.getenv("OPENSEARCH_URL", ""),
            index=os.getenv("UPLOAD_INDEX", DEFAULT_INDEX),
            batch_size=_env_int("UPLOAD_BATCH_SIZE", DEFAULT_BATCH_SIZE),
            field_name=os.getenv("UPLOAD_FIELD", DEFAULT_FIELD),
            timeout=_env_float("UPLOAD_TIMEOUT", DEFAULT_TIMEOUT),
            verify_certs=_env_bool("UPLOAD_VERIFY_CERTS", True),
            encoding_errors=os.getenv("UPLOAD_ENCODING_ERRORS", "replace"),
            username=os.getenv("OPENSEARCH_USERNAME"),
            password=os.getenv("OPENSEARCH_PASSWORD"),
        )

    def with_overrides(self, **overrides) -> "UploaderConfig":
        """Return a copy with every override that is not ``None`` applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})

    def validate(self) -> "UploaderConfig":
        if not self.cluster_url:
            raise ConfigurationError(
                "Cluster URL is required.",
                hint="Pass it as the first argument or set OPENSEARCH_URL.",
            )
        if urlsplit(self.cluster_url).scheme not in ("http", "https"):
            raise ConfigurationError(f"Cluster URL must be http(s): {self.display_url}")
        if not self.index or "/" in self.index:
            raise ConfigurationError(f"Invalid index name {self.index!r}")
        if self.batch_size < 1:
            raise ConfigurationError(f"Batch size must be at least 1, got {self.batch_size}")
        if not self.field_name:
            raise ConfigurationError("Document field name must not be empty")
        if self.timeout <= 0:
            raise ConfigurationError(f"Timeout must be positive, got {self.timeout}")
        check_policy(self.encoding_errors)
        return self

    @property
    def display_url(self) -> str:
        """The cluster URL with any embedded password masked."""
        parts = urlsplit(self.cluster_url)
        if parts.password is None:
            return self.cluster_url
        netloc = f"{parts.username}:****@{parts.hostname}"
        if parts.port:
            netloc += f":{parts.port}"
        return urlunsplit(parts._replace(netloc=netloc))

    @property
    def bulk_url(self) -> str:
        return f"{self.display_url.rstrip('/')}/{self.index}/_bulk"
