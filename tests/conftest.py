"""Pytest fixtures: environment isolation and a scripted OpenSearch client."""

import pytest

from helpers import FakeClient
from yolo_uploader.uploader import BulkUploader

ENV_VARS = (
    "OPENSEARCH_URL",
    "OPENSEARCH_USERNAME",
    "OPENSEARCH_PASSWORD",
    "UPLOAD_INDEX",
    "UPLOAD_BATCH_SIZE",
    "UPLOAD_FIELD",
    "UPLOAD_TIMEOUT",
    "UPLOAD_VERIFY_CERTS",
    "UPLOAD_ENCODING_ERRORS",
)


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def fake_client():
    return FakeClient()


@pytest.fixture
def uploader(fake_client):
    return BulkUploader(fake_client, index="logs", timeout=5.0)
