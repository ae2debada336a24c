"""
Shared fixtures for integration tests.

Provides:
- A local "bucket" directory holding gzip log objects
- A recording fake indexing endpoint (httpx.MockTransport)
- Settings, signer and pipeline factories wired to both
"""

import json
from datetime import date
from pathlib import Path
from typing import Callable, Optional

import httpx
import pytest
from botocore.credentials import Credentials

from access_log_indexer.config.settings import Settings
from access_log_indexer.pipeline import LogIndexingPipeline, RequestSigner
from access_log_indexer.storage import LocalFileStore
from tests.helpers import gzip_lines

BUCKET = "access-logs"
ENDPOINT = "search-logs.eu-west-1.es.amazonaws.com"
RUN_DAY = date(2024, 1, 15)


class FakeIndexEndpoint:
    """
    Records every indexing request and answers 201 by default.

    `reject` decides per document whether to answer with an error status.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.reject: Optional[Callable[[dict], Optional[int]]] = None

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        document = json.loads(request.content)
        if self.reject is not None:
            status = self.reject(document)
            if status:
                return httpx.Response(status, json={"error": {"type": "rejected"}})
        return httpx.Response(201, json={"result": "created"})

    @property
    def documents(self) -> list[dict]:
        return [json.loads(r.content) for r in self.requests]

    @property
    def paths(self) -> set[str]:
        return {r.url.path for r in self.requests}


class RecordingCallback:
    """Completion callback recording each notification."""

    def __init__(self):
        self.calls = []

    def succeed(self):
        self.calls.append(("succeed", None))

    def fail(self, error):
        self.calls.append(("fail", error))


@pytest.fixture
def log_root(tmp_path) -> Path:
    (tmp_path / BUCKET).mkdir()
    return tmp_path


@pytest.fixture
def write_log(log_root):
    """Write a gzip log object under the test bucket; returns its key."""

    def _write(key: str, lines: list[str], raw: Optional[bytes] = None) -> str:
        path = log_root / BUCKET / key
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(raw if raw is not None else gzip_lines(lines))
        return key

    return _write


@pytest.fixture
def endpoint() -> FakeIndexEndpoint:
    return FakeIndexEndpoint()


@pytest.fixture
def settings() -> Settings:
    return Settings(es_endpoint=ENDPOINT, region="eu-west-1", max_in_flight=4)


@pytest.fixture
def signer() -> RequestSigner:
    return RequestSigner(
        region="eu-west-1", credentials=Credentials("AKIDEXAMPLE", "SECRET")
    )


@pytest.fixture
def make_pipeline(log_root, endpoint, signer):
    """Build a pipeline reading from log_root and posting to the fake endpoint."""

    def _make(settings: Settings, store=None) -> LogIndexingPipeline:
        client = httpx.AsyncClient(transport=httpx.MockTransport(endpoint))
        return LogIndexingPipeline(
            settings,
            store or LocalFileStore(log_root),
            settings.index_target(today=RUN_DAY),
            client=client,
            signer=signer,
        )

    return _make
