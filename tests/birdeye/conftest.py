import json
import os
from typing import Any, Callable, Dict, List, Tuple

import httpx
import pytest

from birdeye_connectors.core.config import resolve_config, with_base_url, with_max_retries, with_retry_wait, \
    with_transport, with_logger
from birdeye_connectors.core.httpx_client import HTTPClient
from birdeye_connectors.birdeye.api_client import BirdeyeClient

TEST_BASE_URL = "https://birdeye.test"
TEST_DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "test_data")


# ---------------- Utilitaires ----------------

def load_json(filename: str) -> Dict[str, Any]:
    """Charge un fichier JSON depuis tests/birdeye/test_data/"""
    with open(os.path.join(TEST_DATA_DIR, filename), "r", encoding="utf-8") as f:
        return json.load(f)


def load_bytes(filename: str) -> bytes:
    with open(os.path.join(TEST_DATA_DIR, filename), "rb") as f:
        return f.read()


def wrap_response(data: Any) -> Dict[str, Any]:
    """Enveloppe `data` au format standard Birdeye."""
    return {"success": True, "data": data}


def wrap_failure() -> Dict[str, Any]:
    return {"success": False, "data": None}


class RecordingLogger:
    """Logger de test : enregistre (niveau, message, args)."""

    def __init__(self):
        self.records: List[Tuple[str, str, tuple]] = []

    def _record(self, level, msg, *args, **kwargs):
        self.records.append((level, msg, args))

    def debug(self, msg, *args, **kwargs):
        self._record("debug", msg, *args)

    def info(self, msg, *args, **kwargs):
        self._record("info", msg, *args)

    def warning(self, msg, *args, **kwargs):
        self._record("warning", msg, *args)

    def error(self, msg, *args, **kwargs):
        self._record("error", msg, *args)

    def levels(self) -> List[str]:
        return [level for level, _, _ in self.records]

    def by_level(self, level: str) -> List[Tuple[str, str, tuple]]:
        return [r for r in self.records if r[0] == level]


class FakeBirdeyeServer:
    """
    Serveur factice branché via httpx.MockTransport.
    `responses` : path -> dict (JSON 200), int (statut, corps vide) ou httpx.Response.
    """

    def __init__(self, responses: Dict[str, Any] = None):
        self.responses = responses or {}
        self.requests: List[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if not request.headers.get("X-API-KEY"):
            return httpx.Response(401, json={"error": "missing api key"})

        response = self.responses.get(request.url.path)
        if response is None:
            return httpx.Response(404, json={"error": "not found"})
        if callable(response):
            return response(request)
        if isinstance(response, int):
            return httpx.Response(response)
        if isinstance(response, httpx.Response):
            # nouvelle instance à chaque requête (retries)
            return httpx.Response(response.status_code, headers=response.headers, content=response.content)
        return httpx.Response(200, json=response)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]


# ---------------- Fixtures ----------------

@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def fake_server() -> FakeBirdeyeServer:
    return FakeBirdeyeServer()


@pytest.fixture
def make_http(fake_server, recording_logger) -> Callable[..., HTTPClient]:
    """Factory d'HTTPClient branché sur le serveur factice, sans attente entre retries."""

    def _make(*options, max_retries: int = 0) -> HTTPClient:
        cfg = resolve_config(
            with_base_url(TEST_BASE_URL),
            with_max_retries(max_retries),
            with_retry_wait(0, 0),
            with_transport(fake_server.transport),
            with_logger(recording_logger),
            *options,
        )
        return HTTPClient("test-api-key", cfg)

    return _make


@pytest.fixture
def make_client(fake_server, recording_logger) -> Callable[..., BirdeyeClient]:
    def _make(*options, max_retries: int = 0) -> BirdeyeClient:
        return BirdeyeClient(
            "test-api-key",
            with_base_url(TEST_BASE_URL),
            with_max_retries(max_retries),
            with_retry_wait(0, 0),
            with_transport(fake_server.transport),
            with_logger(recording_logger),
            *options,
        )

    return _make
