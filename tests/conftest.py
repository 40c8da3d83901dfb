"""Shared fixtures: isolated data dirs, in-memory storage, a fake LLM endpoint."""

import json
from typing import Any, Callable

import httpx
import pytest

from olive.classifier import Classifier
from olive.config import get_default_config
from olive.storage import MemoryStorage, StorageError
from olive.store import NoteStore


@pytest.fixture(autouse=True)
def isolated_home(tmp_path, monkeypatch):
    """Keep every test away from the real ~/olive and ~/.config."""
    monkeypatch.setenv("OLIVE_HOME", str(tmp_path / "home"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.delenv("OLIVE_LLM_ENDPOINT", raising=False)
    monkeypatch.delenv("OLIVE_LOG_LEVEL", raising=False)
    monkeypatch.setenv("NO_COLOR", "1")
    return tmp_path


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def store(storage) -> NoteStore:
    note_store = NoteStore(storage)
    note_store.load()
    return note_store


class FailingStorage(MemoryStorage):
    """Storage whose reads and/or writes blow up."""

    def __init__(self, fail_reads: bool = False, fail_writes: bool = True):
        super().__init__()
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes

    def get_item(self, key: str) -> str | None:
        if self.fail_reads:
            raise StorageError("disk on fire")
        return super().get_item(key)

    def set_item(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageError("disk full")
        super().set_item(key, value)


@pytest.fixture
def failing_storage_factory() -> Callable[..., FailingStorage]:
    return FailingStorage


def _completion_response(fields: dict[str, Any] | str) -> httpx.Response:
    """An endpoint reply whose completion encodes the given fields."""
    completion = fields if isinstance(fields, str) else json.dumps(fields)
    return httpx.Response(200, json={"completion": completion})


@pytest.fixture
def make_classifier() -> Callable[..., Classifier]:
    """
    Build a Classifier talking to a fake endpoint.

    `reply` is an httpx.Response, or a callable taking the request, or an
    exception instance to raise from the transport.
    """

    def factory(reply: Any) -> Classifier:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if isinstance(reply, Exception):
                raise reply
            if callable(reply):
                return reply(request)
            return reply

        classifier = Classifier(get_default_config(), transport=httpx.MockTransport(handler))
        classifier.requests = requests
        return classifier

    return factory


@pytest.fixture
def offline_classifier(make_classifier) -> Classifier:
    """A classifier whose endpoint is unreachable."""
    return make_classifier(httpx.ConnectError("connection refused"))


@pytest.fixture
def completion_response() -> Callable[[dict[str, Any] | str], httpx.Response]:
    return _completion_response
