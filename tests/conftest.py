import json
import threading
import types

import pytest
import requests
from requests.structures import CaseInsensitiveDict
from typer.testing import CliRunner

MONOTONIC_START = 1_000_000.0
EPOCH_START = 1_700_000_000.0


@pytest.fixture
def clock(monkeypatch):
    """
    Freeze time and capture sleeps.

    time.sleep(dt) advances the frozen clock by dt instead of blocking, and
    rejects the same oversized values the real one does;
    time.time() moves in lockstep with time.monotonic().
    """
    t = {"now": MONOTONIC_START, "sleeps": []}

    def monotonic():
        return t["now"]

    def time_time():
        return EPOCH_START + (t["now"] - MONOTONIC_START)

    def sleep(dt):
        dt = float(dt)
        if dt > threading.TIMEOUT_MAX:
            raise OverflowError("timeout value is too large")
        if dt <= 0:
            return
        t["sleeps"].append(dt)
        t["now"] += dt

    monkeypatch.setattr("time.monotonic", monotonic)
    monkeypatch.setattr("time.time", time_time)
    monkeypatch.setattr("time.sleep", sleep)

    return types.SimpleNamespace(
        now=lambda: t["now"],
        wall=time_time,
        advance=lambda dt: t.__setitem__("now", t["now"] + float(dt)),
        sleeps=lambda: list(t["sleeps"]),
        slept=lambda: sum(t["sleeps"]),
    )


@pytest.fixture
def make_response():
    """Factory for requests.Response objects with a canned body."""

    def _make(status=200, body=None, headers=None, url="https://api.github.com/"):
        response = requests.Response()
        response.status_code = status
        response.reason = "OK" if status == 200 else "Error"
        response.headers = CaseInsensitiveDict(headers or {})
        if isinstance(body, bytes):
            response._content = body
        elif body is None:
            response._content = b""
        else:
            response._content = json.dumps(body).encode("utf-8")
        response.encoding = "utf-8"
        response.url = url
        return response

    return _make


@pytest.fixture
def session():
    s = requests.Session()
    yield s
    s.close()


@pytest.fixture(scope="session")
def runner():
    """Provides a Typer CliRunner instance."""
    return CliRunner()


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep the developer's environment out of the tests."""
    for name in (
        "GITHUB_TOKEN",
        "OSS_CRAWLER_MIN_DELAY",
        "OSS_CRAWLER_MAX_DELAY",
        "OSS_CRAWLER_TIMEOUT",
        "OSS_CRAWLER_MAX_ATTEMPTS",
        "OSS_CRAWLER_LOG_LEVEL",
        "OSS_CRAWLER_LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
