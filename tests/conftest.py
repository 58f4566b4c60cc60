"""Shared fixtures: an in-memory store, the Flask app, and HTTP session doubles."""

from datetime import date, datetime, timedelta, timezone

import pytest
import requests

from api.app import create_app
from budget_core.config import Settings
from budget_core.storage import KeyValueStore, MemoryKeyValueStore

BASE_URL = "http://testserver/api"
USER_ID = "demo-user-001"
TODAY = date(2024, 12, 15)


class BrokenStore(KeyValueStore):
    """Store whose every operation blows up."""

    def get(self, key):
        raise RuntimeError("store unavailable")

    def set(self, key, value):
        raise RuntimeError("store unavailable")

    def delete(self, key):
        raise RuntimeError("store unavailable")

    def get_by_prefix(self, prefix):
        raise RuntimeError("store unavailable")


class FlaskResponse:
    def __init__(self, response):
        self._response = response
        self.status_code = response.status_code

    def json(self):
        payload = self._response.get_json(silent=True)
        if payload is None:
            raise ValueError("No JSON body")
        return payload


class FlaskSession:
    """Routes requests-style calls into a Flask test client."""

    def __init__(self, test_client, host="http://testserver"):
        self._client = test_client
        self._host = host
        self.calls = []

    def request(self, method, url, json=None, headers=None, timeout=None):
        path = url[len(self._host):]
        self.calls.append((method, path, json))
        return FlaskResponse(self._client.open(path, method=method, json=json))


class OfflineSession:
    """Every request fails as if the server were unreachable."""

    def __init__(self):
        self.calls = []

    def request(self, method, url, json=None, headers=None, timeout=None):
        self.calls.append((method, url, json))
        raise requests.ConnectionError("server unreachable")


class SteppingClock:
    """Returns a strictly increasing UTC timestamp on every call."""

    def __init__(self, start=None):
        self.current = start or datetime(2024, 12, 15, 8, 0, tzinfo=timezone.utc)

    def __call__(self):
        self.current += timedelta(minutes=1)
        return self.current


@pytest.fixture
def settings():
    return Settings(env="dev", api_prefix="/api")


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def app(store, settings):
    app = create_app(store=store, settings=settings)
    app.config.update(TESTING=True)
    return app


@pytest.fixture
def http(app):
    return app.test_client()


@pytest.fixture
def flask_session(http):
    return FlaskSession(http)


@pytest.fixture
def offline_session():
    return OfflineSession()
