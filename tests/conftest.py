import json

import pytest


class FakeResponse:
    def __init__(self, status_code=200, payload=None, text=None):
        self.status_code = status_code
        self._payload = payload
        if text is None:
            text = json.dumps(payload) if payload is not None else ""
        self.text = text

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Stands in for requests.Session and records every GET."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True
        return False

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def fake_http(monkeypatch):
    """Replace requests.Session in the Basis provider; returns a configurer."""
    from basis_export.providers import basis

    sessions = []

    def install(response=None, error=None):
        def factory():
            session = FakeSession(response=response, error=error)
            sessions.append(session)
            return session

        monkeypatch.setattr(basis.requests, "Session", factory)
        return sessions

    return install


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("BASIS_API_URL", "BASIS_HTTP_TIMEOUT", "BASIS_EXPORT_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
