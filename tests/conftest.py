import base64
import json
from datetime import timedelta

import pytest

# Well-known throwaway key from the web3 documentation, never funded
PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"


def make_jwt(payload: dict) -> str:
    def seg(obj):
        raw = json.dumps(obj).encode("utf-8")
        return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")

    return f"{seg({'alg': 'HS256', 'typ': 'JWT'})}.{seg(payload)}.c2lnbmF0dXJl"


class FakeClient:
    """Stands in for HttpClient: replays canned (status, content_type, body) tuples."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def post_json(self, path, payload=None, token=None):
        self.calls.append({"path": path, "payload": payload, "token": token})
        if self.responses:
            return self.responses.pop(0)
        return 200, "application/json", json.dumps({"data": {"currentStreak": 1}})


def json_response(body, status=200):
    return status, "application/json", json.dumps(body)


@pytest.fixture
def write_file(tmp_path):
    def _write(text, name="creds.txt"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return str(path)

    return _write


class FakeClock:
    """Callable clock whose `sleep` advances time instead of blocking."""

    def __init__(self, start):
        self.now = start
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += timedelta(seconds=seconds)
