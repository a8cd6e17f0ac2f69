from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from redis.exceptions import ConnectionError as RedisConnectionError

from collabill import ratelimit
from collabill.main import create_app
from collabill.routes import health

class FakePipeline:
    def __init__(self, counts: dict[str, int], fail: bool = False):
        self.counts = counts
        self.fail = fail
        self.key = None

    def incr(self, key):
        self.key = key

    def expire(self, key, seconds, nx=False):
        pass

    def execute(self):
        if self.fail:
            raise RedisConnectionError("down")
        self.counts[self.key] = self.counts.get(self.key, 0) + 1
        return [self.counts[self.key], True]

class FakeRedis:
    def __init__(self, fail: bool = False):
        self.counts: dict[str, int] = {}
        self.fail = fail

    def pipeline(self):
        return FakePipeline(self.counts, self.fail)

def _limited_app() -> TestClient:
    app = FastAPI()

    @app.post("/limited")
    def limited(_: None = Depends(ratelimit.rate_limit("test", limit_per_window=2, window_seconds=60))) -> dict:
        return {"ok": True}

    return TestClient(app)

def test_rate_limit_blocks_after_window_fills(monkeypatch):
    monkeypatch.setattr(ratelimit.settings, "rate_limit_enabled", True)
    monkeypatch.setattr(ratelimit, "redis_client", FakeRedis())
    client = _limited_app()

    assert client.post("/limited").status_code == 200
    assert client.post("/limited").status_code == 200
    r = client.post("/limited")
    assert r.status_code == 429
    assert r.json()["detail"] == "rate_limited"

def test_rate_limit_fails_open(monkeypatch):
    monkeypatch.setattr(ratelimit.settings, "rate_limit_enabled", True)
    monkeypatch.setattr(ratelimit, "redis_client", FakeRedis(fail=True))
    client = _limited_app()

    for _ in range(5):
        assert client.post("/limited").status_code == 200

def test_rate_limit_disabled(monkeypatch):
    monkeypatch.setattr(ratelimit.settings, "rate_limit_enabled", False)
    fake = FakeRedis()
    monkeypatch.setattr(ratelimit, "redis_client", fake)
    client = _limited_app()

    for _ in range(5):
        assert client.post("/limited").status_code == 200
    assert fake.counts == {}

def test_health_and_readiness(monkeypatch):
    client = TestClient(create_app())
    assert client.get("/health").json() == {"status": "ok"}

    monkeypatch.setattr(health, "db_ping", lambda: True)
    monkeypatch.setattr(health, "redis_ping", lambda: False)
    r = client.get("/ready")
    assert r.status_code == 503
    assert r.json()["checks"] == {"db": True, "redis": False}

    monkeypatch.setattr(health, "redis_ping", lambda: True)
    assert client.get("/ready").status_code == 200
