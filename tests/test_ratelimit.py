from fastapi.testclient import TestClient

from supplywatch.api.ratelimit import FixedWindowRateLimiter
from supplywatch.config import Settings
from supplywatch.main import create_app


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_fixed_window_blocks_and_resets():
    clock = Clock()
    limiter = FixedWindowRateLimiter(2, 60, clock=clock)
    assert limiter.hit("1.2.3.4") is None
    assert limiter.hit("1.2.3.4") is None
    clock.now += 10
    assert limiter.hit("1.2.3.4") == 50
    # andere IP hat ein eigenes Fenster
    assert limiter.hit("5.6.7.8") is None
    clock.now += 50
    assert limiter.hit("1.2.3.4") is None


def test_disabled_with_zero_max():
    limiter = FixedWindowRateLimiter(0, 60)
    assert all(limiter.hit("x") is None for _ in range(10))


def test_middleware_returns_429(database, pipeline):
    settings = Settings(database_url="sqlite://", scheduler_enabled=False, rate_limit_max=2)
    app = create_app(settings, database=database, pipeline=pipeline)
    with TestClient(app) as client:
        assert client.get("/api/analytics/total-severity-counts").status_code == 200
        assert client.get("/api/analytics/total-severity-counts").status_code == 200
        res = client.get("/api/analytics/total-severity-counts")
        assert res.status_code == 429
        assert res.headers["Retry-After"] == "900"
        assert "Too many requests" in res.json()["message"]


def test_forwarded_header_ignored_without_trusted_proxy(database, pipeline):
    settings = Settings(database_url="sqlite://", scheduler_enabled=False, rate_limit_max=2)
    app = create_app(settings, database=database, pipeline=pipeline)
    with TestClient(app) as client:
        codes = [
            client.get("/api/analytics/total-severity-counts", headers={"X-Forwarded-For": f"10.0.0.{i}"}).status_code
            for i in range(5)
        ]
    assert codes == [200, 200, 429, 429, 429]
    assert len(app.state.rate_limiter) == 1


def test_trusted_proxy_uses_rightmost_hop(database, pipeline):
    settings = Settings(database_url="sqlite://", scheduler_enabled=False, rate_limit_max=1, trust_proxy=True)
    app = create_app(settings, database=database, pipeline=pipeline)
    with TestClient(app) as client:
        url = "/api/analytics/total-severity-counts"
        # vom Client gefälschter linker Eintrag ändert nichts
        assert client.get(url, headers={"X-Forwarded-For": "1.1.1.1, 203.0.113.7"}).status_code == 200
        assert client.get(url, headers={"X-Forwarded-For": "2.2.2.2, 203.0.113.7"}).status_code == 429
        assert client.get(url, headers={"X-Forwarded-For": "203.0.113.8"}).status_code == 200


def test_expired_windows_are_swept():
    clock = Clock()
    limiter = FixedWindowRateLimiter(5, 60, clock=clock, sweep_threshold=3)
    for ip in ("a", "b", "c"):
        limiter.hit(ip)
    assert len(limiter) == 3
    clock.now += 61
    limiter.hit("d")
    assert len(limiter) == 1
    assert "d" in limiter._windows
