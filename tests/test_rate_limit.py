"""
Test: Sliding-window limiter for the auth endpoints.
"""
from gabarito.app import create_app
from gabarito.rate_limit import RateLimiter
from gabarito.storage import MemoryStore


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestRateLimiter:
    def test_blocks_after_limit(self):
        limiter = RateLimiter(2, 60, clock=FakeClock())
        assert limiter.hit("1.2.3.4")
        assert limiter.hit("1.2.3.4")
        assert not limiter.hit("1.2.3.4")

    def test_keys_are_independent(self):
        limiter = RateLimiter(1, 60, clock=FakeClock())
        assert limiter.hit("a")
        assert limiter.hit("b")
        assert not limiter.hit("a")

    def test_window_slides(self):
        clock = FakeClock()
        limiter = RateLimiter(1, 60, clock=clock)
        assert limiter.hit("a")
        clock.now += 59
        assert not limiter.hit("a")
        clock.now += 2
        assert limiter.hit("a")

    def test_reset(self):
        limiter = RateLimiter(1, 60, clock=FakeClock())
        limiter.hit("a")
        limiter.reset("a")
        assert limiter.hit("a")

    def test_idle_clients_are_forgotten(self):
        clock = FakeClock()
        limiter = RateLimiter(5, 60, clock=clock)
        for n in range(10):
            limiter.hit(f"10.0.0.{n}")
        assert len(limiter) == 10
        clock.now += 61
        limiter.hit("10.0.0.99")
        assert len(limiter) == 1

    def test_active_clients_survive_sweep(self):
        clock = FakeClock()
        limiter = RateLimiter(1, 60, clock=clock)
        limiter.hit("a")
        clock.now += 30
        limiter.hit("b")
        clock.now += 31
        assert not limiter.hit("b")
        assert len(limiter) == 1


class TestAuthEndpointsLimited:
    def test_login_throttled(self):
        app = create_app({"storage_backend": "memory", "bcrypt_log_rounds": 4, "log_level": "WARNING"},
                         store=MemoryStore(), rate_limiter=RateLimiter(3, 60, clock=FakeClock()))
        client = app.test_client()
        body = {"email": "ninguem@escola.com", "password": "segredo123"}
        statuses = [client.post("/auth/login", json=body).status_code for _ in range(4)]
        assert statuses == [401, 401, 401, 429]
        assert client.post("/auth/login", json=body).get_json()["code"] == "RATE_LIMITED"

    def test_forwarded_for_does_not_pick_the_key(self):
        app = create_app({"storage_backend": "memory", "bcrypt_log_rounds": 4, "log_level": "WARNING"},
                         store=MemoryStore(), rate_limiter=RateLimiter(2, 60, clock=FakeClock()))
        client = app.test_client()
        body = {"email": "ninguem@escola.com", "password": "segredo123"}
        statuses = [
            client.post("/auth/login", json=body, headers={"X-Forwarded-For": f"203.0.113.{n}"}).status_code
            for n in range(4)
        ]
        assert statuses == [401, 401, 429, 429]

    def test_trusted_proxy_hop(self):
        app = create_app({"storage_backend": "memory", "bcrypt_log_rounds": 4, "log_level": "WARNING",
                          "trusted_proxy_hops": 1},
                         store=MemoryStore(), rate_limiter=RateLimiter(1, 60, clock=FakeClock()))
        client = app.test_client()
        body = {"email": "ninguem@escola.com", "password": "segredo123"}
        first = client.post("/auth/login", json=body, headers={"X-Forwarded-For": "203.0.113.1"})
        second = client.post("/auth/login", json=body, headers={"X-Forwarded-For": "203.0.113.2"})
        again = client.post("/auth/login", json=body, headers={"X-Forwarded-For": "203.0.113.1"})
        assert [first.status_code, second.status_code, again.status_code] == [401, 401, 429]

    def test_limiters_are_per_app(self):
        limiter = RateLimiter(1, 60, clock=FakeClock())
        first = create_app({"storage_backend": "memory", "log_level": "WARNING"},
                           store=MemoryStore(), rate_limiter=limiter)
        second = create_app({"storage_backend": "memory", "log_level": "WARNING"}, store=MemoryStore())
        assert first.extensions["rate_limiter"] is limiter
        assert second.extensions["rate_limiter"] is not limiter
