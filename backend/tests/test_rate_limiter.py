from starlette.requests import Request

from pharmaflow.core.rate_limiter import RateLimiter, client_key


def request_with(headers=(), client=("10.0.0.5", 5123)):
    return Request({
        "type": "http",
        "method": "GET",
        "path": "/sales",
        "headers": [(k.encode(), v.encode()) for k, v in headers],
        "client": client,
    })


def test_limit_within_window():
    limiter = RateLimiter(requests=2, window=60)
    assert limiter.is_allowed("ip:1") == (True, 1)
    assert limiter.is_allowed("ip:1") == (True, 0)
    assert limiter.is_allowed("ip:1") == (False, 0)
    assert limiter.is_allowed("ip:2") == (True, 1)


def test_rejected_hits_are_not_recorded():
    limiter = RateLimiter(requests=1, window=60)
    limiter.is_allowed("ip:1")
    limiter.is_allowed("ip:1")
    limiter.is_allowed("ip:1")
    assert len(limiter.clients["ip:1"]) == 1


def test_expired_hits_leave_the_window():
    limiter = RateLimiter(requests=1, window=60)
    limiter.clients["ip:1"] = [0.0]
    assert limiter.is_allowed("ip:1") == (True, 0)


def test_cleanup_drops_idle_clients():
    limiter = RateLimiter(requests=5, window=60)
    limiter.clients["idle"] = [0.0]
    limiter.clients["busy"] = [1000.0]
    limiter._cleanup(1030.0)
    assert list(limiter.clients) == ["busy"]


def test_client_key_uses_token_hash_then_ip():
    first = client_key(request_with([("authorization", "Bearer token-one")]))
    second = client_key(request_with([("authorization", "Bearer token-two")]))
    assert first.startswith("token:")
    assert "token-one" not in first
    assert first != second
    assert client_key(request_with()) == "ip:10.0.0.5"
    assert client_key(request_with(client=None)) == "ip:unknown"
