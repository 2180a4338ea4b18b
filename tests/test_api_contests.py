import unittest
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from algoradar.api import create_app
from algoradar.app.wiring import build_server_components
from algoradar.config import RateLimitSettings
from algoradar.errors import UpstreamError, UpstreamTimeoutError
from tests.fixture_helpers import NOW_S, make_settings, sample_contests

CONTESTS_URL = "/api/contests"


class FakeClock:
    def __init__(self, now: float = NOW_S) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class ApiContestsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.contests = sample_contests()
        self.clock = FakeClock()
        self.refresh = MagicMock(return_value=self.contests)

    def _client(self, settings=None) -> TestClient:
        components = build_server_components(
            settings or make_settings(), refresh=self.refresh, clock=self.clock
        )
        self.components = components
        return TestClient(create_app(components))

    def test_fresh_then_cached_response(self) -> None:
        client = self._client()

        first = client.get(CONTESTS_URL)
        second = client.get(CONTESTS_URL)

        self.assertEqual(first.status_code, 200)
        body = first.json()
        self.assertTrue(body["fresh"])
        self.assertFalse(body["cached"])
        self.assertEqual(body["count"], 2)
        self.assertIn("responseTime", body)
        self.assertIsNotNone(body["lastUpdated"])
        self.assertEqual(
            [contest["name"] for contest in body["contests"]],
            ["Weekly Contest", "Educational Round"],
        )
        self.assertEqual(first.headers["access-control-allow-origin"], "*")

        cached = second.json()
        self.assertTrue(cached["cached"])
        self.assertTrue(cached["fresh"])
        self.assertEqual(cached["cacheAge"], 0)
        self.assertEqual(cached["contests"], body["contests"])
        self.refresh.assert_called_once()

    def test_stale_response_after_refresh_failure(self) -> None:
        client = self._client()
        client.get(CONTESTS_URL)
        self.refresh.side_effect = UpstreamTimeoutError("Request timeout")
        self.clock.now += 2 * 60 * 60

        response = client.get(CONTESTS_URL)

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["stale"])
        self.assertTrue(body["cached"])
        self.assertEqual(body["error"], "Failed to fetch fresh data")
        self.assertEqual(body["cacheAge"], 7200)
        self.assertEqual(len(body["contests"]), 2)

    def test_unavailable_without_cache(self) -> None:
        self.refresh.side_effect = UpstreamError("CLIST API error: 500")
        client = self._client()

        response = client.get(CONTESTS_URL)

        self.assertEqual(response.status_code, 503)
        self.assertEqual(
            response.json(),
            {"error": "Service unavailable", "message": "Please try again later", "contests": []},
        )
        self.assertEqual(response.headers["access-control-allow-origin"], "*")

    def test_rate_limit_returns_retry_after(self) -> None:
        settings = make_settings(
            rate_limit=RateLimitSettings(
                window_s=60.0, max_requests=2, retry_after_s=60, sweep_interval_s=60.0
            )
        )
        client = self._client(settings)
        headers = {"X-Forwarded-For": "203.0.113.7, 10.0.0.1"}

        client.get(CONTESTS_URL, headers=headers)
        client.get(CONTESTS_URL, headers=headers)
        limited = client.get(CONTESTS_URL, headers=headers)
        other = client.get(CONTESTS_URL, headers={"X-Forwarded-For": "198.51.100.2"})

        self.assertEqual(limited.status_code, 429)
        self.assertEqual(limited.json(), {"error": "Too many requests", "retryAfter": 60})
        self.assertEqual(limited.headers["retry-after"], "60")
        self.assertEqual(other.status_code, 200)

    def test_real_ip_header_identifies_client(self) -> None:
        settings = make_settings(
            rate_limit=RateLimitSettings(
                window_s=60.0, max_requests=1, retry_after_s=30, sweep_interval_s=60.0
            )
        )
        client = self._client(settings)

        client.get(CONTESTS_URL, headers={"X-Real-IP": "192.0.2.1"})
        limited = client.get(CONTESTS_URL, headers={"X-Real-IP": "192.0.2.1"})
        fallback = client.get(CONTESTS_URL)

        self.assertEqual(limited.status_code, 429)
        self.assertEqual(limited.headers["retry-after"], "30")
        self.assertEqual(fallback.status_code, 200)

    def test_preflight_is_empty_with_cors_headers(self) -> None:
        client = self._client()

        response = client.options(CONTESTS_URL)

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.content, b"")
        self.assertEqual(response.headers["access-control-allow-methods"], "GET, OPTIONS")
        self.assertEqual(response.headers["access-control-allow-headers"], "Content-Type")
        self.refresh.assert_not_called()

    def test_other_methods_are_rejected(self) -> None:
        client = self._client()

        for method in ("POST", "PUT", "PATCH", "DELETE", "TRACE"):
            response = client.request(method, CONTESTS_URL)
            self.assertEqual(response.status_code, 405)
            self.assertEqual(response.json(), {"error": "Method not allowed"})
            self.assertEqual(response.headers["access-control-allow-origin"], "*")

        head = client.request("HEAD", CONTESTS_URL)
        self.assertEqual(head.status_code, 405)
        self.assertEqual(head.content, b"")
        self.assertEqual(head.headers["access-control-allow-origin"], "*")
        self.refresh.assert_not_called()

    def test_health(self) -> None:
        client = self._client()

        response = client.get("/api/health")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")
        self.assertEqual(response.json()["service"], "algoradar")

    def test_lifespan_runs_sweeper(self) -> None:
        app = create_app(
            build_server_components(make_settings(), refresh=self.refresh, clock=self.clock)
        )
        sweeper = app.state.components.sweeper

        with TestClient(app):
            self.assertTrue(sweeper.running)

        self.assertFalse(sweeper.running)


if __name__ == "__main__":
    unittest.main()
