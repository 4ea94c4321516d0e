import os
import sys
from pathlib import Path
import unittest
from unittest import mock

import httpx

sys.path.insert(0, str(Path(__file__).resolve().parents[2] / "src"))

from cyberhack.infrastructure import content_loader
from cyberhack.infrastructure.resilient_http import CircuitOpenError, get_json_with_retry, reset_circuit_breakers


def _client(handler) -> httpx.Client:
    return httpx.Client(base_url="https://packs.example.invalid", transport=httpx.MockTransport(handler))


class ResilientHttpTests(unittest.TestCase):
    def tearDown(self) -> None:
        reset_circuit_breakers()

    def test_returns_json_payload_on_success(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request.url.path)
            return httpx.Response(200, json={"characters": {}})

        with _client(handler) as client:
            self.assertEqual({"characters": {}}, get_json_with_retry(client, "/pack.json"))
        self.assertEqual(["/pack.json"], calls)

    def test_retries_transient_status_then_succeeds(self) -> None:
        statuses = [503, 200]

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(statuses.pop(0), json={"ok": True})

        with _client(handler) as client:
            self.assertEqual({"ok": True}, get_json_with_retry(client, "/pack.json", retries=1, backoff_seconds=0))

    def test_client_errors_are_not_retried(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(1)
            return httpx.Response(404)

        with _client(handler) as client:
            with self.assertRaises(httpx.HTTPStatusError):
                get_json_with_retry(client, "/missing.json", retries=3, backoff_seconds=0)
        self.assertEqual(1, len(calls))

    def test_circuit_opens_after_threshold(self) -> None:
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(1)
            raise httpx.ConnectTimeout("timeout", request=request)

        env = {
            "CYBERHACK_HTTP_CIRCUIT_BREAKER_ENABLED": "1",
            "CYBERHACK_HTTP_CIRCUIT_FAILURE_THRESHOLD": "2",
            "CYBERHACK_HTTP_CIRCUIT_RESET_SECONDS": "600",
        }
        with mock.patch.dict(os.environ, env, clear=False), _client(handler) as client:
            for _ in range(2):
                with self.assertRaises(httpx.TimeoutException):
                    get_json_with_retry(client, "/pack.json")
            with self.assertRaises(CircuitOpenError):
                get_json_with_retry(client, "/pack.json")
        self.assertEqual(2, len(calls))


class ContentPackFallbackTests(unittest.TestCase):
    def setUp(self) -> None:
        content_loader.clear_cache()

    def test_unreachable_pack_falls_back_to_bundled_dialogue(self) -> None:
        with mock.patch.object(content_loader, "fetch_content_pack", side_effect=httpx.ConnectError("down")):
            payload = content_loader.load_dialogue_payload(pack_url="https://packs.example.invalid/pack.json")
        self.assertIn("shadow", payload["characters"])

    def test_invalid_pack_is_ignored(self) -> None:
        with mock.patch.object(content_loader, "fetch_content_pack", return_value={"characters": {"x": {}}}):
            payload = content_loader.load_dialogue_payload(pack_url="https://packs.example.invalid/pack.json")
        self.assertIn("ghost", payload["characters"])

    def test_valid_pack_wins(self) -> None:
        pack = {"characters": {"fixer": {"name": "Fixer", "root": "a", "nodes": {"a": {"text": "Yo."}}}}}
        with mock.patch.object(content_loader, "fetch_content_pack", return_value=pack):
            library = content_loader.load_dialogue_library(pack_url="https://packs.example.invalid/pack.json")
        self.assertEqual(["fixer"], list(library))


if __name__ == "__main__":
    unittest.main()
