from __future__ import annotations

import os
import time
from dataclasses import dataclass
from typing import Any

import httpx


RETRYABLE_STATUS_CODES = frozenset({408, 425, 429, 500, 502, 503, 504})


class CircuitOpenError(RuntimeError):
    pass


def _env_flag(name: str, default: str) -> bool:
    return str(os.getenv(name, default)).strip().lower() in {"1", "true", "yes"}


@dataclass
class _Breaker:
    failures: int = 0
    open_until: float = 0.0


_BREAKERS: dict[str, _Breaker] = {}


def _breaker_enabled() -> bool:
    return _env_flag("CYBERHACK_HTTP_CIRCUIT_BREAKER_ENABLED", "1")


def _breaker_key(client: httpx.Client, url: str) -> str:
    base = str(getattr(client, "base_url", "") or "")
    if base:
        return base
    parsed = httpx.URL(url)
    return f"{parsed.scheme}://{parsed.host}"


def _guard(key: str) -> None:
    if not _breaker_enabled():
        return
    breaker = _BREAKERS.get(key)
    if breaker is None:
        return
    now = time.time()
    if breaker.open_until > now:
        raise CircuitOpenError(f"content source {key} is cooling down until {int(breaker.open_until)}")
    if breaker.open_until:
        _BREAKERS[key] = _Breaker()


def _note_failure(key: str) -> None:
    if not _breaker_enabled():
        return
    breaker = _BREAKERS.setdefault(key, _Breaker())
    breaker.failures += 1
    threshold = max(1, int(os.getenv("CYBERHACK_HTTP_CIRCUIT_FAILURE_THRESHOLD", "3")))
    if breaker.failures >= threshold:
        cooldown = max(0.0, float(os.getenv("CYBERHACK_HTTP_CIRCUIT_RESET_SECONDS", "120")))
        breaker.open_until = time.time() + cooldown


def reset_circuit_breakers() -> None:
    _BREAKERS.clear()


def _retryable(exc: Exception) -> bool:
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(exc, (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError))


def get_json_with_retry(
    client: httpx.Client,
    url: str,
    *,
    retries: int = 0,
    backoff_seconds: float = 0.2,
) -> Any:
    """GET ``url`` and decode JSON, retrying transient failures with exponential backoff."""

    key = _breaker_key(client, url)
    attempts = max(0, int(retries)) + 1
    for attempt in range(attempts):
        try:
            _guard(key)
            response = client.get(url)
            if response.status_code in RETRYABLE_STATUS_CODES:
                raise httpx.HTTPStatusError(
                    f"retryable status {response.status_code}",
                    request=response.request,
                    response=response,
                )
            response.raise_for_status()
            payload = response.json()
            _BREAKERS.pop(key, None)
            return payload
        except Exception as exc:
            transient = _retryable(exc)
            if transient:
                _note_failure(key)
            if not transient or attempt >= attempts - 1:
                raise
            delay = max(0.0, float(backoff_seconds)) * (2**attempt)
            if delay > 0:
                time.sleep(delay)
    raise RuntimeError("unreachable")
