import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))


def _is_e2e_test(request: pytest.FixtureRequest) -> bool:
    return "tests/e2e/" in str(request.node.fspath).replace("\\", "/")


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for key in list(os.environ):
        if key.startswith("CYBERHACK_"):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture(autouse=True)
def disable_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("time.sleep", lambda *_args, **_kwargs: None)


@pytest.fixture(autouse=True)
def e2e_fast_env(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> None:
    if not _is_e2e_test(request):
        return

    monkeypatch.setenv("CYBERHACK_SAVES_IN_MEMORY", "1")
    monkeypatch.setenv("CYBERHACK_CONTENT_RETRIES", "0")
    monkeypatch.setenv("CYBERHACK_CONTENT_BACKOFF_S", "0")
    monkeypatch.setenv("CYBERHACK_CONTENT_TIMEOUT_S", "0.05")


@pytest.fixture(autouse=True)
def e2e_block_external_http(request: pytest.FixtureRequest, monkeypatch: pytest.MonkeyPatch) -> None:
    if not _is_e2e_test(request):
        return

    import httpx

    def _deny_external_http(self, method, url, *args, **kwargs):
        raise RuntimeError(f"External HTTP disabled during e2e tests: {url}")

    monkeypatch.setattr(httpx.Client, "request", _deny_external_http)
