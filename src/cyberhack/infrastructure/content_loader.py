from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping

import httpx

from cyberhack.application.services.dialogue_content import build_dialogue_library, validate_dialogue_content
from cyberhack.application.services.ending_service import endings_from_payload, validate_endings
from cyberhack.domain.models.dialogue import DialogueTree
from cyberhack.domain.models.ending import Ending
from cyberhack.infrastructure.resilient_http import CircuitOpenError, get_json_with_retry


_logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
DIALOGUE_FILE = DATA_DIR / "dialogue_trees.json"
ENDINGS_FILE = DATA_DIR / "endings.json"
STORY_NETWORKS_FILE = DATA_DIR / "story_networks.json"

_JSON_CACHE: Dict[str, Any] = {}


def read_json(path: str | Path) -> Any:
    source = Path(path)
    cache_key = str(source.resolve())
    if cache_key not in _JSON_CACHE:
        with source.open("r", encoding="utf-8") as handle:
            _JSON_CACHE[cache_key] = json.load(handle)
    return _JSON_CACHE[cache_key]


def clear_cache() -> None:
    _JSON_CACHE.clear()


def fetch_content_pack(url: str) -> Mapping[str, Any]:
    timeout = float(os.getenv("CYBERHACK_CONTENT_TIMEOUT_S", "3"))
    retries = int(os.getenv("CYBERHACK_CONTENT_RETRIES", "1"))
    backoff = float(os.getenv("CYBERHACK_CONTENT_BACKOFF_S", "0.2"))
    with httpx.Client(timeout=timeout, follow_redirects=True) as client:
        payload = get_json_with_retry(client, url, retries=retries, backoff_seconds=backoff)
    if not isinstance(payload, dict):
        raise ValueError("content pack must be a JSON object")
    return payload


def load_dialogue_payload(path: str | Path | None = None, *, pack_url: str | None = None) -> Mapping[str, Any]:
    """Remote pack first when configured, then the local file. Invalid content is never used."""

    if pack_url:
        try:
            remote = fetch_content_pack(pack_url)
            errors = validate_dialogue_content(remote)
            if not errors:
                return remote
            _logger.warning("Remote dialogue pack rejected with %d errors; first: %s", len(errors), errors[0])
        except (httpx.HTTPError, CircuitOpenError, ValueError) as exc:
            _logger.warning("Remote dialogue pack unavailable (%s); using bundled content", exc)

    payload = read_json(path or DIALOGUE_FILE)
    errors = validate_dialogue_content(payload)
    if errors:
        raise ValueError(f"dialogue content invalid: {errors[0]} (+{len(errors) - 1} more)")
    return payload


def load_dialogue_library(path: str | Path | None = None, *, pack_url: str | None = None) -> Dict[str, DialogueTree]:
    return build_dialogue_library(load_dialogue_payload(path, pack_url=pack_url))


def load_endings(path: str | Path | None = None) -> List[Ending]:
    payload = read_json(path or ENDINGS_FILE)
    errors = validate_endings(payload)
    if errors:
        raise ValueError(f"endings content invalid: {errors[0]}")
    return endings_from_payload(payload)


def load_story_networks(path: str | Path | None = None) -> Dict[str, Mapping[str, Any]]:
    payload = read_json(path or STORY_NETWORKS_FILE)
    return {str(key): value for key, value in dict(payload.get("networks", {})).items()}
