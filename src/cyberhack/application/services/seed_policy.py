from __future__ import annotations

import hashlib
import json
import random
from typing import Any, Mapping


def _canonical(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {str(key): _canonical(item) for key, item in sorted(value.items(), key=lambda pair: str(pair[0]))}
    if isinstance(value, (list, tuple)):
        return [_canonical(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted((_canonical(item) for item in value), key=lambda item: json.dumps(item, sort_keys=True, default=str))
    return value


def derive_seed(namespace: str, context: Mapping[str, Any]) -> int:
    """Stable 32-bit seed for ``namespace`` and ``context``, independent of call order."""

    blob = json.dumps(
        {"namespace": str(namespace), "context": _canonical(context)},
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )
    return int(hashlib.sha256(blob.encode("utf-8")).hexdigest(), 16) % (2**32)


def seeded_random(namespace: str, context: Mapping[str, Any]) -> random.Random:
    return random.Random(derive_seed(namespace, context))
