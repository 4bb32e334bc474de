"""Deterministic cache key derivation."""

import hashlib
import json
from typing import Any, Mapping, Optional


def json_dumps_sorted(obj: Any) -> str:
    """JSON serialization with sorted keys for cache consistency."""
    return json.dumps(
        obj, ensure_ascii=False, separators=(",", ":"), sort_keys=True, default=str
    )


def compute_sha256_hex_from_str(text: str) -> str:
    """Compute SHA256 hash of string and return hexadecimal digest."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def _key_order(key: Any) -> tuple:
    return type(key).__name__, repr(key)


def canonicalize_options(obj: Any) -> Any:
    """Rewrite ``obj`` into a JSON-safe form that keeps every mapping key distinct.

    Mappings become ``{"m": [[key type, key repr, value], ...]}`` ordered by
    ``(key type, key repr)``, so ``{1: "a"}`` and ``{"1": "a"}`` differ and
    keys of mixed types never need to be compared with each other.
    """
    if isinstance(obj, Mapping):
        items = sorted(obj.items(), key=lambda kv: _key_order(kv[0]))
        return {
            "m": [
                [*_key_order(k), canonicalize_options(v)] for k, v in items
            ]
        }
    if isinstance(obj, (list, tuple)):
        return [canonicalize_options(v) for v in obj]
    return obj


def generate_cache_key(
    prompt: str, model: str, options: Optional[Mapping[Any, Any]] = None
) -> str:
    """Derive the cache key for a (prompt, model, options) triple.

    The three components are encoded as one JSON array, so a prompt cannot
    collide with another triple by embedding a separator. ``None`` and an
    empty mapping are the same options. The result depends only on the
    arguments and is stable across processes.
    """
    payload = [model, prompt, canonicalize_options(options or {})]
    return compute_sha256_hex_from_str(
        json.dumps(payload, ensure_ascii=False, separators=(",", ":"), default=str)
    )
