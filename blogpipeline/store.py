"""Local JSON persistence: TTL cache for provider responses + run artifacts."""

import hashlib
import json
import time
from pathlib import Path

from .config import ARTIFACTS_DIR, CACHE_DIR, get_cache_ttl_hours


def cache_key(namespace: str, raw: str) -> str:
    """Stable cache key, e.g. serpapi:<sha256>."""
    return f"{namespace}:{hashlib.sha256(raw.encode('utf-8')).hexdigest()}"


class LocalStore:
    """Filesystem-backed store.

    Cache entries live under <root>/cache as {payload, created_at, expires_at};
    expired entries read back as missing. Artifacts live under
    <root>/artifacts/<path>.json. Without a root, the configured CACHE_DIR
    and ARTIFACTS_DIR are used.
    """

    def __init__(self, root: Path = None):
        if root is None:
            self.cache_dir, self.artifacts_dir = CACHE_DIR, ARTIFACTS_DIR
        else:
            self.cache_dir = Path(root) / "cache"
            self.artifacts_dir = Path(root) / "artifacts"

    def _cache_path(self, key: str) -> Path:
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()
        return self.cache_dir / f"{digest}.json"

    def _artifact_path(self, path: str) -> Path:
        parts = [p for p in path.split("/") if p]
        if not parts or any(p in (".", "..") for p in parts):
            raise ValueError(f"Invalid artifact path: {path!r}")
        return self.artifacts_dir.joinpath(*parts[:-1], f"{parts[-1]}.json")

    # ── cache ──────────────────────────────────────────
    def get(self, key: str):
        """Return the cached payload, or None if missing/expired/unreadable."""
        path = self._cache_path(key)
        if not path.exists():
            return None
        try:
            entry = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return None
        if entry.get("expires_at", 0) < time.time():
            return None
        return entry.get("payload")

    def set(self, key: str, value, ttl_hours: float = None):
        hours = ttl_hours if ttl_hours is not None else get_cache_ttl_hours()
        now = time.time()
        entry = {
            "key": key,
            "payload": value,
            "created_at": now,
            "expires_at": now + hours * 3600,
        }
        path = self._cache_path(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(entry, ensure_ascii=False), encoding="utf-8")

    # ── artifacts ──────────────────────────────────────
    def write_artifact(self, path: str, payload: dict) -> Path:
        target = self._artifact_path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        return target

    def read_artifact(self, path: str):
        target = self._artifact_path(path)
        if not target.exists():
            return None
        return json.loads(target.read_text(encoding="utf-8"))
