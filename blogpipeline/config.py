"""Key resolution, paths, constants, and Claude backend detection."""

import json
import os
import shutil
import subprocess
from pathlib import Path

# ─────────────────────────────────────────────────────
# Data home directory — cache, artifacts and logs live here
# ─────────────────────────────────────────────────────
SKILL_DIR = Path(os.environ.get("BLOG_PIPELINE_HOME", Path.home() / ".blog-pipeline"))
CACHE_DIR = SKILL_DIR / "cache"
ARTIFACTS_DIR = SKILL_DIR / "artifacts"
LOGS_DIR = SKILL_DIR / "logs"
CONFIG_FILE = SKILL_DIR / "config.json"

# ─────────────────────────────────────────────────────
# Round constants
# ─────────────────────────────────────────────────────
ARTIFACT_PATHS = {
    "trends": "runs/{run_id}/round0_trends",
    "state": "runs/{run_id}/state",
}

DEFAULT_REGION = "us"
DEFAULT_CACHE_TTL_HOURS = 24.0
CLAUDE_MODEL = "claude-sonnet-4-6"

RSS_SOURCES = [
    {"name": "rss:theverge", "url": "https://www.theverge.com/rss/index.xml"},
    {"name": "rss:techcrunch", "url": "https://techcrunch.com/feed/"},
    {"name": "rss:bbcworld", "url": "https://feeds.bbci.co.uk/news/world/rss.xml"},
    {"name": "rss:nytimes", "url": "https://rss.nytimes.com/services/xml/rss/nyt/HomePage.xml"},
]


# ─────────────────────────────────────────────────────
# Utilities
# ─────────────────────────────────────────────────────
def load_config() -> dict:
    """Load config.json, including the trend_sources section."""
    if CONFIG_FILE.exists():
        try:
            return json.loads(CONFIG_FILE.read_text())
        except Exception:
            pass
    return {}


# ─────────────────────────────────────────────────────
# Settings resolution — env → config.json
# ─────────────────────────────────────────────────────
def _get_key(name: str) -> str:
    """Resolve a setting: environment variable first, then config.json."""
    val = os.environ.get(name)
    if val:
        return val
    val = load_config().get(name)
    if val:
        return str(val)
    return ""


def get_serpapi_key() -> str:
    return _get_key("SERPAPI_KEY")


def get_anthropic_key() -> str:
    return _get_key("ANTHROPIC_API_KEY")


def get_region() -> str:
    return _get_key("REGION") or DEFAULT_REGION


def get_cache_ttl_hours() -> float:
    """TTL for cached provider responses. Must be a positive number."""
    raw = _get_key("CACHE_TTL_HOURS")
    if not raw:
        return DEFAULT_CACHE_TTL_HOURS
    try:
        ttl = float(raw)
    except ValueError:
        raise ValueError(f"CACHE_TTL_HOURS must be a positive number, got {raw!r}")
    if ttl <= 0:
        raise ValueError(f"CACHE_TTL_HOURS must be a positive number, got {raw!r}")
    return ttl


def use_round0_llm() -> bool:
    return _get_key("USE_R0_LLM").lower() == "true"


# ─────────────────────────────────────────────────────
# Claude access — API key or Claude Max CLI
# ─────────────────────────────────────────────────────
CLAUDE_CREDENTIALS = Path.home() / ".claude" / ".credentials.json"


def has_claude_cli() -> bool:
    return shutil.which("claude") is not None


def _has_claude_max_credentials() -> bool:
    if not CLAUDE_CREDENTIALS.exists():
        return False
    try:
        creds = json.loads(CLAUDE_CREDENTIALS.read_text())
        return bool(creds.get("claudeAiOauth", {}).get("accessToken"))
    except Exception:
        return False


def call_claude_cli(prompt: str, model: str = CLAUDE_MODEL) -> str:
    """Call Claude non-interactively via the `claude` CLI."""
    claude_path = shutil.which("claude")
    if not claude_path:
        raise RuntimeError("claude CLI not found. Install Claude Code or set ANTHROPIC_API_KEY.")

    # Strip CLAUDECODE so the CLI can run from inside a Claude Code session
    env = {k: v for k, v in os.environ.items() if k != "CLAUDECODE"}

    r = subprocess.run(
        [claude_path, "--print", "--model", model, "--max-turns", "1", "-p", prompt],
        capture_output=True,
        text=True,
        timeout=120,
        env=env,
    )
    if r.returncode != 0:
        raise RuntimeError(f"claude CLI failed: {r.stderr[:300]}")
    return r.stdout.strip()


def get_anthropic_client():
    """Anthropic client, or None when no API key is configured."""
    import anthropic

    api_key = get_anthropic_key()
    if api_key:
        return anthropic.Anthropic(api_key=api_key)
    return None


def get_claude_backend() -> str:
    """Return "api" or "cli"; raise RuntimeError if neither is usable."""
    if get_anthropic_key():
        return "api"
    if has_claude_cli() and _has_claude_max_credentials():
        return "cli"
    raise RuntimeError(
        "No Claude access found. Either:\n"
        "  1. Set ANTHROPIC_API_KEY in env or ~/.blog-pipeline/config.json\n"
        "  2. Log in to Claude Code (claude login) with a Claude Max subscription"
    )


def llm_available() -> bool:
    try:
        get_claude_backend()
    except RuntimeError:
        return False
    return True
