"""Claude completion — the pipeline's single LLM entry point."""

from .config import CLAUDE_MODEL, call_claude_cli, get_anthropic_client, get_claude_backend
from .log import get_logger
from .retry import with_retry


@with_retry(max_retries=2, base_delay=3.0)
def complete(prompt: str, max_tokens: int = 400) -> str:
    """Call Claude via API key or CLI (Claude Max) and return the text reply."""
    backend = get_claude_backend()

    if backend == "api":
        client = get_anthropic_client()
        msg = client.messages.create(
            model=CLAUDE_MODEL,
            max_tokens=max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        return msg.content[0].text.strip()

    get_logger().debug("Using Claude Max (CLI) for completion")
    return call_claude_cli(prompt)
