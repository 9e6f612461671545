"""Model health checks: ping each council member before a run."""

import logging
from collections.abc import Sequence

from vault_council.dispatch import dispatch_all
from vault_council.errors import DispatchTimeout
from vault_council.providers.base import ModelGateway

logger = logging.getLogger(__name__)

_PING_PROMPT = "Reply with the word OK only."
_PING_MAX_TOKENS = 16
_TIMEOUT_SEC = 15.0


async def run_health_checks(
    gateway: ModelGateway,
    models: Sequence[str],
    timeout_sec: float | None = None,
) -> dict[str, tuple[bool, str]]:
    """Ping all models in parallel.

    Returns:
        Dict mapping model -> (ok, error_message).
        error_message is "" when ok is True. A round that times out marks
        every model as failed.
    """
    if not models:
        return {}

    timeout = timeout_sec if timeout_sec is not None else _TIMEOUT_SEC
    try:
        results = await dispatch_all(
            gateway,
            models,
            _PING_PROMPT,
            temperature=0.0,
            max_tokens=_PING_MAX_TOKENS,
            timeout_sec=timeout,
        )
    except DispatchTimeout as exc:
        logger.warning("Health check timed out: %s", exc)
        return {model: (False, str(exc)) for model in models}

    return {model: (outcome.ok, outcome.error or "") for model, outcome in results.items()}
