"""Parallel dispatch: one gateway call per model, wait for all."""

import asyncio
import contextlib
import logging
from collections.abc import Sequence

from vault_council.errors import ConfigurationFailure, DispatchTimeout
from vault_council.models import DispatchOutcome, DispatchRequest, DispatchResult
from vault_council.providers.base import ModelGateway

logger = logging.getLogger(__name__)


async def _call_model(
    gateway: ModelGateway,
    model: str,
    request: DispatchRequest,
    semaphore: asyncio.Semaphore | None,
) -> DispatchOutcome:
    """Call one model and fold any failure into its outcome.

    Never raises for gateway errors. Cancellation still propagates.
    """
    try:
        async with semaphore if semaphore is not None else contextlib.nullcontext():
            text = await gateway.call(
                model,
                request.user_message,
                request.system_prompt,
                request.temperature,
                request.max_tokens,
            )
    except Exception as exc:
        logger.warning("Model %s failed: %s", model, exc)
        return DispatchOutcome.failure(str(exc) or type(exc).__name__)

    if not text:
        logger.warning("Model %s returned empty text", model)
        return DispatchOutcome.failure("No response from model")
    return DispatchOutcome.success(text)


async def dispatch_request(
    gateway: ModelGateway,
    request: DispatchRequest,
    *,
    max_concurrency: int | None = None,
    timeout_sec: float | None = None,
) -> DispatchResult:
    """Run one dispatch round for an already validated request.

    Raises:
        ConfigurationFailure: If ``max_concurrency`` is below 1.
        DispatchTimeout: If the whole round exceeds ``timeout_sec``. All
            in-flight calls are cancelled; no partial result is returned.
    """
    if max_concurrency is not None and max_concurrency < 1:
        raise ConfigurationFailure(f"max_concurrency must be at least 1, got {max_concurrency}")
    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency is not None else None

    logger.debug("Dispatching to %d models: %s", len(request.models), ", ".join(request.models))
    tasks = [_call_model(gateway, model, request, semaphore) for model in request.models]
    try:
        outcomes = await asyncio.wait_for(asyncio.gather(*tasks), timeout=timeout_sec)
    except TimeoutError as exc:
        raise DispatchTimeout(timeout_sec) from exc

    # gather preserves argument order, so each model maps to its own outcome.
    result: DispatchResult = dict(zip(request.models, outcomes))
    succeeded = sum(1 for o in outcomes if o.ok)
    logger.info("Dispatch round complete: %d/%d succeeded", succeeded, len(request.models))
    return result


async def dispatch_all(
    gateway: ModelGateway,
    models: Sequence[str],
    user_message: str,
    system_prompt: str | None = None,
    temperature: float = 0.7,
    max_tokens: int = 4000,
    *,
    max_concurrency: int | None = None,
    timeout_sec: float | None = None,
) -> DispatchResult:
    """Call every model concurrently and return a complete outcome map.

    Args:
        gateway: The ModelGateway used for each call.
        models: Non-empty sequence of unique model identifiers.
        user_message: The user turn sent to every model.
        system_prompt: Optional system turn sent to every model.
        temperature: Sampling temperature in [0, 1].
        max_tokens: Completion token budget per call.
        max_concurrency: Optional cap on simultaneous in-flight calls.
        timeout_sec: Optional deadline for the whole round.

    Returns:
        Mapping whose keys are exactly ``models``. A failed call becomes an
        error outcome for that model only.

    Raises:
        ConfigurationFailure: Empty or duplicate model set; raised before
            any call is issued.
        DispatchTimeout: The round exceeded ``timeout_sec``.
    """
    request = DispatchRequest.create(
        models,
        user_message,
        system_prompt=system_prompt,
        temperature=temperature,
        max_tokens=max_tokens,
    )
    return await dispatch_request(
        gateway,
        request,
        max_concurrency=max_concurrency,
        timeout_sec=timeout_sec,
    )
