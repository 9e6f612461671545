"""Council orchestration: opinions, peer reviews, chairman synthesis."""

import logging
import time
from collections.abc import Callable, Sequence

from vault_council.dispatch import dispatch_all
from vault_council.errors import ConfigurationFailure
from vault_council.models import (
    RESPONSE_STYLES,
    CouncilConfig,
    CouncilRun,
    DispatchResult,
    Opinion,
    Review,
    SynthesisResult,
)
from vault_council.prompts import (
    opinion_system_prompt,
    review_system_prompt,
    review_user_message,
    synthesis_system_prompt,
    synthesis_user_message,
)
from vault_council.providers.base import ModelGateway

logger = logging.getLogger(__name__)


def _outcome_contents(models: Sequence[str], results: DispatchResult) -> list[tuple[str, str]]:
    """Re-sequence a dispatch result into caller order as (model, content)."""
    ordered: list[tuple[str, str]] = []
    for model in models:
        outcome = results[model]
        content = outcome.text if outcome.ok else f"Error: {outcome.error}"
        ordered.append((model, content))
    return ordered


def _require_members(models: Sequence[str], role: str) -> None:
    if not models:
        raise ConfigurationFailure(f"No {role} configured: an empty council cannot deliberate")
    duplicates = sorted({m for m in models if list(models).count(m) > 1})
    if duplicates:
        raise ConfigurationFailure(f"Duplicate {role}: {', '.join(duplicates)}")


def validate_council(config: CouncilConfig) -> None:
    """Check every precondition of a full run without touching the network.

    Raises:
        ConfigurationFailure: Empty or duplicate members or reviewers, a
            missing chairman while synthesis is on, an unknown response
            style, or out-of-range sampling and concurrency settings.
    """
    _require_members(config.models, "council members")
    _require_members(config.review_panel, "reviewers")
    if config.synthesize and not config.chairman_model:
        raise ConfigurationFailure("Synthesis requested but no chairman model is configured")
    if config.response_style not in RESPONSE_STYLES:
        raise ConfigurationFailure(
            f"Unknown response style {config.response_style!r}; expected one of {', '.join(RESPONSE_STYLES)}"
        )
    if not 0.0 <= config.temperature <= 1.0:
        raise ConfigurationFailure(f"Temperature must be within [0, 1], got {config.temperature}")
    if config.max_tokens <= 0:
        raise ConfigurationFailure(f"max_tokens must be positive, got {config.max_tokens}")
    if config.max_concurrency is not None and config.max_concurrency < 1:
        raise ConfigurationFailure(f"max_concurrency must be at least 1, got {config.max_concurrency}")


class CouncilOrchestrator:
    """Runs the three council stages on top of the parallel dispatcher.

    Each stage method is pure given its inputs, so a caller can re-run a
    single stage (e.g. synthesis only) without repeating the others.
    """

    def __init__(
        self,
        gateway: ModelGateway,
        *,
        temperature: float = 0.7,
        max_tokens: int = 4000,
        max_concurrency: int | None = None,
        timeout_sec: float | None = None,
    ) -> None:
        self._gateway = gateway
        self._temperature = temperature
        self._max_tokens = max_tokens
        self._max_concurrency = max_concurrency
        self._timeout_sec = timeout_sec

    @classmethod
    def from_config(cls, gateway: ModelGateway, config: CouncilConfig) -> "CouncilOrchestrator":
        return cls(
            gateway,
            temperature=config.temperature,
            max_tokens=config.max_tokens,
            max_concurrency=config.max_concurrency,
            timeout_sec=config.timeout_sec,
        )

    async def _dispatch(self, models: Sequence[str], user_message: str, system_prompt: str) -> DispatchResult:
        return await dispatch_all(
            self._gateway,
            models,
            user_message,
            system_prompt,
            self._temperature,
            self._max_tokens,
            max_concurrency=self._max_concurrency,
            timeout_sec=self._timeout_sec,
        )

    async def get_opinions(
        self,
        models: Sequence[str],
        query: str,
        language: str,
        response_style: str = "concise",
    ) -> list[Opinion]:
        """Stage 1: collect one opinion per council member, in ``models`` order.

        A member's failure becomes an ``"Error: ..."`` opinion instead of
        aborting the stage.
        """
        _require_members(models, "council members")
        system_prompt = opinion_system_prompt(language, response_style)

        logger.info("Collecting opinions from %d members", len(models))
        results = await self._dispatch(models, query, system_prompt)
        opinions = [Opinion(model=m, content=c) for m, c in _outcome_contents(models, results)]

        succeeded = sum(1 for o in results.values() if o.ok)
        logger.info("Opinions complete: %d/%d members succeeded", succeeded, len(models))
        return opinions

    async def get_reviews(
        self,
        models: Sequence[str],
        query: str,
        opinions: Sequence[Opinion],
        language: str,
    ) -> list[Review]:
        """Stage 2: every reviewer critiques the full opinion set.

        Reviewers may include the models that produced the opinions.
        """
        _require_members(models, "reviewers")
        user_message = review_user_message(query, opinions)
        logger.debug("Review prompt:\n%s", user_message)

        logger.info("Collecting reviews from %d reviewers", len(models))
        results = await self._dispatch(models, user_message, review_system_prompt(language))
        reviews = [Review(reviewer=m, content=c) for m, c in _outcome_contents(models, results)]

        succeeded = sum(1 for o in results.values() if o.ok)
        logger.info("Reviews complete: %d/%d reviewers succeeded", succeeded, len(models))
        return reviews

    async def get_synthesis(
        self,
        chairman_model: str | None,
        query: str,
        opinions: Sequence[Opinion],
        reviews: Sequence[Review],
        language: str,
    ) -> str:
        """Stage 3: a single chairman call over opinions and reviews.

        Raises:
            ConfigurationFailure: If no chairman model is given.
            ModelCallFailure: If the chairman's call fails. Never folded
                into placeholder text.
        """
        if not chairman_model:
            raise ConfigurationFailure("Synthesis requested but no chairman model is configured")

        logger.info("Running synthesis via %s", chairman_model)
        return await self._gateway.call(
            chairman_model,
            synthesis_user_message(query, opinions, reviews),
            synthesis_system_prompt(language),
            self._temperature,
            self._max_tokens,
        )

    async def run_council(
        self,
        config: CouncilConfig,
        query: str,
        on_stage: Callable[[str], None] | None = None,
    ) -> CouncilRun:
        """Run opinions, reviews and (if enabled) synthesis in strict order.

        ``on_stage`` is called with "opinions", "reviews" or "synthesis"
        as each stage starts.
        """
        validate_council(config)
        notify = on_stage or (lambda stage: None)

        start = time.monotonic()
        notify("opinions")
        opinions = await self.get_opinions(config.models, query, config.language, config.response_style)
        notify("reviews")
        reviews = await self.get_reviews(config.review_panel, query, opinions, config.language)

        synthesis: SynthesisResult | None = None
        if config.synthesize:
            notify("synthesis")
            text = await self.get_synthesis(config.chairman_model, query, opinions, reviews, config.language)
            synthesis = SynthesisResult(model=config.chairman_model, content=text)

        return CouncilRun(
            query=query,
            opinions=tuple(opinions),
            reviews=tuple(reviews),
            synthesis=synthesis,
            duration_sec=time.monotonic() - start,
            language=config.language,
            members=tuple(config.models),
        )
