"""Frozen dataclasses for the council pipeline. Validation only, no I/O."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from vault_council.errors import ConfigurationFailure

ROLES = ("system", "user", "assistant")
RESPONSE_STYLES = ("concise", "balanced", "detailed")


@dataclass(frozen=True)
class ChatTurn:
    role: str              # "system", "user" or "assistant"
    content: str

    def __post_init__(self) -> None:
        if self.role not in ROLES:
            raise ValueError(f"Unknown chat role: {self.role!r}")

    def as_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class DispatchRequest:
    models: tuple[str, ...]
    user_message: str
    system_prompt: str | None = None
    temperature: float = 0.7
    max_tokens: int = 4000

    @classmethod
    def create(
        cls,
        models: Sequence[str],
        user_message: str,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 4000,
    ) -> "DispatchRequest":
        """Validate inputs and build a request.

        Raises:
            ConfigurationFailure: empty or duplicate model set, temperature
                outside [0, 1], or non-positive max_tokens.
        """
        model_tuple = tuple(models)
        if not model_tuple:
            raise ConfigurationFailure("Council is empty: at least one model is required")
        duplicates = sorted({m for m in model_tuple if model_tuple.count(m) > 1})
        if duplicates:
            raise ConfigurationFailure(f"Duplicate models in dispatch round: {', '.join(duplicates)}")
        if not 0.0 <= temperature <= 1.0:
            raise ConfigurationFailure(f"Temperature must be within [0, 1], got {temperature}")
        if max_tokens <= 0:
            raise ConfigurationFailure(f"max_tokens must be positive, got {max_tokens}")
        return cls(
            models=model_tuple,
            user_message=user_message,
            system_prompt=system_prompt,
            temperature=temperature,
            max_tokens=max_tokens,
        )


@dataclass(frozen=True)
class DispatchOutcome:
    text: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if (self.text is None) == (self.error is None):
            raise ValueError("Outcome must carry exactly one of text or error")

    @classmethod
    def success(cls, text: str) -> "DispatchOutcome":
        if not text:
            raise ValueError("Successful outcome requires non-empty text")
        return cls(text=text)

    @classmethod
    def failure(cls, error: str) -> "DispatchOutcome":
        return cls(error=error or "Unknown error")

    @property
    def ok(self) -> bool:
        return self.error is None


# Keys equal the requested model set, inserted in request order.
DispatchResult = dict[str, DispatchOutcome]


@dataclass(frozen=True)
class Opinion:
    model: str
    content: str           # answer text, or "Error: ..." placeholder


@dataclass(frozen=True)
class Review:
    reviewer: str
    content: str


@dataclass(frozen=True)
class SynthesisResult:
    model: str
    content: str


@dataclass(frozen=True)
class CouncilConfig:
    """Immutable per-invocation settings handed to the orchestrator."""

    models: tuple[str, ...]
    language: str = "English"
    response_style: str = "concise"
    reviewers: tuple[str, ...] | None = None   # None reuses models
    chairman_model: str | None = None
    synthesize: bool = False
    temperature: float = 0.7
    max_tokens: int = 4000
    max_concurrency: int | None = None
    timeout_sec: float | None = None

    @property
    def review_panel(self) -> tuple[str, ...]:
        return self.reviewers if self.reviewers is not None else self.models


@dataclass(frozen=True)
class CouncilRun:
    query: str
    opinions: tuple[Opinion, ...]
    reviews: tuple[Review, ...]
    synthesis: SynthesisResult | None
    duration_sec: float
    language: str = "English"
    members: tuple[str, ...] = field(default_factory=tuple)
