"""Shared pytest fixtures."""

import asyncio
from pathlib import Path

import pytest

from config.config_loader import AppConfig, CouncilDefaults, OpenRouterConfig, SaveConfig
from vault_council.errors import TransportFailure
from vault_council.models import Opinion, Review
from vault_council.providers.base import ModelGateway

SAMPLE_MODELS = [
    "openai/gpt-5.2",
    "anthropic/claude-4.5-sonnet-20250929",
    "google/gemini-3-pro-preview-20251117",
]


class MockGateway(ModelGateway):
    """Test double ModelGateway.

    ``responses`` maps model -> text, or an Exception instance to raise.
    ``delays`` maps model -> seconds to sleep before answering.
    """

    def __init__(
        self,
        responses: dict[str, str | Exception] | None = None,
        delays: dict[str, float] | None = None,
        default: str = "Mock response",
    ) -> None:
        self.responses = responses or {}
        self.delays = delays or {}
        self.default = default
        self.calls: list[dict] = []
        self.completed: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def call(
        self,
        model: str,
        user_message: str,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 4000,
    ) -> str:
        self.calls.append(
            {
                "model": model,
                "user_message": user_message,
                "system_prompt": system_prompt,
                "temperature": temperature,
                "max_tokens": max_tokens,
            }
        )
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(model, 0))
            response = self.responses.get(model, self.default)
            if isinstance(response, Exception):
                raise response
            self.completed.append(model)
            return response
        finally:
            self.in_flight -= 1

    def calls_for(self, model: str) -> list[dict]:
        return [c for c in self.calls if c["model"] == model]


def failing(model: str, cause: str) -> TransportFailure:
    return TransportFailure(model, cause)


@pytest.fixture
def sample_models() -> list[str]:
    return list(SAMPLE_MODELS)


@pytest.fixture
def mock_gateway() -> MockGateway:
    return MockGateway()


@pytest.fixture
def sample_opinions() -> list[Opinion]:
    return [
        Opinion(model="openai/gpt-5.2", content="Use YAML for human-edited config."),
        Opinion(model="anthropic/claude-4.5-sonnet-20250929", content="JSON is simpler to validate."),
    ]


@pytest.fixture
def sample_reviews() -> list[Review]:
    return [
        Review(reviewer="openai/gpt-5.2", content="The JSON answer ignores comments."),
        Review(reviewer="x-ai/grok-4.1-fast", content="Both are reasonable."),
    ]


@pytest.fixture
def sample_app_config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        openrouter=OpenRouterConfig(timeout_sec=30),
        council=CouncilDefaults(
            selected_models=list(SAMPLE_MODELS),
            chairman_model="anthropic/claude-4.5-sonnet-20250929",
        ),
        save=SaveConfig(
            save_location="custom",
            custom_save_folder=Path("AI Council"),
            vault_dir=tmp_path,
        ),
        api_key_present=True,
    )
