"""Abstract base for model gateways."""

from abc import ABC, abstractmethod

from vault_council.models import ChatTurn


def build_messages(user_message: str, system_prompt: str | None = None) -> list[ChatTurn]:
    """Return an optional system turn followed by exactly one user turn."""
    turns: list[ChatTurn] = []
    if system_prompt:
        turns.append(ChatTurn(role="system", content=system_prompt))
    turns.append(ChatTurn(role="user", content=user_message))
    return turns


class ModelGateway(ABC):
    """Sends one prompt to one named model backend."""

    @abstractmethod
    async def call(
        self,
        model: str,
        user_message: str,
        system_prompt: str | None = None,
        temperature: float = 0.7,
        max_tokens: int = 4000,
    ) -> str:
        """Send a single chat request and return the first completion's text.

        Args:
            model: Backend model identifier (e.g. "openai/gpt-5.2").
            user_message: Content of the single user turn.
            system_prompt: Optional system turn placed before the user turn.
            temperature: Sampling temperature in [0, 1].
            max_tokens: Completion token budget.

        Returns:
            The completion text, verbatim and never empty.

        Raises:
            TransportFailure: On network or backend error.
            EmptyResponseFailure: When the backend returns no completion.
        """
        ...

    def is_configured(self) -> bool:
        return True
