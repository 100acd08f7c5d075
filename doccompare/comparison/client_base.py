from abc import ABC, abstractmethod


class BaseComparisonClient(ABC):
    """Contract for provider-specific AI text-comparison clients."""

    @abstractmethod
    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        max_tokens: int,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object],
    ) -> str:
        """Return provider response as plain text."""
