from abc import ABC, abstractmethod


class BaseExtractionClient(ABC):
    """Contract for provider-specific extraction AI clients."""

    @abstractmethod
    async def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object] | None,
    ) -> str:
        """Return provider response as plain text.

        When ``json_schema`` is None the provider is only asked for a JSON object.
        """
