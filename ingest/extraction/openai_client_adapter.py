import httpx
import openai

from ingest.extraction.client_base import BaseExtractionClient
from ingest.extraction.exceptions import ExtractionNetworkError, ExtractionResponseError


class OpenAIClientAdapter(BaseExtractionClient):
    """Extraction AI client adapter built on the OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        # Retries are driven by the chunk extractor, not the SDK.
        self._client = openai.AsyncOpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
            max_retries=0,
        )

    async def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object] | None,
    ) -> str:
        if json_schema is None:
            response_format: dict[str, object] = {"type": "json_object"}
        else:
            response_format = {
                "type": "json_schema",
                "json_schema": {
                    "name": "invoice_extraction",
                    "strict": True,
                    "schema": json_schema,
                },
            }
        try:
            response = await self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                response_format=response_format,  # type: ignore[arg-type]
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ExtractionNetworkError(
                f"AI provider network error: {exc}"
            ) from exc
        except openai.APIError as exc:
            raise ExtractionNetworkError(
                f"AI provider API error: {exc}"
            ) from exc

        if not response.choices:
            raise ExtractionResponseError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise ExtractionResponseError("AI returned empty response")
        return content
