"""Stage 3: send one chunk to the LLM and parse the structured answer."""

import asyncio
import json
from pathlib import Path
from typing import Any

from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ingest.chunking.models import Chunk
from ingest.extraction.client_base import BaseExtractionClient
from ingest.extraction.exceptions import ExtractionError, ExtractionNetworkError
from ingest.extraction.fields import build_json_schema, coerce_fields
from ingest.extraction.json_recovery import recover_json
from ingest.extraction.prompt_loader import load_prompt_template, load_system_prompt
from ingest.logging.logger import Log
from ingest.processor.exceptions import ChunkExtractionFailedError


class ChunkExtractor:
    """Extracts the expected fields of a chunk with timeout and retries."""

    def __init__(
        self,
        *,
        client: BaseExtractionClient,
        model: str,
        temperature: float = 0.0,
        timeout_seconds: float = 60.0,
        max_attempts: int = 3,
        backoff_seconds: float = 1.0,
        backoff_max_seconds: float = 10.0,
        structured_output: bool = True,
        prompt_template_path: Path | None = None,
        system_prompt_path: Path | None = None,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))
        self._timeout_seconds = timeout_seconds
        self._max_attempts = max(1, max_attempts)
        self._backoff_seconds = backoff_seconds
        self._backoff_max_seconds = backoff_max_seconds
        self._structured_output = structured_output
        self._prompt_template = load_prompt_template(prompt_template_path)
        self._system_prompt = load_system_prompt(system_prompt_path)

    async def extract(self, chunk: Chunk) -> dict[str, Any]:
        """Return coerced field values for the chunk.

        Raises:
            ChunkExtractionFailedError: once every attempt has failed.
        """
        schema = build_json_schema(chunk.expected_output_fields)
        prompt = self._build_prompt(chunk, schema)
        Log.debug(f"Extraction prompt for {chunk.id}:\n{prompt}")

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._max_attempts),
                wait=wait_exponential(
                    multiplier=self._backoff_seconds,
                    max=self._backoff_max_seconds,
                ),
                retry=retry_if_exception_type((ExtractionError, asyncio.TimeoutError)),
                reraise=True,
            ):
                with attempt:
                    number = attempt.retry_state.attempt_number
                    if number > 1:
                        Log.warning(f"Retrying chunk {chunk.id} (attempt {number})")
                    parsed = await self._call_once(chunk, prompt, schema)
        except asyncio.TimeoutError as exc:
            raise ChunkExtractionFailedError(
                chunk.id,
                f"timed out after {self._timeout_seconds}s",
                upstream=True,
            ) from exc
        except ExtractionNetworkError as exc:
            raise ChunkExtractionFailedError(chunk.id, str(exc), upstream=True) from exc
        except ExtractionError as exc:
            raise ChunkExtractionFailedError(chunk.id, str(exc), upstream=False) from exc

        return coerce_fields(parsed, chunk.expected_output_fields)

    async def _call_once(
        self,
        chunk: Chunk,
        prompt: str,
        schema: dict[str, object],
    ) -> dict[str, Any]:
        raw = await asyncio.wait_for(
            self._client.create_chat_completion(
                model=self._model,
                temperature=self._temperature,
                system_prompt=self._system_prompt,
                user_prompt=prompt,
                json_schema=schema if self._structured_output else None,
            ),
            timeout=self._timeout_seconds,
        )
        Log.debug(f"AI raw response for {chunk.id}:\n{raw}")
        return recover_json(raw)

    def _build_prompt(self, chunk: Chunk, schema: dict[str, object]) -> str:
        return self._prompt_template.format(
            chunk_title=chunk.title,
            instructions=chunk.processing_instructions,
            expected_fields=", ".join(chunk.expected_output_fields),
            json_schema=json.dumps(schema, indent=2),
            chunk_text=chunk.content,
        )
