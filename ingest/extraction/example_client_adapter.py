"""Example extraction client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseExtractionClient and register the provider in ExtractorFactory.
"""

import json

from ingest.extraction.client_base import BaseExtractionClient


class ExampleClientAdapter(BaseExtractionClient):
    """Offline adapter that answers every requested field with null.

    No network calls. Documents processed with it are rejected by validation,
    which makes it safe for local development of the surrounding pipeline.
    """

    async def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object] | None,
    ) -> str:
        _ = model, temperature, system_prompt, user_prompt
        properties = (json_schema or {}).get("properties", {})
        fields = list(properties) if isinstance(properties, dict) else []
        return json.dumps({name: None for name in fields})
