from typing import ClassVar

from ingest.config.settings import Settings
from ingest.extraction.chunk_extractor import ChunkExtractor
from ingest.extraction.client_base import BaseExtractionClient
from ingest.extraction.example_client_adapter import ExampleClientAdapter
from ingest.extraction.openai_client_adapter import OpenAIClientAdapter


class ExtractorFactory:
    """Creates the configured chunk extractor."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    # provider -> (api key setting, model name setting)
    PROVIDER_SETTINGS: ClassVar[dict[str, tuple[str, str]]] = {
        "openai": ("extraction_openai_api_key", "extraction_openai_model_name"),
        "openai_compatible": (
            "extraction_openai_compatible_api_key",
            "extraction_openai_compatible_model_name",
        ),
        "openrouter": ("extraction_openrouter_api_key", "extraction_openrouter_model_name"),
        "groq": ("extraction_groq_api_key", "extraction_groq_model_name"),
        "together": ("extraction_together_api_key", "extraction_together_model_name"),
        "deepseek": ("extraction_deepseek_api_key", "extraction_deepseek_model_name"),
        "ollama": ("extraction_ollama_api_key", "extraction_ollama_model_name"),
    }

    @classmethod
    def create(cls, settings: Settings) -> ChunkExtractor:
        """Create a configured chunk extractor from application settings."""
        provider = settings.extraction_provider.lower()
        client: BaseExtractionClient
        if provider == "example":
            client = ExampleClientAdapter()
            model = "example"
        else:
            base_url = cls._resolve_base_url(provider, settings)
            api_key, model = cls._credentials(provider, settings)
            client = OpenAIClientAdapter(
                api_key=api_key,
                timeout_seconds=settings.extraction_timeout_seconds,
                base_url=base_url,
            )
        # Only the OpenAI provider exposes a temperature setting.
        temperature = settings.extraction_openai_temperature if provider == "openai" else 0.0
        return ChunkExtractor(
            client=client,
            model=model,
            temperature=temperature,
            timeout_seconds=settings.extraction_timeout_seconds,
            max_attempts=settings.extraction_max_attempts,
            backoff_seconds=settings.extraction_backoff_seconds,
            backoff_max_seconds=settings.extraction_backoff_max_seconds,
            structured_output=settings.extraction_structured_output,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = (settings.extraction_openai_compatible_base_url or "").strip()
            if not url:
                raise ValueError(
                    "extraction_openai_compatible_base_url is required for "
                    "extraction_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return default_base_url
        supported = ["example", *sorted(cls.PROVIDER_SETTINGS)]
        raise ValueError(
            f"Unknown extraction provider '{provider}'. Choose from: {supported}"
        )

    @classmethod
    def _credentials(cls, provider: str, settings: Settings) -> tuple[str, str]:
        key_setting, model_setting = cls.PROVIDER_SETTINGS[provider]
        return (
            getattr(settings, key_setting) or "",
            getattr(settings, model_setting) or "",
        )
