from typing import ClassVar

from doccompare.comparison.ai_comparator import AiComparator
from doccompare.comparison.base import BaseComparator
from doccompare.comparison.client_base import BaseComparisonClient
from doccompare.comparison.example_client_adapter import ExampleClientAdapter
from doccompare.comparison.openai_client_adapter import OpenAIClientAdapter
from doccompare.comparison.statistical_comparator import StatisticalComparator
from doccompare.config.settings import Settings

STRATEGIES: tuple[str, ...] = ("statistical", "ai")


class ComparatorFactory:
    """Creates comparators by strategy name."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create(cls, strategy: str, settings: Settings) -> BaseComparator:
        name = strategy.lower()
        if name == "statistical":
            return StatisticalComparator()
        if name == "ai":
            return cls.create_ai(settings)
        raise ValueError(f"Unknown comparison strategy '{strategy}'. Choose from: {list(STRATEGIES)}")

    @classmethod
    def create_ai(cls, settings: Settings) -> AiComparator:
        provider = settings.comparison_provider.lower()
        client: BaseComparisonClient
        if provider == "example":
            client = ExampleClientAdapter()
            model = "example"
        else:
            client = OpenAIClientAdapter(
                api_key=settings.comparison_openai_api_key,
                timeout_seconds=settings.comparison_openai_timeout_seconds,
                base_url=cls._resolve_base_url(provider, settings),
            )
            model = settings.comparison_openai_model_name
        return AiComparator(
            client=client,
            model=model,
            temperature=settings.comparison_temperature,
            confidence_score=settings.comparison_confidence_score,
            recommended_actions=settings.comparison_recommended_actions,
            max_tokens=settings.comparison_max_tokens,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        configured = settings.comparison_openai_base_url.strip() or None
        if provider == "openai":
            return configured
        if provider == "openai_compatible":
            if configured is None:
                raise ValueError(
                    "comparison_openai_base_url is required for "
                    "comparison_provider=openai_compatible"
                )
            return configured
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return configured or default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(
            f"Unknown comparison provider '{provider}'. Choose from: {supported}"
        )
