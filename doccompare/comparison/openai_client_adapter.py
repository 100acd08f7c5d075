import httpx
import openai

from doccompare.comparison.client_base import BaseComparisonClient
from doccompare.comparison.exceptions import ComparisonError, ComparisonNetworkError


class OpenAIClientAdapter(BaseComparisonClient):
    """Comparison client built on the OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

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
        messages = [{"role": "user", "content": user_prompt}]
        if system_prompt:
            messages.insert(0, {"role": "system", "content": system_prompt})
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": "document_comparison",
                        "strict": True,
                        "schema": json_schema,
                    },
                },
                messages=messages,  # type: ignore[arg-type]
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise ComparisonNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise ComparisonNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise ComparisonError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise ComparisonError("AI returned empty response")
        return content
