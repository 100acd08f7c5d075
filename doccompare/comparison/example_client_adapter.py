"""Offline comparison client.

Returns a fixed, valid comparison so the AI strategy can run without a
provider account. Implement BaseComparisonClient and register the provider
in ComparatorFactory to add a real one.
"""

import json
from typing import ClassVar

from doccompare.comparison.client_base import BaseComparisonClient


class ExampleClientAdapter(BaseComparisonClient):
    """Adapter that answers every request with DEFAULT_RESPONSE. No network calls."""

    DEFAULT_RESPONSE: ClassVar[dict[str, object]] = {
        "differences": [
            {
                "section": "Term",
                "standardText": "This agreement remains in effect for two (2) years.",
                "thirdPartyText": "This agreement remains in effect for five (5) years.",
                "severity": "medium",
                "suggestion": "Align the term with the standard two-year period.",
            }
        ],
        "summary": "The documents differ mainly in the length of the agreement term.",
    }

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
        _ = model, temperature, max_tokens, system_prompt, user_prompt, json_schema
        return json.dumps(self.DEFAULT_RESPONSE)
