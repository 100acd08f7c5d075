"""AI-assisted structured comparison of two agreements."""

import json
from pathlib import Path
from typing import Any

from doccompare.comparison.base import BaseComparator
from doccompare.comparison.client_base import BaseComparisonClient
from doccompare.comparison.exceptions import ComparisonValidationError
from doccompare.comparison.models import (
    AiComparisonResult,
    AiDifference,
    ComparisonOutcome,
    KeyDifference,
    Severity,
)
from doccompare.comparison.prompt_loader import load_json_schema, load_prompt_template
from doccompare.comparison.validator import validate_and_build
from doccompare.logging.logger import Log

_SUGGESTION_PRIORITY = {"high": "critical", "medium": "recommended", "low": "optional"}


def overall_risk(differences: list[AiDifference]) -> Severity:
    severities = {difference.severity for difference in differences}
    if "high" in severities:
        return "high"
    if "medium" in severities:
        return "medium"
    return "low"


class AiComparator(BaseComparator):
    """Delegates semantic diffing to an AI provider through a comparison client.

    Provider failures surface as ComparisonNetworkError and malformed output
    as ComparisonValidationError. There is no statistical fallback.
    """

    strategy = "ai"

    def __init__(
        self,
        *,
        client: BaseComparisonClient,
        model: str,
        temperature: float = 0.1,
        confidence_score: float = 0.85,
        recommended_actions: list[str] | None = None,
        max_tokens: int = 2000,
        prompt_template_path: Path | None = None,
        json_schema_path: Path | None = None,
        system_prompt: str = "",
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(1.0, temperature))
        self._confidence_score = confidence_score
        self._recommended_actions = list(recommended_actions or [])
        self._max_tokens = max_tokens
        self._system_prompt = system_prompt
        self._prompt_template = load_prompt_template(prompt_template_path)
        schema_str = load_json_schema(json_schema_path)
        self._json_schema = schema_str
        self._json_schema_dict = json.loads(schema_str)

    def compare(
        self,
        text1: str,
        text2: str,
        name1: str = "Document 1",
        name2: str = "Document 2",
    ) -> ComparisonOutcome:
        prompt = self._build_prompt(text1, text2)
        Log.debug(f"Comparison prompt for {name1!r} vs {name2!r}:\n{prompt}")

        raw_response = self._call_ai(prompt)
        Log.debug(f"AI raw response:\n{raw_response}")

        result = validate_and_build(self._parse_json(raw_response))
        risk = overall_risk(result.differences)
        Log.info(
            f"AI comparison complete: {len(result.differences)} differences, "
            f"overall risk {risk}"
        )
        return self._build_outcome(result, risk)

    def _build_prompt(self, text1: str, text2: str) -> str:
        return self._prompt_template.format(
            standard_text=text1,
            third_party_text=text2,
            json_schema=self._json_schema,
        )

    def _call_ai(self, prompt: str) -> str:
        return self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            max_tokens=self._max_tokens,
            system_prompt=self._system_prompt,
            user_prompt=prompt,
            json_schema=self._json_schema_dict,
        )

    def _build_outcome(self, result: AiComparisonResult, risk: Severity) -> ComparisonOutcome:
        key_differences = [
            KeyDifference(
                section=difference.section,
                type="different" if difference.severity == "high" else "missing",
                importance=difference.severity,
                standard_text=difference.standard_text,
                compared_text=difference.third_party_text,
                explanation=difference.suggestion,
            )
            for difference in result.differences
        ]
        suggestions: list[dict[str, Any]] = [
            {
                "section": difference.section,
                "type": "modification",
                "priority": _SUGGESTION_PRIORITY[difference.severity],
                "suggestion": difference.suggestion,
                "rationale": f"Severity: {difference.severity}",
            }
            for difference in result.differences
            if difference.suggestion
        ]
        return ComparisonOutcome(
            strategy=self.strategy,
            similarity_score=self._confidence_score,
            summary=result.summary,
            key_differences=key_differences,
            ai_suggestions=suggestions,
            details={
                "overall_risk": risk,
                "confidence": self._confidence_score,
                "recommended_actions": list(self._recommended_actions),
                "model": self._model,
            },
        )

    @staticmethod
    def _parse_json(raw: str) -> dict[str, Any]:
        cleaned = raw.strip()
        if cleaned.startswith("```"):
            lines = cleaned.splitlines()
            if lines and lines[0].startswith("```"):
                lines = lines[1:]
            if lines and lines[-1].strip() == "```":
                lines = lines[:-1]
            cleaned = "\n".join(lines)

        try:
            parsed = json.loads(cleaned)
        except json.JSONDecodeError as exc:
            raise ComparisonValidationError(f"Invalid JSON response: {exc}") from exc

        if not isinstance(parsed, dict):
            raise ComparisonValidationError("JSON response must be an object")
        return parsed
