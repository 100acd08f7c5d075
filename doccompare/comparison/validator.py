"""Validates the parsed AI comparison response."""

from typing import Any

from doccompare.comparison.exceptions import ComparisonValidationError
from doccompare.comparison.models import SEVERITIES, AiComparisonResult, AiDifference

_MAX_DIFFERENCES = 200


def validate_and_build(data: dict[str, Any]) -> AiComparisonResult:
    """Check the response shape and build an AiComparisonResult.

    Raises:
        ComparisonValidationError: on any validation failure.
    """
    summary = data.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        raise ComparisonValidationError("'summary' must be a non-empty string")
    raw_differences = data.get("differences")
    if not isinstance(raw_differences, list):
        raise ComparisonValidationError("'differences' must be a list")
    if len(raw_differences) > _MAX_DIFFERENCES:
        raise ComparisonValidationError(
            f"Too many differences: {len(raw_differences)} (max {_MAX_DIFFERENCES})"
        )
    differences = [_build_difference(item, i) for i, item in enumerate(raw_differences)]
    return AiComparisonResult(differences=differences, summary=summary.strip())


def _build_difference(raw: Any, index: int) -> AiDifference:
    if not isinstance(raw, dict):
        raise ComparisonValidationError(f"Difference at index {index} must be an object")
    section = raw.get("section")
    if not isinstance(section, str) or not section.strip():
        raise ComparisonValidationError(
            f"Difference at index {index}: 'section' must be a non-empty string"
        )
    severity = raw.get("severity")
    if not isinstance(severity, str) or severity.lower() not in SEVERITIES:
        raise ComparisonValidationError(
            f"Difference at index {index}: 'severity' must be one of "
            f"{list(SEVERITIES)}, got {severity!r}"
        )
    texts = {}
    for field in ("standardText", "thirdPartyText", "suggestion"):
        value = raw.get(field, "")
        if value is None:
            value = ""
        if not isinstance(value, str):
            raise ComparisonValidationError(
                f"Difference at index {index}: '{field}' must be a string"
            )
        texts[field] = value
    return AiDifference(
        section=section.strip(),
        standard_text=texts["standardText"],
        third_party_text=texts["thirdPartyText"],
        severity=severity.lower(),  # type: ignore[arg-type]
        suggestion=texts["suggestion"],
    )
