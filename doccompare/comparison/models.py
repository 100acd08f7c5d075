from dataclasses import asdict, dataclass, field
from typing import Any, Literal

Severity = Literal["low", "medium", "high"]
DifferenceType = Literal["missing", "different", "additional"]

SEVERITIES: tuple[str, ...] = ("low", "medium", "high")


@dataclass(frozen=True)
class KeyDifference:
    """One entry of ``Comparison.key_differences``, whichever strategy produced it."""

    section: str
    type: DifferenceType
    importance: Severity
    explanation: str
    standard_text: str | None = None
    compared_text: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ComparisonOutcome:
    strategy: str
    similarity_score: float
    summary: str
    key_differences: list[KeyDifference]
    ai_suggestions: list[dict[str, Any]] = field(default_factory=list)
    details: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class AiDifference:
    section: str
    standard_text: str
    third_party_text: str
    severity: Severity
    suggestion: str


@dataclass(frozen=True)
class AiComparisonResult:
    """Validated structure returned by the AI provider."""

    differences: list[AiDifference]
    summary: str
