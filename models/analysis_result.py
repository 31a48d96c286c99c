from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Tuple, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr, field_validator


class Diagnosis(str, Enum):
    PNEUMONIA = "Pneumonia"
    NORMAL = "Normal"
    UNCERTAIN = "Uncertain"
    OTHER_FINDINGS = "Other Findings"


class Severity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    NOT_APPLICABLE = "N/A"


DIAGNOSIS_VALUES = [d.value for d in Diagnosis]
SEVERITY_VALUES = [s.value for s in Severity]


class AnalysisFields(BaseModel):
    """Validated shape of the five model-provided fields of a result."""

    model_config = ConfigDict(extra="ignore")

    diagnosis: Diagnosis
    confidence: Union[StrictInt, StrictFloat]
    severity: Severity
    findings: List[StrictStr]
    recommendation: StrictStr

    @field_validator("confidence")
    @classmethod
    def _confidence_in_range(cls, value: Union[int, float]) -> Union[int, float]:
        if not 0 <= value <= 100:
            raise ValueError("confidence must be within [0, 100]")
        return value


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class AnalysisResult:
    """One classification outcome.

    Attributes:
        id: Opaque unique identifier assigned when the result is created.
        date: ISO-8601 creation timestamp.
        diagnosis: Closed-set diagnosis label.
        confidence: Percentage in [0, 100], kept as the number received.
        severity: Closed-set severity label.
        findings: Observations in display order.
        recommendation: Free-text recommendation, possibly empty.
    """

    id: str
    date: str
    diagnosis: Diagnosis
    confidence: Union[int, float]
    severity: Severity
    findings: Tuple[str, ...] = field(default_factory=tuple)
    recommendation: str = ""

    @classmethod
    def from_fields(cls, fields: AnalysisFields, *, id: str | None = None, date: str | None = None) -> "AnalysisResult":
        """Enrich validated fields with an id and timestamp."""
        return cls(
            id=id or str(uuid4()),
            date=date or _now_iso(),
            diagnosis=fields.diagnosis,
            confidence=fields.confidence,
            severity=fields.severity,
            findings=tuple(fields.findings),
            recommendation=fields.recommendation,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AnalysisResult":
        """Rebuild a stored result; raises ValueError on any invalid field."""
        fields = AnalysisFields.model_validate(dict(data))
        record_id, date = data.get("id"), data.get("date")
        if not isinstance(record_id, str) or not record_id:
            raise ValueError("Stored result is missing its id.")
        if not isinstance(date, str) or not date:
            raise ValueError("Stored result is missing its date.")
        return cls.from_fields(fields, id=record_id, date=date)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "diagnosis": self.diagnosis.value,
            "confidence": self.confidence,
            "severity": self.severity.value,
            "findings": list(self.findings),
            "recommendation": self.recommendation,
        }

    def result_only(self) -> "AnalysisResult":
        return self


@dataclass(frozen=True)
class HistoryItem(AnalysisResult):
    """A stored result together with the image it was produced from."""

    imageUrl: str = ""

    @classmethod
    def from_result(cls, result: AnalysisResult, image_url: str) -> "HistoryItem":
        return cls(
            id=result.id,
            date=result.date,
            diagnosis=result.diagnosis,
            confidence=result.confidence,
            severity=result.severity,
            findings=result.findings,
            recommendation=result.recommendation,
            imageUrl=image_url,
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "HistoryItem":
        image_url = data.get("imageUrl")
        if not isinstance(image_url, str):
            raise ValueError("Stored record is missing its imageUrl.")
        return cls.from_result(AnalysisResult.from_dict(data), image_url)

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        payload["imageUrl"] = self.imageUrl
        return payload

    def result_only(self) -> AnalysisResult:
        """Return the result fields without the embedded image."""
        return AnalysisResult(
            id=self.id,
            date=self.date,
            diagnosis=self.diagnosis,
            confidence=self.confidence,
            severity=self.severity,
            findings=self.findings,
            recommendation=self.recommendation,
        )
