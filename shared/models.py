"""
eifscope Shared Data Models
============================

Pydantic v2 models shared across eifscope components: a severity scale
and the :class:`Finding` record used to report advisories (conditions
that do not stop a parse but deserve attention).

References:
    - SARIF v2.1.0 Specification (OASIS, 2020).
    - Pydantic v2 documentation. https://docs.pydantic.dev/latest/
"""

from __future__ import annotations

import json as _json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Severity(str, Enum):
    """Finding severity level, most severe first."""

    CRITICAL = "CRITICAL"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    INFO = "INFO"


class Finding(BaseModel):
    """A single advisory produced while inspecting an image.

    Attributes:
        severity:       Qualitative severity rating.
        title:          Short, descriptive finding title.
        description:    Detailed explanation of the finding.
        evidence:       Raw data supporting the finding.
        recommendation: Suggested follow-up action.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        use_enum_values=False,
        extra="ignore",
    )

    severity: Severity = Field(
        ...,
        description="Severity level of this finding",
    )
    title: str = Field(
        ...,
        min_length=1,
        max_length=256,
        description="Short descriptive title",
    )
    description: str = Field(
        ...,
        min_length=1,
        description="Detailed explanation",
    )
    evidence: str = Field(
        default="",
        description="Supporting evidence or raw data",
    )
    recommendation: str = Field(
        default="",
        description="Suggested follow-up",
    )

    @field_validator("evidence", mode="before")
    @classmethod
    def _coerce_evidence(cls, v: Any) -> str:
        """Auto-convert non-string evidence (dict, list) to JSON string."""
        if isinstance(v, str):
            return v
        if isinstance(v, (dict, list)):
            return _json.dumps(v, ensure_ascii=False, default=str)
        return str(v)


def severity_counts(findings: list[Finding]) -> dict[str, int]:
    """Count findings grouped by severity name, every level present."""
    counts: dict[str, int] = {s.value: 0 for s in Severity}
    for finding in findings:
        counts[finding.severity.value] += 1
    return counts
