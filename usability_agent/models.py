from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from typing import Annotated, Any, Literal

from pydantic import AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field, model_validator

Rating = Literal["excellent", "good", "needs_improvement"]


# Upstream payloads come from third-party services and are frequently partial
# or oddly typed. These coercions turn anything unexpected into "absent".

def _number_or_none(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        value = float(value)
    except OverflowError:
        return None
    return value if math.isfinite(value) else None


def _unit_score(value: Any) -> float | None:
    value = _number_or_none(value)
    if value is None:
        return None
    return max(0.0, min(1.0, value))


def _bool_or_none(value: Any) -> bool | None:
    return value if isinstance(value, bool) else None


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _str_or_empty(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _model_or_none(model: type[BaseModel]) -> Callable[[Any], Any]:
    """Coerce a slot value to something `model` validates, or None."""
    def coerce(value: Any) -> Any:
        if isinstance(value, model):
            return value
        if isinstance(value, Mapping):
            return dict(value)
        return None
    return coerce


def _model_items(model: type[BaseModel]) -> Callable[[Any], list[Any] | None]:
    coerce = _model_or_none(model)

    def items(value: Any) -> list[Any] | None:
        if not isinstance(value, (list, tuple)):
            return None
        return [v for v in map(coerce, value) if v is not None]
    return items


def _model_map(model: type[BaseModel]) -> Callable[[Any], dict[str, Any]]:
    coerce = _model_or_none(model)

    def mapping(value: Any) -> dict[str, Any]:
        if not isinstance(value, Mapping):
            return {}
        coerced = {str(k): coerce(v) for k, v in value.items()}
        return {k: v for k, v in coerced.items() if v is not None}
    return mapping


Number = Annotated[float | None, BeforeValidator(_number_or_none)]
UnitScore = Annotated[float | None, BeforeValidator(_unit_score)]
OptionalBool = Annotated[bool | None, BeforeValidator(_bool_or_none)]
OptionalStr = Annotated[str | None, BeforeValidator(_str_or_none)]
Text = Annotated[str, BeforeValidator(_str_or_empty)]


class _Payload(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


class CategoryScore(_Payload):
    score: UnitScore = None


class AuditMetric(_Payload):
    score: UnitScore = None
    numeric_value: Number = Field(None, validation_alias=AliasChoices("numericValue", "numeric_value"))


OptionalCategory = Annotated[CategoryScore | None, BeforeValidator(_model_or_none(CategoryScore))]


class Categories(_Payload):
    performance: OptionalCategory = None
    accessibility: OptionalCategory = None
    best_practices: OptionalCategory = Field(
        None, validation_alias=AliasChoices("best-practices", "best_practices", "bestPractices"),
    )
    seo: OptionalCategory = None


class PerformanceAudit(_Payload):
    categories: Annotated[Categories, BeforeValidator(lambda v: _model_or_none(Categories)(v) or {})] = Field(
        default_factory=Categories,
    )
    audits: Annotated[dict[str, AuditMetric], BeforeValidator(_model_map(AuditMetric))] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _unwrap_lighthouse_result(cls, data: Any) -> Any:
        # A raw PageSpeed Insights response nests everything under lighthouseResult.
        if isinstance(data, Mapping) and isinstance(data.get("lighthouseResult"), Mapping):
            return dict(data["lighthouseResult"])
        return data


class ValidationMessage(_Payload):
    type: Text = ""
    message: Text = ""


class HtmlValidation(_Payload):
    messages: Annotated[list[ValidationMessage] | None, BeforeValidator(_model_items(ValidationMessage))] = None


class SecurityStats(_Payload):
    security_score: Number = Field(None, validation_alias=AliasChoices("securityScore", "security_score"))


class SecurityPage(_Payload):
    url: OptionalStr = None
    tls_valid: OptionalBool = Field(None, validation_alias=AliasChoices("tlsValid", "tls_valid"))
    status_code: Number = Field(None, validation_alias=AliasChoices("statusCode", "status_code"))


class SecurityResult(_Payload):
    stats: Annotated[SecurityStats | None, BeforeValidator(_model_or_none(SecurityStats))] = None
    page: Annotated[SecurityPage | None, BeforeValidator(_model_or_none(SecurityPage))] = None


class SecurityPosture(_Payload):
    results: Annotated[list[SecurityResult], BeforeValidator(lambda v: _model_items(SecurityResult)(v) or [])] = Field(
        default_factory=list,
    )


class AuditBundle(_Payload):
    """Every raw third-party signal gathered for one URL.

    Field names follow the report payload (``websiteUrl``, ``pageSpeedData``,
    ``htmlValidationData``, ``securityData``) as well as the schema names
    (``performanceAudit``, ``htmlValidation``, ``securityPosture``).
    """

    website_url: Text = Field("", validation_alias=AliasChoices("websiteUrl", "website_url"))
    analysis_date: OptionalStr = Field(None, validation_alias=AliasChoices("analysisDate", "analysis_date"))
    performance_audit: Annotated[PerformanceAudit | None, BeforeValidator(_model_or_none(PerformanceAudit))] = Field(
        None, validation_alias=AliasChoices("performanceAudit", "pageSpeedData", "performance_audit"),
    )
    html_validation: Annotated[HtmlValidation | None, BeforeValidator(_model_or_none(HtmlValidation))] = Field(
        None, validation_alias=AliasChoices("htmlValidation", "htmlValidationData", "html_validation"),
    )
    security_posture: Annotated[SecurityPosture | None, BeforeValidator(_model_or_none(SecurityPosture))] = Field(
        None, validation_alias=AliasChoices("securityPosture", "securityData", "security_posture"),
    )

    @classmethod
    def from_payload(cls, payload: Any) -> AuditBundle:
        if isinstance(payload, AuditBundle):
            return payload
        if not isinstance(payload, Mapping):
            return cls()
        return cls.model_validate(dict(payload))


class Principle(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    score: int = Field(..., ge=0, le=100)
    description: str
    feedback: str


class RatingDistribution(BaseModel):
    model_config = ConfigDict(frozen=True)

    excellent: int = 0
    good: int = 0
    needs_improvement: int = 0


class UsabilitySummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    max: int
    min: int
    median: float
    std_dev: float
    highlighted: list[Principle]
    critical_issues: list[Principle]

    average: int
    rating: Rating
    distribution: RatingDistribution
    strengths: list[str]
    weaknesses: list[str]
    recommendations: list[str]


class UsabilityReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    website_url: str
    analysis_date: str | None = None
    principles: list[Principle]
    summary: UsabilitySummary
    metrics: dict[str, float]


class CriterionInfo(BaseModel):
    key: str
    name: str
    description: str
    weight: float
    terms: dict[str, float]


class EvaluateRequest(BaseModel):
    url: str | None = None
    bundle: dict[str, Any] = Field(default_factory=dict)


class AnalyzeRequest(BaseModel):
    url: str = Field(..., min_length=1)
    check_reachability: bool = Field(True)
    timeout_ms: int = Field(8000, ge=1000, le=60000)


class AnalyzeResponse(BaseModel):
    normalized_url: str
    report: UsabilityReport
    warnings: list[str] = []
    timings_ms: dict[str, int]
