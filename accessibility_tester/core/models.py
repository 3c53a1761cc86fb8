from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import AnyUrl, BaseModel, Field, TypeAdapter, ValidationError, field_validator

_URL_ADAPTER = TypeAdapter(AnyUrl)


class AuditRequest(BaseModel):
    """
    Arguments of one tool call. URLs are validated as absolute URLs but kept
    as the caller wrote them so the report echoes the same strings.
    """

    urls: List[str] = Field(min_length=1)
    wcag_standards: Optional[List[str]] = None

    @field_validator("urls")
    @classmethod
    def _check_absolute_urls(cls, urls: List[str]) -> List[str]:
        for url in urls:
            try:
                _URL_ADAPTER.validate_python(url)
            except ValidationError as e:
                raise ValueError(f"Invalid url: {url!r}") from e
        return urls


@dataclass(frozen=True)
class NodeSummary:
    html: str
    target: Tuple[str, ...] = ()
    failure_summary: Optional[str] = None

    @classmethod
    def from_axe(cls, node: Dict[str, Any]) -> "NodeSummary":
        target = node.get("target") or ()
        return cls(
            html=node.get("html", ""),
            target=tuple(str(t) for t in target),
            failure_summary=node.get("failureSummary"),
        )


@dataclass(frozen=True)
class ViolationSummary:
    """
    One failed axe-core rule on one page.

    `impact` is passed through as axe reports it; None means unset.
    """

    id: str
    impact: Optional[str]
    description: str
    help_url: str
    nodes: Tuple[NodeSummary, ...] = ()

    @classmethod
    def from_axe(cls, violation: Dict[str, Any]) -> "ViolationSummary":
        return cls(
            id=violation.get("id", ""),
            impact=violation.get("impact") or None,
            description=violation.get("description", ""),
            help_url=violation.get("helpUrl", ""),
            nodes=tuple(NodeSummary.from_axe(n) for n in violation.get("nodes") or []),
        )


@dataclass(frozen=True)
class PageAuditSuccess:
    url: str
    violations: Tuple[ViolationSummary, ...] = ()
    passes_count: int = 0
    incomplete_count: int = 0
    inapplicable_count: int = 0

    @classmethod
    def from_axe_results(cls, url: str, axe_results: Dict[str, Any]) -> "PageAuditSuccess":
        return cls(
            url=url,
            violations=tuple(ViolationSummary.from_axe(v) for v in axe_results.get("violations") or []),
            passes_count=len(axe_results.get("passes") or []),
            incomplete_count=len(axe_results.get("incomplete") or []),
            inapplicable_count=len(axe_results.get("inapplicable") or []),
        )


@dataclass(frozen=True)
class PageAuditFailure:
    url: str
    error: str


PageAuditOutcome = Union[PageAuditSuccess, PageAuditFailure]


@dataclass(frozen=True)
class AuditReport:
    outcomes: Tuple[PageAuditOutcome, ...] = field(default_factory=tuple)

    @classmethod
    def from_outcomes(cls, outcomes: Sequence[PageAuditOutcome]) -> "AuditReport":
        return cls(outcomes=tuple(outcomes))

    @property
    def urls(self) -> List[str]:
        return [outcome.url for outcome in self.outcomes]
