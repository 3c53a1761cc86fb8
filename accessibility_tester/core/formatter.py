from typing import List

from accessibility_tester.core.models import (
    AuditReport,
    PageAuditFailure,
    PageAuditOutcome,
    ViolationSummary,
)


def _single_line(text: str) -> str:
    return " ".join(text.split())


def _format_violation(violation: ViolationSummary) -> List[str]:
    impact = violation.impact.upper() if violation.impact else "N/A"
    lines = [
        f"    - [{impact}] {violation.id}: {violation.description} "
        f"(Nodes: {len(violation.nodes)}, Help: {violation.help_url})"
    ]
    for index, node in enumerate(violation.nodes, start=1):
        lines.append(f"      Node {index}: {_single_line(node.html)}")
    return lines


def format_outcome(outcome: PageAuditOutcome) -> str:
    lines = [f"URL: {outcome.url}"]
    if isinstance(outcome, PageAuditFailure):
        lines.append(f"  Error: {_single_line(outcome.error)}")
        return "\n".join(lines)

    lines.append(f"  Violations: {len(outcome.violations)}")
    for violation in outcome.violations:
        lines.extend(_format_violation(violation))
    lines.append(f"  Passes: {outcome.passes_count}")
    lines.append(f"  Incomplete: {outcome.incomplete_count}")
    lines.append(f"  Inapplicable: {outcome.inapplicable_count}")
    return "\n".join(lines)


def format_report(report: AuditReport) -> str:
    """
    Render an audit report as text, one block per URL in request order,
    blocks separated by a blank line.
    """
    return "\n\n".join(format_outcome(outcome) for outcome in report.outcomes).strip()
