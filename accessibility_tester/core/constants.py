from typing import Dict, List, Tuple

# Caller-facing aliases, keyed by the normalized form (lowercase, no whitespace or periods).
WCAG_TAG_MAP: Dict[str, str] = {
    "a": "wcag2a",
    "wcag20a": "wcag2a",
    "wcag2a": "wcag2a",
    "aa": "wcag2aa",
    "wcag20aa": "wcag2aa",
    "wcag2aa": "wcag2aa",
    "wcag21a": "wcag21a",
    "wcag21aa": "wcag21aa",
    "wcag22a": "wcag22a",
    "wcag22aa": "wcag22aa",
}

# Normalized tags starting with one of these are passed to axe-core as they are.
ALLOWED_PREFIXES_OR_TAGS: Tuple[str, ...] = ("wcag", "best-practice", "section508")

DEFAULT_WCAG_TAGS: List[str] = ["wcag2a", "wcag2aa", "wcag21a", "wcag21aa"]

SERVER_NAME = "accessibility-tester"
TOOL_NAME = "exec-a11y-test"
TOOL_DESCRIPTION = "Obtains a list of specified list of URL and a list of WCAG indicators and returns the results"
