import re
from typing import List, Optional, Sequence

from accessibility_tester.core.constants import (
    ALLOWED_PREFIXES_OR_TAGS,
    DEFAULT_WCAG_TAGS,
    WCAG_TAG_MAP,
)
from accessibility_tester.utils.logger import logger

_STRIP_PATTERN = re.compile(r"[\s.]")


def normalize_tag(raw_tag: str) -> Optional[str]:
    """
    Convert one caller-supplied WCAG indicator to the axe-core tag.

    "AA", "WCAG 2.0 AA" and "wcag2aa" all become "wcag2aa". Unknown tags
    give None.
    """
    lower_tag = _STRIP_PATTERN.sub("", raw_tag.lower())
    if lower_tag in WCAG_TAG_MAP:
        return WCAG_TAG_MAP[lower_tag]
    if lower_tag and lower_tag.startswith(ALLOWED_PREFIXES_OR_TAGS):
        return lower_tag
    return None


def normalize_tags(raw_tags: Sequence[str]) -> List[str]:
    """
    Normalize a list of WCAG indicators, keeping order and duplicates.

    Unrecognized entries are logged and dropped.
    """
    tags: List[str] = []
    for raw_tag in raw_tags:
        tag = normalize_tag(raw_tag)
        if tag is None:
            logger.warning(f"Unrecognized WCAG tag: {raw_tag}")
            continue
        tags.append(tag)
    return tags


def resolve_tags(raw_tags: Optional[Sequence[str]]) -> List[str]:
    """
    Return the tag set an audit runs with.

    Falls back to DEFAULT_WCAG_TAGS when no tags were given, and also when
    none of the given tags could be normalized.
    """
    if not raw_tags:
        return list(DEFAULT_WCAG_TAGS)

    tags = normalize_tags(raw_tags)
    if not tags:
        logger.warning(f"None of the WCAG tags {list(raw_tags)} were recognized, using defaults {DEFAULT_WCAG_TAGS}")
        return list(DEFAULT_WCAG_TAGS)
    return tags
