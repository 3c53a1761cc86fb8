from accessibility_tester.core.formatter import format_report
from accessibility_tester.core.runner import AuditRunner
from accessibility_tester.core.tag_normalizer import normalize_tags, resolve_tags

__all__ = ["AuditRunner", "format_report", "normalize_tags", "resolve_tags"]
