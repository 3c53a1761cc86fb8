from accessibility_tester import core  # noqa: F401
