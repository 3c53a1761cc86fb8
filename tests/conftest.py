import asyncio
import os
from typing import Any, Dict, Generator, List, Optional

os.environ["IS_TEST_ENV"] = "true"

import pytest
from accessibility_tester.config import SingletonConfigManager, set_global_conf
from accessibility_tester.core.errors import AuditLifecycleError
from accessibility_tester.core.runner import AuditRunner

BASE_TEST_CONFIG = {
    "BROWSER_TYPE": "chromium",
    "HEADLESS": "true",
    "NAVIGATION_TIMEOUT": "5000",
    "PARALLEL_AUDITS": "false",
}


def axe_results(
    violations: Optional[List[Dict[str, Any]]] = None,
    passes: int = 0,
    incomplete: int = 0,
    inapplicable: int = 0,
) -> Dict[str, Any]:
    """Build a raw axe-core result dict with the given number of rules per bucket."""
    return {
        "violations": violations or [],
        "passes": [{"id": f"pass-{i}"} for i in range(passes)],
        "incomplete": [{"id": f"incomplete-{i}"} for i in range(incomplete)],
        "inapplicable": [{"id": f"inapplicable-{i}"} for i in range(inapplicable)],
    }


class FakePage:
    def __init__(self, manager: "FakeBrowserManager") -> None:
        self.manager = manager
        self.url = "about:blank"
        self.goto_calls: List[Dict[str, Any]] = []
        self.closed = False

    async def goto(self, url: str, wait_until: Optional[str] = None, timeout: Optional[int] = None) -> None:
        self.goto_calls.append({"url": url, "wait_until": wait_until, "timeout": timeout})
        await asyncio.sleep(self.manager.delays.get(url, 0))
        if url in self.manager.goto_errors:
            raise self.manager.goto_errors[url]
        self.url = url

    async def close(self) -> None:
        self.closed = True


class FakeBrowserManager:
    def __init__(self, config: Any, goto_errors: Dict[str, Exception], delays: Dict[str, float], fail_on_enter: bool) -> None:
        self.config = config
        self.goto_errors = goto_errors
        self.delays = delays
        self.fail_on_enter = fail_on_enter
        self.pages: List[FakePage] = []
        self.entered = False
        self.closed = False

    async def __aenter__(self) -> "FakeBrowserManager":
        if self.fail_on_enter:
            raise AuditLifecycleError("Failed to start browser: boom")
        self.entered = True
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        self.closed = True

    async def new_page(self) -> FakePage:
        page = FakePage(self)
        self.pages.append(page)
        return page


class FakeAxeEngine:
    def __init__(self, results_by_url: Dict[str, Any], load_error: Optional[Exception] = None) -> None:
        self.results_by_url = results_by_url
        self.load_error = load_error
        self.calls: List[Dict[str, Any]] = []

    async def load_script(self) -> str:
        if self.load_error:
            raise self.load_error
        return "/* axe */"

    async def analyze(self, page: FakePage, tags: List[str]) -> Dict[str, Any]:
        self.calls.append({"url": page.url, "tags": list(tags)})
        result = self.results_by_url.get(page.url, axe_results())
        if isinstance(result, Exception):
            raise result
        return result


class RunnerHarness:
    """An AuditRunner wired to fake browser and axe collaborators."""

    def __init__(
        self,
        config: Any,
        results_by_url: Optional[Dict[str, Any]] = None,
        goto_errors: Optional[Dict[str, Exception]] = None,
        delays: Optional[Dict[str, float]] = None,
        fail_on_enter: bool = False,
        load_error: Optional[Exception] = None,
    ) -> None:
        self.managers: List[FakeBrowserManager] = []
        self.axe_engine = FakeAxeEngine(results_by_url or {}, load_error=load_error)

        def factory(conf: Any) -> FakeBrowserManager:
            manager = FakeBrowserManager(conf, goto_errors or {}, delays or {}, fail_on_enter)
            self.managers.append(manager)
            return manager

        self.runner = AuditRunner(config, axe_engine=self.axe_engine, browser_manager_factory=factory)

    @property
    def manager(self) -> FakeBrowserManager:
        return self.managers[-1]


@pytest.fixture(autouse=True)
def reset_config() -> Generator[None, None, None]:
    SingletonConfigManager.reset_instance()
    yield
    SingletonConfigManager.reset_instance()


@pytest.fixture
def test_config() -> SingletonConfigManager:
    return set_global_conf(dict(BASE_TEST_CONFIG), ignore_env=True, override=True)


@pytest.fixture
def parallel_config() -> SingletonConfigManager:
    return set_global_conf({**BASE_TEST_CONFIG, "PARALLEL_AUDITS": "true"}, ignore_env=True, override=True)


@pytest.fixture
def make_harness(test_config: SingletonConfigManager):
    def _make(config: Optional[SingletonConfigManager] = None, **kwargs: Any) -> RunnerHarness:
        return RunnerHarness(config or test_config, **kwargs)

    return _make


@pytest.fixture
def make_axe_results():
    return axe_results
