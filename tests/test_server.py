import asyncio
from typing import List

import pytest
from mcp.server.fastmcp.exceptions import ToolError
from accessibility_tester.core.constants import TOOL_NAME
from accessibility_tester.server import AccessibilityTesterServer

DEFAULT_TAGS = ["wcag2a", "wcag2aa", "wcag21a", "wcag21aa"]


class TestExecA11yTest:
    @pytest.mark.asyncio
    async def test_tool_is_registered(self, make_harness) -> None:
        harness = make_harness()
        server = AccessibilityTesterServer(harness.runner.config, runner=harness.runner)

        tools = await server.mcp.list_tools()

        assert [tool.name for tool in tools] == [TOOL_NAME]
        assert set(tools[0].inputSchema["properties"]) == {"urls", "wcagStandards"}
        assert tools[0].inputSchema["required"] == ["urls"]

    @pytest.mark.asyncio
    async def test_clean_page_report(self, make_harness, make_axe_results) -> None:
        harness = make_harness(results_by_url={"https://example.com": make_axe_results(passes=3)})
        server = AccessibilityTesterServer(harness.runner.config, runner=harness.runner)

        text = await server.exec_a11y_test(urls=["https://example.com"], wcagStandards=["AA"])

        assert "Violations: 0" in text
        assert "    - [" not in text
        assert harness.axe_engine.calls == [{"url": "https://example.com", "tags": ["wcag2aa"]}]

    @pytest.mark.asyncio
    async def test_unreachable_url_reports_error_line(self, make_harness) -> None:
        harness = make_harness(goto_errors={"https://bad.invalid": RuntimeError("net::ERR_NAME_NOT_RESOLVED")})
        server = AccessibilityTesterServer(harness.runner.config, runner=harness.runner)

        text = await server.exec_a11y_test(urls=["https://bad.invalid"])

        assert text == "URL: https://bad.invalid\n  Error: Failed to test: net::ERR_NAME_NOT_RESOLVED"

    @pytest.mark.asyncio
    async def test_empty_tags_use_defaults_for_every_url(self, make_harness) -> None:
        harness = make_harness()
        server = AccessibilityTesterServer(harness.runner.config, runner=harness.runner)

        text = await server.exec_a11y_test(urls=["https://a.test", "https://b.test"], wcagStandards=[])

        assert text.index("URL: https://a.test") < text.index("URL: https://b.test")
        assert [call["tags"] for call in harness.axe_engine.calls] == [DEFAULT_TAGS, DEFAULT_TAGS]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("urls", [[], ["https://a.test", "not-a-url"]])
    async def test_invalid_request_is_rejected_before_browser_work(self, make_harness, urls: List[str]) -> None:
        harness = make_harness()
        server = AccessibilityTesterServer(harness.runner.config, runner=harness.runner)

        with pytest.raises(ToolError, match="Invalid request"):
            await server.exec_a11y_test(urls=urls)

        assert harness.managers == []

    @pytest.mark.asyncio
    async def test_browser_failure_is_a_tool_error(self, make_harness) -> None:
        harness = make_harness(fail_on_enter=True)
        server = AccessibilityTesterServer(harness.runner.config, runner=harness.runner)

        with pytest.raises(ToolError, match="Failed to start browser"):
            await server.exec_a11y_test(urls=["https://a.test"])


class TestServerLifecycle:
    @pytest.mark.asyncio
    async def test_stop_ends_start(self, make_harness, monkeypatch) -> None:
        harness = make_harness()
        server = AccessibilityTesterServer(harness.runner.config, runner=harness.runner)
        serving = asyncio.Event()

        async def fake_serve(transport: str) -> None:
            serving.set()
            await asyncio.sleep(3600)

        monkeypatch.setattr(server, "_serve", fake_serve)

        task = asyncio.create_task(server.start())
        await serving.wait()
        server.stop()

        await asyncio.wait_for(task, timeout=1)
        assert task.exception() is None

    @pytest.mark.asyncio
    async def test_stop_before_start_is_a_no_op(self, make_harness) -> None:
        harness = make_harness()
        server = AccessibilityTesterServer(harness.runner.config, runner=harness.runner)

        server.stop()
