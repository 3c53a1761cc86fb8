import asyncio
from typing import Annotated, List, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from pydantic import Field, ValidationError

from accessibility_tester.config import BaseConfigManager, get_global_conf
from accessibility_tester.core.constants import SERVER_NAME, TOOL_DESCRIPTION, TOOL_NAME
from accessibility_tester.core.errors import AuditError, AuditValidationError
from accessibility_tester.core.formatter import format_report
from accessibility_tester.core.models import AuditRequest
from accessibility_tester.core.runner import AuditRunner
from accessibility_tester.core.tag_normalizer import resolve_tags
from accessibility_tester.utils.logger import logger


class AccessibilityTesterServer:
    """
    MCP server exposing the single `exec-a11y-test` tool.

    `start()` serves until `stop()` is called, typically from a signal handler.
    """

    def __init__(self, config: Optional[BaseConfigManager] = None, runner: Optional[AuditRunner] = None):
        self.config = config or get_global_conf()
        self.runner = runner or AuditRunner(self.config)
        self.mcp = FastMCP(SERVER_NAME)
        self.mcp.add_tool(self.exec_a11y_test, name=TOOL_NAME, description=TOOL_DESCRIPTION)
        self._serve_task: Optional[asyncio.Task] = None
        self._stopping = False

    async def audit(self, urls: List[str], wcag_standards: Optional[List[str]] = None) -> str:
        """
        Validate the request, audit every URL and return the text report.

        Raises AuditValidationError before any browser work if the request is
        invalid, and AuditLifecycleError if the browser cannot be started.
        """
        try:
            request = AuditRequest(urls=urls, wcag_standards=wcag_standards)
        except ValidationError as e:
            raise AuditValidationError(f"Invalid request: {e}") from e

        tags = resolve_tags(request.wcag_standards)
        report = await self.runner.run(request.urls, tags)
        return format_report(report)

    async def exec_a11y_test(
        self,
        urls: Annotated[List[str], Field(description="Absolute URLs of the pages to audit")],
        wcagStandards: Annotated[Optional[List[str]], Field(description="WCAG indicators such as 'AA' or 'wcag21aa'")] = None,  # noqa: N803
    ) -> str:
        try:
            return await self.audit(urls, wcagStandards)
        except AuditError as e:
            logger.error(f"{TOOL_NAME} failed ({e.kind.value}): {e.message}")
            raise ToolError(e.message) from e

    async def _serve(self, transport: str) -> None:
        if transport == "sse":
            await self.mcp.run_sse_async()
        elif transport == "streamable-http":
            await self.mcp.run_streamable_http_async()
        else:
            await self.mcp.run_stdio_async()

    async def start(self) -> None:
        transport = self.config.get_transport()
        self._stopping = False
        self._serve_task = asyncio.create_task(self._serve(transport))
        logger.info(f"A11y Accessibility MCP server running on {transport}")
        try:
            await self._serve_task
        except asyncio.CancelledError:
            if not self._stopping:
                raise
            logger.info("A11y Accessibility MCP server stopped")
        finally:
            self._serve_task = None

    def stop(self) -> None:
        """Stop serving. Safe to call from a signal handler on the event loop."""
        if self._serve_task is None or self._serve_task.done():
            return
        logger.info("Stopping A11y Accessibility MCP server")
        self._stopping = True
        self._serve_task.cancel()
