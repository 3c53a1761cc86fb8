"""
Playwright manager owning the browser of one audit invocation.
"""

import asyncio
from types import TracebackType
from typing import Any, Dict, Optional, Type

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from accessibility_tester.config import BaseConfigManager, get_global_conf
from accessibility_tester.core.errors import AuditLifecycleError
from accessibility_tester.utils.logger import logger


class AuditBrowserManager:
    """
    One browser process and one isolated context, shared by every page of an
    invocation. Use as an async context manager; everything is closed on exit.
    """

    def __init__(self, config: Optional[BaseConfigManager] = None):
        self.config = config or get_global_conf()
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page_lock = asyncio.Lock()

    async def __aenter__(self) -> "AuditBrowserManager":
        try:
            await self.initialize()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    def _build_context_options(self) -> Dict[str, Any]:
        width, height = self.config.get_resolution()
        context_options: Dict[str, Any] = {"viewport": {"width": width, "height": height}}
        if self.config.get_locale():
            context_options["locale"] = self.config.get_locale()
        if self.config.should_ignore_certificate_errors():
            context_options["ignore_https_errors"] = True
        return context_options

    async def initialize(self) -> None:
        """Start Playwright, then launch (or connect to) the browser and open the context."""
        browser_type_name = self.config.get_browser_type()
        try:
            if self._playwright is None:
                self._playwright = await async_playwright().start()

            if self._browser is None:
                browser_type = getattr(self._playwright, browser_type_name)
                cdp_config = self.config.get_cdp_config()
                if cdp_config:
                    logger.info("Connecting over CDP with provided configuration.")
                    self._browser = await browser_type.connect_over_cdp(cdp_config["endpoint_url"])
                else:
                    logger.info(f"Launching {browser_type_name} (headless={self.config.should_run_headless()})")
                    self._browser = await browser_type.launch(headless=self.config.should_run_headless())

            if self._context is None:
                self._context = await self._browser.new_context(**self._build_context_options())
        except (PlaywrightError, OSError) as e:
            self._handle_launch_exception(e, browser_type_name)

    def _handle_launch_exception(self, e: Exception, browser_type_name: str) -> None:
        if "Executable doesn't exist" in str(e):
            raise AuditLifecycleError(
                f"{browser_type_name} is not installed on this device. Run 'playwright install {browser_type_name}'."
            ) from e
        logger.error(f"Failed to start {browser_type_name}: {e}")
        raise AuditLifecycleError(f"Failed to start browser: {e}") from e

    async def new_page(self) -> Page:
        """Open a fresh page in the shared context. Page creation is serialized."""
        if self._context is None:
            raise AuditLifecycleError("Browser context is not initialized")
        async with self._page_lock:
            return await self._context.new_page()

    async def close(self) -> None:
        """Close context, browser and Playwright, continuing past individual failures."""
        if self._context is not None:
            try:
                await self._context.close()
            except PlaywrightError as e:
                logger.error(f"Failed to close browser context: {e}")
            self._context = None
        if self._browser is not None:
            try:
                await self._browser.close()
            except PlaywrightError as e:
                logger.error(f"Failed to close browser: {e}")
            self._browser = None
        if self._playwright is not None:
            try:
                await self._playwright.stop()
            except Exception as e:
                logger.error(f"Failed to stop Playwright: {e}")
            self._playwright = None
        logger.debug("Browser resources released")
