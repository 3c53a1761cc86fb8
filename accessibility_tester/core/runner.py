import asyncio
from typing import Callable, List, Optional, Sequence

from accessibility_tester.config import BaseConfigManager, get_global_conf
from accessibility_tester.core.axe_engine import AxeEngine
from accessibility_tester.core.browser_manager import AuditBrowserManager
from accessibility_tester.core.models import (
    AuditReport,
    PageAuditFailure,
    PageAuditOutcome,
    PageAuditSuccess,
)
from accessibility_tester.utils.logger import logger

BrowserManagerFactory = Callable[[BaseConfigManager], AuditBrowserManager]


def _error_summary(e: Exception) -> str:
    # Playwright appends a multi-line "Call log:" section to its messages
    lines = str(e).strip().splitlines()
    return lines[0].strip() if lines else type(e).__name__


class AuditRunner:
    """
    Runs axe-core against a list of URLs inside one browser context.

    Each URL gets its own page. A failure on one URL becomes a
    PageAuditFailure and never stops the others. Browser setup failures
    propagate as AuditLifecycleError.
    """

    def __init__(
        self,
        config: Optional[BaseConfigManager] = None,
        axe_engine: Optional[AxeEngine] = None,
        browser_manager_factory: Optional[BrowserManagerFactory] = None,
    ):
        self.config = config or get_global_conf()
        self.axe_engine = axe_engine or AxeEngine(self.config.get_axe_script_url())
        self.browser_manager_factory = browser_manager_factory or AuditBrowserManager

    async def run(self, urls: Sequence[str], tags: List[str]) -> AuditReport:
        logger.info(f"Auditing {len(urls)} URL(s) with tags {tags}")
        await self.axe_engine.load_script()

        async with self.browser_manager_factory(self.config) as browser_manager:
            if self.config.should_run_parallel():
                outcomes = await asyncio.gather(*(self._audit_page(browser_manager, url, tags) for url in urls))
            else:
                outcomes = []
                for url in urls:
                    outcomes.append(await self._audit_page(browser_manager, url, tags))

        return AuditReport.from_outcomes(outcomes)

    async def _audit_page(self, browser_manager: AuditBrowserManager, url: str, tags: List[str]) -> PageAuditOutcome:
        page = None
        try:
            logger.info(f"Auditing {url}")
            page = await browser_manager.new_page()
            await page.goto(
                url,
                wait_until=self.config.get_wait_until(),
                timeout=self.config.get_navigation_timeout(),
            )
            axe_results = await self.axe_engine.analyze(page, tags)
            outcome: PageAuditOutcome = PageAuditSuccess.from_axe_results(url, axe_results)
            logger.info(f"{url}: {len(outcome.violations)} violation(s)")
        except Exception as e:
            logger.warning(f"Accessibility test failed for {url}: {e}")
            outcome = PageAuditFailure(url=url, error=f"Failed to test: {_error_summary(e)}")
        finally:
            if page is not None:
                try:
                    await page.close()
                except Exception as e:
                    logger.error(f"Failed to close page for {url}: {e}")
        return outcome
