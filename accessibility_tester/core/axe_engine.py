from typing import Any, Dict, List, Optional

import httpx
from playwright.async_api import Page

from accessibility_tester.core.errors import AuditLifecycleError, PageAuditError
from accessibility_tester.utils.logger import logger

AXE_RUN_SCRIPT = """
async (tags) => {
    const options = tags.length ? { runOnly: { type: "tag", values: tags } } : {};
    return await axe.run(document, options);
}
"""


class AxeEngine:
    """
    Injects axe-core into a loaded page and runs it for a set of rule tags.

    The script is downloaded once and reused for every page.
    """

    def __init__(self, script_url: str, timeout: float = 30.0):
        self.script_url = script_url
        self.timeout = timeout
        self._script: Optional[str] = None

    async def load_script(self) -> str:
        if self._script is not None:
            return self._script
        logger.info(f"Downloading axe-core from {self.script_url}")
        try:
            async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                response = await client.get(self.script_url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise AuditLifecycleError(f"Failed to load axe-core script from {self.script_url}: {e}") from e
        self._script = response.text
        return self._script

    async def analyze(self, page: Page, tags: List[str]) -> Dict[str, Any]:
        """
        Run axe-core on `page` and return its raw results dict
        (violations, passes, incomplete, inapplicable).
        """
        script = await self.load_script()
        await page.add_script_tag(content=script)
        axe_results = await page.evaluate(AXE_RUN_SCRIPT, tags)
        if not isinstance(axe_results, dict):
            raise PageAuditError(f"axe-core returned no results for {page.url}", url=page.url)
        return axe_results
