"""
Browser Automator Service
Scripted browser session that publishes videos through platform web UIs
"""

from typing import Mapping, Optional, Type

from playwright.async_api import Browser, BrowserContext, Page, Playwright, async_playwright

from ..config import Settings
from ..models.social_account import Platform
from ..utils.exceptions import AutomatorError, PublishStepError
from ..utils.logger import get_logger
from .publishers import PUBLISHERS, Credentials, Publisher, StepTimeouts, UploadResult

logger = get_logger()

_CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
]


class BrowserAutomator:
    """
    One isolated browser session for one upload attempt

    Not safe for concurrent use: open a separate automator per upload.

        automator = BrowserAutomator(settings)
        await automator.open()
        try:
            result = await automator.upload_to(...)
        finally:
            await automator.close()
    """

    def __init__(
        self,
        settings: Settings,
        publishers: Optional[Mapping[Platform, Type[Publisher]]] = None
    ):
        self.settings = settings
        self.timeouts = StepTimeouts.from_settings(settings)
        self.publishers = publishers if publishers is not None else PUBLISHERS
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    @property
    def is_open(self) -> bool:
        return self._page is not None

    async def open(self):
        """Launch the browser; a failed launch leaves nothing running"""
        if self.is_open:
            return

        try:
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self.settings.browser_headless,
                args=_CHROMIUM_ARGS,
            )
            self._context = await self._browser.new_context(
                user_agent=self.settings.browser_user_agent,
                viewport={
                    "width": self.settings.browser_viewport_width,
                    "height": self.settings.browser_viewport_height,
                },
            )
            self._page = await self._context.new_page()
        except Exception as exc:
            await self.close()
            raise AutomatorError(f"Failed to start browser session: {exc}") from exc

        logger.info("Browser session opened")

    async def close(self):
        """Tear down whatever part of the session exists. Safe to call twice."""
        context, browser, playwright = self._context, self._browser, self._playwright
        self._page = None
        self._context = None
        self._browser = None
        self._playwright = None

        if context is not None:
            try:
                await context.close()
            except Exception as exc:
                logger.warning(f"Failed to close browser context: {exc}")
        if browser is not None:
            try:
                await browser.close()
            except Exception as exc:
                logger.warning(f"Failed to close browser: {exc}")
        if playwright is not None:
            try:
                await playwright.stop()
            except Exception as exc:
                logger.warning(f"Failed to stop playwright: {exc}")
            logger.info("Browser session closed")

    async def upload_to(
        self,
        platform: Platform,
        file_path: str,
        title: str,
        description: str,
        credentials: Credentials
    ) -> UploadResult:
        """
        Publish a video on a platform

        Raises AutomatorError only when the session is not open; every
        failure during the upload itself is returned as an unsuccessful
        UploadResult with a readable message.
        """
        if self._page is None:
            raise AutomatorError("Browser session is not open", platform=platform.value)

        publisher_cls = self.publishers.get(platform)
        if publisher_cls is None:
            return UploadResult(success=False, error_message=f"Unsupported platform: {platform.value}")

        publisher = publisher_cls(self.timeouts)
        try:
            platform_url = await publisher.publish(
                self._page, file_path, title, description, credentials
            )
        except PublishStepError as exc:
            logger.warning(f"[{platform.value}] upload failed at {exc.step}: {exc.message}")
            return UploadResult(success=False, error_message=exc.message)
        except Exception as exc:
            logger.exception(f"[{platform.value}] upload failed: {exc}")
            return UploadResult(success=False, error_message=str(exc) or "Unknown error")

        logger.info(f"[{platform.value}] published: {platform_url}")
        return UploadResult(success=True, platform_url=platform_url)
