"""
Publisher Base
Shared upload state machine driven against a platform's web UI
"""

from abc import ABC
from dataclasses import dataclass
from typing import Awaitable, Optional, TypeVar
from urllib.parse import urljoin

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ...models.social_account import Platform
from ...utils.exceptions import PublishStepError
from ...utils.logger import get_logger

logger = get_logger()

T = TypeVar("T")


@dataclass
class Credentials:
    """Login details for one platform account"""
    username: str
    password: str
    platform: Platform


@dataclass
class UploadResult:
    """Normalized outcome of one upload attempt"""
    success: bool
    platform_url: Optional[str] = None
    error_message: Optional[str] = None


@dataclass
class StepTimeouts:
    """Bounded waits for each phase, in milliseconds"""
    element: int = 10_000
    navigation: int = 30_000
    login: int = 30_000
    upload: int = 60_000
    publish: int = 30_000

    @classmethod
    def from_settings(cls, settings) -> "StepTimeouts":
        return cls(
            element=settings.element_timeout_ms,
            navigation=settings.navigation_timeout_ms,
            login=settings.login_timeout_ms,
            upload=settings.upload_timeout_ms,
            publish=settings.publish_timeout_ms,
        )


class Publisher(ABC):
    """
    Upload flow for one platform

    Every platform follows the same steps; subclasses provide URLs and
    selectors and override a step where their UI differs:

        navigate -> login -> attach file -> fill details -> publish -> extract url

    A timeout or missing element in any step aborts the attempt with a
    PublishStepError naming the step.
    """

    platform: Platform
    base_url: str
    upload_url: str
    login_url: str
    # Page to sign in from when it differs from the upload page
    home_url: Optional[str] = None

    signed_in_selector: str
    username_selector = 'input[name="username"]'
    password_selector = 'input[name="password"]'
    login_submit_selector = 'button[type="submit"]'

    file_input_selector = 'input[type="file"]'
    upload_ready_selector: str
    title_selector: str
    description_selector: Optional[str] = None
    publish_selector: str
    success_selector: str
    result_link_selector: Optional[str] = None

    def __init__(self, timeouts: Optional[StepTimeouts] = None):
        self.timeouts = timeouts or StepTimeouts()

    async def publish(
        self,
        page: Page,
        file_path: str,
        title: str,
        description: str,
        credentials: Credentials
    ) -> str:
        """Run the whole flow and return the published URL"""
        await self._step("navigate", self.open_start_page(page))
        await self._step("login", self.login(page, credentials))
        await self._step("attach file", self.attach_file(page, file_path))
        await self._step("fill details", self.fill_details(page, title, description))
        await self._step("publish", self.submit(page))
        return await self._step("extract url", self.extract_url(page))

    async def _step(self, name: str, action: Awaitable[T]) -> T:
        logger.info(f"[{self.platform.value}] {name}")
        try:
            return await action
        except PublishStepError:
            raise
        except PlaywrightTimeoutError as exc:
            raise PublishStepError(name, f"timed out ({exc})") from exc
        except PlaywrightError as exc:
            raise PublishStepError(name, str(exc)) from exc

    # =========================================================================
    # Steps
    # =========================================================================

    async def open_start_page(self, page: Page):
        await page.goto(
            self.home_url or self.upload_url,
            wait_until="networkidle",
            timeout=self.timeouts.navigation,
        )

    async def open_upload_surface(self, page: Page):
        await page.goto(self.upload_url, wait_until="networkidle", timeout=self.timeouts.navigation)

    async def login(self, page: Page, credentials: Credentials):
        """Sign in unless the page already shows a signed-in indicator"""
        if await page.query_selector(self.signed_in_selector) is None:
            await self.sign_in(page, credentials)
        elif self.home_url is None:
            return
        await self.open_upload_surface(page)

    async def sign_in(self, page: Page, credentials: Credentials):
        logger.info(f"[{self.platform.value}] signing in as {credentials.username}")
        await page.goto(self.login_url, wait_until="networkidle", timeout=self.timeouts.navigation)
        await self.submit_credentials(page, credentials)
        try:
            await page.wait_for_selector(self.signed_in_selector, timeout=self.timeouts.login)
        except PlaywrightTimeoutError as exc:
            raise PublishStepError(
                "login", f"not signed in after submitting credentials, timed out ({exc})"
            ) from exc

    async def submit_credentials(self, page: Page, credentials: Credentials):
        await page.wait_for_selector(self.username_selector, timeout=self.timeouts.element)
        await page.fill(self.username_selector, credentials.username)
        await page.fill(self.password_selector, credentials.password)
        async with page.expect_navigation(wait_until="networkidle", timeout=self.timeouts.login):
            await page.click(self.login_submit_selector)

    async def attach_file(self, page: Page, file_path: str):
        await page.wait_for_selector(
            self.file_input_selector, state="attached", timeout=self.timeouts.element
        )
        await page.set_input_files(self.file_input_selector, file_path)
        await page.wait_for_selector(self.upload_ready_selector, timeout=self.timeouts.upload)

    async def fill_details(self, page: Page, title: str, description: str):
        await page.wait_for_selector(self.title_selector, timeout=self.timeouts.element)
        await page.fill(self.title_selector, title)

        if description and self.description_selector:
            await page.wait_for_selector(self.description_selector, timeout=self.timeouts.element)
            await page.fill(self.description_selector, description)

    async def submit(self, page: Page):
        await page.wait_for_selector(self.publish_selector, timeout=self.timeouts.element)
        await page.click(self.publish_selector)
        await page.wait_for_selector(self.success_selector, timeout=self.timeouts.publish)

    async def extract_url(self, page: Page) -> str:
        """URL of the new post when the UI links to it, else the platform home"""
        if self.result_link_selector:
            link = await page.query_selector(self.result_link_selector)
            if link is not None:
                href = await link.get_attribute("href")
                if href:
                    return urljoin(self.base_url, href)
        return self.base_url
