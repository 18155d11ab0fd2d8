"""YouTube Shorts uploader via YouTube Studio"""

from playwright.async_api import Page

from ...models.social_account import Platform
from .base import Credentials, Publisher


class YouTubeShortsPublisher(Publisher):
    platform = Platform.YOUTUBE_SHORTS
    base_url = "https://www.youtube.com/shorts"
    upload_url = "https://studio.youtube.com/channel/me"
    login_url = "https://accounts.google.com/ServiceLogin?service=youtube"

    signed_in_selector = '[data-testid="user-avatar"]'
    username_selector = 'input[type="email"]'
    password_selector = 'input[type="password"]'

    create_menu_selector = '[aria-label="Create"]'
    upload_menu_selector = '[aria-label="Upload videos"]'
    upload_ready_selector = '#textbox'
    title_selector = '#textbox'
    description_selector = '#description-textbox'
    shorts_toggle_selector = '[aria-label="Shorts"]'
    publish_selector = '[aria-label="Publish"]'
    success_selector = '[aria-label="Video published"]'

    async def attach_file(self, page: Page, file_path: str):
        # The file input only exists once the upload dialog is open
        await page.wait_for_selector(self.create_menu_selector, timeout=self.timeouts.element)
        await page.click(self.create_menu_selector)
        await page.click(self.upload_menu_selector)
        await super().attach_file(page, file_path)

    async def submit_credentials(self, page: Page, credentials: Credentials):
        # Google asks for the email and the password on separate screens
        await page.wait_for_selector(self.username_selector, timeout=self.timeouts.element)
        await page.fill(self.username_selector, credentials.username)
        await page.click("#identifierNext")

        await page.wait_for_selector(self.password_selector, timeout=self.timeouts.element)
        await page.fill(self.password_selector, credentials.password)
        async with page.expect_navigation(wait_until="networkidle", timeout=self.timeouts.login):
            await page.click("#passwordNext")

    async def submit(self, page: Page):
        await page.wait_for_selector(self.shorts_toggle_selector, timeout=self.timeouts.element)
        await page.click(self.shorts_toggle_selector)
        await super().submit(page)
