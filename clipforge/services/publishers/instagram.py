"""Instagram Reels web uploader"""

from playwright.async_api import Page

from ...models.social_account import Platform
from .base import Publisher


class InstagramPublisher(Publisher):
    platform = Platform.INSTAGRAM
    base_url = "https://www.instagram.com"
    home_url = "https://www.instagram.com/"
    upload_url = "https://www.instagram.com/create/"
    login_url = "https://www.instagram.com/accounts/login/"

    signed_in_selector = '[data-testid="user-avatar"]'

    upload_ready_selector = '[data-testid="create-post-next-button"]'
    title_selector = '[data-testid="create-post-caption"]'
    publish_selector = '[data-testid="create-post-share-button"]'
    success_selector = '[data-testid="create-post-success"]'

    async def attach_file(self, page: Page, file_path: str):
        await super().attach_file(page, file_path)
        await page.click(self.upload_ready_selector)

    async def fill_details(self, page: Page, title: str, description: str):
        # Reels have a single caption field
        caption = f"{title}\n\n{description}" if description else title
        await page.wait_for_selector(self.title_selector, timeout=self.timeouts.element)
        await page.fill(self.title_selector, caption)
