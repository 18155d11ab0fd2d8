"""TikTok web uploader"""

from ...models.social_account import Platform
from .base import Publisher


class TikTokPublisher(Publisher):
    platform = Platform.TIKTOK
    base_url = "https://www.tiktok.com"
    upload_url = "https://www.tiktok.com/upload"
    login_url = "https://www.tiktok.com/login"

    signed_in_selector = '[data-e2e="user-avatar"]'

    upload_ready_selector = '[data-e2e="video-upload"]'
    title_selector = '[data-e2e="video-title"]'
    description_selector = '[data-e2e="video-desc"]'
    publish_selector = '[data-e2e="publish-button"]'
    success_selector = '[data-e2e="video-published"]'
    result_link_selector = '[data-e2e="video-published"] a'
