import subprocess
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Dict, List, Optional, Set

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from clipforge.auth import create_session_token
from clipforge.config import Settings
from clipforge.main import app
from clipforge.models.clip import Clip
from clipforge.models.social_account import Platform, StoredSocialAccount
from clipforge.models.video import SourceVideo
from clipforge.pipeline import Pipeline
from clipforge.services.automator import BrowserAutomator
from clipforge.services.publishers import UploadResult
from clipforge.services.record_store import RecordStore
from clipforge.services.source_resolver import SourceInfo
from clipforge.services.storage import TempStorage
from clipforge.utils.exceptions import DownloadError


USER_ID = "user-1"
OTHER_USER_ID = "user-2"
AUTH_HEADER = {"Authorization": f"Bearer {create_session_token(USER_ID)['token']}"}
OTHER_AUTH_HEADER = {"Authorization": f"Bearer {create_session_token(OTHER_USER_ID)['token']}"}


class FakeFFmpeg:
    """Stands in for the ffmpeg/ffprobe subprocess call.

    Writes a small file at the output path (the last argument) unless the
    command matches `fail_on`.
    """

    def __init__(self, probe_duration: float = 30.0):
        self.commands: List[List[str]] = []
        self.probe_duration = probe_duration
        self.fail_on: Optional[str] = None

    def __call__(self, cmd: List[str]) -> subprocess.CompletedProcess:
        self.commands.append(cmd)
        if "ffprobe" in cmd[0]:
            return subprocess.CompletedProcess(cmd, 0, f"{self.probe_duration}\n", "")

        output = Path(cmd[-1])
        output.write_bytes(b"encoded")
        if self.fail_on and self.fail_on in output.name:
            return subprocess.CompletedProcess(cmd, 1, "", "Conversion failed!\nInvalid data found")
        return subprocess.CompletedProcess(cmd, 0, "", "")

    def outputs(self) -> List[str]:
        return [Path(cmd[-1]).name for cmd in self.commands if "ffprobe" not in cmd[0]]


class FakeResolver:
    """Resolves every URL to a 120s video and downloads a placeholder file."""

    def __init__(self, storage: TempStorage, duration: int = 120):
        self.storage = storage
        self.duration = duration
        self.downloads: List[str] = []
        self.fail_download = False

    async def resolve_info(self, url: str) -> SourceInfo:
        return SourceInfo(
            title="Sample Video",
            description="A sample source video",
            duration=self.duration,
            thumbnail="https://example.com/thumb.jpg",
        )

    async def download(self, url: str, destination_key: str) -> str:
        self.downloads.append(destination_key)
        if self.fail_download:
            raise DownloadError("Download failed: HTTP Error 403", url=url)
        path = self.storage.source_path(destination_key)
        path.write_bytes(b"source")
        return str(path)


class FakeAutomator:
    """Automator returning a preset result without a browser."""

    def __init__(self, result: Optional[UploadResult] = None):
        self.result = result or UploadResult(success=True, platform_url="https://www.tiktok.com/@demo/video/1")
        self.opened = 0
        self.closed = 0
        self.uploads: List[dict] = []

    async def open(self):
        self.opened += 1

    async def close(self):
        self.closed += 1

    async def upload_to(self, platform, file_path, title, description, credentials) -> UploadResult:
        self.uploads.append({
            "platform": platform,
            "file_path": file_path,
            "file_existed": Path(file_path).exists(),
            "title": title,
            "description": description,
            "username": credentials.username,
        })
        return self.result


class FakeElement:
    def __init__(self, href: Optional[str] = None):
        self.href = href

    async def get_attribute(self, name: str) -> Optional[str]:
        return self.href if name == "href" else None


class FakePage:
    """Minimal Playwright page: every wait succeeds unless its selector times out."""

    def __init__(
        self,
        signed_in: bool = True,
        timeout_selectors: Optional[Set[str]] = None,
        links: Optional[Dict[str, str]] = None
    ):
        self.signed_in = signed_in
        self.timeout_selectors = timeout_selectors or set()
        self.links = links or {}
        self.visited: List[str] = []
        self.filled: Dict[str, str] = {}
        self.clicked: List[str] = []
        self.files: List[str] = []

    async def goto(self, url: str, **kwargs):
        self.visited.append(url)

    async def query_selector(self, selector: str):
        if selector in self.links:
            return FakeElement(self.links[selector])
        if self.signed_in and "avatar" in selector:
            return FakeElement()
        return None

    async def wait_for_selector(self, selector: str, **kwargs):
        if selector in self.timeout_selectors:
            raise PlaywrightTimeoutError(f"Timeout {kwargs.get('timeout')}ms exceeded waiting for {selector}")
        return FakeElement()

    async def fill(self, selector: str, value: str):
        self.filled[selector] = value

    async def click(self, selector: str):
        self.clicked.append(selector)

    async def set_input_files(self, selector: str, files):
        self.files.append(files)

    @asynccontextmanager
    async def expect_navigation(self, **kwargs):
        yield


def make_page_automator(settings: Settings, page: FakePage) -> BrowserAutomator:
    """Real automator driving a fake page; open() is a no-op once a page is set."""
    automator = BrowserAutomator(settings)
    automator._page = page
    return automator


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        temp_dir=str(tmp_path / "temp"),
        data_dir=str(tmp_path / "data"),
        clip_worker_concurrency=2,
        publish_worker_concurrency=1,
        max_pending_jobs=5,
        gemini_api_key="",
    )


@pytest.fixture
def storage(settings) -> TempStorage:
    return TempStorage(settings.temp_dir)


@pytest_asyncio.fixture
async def store(tmp_path) -> RecordStore:
    record_store = RecordStore(str(tmp_path / "records.db"))
    await record_store.initialize()
    return record_store


@pytest.fixture
def fake_ffmpeg() -> FakeFFmpeg:
    return FakeFFmpeg()


@pytest.fixture
def fake_automator() -> FakeAutomator:
    return FakeAutomator()


@pytest_asyncio.fixture
async def pipeline(settings, storage, fake_ffmpeg, fake_automator):
    resolver = FakeResolver(storage)
    pipe = Pipeline(settings, resolver=resolver, automator_factory=lambda: fake_automator)
    pipe.transcoder._execute = fake_ffmpeg
    await pipe.start(run_scheduler=False)
    yield pipe
    await pipe.stop()


@pytest_asyncio.fixture
async def client(pipeline):
    previous = getattr(app.state, "pipeline", None)
    app.state.pipeline = pipeline
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client
    app.state.pipeline = previous


async def add_video(store: RecordStore, duration: int = 120, user_id: str = USER_ID, url: Optional[str] = None) -> SourceVideo:
    video = SourceVideo(
        url=url or f"https://www.youtube.com/watch?v={duration}-{user_id}",
        title="Sample Video",
        duration=duration,
        user_id=user_id,
    )
    return await store.create_video(video)


async def add_clip(store: RecordStore, video: SourceVideo, start: float = 10, end: float = 40, **fields) -> Clip:
    clip = Clip(
        video_id=video.id,
        user_id=video.user_id,
        title=fields.pop("title", "Best moment!"),
        start_time=start,
        end_time=end,
        **fields,
    )
    return await store.create_clip(clip)


async def add_account(store: RecordStore, platform: Platform = Platform.TIKTOK, user_id: str = USER_ID) -> StoredSocialAccount:
    account = StoredSocialAccount(
        platform=platform,
        username="creator",
        password="hunter2",
        user_id=user_id,
    )
    return await store.create_social_account(account)
