from pathlib import Path

import pytest

from clipforge.services import source_resolver
from clipforge.services.source_resolver import SourceResolver
from clipforge.utils.exceptions import DownloadError, ResolutionError


class _FakeYoutubeDL:
    """Replaces yt_dlp.YoutubeDL; behaviour is driven by class attributes."""

    info = {
        "title": "Big Talk",
        "description": "A long conversation",
        "duration": 754.6,
        "thumbnails": [{"url": "https://i.ytimg.com/vi/x/hq.jpg"}],
    }
    error = None
    leave_partial = False
    write_output = True

    def __init__(self, opts):
        self.opts = opts

    def __enter__(self):
        return self

    def __exit__(self, *args):
        return False

    def extract_info(self, url, download=False):
        if download:
            output = Path(self.opts["outtmpl"])
            if self.leave_partial:
                Path(f"{output}.part").write_bytes(b"half")
            if self.error:
                raise self.error
            if self.write_output:
                output.write_bytes(b"video")
        elif self.error:
            raise self.error
        return self.info


@pytest.fixture
def fake_ydl(monkeypatch):
    class FakeYDL(_FakeYoutubeDL):
        pass

    monkeypatch.setattr(source_resolver.yt_dlp, "YoutubeDL", FakeYDL)
    return FakeYDL


@pytest.fixture
def resolver(storage) -> SourceResolver:
    return SourceResolver(storage)


@pytest.mark.asyncio
async def test_resolve_info_maps_metadata(resolver, fake_ydl):
    info = await resolver.resolve_info("https://www.youtube.com/watch?v=x")

    assert info.title == "Big Talk"
    assert info.description == "A long conversation"
    assert info.duration == 754
    assert info.thumbnail == "https://i.ytimg.com/vi/x/hq.jpg"


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["ftp://example.com/video.mp4", "not a url", "file:///etc/passwd"])
async def test_resolve_info_rejects_non_http_urls(resolver, fake_ydl, url):
    with pytest.raises(ResolutionError):
        await resolver.resolve_info(url)


@pytest.mark.asyncio
async def test_resolve_info_wraps_extractor_errors(resolver, fake_ydl):
    fake_ydl.error = RuntimeError("Unsupported URL")

    with pytest.raises(ResolutionError) as exc_info:
        await resolver.resolve_info("https://example.com/page")

    assert "Unsupported URL" in exc_info.value.message


@pytest.mark.asyncio
async def test_download_writes_keyed_file(resolver, storage, fake_ydl):
    path = await resolver.download("https://www.youtube.com/watch?v=x", "video-1")

    assert path == str(storage.root / "video-1.mp4")
    assert Path(path).read_bytes() == b"video"


@pytest.mark.asyncio
async def test_download_failure_removes_partial_files(resolver, storage, fake_ydl):
    fake_ydl.leave_partial = True
    fake_ydl.error = ConnectionError("connection reset")

    with pytest.raises(DownloadError):
        await resolver.download("https://www.youtube.com/watch?v=x", "video-2")

    assert not storage.source_path("video-2").exists()
    assert not Path(f"{storage.source_path('video-2')}.part").exists()


@pytest.mark.asyncio
async def test_download_without_output_is_an_error(resolver, storage, fake_ydl):
    fake_ydl.write_output = False

    with pytest.raises(DownloadError):
        await resolver.download("https://www.youtube.com/watch?v=x", "video-3")
