import pytest

from clipforge.models.video import SourceVideo
from clipforge.services.clip_suggester import ClipSuggester
from clipforge.utils.exceptions import SuggestionError


def test_parse_response_clamps_ranges_to_video():
    suggester = ClipSuggester(api_key="key")
    text = """Here you go:
    {"moments": [
        {"start_time": -5, "end_time": 20, "title": "Cold open", "description": "d", "reason": "hook"},
        {"start_time": 100, "end_time": 180, "title": "Finale", "description": "d", "reason": "peak"},
        {"start_time": 130, "end_time": 150, "title": "Past the end"},
        {"start_time": "soon", "end_time": 10}
    ]}"""

    suggestions = suggester._parse_response(text, duration=120)

    assert [(s.start_time, s.end_time) for s in suggestions] == [(0.0, 20.0), (100.0, 120.0)]
    assert suggestions[0].title == "Cold open"
    assert suggestions[1].reason == "peak"


def test_parse_response_without_json_returns_nothing():
    assert ClipSuggester(api_key="key")._parse_response("no moments today", duration=60) == []


@pytest.mark.asyncio
async def test_suggest_requires_api_key():
    video = SourceVideo(url="https://youtu.be/x", title="Talk", duration=300, user_id="u")

    with pytest.raises(SuggestionError):
        await ClipSuggester(api_key="").suggest(video)
