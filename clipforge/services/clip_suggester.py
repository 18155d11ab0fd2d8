"""
Clip Suggester
Uses Google Gemini to propose engaging clip ranges for a source video
"""

import asyncio
import json
import re
from dataclasses import dataclass
from typing import List

from ..models.video import SourceVideo
from ..utils.exceptions import SuggestionError
from ..utils.logger import get_logger

logger = get_logger()


@dataclass
class ClipSuggestion:
    """A proposed clip range"""
    start_time: float
    end_time: float
    title: str
    description: str
    reason: str


class ClipSuggester:
    """Suggests clips from a video's title, description and duration"""

    def __init__(self, api_key: str = "", model: str = "gemini-2.0-flash"):
        self.api_key = api_key
        self.model = model
        self._client = None

    def _ensure_client(self):
        """Lazy load the Gemini client"""
        if self._client is not None:
            return

        if not self.api_key:
            raise SuggestionError("GEMINI_API_KEY not configured")

        from google import genai
        self._client = genai.Client(api_key=self.api_key)
        logger.info("Gemini client initialized")

    async def suggest(self, video: SourceVideo, count: int = 5) -> List[ClipSuggestion]:
        self._ensure_client()
        prompt = self._build_prompt(video, count)

        loop = asyncio.get_event_loop()
        try:
            response = await loop.run_in_executor(
                None,
                lambda: self._client.models.generate_content(
                    model=self.model,
                    contents=prompt,
                    config={'response_mime_type': 'application/json'}
                )
            )
        except Exception as exc:
            raise SuggestionError(f"Failed to analyze video: {exc}") from exc

        if not response or not getattr(response, 'text', None):
            logger.error("Gemini returned empty response (possibly blocked)")
            return []

        suggestions = self._parse_response(response.text, video.duration)
        logger.info(f"Suggested {len(suggestions)} clips for video {video.id}")
        return suggestions

    def _build_prompt(self, video: SourceVideo, count: int) -> str:
        return f"""You are an expert social media content strategist who identifies the moments of a video that perform best on TikTok, Instagram Reels and YouTube Shorts.

Video Title: {video.title}
Video Description: {video.description}
Video Duration: {video.duration} seconds

Identify {count} moments with the highest viral potential. Favor strong hooks, emotional peaks, surprising or educational content.

RESPOND IN VALID JSON FORMAT ONLY:
{{
    "moments": [
        {{
            "start_time": 12,
            "end_time": 41,
            "title": "Catchy title, max 60 characters",
            "description": "Social media description with a call to action",
            "reason": "Why this moment works"
        }}
    ]
}}"""

    def _parse_response(self, response_text: str, duration: int) -> List[ClipSuggestion]:
        """Parse the response, clamping every range to the video"""
        json_match = re.search(r'\{[\s\S]*\}', response_text)
        if not json_match:
            logger.error("No JSON found in response")
            return []

        try:
            data = json.loads(json_match.group())
        except json.JSONDecodeError as exc:
            logger.error(f"Failed to parse Gemini response: {exc}")
            return []

        suggestions = []
        for moment in data.get('moments', []):
            try:
                start = max(0.0, float(moment.get('start_time', 0)))
                end = float(moment.get('end_time', 0))
            except (TypeError, ValueError):
                continue
            if duration:
                end = min(float(duration), end)
            if end <= start:
                continue
            suggestions.append(ClipSuggestion(
                start_time=start,
                end_time=end,
                title=moment.get('title') or 'Untitled Clip',
                description=moment.get('description', ''),
                reason=moment.get('reason', '')
            ))
        return suggestions
