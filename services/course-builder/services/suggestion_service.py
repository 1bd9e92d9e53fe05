"""
Suggestion Service

Proposes follow-up courses after a learner finishes a video: the LLM
suggests topics from the video's title and each topic is resolved to a
concrete YouTube video.
"""
import asyncio
import logging
from typing import List, Optional

from openai import AsyncOpenAI, OpenAIError

from shared.llm_provider import get_llm_client, get_model_name

from models.preview_models import CourseSuggestion
from prompts.suggestion_prompts import build_suggestion_prompt
from services.json_parser import JSONParseError, RobustJSONParser
from services.youtube_client import YouTubeClient


logger = logging.getLogger(__name__)


class SuggestionService:
    def __init__(
        self,
        youtube: YouTubeClient,
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
        topic_count: int = 3,
    ):
        self.youtube = youtube
        self.client = client or get_llm_client()
        self.model = model or get_model_name("fast")
        self.topic_count = topic_count
        self.parser = RobustJSONParser()

    async def suggest(self, video_url: str) -> List[CourseSuggestion]:
        metadata = await self.youtube.fetch_metadata(video_url)
        if not metadata:
            logger.warning(f"[SUGGESTIONS] No metadata for {video_url}, cannot suggest courses")
            return []

        topics = await self._propose_topics(metadata.title)
        videos = await asyncio.gather(*(self.youtube.search_video(topic) for topic in topics))

        suggestions = [
            CourseSuggestion(topic=topic, video=video)
            for topic, video in zip(topics, videos)
            if video
        ]
        logger.info(f"[SUGGESTIONS] {len(suggestions)} suggestions for '{metadata.title}'")
        return suggestions

    async def _propose_topics(self, video_title: str) -> List[str]:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=[{"role": "user", "content": build_suggestion_prompt(video_title, self.topic_count)}],
                temperature=0.7,
                max_tokens=300,
                response_format={"type": "json_object"},
            )
            data = self.parser.parse(response.choices[0].message.content)
        except (OpenAIError, JSONParseError) as e:
            logger.error(f"[SUGGESTIONS] Topic generation failed: {e}")
            return []

        topics = data.get("topics") if isinstance(data, dict) else data
        if not isinstance(topics, list):
            return []
        return [t.strip() for t in topics if isinstance(t, str) and t.strip()][: self.topic_count]
