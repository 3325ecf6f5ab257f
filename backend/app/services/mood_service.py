"""
Mood analysis through an OpenAI-compatible chat model
"""

import logging
from typing import Optional, Sequence

from langchain_core.messages import HumanMessage, SystemMessage
from langchain_core.runnables import Runnable
from langchain_openai import ChatOpenAI
from langsmith import traceable

from ..core.config import settings
from ..playlist.models import MoodDescriptor
from .prompts import build_mood_system_prompt

logger = logging.getLogger(__name__)

FALLBACK_PRIMARY_MOOD = "calm"
FALLBACK_ENERGY = 5
FALLBACK_SEARCH_TERMS = ("chill vibes", "relaxing music", "ambient")
FALLBACK_ARTIST_STYLES = ("Bon Iver", "James Blake", "The xx")


def fallback_mood(known_genres: Sequence[str]) -> MoodDescriptor:
    """Descriptor used whenever the model cannot be reached or answers badly."""
    return MoodDescriptor(
        primary_mood=FALLBACK_PRIMARY_MOOD,
        energy=FALLBACK_ENERGY,
        genres=list(known_genres)[:3],
        search_terms=list(FALLBACK_SEARCH_TERMS),
        artist_styles=list(FALLBACK_ARTIST_STYLES),
    )


def build_mood_model() -> Runnable:
    headers = {}
    if settings.openrouter_referer:
        headers["HTTP-Referer"] = settings.openrouter_referer
    if settings.openrouter_title:
        headers["X-Title"] = settings.openrouter_title

    model = ChatOpenAI(
        model=settings.openrouter_model,
        api_key=settings.openrouter_api_key,
        base_url=settings.openrouter_base_url,
        temperature=settings.mood_temperature,
        max_tokens=settings.mood_max_tokens,
        default_headers=headers or None,
    )
    return model.bind(response_format={"type": "json_object"})


class MoodAnalyzer:
    """Turns a free-text prompt into a MoodDescriptor; never raises."""

    def __init__(self, model: Optional[Runnable] = None):
        self._model = model

    def _get_model(self) -> Runnable:
        if self._model is None:
            self._model = build_mood_model()
        return self._model

    @traceable(name="mood_analysis")
    async def analyze(self, prompt: str, known_genres: Sequence[str]) -> MoodDescriptor:
        try:
            model = self._get_model()
            response = await model.ainvoke(
                [
                    SystemMessage(content=build_mood_system_prompt(known_genres)),
                    HumanMessage(content=prompt),
                ]
            )
            content = response.content
            if not isinstance(content, str) or not content.strip():
                raise ValueError("No response content from mood model")
            mood = MoodDescriptor.model_validate_json(content)
        except Exception as e:
            logger.error(f"Error analyzing mood, using fallback descriptor: {e}")
            return fallback_mood(known_genres)

        logger.info(
            f"Mood analysis: mood={mood.primary_mood}, energy={mood.energy}, "
            f"search_terms={mood.search_terms[:3]}"
        )
        return mood
