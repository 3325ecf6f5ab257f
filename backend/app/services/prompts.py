from typing import Sequence

from ..playlist.models import PRIMARY_MOODS


def build_mood_system_prompt(user_genres: Sequence[str]) -> str:
    """System prompt asking the model to turn a situation into a JSON mood descriptor."""
    genres = ", ".join(user_genres) if user_genres else "none known"

    return f"""You are an expert music curator who understands the emotional nuances of different life moments.
Analyze the user's situation and return a JSON object with:
- primaryMood: one of [{", ".join(PRIMARY_MOODS)}]
- energy: integer from 1-10 (1=very calm, 10=very energetic)
- genres: array of 3-5 music genres that would fit this moment (can include the user's preferred genres: {genres})
- searchTerms: array of 5-10 Spotify search terms that would find appropriate songs (e.g., "uplifting indie", "workout motivation", "calm instrumental")
- artistStyles: array of 3-5 artist names whose style matches the mood (mix of popular and lesser-known)
Respond with the JSON object only."""
