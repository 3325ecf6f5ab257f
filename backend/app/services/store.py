"""
Persistence for user genre preferences and generated playlist records.

Redis is the primary backend. When Redis is disabled or unreachable the
records live in process memory and are lost on restart.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..core.redis import get_redis_client
from ..playlist.models import MoodDescriptor

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class UserProfile(BaseModel):
    spotify_id: str
    display_name: Optional[str] = None
    top_genres: List[str] = Field(default_factory=list)
    last_sync: Optional[str] = None


class GenerationRecord(BaseModel):
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    user_id: str
    spotify_playlist_id: str
    name: str
    prompt: str
    mood_analysis: MoodDescriptor
    track_ids: List[str]
    created_at: str = Field(default_factory=utc_now_iso)


class InMemoryRecordStore:
    def __init__(self):
        self._users: Dict[str, UserProfile] = {}
        self._records: Dict[str, GenerationRecord] = {}

    async def get_user(self, user_id: str) -> Optional[UserProfile]:
        return self._users.get(user_id)

    async def save_user(self, profile: UserProfile) -> UserProfile:
        existing = self._users.get(profile.spotify_id)
        if existing:
            profile = existing.model_copy(update=profile.model_dump(exclude_none=True))
        self._users[profile.spotify_id] = profile
        return profile

    async def get_user_genres(self, user_id: str) -> List[str]:
        profile = await self.get_user(user_id)
        return list(profile.top_genres) if profile else []

    async def save_record(self, record: GenerationRecord) -> GenerationRecord:
        if record.id in self._records:
            raise ValueError(f"Generation record {record.id} already exists")
        self._records[record.id] = record
        return record

    async def get_record(self, record_id: str) -> Optional[GenerationRecord]:
        return self._records.get(record_id)

    async def list_records(self, user_id: str, limit: int = 20) -> List[GenerationRecord]:
        records = [r for r in self._records.values() if r.user_id == user_id]
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records[:limit]


class RedisRecordStore:
    USER_KEY = "moodmix:user:{user_id}"
    RECORD_KEY = "moodmix:playlist:{record_id}"
    USER_RECORDS_KEY = "moodmix:user:{user_id}:playlists"

    def __init__(self, redis_client):
        self._redis = redis_client

    async def get_user(self, user_id: str) -> Optional[UserProfile]:
        raw = await self._redis.get(self.USER_KEY.format(user_id=user_id))
        return UserProfile.model_validate_json(raw) if raw else None

    async def save_user(self, profile: UserProfile) -> UserProfile:
        existing = await self.get_user(profile.spotify_id)
        if existing:
            profile = existing.model_copy(update=profile.model_dump(exclude_none=True))
        await self._redis.set(
            self.USER_KEY.format(user_id=profile.spotify_id), profile.model_dump_json()
        )
        return profile

    async def get_user_genres(self, user_id: str) -> List[str]:
        profile = await self.get_user(user_id)
        return list(profile.top_genres) if profile else []

    async def save_record(self, record: GenerationRecord) -> GenerationRecord:
        created = await self._redis.set(
            self.RECORD_KEY.format(record_id=record.id),
            record.model_dump_json(by_alias=True),
            nx=True,
        )
        if not created:
            raise ValueError(f"Generation record {record.id} already exists")
        score = datetime.fromisoformat(record.created_at).timestamp()
        await self._redis.zadd(
            self.USER_RECORDS_KEY.format(user_id=record.user_id), {record.id: score}
        )
        return record

    async def get_record(self, record_id: str) -> Optional[GenerationRecord]:
        raw = await self._redis.get(self.RECORD_KEY.format(record_id=record_id))
        return GenerationRecord.model_validate_json(raw) if raw else None

    async def list_records(self, user_id: str, limit: int = 20) -> List[GenerationRecord]:
        record_ids = await self._redis.zrevrange(
            self.USER_RECORDS_KEY.format(user_id=user_id), 0, limit - 1
        )
        records = []
        for record_id in record_ids:
            record = await self.get_record(record_id)
            if record:
                records.append(record)
        return records


_memory_store = InMemoryRecordStore()


async def get_record_store():
    redis_client = await get_redis_client()
    if redis_client is None:
        return _memory_store
    return RedisRecordStore(redis_client)
