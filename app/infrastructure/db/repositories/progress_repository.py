"""
Progress Repository

Queries and upserts for the user progress tables. Aggregate rows are
keyed by their unique constraints and written with INSERT ... ON CONFLICT.
"""

from datetime import date, datetime
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models.base import utcnow
from app.infrastructure.db.models.progress import (
    UserWordProgress,
    UserTopicCompletion,
    UserLanguageProgress,
    UserDailyProgress,
    UserLoginStreak,
    UserTopicPosition,
)


def _to_uuid(value: Union[str, UUID]) -> UUID:
    return UUID(value) if isinstance(value, str) else value


class ProgressRepository:
    """Data access for word, topic, language, daily, streak and position progress."""

    def __init__(self, session: AsyncSession):
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    # =========================================================================
    # Word progress
    # =========================================================================

    async def get_word_progress(
        self,
        user_id: str,
        vocabulary_id: int,
        language: str,
    ) -> Optional[UserWordProgress]:
        stmt = select(UserWordProgress).where(
            UserWordProgress.user_id == _to_uuid(user_id),
            UserWordProgress.vocabulary_id == vocabulary_id,
            UserWordProgress.target_language_code == language,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def record_replay(self, progress: UserWordProgress) -> UserWordProgress:
        progress.play_count += 1
        progress.last_played_at = utcnow()
        self._session.add(progress)
        await self._session.flush()
        return progress

    async def add_word_progress(
        self,
        user_id: str,
        vocabulary_id: int,
        language: str,
    ) -> UserWordProgress:
        now = utcnow()
        progress = UserWordProgress(
            user_id=_to_uuid(user_id),
            vocabulary_id=vocabulary_id,
            target_language_code=language,
            play_count=1,
            first_played_at=now,
            last_played_at=now,
        )
        self._session.add(progress)
        await self._session.flush()
        return progress

    async def count_words_learned(self, user_id: str, language: str) -> int:
        stmt = select(func.count()).select_from(UserWordProgress).where(
            UserWordProgress.user_id == _to_uuid(user_id),
            UserWordProgress.target_language_code == language,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one()

    # =========================================================================
    # Topic completion
    # =========================================================================

    async def get_topic_completion(
        self,
        user_id: str,
        topic_id: int,
        language: str,
    ) -> Optional[UserTopicCompletion]:
        stmt = select(UserTopicCompletion).where(
            UserTopicCompletion.user_id == _to_uuid(user_id),
            UserTopicCompletion.topic_id == topic_id,
            UserTopicCompletion.target_language_code == language,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_topic_completions(self, user_id: str, language: str) -> List[UserTopicCompletion]:
        stmt = (
            select(UserTopicCompletion)
            .where(
                UserTopicCompletion.user_id == _to_uuid(user_id),
                UserTopicCompletion.target_language_code == language,
            )
            .order_by(UserTopicCompletion.topic_id.asc())
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())

    async def save_topic_completion(
        self,
        user_id: str,
        topic_id: int,
        language: str,
        words_learned: int,
        total_words: int,
        completed_at: Optional[datetime],
    ) -> None:
        now = utcnow()
        stmt = pg_insert(UserTopicCompletion).values(
            user_id=_to_uuid(user_id),
            topic_id=topic_id,
            target_language_code=language,
            words_learned=words_learned,
            total_words=total_words,
            is_completed=completed_at is not None,
            completed_at=completed_at,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "topic_id", "target_language_code"],
            set_={
                "words_learned": stmt.excluded.words_learned,
                "total_words": stmt.excluded.total_words,
                "is_completed": stmt.excluded.is_completed,
                "completed_at": stmt.excluded.completed_at,
                "updated_at": now,
            },
        )
        await self._session.execute(stmt)

    # =========================================================================
    # Language and daily aggregates
    # =========================================================================

    async def save_language_progress(
        self,
        user_id: str,
        language: str,
        total_words_learned: int,
        completion_percentage: float,
    ) -> None:
        now = utcnow()
        stmt = pg_insert(UserLanguageProgress).values(
            user_id=_to_uuid(user_id),
            target_language_code=language,
            total_words_learned=total_words_learned,
            completion_percentage=completion_percentage,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "target_language_code"],
            set_={
                "total_words_learned": stmt.excluded.total_words_learned,
                "completion_percentage": stmt.excluded.completion_percentage,
                "updated_at": now,
            },
        )
        await self._session.execute(stmt)

    async def get_language_progress(self, user_id: str, language: str) -> Optional[UserLanguageProgress]:
        stmt = select(UserLanguageProgress).where(
            UserLanguageProgress.user_id == _to_uuid(user_id),
            UserLanguageProgress.target_language_code == language,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def increment_daily(self, user_id: str, language: str, day: date) -> None:
        stmt = pg_insert(UserDailyProgress).values(
            user_id=_to_uuid(user_id),
            target_language_code=language,
            activity_date=day,
            words_learned_count=1,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "target_language_code", "activity_date"],
            set_={"words_learned_count": UserDailyProgress.words_learned_count + 1},
        )
        await self._session.execute(stmt)

    async def get_daily_count(self, user_id: str, language: str, day: date) -> int:
        stmt = select(UserDailyProgress.words_learned_count).where(
            UserDailyProgress.user_id == _to_uuid(user_id),
            UserDailyProgress.target_language_code == language,
            UserDailyProgress.activity_date == day,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none() or 0

    # =========================================================================
    # Login streak
    # =========================================================================

    async def get_streak(self, user_id: str) -> Optional[UserLoginStreak]:
        stmt = select(UserLoginStreak).where(UserLoginStreak.user_id == _to_uuid(user_id))
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def save_streak(
        self,
        user_id: str,
        current: int,
        longest: int,
        last_login: date,
    ) -> None:
        now = utcnow()
        stmt = pg_insert(UserLoginStreak).values(
            user_id=_to_uuid(user_id),
            current_streak=current,
            longest_streak=longest,
            last_login_date=last_login,
            updated_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id"],
            set_={
                "current_streak": stmt.excluded.current_streak,
                "longest_streak": stmt.excluded.longest_streak,
                "last_login_date": stmt.excluded.last_login_date,
                "updated_at": now,
            },
        )
        await self._session.execute(stmt)

    # =========================================================================
    # Topic position
    # =========================================================================

    async def get_position(
        self,
        user_id: str,
        topic_id: int,
        language: str,
    ) -> Optional[UserTopicPosition]:
        stmt = select(UserTopicPosition).where(
            UserTopicPosition.user_id == _to_uuid(user_id),
            UserTopicPosition.topic_id == topic_id,
            UserTopicPosition.target_language_code == language,
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def save_position(
        self,
        user_id: str,
        topic_id: int,
        language: str,
        current_word_index: int,
        total_words: int,
    ) -> None:
        now = utcnow()
        stmt = pg_insert(UserTopicPosition).values(
            user_id=_to_uuid(user_id),
            topic_id=topic_id,
            target_language_code=language,
            current_word_index=current_word_index,
            total_words=total_words,
            last_accessed_at=now,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id", "topic_id", "target_language_code"],
            set_={
                "current_word_index": stmt.excluded.current_word_index,
                "total_words": stmt.excluded.total_words,
                "last_accessed_at": now,
            },
        )
        await self._session.execute(stmt)
