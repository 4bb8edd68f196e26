"""
Progress Service

Learning progress for signed-in users: words played, topic completion,
per-language and daily aggregates, login streaks and reading position.
Aggregates are recomputed in Python after each newly learned word.
"""

import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from app.domain.progress import (
    ProgressStats,
    TopicPosition,
    TopicProgress,
    TrackWordResult,
    completion_percentage,
    next_streak,
)
from app.infrastructure.db.repositories.progress_repository import ProgressRepository
from app.infrastructure.db.repositories.vocabulary_repository import VocabularyRepository


logger = logging.getLogger(__name__)


def _today() -> date:
    return datetime.now(timezone.utc).date()


class ProgressService:
    """Progress tracking over the request's database session."""

    def __init__(self, progress: ProgressRepository, vocabulary: VocabularyRepository):
        self._progress = progress
        self._vocabulary = vocabulary

    # =========================================================================
    # Word tracking
    # =========================================================================

    async def track_word_played(
        self,
        user_id: str,
        vocabulary_id: int,
        language: str,
    ) -> TrackWordResult:
        """
        Record that a user played a word.

        Replays only bump the play count. A first play also updates the
        topic, language and daily aggregates.
        """
        try:
            existing = await self._progress.get_word_progress(user_id, vocabulary_id, language)
            if existing is not None:
                await self._progress.record_replay(existing)
                return TrackWordResult(success=True, is_new_word=False)

            await self._progress.add_word_progress(user_id, vocabulary_id, language)
            await self._update_topic_completion(user_id, vocabulary_id, language)
            await self._update_language_progress(user_id, language)
            await self._progress.increment_daily(user_id, language, _today())

            logger.info(f"[PROGRESS] User {user_id} learned word {vocabulary_id} ({language})")
            return TrackWordResult(success=True, is_new_word=True)

        except Exception as e:
            logger.error(f"[PROGRESS] Failed to track word {vocabulary_id} for {user_id}: {e}")
            await self._progress.session.rollback()
            return TrackWordResult(success=False, error=str(e))

    async def _update_topic_completion(self, user_id: str, vocabulary_id: int, language: str) -> None:
        topic_id = await self._vocabulary.get_topic_id(vocabulary_id)
        if topic_id is None:
            logger.warning(f"[PROGRESS] Vocabulary {vocabulary_id} has no topic")
            return

        total = await self._vocabulary.count_by_topic(topic_id)
        completion = await self._progress.get_topic_completion(user_id, topic_id, language)

        learned = (completion.words_learned if completion else 0) + 1
        completed_at = completion.completed_at if completion else None
        if completed_at is None and total > 0 and learned >= total:
            completed_at = datetime.now(timezone.utc)

        await self._progress.save_topic_completion(
            user_id, topic_id, language, learned, total, completed_at
        )

    async def _update_language_progress(self, user_id: str, language: str) -> None:
        learned = await self._progress.count_words_learned(user_id, language)
        total = await self._vocabulary.count()
        await self._progress.save_language_progress(
            user_id, language, learned, completion_percentage(learned, total)
        )

    # =========================================================================
    # Stats
    # =========================================================================

    async def get_progress_stats(self, user_id: str, language: str) -> ProgressStats:
        """Dashboard numbers; zeros when anything fails."""
        try:
            learned = await self._progress.count_words_learned(user_id, language)
            today = await self._progress.get_daily_count(user_id, language, _today())
            streak = await self._progress.get_streak(user_id)
            completions = await self._progress.list_topic_completions(user_id, language)
            total = await self._vocabulary.count()

            return ProgressStats(
                words_learned=learned,
                words_learned_today=today,
                daily_login_streak=streak.current_streak if streak else 0,
                topics_completed=sum(1 for c in completions if c.is_completed),
                language_completion_percentage=completion_percentage(learned, total),
                total_words_in_language=total,
            )
        except Exception as e:
            logger.error(f"[PROGRESS] Failed to load stats for {user_id}: {e}")
            return ProgressStats()

    async def get_topic_progress(self, user_id: str, topic_id: int, language: str) -> TopicProgress:
        completion = await self._progress.get_topic_completion(user_id, topic_id, language)
        if completion is None:
            total = await self._vocabulary.count_by_topic(topic_id)
            return TopicProgress(
                topic_id=topic_id,
                total_words=total,
                words_learned=0,
                is_completed=False,
                completion_percentage=0.0,
            )

        return TopicProgress(
            topic_id=topic_id,
            total_words=completion.total_words,
            words_learned=completion.words_learned,
            is_completed=completion.is_completed,
            completion_percentage=completion_percentage(
                completion.words_learned, completion.total_words
            ),
        )

    async def get_all_topic_progress(self, user_id: str, language: str) -> List[TopicProgress]:
        completions = await self._progress.list_topic_completions(user_id, language)
        return [
            TopicProgress(
                topic_id=c.topic_id,
                total_words=c.total_words,
                words_learned=c.words_learned,
                is_completed=c.is_completed,
                completion_percentage=completion_percentage(c.words_learned, c.total_words),
            )
            for c in completions
        ]

    async def get_completed_topic_ids(self, user_id: str, language: str) -> List[int]:
        completions = await self._progress.list_topic_completions(user_id, language)
        return [c.topic_id for c in completions if c.is_completed]

    # =========================================================================
    # Streak
    # =========================================================================

    async def update_login_streak(self, user_id: str, today: Optional[date] = None) -> int:
        """Advance the daily login streak and return the current value."""
        today = today or _today()
        row = await self._progress.get_streak(user_id)

        streak = next_streak(
            row.current_streak if row else 0,
            row.longest_streak if row else 0,
            row.last_login_date if row else None,
            today,
        )
        if streak.changed:
            await self._progress.save_streak(user_id, streak.current, streak.longest, today)
            logger.info(f"[PROGRESS] Streak for {user_id} is now {streak.current}")

        return streak.current

    # =========================================================================
    # Topic position
    # =========================================================================

    async def get_position(self, user_id: str, topic_id: int, language: str) -> TopicPosition:
        row = await self._progress.get_position(user_id, topic_id, language)
        if row is None:
            return TopicPosition()
        return TopicPosition(
            current_word_index=row.current_word_index,
            total_words=row.total_words,
            last_accessed_at=row.last_accessed_at,
        )

    async def save_position(
        self,
        user_id: str,
        topic_id: int,
        language: str,
        current_word_index: int,
        total_words: int,
    ) -> None:
        await self._progress.save_position(
            user_id, topic_id, language, current_word_index, total_words
        )
